"""Editor events, context queries and the interface a frontend provides."""

from __future__ import annotations

import abc
import enum
from typing import Any, Callable

from limecore import log
from limecore.keys import Op
from limecore.render import Region


class QueryContextReturn(enum.IntEnum):
    """The answer of a context query."""

    TRUE = 0
    FALSE = 1
    UNKNOWN = 2


class Event:
    """An ordered list of callbacks, all called when the event fires."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._callbacks: list[Callable[..., Any]] = []

    def add(self, callback: Callable[..., Any]) -> None:
        self._callbacks.append(callback)

    def call(self, *args: Any) -> None:
        """Call every callback with ``args`` in order of registration."""
        log.finest("%s(%v)", self.name, ", ".join(str(a) for a in args))
        for callback in list(self._callbacks):
            callback(*args)

    def __len__(self) -> int:
        return len(self._callbacks)


QueryContextCallback = Callable[[Any, str, Op, Any, bool], QueryContextReturn]


class QueryContextEvent:
    """Context handlers asked in turn until one knows the answer."""

    def __init__(self) -> None:
        self._callbacks: list[QueryContextCallback] = []

    def add(self, callback: QueryContextCallback) -> None:
        self._callbacks.append(callback)

    def call(self, view: Any, key: str, operator: Op, operand: Any, match_all: bool) -> QueryContextReturn:
        """The first answer other than UNKNOWN, or UNKNOWN if no handler knows."""
        log.fine("Query context: %s, %v, %v, %v", key, operator, operand, match_all)
        for callback in list(self._callbacks):
            result = callback(view, key, operator, operand, match_all)
            if result != QueryContextReturn.UNKNOWN:
                return QueryContextReturn(result)
        log.fine("Unknown context: %s", key)
        return QueryContextReturn.UNKNOWN

    def __len__(self) -> int:
        return len(self._callbacks)


def _resolve(obj: Any, attr: str) -> Any:
    value = getattr(obj, attr)
    return value() if callable(value) else value


def builtin_query_context(
    view: Any, key: str, operator: Op, operand: Any, match_all: bool
) -> QueryContextReturn:
    """Answer the ``setting.<name>`` and ``num_selections`` contexts."""
    if key.startswith("setting.") and operator == Op.EQUAL:
        value = _resolve(view, "settings").get(key[len("setting."):], False)
        if isinstance(value, bool) and value:
            return QueryContextReturn.TRUE
        return QueryContextReturn.FALSE
    if key == "num_selections":
        if isinstance(operand, (int, float)) and not isinstance(operand, bool):
            wanted = int(operand)
        else:
            wanted = 0
        count = len(_resolve(view, "sel"))
        if operator == Op.EQUAL:
            return QueryContextReturn.TRUE if wanted == count else QueryContextReturn.FALSE
        if operator == Op.NOT_EQUAL:
            return QueryContextReturn.TRUE if wanted != count else QueryContextReturn.FALSE
    return QueryContextReturn.UNKNOWN


ON_NEW = Event("OnNew")
ON_LOAD = Event("OnLoad")
ON_ACTIVATED = Event("OnActivated")
ON_DEACTIVATED = Event("OnDeactivated")
ON_PRE_CLOSE = Event("OnPreClose")
ON_CLOSE = Event("OnClose")
ON_PRE_SAVE = Event("OnPreSave")
ON_POST_SAVE = Event("OnPostSave")
ON_MODIFIED = Event("OnModified")
ON_SELECTION_MODIFIED = Event("OnSelectionModified")
ON_STATUS_CHANGED = Event("OnStatusChanged")

ON_NEW_WINDOW = Event("OnNewWindow")
ON_PROJECT_CHANGED = Event("OnProjectChanged")

ON_QUERY_CONTEXT = QueryContextEvent()

ON_INIT = Event("OnInit")

ON_PACKAGES_PATH_ADD = Event("OnPackagesPathAdd")
ON_PACKAGES_PATH_REMOVE = Event("OnPackagesPathRemove")
ON_DEFAULT_PATH_ADD = Event("OnDefaultPathAdd")
ON_USER_PATH_ADD = Event("OnUserPathAdd")

ON_ADD_FOLDER = Event("OnAddFolder")
ON_REMOVE_FOLDER = Event("OnRemoveFolder")

ON_QUERY_CONTEXT.add(builtin_query_context)


class PromptFlags(enum.IntFlag):
    """Options for a frontend's file dialog."""

    SAVE_AS = 1
    ONLY_FOLDER = 2
    SELECT_MULTIPLE = 4


class Frontend(abc.ABC):
    """Functionality that a user interface supplies to the editor."""

    @abc.abstractmethod
    def visible_region(self, view: Any) -> Region:
        """The region of ``view`` currently visible."""

    @abc.abstractmethod
    def show(self, view: Any, region: Region) -> None:
        """Scroll ``view`` so that ``region`` is shown."""

    @abc.abstractmethod
    def status_message(self, msg: str) -> None:
        """Show ``msg`` in the status bar."""

    @abc.abstractmethod
    def error_message(self, msg: str) -> None:
        """Show an error message to the user."""

    @abc.abstractmethod
    def message_dialog(self, msg: str) -> None:
        """Show a message dialog to the user."""

    @abc.abstractmethod
    def ok_cancel_dialog(self, msg: str, okname: str) -> bool:
        """Ask ok or cancel; True when ok was pressed."""

    @abc.abstractmethod
    def prompt(self, title: str, folder: str, flags: int) -> list[str]:
        """Show a file dialog starting at ``folder`` and return the chosen paths."""