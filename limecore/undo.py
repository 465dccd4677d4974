"""Edits grouping buffer actions, and the undo stack that replays them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol

from limecore.render import RegionSet


class Action(Protocol):
    def apply(self) -> None: ...

    def undo(self) -> None: ...


class CompositeAction:
    """Several actions applied in order and undone in reverse."""

    def __init__(self, actions: Iterable[Action] = ()) -> None:
        self.actions: list[Action] = list(actions)

    def add(self, action: Action) -> None:
        self.actions.append(action)

    def apply(self) -> None:
        for action in self.actions:
            action.apply()

    def undo(self) -> None:
        for action in reversed(self.actions):
            action.undo()

    def __len__(self) -> int:
        return len(self.actions)

    def __repr__(self) -> str:
        return f"CompositeAction({self.actions!r})"


@dataclass(eq=False)
class Edit:
    """A transaction of text operations on a view.

    When created for a view, the view's selection and change count are saved
    so that undoing the edit restores the selection.
    """

    view: Any = None
    command: str = ""
    args: dict = field(default_factory=dict)
    bypass_undo: bool = False
    composite: CompositeAction = field(default_factory=CompositeAction)
    saved_sel: RegionSet = field(default_factory=RegionSet)
    saved_count: int = 0
    invalid: bool = False

    def __post_init__(self) -> None:
        if self.view is None:
            return
        count = getattr(self.view, "change_count", None)
        if callable(count) and not self.saved_count:
            self.saved_count = count()
        sel = getattr(self.view, "sel", None)
        if callable(sel) and not len(self.saved_sel):
            self.saved_sel.add_all(sel().regions())

    def __str__(self) -> str:
        return f"{self.command}: {self.args}, {self.bypass_undo}, {self.composite}"

    def apply(self) -> None:
        self.composite.apply()

    def undo(self) -> None:
        """Undo the actions and restore the selection saved with the edit."""
        self.composite.undo()
        sel = getattr(self.view, "sel", None)
        if callable(sel):
            current = sel()
            current.clear()
            current.add_all(self.saved_sel.regions())


@dataclass
class UndoStack:
    """A linear history of edits with a current position."""

    position: int = 0
    actions: list[Edit] = field(default_factory=list)

    def add(self, edit: Edit) -> None:
        """Push ``edit``, discarding anything that had been undone."""
        if self.position != len(self.actions):
            del self.actions[self.position:]
        self.actions.append(edit)
        self.position += 1

    def _index(self, relative: int, modifying_only: bool) -> int:
        """The real index of an item relative to the current position, or -1."""
        step = 1 if relative > 0 else -1
        i = self.position if relative > 0 else self.position - 1
        remaining = relative * step
        while 0 <= i < len(self.actions) and remaining > 0:
            if not modifying_only or len(self.actions[i].composite) != 0:
                remaining -= 1
            i += step
        return i if 0 <= i < len(self.actions) else -1

    def undo(self, hard: bool) -> None:
        """Revert the last action on the stack."""
        if self.position <= 0:
            return
        to = self._index(0, hard)
        if to == -1:
            to = 0
        while self.position > to:
            self.position -= 1
            self.actions[self.position].undo()

    def redo(self, hard: bool) -> None:
        """Re-apply the next undone action, if any."""
        if self.position >= len(self.actions):
            return
        to = self._index(1, hard)
        if to == -1:
            to = len(self.actions)
        while self.position < to:
            self.actions[self.position].apply()
            self.position += 1

    def glue_from(self, mark: int) -> None:
        """Replace the edits from ``mark`` to the current position by one composite edit."""
        if mark >= self.position:
            return
        first = self.actions[mark]
        glued = Edit(command="sequence", saved_sel=RegionSet(first.saved_sel.regions()))
        glued.view = first.view
        entries = []
        for edit in self.actions[mark:self.position]:
            entries.append((edit.command, edit.args))
            glued.composite.add(edit)
        self.position = mark
        del self.actions[mark + 1:]
        glued.args = {"commands": entries}
        self.add(glued)