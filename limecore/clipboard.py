"""Clipboards that remember whether their text came from an auto-expanded cursor."""

from __future__ import annotations

import abc
from typing import Callable

from limecore import log


class Clipboard(abc.ABC):
    @abc.abstractmethod
    def get(self) -> tuple[str, bool]:
        """The clipboard text and whether it came from an auto-expanded cursor."""

    @abc.abstractmethod
    def set(self, text: str, auto_expanded: bool) -> None:
        """Store text and whether it came from an auto-expanded cursor."""


class SystemClipboard(Clipboard):
    """A clipboard backed by system read/write hooks, with a local copy.

    When no hook is given, or a hook fails, the local copy is used instead.
    """

    def __init__(
        self,
        read: Callable[[], str] | None = None,
        write: Callable[[str], None] | None = None,
    ) -> None:
        self._read = read
        self._write = write
        self._cached_text = ""
        self._auto_expanded = False

    def get(self) -> tuple[str, bool]:
        text = self._cached_text
        if self._read is not None:
            try:
                text = self._read()
            except Exception as exc:
                log.warn("Could not get system clipboard: %v", exc)
                text = self._cached_text
        auto_expanded = self._auto_expanded if text == self._cached_text else False
        return text, auto_expanded

    def set(self, text: str, auto_expanded: bool) -> None:
        if self._write is not None:
            try:
                self._write(text)
            except Exception as exc:
                log.warn("Could not set system clipboard: %v", exc)
        self._cached_text = text
        self._auto_expanded = auto_expanded