"""Syntax lookup with a plain-text fallback, and the plain colour scheme."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, Union

from limecore import log
from limecore.parser import Parser, SyntaxHighlighter, new_syntax_highlighter
from limecore.render import Colour, Flavour, Region, Settings, ViewRegionMap, ViewRegions


class Syntax(Protocol):
    def parser(self, data: str) -> Parser: ...

    def name(self) -> str: ...

    def file_types(self) -> list[str]: ...


class ColorScheme(Protocol):
    def spice(self, view_regions: ViewRegions) -> Flavour: ...

    def global_settings(self) -> Settings: ...

    def name(self) -> str: ...


SyntaxLookup = Union[Callable[[str], Any], Mapping[str, Any]]


class SyntaxLookupError(Exception):
    """Raised when no highlighter can be made for a syntax."""


class PlainSyntax:
    """The highlighter used when there is no syntax: everything is plain text."""

    def adjust(self, position: int, delta: int) -> None:
        pass

    def scope_extent(self, point: int) -> Region:
        return Region()

    def scope_name(self, point: int) -> str:
        return "text.plain"

    def flatten(self) -> ViewRegionMap:
        return ViewRegionMap()


def _find(lookup: SyntaxLookup, name: str) -> Any:
    if isinstance(lookup, Mapping):
        return lookup.get(name)
    return lookup(name)


def syntax_provider(name: str, data: str, lookup: SyntaxLookup) -> SyntaxHighlighter:
    """A highlighter for ``data`` using the syntax ``lookup`` finds under ``name``."""
    syn = _find(lookup, name)
    if syn is None:
        raise SyntaxLookupError(f"No syntax {name} in editor")
    try:
        parser = syn.parser(data)
    except Exception as exc:
        raise SyntaxLookupError(f"Couldn't get parser from syntax: {exc}") from exc
    try:
        return new_syntax_highlighter(parser)
    except Exception as exc:
        raise SyntaxLookupError(f"Couldn't create syntaxhighlighter: {exc}") from exc


def syntax_highlighter(name: str, data: str, lookup: SyntaxLookup) -> SyntaxHighlighter:
    """Like syntax_provider, but falls back to plain text on any failure."""
    if not name:
        return PlainSyntax()
    try:
        return syntax_provider(name, data, lookup)
    except SyntaxLookupError as exc:
        log.error("%s, falling back to default syntax", exc)
        return PlainSyntax()


class PlainScheme:
    """A colour scheme painting everything with its global colours."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings if settings is not None else Settings()

    def spice(self, view_regions: ViewRegions) -> Flavour:
        settings = self.global_settings()
        return Flavour(background=settings.background, foreground=settings.foreground)

    def global_settings(self) -> Settings:
        return self._settings

    def name(self) -> str:
        return "Plain theme"


_DEFAULT_SCHEME: PlainScheme | None = None


def default_scheme() -> PlainScheme:
    """The shared colour scheme used when a scheme cannot be found."""
    global _DEFAULT_SCHEME
    if _DEFAULT_SCHEME is None:
        _DEFAULT_SCHEME = PlainScheme(Settings(background=Colour(255, 255, 255, 1)))
    return _DEFAULT_SCHEME