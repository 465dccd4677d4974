"""Regions, colours, fonts and the styling of view regions into render recipes."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field, fields
from typing import Any, Iterable, Iterator, Mapping, Protocol

from limecore import log


@dataclass(frozen=True)
class Region:
    """A span of text between two points; ``b`` may come before ``a``."""

    a: int = 0
    b: int = 0

    def begin(self) -> int:
        return min(self.a, self.b)

    def end(self) -> int:
        return max(self.a, self.b)

    def size(self) -> int:
        return self.end() - self.begin()

    def contains(self, point: int) -> bool:
        return self.begin() <= point <= self.end()

    def covers(self, other: "Region") -> bool:
        return self.contains(other.begin()) and other.end() <= self.end()

    def intersects(self, other: "Region") -> bool:
        return self == other or self.intersection(other).size() > 0

    def intersection(self, other: "Region") -> "Region":
        """The overlap of both regions, or an empty Region if they do not overlap."""
        if self.contains(other.begin()) or other.contains(self.begin()):
            overlap = Region(max(self.begin(), other.begin()), min(self.end(), other.end()))
            if overlap.size() != 0:
                return overlap
        return Region()

    def _cover(self, other: "Region") -> "Region":
        lo = min(self.begin(), other.begin())
        hi = max(self.end(), other.end())
        return Region(lo, hi) if self.a <= self.b else Region(hi, lo)


def _overlapping(existing: Region, new: Region) -> bool:
    return existing == new or existing.intersects(new) or new.covers(existing)


class RegionSet:
    """A set of regions kept sorted by their start, merging overlapping ones."""

    def __init__(self, regions: Iterable[Region] = ()) -> None:
        self._regions: list[Region] = []
        self.add_all(regions)

    @staticmethod
    def _flush(regions: list[Region]) -> list[Region]:
        regions.sort(key=Region.begin)
        merged: list[Region] = []
        for region in regions:
            if merged and _overlapping(merged[-1], region):
                merged[-1] = merged[-1]._cover(region)
            else:
                merged.append(region)
        return merged

    def add(self, region: Region) -> None:
        kept: list[Region] = []
        for existing in self._regions:
            if _overlapping(existing, region):
                region = existing._cover(region)
            else:
                kept.append(existing)
        kept.append(region)
        self._regions = self._flush(kept)

    def add_all(self, regions: Iterable[Region]) -> None:
        for region in regions:
            self.add(region)

    def clear(self) -> None:
        self._regions = []

    def regions(self) -> list[Region]:
        """A copy of the regions in order."""
        return list(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(list(self._regions))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegionSet):
            return NotImplemented
        return self._regions == other._regions

    def __repr__(self) -> str:
        return f"RegionSet({self._regions!r})"


class FontStyle(enum.IntFlag):
    ITALIC = 1
    BOLD = 2
    UNDERLINE = 4


@dataclass(frozen=True)
class Font:
    name: str = ""
    size: float = 0.0
    style: int = 0


@dataclass(frozen=True)
class FontMeasurement:
    width: int = 0
    height: int = 0


class FontMetrics(Protocol):
    def measure(self, font: Font, text: str) -> FontMeasurement: ...


_HEX = re.compile(r"[+-]?[0-9a-fA-F]+")


@dataclass(frozen=True)
class Colour:
    """An RGBA colour with 8-bit channels."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0

    def __str__(self) -> str:
        return f"0x{self.a:02X}{self.r:02X}{self.g:02X}{self.b:02X}"

    @classmethod
    def from_json(cls, value: Any) -> "Colour":
        """Read ``"#AARRGGBB"`` or an object with R, G, B and A members."""
        if isinstance(value, str) and value.startswith("#"):
            digits = value[1:]
            number = 0
            if _HEX.fullmatch(digits):
                number = int(digits, 16)
            else:
                log.warn("Couldn't properly load color from %s: invalid syntax", value)
            return cls(
                r=(number >> 16) & 0xFF,
                g=(number >> 8) & 0xFF,
                b=number & 0xFF,
                a=(number >> 24) & 0xFF,
            )
        if not isinstance(value, Mapping):
            log.warn("Error on unmarshaling %s to color.RGBA", value)
            return cls()
        channels: dict[str, int] = {}
        for key, channel in value.items():
            name = str(key).lower()
            if name not in ("r", "g", "b", "a"):
                continue
            if isinstance(channel, bool) or not isinstance(channel, int) or not 0 <= channel <= 255:
                log.warn("Error on unmarshaling %s to color.RGBA", value)
                continue
            channels[name] = channel
        return cls(**channels)


@dataclass(frozen=True)
class Settings:
    """Global settings of a colour scheme."""

    foreground: Colour = Colour()
    background: Colour = Colour()
    caret: Colour = Colour()
    line_highlight: Colour = Colour()
    bracket_contents_foreground: Colour = Colour()
    brackets_foreground: Colour = Colour()
    brackets_background: Colour = Colour()
    tags_foreground: Colour = Colour()
    find_highlight: Colour = Colour()
    find_highlight_foreground: Colour = Colour()
    gutter: Colour = Colour()
    gutter_foreground: Colour = Colour()
    selection: Colour = Colour()
    selection_background: Colour = Colour()
    selection_border: Colour = Colour()
    inactive_selection: Colour = Colour()
    guide: Colour = Colour()
    active_guide: Colour = Colour()
    stack_guide: Colour = Colour()
    highlight: Colour = Colour()
    highlight_foreground: Colour = Colour()
    shadow: Colour = Colour()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Settings":
        """Build settings from keys matched case-insensitively, e.g. ``lineHighlight``."""
        names: dict[str, str] = {}
        for f in fields(cls):
            names[f.name.replace("_", "")] = f.name
            names[f.name] = f.name
        values = {}
        for key, value in data.items():
            name = names.get(str(key).lower())
            if name is not None:
                values[name] = Colour.from_json(value)
        return cls(**values)


class ViewRegionFlags(enum.IntFlag):
    DEFAULT = 0
    DRAW_EMPTY = 1 << 0
    HIDE_ON_MINIMAP = 1 << 1
    DRAW_EMPTY_AS_OVERWRITE = 1 << 2
    DRAW_NO_FILL = 1 << 3
    DRAW_NO_OUTLINE = 1 << 4
    DRAW_SOLID_UNDERLINE = 1 << 5
    DRAW_STIPPLED_UNDERLINE = 1 << 6
    DRAW_SQUIGGLY_UNDERLINE = 1 << 7
    PERSISTENT = 1 << 8
    HIDDEN = 1 << 9
    SELECTION = 1 << 10
    HIGHLIGHT = 1 << 11
    DRAW_TEXT = 1 << 12


@dataclass
class ViewRegions:
    """A set of regions together with how they should be rendered."""

    regions: RegionSet = field(default_factory=RegionSet)
    scope: str = ""
    icon: str = ""
    flags: int = ViewRegionFlags.DEFAULT

    def cull(self, viewport: Region) -> None:
        """Clip the regions to the viewport, dropping those outside it."""
        kept = [
            overlap
            for overlap in (viewport.intersection(r) for r in self.regions.regions() if viewport.intersects(r))
            if overlap.size() != 0
        ]
        self.regions.clear()
        self.regions.add_all(kept)

    def clone(self) -> "ViewRegions":
        return ViewRegions(
            regions=RegionSet(self.regions.regions()),
            scope=self.scope,
            icon=self.icon,
            flags=self.flags,
        )


class ViewRegionMap(dict):
    """View regions keyed by an arbitrary identifier."""

    def cull(self, viewport: Region) -> None:
        """Cull every entry, removing those left without regions."""
        for key in list(self):
            vr = self[key]
            vr.cull(viewport)
            if len(vr.regions) == 0:
                del self[key]


@dataclass(frozen=True)
class Flavour:
    """The styling used to render a region."""

    background: Colour = Colour()
    foreground: Colour = Colour()
    font: Font = Font()
    flags: int = ViewRegionFlags.DEFAULT


@dataclass(frozen=True)
class RenderUnit:
    flavour: Flavour
    region: Region


class ColourScheme(Protocol):
    def spice(self, view_regions: ViewRegions) -> Flavour: ...

    def global_settings(self) -> Settings: ...


class Renderer(Protocol):
    def render(self, recipe: "Recipe") -> None: ...


class Recipe(dict):
    """Region sets grouped by the flavour they are rendered with."""

    def transcribe(self) -> list[RenderUnit]:
        """All regions as render units, ordered by start then end."""
        units = [RenderUnit(flavour, region) for flavour, rs in self.items() for region in rs.regions()]
        units.sort(key=lambda u: (u.region.begin(), u.region.end()))
        return units


def transform(scheme: ColourScheme, data: ViewRegionMap, viewport: Region) -> Recipe:
    """Cull ``data`` to the viewport and group what is left by flavour."""
    if not isinstance(data, ViewRegionMap):
        raise TypeError("transform expects a ViewRegionMap")
    data.cull(viewport)
    recipe = Recipe()
    for vr in data.values():
        flavour = scheme.spice(vr)
        recipe.setdefault(flavour, RegionSet()).add_all(vr.regions.regions())
    return recipe