"""Scope trees of parsed text and a syntax highlighter that queries them."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Protocol

from limecore.render import Region, ViewRegionFlags, ViewRegionMap, ViewRegions


def _adjust_point(point: int, position: int, delta: int) -> int:
    if point >= position:
        return point + delta
    overshoot = position + delta - point
    return point + overshoot if overshoot < 0 else point


@dataclass
class Node:
    """A named scope covering a range of text, with nested child scopes."""

    name: str = ""
    range: Region = field(default_factory=Region)
    children: list["Node"] = field(default_factory=list)

    def adjust(self, position: int, delta: int) -> None:
        """Shift this node and its children for a change of ``delta`` at ``position``."""
        self.range = Region(
            _adjust_point(self.range.a, position, delta),
            _adjust_point(self.range.b, position, delta),
        )
        for child in self.children:
            child.adjust(position, delta)


class Parser(Protocol):
    def parse(self) -> Node: ...


class SyntaxHighlighter(Protocol):
    def adjust(self, position: int, delta: int) -> None: ...

    def scope_extent(self, point: int) -> Region: ...

    def scope_name(self, point: int) -> str: ...

    def flatten(self) -> ViewRegionMap: ...


class NodeHighlighter:
    """A syntax highlighter over a scope tree, caching the last scope looked up."""

    def __init__(self, root: Node | None) -> None:
        self.root = root
        self._last_node: Node | None = None
        self._last_parts: list[str] = []
        self._last_name = ""
        self._lock = threading.Lock()

    def _find_scope(self, search: Region, node: Node) -> Node | None:
        children = node.children
        lo, hi = 0, len(children)
        while lo < hi:
            mid = (lo + hi) // 2
            c = children[mid]
            if c.range.a >= search.a or c.range.covers(search):
                hi = mid
            else:
                lo = mid + 1
        for child in children[lo:]:
            if child.range.a > search.b:
                break
            if child.range.covers(search):
                if node.name and node is not self._last_node:
                    self._last_parts.append(node.name)
                return self._find_scope(search, child)
        if node is not self._last_node and node.range.covers(search) and node.name:
            self._last_parts.append(node.name)
            return node
        return None

    def _update_scope(self, point: int) -> None:
        if self.root is None:
            return
        search = Region(point, point + 1)
        last = self._last_node
        if last is not None and last.range.covers(search):
            if last.children:
                found = self._find_scope(search, last)
                if found is not None and found is not last:
                    self._last_node = found
                    self._last_name = " ".join(self._last_parts)
            return
        self._last_node = None
        self._last_parts = []
        self._last_node = self._find_scope(search, self.root)
        self._last_name = " ".join(self._last_parts)

    def scope_extent(self, point: int) -> Region:
        """The range of the innermost scope containing ``point``."""
        with self._lock:
            self._update_scope(point)
            if self._last_node is not None:
                r = self._last_node.range
                return Region(r.a, r.b)
            return Region()

    def scope_name(self, point: int) -> str:
        """The space-joined names of the scopes containing ``point``."""
        with self._lock:
            self._update_scope(point)
            return self._last_name

    def _flatten(self, vrmap: ViewRegionMap, scope_name: str, node: Node) -> None:
        scope_name = f"{scope_name} {node.name}"
        cur_a, cur_b = node.range.a, node.range.b

        def add(region: Region) -> None:
            reg = vrmap.get(scope_name)
            if reg is None:
                reg = ViewRegions()
            reg.flags |= ViewRegionFlags.DRAW_TEXT
            reg.scope = scope_name
            reg.regions.add(region)
            vrmap[scope_name] = reg

        for child in node.children:
            if cur_a <= child.range.a:
                add(Region(cur_a, child.range.a))
            cur_a = child.range.b
            self._flatten(vrmap, scope_name, child)
        if cur_a != cur_b:
            add(Region(cur_a, cur_b))

    def flatten(self) -> ViewRegionMap:
        """Map each nested scope name to the text regions belonging to it alone."""
        ret = ViewRegionMap()
        if self.root is not None:
            with self._lock:
                self._flatten(ret, "lime.syntax", self.root)
        return ret

    def adjust(self, position: int, delta: int) -> None:
        if self.root is None:
            return
        with self._lock:
            self.root.adjust(position, delta)


def new_syntax_highlighter(parser: Parser) -> NodeHighlighter:
    """Parse with ``parser`` and wrap the resulting tree; parse errors propagate."""
    return NodeHighlighter(parser.parse())