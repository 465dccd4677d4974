"""Keys, key presses, key contexts and hierarchical key binding tables."""

from __future__ import annotations

import bisect
import enum
import json
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from limecore import log


class Op(enum.IntEnum):
    """Comparison operator of a key context."""

    EQUAL = 0
    NOT_EQUAL = 1
    REGEX_MATCH = 2
    NOT_REGEX_MATCH = 3
    REGEX_CONTAINS = 4
    NOT_REGEX_CONTAINS = 5

    @classmethod
    def from_json(cls, value: Any) -> "Op":
        if value is None:
            return cls.EQUAL
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"unknown operator: {value}") from None
        return cls(value)


class Key(enum.IntEnum):
    """Named key codes; other keys are their Unicode code point."""

    LEFT = 0x2190
    UP = 0x2191
    RIGHT = 0x2192
    DOWN = 0x2193
    ENTER = 0x0A
    KEYPAD_ENTER = 0x0A
    ESCAPE = 0x1B
    BACKSPACE = 0x08
    DELETE = 0x7F
    F1 = 0x2701
    F2 = 0x2702
    F3 = 0x2703
    F4 = 0x2704
    F5 = 0x2705
    F6 = 0x2706
    F7 = 0x2707
    F8 = 0x2708
    F9 = 0x2709
    F10 = 0x270A
    F11 = 0x270B
    F12 = 0x270C
    INSERT = 0x270D
    PAGE_UP = 0x270E
    PAGE_DOWN = 0x270F
    HOME = 0x2710
    END = 0x2711
    BREAK = 0x2712
    ANY = 0x10FFFF


SHIFT = 1 << 29
CTRL = 1 << 28
ALT = 1 << 27
SUPER = 1 << 26

_NAMED = {
    "up": Key.UP, "left": Key.LEFT, "right": Key.RIGHT, "down": Key.DOWN,
    "enter": Key.ENTER, "tab": ord("\t"), "escape": Key.ESCAPE, "space": ord(" "),
    "f1": Key.F1, "f2": Key.F2, "f3": Key.F3, "f4": Key.F4, "f5": Key.F5,
    "f6": Key.F6, "f7": Key.F7, "f8": Key.F8, "f9": Key.F9, "f10": Key.F10,
    "f11": Key.F11, "f12": Key.F12, "backspace": Key.BACKSPACE,
    "delete": Key.DELETE, "keypad_enter": Key.KEYPAD_ENTER,
    "insert": Key.INSERT, "pageup": Key.PAGE_UP, "pagedown": Key.PAGE_DOWN,
    "home": Key.HOME, "end": Key.END, "break": Key.BREAK,
    "forward_slash": ord("/"), "backquote": ord("`"), '\\"': ord('"'),
    "plus": ord("+"), "minus": ord("-"), "equals": ord("="),
    "<character>": Key.ANY,
}

_REVERSE: dict[int, str] = {}
for _name, _code in _NAMED.items():
    if _name != "keypad_enter":
        _REVERSE.setdefault(int(_code), _name)


def key_name(key: int) -> str:
    """The binding name of a key, or the character itself."""
    return _REVERSE.get(int(key), chr(key))


def key_from_name(name: str) -> int | None:
    """The key code for a binding name, or None if it is not a named key."""
    code = _NAMED.get(name)
    return None if code is None else int(code)


@dataclass
class KeyPress:
    """A key press event; ``key`` is case-less, ``text`` keeps the case."""

    text: str = ""
    key: int = 0
    shift: bool = False
    super: bool = False
    alt: bool = False
    ctrl: bool = False

    def index(self) -> int:
        """Sort index of the press; modifiers add high bits."""
        ret = int(self.key)
        if self.shift:
            ret += SHIFT
        if self.alt:
            ret += ALT
        if self.ctrl:
            ret += CTRL
        if self.super:
            ret += SUPER
        return ret

    def is_character(self) -> bool:
        return chr(self.key).isprintable() and not self.super and not self.ctrl

    def fix(self) -> None:
        """Lower-case the key, turning on shift if it was upper case."""
        lower = chr(self.key).lower()
        if len(lower) == 1 and ord(lower) != self.key:
            self.shift = True
            self.key = ord(lower)

    @classmethod
    def parse(cls, combo: str) -> "KeyPress":
        """Parse a combination such as ``"ctrl+shift+k"``."""
        kp = cls()
        for part in combo.split("+"):
            lower = part.lower()
            if lower in ("super", "ctrl", "alt", "shift"):
                setattr(kp, lower, True)
                continue
            code = key_from_name(lower)
            if code is not None:
                kp.key = code
            elif len(part) == 1:
                kp.key = ord(part)
                kp.fix()
            else:
                log.warn("Unknown key value with %d bytes: %s", len(part.encode()), part)
                return kp
        return kp

    def __str__(self) -> str:
        mods = "".join(
            f"{name}+" for name in ("super", "ctrl", "alt", "shift") if getattr(self, name)
        )
        return mods + key_name(self.key)


def _loads(data: Any) -> Any:
    if isinstance(data, (str, bytes, bytearray)):
        return json.loads(data)
    return data


@dataclass
class KeyContext:
    """A condition that must hold for a binding to apply."""

    key: str = ""
    operator: Op = Op.EQUAL
    operand: Any = True
    match_all: bool = False

    @classmethod
    def from_json(cls, data: Any) -> "KeyContext":
        obj = _loads(data)
        if not isinstance(obj, dict):
            raise ValueError("key context must be a JSON object")
        operand = obj.get("operand")
        return cls(
            key=obj.get("key", ""),
            operator=Op.from_json(obj.get("operator")),
            operand=True if operand is None else operand,
            match_all=bool(obj.get("match_all", False)),
        )


@dataclass
class KeyBinding:
    """A key sequence bound to a command, with arguments and contexts."""

    keys: list[KeyPress] = field(default_factory=list)
    command: str = ""
    args: dict[str, Any] = field(default_factory=dict)
    context: list[KeyContext] = field(default_factory=list)
    priority: int = 0

    @classmethod
    def from_json(cls, data: Any) -> "KeyBinding":
        obj = _loads(data)
        if not isinstance(obj, dict):
            raise ValueError("key binding must be a JSON object")
        return cls(
            keys=[KeyPress.parse(k) for k in obj.get("keys") or []],
            command=obj.get("command", ""),
            args=dict(obj.get("args") or {}),
            context=[KeyContext.from_json(c) for c in obj.get("context") or []],
        )


QueryContext = Callable[[str, Op, Any, bool], bool]


class KeyBindings:
    """An ordered table of bindings with an optional parent table."""

    def __init__(self, bindings: list[KeyBinding] | None = None) -> None:
        self.bindings: list[KeyBinding] = list(bindings or [])
        self.seq_index = 0
        self.parent: KeyBindings | None = None

    def __len__(self) -> int:
        return len(self.bindings)

    def _chain(self):
        table: KeyBindings | None = self
        while table is not None:
            yield table
            table = table.parent

    def _sort_key(self, binding: KeyBinding) -> int:
        return binding.keys[self.seq_index].index()

    def drop_less_equal_keys(self, count: int) -> None:
        """Drop bindings of at most ``count`` keys here and in all parents, then sort."""
        for table in self._chain():
            table.bindings = [b for b in table.bindings if len(b.keys) > count]
            table.bindings.sort(key=table._sort_key)

    def load_json(self, data: Any) -> None:
        obj = _loads(data)
        if not isinstance(obj, list):
            raise ValueError("key bindings must be a JSON array")
        self.bindings = [KeyBinding.from_json(item) for item in obj]
        for priority, binding in enumerate(self.bindings):
            binding.priority = priority
        self.drop_less_equal_keys(0)

    def set_parent(self, parent: "KeyBindings") -> None:
        self.parent = parent
        parent.seq_index = self.seq_index

    def _filter(self, index: int, ret: "KeyBindings") -> None:
        src: KeyBindings = self
        while True:
            start = bisect.bisect_left(src.bindings, index, key=src._sort_key)
            for binding in src.bindings[start:]:
                if src._sort_key(binding) != index:
                    break
                ret.bindings.append(binding)
            if src.parent is None:
                return
            src = src.parent
            if ret.parent is None:
                ret.set_parent(KeyBindings())
            ret = ret.parent

    def filter(self, kp: KeyPress) -> "KeyBindings":
        """A new table holding the bindings that match ``kp`` at the next position."""
        kp = replace(kp)
        kp.fix()
        self.drop_less_equal_keys(self.seq_index)
        ret = KeyBindings()
        ret.seq_index = self.seq_index + 1
        self._filter(kp.index(), ret)
        if kp.is_character():
            self._filter(int(Key.ANY), ret)
        return ret

    def action(self, qc: QueryContext) -> KeyBinding | None:
        """The highest-priority complete binding whose contexts all hold."""
        for table in self._chain():
            best: KeyBinding | None = None
            for binding in table.bindings:
                if len(binding.keys) > table.seq_index:
                    continue
                if not all(qc(c.key, c.operator, c.operand, c.match_all) for c in binding.context):
                    continue
                if best is None or best.priority < binding.priority:
                    best = binding
            if best is not None:
                return best
        return None

    def __str__(self) -> str:
        return "".join(f"{b}\n" for b in self.bindings)