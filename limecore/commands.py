"""Editor commands and the handler that registers, initialises and runs them."""

from __future__ import annotations

import abc
import dataclasses
import re
import time
from typing import Any, Mapping

from limecore import log
from limecore.undo import Edit

Args = dict


class CommandError(Exception):
    """Raised when a command cannot be registered, found or initialised."""


class Command(abc.ABC):
    """Behaviour shared by every kind of command."""

    @abc.abstractmethod
    def is_enabled(self) -> bool:
        """Whether the command is enabled."""

    @abc.abstractmethod
    def is_visible(self) -> bool:
        """Whether the command is listed in menus and command panels."""

    @abc.abstractmethod
    def description(self) -> str:
        """A textual description of the command."""

    @abc.abstractmethod
    def bypass_undo(self) -> bool:
        """Whether the command bypasses the undo stack."""


class DefaultCommand(Command):
    """Default answers for the base command queries."""

    def bypass_undo(self) -> bool:
        return False

    def is_enabled(self) -> bool:
        return True

    def is_visible(self) -> bool:
        return True

    def description(self) -> str:
        return "TODO"


class BypassUndoCommand(DefaultCommand):
    """Like DefaultCommand, but bypasses the undo stack."""

    def bypass_undo(self) -> bool:
        return True


class ApplicationCommand(Command):
    """A command that acts on the whole application."""

    @abc.abstractmethod
    def run(self) -> None:
        """Execute the command."""

    def is_checked(self) -> bool:
        """Whether a checkbox for this command is shown as checked."""
        return False


class WindowCommand(Command):
    """A command that acts on a window."""

    @abc.abstractmethod
    def run(self, window: Any) -> None:
        """Execute the command on ``window``."""


class TextCommand(Command):
    """A command that acts on a view within an edit."""

    @abc.abstractmethod
    def run(self, view: Any, edit: Edit) -> None:
        """Execute the command on ``view`` as part of ``edit``."""


_UPPER = re.compile(r"(?<!^)(?=[A-Z])")


def pascal_to_snake(name: str) -> str:
    """Turn ``PascalCase`` into ``pascal_case``."""
    return _UPPER.sub("_", name).lower()


def default_name(cmd: Any) -> str:
    """The registration name derived from a command's class name."""
    cls = cmd if isinstance(cmd, type) else type(cmd)
    name = cls.__name__
    if name.endswith("Command"):
        name = name[: -len("Command")]
    return pascal_to_snake(name)


_KNOWN_TYPES = {t.__name__: t for t in (int, float, bool, str, bytes, list, dict, tuple, set)}


def _resolve_hint(hint: Any) -> type | None:
    """Map a field annotation to a concrete type, when it names a simple one."""
    if isinstance(hint, type):
        return hint
    if isinstance(hint, str):
        return _KNOWN_TYPES.get(hint.strip())
    return None


def _zero_value(f: dataclasses.Field, hint: type | None) -> Any:
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:  # type: ignore[misc]
        return f.default_factory()  # type: ignore[misc]
    if hint is not None:
        try:
            return hint()
        except TypeError:
            return None
    return None


_NUMERIC = (int, float, bool)


def _convert(cmd: Any, field_name: str, value: Any, hint: type | None) -> Any:
    if hint is None or hint is object:
        return value
    if isinstance(value, hint):
        return value
    if hint in _NUMERIC and isinstance(value, _NUMERIC):
        return hint(value)
    raise CommandError(
        f"Command {type(cmd).__name__} arg {value!r} of type {type(value).__name__} "
        f"not assignable or convertable to {field_name} of type {hint.__name__}"
    )


class CommandHandler:
    """Keeps the registered commands and runs them by name."""

    def __init__(self, verbose: bool = True, log_commands: bool = False) -> None:
        self.application_commands: dict[str, ApplicationCommand | None] = {}
        self.text_commands: dict[str, TextCommand | None] = {}
        self.window_commands: dict[str, WindowCommand | None] = {}
        self.verbose = verbose
        self.log_commands = log_commands

    def _level(self) -> log.Level:
        return log.Level.DEBUG if self.log_commands else log.Level.FINE

    def _init(self, cmd: Any, args: Mapping[str, Any] | None) -> None:
        """Fill a command's fields from ``args``, or defer to its own ``init``."""
        args = dict(args or {})
        custom_init = getattr(cmd, "init", None)
        if callable(custom_init):
            custom_init(args)
            return
        if not dataclasses.is_dataclass(cmd):
            return
        default_of = getattr(cmd, "default", None)
        for f in dataclasses.fields(cmd):
            if f.name.startswith("_"):
                continue
            hint = _resolve_hint(f.type)
            key = pascal_to_snake(f.name)
            if key in args:
                value = args[key]
            else:
                value = _zero_value(f, hint)
                if callable(default_of):
                    fallback = default_of(key)
                    if fallback is not None:
                        value = fallback
            current = getattr(cmd, f.name, None)
            setter = getattr(current, "set", None)
            if current is not None and not isinstance(current, type) and callable(setter):
                setter(value)
                continue
            if value is not None:
                value = _convert(cmd, f.name, value, hint)
            setattr(cmd, f.name, value)

    def _init_checked(self, cmd: Any, args: Mapping[str, Any] | None) -> None:
        try:
            self._init(cmd, args)
        except Exception as exc:
            if self.verbose:
                log.debug("Command initialization failed: %s", exc)
                raise

    @staticmethod
    def _execute_window(window: Any, cmd: WindowCommand, name: str) -> None:
        runner = getattr(window, "run_command", None)
        if callable(runner):
            runner(cmd, name)
        else:
            cmd.run(window)

    @staticmethod
    def _execute_text(view: Any, cmd: TextCommand, name: str, args: Mapping[str, Any] | None) -> None:
        runner = getattr(view, "run_command", None)
        if callable(runner):
            runner(cmd, name)
        else:
            cmd.run(view, Edit(view=view, command=name, args=dict(args or {})))

    def run_window_command(self, window: Any, name: str, args: Mapping[str, Any] | None = None) -> None:
        """Run the window command ``name``; unknown names are only logged."""
        lvl = self._level()
        log.logf(lvl, "Running window command: %s %v", name, args)
        started = time.monotonic()
        cmd = self.window_commands.get(name)
        if not isinstance(cmd, WindowCommand):
            log.logf(lvl, "No such window command: %s", name)
            return
        self._init_checked(cmd, args)
        try:
            self._execute_window(window, cmd, name)
        except Exception as exc:
            log.logf(log.Level(lvl + 1), "Command execution failed: %s", exc)
            raise
        log.logf(lvl, "Ran Window command: %s %.6fs", name, time.monotonic() - started)

    def run_text_command(self, view: Any, name: str, args: Mapping[str, Any] | None = None) -> None:
        """Run the text command ``name``, falling back to a window command of the view's window."""
        lvl = self._level()
        started = time.monotonic()
        log.logf(lvl, "Running text command: %s %v", name, args)
        cmd = self.text_commands.get(name)
        if isinstance(cmd, TextCommand):
            self._init_checked(cmd, args)
            try:
                self._execute_text(view, cmd, name, args)
            except Exception as exc:
                log.logf(lvl, "Command execution failed: %s", exc)
                raise
        elif view is not None:
            window = getattr(view, "window", None)
            if callable(window):
                window = window()
            wcmd = self.window_commands.get(name)
            if window is not None and isinstance(wcmd, WindowCommand):
                try:
                    self._execute_window(window, wcmd, name)
                except Exception as exc:
                    log.logf(lvl, "Command execution failed: %s", exc)
                    raise
        log.logf(lvl, "Ran text command: %s %.6fs", name, time.monotonic() - started)

    def run_application_command(self, name: str, args: Mapping[str, Any] | None = None) -> None:
        """Run the application command ``name``; failures are raised only when verbose."""
        if self.log_commands:
            log.info("Running application command: %s %v", name, args)
        else:
            log.fine("Running application command: %s %v", name, args)
        cmd = self.application_commands.get(name)
        if not isinstance(cmd, ApplicationCommand):
            return
        self._init_checked(cmd, args)
        try:
            cmd.run()
        except Exception as exc:
            if self.verbose:
                log.debug("Command execution failed: %s", exc)
                raise

    def unregister(self, name: str) -> None:
        """Clear the command registered as ``name``; the name stays taken."""
        for table in (self.application_commands, self.window_commands, self.text_commands):
            if name in table:
                table[name] = None
                return
        raise CommandError(f"{name} wasn't a registered command")

    def register_with_default(self, cmd: Any) -> None:
        self.register(default_name(cmd), cmd)

    def register(self, name: str, cmd: Any) -> None:
        """Register ``cmd`` under ``name`` in every table whose kind it is."""
        log.finest("Want to register %s", name)
        registered = False
        tables = (
            (ApplicationCommand, self.application_commands),
            (WindowCommand, self.window_commands),
            (TextCommand, self.text_commands),
        )
        for kind, table in tables:
            if isinstance(cmd, kind):
                if name in table:
                    raise CommandError(f"{name} is already a registered command")
                table[name] = cmd
                registered = True
        if not registered:
            raise CommandError(f"Command wasn't registered in any list: {name}")
        if self.verbose:
            log.finest("Successfully registered command %s", name)