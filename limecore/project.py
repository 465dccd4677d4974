"""Projects: a set of folders and settings saved as a project file."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Mapping

from limecore import events, log


class Settings:
    """Key-value settings that fall back to a parent's when a key is missing."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})
        self._parent: Any = None

    def _parent_settings(self) -> "Settings | None":
        parent = self._parent
        if parent is None or isinstance(parent, Settings):
            return parent
        inner = getattr(parent, "settings", None)
        if callable(inner):
            inner = inner()
        return inner

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._data:
            return self._data[key]
        parent = self._parent_settings()
        if parent is not None:
            return parent.get(key, default)
        return default

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def set_parent(self, parent: Any) -> None:
        """Use ``parent`` (settings, or something with settings) for missing keys."""
        self._parent = parent

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"Settings({self._data!r})"


_FOLDER_KEYS = {
    "path": "path",
    "name": "name",
    "folder_exclude_patterns": "exclude_patterns",
    "folder_include_patterns": "include_patterns",
    "file_exclude_patterns": "file_exclude_patterns",
    "file_include_patterns": "file_include_patterns",
    "follow_symlinks": "follow_symlinks",
}


def _checked(attr: str, value: Any) -> Any:
    if attr in ("path", "name"):
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError(f"folder {attr} must be a string")
        return value
    if attr == "follow_symlinks":
        if value is None:
            return False
        if not isinstance(value, bool):
            raise ValueError("folder follow_symlinks must be a boolean")
        return value
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"folder {attr} must be a list of strings")
    return list(value)


@dataclass
class Folder:
    """One folder entry of a project file."""

    path: str = ""
    name: str = ""
    exclude_patterns: list[str] | None = None
    include_patterns: list[str] | None = None
    file_exclude_patterns: list[str] | None = None
    file_include_patterns: list[str] | None = None
    follow_symlinks: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Folder":
        if not isinstance(data, Mapping):
            raise ValueError("folder must be a JSON object")
        values = {}
        for key, value in data.items():
            attr = _FOLDER_KEYS.get(str(key).lower())
            if attr is not None:
                values[attr] = _checked(attr, value)
        return cls(**values)


def _go_list(items: list[str] | None) -> str:
    return "[" + " ".join(items or []) + "]"


def _compact(text: str) -> str:
    out: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif ch not in " \t\r\n":
            out.append(ch)
    return "".join(out)


class Project:
    """The folders and settings of a window's project."""

    def __init__(self, window: Any = None) -> None:
        self.window = window
        self.file_name = ""
        self.settings = Settings()
        self._folders: list[Folder] = []

    def close(self) -> None:
        """Forget all folders, settings and the file name."""
        self.file_name = ""
        self.settings = Settings()
        self._folders = []
        events.ON_PROJECT_CHANGED.call(self.window)

    def save_as(self, name: str) -> None:
        """Write the project to ``name`` and adopt its absolute path as file name."""
        log.fine("Saving project as %s", name)
        text = self.to_json()
        json.loads(text)
        with open(name, "w", encoding="utf-8") as fh:
            fh.write(_compact(text))
        self.set_name(os.path.abspath(name))

    def add_folder(self, path: str) -> None:
        log.fine("Adding folder %s to project %s", path, self.file_name)
        self._folders.append(Folder(path=path))
        events.ON_ADD_FOLDER.call(self.window, path)

    def remove_folder(self, path: str) -> None:
        """Remove the first folder with ``path``; the last folder takes its place."""
        log.fine("Removing folder %s from project %s", path, self.file_name)
        for i, folder in enumerate(self._folders):
            if folder.path == path:
                last = self._folders.pop()
                if i < len(self._folders):
                    self._folders[i] = last
                events.ON_REMOVE_FOLDER.call(self.window, path)
                return

    def folders(self) -> list[str]:
        return [folder.path for folder in self._folders]

    def folder(self, path: str) -> Folder | None:
        return next((f for f in self._folders if f.path == path), None)

    def set_name(self, name: str) -> None:
        log.finest("Setting project name %s", name)
        self.file_name = name

    def load_json(self, data: Any) -> None:
        """Replace the folders and merge in the settings of project JSON."""
        obj = json.loads(data) if isinstance(data, (str, bytes, bytearray)) else data
        if not isinstance(obj, Mapping):
            raise ValueError("project data must be a JSON object")
        folders_raw: Any = None
        settings_raw: Any = None
        for key, value in obj.items():
            lowered = str(key).lower()
            if lowered == "folders":
                folders_raw = value
            elif lowered == "settings":
                settings_raw = value
        if folders_raw is not None and not isinstance(folders_raw, list):
            raise ValueError("project folders must be a JSON array")
        if settings_raw is not None and not isinstance(settings_raw, Mapping):
            raise ValueError("project settings must be a JSON object")
        self._folders = [Folder.from_dict(f) for f in folders_raw or [] if f is not None]
        for key, value in (settings_raw or {}).items():
            self.settings.set(key, value)

    def to_json(self) -> str:
        """The project in its indented file form."""
        parts = ['{\n\t"folders":\n\t[\n']
        for i, folder in enumerate(self._folders):
            if i:
                parts.append(",\n")
            parts.append("\t\t{\n")
            parts.append(f'\t\t\t"path": "{folder.path}"')
            if folder.name:
                parts.append(f',\n\t\t\t"name": "{folder.name}"')
            if folder.exclude_patterns is not None:
                parts.append(f',\n\t\t\t"folder_exclude_patterns": "{_go_list(folder.exclude_patterns)}"')
            if folder.include_patterns is not None:
                parts.append(f',\n\t\t\t"folder_include_patterns": "{_go_list(folder.include_patterns)}"')
            if folder.file_exclude_patterns is not None:
                parts.append(f',\n\t\t\t"file_exclude_patterns": "{_go_list(folder.exclude_patterns)}"')
            if folder.file_include_patterns is not None:
                parts.append(f',\n\t\t\t"file_include_patterns": "{_go_list(folder.exclude_patterns)}"')
            if folder.follow_symlinks:
                parts.append(',\n\t\t\t"follow_symlinks": "true"')
            parts.append("\n\t\t}")
        parts.append("\n\t]")
        settings = json.dumps(self.settings._data, indent="\t", sort_keys=True, ensure_ascii=False)
        if settings != "{}":
            settings = settings.replace("\t", "\t\t").replace("{", "\t{").replace("}", "\t}")
            parts.append(f',\n\t"settings":\n{settings}')
        parts.append("\n}\n")
        return "".join(parts)

    def load(self, name: str) -> None:
        """Read and load the project file ``name``."""
        try:
            with open(name, encoding="utf-8") as fh:
                data = fh.read()
        except OSError as exc:
            raise OSError(f"Couldn't read file {name}: {exc}") from exc
        try:
            self.load_json(data)
        except ValueError as exc:
            raise ValueError(f"Couldn't unmarshal project data\n{data}\n{exc}") from exc

    def file_changed(self, name: str) -> None:
        """Reload the project after its file changed on disk."""
        try:
            self.load(name)
        except (OSError, ValueError) as exc:
            log.debug("%s", exc)
        events.ON_PROJECT_CHANGED.call(self.window)