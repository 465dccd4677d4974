import os

import pytest

from limecore import events
from limecore.project import Folder, Project, Settings

PROJECT_DATA = """{
    "folders": [
        {"path": "src", "folder_exclude_patterns": ["backup"], "follow_symlinks": true},
        {"path": "docs", "name": "Documentation", "file_exclude_patterns": ["*.css"]}
    ],
    "settings": {"tab_size": 8}
}"""


def test_save_as(tmp_path):
    target = tmp_path / "saved_project"
    p = Project(window="w")
    p.add_folder(".")
    p.save_as(str(target))
    assert target.read_text(encoding="utf-8") == '{"folders":[{"path":"."}]}'
    assert p.file_name == os.path.abspath(str(target))


def test_save_and_load_round_trip(tmp_path):
    target = tmp_path / "proj"
    p = Project()
    p.add_folder("/a")
    p.add_folder("/b")
    p.settings.set("tab_size", 2)
    p.save_as(str(target))
    q = Project()
    q.load(str(target))
    assert q.folders() == ["/a", "/b"]
    assert q.settings.get("tab_size", 4) == 2


def test_add_folder():
    p = Project()
    p.add_folder("/test/path")
    assert len(p.folders()) == 1
    assert p.folders()[0] == "/test/path"


def test_add_folder_fires_event():
    window = object()
    seen = []
    events.ON_ADD_FOLDER.add(lambda w, path: seen.append(path) if w is window else None)
    Project(window).add_folder("/x")
    assert seen == ["/x"]


def test_remove_folder():
    p = Project()
    p.add_folder("/test/path")
    p.remove_folder("/test/path")
    assert p.folders() == []


def test_remove_folder_moves_last_into_place():
    p = Project()
    for path in ("a", "b", "c"):
        p.add_folder(path)
    p.remove_folder("a")
    assert p.folders() == ["c", "b"]
    p.remove_folder("missing")
    assert p.folders() == ["c", "b"]


def test_unmarshal_json():
    p = Project()
    p.load_json(PROJECT_DATA)
    assert p.settings.get("tab_size", 4) == 8
    assert len(p.folders()) == 2

    f1 = p.folder("src")
    assert f1 is not None
    assert f1.exclude_patterns[0] == "backup"
    assert f1.follow_symlinks

    f2 = p.folder("docs")
    assert f2 is not None
    assert f2.name == "Documentation"
    assert f2.file_exclude_patterns[0] == "*.css"


def test_unmarshal_invalid_json():
    with pytest.raises(ValueError):
        Project().load_json("{not json")


def test_unmarshal_wrong_types():
    with pytest.raises(ValueError):
        Project().load_json('{"folders": {"path": "x"}}')
    with pytest.raises(ValueError):
        Folder.from_dict({"path": 3})


def test_marshal_json():
    p = Project()
    p.settings.set("font_size", 12)
    p.add_folder("./testdata")
    exp = """{
\t"folders":
\t[
\t\t{
\t\t\t"path": "./testdata"
\t\t}
\t],
\t"settings":
\t{
\t\t"font_size": 12
\t}
}
"""
    assert p.to_json() == exp


def test_marshal_json_with_name():
    p = Project()
    p.load_json('{"folders": [{"path": "docs", "name": "Docs"}]}')
    assert '"name": "Docs"' in p.to_json()


def test_close():
    window = object()
    changed = []
    events.ON_PROJECT_CHANGED.add(lambda w: changed.append(w) if w is window else None)
    p = Project(window)
    p.settings.set("font_size", 14)
    p.add_folder("./testdata")
    p.close()
    assert p.folders() == []
    assert p.settings.get("font_size", 12) == 12
    assert changed == [window]


def test_load_missing_file(tmp_path):
    with pytest.raises(OSError):
        Project().load(str(tmp_path / "nope"))


def test_load_bad_content(tmp_path):
    target = tmp_path / "bad"
    target.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError, match="Couldn't unmarshal project data"):
        Project().load(str(target))


def test_file_changed_reloads(tmp_path):
    target = tmp_path / "proj"
    target.write_text('{"folders": [{"path": "z"}]}', encoding="utf-8")
    p = Project()
    p.file_changed(str(target))
    assert p.folders() == ["z"]


def test_settings_parent_fallback():
    parent = Settings({"a": 1})
    child = Settings()
    child.set_parent(parent)
    assert child.get("a") == 1
    child.set("a", 2)
    assert child.get("a") == 2
    assert child.get("b", "d") == "d"


def test_settings_parent_through_owner():
    owner = Project()
    owner.settings.set("x", "y")
    child = Settings()
    child.set_parent(owner)
    assert child.get("x") == "y"