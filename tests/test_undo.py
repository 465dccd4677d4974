import pytest

from limecore.render import Region, RegionSet
from limecore.undo import CompositeAction, Edit, UndoStack


class Recorder:
    def __init__(self, name, journal):
        self.name = name
        self.journal = journal

    def apply(self):
        self.journal.append(("apply", self.name))

    def undo(self):
        self.journal.append(("undo", self.name))


class FakeView:
    def __init__(self):
        self.selection = RegionSet([Region(0, 0)])
        self.changes = 0

    def sel(self):
        return self.selection

    def change_count(self):
        return self.changes


@pytest.fixture
def view():
    return FakeView()


def make_edit(view, journal=None, name="erase"):
    edit = Edit(view=view, command=name)
    edit.composite.add(Recorder(name, journal if journal is not None else []))
    return edit


def test_undo_stack_index(view):
    us = UndoStack()
    us.add(make_edit(view))
    us.add(make_edit(view))
    assert us._index(-1, False) == 0


def test_undo_stack_add(view):
    us = UndoStack()
    us.add(make_edit(view))
    us.add(make_edit(view))
    assert us.position == 2
    assert len(us.actions) == 2

    us.undo(False)
    us.undo(False)
    us.add(make_edit(view))
    assert us.position == 1
    assert len(us.actions) == 1


def test_undo_stack_undo(view):
    us = UndoStack()
    us.undo(False)
    assert us.position == 0

    us.add(make_edit(view))
    us.add(make_edit(view))
    us.undo(False)
    assert us.position == 1
    assert len(us.actions) == 2


def test_undo_stack_redo(view):
    us = UndoStack()
    us.redo(False)
    assert us.position == 0

    us.add(make_edit(view))
    us.add(make_edit(view))
    us.undo(False)
    us.redo(False)
    assert us.position == 2
    assert len(us.actions) == 2


def test_undo_stack_glue_from(view):
    us = UndoStack()
    for _ in range(4):
        us.add(make_edit(view))
    us.glue_from(1)
    assert us.position == 2
    assert len(us.actions) == 2

    us.glue_from(10)
    assert us.position == 2
    assert len(us.actions) == 2


def test_undo_and_redo_call_actions_in_order(view):
    journal = []
    us = UndoStack()
    us.add(make_edit(view, journal, "a"))
    us.add(make_edit(view, journal, "b"))
    us.undo(False)
    us.undo(False)
    us.redo(False)
    assert journal == [("undo", "b"), ("undo", "a"), ("apply", "a")]
    assert us.position == 1


def test_glued_edit_undoes_everything_at_once(view):
    journal = []
    us = UndoStack()
    for name in ("a", "b", "c"):
        us.add(make_edit(view, journal, name))
    us.glue_from(0)
    glued = us.actions[0]
    assert glued.command == "sequence"
    assert glued.args["commands"] == [("a", {}), ("b", {}), ("c", {})]
    us.undo(False)
    assert us.position == 0
    assert journal == [("undo", "c"), ("undo", "b"), ("undo", "a")]
    journal.clear()
    us.redo(False)
    assert journal == [("apply", "a"), ("apply", "b"), ("apply", "c")]


def test_edit_undo_restores_saved_selection(view):
    view.selection = RegionSet([Region(3, 5)])
    edit = Edit(view=view)
    view.selection.clear()
    view.selection.add(Region(9, 9))
    edit.undo()
    assert view.selection.regions() == [Region(3, 5)]


def test_edit_saves_change_count(view):
    view.changes = 7
    assert Edit(view=view).saved_count == 7


def test_composite_action_order():
    journal = []
    comp = CompositeAction([Recorder("x", journal), Recorder("y", journal)])
    comp.apply()
    comp.undo()
    assert journal == [("apply", "x"), ("apply", "y"), ("undo", "y"), ("undo", "x")]
    assert len(comp) == 2