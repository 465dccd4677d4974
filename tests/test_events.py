from limecore import events
from limecore.events import (
    Event,
    QueryContextEvent,
    QueryContextReturn,
    builtin_query_context,
)
from limecore.keys import Op
from limecore.project import Settings
from limecore.render import Region, RegionSet


class _View:
    def __init__(self, settings=None, regions=()):
        self._settings = settings if settings is not None else Settings()
        self._sel = RegionSet(regions)

    def settings(self):
        return self._settings

    def sel(self):
        return self._sel


def test_on_new_window_called_once():
    calls = []
    window = object()
    events.ON_NEW_WINDOW.add(lambda w: calls.append(w) if w is window else None)
    events.ON_NEW_WINDOW.call(window)
    assert calls == [window]


def test_event_calls_in_order_of_registration():
    ev = Event("Test")
    seen = []
    ev.add(lambda v: seen.append(("first", v)))
    ev.add(lambda v: seen.append(("second", v)))
    ev.call(7)
    assert seen == [("first", 7), ("second", 7)]
    assert len(ev) == 2


def test_event_counts_each_call():
    ev = Event()
    count = []
    ev.add(lambda v: count.append(v))
    ev.call("a")
    ev.call("b")
    assert count == ["a", "b"]


def test_query_context_first_known_answer_wins():
    qe = QueryContextEvent()
    qe.add(lambda *a: QueryContextReturn.UNKNOWN)
    qe.add(lambda *a: QueryContextReturn.FALSE)
    qe.add(lambda *a: QueryContextReturn.TRUE)
    assert qe.call(None, "k", Op.EQUAL, True, False) == QueryContextReturn.FALSE


def test_query_context_unknown_without_handlers():
    qe = QueryContextEvent()
    assert qe.call(None, "k", Op.EQUAL, True, False) == QueryContextReturn.UNKNOWN


def test_query_context_passes_arguments():
    qe = QueryContextEvent()
    got = []

    def cb(view, key, operator, operand, match_all):
        got.append((view, key, operator, operand, match_all))
        return QueryContextReturn.TRUE

    qe.add(cb)
    assert qe.call("v", "key", Op.NOT_EQUAL, 3, True) == QueryContextReturn.TRUE
    assert got == [("v", "key", Op.NOT_EQUAL, 3, True)]


def test_builtin_setting_context():
    settings = Settings()
    settings.set("enabled", True)
    settings.set("text", "yes")
    view = _View(settings)
    assert builtin_query_context(view, "setting.enabled", Op.EQUAL, True, False) == QueryContextReturn.TRUE
    assert builtin_query_context(view, "setting.missing", Op.EQUAL, True, False) == QueryContextReturn.FALSE
    assert builtin_query_context(view, "setting.text", Op.EQUAL, True, False) == QueryContextReturn.FALSE


def test_builtin_setting_context_other_operator_is_unknown():
    view = _View()
    assert builtin_query_context(view, "setting.x", Op.NOT_EQUAL, True, False) == QueryContextReturn.UNKNOWN


def test_builtin_num_selections():
    view = _View(regions=[Region(0, 1), Region(5, 6)])
    assert builtin_query_context(view, "num_selections", Op.EQUAL, 2.0, False) == QueryContextReturn.TRUE
    assert builtin_query_context(view, "num_selections", Op.EQUAL, 1.0, False) == QueryContextReturn.FALSE
    assert builtin_query_context(view, "num_selections", Op.NOT_EQUAL, 1.0, False) == QueryContextReturn.TRUE
    assert builtin_query_context(view, "num_selections", Op.NOT_EQUAL, 2, False) == QueryContextReturn.FALSE
    assert (
        builtin_query_context(view, "num_selections", Op.REGEX_MATCH, 2.0, False)
        == QueryContextReturn.UNKNOWN
    )


def test_builtin_unknown_key():
    assert builtin_query_context(_View(), "other", Op.EQUAL, True, False) == QueryContextReturn.UNKNOWN


def test_global_query_context_has_builtin():
    settings = Settings()
    settings.set("word_wrap", True)
    view = _View(settings)
    result = events.ON_QUERY_CONTEXT.call(view, "setting.word_wrap", Op.EQUAL, True, False)
    assert result == QueryContextReturn.TRUE