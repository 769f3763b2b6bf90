"""Tests for the generic store engine."""

from collections import deque
from dataclasses import dataclass

import pytest

from moviestore import ChangeLog, Middleware, Persist, create_store


@dataclass(frozen=True)
class Counter:
    count: int = 0
    label: str = ""


class TestStore:
    def test_initial_state(self):
        s = create_store(lambda api: Counter(count=3))
        assert s.get_state() == Counter(count=3)

    def test_set_mapping(self):
        s = create_store(lambda api: Counter())
        s.set_state({"count": 1})
        assert s.get_state().count == 1
        assert s.get_state().label == ""

    def test_set_function(self):
        s = create_store(lambda api: Counter(count=1))
        s.set_state(lambda state: {"count": state.count + 1})
        assert s.get_state().count == 2

    def test_new_snapshot_per_update(self):
        s = create_store(lambda api: Counter())
        before = s.get_state()
        s.set_state({"count": 1})
        assert s.get_state() is not before
        assert before.count == 0  # previous snapshot untouched

    def test_unknown_field_rejected(self):
        s = create_store(lambda api: Counter())
        with pytest.raises(TypeError):
            s.set_state({"nope": 1})
        assert s.get_state() == Counter()

    def test_subscribe_receives_state_and_previous(self):
        s = create_store(lambda api: Counter())
        log = []
        s.subscribe(lambda state, prev: log.append((prev.count, state.count)))
        s.set_state({"count": 1})
        s.set_state({"count": 2})
        assert log == [(0, 1), (1, 2)]

    def test_empty_patch_is_noop(self):
        s = create_store(lambda api: Counter(count=1))
        before = s.get_state()
        log = []
        s.subscribe(lambda state, prev: log.append(state))
        s.set_state({})
        s.set_state(lambda state: {})
        assert log == []
        assert s.get_state() is before

    def test_same_values_still_notify(self):
        s = create_store(lambda api: Counter(count=1))
        log = []
        s.subscribe(lambda state, prev: log.append(state))
        s.set_state({"count": 1})
        assert log == [Counter(count=1)]

    def test_unsubscribe(self):
        s = create_store(lambda api: Counter())
        log = []
        unsub = s.subscribe(lambda state, prev: log.append(state.count))
        s.set_state({"count": 1})
        unsub()
        unsub()  # idempotent
        s.set_state({"count": 2})
        assert log == [1]

    def test_unsubscribe_during_notification(self):
        s = create_store(lambda api: Counter())
        log = []
        unsub_b = None

        def a(state, prev):
            log.append(("a", state.count))
            unsub_b()

        def b(state, prev):
            log.append(("b", state.count))

        s.subscribe(a)
        unsub_b = s.subscribe(b)
        s.set_state({"count": 1})
        assert log == [("a", 1)]

    def test_destroy_stops_notifications(self):
        s = create_store(lambda api: Counter())
        log = []
        s.subscribe(lambda state, prev: log.append(state.count))
        s.destroy()
        assert s.disposed
        s.set_state({"count": 5})
        assert log == []
        assert s.get_state().count == 5


class _Tag(Middleware):
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def wrap(self, set_state, api):
        def tagged(partial, *, action=None):
            self.log.append(("set", self.name))
            set_state(partial, action=action)

        return tagged

    def attach(self, api):
        self.log.append(("attach", self.name))


class TestMiddlewareComposition:
    def test_outermost_first(self):
        log = []
        s = create_store(lambda api: Counter(), [_Tag("outer", log), _Tag("inner", log)])
        assert log == [("attach", "outer"), ("attach", "inner")]
        log.clear()
        s.set_state({"count": 1})
        assert log == [("set", "outer"), ("set", "inner")]

    def test_initializer_sees_wrapped_setter(self):
        log = []

        def init(api):
            api.set_from_init = api.set_state
            return Counter()

        s = create_store(init, [_Tag("only", log)])
        s.set_from_init({"count": 1})
        assert ("set", "only") in log
        assert s.get_state().count == 1

    def test_stage_attributes_declared(self):
        plain = create_store(lambda api: Counter())
        assert plain.history is None
        assert plain.persist is None

        persist = Persist("counter")
        s = create_store(lambda api: Counter(), [ChangeLog("counter"), persist])
        assert isinstance(s.history, deque)
        assert s.persist is persist
