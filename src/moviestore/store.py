"""Store engine — one canonical state snapshot with a change-notification protocol.

A StoreApi holds a frozen dataclass snapshot. set_state() merges a patch into
a new snapshot and notifies listeners with (state, previous). Middleware
stages wrap the mutation entry point at construction time; see middleware.py.

// [LAW:single-enforcer] _set_state is the only writer of the canonical snapshot.
"""

from __future__ import annotations

import dataclasses
from collections import deque
from typing import TYPE_CHECKING, Callable, Generic, Iterable, Mapping, TypeVar, Union

if TYPE_CHECKING:
    from moviestore.middleware import Persist

S = TypeVar("S")

Patch = Union[Mapping[str, object], Callable[[S], Mapping[str, object]]]
SetState = Callable[..., None]
Listener = Callable[[S, S], None]
Disposer = Callable[[], None]


class StoreApi(Generic[S]):
    """Canonical state container with subscribe/notify."""

    def __init__(self) -> None:
        self._state: S | None = None
        self._listeners: list[Listener] = []
        self._disposed = False
        self.set_state: SetState = self._set_state
        # Filled in by ChangeLog / Persist when those stages are installed
        self.history: deque | None = None
        self.persist: Persist | None = None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def get_state(self) -> S:
        return self._state

    def _set_state(self, partial: Patch, *, action: str | None = None) -> None:
        """Merge partial into a new snapshot; notify listeners. An empty patch is a no-op."""
        previous = self._state
        changes = partial(previous) if callable(partial) else partial
        if not changes:
            return
        state = _merge(previous, changes)
        self._state = state
        if self._disposed:
            return
        for listener in list(self._listeners):
            if listener in self._listeners:
                listener(state, previous)

    def subscribe(self, listener: Listener) -> Disposer:
        """Register a listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    def destroy(self) -> None:
        """Drop all listeners. No notification is delivered afterwards."""
        self._disposed = True
        self._listeners.clear()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._listeners)} listeners"
        return f"StoreApi({type(self._state).__name__}, {state})"


def _merge(state, changes: Mapping[str, object]):
    return dataclasses.replace(state, **changes)


class Middleware:
    """A stage wrapping the store's mutation entry point.

    wrap() runs once at construction, innermost stage first, and returns the
    set_state the next (outer) stage wraps. attach() runs once the initial
    state is in place, outermost stage first.
    """

    def wrap(self, set_state: SetState, api: StoreApi) -> SetState:
        return set_state

    def attach(self, api: StoreApi) -> None:
        pass


def create_store(
    initializer: Callable[[StoreApi[S]], S],
    middleware: Iterable[Middleware] = (),
) -> StoreApi[S]:
    """Build a store: wrap the mutation channel, then seed the initial state.

    middleware is ordered outermost first. The initializer receives the api
    (with its fully wrapped set_state) and returns the initial snapshot.

    Usage:
        @dataclass(frozen=True)
        class Counter:
            count: int = 0

        store = create_store(lambda api: Counter())
        store.subscribe(lambda state, prev: print(prev.count, "->", state.count))
        store.set_state(lambda s: {"count": s.count + 1})  # 0 -> 1
    """
    stages = list(middleware)
    api: StoreApi[S] = StoreApi()
    set_state = api.set_state
    for stage in reversed(stages):
        set_state = stage.wrap(set_state, api)
    api.set_state = set_state

    api._state = initializer(api)
    for stage in stages:
        stage.attach(api)
    return api
