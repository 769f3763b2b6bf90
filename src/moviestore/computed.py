"""Computed-state binder — derived fields recomputed inside every update.

compute_with() replaces a store's set_state with one that resolves the
caller's patch, merges it into the current snapshot, runs the derivation on
the merged result and hands patch + derived fields down as ONE update.
Subscribers never see new raw state next to stale derived state.
"""

from __future__ import annotations

import dataclasses
from typing import Callable, Mapping

from moviestore.draft import resolve
from moviestore.store import SetState, StoreApi


def compute_with(build_computed: Callable[[object], Mapping], api: StoreApi) -> SetState:
    """Bind build_computed to every mutation of api. Returns the new setter.

    Usage:
        def build_computed(state):
            return {"total": sum(state.items)}

        set_state = compute_with(build_computed, api)
        set_state({"items": (1, 2)})  # one notification, total == 3
    """
    original = api.set_state

    def set_state(partial, *, action: str | None = None) -> None:
        state = api.get_state()
        updates = resolve(state, partial)
        merged = dataclasses.replace(state, **updates) if updates else state
        original({**updates, **build_computed(merged)}, action=action)

    api.set_state = set_state
    return set_state
