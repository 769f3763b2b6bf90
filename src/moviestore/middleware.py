"""Middleware stages — change log, persistence, immutable updates.

Stages are composed by create_store() in the order given, outermost first:

    create_store(init, [ChangeLog("movieSearch"), Persist("movieSearch"), Immutable()])

Each stage taps or transforms the mutation entry point and must leave the
content and timing of notifications to the store itself.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from collections import deque
from typing import Callable, Mapping, NamedTuple

from moviestore.draft import resolve
from moviestore.storage import MemoryStorage, StateStorage
from moviestore.store import Middleware, SetState, StoreApi

changelog_logger = logging.getLogger("moviestore.changelog")
persist_logger = logging.getLogger("moviestore.persist")


class ChangeRecord(NamedTuple):
    action: str
    state: object


class ChangeLog(Middleware):
    """Records every state transition on api.history for inspection."""

    def __init__(self, name: str, limit: int = 100) -> None:
        self.name = name
        self.history: deque[ChangeRecord] = deque(maxlen=limit)

    def wrap(self, set_state: SetState, api: StoreApi) -> SetState:
        api.history = self.history

        def logged_set(partial, *, action: str | None = None) -> None:
            before = api.get_state()
            set_state(partial, action=action)
            after = api.get_state()
            if after is not before:
                self._record(action or "anonymous", after)

        return logged_set

    def attach(self, api: StoreApi) -> None:
        self._record("@@init", api.get_state())

    def _record(self, action: str, state) -> None:
        self.history.append(ChangeRecord(action, state))
        changelog_logger.debug("[%s] %s: %r", self.name, action, state)


def _default_partialize(state) -> dict:
    return {
        f.name: getattr(state, f.name)
        for f in dataclasses.fields(state)
        if not callable(getattr(state, f.name))
    }


class Persist(Middleware):
    """Writes a JSON snapshot after every update; seeds state from it on attach.

    The stored document is {"state": partialize(state), "version": version}.
    restore(stored_state) turns it back into a patch; it goes through
    api.set_state, so anything bound there (derived fields) is re-derived.

    Storage and (de)serialization errors are logged and never raised: the
    store keeps running on its in-memory state.
    """

    def __init__(
        self,
        name: str,
        storage: StateStorage | None = None,
        *,
        partialize: Callable[[object], Mapping] = _default_partialize,
        restore: Callable[[Mapping], Mapping] | None = None,
        version: int = 0,
        migrate: Callable[[Mapping, int], Mapping] | None = None,
    ) -> None:
        self.name = name
        self.storage = storage if storage is not None else MemoryStorage()
        self.partialize = partialize
        self.restore = restore
        self.version = version
        self.migrate = migrate
        self._api: StoreApi | None = None
        self._hydrated = False

    def wrap(self, set_state: SetState, api: StoreApi) -> SetState:
        def persisting_set(partial, *, action: str | None = None) -> None:
            set_state(partial, action=action)
            self._write(api.get_state())

        return persisting_set

    def attach(self, api: StoreApi) -> None:
        self._api = api
        api.persist = self
        self.rehydrate()

    def has_hydrated(self) -> bool:
        return self._hydrated

    def rehydrate(self) -> None:
        """Apply the stored snapshot, if any, to the live state."""
        self._hydrated = False
        patch = self._read()
        if patch:
            try:
                self._api.set_state(patch, action="persist/hydrate")
            except Exception:
                persist_logger.exception(
                    "Failed to apply snapshot %r; keeping initial state", self.name
                )
        self._hydrated = True

    def clear_storage(self) -> None:
        try:
            self.storage.remove_item(self.name)
        except Exception:
            persist_logger.exception("Failed to clear snapshot %r", self.name)

    def _write(self, state) -> None:
        try:
            document = {"state": self.partialize(state), "version": self.version}
            self.storage.set_item(self.name, json.dumps(document))
        except Exception:
            persist_logger.exception("Failed to persist snapshot %r", self.name)

    def _read(self) -> dict | None:
        try:
            raw = self.storage.get_item(self.name)
            if raw is None:
                return None
            document = json.loads(raw)
            stored = document.get("state") or {}
            stored_version = document.get("version", 0)
            if stored_version != self.version:
                if self.migrate is None:
                    persist_logger.error(
                        "Snapshot %r is version %s, expected %s, and no migrate "
                        "function was provided; ignoring it",
                        self.name, stored_version, self.version,
                    )
                    return None
                stored = self.migrate(stored, stored_version)
            if self.restore is not None:
                return dict(self.restore(stored))
            state = self._api.get_state()
            return {k: v for k, v in stored.items() if k in _default_partialize(state)}
        except Exception:
            persist_logger.exception(
                "Failed to restore snapshot %r; keeping initial state", self.name
            )
            return None


class Immutable(Middleware):
    """Recipes that mutate a Draft are accepted wherever a mapping is.

    A recipe never touches the previous snapshot and its sequences come back
    frozen. Mapping patches pass through unchanged.
    """

    def wrap(self, set_state: SetState, api: StoreApi) -> SetState:
        def immutable_set(partial, *, action: str | None = None) -> None:
            set_state(resolve(api.get_state(), partial), action=action)

        return immutable_set
