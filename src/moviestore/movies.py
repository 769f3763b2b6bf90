"""Movie search store — the store engine wired for search results, and its adapter.

build_store_engine() creates the canonical state with its actions:

    load_movies(search_by, page=1)  fetch one result page, replace all_movies
    update_filter(filter_by)        narrow filtered_movies
    clear_filter()                  show all_movies again

MoviesStore owns one engine, fires the initial load and republishes every
snapshot on its `vm` stream.

Known limitation: overlapping load_movies() calls are not sequenced. State
reflects whichever response resolves last, not whichever request was issued
last. Callers that need latest-request-wins must track their own token.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Awaitable, Mapping, Protocol, Sequence

from moviestore.computed import compute_with
from moviestore.filters import compute_matched_movies
from moviestore.middleware import ChangeLog, Immutable, Persist
from moviestore.models import MovieItem, MovieViewModel, STATE_FIELDS, init_state
from moviestore.storage import StateStorage
from moviestore.store import StoreApi, create_store
from moviestore.stream import EventStream

logger = logging.getLogger("moviestore.movies")

STORE_NAME = "movieSearch"


class SearchMovies(Protocol):
    """The remote search collaborator: one terminal result per call."""

    def __call__(self, query: str, page: int) -> Awaitable[Sequence[MovieItem]]: ...


def build_computed(state) -> dict:
    """Derived fields of a MovieViewModel."""
    filtered_movies = compute_matched_movies(
        getattr(state, "all_movies", None), getattr(state, "filter_by", None)
    )
    return {"filtered_movies": filtered_movies}


def _dump_item(item) -> dict:
    # {"movie": ...} comes back as a MovieItem, {"record": ...} as a plain dict
    if isinstance(item, MovieItem):
        return {"movie": item.to_dict()}
    if isinstance(item, Mapping):
        return {"record": dict(item)}
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return {"record": dataclasses.asdict(item)}
    if hasattr(item, "_asdict"):
        return {"record": dict(item._asdict())}
    return {"value": item}


def _load_item(stored):
    if isinstance(stored, Mapping):
        if "movie" in stored:
            return MovieItem.from_dict(stored["movie"])
        if "record" in stored:
            return dict(stored["record"])
        if "value" in stored:
            return stored["value"]
    return stored


def _partialize(state: MovieViewModel) -> dict:
    return {
        "all_movies": [_dump_item(item) for item in state.all_movies],
        "search_by": state.search_by,
        "filter_by": state.filter_by,
    }


def _restore(stored) -> dict:
    # Missing or null fields fall back to init_state(); unknown fields are dropped
    present = {k: v for k, v in stored.items() if k in STATE_FIELDS and v is not None}
    patch = {**init_state(), **present}
    patch["all_movies"] = tuple(_load_item(d) for d in patch["all_movies"])
    patch["search_by"] = str(patch["search_by"])
    patch["filter_by"] = str(patch["filter_by"])
    return patch


def build_store_engine(
    search_movies: SearchMovies,
    *,
    storage: StateStorage | None = None,
    name: str = STORE_NAME,
) -> StoreApi[MovieViewModel]:
    """Create a movie store. A snapshot found in storage seeds the initial state."""

    def initializer(api: StoreApi) -> MovieViewModel:
        set_state = compute_with(build_computed, api)

        async def load_movies(search_by: str, page: int = 1) -> bool:
            all_movies = await search_movies(search_by, page)
            set_state({"all_movies": all_movies, "search_by": search_by}, action="loadMovies")
            return True

        def update_filter(filter_by: str) -> None:
            set_state({"filter_by": filter_by}, action="updateFilter")

        def clear_filter() -> None:
            set_state({"filter_by": ""}, action="clearFilter")

        data = init_state()
        return MovieViewModel(
            **data,
            **build_computed(MovieViewModel(**data)),
            load_movies=load_movies,
            update_filter=update_filter,
            clear_filter=clear_filter,
        )

    return create_store(
        initializer,
        [
            ChangeLog(name),
            Persist(name, storage, partialize=_partialize, restore=_restore),
            Immutable(),
        ],
    )


class MoviesStore:
    """Subscription adapter: one engine, one initial load, one `vm` stream.

    Must be constructed while an asyncio event loop is running.

    Usage:
        store = MoviesStore(omdb.search)
        stop = store.vm.subscribe(render)
        await store.initial_load
        store.state.update_filter("lego")
        ...
        store.dispose()
    """

    def __init__(self, search_movies: SearchMovies, *, storage: StateStorage | None = None) -> None:
        loop = asyncio.get_running_loop()
        self._store = build_store_engine(search_movies, storage=storage)
        self.vm: EventStream[MovieViewModel] = EventStream()
        self._stop_watching = self._store.subscribe(lambda state, previous: self.vm.emit(state))

        state = self._store.get_state()
        self.initial_load: asyncio.Task[bool] = loop.create_task(state.load_movies(state.search_by))
        self.initial_load.add_done_callback(_log_load_failure)

    @property
    def state(self) -> MovieViewModel:
        """The current snapshot."""
        return self._store.get_state()

    @property
    def history(self):
        return self._store.history

    def dispose(self) -> None:
        """Release the engine subscription. No snapshot is delivered afterwards."""
        if self._stop_watching is None:
            return
        self._stop_watching()
        self._stop_watching = None
        self.vm.dispose()
        self._store.destroy()

    def __repr__(self) -> str:
        state = "disposed" if self._stop_watching is None else repr(self.state.search_by)
        return f"MoviesStore({state})"


def _log_load_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Initial movie load failed", exc_info=exc)
