"""Movie search state — the records and the view-model snapshot.

MovieViewModel is the single object type handed to subscribers: raw state,
derived state and the action callables together. It is frozen and rebuilt
(never mutated) on every change, so holders can retain and compare snapshots
by reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, asdict
from typing import Awaitable, Callable, Mapping, Sequence


@dataclass(frozen=True)
class MovieItem:
    """One search result. Immutable once produced by the data source."""

    title: str
    year: str = ""
    imdb_id: str = ""
    type: str = ""
    poster: str = ""

    @property
    def display_text(self) -> str:
        return self.title

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping) -> MovieItem:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def _not_ready(*args, **kwargs):
    raise RuntimeError("store actions are not bound yet")


@dataclass(frozen=True)
class MovieViewModel:
    # MovieState — raw, persisted
    all_movies: Sequence = ()
    search_by: str = ""
    filter_by: str = ""
    # MovieComputedState — derived, never set directly
    filtered_movies: Sequence = ()
    # MovieAPI
    load_movies: Callable[..., Awaitable[bool]] = field(default=_not_ready, repr=False, compare=False)
    update_filter: Callable[[str], None] = field(default=_not_ready, repr=False, compare=False)
    clear_filter: Callable[[], None] = field(default=_not_ready, repr=False, compare=False)


STATE_FIELDS = ("all_movies", "search_by", "filter_by")


def init_state() -> dict:
    """Raw MovieState defaults."""
    return {"all_movies": (), "search_by": "", "filter_by": ""}
