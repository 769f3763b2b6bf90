"""moviestore: reactive view-model store for a movie search UI."""

from importlib.metadata import version as _version

__version__ = _version("moviestore")

from moviestore.models import MovieItem, MovieViewModel, init_state
from moviestore.filters import compute_matched_movies, highlight
from moviestore.store import StoreApi, Middleware, create_store
from moviestore.computed import compute_with
from moviestore.draft import Draft, produce
from moviestore.middleware import ChangeLog, ChangeRecord, Persist, Immutable
from moviestore.storage import MemoryStorage, FileStorage
from moviestore.stream import EventStream
from moviestore.movies import MoviesStore, SearchMovies, build_store_engine
# textual NOT auto-imported — opt-in only

__all__ = [
    "MovieItem",
    "MovieViewModel",
    "init_state",
    "compute_matched_movies",
    "highlight",
    "StoreApi",
    "Middleware",
    "create_store",
    "compute_with",
    "Draft",
    "produce",
    "ChangeLog",
    "ChangeRecord",
    "Persist",
    "Immutable",
    "MemoryStorage",
    "FileStorage",
    "EventStream",
    "MoviesStore",
    "SearchMovies",
    "build_store_engine",
]
