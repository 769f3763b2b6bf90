"""Render MoviesStore snapshots into a Textual app. Requires the textual extra.

bind() subscribes a widget effect to a store stream. The effect is skipped
while the app is paused or not running, and calls from worker threads are
handed to the app thread.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

# id(app) for every app currently inside a pause() block
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Skip bound effects while widgets are being swapped out."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """True when bound effects may touch the widget tree."""
    return app.is_running and id(app) not in _paused_apps


def bind(app, stream, effect):
    """Subscribe effect to stream, safely bridged to Textual widgets.

    Skips values while the app is paused or not running, catches NoMatches
    from widget queries, and marshals cross-thread calls via call_from_thread.
    Returns the unsubscribe function.

    Usage:
        stop = stx.bind(app, store.vm, lambda vm: app.query_one(MovieList).show(vm))
    """
    _main = threading.get_ident()

    def _guarded(value):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    def _safe(value):
        try:
            effect(value)
        except NoMatches:
            pass

    return stream.subscribe(_guarded)
