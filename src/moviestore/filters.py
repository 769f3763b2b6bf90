"""Filter engine — pure derivations over a page of search results."""

from __future__ import annotations

from typing import Mapping, Sequence


def display_text(item) -> str:
    """Text a filter matches against.

    Records expose display_text or title; mappings their "title" (or OMDb's
    "Title") value; plain strings are their own text; anything else str(item).
    """
    text = getattr(item, "display_text", None)
    if isinstance(text, str):
        return text
    if isinstance(item, Mapping):
        title = item.get("title", item.get("Title"))
        return title if isinstance(title, str) else ""
    if isinstance(item, str):
        return item
    title = getattr(item, "title", None)
    if isinstance(title, str):
        return title
    return str(item)


def compute_matched_movies(all_movies: Sequence | None, filter_by: str | None) -> Sequence:
    """Items whose display text contains filter_by, case-insensitively.

    An empty filter returns all_movies itself. Order is preserved.
    """
    if all_movies is None:
        all_movies = ()
    if not filter_by:
        return all_movies

    needle = filter_by.lower()
    return tuple(item for item in all_movies if needle in display_text(item).lower())


def highlight(text: str | None, filter_by: str | None) -> list[tuple[str, bool]]:
    """Split text into (segment, is_match) runs for rendering.

    Usage:
        highlight("The Lego Batman Movie", "batman")
        # [("The Lego ", False), ("Batman", True), (" Movie", False)]
    """
    text = text or ""
    if not filter_by:
        return [(text, False)] if text else []

    needle = filter_by.lower()
    haystack = text.lower()
    runs: list[tuple[str, bool]] = []
    start = 0
    while True:
        hit = haystack.find(needle, start)
        if hit < 0:
            break
        if hit > start:
            runs.append((text[start:hit], False))
        runs.append((text[hit:hit + len(needle)], True))
        start = hit + len(needle)
    if start < len(text):
        runs.append((text[start:], False))
    return runs
