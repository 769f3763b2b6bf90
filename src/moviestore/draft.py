"""Copy-on-write drafts — produce the next snapshot's patch from the previous one.

A Draft reads through to the frozen snapshot until a field is written. Only
written fields end up in the patch, and every sequence in the patch is frozen
to a tuple, so the previous snapshot is never touched and the next one is
safe to share. Sequences read from the base are tuples: build a new one and
assign it (draft.titles = [*draft.titles, title]).
"""

from __future__ import annotations

from typing import Callable, Mapping


class Draft:
    """Mutable view of a frozen snapshot. Writes are recorded, never applied."""

    __slots__ = ("_base", "_changes")

    def __init__(self, base) -> None:
        object.__setattr__(self, "_base", base)
        object.__setattr__(self, "_changes", {})

    def __getattr__(self, name: str):
        changes = object.__getattribute__(self, "_changes")
        if name in changes:
            return changes[name]
        return getattr(object.__getattribute__(self, "_base"), name)

    def __setattr__(self, name: str, value) -> None:
        base = object.__getattribute__(self, "_base")
        if not hasattr(base, name):
            raise AttributeError(f"{type(base).__name__} has no field {name!r}")
        object.__getattribute__(self, "_changes")[name] = value

    def patch(self) -> dict:
        """Fields that differ from the base snapshot, frozen."""
        base = object.__getattribute__(self, "_base")
        out = {}
        for name, value in object.__getattribute__(self, "_changes").items():
            frozen = freeze(value)
            if frozen != getattr(base, name):
                out[name] = frozen
        return out

    def __repr__(self) -> str:
        return f"Draft({object.__getattribute__(self, '_changes')!r})"


def freeze(value):
    """Lists and sets become tuples. Other values pass through."""
    if isinstance(value, (list, set, frozenset)):
        return tuple(value)
    return value


def produce(state, recipe: Callable[[Draft], Mapping | None]) -> dict:
    """Run recipe against a draft of state and return the resulting patch.

    The recipe either mutates the draft or returns a mapping of changes.

    Usage:
        patch = produce(state, lambda draft: setattr(draft, "filter_by", ""))
    """
    draft = Draft(state)
    result = recipe(draft)
    if result is not None:
        return {name: freeze(value) for name, value in result.items()}
    return draft.patch()


def resolve(state, partial) -> dict:
    """Turn any accepted partial into a patch.

    Recipes go through a Draft and come back frozen. Mapping values are
    applied as given, so a collaborator's sequence lands in the state as-is.
    """
    if callable(partial):
        return produce(state, partial)
    return dict(partial or {})
