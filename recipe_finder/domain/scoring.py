from __future__ import annotations

import math
from typing import Iterable, Sequence

from .errors import InvalidArgument
from .filters import values_equal
from .models import Item, Preference

_MISSING = object()


def validate_preferences(preferences: Iterable[Preference]) -> None:
    """Reject preferences without an attribute or with a non-finite weight."""
    for pref in preferences:
        if not isinstance(pref, Preference):
            raise InvalidArgument(f"Expected Preference, got {type(pref).__name__}")
        if not isinstance(pref.attribute, str) or not pref.attribute.strip():
            raise InvalidArgument("Preference requires a non-empty attribute name")
        if isinstance(pref.weight, bool) or not isinstance(pref.weight, (int, float)):
            raise InvalidArgument(f"Preference weight must be a number, got {pref.weight!r}")
        if not math.isfinite(pref.weight):
            raise InvalidArgument(f"Preference weight must be finite, got {pref.weight!r}")
        if pref.predicate is not None and not callable(pref.predicate):
            raise InvalidArgument("Preference predicate must be callable")


def preference_matches(item: Item, preference: Preference) -> bool:
    """True when ``item`` carries the preferred attribute value.

    A predicate, when present, decides on the raw attribute value. Otherwise list
    attributes match by membership and scalars by equality. A missing attribute
    never matches.
    """
    actual = item.attributes.get(preference.attribute, _MISSING)
    if actual is _MISSING:
        return False
    if preference.predicate is not None:
        return bool(preference.predicate(actual))
    if isinstance(actual, (list, tuple)):
        return any(values_equal(entry, preference.value) for entry in actual)
    return values_equal(actual, preference.value)


def score(item: Item, similarity: float, preferences: Sequence[Preference]) -> float:
    """Similarity plus the weight of every matching preference (additive)."""
    total = float(similarity)
    for pref in preferences:
        if preference_matches(item, pref):
            total += float(pref.weight)
    return total
