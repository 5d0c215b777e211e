from __future__ import annotations

from typing import List, Sequence

from .errors import InvalidArgument
from .models import ScoredItem


def select(scored_items: Sequence[ScoredItem], limit: int) -> List[ScoredItem]:
    """Return the top ``limit`` items by adjusted score as a new list.

    ``sorted`` is stable, so equal scores keep their candidate order and identical
    inputs always give identical output.

    Raises:
        InvalidArgument: ``limit`` is not a positive integer.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidArgument(f"limit must be a positive integer, got {limit!r}")
    ordered = sorted(scored_items, key=lambda s: s.score, reverse=True)
    return ordered[:limit]
