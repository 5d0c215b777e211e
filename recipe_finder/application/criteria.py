"""
Recipe-specific search criteria.

Translates the structured hybrid-search form (cuisine, prep time, dietary needs, ...)
into a filter tree, and a user's taste profile into soft preferences.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..domain.filters import to_number
from ..domain.models import (
    FilterExpression,
    Preference,
    all_of,
    contains,
    eq,
    gte,
    lte,
    not_,
)

CUISINE = "cuisine"
PREP_TIME = "prep_time"
DIFFICULTY = "difficulty"
DIETARY = "dietary"
INGREDIENTS = "ingredients"
SERVINGS = "servings"
RATING = "rating"

QUICK_RECIPE_MINUTES = 30
FAVORITE_CUISINE_BOOST = 0.2
QUICK_RECIPE_BOOST = 0.15
SKILL_MATCH_BOOST = 0.1
DISLIKED_INGREDIENT_PENALTY = -0.1


@dataclass(frozen=True)
class SearchFilters:
    """Hard constraints; every supplied field must hold."""
    cuisine: Optional[str] = None
    max_prep_time: Optional[int] = None
    difficulty: Optional[str] = None
    dietary: List[str] = field(default_factory=list)
    required_ingredients: List[str] = field(default_factory=list)
    excluded_ingredients: List[str] = field(default_factory=list)
    min_servings: Optional[int] = None
    max_servings: Optional[int] = None
    min_rating: Optional[float] = None


@dataclass(frozen=True)
class UserPreferences:
    """Taste profile; influences ranking only."""
    favorite_cuisines: List[str] = field(default_factory=list)
    disliked_ingredients: List[str] = field(default_factory=list)
    skill_level: Optional[str] = None
    prefers_quick_recipes: bool = False


def build_filter_expression(filters: Optional[SearchFilters]) -> Optional[FilterExpression]:
    """AND of every supplied constraint; None when nothing is constrained."""
    if filters is None:
        return None
    parts: List[FilterExpression] = []
    if filters.cuisine:
        parts.append(eq(CUISINE, filters.cuisine))
    if filters.max_prep_time is not None:
        parts.append(lte(PREP_TIME, filters.max_prep_time))
    if filters.difficulty:
        parts.append(eq(DIFFICULTY, filters.difficulty))
    parts.extend(contains(DIETARY, d) for d in filters.dietary)
    parts.extend(contains(INGREDIENTS, ing) for ing in filters.required_ingredients)
    parts.extend(not_(contains(INGREDIENTS, ing)) for ing in filters.excluded_ingredients)
    if filters.min_servings is not None:
        parts.append(gte(SERVINGS, filters.min_servings))
    if filters.max_servings is not None:
        parts.append(lte(SERVINGS, filters.max_servings))
    if filters.min_rating is not None:
        parts.append(gte(RATING, filters.min_rating))
    if not parts:
        return None
    return all_of(*parts)


def _is_quick(prep_time: object) -> bool:
    minutes = to_number(prep_time)
    return minutes is not None and minutes <= QUICK_RECIPE_MINUTES


def build_preferences(prefs: Optional[UserPreferences]) -> List[Preference]:
    """Preference list for a taste profile.

    Disliked ingredients become one penalty each, so a recipe with two of them loses
    twice the weight.
    """
    if prefs is None:
        return []
    out: List[Preference] = []
    if prefs.favorite_cuisines:
        favorites = frozenset(prefs.favorite_cuisines)
        out.append(
            Preference(
                CUISINE,
                weight=FAVORITE_CUISINE_BOOST,
                predicate=lambda v: isinstance(v, str) and v in favorites,
            )
        )
    if prefs.prefers_quick_recipes:
        out.append(Preference(PREP_TIME, weight=QUICK_RECIPE_BOOST, predicate=_is_quick))
    if prefs.skill_level:
        out.append(Preference(DIFFICULTY, value=prefs.skill_level, weight=SKILL_MATCH_BOOST))
    out.extend(
        Preference(INGREDIENTS, value=ing, weight=DISLIKED_INGREDIENT_PENALTY)
        for ing in prefs.disliked_ingredients
    )
    return out
