"""
Unit tests for preference scoring and result selection.
"""

import pytest

from recipe_finder.domain.errors import InvalidArgument
from recipe_finder.domain.models import Preference, ScoredItem
from recipe_finder.domain.scoring import preference_matches, score, validate_preferences
from recipe_finder.domain.selection import select


@pytest.mark.unit
class TestPreferenceScorer:
    """Test additive soft preferences."""

    def test_matching_preference_adds_weight(self, item_factory):
        item = item_factory("r1", [1.0], quick=True)
        assert score(item, 0.6, [Preference("quick", True, 0.2)]) == pytest.approx(0.8)

    def test_no_preferences_returns_similarity(self, item_factory):
        item = item_factory("r1", [1.0], quick=True)
        assert score(item, 0.42, []) == pytest.approx(0.42)

    def test_negative_weight_is_a_penalty(self, item_factory):
        item = item_factory("r1", [1.0], ingredients=["cilantro", "olives"])
        prefs = [Preference("ingredients", "cilantro", -0.1), Preference("ingredients", "olives", -0.1)]
        assert score(item, 0.7, prefs) == pytest.approx(0.5)

    def test_multiple_matches_are_additive(self, item_factory):
        item = item_factory("r1", [1.0], cuisine="Italian", quick=True)
        prefs = [
            Preference("cuisine", "Italian", 0.2),
            Preference("quick", True, 0.15),
            Preference("cuisine", "Thai", 0.5),
        ]
        assert score(item, 0.5, prefs) == pytest.approx(0.85)

    def test_missing_attribute_never_matches(self, item_factory):
        item = item_factory("r1", [1.0])
        assert preference_matches(item, Preference("cuisine", "Italian", 1.0)) is False
        assert score(item, 0.3, [Preference("cuisine", "Italian", 1.0)]) == pytest.approx(0.3)

    def test_predicate_overrides_value(self, item_factory):
        item = item_factory("r1", [1.0], prep_time=20)
        quick = Preference("prep_time", weight=0.15, predicate=lambda v: v <= 30)
        slow = Preference("prep_time", weight=0.15, predicate=lambda v: v > 30)
        assert score(item, 0.5, [quick, slow]) == pytest.approx(0.65)

    def test_bool_target_does_not_match_number(self, item_factory):
        item = item_factory("r1", [1.0], servings=1)
        assert preference_matches(item, Preference("servings", True, 0.2)) is False

    def test_deterministic(self, item_factory):
        item = item_factory("r1", [1.0], cuisine="Italian", quick=True)
        prefs = [Preference("cuisine", "Italian", 0.2), Preference("quick", True, -0.05)]
        assert score(item, 0.6, prefs) == score(item, 0.6, prefs)

    def test_validate_preferences(self):
        validate_preferences([Preference("quick", True, 0.2)])
        with pytest.raises(InvalidArgument):
            validate_preferences([Preference("", True, 0.2)])
        with pytest.raises(InvalidArgument):
            validate_preferences([Preference("quick", True, float("inf"))])
        with pytest.raises(InvalidArgument):
            validate_preferences([Preference("quick", True, "high")])
        with pytest.raises(InvalidArgument):
            validate_preferences([("quick", True, 0.2)])


@pytest.mark.unit
class TestResultSelector:
    """Test ordering, truncation and stability."""

    @staticmethod
    def _scored(item_factory, rows):
        return [ScoredItem(item=item_factory(i, [1.0]), similarity=s, score=s) for i, s in rows]

    def test_sorted_descending_and_truncated(self, item_factory):
        scored = self._scored(item_factory, [("a", 0.2), ("b", 0.9), ("c", 0.5), ("d", 0.7)])
        out = select(scored, 3)
        assert [r.item.id for r in out] == ["b", "d", "c"]

    def test_length_is_min_of_limit_and_input(self, item_factory):
        scored = self._scored(item_factory, [("a", 0.2), ("b", 0.9)])
        assert len(select(scored, 10)) == 2
        assert len(select(scored, 1)) == 1
        assert select([], 5) == []

    def test_ties_keep_input_order(self, item_factory):
        scored = self._scored(item_factory, [("a", 0.5), ("b", 0.8), ("c", 0.5), ("d", 0.5)])
        assert [r.item.id for r in select(scored, 4)] == ["b", "a", "c", "d"]

    def test_input_not_mutated(self, item_factory):
        scored = self._scored(item_factory, [("a", 0.1), ("b", 0.9)])
        before = list(scored)
        out = select(scored, 2)
        assert scored == before
        assert out is not scored

    @pytest.mark.parametrize("limit", [0, -1, 1.5, True])
    def test_invalid_limit(self, item_factory, limit):
        with pytest.raises(InvalidArgument):
            select(self._scored(item_factory, [("a", 0.1)]), limit)
