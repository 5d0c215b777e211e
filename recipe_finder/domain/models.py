from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

AttributeValue = Union[str, int, float, bool, List[str]]


@dataclass(frozen=True)
class Vector:
    """Embedding vector with explicit dimension.

    Fields:
        values: The numeric embedding.
        dim: Dimension; validated by retrieval and ingestion.
    """
    values: List[float]
    dim: int


@dataclass(frozen=True)
class RecipeDocument:
    """A recipe read from an ingestion source, not yet embedded.

    Fields:
        id: Stable recipe identifier; re-ingesting the same id replaces the item.
        content: Text to embed (name, description, ingredients, instructions).
        attributes: Structured attributes used by filters and preferences.
    """
    id: str
    content: str
    attributes: Dict[str, AttributeValue] = field(default_factory=dict)


@dataclass(frozen=True)
class Item:
    """A stored, embedded recipe.

    Fields:
        id: Unique identifier.
        content: Free-text content.
        vector: Embedding of ``content``.
        attributes: Mapping of attribute name to str, number, bool or list of str.
    """
    id: str
    content: str
    vector: Vector
    attributes: Dict[str, AttributeValue] = field(default_factory=dict)


class FilterOperator(str, Enum):
    EQ = "eq"
    LTE = "lte"
    GTE = "gte"
    CONTAINS = "contains"


class BooleanOperator(str, Enum):
    AND = "and"
    OR = "or"
    NOT = "not"


@dataclass(frozen=True)
class Leaf:
    """Comparison of one item attribute against a literal value."""
    attribute: str
    operator: FilterOperator
    value: Any


@dataclass(frozen=True)
class Combinator:
    """Boolean combination of child expressions.

    AND of no children is true, OR of no children is false, NOT takes exactly one child.
    """
    op: BooleanOperator
    children: Tuple["FilterExpression", ...] = ()


FilterExpression = Union[Leaf, Combinator]


def eq(attribute: str, value: Any) -> Leaf:
    return Leaf(attribute, FilterOperator.EQ, value)


def lte(attribute: str, value: Union[int, float]) -> Leaf:
    return Leaf(attribute, FilterOperator.LTE, value)


def gte(attribute: str, value: Union[int, float]) -> Leaf:
    return Leaf(attribute, FilterOperator.GTE, value)


def contains(attribute: str, value: Any) -> Leaf:
    return Leaf(attribute, FilterOperator.CONTAINS, value)


def all_of(*children: FilterExpression) -> Combinator:
    return Combinator(BooleanOperator.AND, tuple(children))


def any_of(*children: FilterExpression) -> Combinator:
    return Combinator(BooleanOperator.OR, tuple(children))


def not_(child: FilterExpression) -> Combinator:
    return Combinator(BooleanOperator.NOT, (child,))


@dataclass(frozen=True)
class Preference:
    """Soft ranking adjustment; never excludes an item.

    Fields:
        attribute: Item attribute the preference looks at.
        value: Target value (equality, or membership for list attributes).
        weight: Signed score delta applied when the preference matches.
        predicate: Optional pure callable on the attribute value; overrides ``value``.
    """
    attribute: str
    value: Any = None
    weight: float = 0.0
    predicate: Optional[Callable[[Any], bool]] = None


@dataclass(frozen=True)
class Query:
    """A single search request; not persisted."""
    text: str
    filter: Optional[FilterExpression] = None
    preferences: Tuple[Preference, ...] = ()
    limit: int = 5
    top_k: int = 20
    similarity_threshold: float = 0.0


@dataclass(frozen=True)
class ScoredItem:
    """Search match produced per query.

    Fields:
        item: The stored item.
        similarity: Retrieval similarity in [0, 1].
        score: Similarity plus preference deltas.
    """
    item: Item
    similarity: float
    score: float

    def as_pair(self) -> Tuple[str, float]:
        return self.item.id, self.score
