"""
Hard-filter evaluation over item attributes.

A filter is a tree of ``Leaf`` comparisons and ``Combinator`` nodes. Evaluation is
pure: the same item and expression always give the same answer, so candidates can be
checked concurrently. A leaf that cannot be satisfied (missing attribute, non-numeric
value under a numeric comparison, scalar under ``contains``) evaluates to False and
never raises. Malformed trees are rejected up front by ``validate_filter``.
"""
from __future__ import annotations

import math
from typing import Any, Mapping, Optional, Union

from .errors import InvalidArgument
from .models import (
    AttributeValue,
    BooleanOperator,
    Combinator,
    FilterExpression,
    FilterOperator,
    Item,
    Leaf,
)

_MISSING = object()


def values_equal(left: Any, right: Any) -> bool:
    """Equality used by EQ leaves and preference targets.

    Strings compare case-sensitively; ``bool`` never equals a number even though
    Python treats ``True == 1``.
    """
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def to_number(value: Any) -> Optional[float]:
    """Coerce ``value`` to float; None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(num) else num


def validate_filter(expression: Optional[FilterExpression]) -> None:
    """Reject malformed filter trees.

    Raises:
        InvalidArgument: Unknown node type or operator, NOT without exactly one child,
            empty attribute name, or non-numeric operand for LTE/GTE.
    """
    if expression is None:
        return
    if isinstance(expression, Leaf):
        _validate_leaf(expression)
        return
    if isinstance(expression, Combinator):
        try:
            op = BooleanOperator(expression.op)
        except ValueError as exc:
            raise InvalidArgument(f"Unsupported boolean operator: {expression.op!r}") from exc
        if op is BooleanOperator.NOT and len(expression.children) != 1:
            raise InvalidArgument(f"NOT takes exactly one child, got {len(expression.children)}")
        for child in expression.children:
            validate_filter(child)
        return
    raise InvalidArgument(f"Unsupported filter node: {type(expression).__name__}")


def _validate_leaf(leaf: Leaf) -> None:
    if not isinstance(leaf.attribute, str) or not leaf.attribute.strip():
        raise InvalidArgument("Filter leaf requires a non-empty attribute name")
    try:
        op = FilterOperator(leaf.operator)
    except ValueError as exc:
        raise InvalidArgument(f"Unsupported filter operator: {leaf.operator!r}") from exc
    if op in (FilterOperator.LTE, FilterOperator.GTE) and to_number(leaf.value) is None:
        raise InvalidArgument(
            f"Numeric comparison on '{leaf.attribute}' needs a numeric value, got {leaf.value!r}"
        )


def matches(
    target: Union[Item, Mapping[str, AttributeValue]],
    expression: Optional[FilterExpression],
) -> bool:
    """Return True when ``target`` satisfies ``expression``.

    ``target`` is an ``Item`` or a bare attribute mapping. A ``None`` expression
    matches everything.
    """
    if expression is None:
        return True
    attributes = target.attributes if isinstance(target, Item) else target
    return _evaluate(attributes, expression)


def _evaluate(attributes: Mapping[str, AttributeValue], node: FilterExpression) -> bool:
    if isinstance(node, Leaf):
        return _evaluate_leaf(attributes, node)
    if isinstance(node, Combinator):
        op = BooleanOperator(node.op)
        if op is BooleanOperator.AND:
            return all(_evaluate(attributes, child) for child in node.children)
        if op is BooleanOperator.OR:
            return any(_evaluate(attributes, child) for child in node.children)
        if len(node.children) != 1:
            raise InvalidArgument(f"NOT takes exactly one child, got {len(node.children)}")
        return not _evaluate(attributes, node.children[0])
    raise InvalidArgument(f"Unsupported filter node: {type(node).__name__}")


def _evaluate_leaf(attributes: Mapping[str, AttributeValue], leaf: Leaf) -> bool:
    actual = attributes.get(leaf.attribute, _MISSING)
    if actual is _MISSING:
        return False
    op = FilterOperator(leaf.operator)
    if op is FilterOperator.EQ:
        return values_equal(actual, leaf.value)
    if op is FilterOperator.CONTAINS:
        if not isinstance(actual, (list, tuple)):
            return False
        return any(values_equal(entry, leaf.value) for entry in actual)
    left = to_number(actual)
    right = to_number(leaf.value)
    if left is None or right is None:
        return False
    if op is FilterOperator.LTE:
        return left <= right
    return left >= right
