"""
Quantifier specifications over a collection-valued property.

Each lifts an item-level specification over ``TItem`` to an entity-level
specification over ``T``::

    vip = field() == "vip"
    AnySpecification("tags", vip)           # some tag is "vip"
    AtMostSpecification("tags", vip, 1)     # at most one tag is "vip"

A ``None`` collection is not special-cased: iterating it raises
``TypeError`` at evaluation time.  Guard nullable collections in the
selector.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .base import ISpecification, Specification, require_specification
from .expressions import (
    Expression,
    Lambda,
    compare,
    constant,
    lambda_,
    parameter,
    sequence_all,
    sequence_any,
    sequence_count,
)
from .operators import ComparisonOperator
from .selectors import bind_selector, require_selector

if TYPE_CHECKING:
    from .selectors import Selector

T = TypeVar("T")
TItem = TypeVar("TItem")


class QuantifierSpecification(Specification[T], Generic[T, TItem]):
    def __init__(
        self,
        property_selector: Selector,
        item_specification: ISpecification[TItem],
    ) -> None:
        self.property_selector = require_selector(
            property_selector, "property_selector"
        )
        self.item_specification = require_specification(
            item_specification, "item_specification"
        )

    def to_expression(self) -> Lambda[T]:
        entity = parameter("entity")
        source = bind_selector(self.property_selector, entity)
        predicate = self.item_specification.to_expression()
        return lambda_(entity, self._quantify(source, predicate))

    @abstractmethod
    def _quantify(self, source: Expression, predicate: Lambda[Any]) -> Expression:
        ...


class AnySpecification(QuantifierSpecification[T, TItem]):
    """Satisfied if at least one item satisfies the item specification."""

    def _quantify(self, source: Expression, predicate: Lambda[Any]) -> Expression:
        return sequence_any(source, predicate)


class AllSpecification(QuantifierSpecification[T, TItem]):
    """Satisfied if every item satisfies the item specification (vacuously on empty)."""

    def _quantify(self, source: Expression, predicate: Lambda[Any]) -> Expression:
        return sequence_all(source, predicate)


class _ThresholdSpecification(QuantifierSpecification[T, TItem]):
    operator: ComparisonOperator

    def __init__(
        self,
        property_selector: Selector,
        item_specification: ISpecification[TItem],
        threshold: int,
    ) -> None:
        super().__init__(property_selector, item_specification)
        self.threshold = threshold

    def _quantify(self, source: Expression, predicate: Lambda[Any]) -> Expression:
        return compare(
            self.operator,
            sequence_count(source, predicate),
            constant(self.threshold),
        )


class AtLeastSpecification(_ThresholdSpecification[T, TItem]):
    """Satisfied if ``threshold`` or more items satisfy the item specification."""

    operator = ComparisonOperator.GE


class AtMostSpecification(_ThresholdSpecification[T, TItem]):
    """Satisfied if ``threshold`` or fewer items satisfy the item specification."""

    operator = ComparisonOperator.LE
