"""
Fluent field references for building leaf specifications.

Example::

    adult = field("age") >= 18
    vip = field("tags").any(field() == "vip")
    spec = adult & vip & field("name").matches("^A")

``field()`` with no path refers to the candidate itself, which is how
item specifications over collections of scalars are written.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .base import ExpressionSpecification, ISpecification, Specification
from .expressions import Expression, Parameter, compare, constant, lambda_, parameter
from .expressions import path as attribute_path
from .operators import ComparisonOperator

if TYPE_CHECKING:
    from .pattern import RegexMatchSpecification
    from .quantifiers import (
        AllSpecification,
        AnySpecification,
        AtLeastSpecification,
        AtMostSpecification,
    )
    from .selectors import Selector


class Field:
    """A reference to an attribute path on the candidate."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, path: str | None = None) -> None:
        self.path = path

    @property
    def parameter_name(self) -> str:
        return "entity" if self.path else "item"

    def resolve(self, entity: Parameter) -> Expression:
        return entity if not self.path else attribute_path(entity, self.path)

    def selector(self) -> Selector:
        if self.path:
            return self.path
        item = parameter(self.parameter_name)
        return lambda_(item, item)

    # -- comparisons ---------------------------------------------------------

    def _compare(
        self, op: ComparisonOperator, value: Any
    ) -> ExpressionSpecification[Any]:
        return ExpressionSpecification.build(
            lambda entity: compare(op, self.resolve(entity), constant(value)),
            parameter_name=self.parameter_name,
        )

    def __eq__(  # type: ignore[override]
        self, value: Any
    ) -> ExpressionSpecification[Any]:
        return self._compare(ComparisonOperator.EQ, value)

    def __ne__(  # type: ignore[override]
        self, value: Any
    ) -> ExpressionSpecification[Any]:
        return self._compare(ComparisonOperator.NE, value)

    def __gt__(self, value: Any) -> ExpressionSpecification[Any]:
        return self._compare(ComparisonOperator.GT, value)

    def __ge__(self, value: Any) -> ExpressionSpecification[Any]:
        return self._compare(ComparisonOperator.GE, value)

    def __lt__(self, value: Any) -> ExpressionSpecification[Any]:
        return self._compare(ComparisonOperator.LT, value)

    def __le__(self, value: Any) -> ExpressionSpecification[Any]:
        return self._compare(ComparisonOperator.LE, value)

    def is_null(self) -> ExpressionSpecification[Any]:
        return self._compare(ComparisonOperator.EQ, None)

    def is_not_null(self) -> ExpressionSpecification[Any]:
        return self._compare(ComparisonOperator.NE, None)

    # -- text ----------------------------------------------------------------

    def matches(self, pattern: str, flags: int = 0) -> RegexMatchSpecification[Any]:
        return Specification.regex_match(self.selector(), pattern, flags)

    # -- collections ---------------------------------------------------------

    def any(
        self, item_specification: ISpecification[Any]
    ) -> AnySpecification[Any, Any]:
        return Specification.any(self.selector(), item_specification)

    def all(
        self, item_specification: ISpecification[Any]
    ) -> AllSpecification[Any, Any]:
        return Specification.all(self.selector(), item_specification)

    def at_least(
        self, item_specification: ISpecification[Any], count: int
    ) -> AtLeastSpecification[Any, Any]:
        return Specification.at_least(self.selector(), item_specification, count)

    def at_most(
        self, item_specification: ISpecification[Any], count: int
    ) -> AtMostSpecification[Any, Any]:
        return Specification.at_most(self.selector(), item_specification, count)

    def __repr__(self) -> str:
        return f"Field({self.path!r})"


def field(path: str | None = None) -> Field:
    return Field(path)
