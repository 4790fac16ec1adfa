from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import (
    TYPE_CHECKING,
    Any,
    Generic,
    Protocol,
    TypeVar,
    runtime_checkable,
)

from .exceptions import InvalidArgumentError
from .expressions import (
    Expression,
    Lambda,
    Parameter,
    and_also,
    exclusive_or,
    is_translatable,
    lambda_,
    not_,
    or_else,
    parameter,
)
from .serialization import ExpressionFactory, ExpressionSerializer
from .visitor import ParameterRebinder

if TYPE_CHECKING:
    from .pattern import RegexMatchSpecification
    from .quantifiers import (
        AllSpecification,
        AnySpecification,
        AtLeastSpecification,
        AtMostSpecification,
    )
    from .selectors import Selector

T = TypeVar("T")
TItem = TypeVar("TItem")
V = TypeVar("V")


@runtime_checkable
class ISpecification(Protocol, Generic[T]):
    """
    Protocol for the Specification pattern.

    The single required operation is ``to_expression``; anything that
    provides it can be combined with the composites below.
    """

    def to_expression(self) -> Lambda[T]:
        """
        Return the specification as a one-parameter boolean lambda.

        The tree is rebuilt on every call and is never pre-compiled, so a
        query provider can translate it.
        """
        ...


def require_argument(value: V | None, argument: str) -> V:
    """Fail fast on a missing constructor argument."""
    if value is None:
        raise InvalidArgumentError(argument)
    return value


def require_specification(
    specification: ISpecification[V] | None, argument: str
) -> ISpecification[V]:
    """Fail fast on a missing child or one without ``to_expression``."""
    require_argument(specification, argument)
    if not isinstance(specification, ISpecification):
        raise InvalidArgumentError(
            argument,
            f"Argument '{argument}' must be a specification, "
            f"got {type(specification).__name__}",
        )
    return specification


class Specification(ABC, Generic[T]):
    """Base class for specifications with logic operator support."""

    @abstractmethod
    def to_expression(self) -> Lambda[T]: ...

    def is_satisfied_by(self, candidate: T) -> bool:
        """
        Compile the expression and apply it to ``candidate``.

        Compilation happens on every call; callers filtering many
        candidates should compile ``to_expression()`` once themselves.
        """
        predicate = self.to_expression().compile()
        return bool(predicate(candidate))

    @property
    def is_translatable(self) -> bool:
        """True if no part of the tree is an opaque Python callable."""
        return is_translatable(self.to_expression())

    def to_dict(self) -> dict[str, Any]:
        """Return the portable dictionary form of the expression."""
        return ExpressionSerializer().serialize(self.to_expression())

    def __str__(self) -> str:
        return str(self.to_expression())

    # -- combinators ---------------------------------------------------------

    def and_(self, other: ISpecification[T]) -> AndSpecification[T]:
        return AndSpecification(self, other)

    def or_(self, other: ISpecification[T]) -> OrSpecification[T]:
        return OrSpecification(self, other)

    def not_(self) -> NotSpecification[T]:
        return NotSpecification(self)

    def nand(self, other: ISpecification[T]) -> NandSpecification[T]:
        return NandSpecification(self, other)

    def nor(self, other: ISpecification[T]) -> NorSpecification[T]:
        return NorSpecification(self, other)

    def xor(self, other: ISpecification[T]) -> XorSpecification[T]:
        return XorSpecification(self, other)

    def xnor(self, other: ISpecification[T]) -> XnorSpecification[T]:
        return XnorSpecification(self, other)

    def __and__(self, other: ISpecification[T]) -> AndSpecification[T]:
        return AndSpecification(self, other)

    def __or__(self, other: ISpecification[T]) -> OrSpecification[T]:
        return OrSpecification(self, other)

    def __xor__(self, other: ISpecification[T]) -> XorSpecification[T]:
        return XorSpecification(self, other)

    def __invert__(self) -> NotSpecification[T]:
        return NotSpecification(self)

    # -- factories -----------------------------------------------------------

    @staticmethod
    def any(
        property_selector: Selector, item_specification: ISpecification[TItem]
    ) -> AnySpecification[Any, TItem]:
        from .quantifiers import AnySpecification

        return AnySpecification(property_selector, item_specification)

    @staticmethod
    def all(
        property_selector: Selector, item_specification: ISpecification[TItem]
    ) -> AllSpecification[Any, TItem]:
        from .quantifiers import AllSpecification

        return AllSpecification(property_selector, item_specification)

    @staticmethod
    def at_least(
        property_selector: Selector,
        item_specification: ISpecification[TItem],
        count: int,
    ) -> AtLeastSpecification[Any, TItem]:
        from .quantifiers import AtLeastSpecification

        return AtLeastSpecification(property_selector, item_specification, count)

    @staticmethod
    def at_most(
        property_selector: Selector,
        item_specification: ISpecification[TItem],
        count: int,
    ) -> AtMostSpecification[Any, TItem]:
        from .quantifiers import AtMostSpecification

        return AtMostSpecification(property_selector, item_specification, count)

    @staticmethod
    def regex_match(
        property_selector: Selector, pattern: str, flags: int = 0
    ) -> RegexMatchSpecification[Any]:
        from .pattern import RegexMatchSpecification

        return RegexMatchSpecification(property_selector, pattern, flags)


class ExpressionSpecification(Specification[T]):
    """
    Leaf specification wrapping a caller-built lambda expression.

    Usage::

        adult = ExpressionSpecification.build(
            lambda entity: compare(">=", path(entity, "age"), constant(18))
        )
    """

    def __init__(self, expression: Lambda[T]) -> None:
        require_argument(expression, "expression")
        if not isinstance(expression, Lambda):
            raise InvalidArgumentError(
                "expression",
                f"Argument 'expression' must be a lambda expression, "
                f"got {type(expression).__name__}",
            )
        self.expression = expression

    def to_expression(self) -> Lambda[T]:
        return self.expression

    @classmethod
    def build(
        cls,
        body: Callable[[Parameter], Expression],
        parameter_name: str = "entity",
    ) -> ExpressionSpecification[Any]:
        """Build the lambda from a function of its parameter."""
        param = parameter(parameter_name)
        return cls(lambda_(param, body(param)))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExpressionSpecification[Any]:
        return cls(ExpressionFactory.from_dict(data))

    @classmethod
    def from_json(cls, text: str) -> ExpressionSpecification[Any]:
        return cls(ExpressionFactory.from_json(text))


# -- composites --------------------------------------------------------------


class BinarySpecification(Specification[T]):
    """
    Combines two specifications under one shared parameter.

    The right child's parameter is rebound to the left child's, so the
    result is a lambda of exactly one parameter.
    """

    def __init__(self, left: ISpecification[T], right: ISpecification[T]) -> None:
        self.left = require_specification(left, "left")
        self.right = require_specification(right, "right")

    def to_expression(self) -> Lambda[T]:
        left = self.left.to_expression()
        right = self.right.to_expression()
        right_body = ParameterRebinder(right.parameter, left.parameter).visit(
            right.body
        )
        return lambda_(left.parameter, self._combine(left.body, right_body))

    @abstractmethod
    def _combine(self, left: Expression, right: Expression) -> Expression: ...


class AndSpecification(BinarySpecification[T]):
    """Logical AND composite specification."""

    def _combine(self, left: Expression, right: Expression) -> Expression:
        return and_also(left, right)


class OrSpecification(BinarySpecification[T]):
    """Logical OR composite specification."""

    def _combine(self, left: Expression, right: Expression) -> Expression:
        return or_else(left, right)


class NandSpecification(BinarySpecification[T]):
    """Logical NOT-AND composite specification."""

    def _combine(self, left: Expression, right: Expression) -> Expression:
        return not_(and_also(left, right))


class NorSpecification(BinarySpecification[T]):
    """Logical NOT-OR composite specification."""

    def _combine(self, left: Expression, right: Expression) -> Expression:
        return not_(or_else(left, right))


class XorSpecification(BinarySpecification[T]):
    """Logical exclusive-OR composite specification."""

    def _combine(self, left: Expression, right: Expression) -> Expression:
        return exclusive_or(left, right)


class XnorSpecification(BinarySpecification[T]):
    """Logical equivalence (NOT exclusive-OR) composite specification."""

    def _combine(self, left: Expression, right: Expression) -> Expression:
        return not_(exclusive_or(left, right))


class NotSpecification(Specification[T]):
    """Logical NOT composite specification."""

    def __init__(self, specification: ISpecification[T]) -> None:
        self.specification = require_specification(
            specification, "specification"
        )

    def to_expression(self) -> Lambda[T]:
        inner = self.specification.to_expression()
        return lambda_(inner.parameter, not_(inner.body))
