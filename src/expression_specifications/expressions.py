"""
Typed, boolean-valued expression trees.

Every specification produces a :class:`Lambda` of exactly one
:class:`Parameter`.  Nodes are immutable and compared by identity, so
two parameters named ``entity`` are still distinct parameters.

Example::

    entity = parameter("entity")
    tree = lambda_(
        entity,
        and_also(
            compare("=", path(entity, "status"), constant("active")),
            regex_match(path(entity, "name"), "^A"),
        ),
    )
    tree.compile()(customer)
"""

from __future__ import annotations

import re
from abc import ABC
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from .exceptions import ExpressionError
from .operators import ComparisonOperator, NodeKind

T = TypeVar("T")


class Expression(ABC):
    """Base class for all expression tree nodes."""

    kind: ClassVar[NodeKind]
    # Names of the dataclass fields holding child nodes, in visit order.
    child_fields: ClassVar[tuple[str, ...]] = ()

    def children(self) -> tuple[Expression, ...]:
        return tuple(getattr(self, name) for name in self.child_fields)

    def __str__(self) -> str:
        from .visitor import ExpressionFormatter

        return ExpressionFormatter().visit(self)


@dataclass(frozen=True, eq=False)
class Parameter(Expression):
    name: str = "entity"

    kind = NodeKind.PARAMETER


@dataclass(frozen=True, eq=False)
class Constant(Expression):
    value: Any

    kind = NodeKind.CONSTANT


@dataclass(frozen=True, eq=False)
class Member(Expression):
    """Attribute (or mapping key) access on ``target``."""

    target: Expression
    name: str

    kind = NodeKind.MEMBER
    child_fields = ("target",)


@dataclass(frozen=True, eq=False)
class Invoke(Expression):
    """
    Application of an opaque Python callable.

    Evaluates in memory like any other node but is not
    provider-translatable: nothing outside the process can see into it.
    """

    function: Callable[[Any], Any]
    argument: Expression

    kind = NodeKind.INVOKE
    child_fields = ("argument",)


@dataclass(frozen=True, eq=False)
class Not(Expression):
    operand: Expression

    kind = NodeKind.NOT
    child_fields = ("operand",)


@dataclass(frozen=True, eq=False)
class BinaryExpression(Expression):
    left: Expression
    right: Expression

    child_fields = ("left", "right")


@dataclass(frozen=True, eq=False)
class AndAlso(BinaryExpression):
    kind = NodeKind.AND_ALSO


@dataclass(frozen=True, eq=False)
class OrElse(BinaryExpression):
    kind = NodeKind.OR_ELSE


@dataclass(frozen=True, eq=False)
class ExclusiveOr(BinaryExpression):
    kind = NodeKind.EXCLUSIVE_OR


@dataclass(frozen=True, eq=False)
class Compare(Expression):
    operator: ComparisonOperator
    left: Expression
    right: Expression

    kind = NodeKind.COMPARE
    child_fields = ("left", "right")


@dataclass(frozen=True, eq=False)
class SequencePredicate(Expression):
    """Applies ``predicate`` to every item of the iterable ``source``."""

    source: Expression
    predicate: Lambda[Any]

    child_fields = ("source", "predicate")


@dataclass(frozen=True, eq=False)
class SequenceAny(SequencePredicate):
    kind = NodeKind.ANY


@dataclass(frozen=True, eq=False)
class SequenceAll(SequencePredicate):
    kind = NodeKind.ALL


@dataclass(frozen=True, eq=False)
class SequenceCount(SequencePredicate):
    """Number of items satisfying ``predicate`` (an integer, not a boolean)."""

    kind = NodeKind.COUNT


@dataclass(frozen=True, eq=False)
class RegexMatch(Expression):
    """
    Searches the text form of ``operand`` for ``pattern``.

    An absent (``None``) operand is matched as the empty string.
    """

    operand: Expression
    pattern: str
    flags: int = 0

    kind = NodeKind.REGEX_MATCH
    child_fields = ("operand",)


@dataclass(frozen=True, eq=False)
class Lambda(Expression, Generic[T]):
    """A single-parameter function ``T -> body``."""

    parameter: Parameter
    body: Expression

    kind = NodeKind.LAMBDA
    child_fields = ("parameter", "body")

    def compile(self) -> Callable[[T], Any]:
        """Compile the tree into a plain Python callable."""
        from .compiler import ExpressionCompiler

        return ExpressionCompiler().compile(self)

    @property
    def is_translatable(self) -> bool:
        return is_translatable(self)


# -- traversal ---------------------------------------------------------------


def walk(node: Expression) -> Iterator[Expression]:
    """Yield ``node`` and all of its descendants, pre-order."""
    yield node
    for child in node.children():
        yield from walk(child)


def is_translatable(node: Expression) -> bool:
    """
    True if a query provider could translate the tree.

    Only opaque ``invoke`` nodes make a tree untranslatable.
    """
    return not any(n.kind is NodeKind.INVOKE for n in walk(node))


# -- factories ---------------------------------------------------------------


def parameter(name: str = "entity") -> Parameter:
    return Parameter(name)


def constant(value: Any) -> Constant:
    return Constant(value)


def member(target: Expression, name: str) -> Member:
    return Member(target, name)


def path(target: Expression, attr_path: str) -> Expression:
    """Build a chain of member accesses from a dot-separated path."""
    node = target
    for part in attr_path.split("."):
        if not part:
            raise ExpressionError(f"Invalid attribute path: '{attr_path}'")
        node = Member(node, part)
    return node


def invoke(function: Callable[[Any], Any], argument: Expression) -> Invoke:
    return Invoke(function, argument)


def not_(operand: Expression) -> Not:
    return Not(operand)


def and_also(left: Expression, right: Expression) -> AndAlso:
    return AndAlso(left, right)


def or_else(left: Expression, right: Expression) -> OrElse:
    return OrElse(left, right)


def exclusive_or(left: Expression, right: Expression) -> ExclusiveOr:
    return ExclusiveOr(left, right)


def compare(
    op: ComparisonOperator | str, left: Expression, right: Expression
) -> Compare:
    return Compare(ComparisonOperator(op), left, right)


def _require_lambda(predicate: Any) -> Lambda[Any]:
    if not isinstance(predicate, Lambda):
        raise ExpressionError(
            f"Sequence predicate must be a lambda, got {type(predicate).__name__}"
        )
    return predicate


def sequence_any(source: Expression, predicate: Lambda[Any]) -> SequenceAny:
    return SequenceAny(source, _require_lambda(predicate))


def sequence_all(source: Expression, predicate: Lambda[Any]) -> SequenceAll:
    return SequenceAll(source, _require_lambda(predicate))


def sequence_count(source: Expression, predicate: Lambda[Any]) -> SequenceCount:
    return SequenceCount(source, _require_lambda(predicate))


def regex_match(
    operand: Expression, pattern: str, flags: int | re.RegexFlag = 0
) -> RegexMatch:
    return RegexMatch(operand, pattern, int(flags))


def lambda_(param: Parameter, body: Expression) -> Lambda[Any]:
    if not isinstance(param, Parameter):
        raise ExpressionError(
            f"Lambda parameter must be a Parameter, got {type(param).__name__}"
        )
    return Lambda(param, body)
