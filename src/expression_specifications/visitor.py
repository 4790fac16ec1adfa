"""
Visitor infrastructure for expression trees.

Visitors dispatch on :attr:`Expression.kind` to ``visit_<kind>`` methods,
so new node handling is added by defining a method rather than by
registering anything.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .exceptions import ExpressionError
from .operators import ComparisonOperator

if TYPE_CHECKING:
    from .expressions import (
        BinaryExpression,
        Compare,
        Constant,
        Expression,
        Invoke,
        Lambda,
        Member,
        Not,
        Parameter,
        RegexMatch,
        SequencePredicate,
    )

R = TypeVar("R")


class ExpressionVisitor(Generic[R]):
    """Dispatches each node to ``visit_<kind>`` or :meth:`generic_visit`."""

    def visit(self, node: Expression) -> R:
        method = getattr(self, f"visit_{node.kind.value}", None)
        if method is None:
            return self.generic_visit(node)
        result: R = method(node)
        return result

    def generic_visit(self, node: Expression) -> R:
        raise ExpressionError(
            f"{type(self).__name__} cannot handle node of kind '{node.kind.value}'"
        )


class ExpressionRewriter(ExpressionVisitor["Expression"]):
    """
    Rebuilds a tree bottom-up.

    Nodes whose children are unchanged are returned as-is, so rewriting a
    tree that contains nothing to rewrite yields the very same tree.
    """

    def generic_visit(self, node: Expression) -> Expression:
        changes: dict[str, Any] = {}
        for name in node.child_fields:
            child = getattr(node, name)
            rewritten = self.visit(child)
            if rewritten is not child:
                changes[name] = rewritten
        return replace(node, **changes) if changes else node  # type: ignore[type-var]


class ParameterRebinder(ExpressionRewriter):
    """Replaces every reference to ``source`` with ``target``."""

    def __init__(self, source: Parameter, target: Parameter) -> None:
        self._source = source
        self._target = target

    def visit_parameter(self, node: Parameter) -> Expression:
        return self._target if node is self._source else node


_SYMBOLS: dict[ComparisonOperator, str] = {ComparisonOperator.EQ: "=="}


class ExpressionFormatter(ExpressionVisitor[str]):
    """Renders a tree as readable text, e.g. ``entity => (entity.age > 18)``."""

    def visit_parameter(self, node: Parameter) -> str:
        return node.name

    def visit_constant(self, node: Constant) -> str:
        return repr(node.value)

    def visit_member(self, node: Member) -> str:
        return f"{self.visit(node.target)}.{node.name}"

    def visit_invoke(self, node: Invoke) -> str:
        name = getattr(node.function, "__qualname__", repr(node.function))
        return f"{name}({self.visit(node.argument)})"

    def visit_not(self, node: Not) -> str:
        return f"not {self.visit(node.operand)}"

    def _binary(self, node: BinaryExpression, word: str) -> str:
        return f"({self.visit(node.left)} {word} {self.visit(node.right)})"

    def visit_and_also(self, node: BinaryExpression) -> str:
        return self._binary(node, "and")

    def visit_or_else(self, node: BinaryExpression) -> str:
        return self._binary(node, "or")

    def visit_exclusive_or(self, node: BinaryExpression) -> str:
        return self._binary(node, "xor")

    def visit_compare(self, node: Compare) -> str:
        symbol = _SYMBOLS.get(node.operator, node.operator.value)
        return f"({self.visit(node.left)} {symbol} {self.visit(node.right)})"

    def _sequence(self, node: SequencePredicate) -> str:
        return (
            f"{node.kind.value}({self.visit(node.source)}, "
            f"{self.visit(node.predicate)})"
        )

    def visit_any(self, node: SequencePredicate) -> str:
        return self._sequence(node)

    def visit_all(self, node: SequencePredicate) -> str:
        return self._sequence(node)

    def visit_count(self, node: SequencePredicate) -> str:
        return self._sequence(node)

    def visit_regex_match(self, node: RegexMatch) -> str:
        return f"regex_match({self.visit(node.operand)}, {node.pattern!r})"

    def visit_lambda(self, node: Lambda[Any]) -> str:
        return f"{node.parameter.name} => {self.visit(node.body)}"
