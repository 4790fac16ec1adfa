"""
Compilation of expression trees into Python callables.

Each node becomes a closure over an evaluation scope that maps the
parameters bound so far to their arguments.  Parameters are looked up by
identity; a parameter not bound by an enclosing lambda is rejected at
compile time rather than at evaluation time.
"""

from __future__ import annotations

import logging
import operator
import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from .exceptions import ExpressionError
from .expressions import Lambda
from .operators import ComparisonOperator
from .visitor import ExpressionVisitor

if TYPE_CHECKING:
    from .expressions import (
        BinaryExpression,
        Compare,
        Constant,
        Invoke,
        Member,
        Not,
        Parameter,
        RegexMatch,
        SequencePredicate,
    )

logger = logging.getLogger(__name__)

T = TypeVar("T")

Scope = dict["Parameter", Any]
Evaluator = Callable[[Scope], Any]

_COMPARATORS: dict[ComparisonOperator, Callable[[Any, Any], Any]] = {
    ComparisonOperator.EQ: operator.eq,
    ComparisonOperator.NE: operator.ne,
    ComparisonOperator.GT: operator.gt,
    ComparisonOperator.LT: operator.lt,
    ComparisonOperator.GE: operator.ge,
    ComparisonOperator.LE: operator.le,
}


class ExpressionCompiler(ExpressionVisitor[Evaluator]):
    """
    Compiles a :class:`Lambda` into a callable.

    Usage::

        predicate = ExpressionCompiler().compile(spec.to_expression())
        matching = [c for c in customers if predicate(c)]
    """

    def __init__(self) -> None:
        self._bound: list[Parameter] = []

    def compile(self, expression: Lambda[T]) -> Callable[[T], Any]:
        if not isinstance(expression, Lambda):
            raise ExpressionError(
                f"Only lambda expressions can be compiled, "
                f"got '{expression.kind.value}'"
            )
        logger.debug("Compiling expression %s", expression)
        function: Callable[[T], Any] = self.visit(expression)({})
        return function

    # -- leaves --------------------------------------------------------------

    def visit_parameter(self, node: Parameter) -> Evaluator:
        if not any(bound is node for bound in self._bound):
            raise ExpressionError(
                f"Parameter '{node.name}' is not bound by an enclosing lambda"
            )
        return lambda scope: scope[node]

    def visit_constant(self, node: Constant) -> Evaluator:
        value = node.value
        return lambda scope: value

    # -- access --------------------------------------------------------------

    def visit_member(self, node: Member) -> Evaluator:
        target = self.visit(node.target)
        name = node.name

        def evaluate(scope: Scope) -> Any:
            obj = target(scope)
            if isinstance(obj, Mapping):
                return obj[name]
            return getattr(obj, name)

        return evaluate

    def visit_invoke(self, node: Invoke) -> Evaluator:
        function = node.function
        argument = self.visit(node.argument)
        return lambda scope: function(argument(scope))

    # -- logical -------------------------------------------------------------

    def visit_not(self, node: Not) -> Evaluator:
        operand = self.visit(node.operand)
        return lambda scope: not operand(scope)

    def _operands(self, node: BinaryExpression) -> tuple[Evaluator, Evaluator]:
        return self.visit(node.left), self.visit(node.right)

    def visit_and_also(self, node: BinaryExpression) -> Evaluator:
        left, right = self._operands(node)
        return lambda scope: bool(left(scope)) and bool(right(scope))

    def visit_or_else(self, node: BinaryExpression) -> Evaluator:
        left, right = self._operands(node)
        return lambda scope: bool(left(scope)) or bool(right(scope))

    def visit_exclusive_or(self, node: BinaryExpression) -> Evaluator:
        left, right = self._operands(node)
        return lambda scope: bool(left(scope)) != bool(right(scope))

    def visit_compare(self, node: Compare) -> Evaluator:
        comparator = _COMPARATORS[node.operator]
        left, right = self.visit(node.left), self.visit(node.right)
        return lambda scope: bool(comparator(left(scope), right(scope)))

    # -- sequences -----------------------------------------------------------

    def _sequence(self, node: SequencePredicate) -> tuple[Evaluator, Evaluator]:
        return self.visit(node.source), self.visit(node.predicate)

    def visit_any(self, node: SequencePredicate) -> Evaluator:
        source, predicate = self._sequence(node)

        def evaluate(scope: Scope) -> bool:
            test = predicate(scope)
            return any(test(item) for item in source(scope))

        return evaluate

    def visit_all(self, node: SequencePredicate) -> Evaluator:
        source, predicate = self._sequence(node)

        def evaluate(scope: Scope) -> bool:
            test = predicate(scope)
            return all(test(item) for item in source(scope))

        return evaluate

    def visit_count(self, node: SequencePredicate) -> Evaluator:
        source, predicate = self._sequence(node)

        def evaluate(scope: Scope) -> int:
            test = predicate(scope)
            return sum(1 for item in source(scope) if test(item))

        return evaluate

    # -- text ----------------------------------------------------------------

    def visit_regex_match(self, node: RegexMatch) -> Evaluator:
        operand = self.visit(node.operand)
        pattern, flags = node.pattern, node.flags

        def evaluate(scope: Scope) -> bool:
            value = operand(scope)
            text = "" if value is None else str(value)
            return re.search(pattern, text, flags) is not None

        return evaluate

    # -- functions -----------------------------------------------------------

    def visit_lambda(self, node: Lambda[Any]) -> Evaluator:
        param = node.parameter
        self._bound.append(param)
        try:
            body = self.visit(node.body)
        finally:
            self._bound.pop()

        def evaluate(scope: Scope) -> Callable[[Any], Any]:
            def function(argument: Any) -> Any:
                return body({**scope, param: argument})

            return function

        return evaluate
