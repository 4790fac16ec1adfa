"""
Portable dictionary / JSON form of expression trees.

The portable form is what crosses a process boundary on its way to a
query provider::

    {
        "node": "lambda",
        "parameter": "entity",
        "body": {
            "node": "regex_match",
            "operand": {
                "node": "member",
                "target": {"node": "parameter", "name": "entity"},
                "name": "name",
            },
            "pattern": "^A",
            "flags": 0,
        },
    }

Parameters are referenced by name and resolved against the enclosing
lambdas, innermost first.  Opaque ``invoke`` nodes have no portable form.

Constants that JSON cannot represent directly (``datetime``, ``date``,
``time``, ``timedelta``, ``UUID``, ``Decimal``, ``bytes``) carry a
``type`` tag and are restored on read::

    {"node": "constant", "value": "2024-01-01T00:00:00", "type": "datetime"}

Any other constant whose JSON form differs from the value is rejected
with :class:`TranslationError`.
"""

from __future__ import annotations

import datetime
import json
import logging
import uuid
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError, to_jsonable_python

from .exceptions import (
    NodeKindNotFoundError,
    TranslationError,
    ValidationError,
)
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
    and_also,
    compare,
    constant,
    exclusive_or,
    lambda_,
    member,
    not_,
    or_else,
    parameter,
    regex_match,
    sequence_all,
    sequence_any,
    sequence_count,
)
from .operators import ComparisonOperator, NodeKind
from .visitor import ExpressionVisitor

logger = logging.getLogger(__name__)

_VALID_KINDS: list[str] = [k.value for k in NodeKind]

# Constant types written with a ``type`` tag and restored on read.
# ``datetime`` precedes ``date`` since it is a subclass.
_CONSTANT_TYPES: dict[str, type[Any]] = {
    "datetime": datetime.datetime,
    "date": datetime.date,
    "time": datetime.time,
    "interval": datetime.timedelta,
    "uuid": uuid.UUID,
    "decimal": Decimal,
    "bytes": bytes,
}
_CONSTANT_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    tag: TypeAdapter(tp) for tag, tp in _CONSTANT_TYPES.items()
}


def _constant_type(value: Any) -> str | None:
    for tag, tp in _CONSTANT_TYPES.items():
        if isinstance(value, tp):
            return tag
    return None


class ExpressionSerializer(ExpressionVisitor[dict[str, Any]]):
    """Renders a tree in its portable dictionary form."""

    def serialize(self, expression: Expression) -> dict[str, Any]:
        data = self.visit(expression)
        logger.debug("Serialized expression %s", expression)
        return data

    def visit_parameter(self, node: Parameter) -> dict[str, Any]:
        return {"node": node.kind.value, "name": node.name}

    def visit_constant(self, node: Constant) -> dict[str, Any]:
        value = node.value
        try:
            portable = to_jsonable_python(value)
        except PydanticSerializationError as exc:
            raise TranslationError(
                node.kind.value,
                f"Constant of type '{type(value).__name__}' cannot be "
                f"serialized: {exc}",
            ) from exc

        tag = _constant_type(value)
        if tag is not None:
            return {"node": node.kind.value, "value": portable, "type": tag}
        if portable != value:
            raise TranslationError(
                node.kind.value,
                f"Constant of type '{type(value).__name__}' has no lossless "
                f"portable form",
            )
        return {"node": node.kind.value, "value": portable}

    def visit_member(self, node: Member) -> dict[str, Any]:
        return {
            "node": node.kind.value,
            "target": self.visit(node.target),
            "name": node.name,
        }

    def visit_invoke(self, node: Invoke) -> dict[str, Any]:
        name = getattr(node.function, "__qualname__", repr(node.function))
        raise TranslationError(
            node.kind.value,
            f"Opaque callable '{name}' cannot be translated; "
            f"select values with an attribute path or a lambda expression",
        )

    def visit_not(self, node: Not) -> dict[str, Any]:
        return {"node": node.kind.value, "operand": self.visit(node.operand)}

    def _binary(self, node: BinaryExpression) -> dict[str, Any]:
        return {
            "node": node.kind.value,
            "left": self.visit(node.left),
            "right": self.visit(node.right),
        }

    visit_and_also = _binary
    visit_or_else = _binary
    visit_exclusive_or = _binary

    def visit_compare(self, node: Compare) -> dict[str, Any]:
        return {
            "node": node.kind.value,
            "op": node.operator.value,
            "left": self.visit(node.left),
            "right": self.visit(node.right),
        }

    def _sequence(self, node: SequencePredicate) -> dict[str, Any]:
        return {
            "node": node.kind.value,
            "source": self.visit(node.source),
            "predicate": self.visit(node.predicate),
        }

    visit_any = _sequence
    visit_all = _sequence
    visit_count = _sequence

    def visit_regex_match(self, node: RegexMatch) -> dict[str, Any]:
        return {
            "node": node.kind.value,
            "operand": self.visit(node.operand),
            "pattern": node.pattern,
            "flags": node.flags,
        }

    def visit_lambda(self, node: Lambda[Any]) -> dict[str, Any]:
        return {
            "node": node.kind.value,
            "parameter": node.parameter.name,
            "body": self.visit(node.body),
        }


class ExpressionFactory:
    """
    Rebuilds expression trees from their portable form.

    Supports:
    - ``from_dict(data)``: parse a nested dict tree
    - ``from_json(text)``: parse a JSON string
    - ``validate(data)``: collect every error without constructing
    """

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Lambda[Any]:
        """
        Create a lambda expression from a dictionary.

        Raises:
            ValidationError: On the first structural problem found.
            NodeKindNotFoundError: On an unknown ``node`` value.
        """
        result = _DocumentReader().read_lambda(data)
        if result is None:
            raise ValidationError("Document could not be read", path="<root>")
        return result

    @staticmethod
    def from_json(text: str) -> Lambda[Any]:
        """Parse a JSON string and build a lambda expression."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Invalid JSON: {exc}", path="<root>") from exc

        if not isinstance(data, dict):
            raise ValidationError(
                "Top-level JSON value must be an object", path="<root>"
            )
        return ExpressionFactory.from_dict(data)

    @staticmethod
    def validate(data: Any) -> list[str]:
        """
        Validate a portable document and return a list of error messages.

        Returns an empty list when the document is valid.
        """
        reader = _DocumentReader(collect=True)
        reader.read_lambda(data)
        return reader.errors


Scope = tuple[Parameter, ...]


class _DocumentReader:
    """
    Recursive reader for portable documents.

    Fails fast by default.  With ``collect=True`` errors are recorded in
    :attr:`errors` and reading carries on with the sibling nodes.
    """

    def __init__(self, *, collect: bool = False) -> None:
        self.errors: list[str] = []
        self._collect = collect

    # -- entry points --------------------------------------------------------

    def read_lambda(
        self, data: Any, path: str = "<root>", scope: Scope = ()
    ) -> Lambda[Any] | None:
        node = self.read(data, path, scope)
        if node is None:
            return None
        if not isinstance(node, Lambda):
            return self._fail(
                f"Expected a 'lambda' node, got '{node.kind.value}'", path
            )
        return node

    def read(self, data: Any, path: str, scope: Scope) -> Expression | None:
        if not isinstance(data, dict):
            return self._fail(f"Expected a dict, got {type(data).__name__}", path)

        kind = data.get("node")
        if not kind or not isinstance(kind, str):
            return self._fail("Missing or empty 'node' key", path)

        try:
            node_kind = NodeKind(kind)
        except ValueError:
            return self._reject(NodeKindNotFoundError(kind, _VALID_KINDS, path=path))

        reader: Callable[[dict[str, Any], str, Scope], Expression | None] = getattr(
            self, f"_read_{node_kind.value}"
        )
        return reader(data, path, scope)

    # -- error handling ------------------------------------------------------

    def _reject(self, error: ValidationError) -> None:
        if not self._collect:
            raise error
        self.errors.append(f"{error.path}: {error.message}")

    def _fail(self, message: str, path: str) -> None:
        self._reject(ValidationError(message, path=path))

    # -- field helpers -------------------------------------------------------

    def _child(
        self, data: dict[str, Any], key: str, path: str, scope: Scope
    ) -> Expression | None:
        if key not in data:
            return self._fail(f"Missing '{key}'", path)
        return self.read(data[key], f"{path}.{key}", scope)

    def _string(
        self, data: dict[str, Any], key: str, path: str, *, allow_empty: bool = False
    ) -> str | None:
        value = data.get(key)
        if not isinstance(value, str):
            return self._fail(f"'{key}' must be a string", path)
        if not value and not allow_empty:
            return self._fail(f"'{key}' must be a non-empty string", path)
        return value

    # -- node readers --------------------------------------------------------

    def _read_parameter(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        name = self._string(data, "name", path)
        if name is None:
            return None
        for bound in reversed(scope):
            if bound.name == name:
                return bound
        return self._fail(
            f"Parameter '{name}' is not bound by an enclosing lambda", path
        )

    def _read_constant(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        if "value" not in data:
            return self._fail("Missing 'value'", path)
        value = data["value"]
        tag = data.get("type")
        if tag is None:
            return constant(value)
        adapter = _CONSTANT_ADAPTERS.get(tag) if isinstance(tag, str) else None
        if adapter is None:
            return self._fail(f"Unknown constant type {tag!r}", path)
        try:
            return constant(adapter.validate_python(value))
        except ValueError:
            return self._fail(f"Invalid '{tag}' constant: {value!r}", path)

    def _read_member(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        target = self._child(data, "target", path, scope)
        name = self._string(data, "name", path)
        if target is None or name is None:
            return None
        return member(target, name)

    def _read_invoke(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        return self._fail("'invoke' nodes have no portable form", path)

    def _read_not(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        operand = self._child(data, "operand", path, scope)
        return None if operand is None else not_(operand)

    def _binary(
        self,
        factory: Callable[[Expression, Expression], Expression],
        data: dict[str, Any],
        path: str,
        scope: Scope,
    ) -> Expression | None:
        left = self._child(data, "left", path, scope)
        right = self._child(data, "right", path, scope)
        if left is None or right is None:
            return None
        return factory(left, right)

    def _read_and_also(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        return self._binary(and_also, data, path, scope)

    def _read_or_else(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        return self._binary(or_else, data, path, scope)

    def _read_exclusive_or(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        return self._binary(exclusive_or, data, path, scope)

    def _read_compare(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        op = data.get("op")
        valid = [m.value for m in ComparisonOperator]
        if op not in valid:
            self._fail(f"Unknown comparison operator {op!r}", path)
            op = None
        left = self._child(data, "left", path, scope)
        right = self._child(data, "right", path, scope)
        if op is None or left is None or right is None:
            return None
        return compare(op, left, right)

    def _sequence(
        self,
        factory: Callable[[Expression, Lambda[Any]], Expression],
        data: dict[str, Any],
        path: str,
        scope: Scope,
    ) -> Expression | None:
        source = self._child(data, "source", path, scope)
        if "predicate" not in data:
            return self._fail("Missing 'predicate'", path)
        predicate = self.read_lambda(data["predicate"], f"{path}.predicate", scope)
        if source is None or predicate is None:
            return None
        return factory(source, predicate)

    def _read_any(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        return self._sequence(sequence_any, data, path, scope)

    def _read_all(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        return self._sequence(sequence_all, data, path, scope)

    def _read_count(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        return self._sequence(sequence_count, data, path, scope)

    def _read_regex_match(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        operand = self._child(data, "operand", path, scope)
        pattern = self._string(data, "pattern", path, allow_empty=True)
        flags = data.get("flags", 0)
        if not isinstance(flags, int) or isinstance(flags, bool):
            self._fail("'flags' must be an integer", path)
            flags = None
        if operand is None or pattern is None or flags is None:
            return None
        return regex_match(operand, pattern, flags)

    def _read_lambda(
        self, data: dict[str, Any], path: str, scope: Scope
    ) -> Expression | None:
        name = self._string(data, "parameter", path)
        if name is None:
            return None
        param = parameter(name)
        body = self._child(data, "body", path, (*scope, param))
        return None if body is None else lambda_(param, body)
