"""
Specification exception hierarchy.

All exceptions inherit from ``SpecificationError`` and provide
``to_dict()`` for API-friendly error responses.  Errors raised by
caller-supplied selectors or by the regular-expression engine are never
wrapped; they reach the caller unchanged.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


class SpecificationError(Exception):
    """Base exception for all specification errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class InvalidArgumentError(SpecificationError, ValueError):
    """A required constructor argument was missing."""

    def __init__(self, argument: str, message: str | None = None) -> None:
        self.argument = argument
        super().__init__(message or f"Argument '{argument}' must not be None")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "INVALID_ARGUMENT",
            "argument": self.argument,
            "message": str(self),
        }


class ExpressionError(SpecificationError):
    """An expression tree is malformed and cannot be compiled or combined."""


class TranslationError(SpecificationError):
    """
    An expression node has no portable representation.

    Raised for opaque ``invoke`` nodes, which wrap arbitrary Python
    callables that a query provider cannot see into.
    """

    def __init__(self, node_kind: str, message: str | None = None) -> None:
        self.node_kind = node_kind
        super().__init__(
            message or f"Node of kind '{node_kind}' cannot be translated"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "TRANSLATION_ERROR",
            "node": self.node_kind,
            "message": str(self),
        }


class ValidationError(SpecificationError):
    """Portable expression document validation failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALIDATION_ERROR",
            "message": self.message,
            "path": self.path,
        }


class NodeKindNotFoundError(ValidationError):
    """
    Unknown node kind in a portable document.

    Provides fuzzy-matched suggestions for likely intended kinds.
    """

    def __init__(
        self, node_kind: str, valid_kinds: list[str], path: str | None = None
    ) -> None:
        self.node_kind = node_kind
        self.valid_kinds = valid_kinds
        self.suggestions = get_close_matches(node_kind, valid_kinds, n=3, cutoff=0.6)

        message = f"Unknown node kind: '{node_kind}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message, path=path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "NODE_KIND_NOT_FOUND",
            "node": self.node_kind,
            "path": self.path,
            "suggestions": self.suggestions,
            "valid_kinds": sorted(self.valid_kinds),
        }
