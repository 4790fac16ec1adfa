"""Binding of property selectors onto a specification's parameter."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Union

from .exceptions import InvalidArgumentError
from .expressions import Expression, Lambda, Parameter, invoke, path
from .visitor import ParameterRebinder

# A dotted attribute path, a one-parameter lambda expression, or an
# opaque callable (evaluable in memory only).
Selector = Union[str, Lambda[Any], Callable[[Any], Any]]


def require_selector(selector: Selector | None, argument: str) -> Selector:
    """
    Check that ``selector`` has one of the supported shapes.

    Raises:
        InvalidArgumentError: If ``selector`` is ``None`` or of an
            unsupported type.
    """
    if selector is None:
        raise InvalidArgumentError(argument)
    if not (isinstance(selector, str | Lambda) or callable(selector)):
        raise InvalidArgumentError(
            argument,
            f"Argument '{argument}' must be an attribute path, a lambda "
            f"expression or a callable, got {type(selector).__name__}",
        )
    return selector


def bind_selector(
    selector: Selector,
    entity: Parameter,
    *,
    argument: str = "property_selector",
) -> Expression:
    """Return an expression selecting a value from ``entity``."""
    selector = require_selector(selector, argument)
    if isinstance(selector, str):
        return path(entity, selector)
    if isinstance(selector, Lambda):
        return ParameterRebinder(selector.parameter, entity).visit(selector.body)
    return invoke(selector, entity)
