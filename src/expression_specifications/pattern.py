from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from .base import Specification, require_argument
from .expressions import Lambda, lambda_, parameter, regex_match
from .selectors import bind_selector, require_selector

if TYPE_CHECKING:
    from .selectors import Selector

T = TypeVar("T")


class RegexMatchSpecification(Specification[T]):
    """
    Satisfied if the selected value's text form matches ``pattern``.

    Matching uses ``re.search`` semantics (unanchored unless the pattern
    anchors itself).  A ``None`` value is matched as the empty string, so
    ``".*"`` matches it and ``"^x"`` does not.  The pattern is not
    compiled here; a malformed pattern raises ``re.error`` on evaluation.
    """

    def __init__(
        self, property_selector: Selector, pattern: str, flags: int = 0
    ) -> None:
        self.property_selector = require_selector(
            property_selector, "property_selector"
        )
        self.pattern = require_argument(pattern, "pattern")
        self.flags = flags

    def to_expression(self) -> Lambda[T]:
        entity = parameter("entity")
        value = bind_selector(self.property_selector, entity)
        return lambda_(entity, regex_match(value, self.pattern, self.flags))
