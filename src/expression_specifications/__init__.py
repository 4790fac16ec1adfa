from .base import (
    AndSpecification,
    BinarySpecification,
    ExpressionSpecification,
    ISpecification,
    NandSpecification,
    NorSpecification,
    NotSpecification,
    OrSpecification,
    Specification,
    XnorSpecification,
    XorSpecification,
)
from .exceptions import (
    ExpressionError,
    InvalidArgumentError,
    NodeKindNotFoundError,
    SpecificationError,
    TranslationError,
    ValidationError,
)
from .expressions import Expression, Lambda, Parameter, is_translatable, walk
from .fields import Field, field
from .operators import ComparisonOperator, NodeKind
from .pattern import RegexMatchSpecification
from .quantifiers import (
    AllSpecification,
    AnySpecification,
    AtLeastSpecification,
    AtMostSpecification,
)
from .selectors import Selector
from .serialization import ExpressionFactory
from .visitor import ExpressionFormatter, ExpressionVisitor

__all__ = [
    # Core types
    "ISpecification",
    "Specification",
    "ExpressionSpecification",
    # Combinators
    "BinarySpecification",
    "AndSpecification",
    "OrSpecification",
    "NotSpecification",
    "NandSpecification",
    "NorSpecification",
    "XorSpecification",
    "XnorSpecification",
    # Quantifiers
    "AnySpecification",
    "AllSpecification",
    "AtLeastSpecification",
    "AtMostSpecification",
    # Pattern matching
    "RegexMatchSpecification",
    # Field DSL
    "Field",
    "field",
    # Expression trees
    "NodeKind",
    "ComparisonOperator",
    "Expression",
    "Lambda",
    "Parameter",
    "Selector",
    "walk",
    "is_translatable",
    "ExpressionVisitor",
    "ExpressionFormatter",
    # Portable form
    "ExpressionFactory",
    # Exceptions
    "SpecificationError",
    "InvalidArgumentError",
    "ExpressionError",
    "TranslationError",
    "ValidationError",
    "NodeKindNotFoundError",
]
