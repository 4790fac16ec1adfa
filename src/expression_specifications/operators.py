from enum import Enum


class NodeKind(str, Enum):
    """Kinds of nodes an expression tree is built from."""

    # Leaves
    PARAMETER = "parameter"
    CONSTANT = "constant"

    # Access
    MEMBER = "member"
    INVOKE = "invoke"

    # Logical
    NOT = "not"
    AND_ALSO = "and_also"
    OR_ELSE = "or_else"
    EXCLUSIVE_OR = "exclusive_or"

    # Comparison
    COMPARE = "compare"

    # Sequence predicates
    ANY = "any"
    ALL = "all"
    COUNT = "count"

    # Text
    REGEX_MATCH = "regex_match"

    LAMBDA = "lambda"


class ComparisonOperator(str, Enum):
    """Supported comparison operators."""

    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
