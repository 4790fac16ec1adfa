"""Tests for the specification core and its logical combinators."""

from __future__ import annotations

import pytest

from expression_specifications import (
    AndSpecification,
    ExpressionSpecification,
    InvalidArgumentError,
    ISpecification,
    NandSpecification,
    NodeKind,
    NorSpecification,
    NotSpecification,
    OrSpecification,
    Specification,
    XnorSpecification,
    XorSpecification,
    field,
    walk,
)
from expression_specifications.expressions import (
    compare,
    constant,
    lambda_,
    parameter,
    path,
)


def _fixed(value: bool) -> ExpressionSpecification:
    return ExpressionSpecification.build(lambda entity: constant(value))


BOOLS = [(a, b) for a in (True, False) for b in (True, False)]


# -- truth tables ------------------------------------------------------------


@pytest.mark.parametrize(("a", "b"), BOOLS)
@pytest.mark.parametrize(
    ("combinator", "expected"),
    [
        ("and_", lambda a, b: a and b),
        ("or_", lambda a, b: a or b),
        ("nand", lambda a, b: not (a and b)),
        ("nor", lambda a, b: not (a or b)),
        ("xor", lambda a, b: a != b),
        ("xnor", lambda a, b: a == b),
    ],
)
def test_binary_combinators_follow_truth_table(a, b, combinator, expected):
    spec = getattr(_fixed(a), combinator)(_fixed(b))
    assert spec.is_satisfied_by(object()) is expected(a, b)


@pytest.mark.parametrize("value", [True, False])
def test_not_negates(value):
    spec = _fixed(value)
    assert spec.not_().is_satisfied_by(object()) is (not value)
    assert spec.not_().not_().is_satisfied_by(object()) is value


def test_combinators_on_real_entity(alice, bob):
    adult = field("age") >= 18
    named_a = field("name").matches("^A")

    assert adult.and_(named_a).is_satisfied_by(alice) is True
    assert adult.and_(named_a).is_satisfied_by(bob) is False
    assert adult.xor(named_a).is_satisfied_by(bob) is True
    assert adult.xnor(named_a).is_satisfied_by(alice) is True
    assert adult.nor(named_a).is_satisfied_by(bob) is False


def test_combinator_methods_return_expected_types():
    a, b = _fixed(True), _fixed(False)

    assert isinstance(a.and_(b), AndSpecification)
    assert isinstance(a.or_(b), OrSpecification)
    assert isinstance(a.not_(), NotSpecification)
    assert isinstance(a.nand(b), NandSpecification)
    assert isinstance(a.nor(b), NorSpecification)
    assert isinstance(a.xor(b), XorSpecification)
    assert isinstance(a.xnor(b), XnorSpecification)


def test_operator_overloads():
    a, b = _fixed(True), _fixed(False)

    assert isinstance(a & b, AndSpecification)
    assert isinstance(a | b, OrSpecification)
    assert isinstance(a ^ b, XorSpecification)
    assert isinstance(~a, NotSpecification)
    assert (a & b).is_satisfied_by(None) is False
    assert (a | b).is_satisfied_by(None) is True
    assert (a ^ b).is_satisfied_by(None) is True
    assert (~a).is_satisfied_by(None) is False


def test_combinators_do_not_mutate_operands():
    a, b = _fixed(True), _fixed(False)
    a_expression, b_expression = a.to_expression(), b.to_expression()

    a.and_(b).to_expression()

    assert a.to_expression() is a_expression
    assert b.to_expression() is b_expression


# -- parameter unification ---------------------------------------------------


def test_composite_binds_single_parameter():
    spec = (
        (field("age") >= 18)
        .and_(field("name").matches("^A"))
        .or_(field("tags").any(field() == "vip"))
        .xor(~(field("age") < 65))
    )
    expression = spec.to_expression()

    outer = {
        id(node)
        for node in walk(expression)
        if node.kind is NodeKind.PARAMETER and node.name == "entity"
    }
    assert outer == {id(expression.parameter)}


def test_xor_is_a_pure_tree_transform():
    spec = (field("age") >= 18).xnor(field("name").matches("^A"))
    kinds = {node.kind for node in walk(spec.to_expression())}

    assert NodeKind.EXCLUSIVE_OR in kinds
    assert NodeKind.INVOKE not in kinds
    assert spec.is_translatable is True


def test_not_reuses_child_parameter():
    inner = field("age") >= 18
    assert (~inner).to_expression().parameter is inner.to_expression().parameter


# -- construction failures ---------------------------------------------------


@pytest.mark.parametrize(
    ("factory", "argument"),
    [
        (lambda s: AndSpecification(None, s), "left"),
        (lambda s: OrSpecification(s, None), "right"),
        (lambda s: XorSpecification(None, s), "left"),
        (lambda s: XnorSpecification(s, None), "right"),
        (lambda s: NotSpecification(None), "specification"),
        (lambda s: s.nand(None), "right"),
    ],
)
def test_missing_operand_fails_fast(factory, argument):
    with pytest.raises(InvalidArgumentError) as exc_info:
        factory(_fixed(True))

    assert exc_info.value.argument == argument
    assert argument in str(exc_info.value)
    assert isinstance(exc_info.value, ValueError)


@pytest.mark.parametrize(
    ("factory", "argument"),
    [
        (lambda s: AndSpecification(s, 42), "right"),
        (lambda s: OrSpecification("age", s), "left"),
        (lambda s: NotSpecification(constant(True)), "specification"),
        (lambda s: s.xor(object()), "right"),
    ],
)
def test_non_specification_operand_fails_fast(factory, argument):
    with pytest.raises(
        InvalidArgumentError, match="must be a specification"
    ) as exc_info:
        factory(_fixed(True))

    assert exc_info.value.argument == argument


def test_expression_specification_requires_lambda():
    with pytest.raises(InvalidArgumentError, match="expression"):
        ExpressionSpecification(None)  # type: ignore[arg-type]
    with pytest.raises(InvalidArgumentError, match="lambda"):
        ExpressionSpecification(constant(True))  # type: ignore[arg-type]


# -- evaluation --------------------------------------------------------------


def test_is_satisfied_by_returns_bool(alice):
    spec = ExpressionSpecification.build(lambda entity: path(entity, "age"))
    assert spec.is_satisfied_by(alice) is True


def test_evaluation_errors_propagate_unchanged(alice):
    spec = Specification.regex_match(lambda customer: 1 / 0, ".*")
    with pytest.raises(ZeroDivisionError):
        spec.is_satisfied_by(alice)


def test_repeated_evaluation_is_stable(alice):
    spec = (field("age") >= 18) & field("tags").any(field() == "vip")
    assert [spec.is_satisfied_by(alice) for _ in range(3)] == [True, True, True]


# -- custom leaves -----------------------------------------------------------


class IsAdult:
    """Caller-defined leaf implementing only ``to_expression``."""

    def to_expression(self):
        entity = parameter("customer")
        return lambda_(entity, compare(">=", path(entity, "age"), constant(18)))


def test_custom_leaf_conforms_to_protocol():
    assert isinstance(IsAdult(), ISpecification)


def test_custom_leaf_combines_with_core(alice, anonymous):
    spec = field("name").matches("^A").and_(IsAdult())

    assert spec.is_satisfied_by(alice) is True
    assert spec.is_satisfied_by(anonymous) is False
    assert spec.to_expression().parameter.name == "entity"


def test_str_shows_expression():
    spec = (field("age") >= 18) & field("name").matches("^A")
    assert str(spec) == (
        "entity => ((entity.age >= 18) and regex_match(entity.name, '^A'))"
    )
