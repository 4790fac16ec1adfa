"""Tests for quantifier specifications over collection properties."""

from __future__ import annotations

import pytest

from expression_specifications import (
    AllSpecification,
    AnySpecification,
    AtLeastSpecification,
    AtMostSpecification,
    InvalidArgumentError,
    NodeKind,
    Specification,
    field,
    walk,
)
from expression_specifications.expressions import lambda_, parameter, path


@pytest.fixture
def tag_is_vip():
    return field() == "vip"


@pytest.fixture
def entity():
    return {"name": "Alice", "tags": ["vip", "new"]}


# -- the basic scenario ------------------------------------------------------


def test_any(entity, tag_is_vip):
    assert AnySpecification("tags", tag_is_vip).is_satisfied_by(entity) is True


def test_all(entity, tag_is_vip):
    assert AllSpecification("tags", tag_is_vip).is_satisfied_by(entity) is False


def test_at_least(entity, tag_is_vip):
    assert AtLeastSpecification("tags", tag_is_vip, 1).is_satisfied_by(entity) is True
    assert AtLeastSpecification("tags", tag_is_vip, 2).is_satisfied_by(entity) is False


def test_at_most(entity, tag_is_vip):
    assert AtMostSpecification("tags", tag_is_vip, 0).is_satisfied_by(entity) is False
    assert AtMostSpecification("tags", tag_is_vip, 1).is_satisfied_by(entity) is True


# -- empty collections -------------------------------------------------------


@pytest.mark.parametrize("item_spec", [field() == "vip", field() != "vip"])
def test_empty_collection_edges(item_spec):
    empty = {"tags": []}

    assert AllSpecification("tags", item_spec).is_satisfied_by(empty) is True
    assert AnySpecification("tags", item_spec).is_satisfied_by(empty) is False
    assert AtLeastSpecification("tags", item_spec, 1).is_satisfied_by(empty) is False
    assert AtMostSpecification("tags", item_spec, 0).is_satisfied_by(empty) is True
    assert AtMostSpecification("tags", item_spec, 3).is_satisfied_by(empty) is True


@pytest.mark.parametrize(
    "tags", [[], ["vip"], ["new", "old"], ["vip", "vip", "new"]]
)
def test_zero_thresholds(tags, tag_is_vip):
    candidate = {"tags": tags}

    assert AtLeastSpecification("tags", tag_is_vip, 0).is_satisfied_by(candidate)
    assert AtMostSpecification("tags", tag_is_vip, 0).is_satisfied_by(
        candidate
    ) is ("vip" not in tags)


def test_none_collection_is_not_special_cased(tag_is_vip, alice):
    spec = AnySpecification("nicknames", tag_is_vip)
    with pytest.raises(TypeError):
        spec.is_satisfied_by(alice)


# -- nested entities ---------------------------------------------------------


def test_quantifier_over_models(alice, bob):
    shipped = field("status") == "shipped"
    big = field("total") > 100

    assert AnySpecification("orders", shipped).is_satisfied_by(alice) is True
    assert AllSpecification("orders", shipped).is_satisfied_by(alice) is False
    assert AtLeastSpecification("orders", big | shipped, 2).is_satisfied_by(alice)
    assert AllSpecification("orders", shipped).is_satisfied_by(bob) is True


def test_nested_quantifiers():
    customers = {
        "accounts": [
            {"tags": ["a", "b"]},
            {"tags": ["vip"]},
        ]
    }
    has_vip_tag = AnySpecification("tags", field() == "vip")
    spec = AnySpecification("accounts", has_vip_tag)

    assert spec.is_satisfied_by(customers) is True
    assert AllSpecification("accounts", has_vip_tag).is_satisfied_by(customers) is False


# -- selector forms ----------------------------------------------------------


def test_lambda_selector_is_rebound(entity, tag_is_vip):
    owner = parameter("owner")
    selector = lambda_(owner, path(owner, "tags"))
    spec = AnySpecification(selector, tag_is_vip)
    expression = spec.to_expression()

    assert spec.is_satisfied_by(entity) is True
    assert spec.is_translatable is True
    assert all(
        node is not owner for node in walk(expression)
    ), "selector parameter must be replaced"


def test_callable_selector_evaluates_but_is_not_translatable(entity, tag_is_vip):
    spec = AnySpecification(lambda e: e["tags"], tag_is_vip)

    assert spec.is_satisfied_by(entity) is True
    assert spec.is_translatable is False


def test_count_node_shape(tag_is_vip):
    expression = AtLeastSpecification("tags", tag_is_vip, 2).to_expression()
    kinds = [node.kind for node in walk(expression)]

    assert kinds[:3] == [NodeKind.LAMBDA, NodeKind.PARAMETER, NodeKind.COMPARE]
    assert NodeKind.COUNT in kinds
    assert expression.body.operator.value == ">="


# -- factories and construction ----------------------------------------------


def test_static_factories(entity, tag_is_vip):
    assert isinstance(Specification.any("tags", tag_is_vip), AnySpecification)
    assert isinstance(Specification.all("tags", tag_is_vip), AllSpecification)
    assert isinstance(
        Specification.at_least("tags", tag_is_vip, 1), AtLeastSpecification
    )
    spec = tag_is_vip.at_most("tags", tag_is_vip, 0)
    assert isinstance(spec, AtMostSpecification)
    assert spec.is_satisfied_by(entity) is False


@pytest.mark.parametrize(
    ("args", "argument"),
    [
        ((None, field() == "vip"), "property_selector"),
        (("tags", None), "item_specification"),
        (("tags", "vip"), "item_specification"),
        ((42, field() == "vip"), "property_selector"),
    ],
)
def test_construction_failures(args, argument):
    with pytest.raises(InvalidArgumentError) as exc_info:
        AnySpecification(*args)
    assert exc_info.value.argument == argument


def test_threshold_is_not_validated(entity, tag_is_vip):
    spec = AtMostSpecification("tags", tag_is_vip, -1)
    assert spec.is_satisfied_by(entity) is False
