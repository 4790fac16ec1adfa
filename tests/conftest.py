"""Shared fixtures for specification tests."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import pytest
from pydantic import BaseModel


class Order(BaseModel):
    reference: str
    total: float
    status: str = "open"


class Customer(BaseModel):
    id: UUID
    name: str | None
    age: int = 30
    tags: list[str] = []
    orders: list[Order] = []
    nicknames: list[str] | None = None
    created: datetime = datetime(2024, 3, 1)


@pytest.fixture
def alice() -> Customer:
    return Customer(
        id=uuid4(),
        name="Alice",
        age=28,
        tags=["vip", "new"],
        orders=[
            Order(reference="A-1", total=120.0),
            Order(reference="A-2", total=15.5, status="shipped"),
        ],
    )


@pytest.fixture
def bob() -> Customer:
    return Customer(id=uuid4(), name="Bob", age=45)


@pytest.fixture
def anonymous() -> Customer:
    return Customer(
        id=uuid4(), name=None, age=17, tags=["new"], created=datetime(2023, 6, 1)
    )
