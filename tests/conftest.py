"""Fixtures compartidos: cliente de ShipStation en memoria y payloads del Hub."""

import operator
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest

from app.api.v1.schemas.shipstation_schemas import RemoteEntity
from app.core.config import ShipStationConfig
from app.db.shipstation.filters import AllOf, Filter

KEY_FIELDS = {
    "Orders": "OrderID",
    "OrderItems": "OrderItemID",
    "Shipments": "ShipmentID",
    "ShippingProviders": "ProviderID",
    "ShippingServices": "ServiceID",
}

_COMPARATORS = {
    "eq": operator.eq,
    "ne": operator.ne,
    "ge": operator.ge,
    "gt": operator.gt,
    "le": operator.le,
    "lt": operator.lt,
}


def _matches(record: dict[str, Any], predicate: Filter) -> bool:
    if isinstance(predicate, AllOf):
        return all(_matches(record, p) for p in predicate.predicates)

    value = record.get(predicate.field)
    expected = predicate.value
    if predicate.op in ("eq", "ne"):
        return _COMPARATORS[predicate.op](value, expected)
    if value is None or expected is None:
        return False
    if isinstance(value, datetime) and isinstance(expected, datetime):
        value, expected = value.timestamp(), expected.timestamp()
    return _COMPARATORS[predicate.op](value, expected)


class FakeShipStationClient:
    """
    ShipStation en memoria con la misma semántica de cola + commit.

    ``calls`` registra cada operación para verificar cuánta I/O hizo un flujo.
    ``fail_on_commit`` hace fallar todos los commits y ``fail_on_commit_number``
    solo el N-ésimo (empezando en 1), descartando su lote completo.
    """

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None):
        self.tables: dict[str, list[dict[str, Any]]] = {entity: [] for entity in KEY_FIELDS}
        for entity, records in (tables or {}).items():
            self.tables.setdefault(entity, []).extend(dict(record) for record in records)
        self.calls: list[tuple[str, str]] = []
        self.pending: list[tuple[str, str, RemoteEntity]] = []
        self.fail_on_commit = False
        self.fail_on_commit_number: int | None = None
        self.commit_count = 0
        self._next_id = 1000

    async def __aenter__(self) -> "FakeShipStationClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.pending = []

    async def query(self, entity: str, predicate: Filter) -> list[dict[str, Any]]:
        self.calls.append(("query", entity))
        return [dict(record) for record in self.tables.get(entity, []) if _matches(record, predicate)]

    def insert(self, entity: str, record: RemoteEntity) -> None:
        self.calls.append(("insert", entity))
        self.pending.append(("insert", entity, record))

    def update(self, entity: str, record: RemoteEntity) -> None:
        self.calls.append(("update", entity))
        self.pending.append(("update", entity, record))

    def delete(self, entity: str, record: RemoteEntity) -> None:
        self.calls.append(("delete", entity))
        self.pending.append(("delete", entity, record))

    async def commit(self) -> list[dict[str, Any]]:
        self.calls.append(("commit", ""))
        self.commit_count += 1
        if self.fail_on_commit or self.commit_count == self.fail_on_commit_number:
            self.pending = []
            raise ConnectionError("ShipStation unavailable")

        pending, self.pending = self.pending, []
        created = []
        for method, entity, record in pending:
            key_field = KEY_FIELDS[entity]
            data = record.to_remote()
            if method == "insert":
                self._next_id += 1
                data[key_field] = self._next_id
                self.tables[entity].append(data)
                created.append(dict(data))
            elif method == "update":
                for stored in self.tables[entity]:
                    if stored[key_field] == data[key_field]:
                        stored.update(data)
            else:
                self.tables[entity] = [r for r in self.tables[entity] if r[key_field] != data[key_field]]
        return created


@pytest.fixture
def fake_client():
    return FakeShipStationClient()


@pytest.fixture
def shipstation_config():
    return ShipStationConfig(
        api_url="https://data.shipstation.com/1.1",
        username="user",
        password="secret",
        store_id=None,
        marketplace_id=None,
        lookup_strategy="static",
        poll_mode="modified",
        timestamp_offset_hours=-7.0,
        timeout_seconds=30.0,
    )


@pytest.fixture
def reporter():
    return AsyncMock()


@pytest.fixture
def shipping_address():
    return {
        "firstname": "Ana",
        "lastname": "Lopez",
        "address1": "1 Main St",
        "address2": "Apt 2",
        "city": "Reno",
        "state": "NV",
        "zipcode": "89501",
        "country": "US",
        "phone": "555-0100",
    }


@pytest.fixture
def hub_order(shipping_address):
    return {
        "id": "R123",
        "email": "ana@example.com",
        "placed_on": "2023-05-01T10:00:00Z",
        "totals": {"order": "42.50"},
        "shipping_address": shipping_address,
        "shipping_carrier": "UPS",
        "shipping_method": "UPS Ground",
        "line_items": [
            {"product_id": "SKU-1", "name": "Mug", "quantity": 2, "price": "10.00"},
            {
                "product_id": "SKU-2",
                "name": "Shirt",
                "quantity": 1,
                "price": "22.50",
                "properties": {"size": "M", "color": "red"},
            },
        ],
    }


@pytest.fixture
def hub_shipment(shipping_address):
    return {
        "id": "H1",
        "order_id": "R123",
        "email": "ana@example.com",
        "created_at": "2023-05-01T10:00:00Z",
        "order_total": "42.50",
        "status": "ready",
        "shipping_address": shipping_address,
        "shipping_carrier": "FedEx",
        "shipping_method": "FedEx SmartPost Parcel Select",
        "items": [
            {"product_id": "SKU-1", "name": "Mug", "quantity": 2, "price": "10.00"},
            {"product_id": "SKU-3", "name": "Cap", "quantity": 1, "price": "5.00"},
        ],
    }


@pytest.fixture
def make_fake_client():
    """Construye un FakeShipStationClient con tablas iniciales."""
    return FakeShipStationClient
