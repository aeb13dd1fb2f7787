"""Tests unitarios para el mapeo de estados del Hub a ShipStation."""

from datetime import UTC, datetime

import pytest

from app.api.v1.schemas.shipstation_schemas import RemoteOrderStatus
from app.services.orders.mappers import is_cancelled, is_shipped, map_status


class TestMapStatus:
    """Tests para map_status."""

    def test_hold_keeps_hold_until(self):
        """Debe mapear 'hold' a ON_HOLD conservando la fecha."""
        until = datetime(2023, 6, 1, tzinfo=UTC)

        mapping = map_status("hold", until)

        assert mapping.status == RemoteOrderStatus.ON_HOLD
        assert mapping.hold_until == until

    @pytest.mark.parametrize("status", ["order cancelled", "cancelled_by_customer", "Canceled by buyer"])
    def test_cancelled_variants(self, status):
        """Cualquier estado que contenga cancelado también es cancelado."""
        assert map_status(status).status == RemoteOrderStatus.CANCELLED
        assert is_cancelled(status)

    @pytest.mark.parametrize("status", ["canceled", "cancelled", "CANCELED", "Cancelled"])
    def test_both_cancelled_spellings(self, status):
        """Debe reconocer ambas grafías de cancelado, sin importar mayúsculas."""
        mapping = map_status(status, datetime(2023, 6, 1, tzinfo=UTC))

        assert mapping.status == RemoteOrderStatus.CANCELLED
        assert mapping.hold_until is None

    @pytest.mark.parametrize("status", ["ready", "pending", "", None, "holding"])
    def test_everything_else_awaits_shipment(self, status):
        """Cualquier otro estado, incluso vacío, queda en espera de envío."""
        assert map_status(status).status == RemoteOrderStatus.AWAITING_SHIPMENT

    def test_hold_until_ignored_when_not_on_hold(self):
        """Debe descartar hold_until si el estado no es 'hold'."""
        assert map_status("ready", datetime(2023, 6, 1, tzinfo=UTC)).hold_until is None


class TestStatusPredicates:
    """Tests para is_shipped / is_cancelled."""

    def test_is_shipped(self):
        assert is_shipped("shipped")
        assert is_shipped(" Shipped ")
        assert not is_shipped("ready")
        assert not is_shipped(None)

    def test_is_cancelled(self):
        assert is_cancelled("canceled")
        assert is_cancelled("cancelled")
        assert not is_cancelled("cancel")
        assert not is_cancelled("cancellation pending")
        assert not is_cancelled(None)
