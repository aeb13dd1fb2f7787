"""StatusMapper - maps free-form hub shipment statuses to ShipStation order statuses."""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from app.api.v1.schemas.shipstation_schemas import RemoteOrderStatus

HOLD_STATUS = "hold"
SHIPPED_STATUS = "shipped"

# Both spellings, any case, anywhere in the status
_CANCELLED = re.compile(r"cancell?ed", re.IGNORECASE)


@dataclass(frozen=True)
class StatusMapping:
    status: RemoteOrderStatus
    hold_until: Optional[datetime] = None


def is_cancelled(status: Optional[str]) -> bool:
    return bool(status) and _CANCELLED.search(status) is not None


def is_shipped(status: Optional[str]) -> bool:
    return bool(status) and status.strip().lower() == SHIPPED_STATUS


def map_status(status: Optional[str], hold_until: Optional[datetime] = None) -> StatusMapping:
    """
    Map a hub status to ShipStation's OrderStatusID.

    The mapping is total: ``"hold"`` is on hold (keeping ``hold_until``), both
    spellings of cancelled (also inside variants such as ``"order_cancelled"``)
    are cancelled and anything else, including an empty or missing status, is
    awaiting shipment.
    """
    if status == HOLD_STATUS:
        return StatusMapping(RemoteOrderStatus.ON_HOLD, hold_until)
    if is_cancelled(status):
        return StatusMapping(RemoteOrderStatus.CANCELLED)
    return StatusMapping(RemoteOrderStatus.AWAITING_SHIPMENT)
