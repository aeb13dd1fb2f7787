"""
Pydantic models for the payloads the Hub sends to the ShipStation webhooks.

All hub objects are immutable once received; the translators only read them.
Unknown keys are ignored since the Hub sends its full object graph.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _numbers_to_str(v: Any) -> Any:
    """The Hub sends ids as either numbers or strings."""
    if isinstance(v, (int, Decimal)) and not isinstance(v, bool):
        return str(v)
    return v


class HubModel(BaseModel):
    """Base configuration shared by every hub payload model."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class ShippingAddress(HubModel):
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("zipcode", "phone", mode="before")
    @classmethod
    def coerce_numeric(cls, v):
        return _numbers_to_str(v)


class HubLineItem(HubModel):
    """A single line item of a hub order or shipment."""

    product_id: str
    name: Optional[str] = None
    quantity: int = 1
    price: Decimal = Decimal("0")
    image_url: Optional[str] = None
    # Insertion order is preserved and drives the Options text
    properties: Optional[dict[str, Any]] = None

    @field_validator("product_id", mode="before")
    @classmethod
    def coerce_product_id(cls, v):
        return _numbers_to_str(v)


class HubOrderTotals(HubModel):
    order: Optional[Decimal] = None


class HubOrder(HubModel):
    """
    Order as pushed by the Hub on order creation.

    Attributes:
        id: Hub order number, becomes ShipStation's OrderNumber
        totals: Order totals, only ``totals.order`` is used
        marketplace_id: Optional marketplace override for this order
        shipping_address: Required by the translator, optional at parse time
        line_items: Ordered line items
    """

    id: str
    email: Optional[str] = None
    delivery_instructions: Optional[str] = None
    placed_on: Optional[datetime] = None
    totals: HubOrderTotals = Field(default_factory=HubOrderTotals)
    marketplace_id: Optional[int] = None
    shipping_address: Optional[ShippingAddress] = None
    shipping_carrier: Optional[str] = None
    shipping_method: Optional[str] = None
    custom_field1: Optional[str] = None
    custom_field2: Optional[str] = None
    custom_field3: Optional[str] = None
    line_items: list[HubLineItem] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _numbers_to_str(v)


class HubShipment(HubModel):
    """
    Shipment as pushed by the Hub; maps 1:1 to a ShipStation order.

    Attributes:
        id: Hub shipment number, becomes ShipStation's OrderNumber
        status: Free-form hub status ("hold", "canceled", "ready", "shipped"...)
        hold_until: Only meaningful when status is "hold"
        items: Ordered line items of this shipment
    """

    id: str
    order_id: Optional[str] = None
    email: Optional[str] = None
    delivery_instructions: Optional[str] = None
    created_at: Optional[datetime] = None
    order_total: Optional[Decimal] = None
    status: Optional[str] = None
    hold_until: Optional[datetime] = None
    shipping_address: Optional[ShippingAddress] = None
    shipping_carrier: Optional[str] = None
    shipping_method: Optional[str] = None
    items: list[HubLineItem] = Field(default_factory=list)

    @field_validator("id", "order_id", mode="before")
    @classmethod
    def coerce_ids(cls, v):
        return _numbers_to_str(v)


class HubTrackingReference(HubModel):
    """Shipment reference the Hub sends back after polling, keyed by ShipStation's OrderID."""

    order_id: str
    tracking: Optional[str] = None

    @field_validator("order_id", "tracking", mode="before")
    @classmethod
    def coerce_ids(cls, v):
        return _numbers_to_str(v)


class HubRequest(BaseModel):
    """Envelope shared by every Hub webhook call."""

    model_config = ConfigDict(extra="allow")

    request_id: Optional[str] = None
    parameters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("request_id", mode="before")
    @classmethod
    def coerce_request_id(cls, v):
        return _numbers_to_str(v)

    @field_validator("parameters", mode="before")
    @classmethod
    def default_parameters(cls, v):
        return v or {}

    def payload_object(self, key: str) -> dict[str, Any]:
        """Return the raw object sent under ``key`` (``order``, ``shipment``)."""
        value = (self.model_extra or {}).get(key)
        return value if isinstance(value, dict) else {}
