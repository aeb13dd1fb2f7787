"""
Pydantic models for the ShipStation OData entities.

Each entity has a fixed set of named fields serialized with ShipStation's
PascalCase names. Assigning a field the model does not declare raises, so a
typo can never silently produce a no-op write. Records read from ShipStation
carry many more properties than we use; ``from_remote`` keeps only the known ones.
"""

import re
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

_ODATA_DATE = re.compile(r"^/Date\((-?\d+)([+-]\d{4})?\)/$")


class RemoteOrderStatus(IntEnum):
    """ShipStation OrderStatusID codes."""

    AWAITING_PAYMENT = 1
    AWAITING_SHIPMENT = 2
    SHIPPED = 3
    CANCELLED = 4
    ON_HOLD = 5


def parse_odata_datetime(value: Any) -> Any:
    """
    Parse the OData v2 JSON date format (``/Date(1672531200000)/``).

    Any other value is returned unchanged so pydantic can parse ISO strings.
    Results are timezone-aware UTC datetimes.
    """
    if isinstance(value, str):
        match = _ODATA_DATE.match(value.strip())
        if match:
            return datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc)
    return value


def format_odata_datetime(value: Optional[datetime]) -> Optional[str]:
    """Render a datetime the way ShipStation expects it: UTC, no offset suffix."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="seconds")


class RemoteEntity(BaseModel):
    """Base class for ShipStation entities."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, populate_by_name=True)

    ENTITY_SET: ClassVar[str] = ""
    KEY_FIELD: ClassVar[str] = ""
    # Sent as null once explicitly assigned None, so MERGE can clear them
    CLEARABLE_FIELDS: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def from_remote(cls, record: dict[str, Any]) -> "RemoteEntity":
        """Build the entity from a raw OData record, ignoring unknown properties."""
        known = {field.alias or name for name, field in cls.model_fields.items()}
        return cls.model_validate({key: value for key, value in record.items() if key in known})

    def to_remote(self) -> dict[str, Any]:
        """Serialize with ShipStation field names, dropping unset values."""
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        for name in self.CLEARABLE_FIELDS & self.model_fields_set:
            if getattr(self, name) is None:
                data[type(self).model_fields[name].alias or name] = None
        return data

    @property
    def key(self) -> Any:
        return self.to_remote().get(self.KEY_FIELD)


class RemoteOrder(RemoteEntity):
    """
    ShipStation ``Orders`` entity.

    ``order_number`` is the business key shared with the Hub; ``order_id`` is
    assigned by ShipStation on insert and only used for joins inside ShipStation.
    """

    ENTITY_SET = "Orders"
    KEY_FIELD = "OrderID"
    CLEARABLE_FIELDS = frozenset({"hold_until"})

    order_id: Optional[int] = Field(default=None, alias="OrderID")
    order_number: Optional[str] = Field(default=None, alias="OrderNumber")
    order_status_id: Optional[int] = Field(default=None, alias="OrderStatusID")
    store_id: Optional[int] = Field(default=None, alias="StoreID")
    marketplace_id: Optional[int] = Field(default=None, alias="MarketplaceID")
    provider_id: Optional[int] = Field(default=None, alias="ProviderID")
    service_id: Optional[int] = Field(default=None, alias="ServiceID")
    package_type_id: Optional[int] = Field(default=None, alias="PackageTypeID")
    buyer_email: Optional[str] = Field(default=None, alias="BuyerEmail")
    notes_from_buyer: Optional[str] = Field(default=None, alias="NotesFromBuyer")
    order_date: Optional[datetime] = Field(default=None, alias="OrderDate")
    pay_date: Optional[datetime] = Field(default=None, alias="PayDate")
    hold_until: Optional[datetime] = Field(default=None, alias="HoldUntil")
    order_total: Optional[str] = Field(default=None, alias="OrderTotal")
    ship_name: Optional[str] = Field(default=None, alias="ShipName")
    ship_street1: Optional[str] = Field(default=None, alias="ShipStreet1")
    ship_street2: Optional[str] = Field(default=None, alias="ShipStreet2")
    ship_city: Optional[str] = Field(default=None, alias="ShipCity")
    ship_state: Optional[str] = Field(default=None, alias="ShipState")
    ship_postal_code: Optional[str] = Field(default=None, alias="ShipPostalCode")
    ship_country_code: Optional[str] = Field(default=None, alias="ShipCountryCode")
    ship_phone: Optional[str] = Field(default=None, alias="ShipPhone")
    custom_field1: Optional[str] = Field(default=None, alias="CustomField1")
    custom_field2: Optional[str] = Field(default=None, alias="CustomField2")
    custom_field3: Optional[str] = Field(default=None, alias="CustomField3")

    @field_validator("order_date", "pay_date", "hold_until", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return parse_odata_datetime(v)

    @field_validator("order_total", mode="before")
    @classmethod
    def total_as_text(cls, v):
        if v is not None and not isinstance(v, str):
            return str(v)
        return v

    @field_serializer("order_date", "pay_date", "hold_until")
    def serialize_dates(self, value: Optional[datetime]) -> Optional[str]:
        return format_odata_datetime(value)


class RemoteOrderItem(RemoteEntity):
    """ShipStation ``OrderItems`` entity; always replaced wholesale, never diffed."""

    ENTITY_SET = "OrderItems"
    KEY_FIELD = "OrderItemID"

    order_item_id: Optional[int] = Field(default=None, alias="OrderItemID")
    order_id: Optional[int] = Field(default=None, alias="OrderID")
    sku: Optional[str] = Field(default=None, alias="SKU")
    description: Optional[str] = Field(default=None, alias="Description")
    quantity: Optional[int] = Field(default=None, alias="Quantity")
    unit_price: Optional[str] = Field(default=None, alias="UnitPrice")
    thumbnail_url: Optional[str] = Field(default=None, alias="ThumbnailUrl")
    options: Optional[str] = Field(default=None, alias="Options")

    @field_validator("unit_price", mode="before")
    @classmethod
    def price_as_text(cls, v):
        if v is not None and not isinstance(v, str):
            return str(v)
        return v


class RemoteShipment(RemoteEntity):
    """ShipStation ``Shipments`` entity (read only)."""

    ENTITY_SET = "Shipments"
    KEY_FIELD = "ShipmentID"

    shipment_id: Optional[int] = Field(default=None, alias="ShipmentID")
    order_id: Optional[int] = Field(default=None, alias="OrderID")
    tracking_number: Optional[str] = Field(default=None, alias="TrackingNumber")
    provider_id: Optional[int] = Field(default=None, alias="ProviderID")
    service_id: Optional[int] = Field(default=None, alias="ServiceID")
    ship_date: Optional[datetime] = Field(default=None, alias="ShipDate")
    create_date: Optional[datetime] = Field(default=None, alias="CreateDate")
    modify_date: Optional[datetime] = Field(default=None, alias="ModifyDate")

    @field_validator("ship_date", "create_date", "modify_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return parse_odata_datetime(v)

    @field_serializer("ship_date", "create_date", "modify_date")
    def serialize_dates(self, value: Optional[datetime]) -> Optional[str]:
        return format_odata_datetime(value)
