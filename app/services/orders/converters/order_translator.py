"""
OrderTranslator - builds or patches ShipStation orders from hub orders and shipments.

The translator is pure: it never talks to ShipStation. Carrier and service ids
are resolved by the caller (see LookupResolver) and passed in.
"""

import logging
from decimal import Decimal
from typing import Any, Optional, Union

from app.api.v1.schemas.hub_schemas import HubOrder, HubShipment, ShippingAddress
from app.api.v1.schemas.shipstation_schemas import RemoteOrder, RemoteOrderStatus
from app.services.orders.mappers import map_status
from app.utils.error_handler import ValidationException

logger = logging.getLogger(__name__)

PACKAGE_TYPE_PACKAGE = 3

HubSource = Union[HubOrder, HubShipment]


def ship_to_name(address: ShippingAddress) -> str:
    """
    Join first and last name into ShipStation's single ShipName field.

    Raises:
        ValidationException: If either name is missing
    """
    if not address.firstname or not address.lastname:
        raise ValidationException(
            message="shipping_address firstname and lastname are required",
            field="shipping_address.firstname" if not address.firstname else "shipping_address.lastname",
            invalid_value=address.firstname if not address.firstname else address.lastname,
        )
    return address.firstname + " " + address.lastname


def _as_text(amount: Optional[Decimal]) -> Optional[str]:
    return None if amount is None else str(amount)


class OrderTranslator:
    """
    Translates hub orders/shipments into ShipStation ``Orders`` records.

    Args:
        store_id: ShipStation store filter; blank keeps orders visible in all stores
        marketplace_id: Default MarketplaceID for hub orders
    """

    def __init__(self, store_id: Optional[str] = None, marketplace_id: Optional[int] = None):
        self.store_id = store_id.strip() if store_id and store_id.strip() else None
        self.marketplace_id = marketplace_id

    def validate(self, source: HubSource) -> None:
        """
        Check the inputs the translation cannot do without.

        Raises:
            ValidationException: If the shipping address, a ship-to name or a
                numeric store id is missing
        """
        if source.shipping_address is None:
            raise ValidationException(
                message=":shipping_address required",
                field="shipping_address",
                invalid_value=None,
            )
        ship_to_name(source.shipping_address)
        self.store_id_value()

    def build_or_patch(
        self,
        source: HubSource,
        existing: Optional[RemoteOrder] = None,
        *,
        carrier_id: Optional[int] = None,
        service_id: Optional[int] = None,
    ) -> RemoteOrder:
        """
        Build a new RemoteOrder, or patch ``existing`` in place.

        In patch mode only fields with a value in ``source`` are written, so
        anything the payload does not carry keeps its ShipStation value. The
        exception is HoldUntil, which is cleared once the order leaves hold.

        Args:
            source: Hub order or shipment
            existing: Order previously read from ShipStation (update flows)
            carrier_id: Resolved ProviderID
            service_id: Resolved ServiceID

        Returns:
            RemoteOrder: The new order, or ``existing`` after patching

        Raises:
            ValidationException: If the shipping address or ship-to name is missing
        """
        self.validate(source)
        values = self._derive_fields(source, carrier_id, service_id)

        if existing is None:
            values["package_type_id"] = PACKAGE_TYPE_PACKAGE
            order = RemoteOrder(**{name: value for name, value in values.items() if value is not None})
            logger.debug(f"Built ShipStation order for {source.id}")
            return order

        for name, value in values.items():
            if value is not None or name in existing.CLEARABLE_FIELDS:
                setattr(existing, name, value)
        logger.debug(f"Patched ShipStation order {existing.order_id} for {source.id}")
        return existing

    def _derive_fields(
        self, source: HubSource, carrier_id: Optional[int], service_id: Optional[int]
    ) -> dict[str, Any]:
        address = source.shipping_address
        values: dict[str, Any] = {
            "order_number": source.id,
            "buyer_email": source.email,
            "notes_from_buyer": source.delivery_instructions,
            "store_id": self.store_id_value(),
            "provider_id": carrier_id,
            "service_id": service_id,
            "ship_name": ship_to_name(address),
            "ship_street1": address.address1,
            "ship_street2": address.address2,
            "ship_city": address.city,
            "ship_state": address.state,
            "ship_postal_code": address.zipcode,
            "ship_country_code": address.country,
            "ship_phone": address.phone,
        }

        if isinstance(source, HubOrder):
            values.update(
                {
                    "order_status_id": int(RemoteOrderStatus.AWAITING_SHIPMENT),
                    "marketplace_id": source.marketplace_id or self.marketplace_id,
                    "order_date": source.placed_on,
                    "pay_date": source.placed_on,
                    "order_total": _as_text(source.totals.order),
                    "custom_field1": source.custom_field1,
                    "custom_field2": source.custom_field2,
                    "custom_field3": source.custom_field3,
                }
            )
        else:
            mapping = map_status(source.status, source.hold_until)
            values.update(
                {
                    "order_status_id": int(mapping.status),
                    "hold_until": mapping.hold_until,
                    "order_date": source.created_at,
                    "pay_date": source.created_at,
                    "order_total": _as_text(source.order_total),
                }
            )

        return values

    def store_id_value(self) -> Optional[int]:
        """StoreID as ShipStation stores it; raises ValidationException if not numeric."""
        if self.store_id is None:
            return None
        try:
            return int(self.store_id)
        except ValueError as e:
            raise ValidationException(
                message=f"Invalid ShipStation store id: {self.store_id}",
                field="shipstation_store_id",
                invalid_value=self.store_id,
                expected_format="integer",
            ) from e
