"""ItemTranslator - hub line items to ShipStation ``OrderItems`` records."""

from typing import Any, Iterable, Mapping, Optional

from app.api.v1.schemas.hub_schemas import HubLineItem
from app.api.v1.schemas.shipstation_schemas import RemoteOrderItem


def serialize_properties(properties: Optional[Mapping[str, Any]]) -> Optional[str]:
    """
    Flatten item properties into ShipStation's Options text.

    One ``key:value`` line per property, in mapping order, each line ending
    with a newline. Returns None when there are no properties.
    """
    if not properties:
        return None
    return "".join(f"{key}:{value}\n" for key, value in properties.items())


def build_items(items: Iterable[HubLineItem], order_id: Optional[int]) -> list[RemoteOrderItem]:
    """
    Build the OrderItems for ``order_id``, one per hub line item, in input order.

    Args:
        items: Hub line items
        order_id: ShipStation OrderID the items belong to

    Returns:
        list[RemoteOrderItem]: Items ready to insert
    """
    return [
        RemoteOrderItem(
            order_id=order_id,
            sku=item.product_id,
            description=item.name,
            quantity=item.quantity,
            unit_price=str(item.price),
            thumbnail_url=item.image_url,
            options=serialize_properties(item.properties),
        )
        for item in items
    ]
