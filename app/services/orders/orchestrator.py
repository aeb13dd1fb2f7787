"""
ShipStationSyncOrchestrator - Main coordinator for the Hub <-> ShipStation flows.

Every flow follows the same shape: validate -> translate -> ShipStation I/O ->
normalized SyncOutcome. The ShipStation client is passed into each call, so the
orchestrator holds no session state and one instance serves one hub request.

Known limitations, kept on purpose:
- Orders and their items are committed separately. If the item commit fails the
  order stays in ShipStation without items and the flow reports a failure.
- update_shipment reads the order and writes it back later without any locking,
  so concurrent updates of the same OrderNumber can race.
"""

import logging
from typing import Any, Awaitable, Callable, Optional, Union

from app.api.v1.schemas.hub_schemas import HubOrder, HubShipment, HubTrackingReference
from app.api.v1.schemas.shipstation_schemas import RemoteOrder, RemoteOrderItem, RemoteShipment
from app.core.config import ShipStationConfig
from app.db.shipstation.client import ShipStationClient
from app.db.shipstation.filters import field_eq
from app.domain.models import SyncOutcome
from app.services.orders.converters import OrderTranslator, build_items
from app.services.orders.interfaces import ILookupResolver, IWatermarkTracker
from app.services.orders.mappers import SHIPPED_STATUS, is_cancelled, is_shipped
from app.services.orders.resolvers import create_lookup_resolver
from app.services.orders.watermark import create_watermark_tracker, format_watermark, parse_since
from app.utils.error_handler import AppException, ErrorCode, ShipStationAPIException, SyncException
from app.utils.notifications import report_exception

logger = logging.getLogger(__name__)

Reporter = Callable[[Exception, Optional[dict[str, Any]]], Awaitable[None]]
ResolverFactory = Callable[[str, ShipStationClient], ILookupResolver]


class ShipStationSyncOrchestrator:
    """
    Orchestrates the sync flows between the Hub and ShipStation.

    Each flow catches every exception at its outer boundary, reports it and
    returns a 500 outcome; benign non-matches return 200 outcomes.
    """

    def __init__(
        self,
        config: ShipStationConfig,
        translator: OrderTranslator,
        watermark: IWatermarkTracker,
        resolver_factory: ResolverFactory = create_lookup_resolver,
        reporter: Reporter = report_exception,
    ):
        """
        Initialize orchestrator with service dependencies (DIP).

        Args:
            config: Effective configuration of the hub request
            translator: Hub -> ShipStation order translator
            watermark: Shipment polling watermark strategy
            resolver_factory: Builds the carrier/service resolver for a client
            reporter: Error telemetry collaborator
        """
        self.config = config
        self.translator = translator
        self.watermark = watermark
        self.resolver_factory = resolver_factory
        self.reporter = reporter

    async def create_order(self, client: ShipStationClient, order: Union[HubOrder, dict]) -> SyncOutcome:
        """
        Create a hub order and its line items in ShipStation.

        Returns:
            SyncOutcome: ``orders: [{id, shipstation_id}]`` on success
        """
        context = {"operation": "create_order", "hub_id": _hub_id(order)}

        try:
            order = HubOrder.model_validate(order)
            logger.info(f"Creating ShipStation order for hub order {order.id}")

            self.translator.validate(order)
            remote_order = await self._translate(client, order)
            shipstation_id = await self._insert_order(client, remote_order)

            items = build_items(order.line_items, shipstation_id)
            await self._insert_items(client, items)

            logger.info(f"Hub order {order.id} created in ShipStation as {shipstation_id} ({len(items)} items)")
            outcome = SyncOutcome.success(f"Order created in ShipStation: {shipstation_id}")
            return outcome.add_object("order", {"id": order.id, "shipstation_id": shipstation_id})

        except Exception as e:
            return await self._fail(e, "Unable to create ShipStation order", context)

    async def map_tracking(
        self, client: ShipStationClient, shipment: Union[HubTrackingReference, dict]
    ) -> SyncOutcome:
        """
        Map ShipStation tracking back to the hub order it belongs to.

        Orders from other stores (manual orders, etc.) are skipped with a 200.

        Returns:
            SyncOutcome: ``orders: [{id, tracking_number, shipping_status}]`` on success
        """
        context = {"operation": "map_tracking", "shipstation_id": _hub_id(shipment, "order_id")}

        try:
            reference = HubTrackingReference.model_validate(shipment)
            store_id = self.translator.store_id_value()
            order = await self._find_order(client, "OrderID", _as_order_id(reference.order_id))
            if order is None:
                raise AppException(
                    message=f"Order {reference.order_id} not found in ShipStation",
                    error_code=ErrorCode.SHIPSTATION_NOT_FOUND,
                )

            if store_id is not None and store_id != order.store_id:
                logger.info(f"Skipping ShipStation order {order.order_id}: store {order.store_id} != {store_id}")
                return SyncOutcome.success(f"Order does not match the specified store id: {store_id}")

            logger.info(f"Order {order.order_number} shipped with tracking {reference.tracking}")
            outcome = SyncOutcome.success(
                f"Order {order.order_number} has shipped with tracking: {reference.tracking}"
            )
            return outcome.add_object(
                "order",
                {
                    "id": order.order_number,
                    "tracking_number": reference.tracking,
                    "shipping_status": SHIPPED_STATUS,
                },
            )

        except Exception as e:
            return await self._fail(e, "Unable to get order from ShipStation", context)

    async def create_shipment(self, client: ShipStationClient, shipment: Union[HubShipment, dict]) -> SyncOutcome:
        """
        Transmit a hub shipment to ShipStation as a new order with its items.

        Returns:
            SyncOutcome: Transmission confirmation, no hub objects
        """
        context = {"operation": "create_shipment", "hub_id": _hub_id(shipment)}

        try:
            shipment = HubShipment.model_validate(shipment)
            logger.info(f"Transmitting hub shipment {shipment.id} to ShipStation")

            self.translator.validate(shipment)
            remote_order = await self._translate(client, shipment)
            shipstation_id = await self._insert_order(client, remote_order)
            await self._insert_items(client, build_items(shipment.items, shipstation_id))

            logger.info(f"Hub shipment {shipment.id} transmitted to ShipStation as {shipstation_id}")
            return SyncOutcome.success(f"Shipment transmitted to ShipStation: {shipstation_id}")

        except Exception as e:
            return await self._fail(e, "Unable to transmit shipment to ShipStation", context)

    async def update_shipment(self, client: ShipStationClient, shipment: Union[HubShipment, dict]) -> SyncOutcome:
        """
        Update the ShipStation order of a hub shipment and replace all its items.

        Shipped and cancelled shipments are not sent back to ShipStation, since
        those updates come from the polling flow itself.

        Returns:
            SyncOutcome: 200 for updated, skipped and not found shipments
        """
        context = {"operation": "update_shipment", "hub_id": _hub_id(shipment)}

        try:
            shipment = HubShipment.model_validate(shipment)

            if is_shipped(shipment.status) or is_cancelled(shipment.status):
                logger.info(f"Shipment {shipment.id} is {shipment.status}, skipping ShipStation update")
                return SyncOutcome.success(
                    f"Shipment {shipment.id} is {shipment.status}, no update sent to ShipStation"
                )

            self.translator.validate(shipment)
            existing = await self._find_order(client, "OrderNumber", shipment.id)
            if existing is None:
                logger.info(f"Shipment {shipment.id} not found in ShipStation, nothing to update")
                return SyncOutcome.success(f"Shipment {shipment.id} not found in ShipStation")

            await self._translate(client, shipment, existing)
            client.update(RemoteOrder.ENTITY_SET, existing)
            await client.commit()

            # Full replacement: drop every current item, then insert the new set
            current_items = await client.query(RemoteOrderItem.ENTITY_SET, field_eq("OrderID", existing.order_id))
            for record in current_items:
                client.delete(RemoteOrderItem.ENTITY_SET, RemoteOrderItem.from_remote(record))
            new_items = build_items(shipment.items, existing.order_id)
            for item in new_items:
                client.insert(RemoteOrderItem.ENTITY_SET, item)
            await client.commit()

            logger.info(
                f"Shipment {shipment.id} updated in ShipStation order {existing.order_id}: "
                f"{len(current_items)} items removed, {len(new_items)} items added"
            )
            return SyncOutcome.success(f"Shipment {shipment.id} updated in ShipStation")

        except Exception as e:
            return await self._fail(e, "Unable to update ShipStation order", context)

    async def poll_shipments(self, client: ShipStationClient, since: Any = None) -> SyncOutcome:
        """
        Fetch shipments shipped since the watermark and report them to the hub.

        Args:
            client: ShipStation client of the request
            since: Watermark sent by the hub; defaults to the configured ``since``

        Returns:
            SyncOutcome: ``shipments: [...]`` plus the next ``since`` parameter
        """
        context = {"operation": "poll_shipments", "since": str(since or self.config.since)}

        try:
            since_at = parse_since(since if since is not None else self.config.since)
            predicate = self.watermark.build_filter(since_at)
            logger.info(f"Polling ShipStation shipments: {predicate.render()}")

            records = await client.query(RemoteShipment.ENTITY_SET, predicate)
            outcome = SyncOutcome.success("")
            orders: dict[int, Optional[RemoteOrder]] = {}

            for record in records:
                shipment = RemoteShipment.from_remote(record)
                if shipment.order_id not in orders:
                    orders[shipment.order_id] = await self._find_order(client, "OrderID", shipment.order_id)
                order = orders[shipment.order_id]
                if order is None:
                    logger.warning(
                        f"Skipping shipment {shipment.shipment_id}: order {shipment.order_id} not found in ShipStation"
                    )
                    continue
                outcome.add_object("shipment", shipment_to_hub(shipment, order))

            count = len(outcome.objects.get("shipments", []))
            outcome.summary = f"Retrieved {count} shipments from ShipStation"
            outcome.add_parameter("since", format_watermark(self.watermark.next_watermark(since_at)))

            logger.info(f"{outcome.summary} (next since: {outcome.parameters['since']})")
            return outcome

        except Exception as e:
            return await self._fail(e, "Unable to get shipments from ShipStation", context)

    async def _translate(
        self,
        client: ShipStationClient,
        source: Union[HubOrder, HubShipment],
        existing: Optional[RemoteOrder] = None,
    ) -> RemoteOrder:
        """Resolve carrier and service ids, then build or patch the order."""
        resolver = self.resolver_factory(self.config.lookup_strategy, client)
        carrier_id = await resolver.resolve_carrier(source.shipping_carrier)
        service_id = await resolver.resolve_service(source.shipping_method)
        return self.translator.build_or_patch(source, existing, carrier_id=carrier_id, service_id=service_id)

    async def _insert_order(self, client: ShipStationClient, order: RemoteOrder) -> int:
        """Insert and commit the order, returning the OrderID ShipStation assigned."""
        client.insert(RemoteOrder.ENTITY_SET, order)
        created = await client.commit()
        if not created or created[0].get("OrderID") is None:
            raise ShipStationAPIException(
                f"ShipStation did not return an OrderID for order {order.order_number}",
                endpoint=RemoteOrder.ENTITY_SET,
            )
        return int(created[0]["OrderID"])

    async def _insert_items(self, client: ShipStationClient, items: list[RemoteOrderItem]) -> None:
        for item in items:
            client.insert(RemoteOrderItem.ENTITY_SET, item)
        await client.commit()

    async def _find_order(self, client: ShipStationClient, field: str, value: Any) -> Optional[RemoteOrder]:
        records = await client.query(RemoteOrder.ENTITY_SET, field_eq(field, value))
        return RemoteOrder.from_remote(records[0]) if records else None

    async def _fail(self, exception: Exception, summary: str, context: dict[str, Any]) -> SyncOutcome:
        """Report the failure and turn it into a 500 outcome."""
        logger.error(f"{summary}: {exception}")

        reported = exception
        if not isinstance(exception, AppException):
            reported = SyncException(
                message=str(exception) or type(exception).__name__,
                service="shipstation",
                operation=context["operation"],
                details={"original_exception": type(exception).__name__},
            )
            reported.__cause__ = exception
        await self.reporter(reported, context)
        return SyncOutcome.failure(f"{summary}. Error: {exception}")


def shipment_to_hub(shipment: RemoteShipment, order: RemoteOrder) -> dict[str, Any]:
    """Build the hub shipment object for a shipped ShipStation shipment."""
    firstname, _, lastname = (order.ship_name or "").partition(" ")
    hub_shipment = {
        "id": order.order_number,
        "tracking": shipment.tracking_number,
        "shipstation_id": str(shipment.order_id),
        "status": SHIPPED_STATUS,
        "shipping_address": {
            "firstname": firstname,
            "lastname": lastname,
            "address1": order.ship_street1,
            "address2": order.ship_street2,
            "city": order.ship_city,
            "state": order.ship_state,
            "zipcode": order.ship_postal_code,
            "country": order.ship_country_code,
            "phone": order.ship_phone,
        },
    }
    if shipment.ship_date:
        hub_shipment["shipped_at"] = format_watermark(shipment.ship_date)
    return hub_shipment


def _hub_id(payload: Any, key: str = "id") -> Optional[str]:
    value = payload.get(key) if isinstance(payload, dict) else getattr(payload, key, None)
    return None if value is None else str(value)


def _as_order_id(value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"Invalid ShipStation order id: {value}") from e


def create_orchestrator(config: ShipStationConfig, reporter: Reporter = report_exception) -> ShipStationSyncOrchestrator:
    """
    Factory function to create a fully initialized orchestrator for one hub request.

    Args:
        config: Effective configuration of the request
        reporter: Error telemetry collaborator

    Returns:
        ShipStationSyncOrchestrator: Fully configured orchestrator
    """
    translator = OrderTranslator(store_id=config.store_id, marketplace_id=config.marketplace_id)
    watermark = create_watermark_tracker(config.poll_mode, offset_hours=config.timestamp_offset_hours)

    return ShipStationSyncOrchestrator(
        config=config,
        translator=translator,
        watermark=watermark,
        resolver_factory=create_lookup_resolver,
        reporter=reporter,
    )
