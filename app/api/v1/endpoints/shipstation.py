"""
Endpoints para los webhooks del Hub hacia ShipStation.

Cada endpoint abre una sesión nueva con ShipStation, ejecuta un flujo del
orquestador y responde con el sobre del Hub (request_id, summary, objetos
y parámetros) usando el código HTTP del resultado.
"""

import logging
from typing import Awaitable, Callable

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.v1.schemas.hub_schemas import HubRequest
from app.core.config import ShipStationConfig
from app.db.shipstation.client import ShipStationODataClient, create_shipstation_client
from app.domain.models import SyncOutcome
from app.services.orders.orchestrator import ShipStationSyncOrchestrator, create_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()

ClientFactory = Callable[[ShipStationConfig], ShipStationODataClient]
Flow = Callable[[ShipStationSyncOrchestrator, ShipStationODataClient, HubRequest], Awaitable[SyncOutcome]]


def get_client_factory() -> ClientFactory:
    """Dependencia que construye el cliente de ShipStation de cada request."""
    return create_shipstation_client


async def _run_flow(hub_request: HubRequest, client_factory: ClientFactory, flow: Flow) -> JSONResponse:
    """
    Ejecuta un flujo con una sesión de ShipStation propia del request.

    Args:
        hub_request: Sobre recibido del Hub
        client_factory: Constructor del cliente de ShipStation
        flow: Flujo del orquestador a ejecutar

    Returns:
        JSONResponse: Respuesta para el Hub
    """
    try:
        config = ShipStationConfig.from_parameters(hub_request.parameters)
    except ValueError as e:
        logger.warning(f"Hub request {hub_request.request_id}: invalid parameters - {e}")
        outcome = SyncOutcome.failure(f"Invalid parameters. Error: {e}")
        return JSONResponse(status_code=outcome.status_code, content=outcome.to_response(hub_request.request_id))

    orchestrator = create_orchestrator(config)

    async with client_factory(config) as client:
        outcome = await flow(orchestrator, client, hub_request)

    logger.info(f"Hub request {hub_request.request_id}: {outcome.status_code} - {outcome.summary}")
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_response(hub_request.request_id))


@router.post("/add_order")
async def add_order(hub_request: HubRequest, client_factory: ClientFactory = Depends(get_client_factory)):
    """
    Crea una orden del Hub (con sus líneas) en ShipStation.

    Returns:
        JSONResponse: ``orders: [{id, shipstation_id}]``
    """
    return await _run_flow(
        hub_request,
        client_factory,
        lambda orchestrator, client, req: orchestrator.create_order(client, req.payload_object("order")),
    )


@router.post("/map_tracking")
async def map_tracking(hub_request: HubRequest, client_factory: ClientFactory = Depends(get_client_factory)):
    """
    Busca la orden real a partir del OrderID de ShipStation y le asigna el tracking.

    Returns:
        JSONResponse: ``orders: [{id, tracking_number, shipping_status}]``
    """
    return await _run_flow(
        hub_request,
        client_factory,
        lambda orchestrator, client, req: orchestrator.map_tracking(client, req.payload_object("shipment")),
    )


@router.post("/add_shipment")
async def add_shipment(hub_request: HubRequest, client_factory: ClientFactory = Depends(get_client_factory)):
    """
    Transmite un envío del Hub a ShipStation como orden nueva.

    Returns:
        JSONResponse: Confirmación de transmisión
    """
    return await _run_flow(
        hub_request,
        client_factory,
        lambda orchestrator, client, req: orchestrator.create_shipment(client, req.payload_object("shipment")),
    )


@router.post("/update_shipment")
async def update_shipment(hub_request: HubRequest, client_factory: ClientFactory = Depends(get_client_factory)):
    """
    Actualiza la orden de ShipStation de un envío y reemplaza todas sus líneas.

    Returns:
        JSONResponse: 200 también para envíos omitidos o no encontrados
    """
    return await _run_flow(
        hub_request,
        client_factory,
        lambda orchestrator, client, req: orchestrator.update_shipment(client, req.payload_object("shipment")),
    )


@router.post("/get_shipments")
async def get_shipments(hub_request: HubRequest, client_factory: ClientFactory = Depends(get_client_factory)):
    """
    Consulta los envíos despachados desde el parámetro ``since``.

    Returns:
        JSONResponse: ``shipments: [...]`` y el nuevo ``since`` en ``parameters``
    """
    return await _run_flow(
        hub_request,
        client_factory,
        lambda orchestrator, client, req: orchestrator.poll_shipments(client, req.parameters.get("since")),
    )
