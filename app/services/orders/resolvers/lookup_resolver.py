"""
LookupResolver services - carrier and shipping method names to ShipStation ids.

Two interchangeable strategies:
- StaticLookupResolver: compiled tables, lenient (unknown names never fail)
- RemoteLookupResolver: live ShipStation lookup, strict (unknown names abort the sync)
"""

import logging
from typing import Optional

from app.db.shipstation.client import ShipStationClient
from app.db.shipstation.filters import field_eq
from app.utils.error_handler import LookupResolutionException

logger = logging.getLogger(__name__)

UNKNOWN_CARRIER_ID = 0

STATIC_CARRIER_IDS: dict[str, int] = {
    "UPS": 3,
    "DHL": 13,
    "USPS": 1,
    "FedEx": 4,
}

STATIC_SERVICE_IDS: dict[str, int] = {
    "UPS Ground": 26,
    "UPS Express": 31,  # UPS Next Day Air Saver
    "DHL International": 148,  # Express Worldwide
    "USPS First Class Mail": 10,
    "USPS Priority Mail (Endicia)": 21,
    "International Priority Airmail (Endicia)": 89,
    "FedEx SmartPost Parcel Select": 66,
    "FedEx SmartPost Parcel Select Lightweight": 169,
}


class StaticLookupResolver:
    """Resolves names from the compiled tables (SRP: static lookup only)."""

    def __init__(
        self,
        carrier_ids: Optional[dict[str, int]] = None,
        service_ids: Optional[dict[str, int]] = None,
    ):
        self.carrier_ids = STATIC_CARRIER_IDS if carrier_ids is None else carrier_ids
        self.service_ids = STATIC_SERVICE_IDS if service_ids is None else service_ids

    async def resolve_carrier(self, name: Optional[str]) -> Optional[int]:
        carrier_id = self.carrier_ids.get(name or "", UNKNOWN_CARRIER_ID)
        if carrier_id == UNKNOWN_CARRIER_ID:
            logger.debug(f"Unknown carrier '{name}', using ProviderID {UNKNOWN_CARRIER_ID}")
        return carrier_id

    async def resolve_service(self, name: Optional[str]) -> Optional[int]:
        service_id = self.service_ids.get(name or "")
        if service_id is None:
            logger.debug(f"Unknown shipping method '{name}', leaving ServiceID unset")
        return service_id


class RemoteLookupResolver:
    """
    Resolves names against ShipStation (SRP: remote lookup only).

    One instance is built per sync operation, so its cache never outlives the
    request that filled it.
    """

    PROVIDER_ENTITY = "ShippingProviders"
    SERVICE_ENTITY = "ShippingServices"

    def __init__(self, client: ShipStationClient):
        """
        Initialize with the request's ShipStation client (DIP).

        Args:
            client: ShipStation client of the current request
        """
        self.client = client
        self._cache: dict[tuple[str, str], int] = {}

    async def resolve_carrier(self, name: Optional[str]) -> Optional[int]:
        return await self._resolve(self.PROVIDER_ENTITY, "ProviderID", name)

    async def resolve_service(self, name: Optional[str]) -> Optional[int]:
        return await self._resolve(self.SERVICE_ENTITY, "ServiceID", name)

    async def _resolve(self, entity: str, id_field: str, name: Optional[str]) -> Optional[int]:
        """
        Look up ``name`` in ``entity`` and return its id.

        Raises:
            LookupResolutionException: If ShipStation has no record with that name
        """
        if not name or not name.strip():
            return None

        cache_key = (entity, name)
        if cache_key in self._cache:
            return self._cache[cache_key]

        records = await self.client.query(entity, field_eq("Name", name))
        if not records:
            raise LookupResolutionException(
                message=f"No {entity} record named '{name}' found in ShipStation",
                entity=entity,
                name=name,
            )

        value = records[0].get(id_field)
        if value is None:
            raise LookupResolutionException(
                message=f"{entity} record '{name}' has no {id_field}",
                entity=entity,
                name=name,
            )

        resolved = int(value)
        self._cache[cache_key] = resolved
        logger.debug(f"Resolved {entity} '{name}' -> {resolved}")
        return resolved


def create_lookup_resolver(strategy: str, client: ShipStationClient):
    """
    Build the resolver for the configured strategy.

    Args:
        strategy: "static" or "remote"
        client: ShipStation client of the current request

    Returns:
        StaticLookupResolver | RemoteLookupResolver
    """
    if strategy == "static":
        return StaticLookupResolver()
    if strategy == "remote":
        return RemoteLookupResolver(client)
    raise ValueError(f"Unknown lookup strategy: {strategy}")
