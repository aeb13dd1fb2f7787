"""
ShipStation data API client (OData v2 over HTTPS).

The sync flows only depend on the ShipStationClient protocol: filtered reads,
queued writes and an explicit commit that flushes the queue. The httpx
implementation below opens one HTTP session per hub request.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from app.api.v1.schemas.shipstation_schemas import RemoteEntity
from app.db.shipstation.filters import Filter, render_literal
from app.utils.error_handler import AppException, ErrorCode, ShipStationAPIException

logger = logging.getLogger(__name__)

USER_AGENT = "Hub-ShipStation-Integration/1.0"


class ShipStationClient(Protocol):
    """Capabilities the sync flows need from ShipStation."""

    async def query(self, entity: str, predicate: Filter) -> list[dict[str, Any]]:
        """Return the raw records of ``entity`` matching ``predicate``."""
        ...

    def insert(self, entity: str, record: RemoteEntity) -> None:
        """Queue an insert until the next commit."""
        ...

    def update(self, entity: str, record: RemoteEntity) -> None:
        """Queue an update (merge) until the next commit."""
        ...

    def delete(self, entity: str, record: RemoteEntity) -> None:
        """Queue a delete until the next commit."""
        ...

    async def commit(self) -> list[dict[str, Any]]:
        """Flush queued writes in order, returning the records created by inserts."""
        ...


@dataclass(frozen=True)
class PendingChange:
    """A write queued on the client until ``commit``."""

    method: str
    entity: str
    record: RemoteEntity


def unwrap_results(payload: Any) -> list[dict[str, Any]]:
    """
    Extract the records from an OData v2 JSON response.

    Handles ``{"d": {"results": [...]}}``, ``{"d": [...]}`` and single-entity
    ``{"d": {...}}`` responses.
    """
    if payload is None:
        return []
    data = payload.get("d", payload) if isinstance(payload, dict) else payload
    if isinstance(data, dict) and "results" in data:
        data = data["results"]
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [record for record in data if isinstance(record, dict)]
    raise ShipStationAPIException(f"Unexpected ShipStation response format: {type(data).__name__}")


def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of the OData error message."""
    try:
        error = response.json().get("error", {})
        message = error.get("message", {})
        if isinstance(message, dict):
            return message.get("value") or response.reason_phrase
        return str(message) or response.reason_phrase
    except (ValueError, AttributeError):
        return response.text[:500] or response.reason_phrase


class ShipStationODataClient:
    """
    httpx based ShipStation OData client.

    Use as an async context manager; the session is closed on exit. Writes are
    queued and sent one by one, in order, by ``commit``. A failure during
    commit aborts the remaining queued writes; writes already sent stay applied.
    """

    def __init__(
        self,
        base_url: str,
        username: Optional[str],
        password: Optional[str],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: ShipStation data API root (https://data.shipstation.com/1.1)
            username: ShipStation API username
            password: ShipStation API password
            timeout: Per-request timeout in seconds, owned by the transport layer
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout
        self.transport = transport
        self.session: Optional[httpx.AsyncClient] = None
        self._pending: list[PendingChange] = []

    async def __aenter__(self) -> "ShipStationODataClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def initialize(self) -> None:
        """Create the HTTP session."""
        if self.session is not None:
            return
        auth = (self.username, self.password) if self.username and self.password else None
        self.session = httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            timeout=self.timeout,
            transport=self.transport,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "DataServiceVersion": "2.0",
                "User-Agent": USER_AGENT,
            },
        )
        logger.debug(f"ShipStation session opened for {self.base_url}")

    async def close(self) -> None:
        """Close the HTTP session and drop any uncommitted writes."""
        if self._pending:
            logger.warning(f"Discarding {len(self._pending)} uncommitted ShipStation changes")
            self._pending = []
        if self.session:
            await self.session.aclose()
            self.session = None
            logger.debug("ShipStation session closed")

    async def query(self, entity: str, predicate: Filter) -> list[dict[str, Any]]:
        params = {"$filter": predicate.render(), "$format": "json"}
        logger.debug(f"ShipStation query {entity}: {params['$filter']}")
        payload = await self._request("GET", f"/{entity}", params=params)
        return unwrap_results(payload)

    def insert(self, entity: str, record: RemoteEntity) -> None:
        self._pending.append(PendingChange("POST", entity, record))

    def update(self, entity: str, record: RemoteEntity) -> None:
        self._require_key(entity, record)
        self._pending.append(PendingChange("MERGE", entity, record))

    def delete(self, entity: str, record: RemoteEntity) -> None:
        self._require_key(entity, record)
        self._pending.append(PendingChange("DELETE", entity, record))

    async def commit(self) -> list[dict[str, Any]]:
        pending, self._pending = self._pending, []
        created: list[dict[str, Any]] = []

        for change in pending:
            if change.method == "POST":
                payload = await self._request("POST", f"/{change.entity}", json=change.record.to_remote())
                created.extend(unwrap_results(payload))
            elif change.method == "MERGE":
                await self._request(
                    "POST",
                    self._entity_url(change.entity, change.record),
                    json=change.record.to_remote(),
                    headers={"X-HTTP-Method": "MERGE"},
                )
            else:
                await self._request("DELETE", self._entity_url(change.entity, change.record))

        logger.debug(f"ShipStation commit flushed {len(pending)} changes ({len(created)} inserts)")
        return created

    @staticmethod
    def _require_key(entity: str, record: RemoteEntity) -> None:
        if record.key is None:
            raise ValueError(f"{entity} record has no {record.KEY_FIELD}; it must be read from ShipStation first")

    @staticmethod
    def _entity_url(entity: str, record: RemoteEntity) -> str:
        return f"/{entity}({render_literal(record.key)})"

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, str]] = None,
        json: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """
        Send a request to ShipStation.

        Returns:
            Any: Decoded JSON body, or None for empty responses

        Raises:
            AppException: If the client has no credentials
            ShipStationAPIException: On transport errors, HTTP errors or invalid JSON
        """
        if not self.username or not self.password:
            raise AppException(
                message="ShipStation credentials are not configured",
                error_code=ErrorCode.CONFIGURATION_ERROR,
            )
        if self.session is None:
            await self.initialize()

        try:
            response = await self.session.request(method, url, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise ShipStationAPIException(f"ShipStation request failed: {e}", endpoint=url) from e

        if response.status_code >= 400:
            raise ShipStationAPIException(
                f"HTTP {response.status_code}: {_error_message(response)}",
                api_response_code=response.status_code,
                endpoint=url,
            )

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise ShipStationAPIException(
                f"Invalid JSON from ShipStation: {e}", api_response_code=response.status_code, endpoint=url
            ) from e


def create_shipstation_client(config, transport: Optional[httpx.AsyncBaseTransport] = None) -> ShipStationODataClient:
    """
    Build a client for one hub request.

    Args:
        config: ShipStationConfig with credentials and timeouts
        transport: Optional httpx transport

    Returns:
        ShipStationODataClient: Unopened client, use with ``async with``
    """
    return ShipStationODataClient(
        base_url=config.api_url,
        username=config.username,
        password=config.password,
        timeout=config.timeout_seconds,
        transport=transport,
    )
