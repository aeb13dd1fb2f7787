"""
Interfaces/Protocols for the sync services (Dependency Inversion Principle).

These protocols define contracts that services must implement,
allowing strategies to be swapped by configuration and faked in tests.
"""

from datetime import datetime
from typing import Optional, Protocol

from app.db.shipstation.filters import Filter


class ILookupResolver(Protocol):
    """Protocol for carrier / shipping method resolution strategies."""

    async def resolve_carrier(self, name: Optional[str]) -> Optional[int]:
        """Resolve a carrier name to a ShipStation ProviderID."""
        ...

    async def resolve_service(self, name: Optional[str]) -> Optional[int]:
        """Resolve a shipping method name to a ShipStation ServiceID."""
        ...


class IWatermarkTracker(Protocol):
    """Protocol for shipment polling watermark strategies."""

    def build_filter(self, since: datetime) -> Filter:
        """Build the Shipments filter for a poll starting at ``since``."""
        ...

    def next_watermark(self, since: datetime, now: Optional[datetime] = None) -> datetime:
        """Compute the ``since`` value for the next poll."""
        ...
