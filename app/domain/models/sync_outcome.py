"""
SyncOutcome domain model.

Every sync flow ends in exactly one outcome: the objects to hand back to the
Hub, a human-readable summary and the HTTP status the Hub should see.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SyncOutcome:
    """
    Normalized result of a sync flow.

    Attributes:
        status_code: 200 for success and benign skips, 500 for failures
        summary: Human-readable message for the Hub
        objects: Hub objects keyed by collection name ("orders", "shipments")
        parameters: Output parameters persisted by the Hub (e.g. "since")
    """

    status_code: int
    summary: str
    objects: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, summary: str) -> "SyncOutcome":
        return cls(status_code=200, summary=summary)

    @classmethod
    def failure(cls, summary: str) -> "SyncOutcome":
        return cls(status_code=500, summary=summary)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def add_object(self, kind: str, obj: dict[str, Any]) -> "SyncOutcome":
        """Append a hub object to the ``<kind>s`` collection."""
        self.objects.setdefault(f"{kind}s", []).append(obj)
        return self

    def add_parameter(self, name: str, value: Any) -> "SyncOutcome":
        self.parameters[name] = value
        return self

    def to_response(self, request_id: str | None = None) -> dict[str, Any]:
        """Build the Hub response envelope."""
        body: dict[str, Any] = {"request_id": request_id, "summary": self.summary}
        body.update(self.objects)
        if self.parameters:
            body["parameters"] = self.parameters
        return body
