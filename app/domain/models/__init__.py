"""
Domain models for business entities.

These models represent core business concepts shared by the sync flows.
"""

from .sync_outcome import SyncOutcome

__all__ = ["SyncOutcome"]
