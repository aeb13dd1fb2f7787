"""
Mapper services translating hub vocabularies to ShipStation codes.
"""

from .status_mapper import SHIPPED_STATUS, StatusMapping, is_cancelled, is_shipped, map_status

__all__ = ["SHIPPED_STATUS", "StatusMapping", "is_cancelled", "is_shipped", "map_status"]
