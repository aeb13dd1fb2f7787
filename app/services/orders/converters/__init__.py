"""
Converter services for translating hub payloads to ShipStation entities.
"""

from .item_translator import build_items, serialize_properties
from .order_translator import OrderTranslator

__all__ = ["OrderTranslator", "build_items", "serialize_properties"]
