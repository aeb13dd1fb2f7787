"""
Resolver services translating hub names into ShipStation identifiers.
"""

from .lookup_resolver import RemoteLookupResolver, StaticLookupResolver, create_lookup_resolver

__all__ = ["RemoteLookupResolver", "StaticLookupResolver", "create_lookup_resolver"]
