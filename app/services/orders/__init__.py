"""
Order services package for Hub <-> ShipStation synchronization.

This package contains the translators, resolvers, status mapping, polling
watermarks and the orchestrator that sequences them.
"""
