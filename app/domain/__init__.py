"""
Domain layer for the Hub-ShipStation integration.

This layer contains the business entities and value objects shared by the
sync flows, independent of HTTP and ShipStation transport concerns.
"""
