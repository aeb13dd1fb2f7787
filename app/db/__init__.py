"""
Módulo de acceso a ShipStation para Hub-ShipStation Integration.

- shipstation.client: protocolo ShipStationClient y cliente OData (httpx)
- shipstation.filters: constructor de filtros OData parametrizados
"""
