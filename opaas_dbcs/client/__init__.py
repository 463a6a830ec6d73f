"""Client for the DBCS provisioning REST API."""

from opaas_dbcs.client.service_instance import ServiceInstanceClient

__all__ = ["ServiceInstanceClient"]
