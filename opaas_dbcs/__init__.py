"""
opaas-dbcs: Oracle Database Cloud Service instance provisioning

Declarative configuration documents for DBCS service instances, mapped onto
create/read/delete calls against the provisioning REST API.

Example:
    from opaas_dbcs import (
        ServiceInstanceClient,
        ServiceInstanceConfig,
        ServiceInstanceResource,
    )
    from opaas_dbcs.settings import get_provider_settings

    settings = get_provider_settings()
    client = ServiceInstanceClient.from_settings(settings)
    resource = ServiceInstanceResource(client)

    config = ServiceInstanceConfig.from_dict(
        {
            "name": "orders-db",
            "edition": "EE",
            "level": "PAAS",
            "shape": "oc3",
            "subscription_type": "HOURLY",
            "version": "12.2.0.1",
            "ssh_public_key": "ssh-rsa AAAA...",
            "database_configuration": {
                "admin_password": "Pa55_Word",
                "usable_storage": 25,
            },
        }
    )
    resource.create(config)
    print(config.connect_descriptor)
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("opaas-dbcs")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"

from opaas_dbcs.client import ServiceInstanceClient
from opaas_dbcs.errors import (
    NotFoundError,
    OPaaSError,
    RemoteAPIError,
    ValidationError,
)
from opaas_dbcs.instance import (
    Backups,
    DatabaseConfiguration,
    HybridDisasterRecovery,
    InstantiateFromBackup,
    ServiceInstanceConfig,
    ServiceInstanceResource,
)

__all__ = [
    "__version__",
    # Core classes
    "ServiceInstanceClient",
    "ServiceInstanceResource",
    # Configuration document
    "ServiceInstanceConfig",
    "DatabaseConfiguration",
    "InstantiateFromBackup",
    "Backups",
    "HybridDisasterRecovery",
    # Errors
    "OPaaSError",
    "ValidationError",
    "RemoteAPIError",
    "NotFoundError",
]
