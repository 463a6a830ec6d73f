"""DBCS service instance resource: document, mapper and lifecycle."""

from opaas_dbcs.instance.config import (
    Backups,
    DatabaseConfiguration,
    HybridDisasterRecovery,
    InstantiateFromBackup,
    ServiceInstanceConfig,
)
from opaas_dbcs.instance.resource import ServiceInstanceResource

__all__ = [
    "Backups",
    "DatabaseConfiguration",
    "HybridDisasterRecovery",
    "InstantiateFromBackup",
    "ServiceInstanceConfig",
    "ServiceInstanceResource",
]
