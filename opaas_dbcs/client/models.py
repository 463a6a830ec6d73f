"""Request and response structures for the DBCS provisioning API.

Field names follow Python conventions; ``to_payload()`` / ``from_payload()``
translate to and from the JSON keys the REST API uses.  Empty strings and
``False`` flags on optional fields are left out of request bodies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar


class Edition(str, Enum):
    STANDARD = "SE"
    ENTERPRISE = "EE"
    ENTERPRISE_HIGH_PERFORMANCE = "EE_HP"
    ENTERPRISE_EXTREME_PERFORMANCE = "EE_EP"


class Level(str, Enum):
    PAAS = "PAAS"
    BASIC = "BASIC"


class SubscriptionType(str, Enum):
    HOURLY = "HOURLY"
    MONTHLY = "MONTHLY"


class BackupDestination(str, Enum):
    BOTH = "BOTH"
    OSS = "OSS"
    NONE = "NONE"


class NCharSet(str, Enum):
    UTF16 = "AL16UTF16"
    UTF8 = "UTF8"


class ServiceInstanceType(str, Enum):
    # The API wants the lower-case literal; input matches case-insensitively.
    DB = "db"


class ServiceInstanceStatus(str, Enum):
    RUNNING = "Running"
    IN_PROGRESS = "In Progress"
    CONFIGURING = "Configuring"
    STARTING = "Starting"
    STOPPING = "Stopping"
    STOPPED = "Stopped"
    TERMINATING = "Terminating"
    MAINTENANCE = "Maintenance"
    FAILED = "Failed"


# Statuses an instance passes through on its way to a stable state.
TRANSITIONAL_STATUSES = frozenset(
    {
        ServiceInstanceStatus.IN_PROGRESS,
        ServiceInstanceStatus.CONFIGURING,
        ServiceInstanceStatus.STARTING,
        ServiceInstanceStatus.STOPPING,
        ServiceInstanceStatus.TERMINATING,
        ServiceInstanceStatus.MAINTENANCE,
    }
)

E = TypeVar("E", bound=Enum)


def match_enum(enum_cls: type[E], value: Any) -> E:
    """Return the member of ``enum_cls`` whose value matches case-insensitively.

    Raises:
        ValueError: If nothing matches.
    """
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == text:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValueError(f"expected one of [{allowed}], got {value!r}")


def coerce_enum(enum_cls: type[E], value: Any) -> E | str:
    """Like ``match_enum`` but hands back unknown values unchanged."""
    if value is None or value == "":
        return ""
    try:
        return match_enum(enum_cls, value)
    except ValueError:
        return value


def _compact(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is empty (omitempty)."""
    return {k: v for k, v in payload.items() if v not in ("", None, False, [], {})}


def _value(v: Any) -> Any:
    return v.value if isinstance(v, Enum) else v


@dataclass
class AdditionalParameters:
    db_demo: str = ""

    def to_payload(self) -> dict[str, Any]:
        return _compact({"db_demo": self.db_demo})


@dataclass
class ParameterInput:
    """Database-level settings sent with a PaaS-level create request."""

    admin_password: str = field(default="", repr=False)
    backup_destination: BackupDestination = BackupDestination.NONE
    charset: str = ""
    disaster_recovery: bool = False
    failover_database: bool = False
    golden_gate: bool = False
    is_rac: bool = False
    ncharset: NCharSet | str = ""
    pdb_name: str = ""
    sid: str = ""
    timezone: str = ""
    type: ServiceInstanceType = ServiceInstanceType.DB
    usable_storage: str = ""
    snapshot_name: str = ""
    source_service_name: str = ""
    additional_parameters: AdditionalParameters | None = None

    # Backups to cloud storage
    cloud_storage_container: str = ""
    cloud_storage_username: str = field(default="", repr=False)
    cloud_storage_password: str = field(default="", repr=False)
    create_storage_container_if_missing: bool = False

    # Instantiate from backup
    ibkup: bool = False
    ibkup_database_id: str = ""
    ibkup_on_premise: bool = False
    ibkup_cloud_storage_user: str = field(default="", repr=False)
    ibkup_cloud_storage_password: str = field(default="", repr=False)
    ibkup_decryption_key: str = field(default="", repr=False)
    ibkup_service_id: str = ""
    ibkup_wallet_file_content: str = field(default="", repr=False)

    # Hybrid disaster recovery
    hdg: bool = False
    hdg_cloud_storage_container: str = ""
    hdg_cloud_storage_user: str = field(default="", repr=False)
    hdg_cloud_storage_password: str = field(default="", repr=False)

    def to_payload(self) -> dict[str, Any]:
        payload = _compact(
            {
                "charset": self.charset,
                "cloudStorageContainer": self.cloud_storage_container,
                "cloudStoragePwd": self.cloud_storage_password,
                "cloudStorageUser": self.cloud_storage_username,
                "createStorageContainerIfMissing": self.create_storage_container_if_missing,
                "disasterRecovery": self.disaster_recovery,
                "failoverDatabase": self.failover_database,
                "goldenGate": self.golden_gate,
                "hdg": self.hdg,
                "hdgCloudStorageContainer": self.hdg_cloud_storage_container,
                "hdgCloudStoragePassword": self.hdg_cloud_storage_password,
                "hdgCloudStorageUser": self.hdg_cloud_storage_user,
                "ibkup": self.ibkup,
                "ibkupCloudStoragePassword": self.ibkup_cloud_storage_password,
                "ibkupCloudStorageUser": self.ibkup_cloud_storage_user,
                "ibkupDatabaseID": self.ibkup_database_id,
                "ibkupDecryptionKey": self.ibkup_decryption_key,
                "ibkupOnPremise": self.ibkup_on_premise,
                "ibkupServiceID": self.ibkup_service_id,
                "ibkupWalletFileContent": self.ibkup_wallet_file_content,
                "isRac": self.is_rac,
                "ncharset": _value(self.ncharset),
                "pdbName": self.pdb_name,
                "sid": self.sid,
                "snapshotName": self.snapshot_name,
                "sourceServiceName": self.source_service_name,
                "timezone": self.timezone,
            }
        )
        # Always sent, even when empty.
        payload["adminPassword"] = self.admin_password
        payload["backupDestination"] = _value(self.backup_destination)
        payload["type"] = _value(self.type)
        payload["usableStorage"] = self.usable_storage
        if self.additional_parameters is not None:
            extra = self.additional_parameters.to_payload()
            if extra:
                payload["additionalParams"] = extra
        return payload


@dataclass
class CreateServiceInstanceInput:
    name: str
    edition: Edition
    level: Level
    shape: str
    subscription_type: SubscriptionType
    version: str
    vm_public_key: str = field(repr=False)
    description: str = ""
    enable_notification: bool = False
    notification_email: str = ""
    ip_network: str = ""
    ip_reservations: list[str] = field(default_factory=list)
    is_byol: bool = False
    use_high_performance_storage: bool = False
    region: str = ""
    availability_domain: str = ""
    subnet: str = ""
    parameter: ParameterInput | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "serviceName": self.name,
            "edition": _value(self.edition),
            "level": _value(self.level),
            "shape": self.shape,
            "subscriptionType": _value(self.subscription_type),
            "version": self.version,
            "vmPublicKeyText": self.vm_public_key,
        }
        payload.update(
            _compact(
                {
                    "availabilityDomain": self.availability_domain,
                    "description": self.description,
                    "enableNotification": self.enable_notification,
                    "ipNetwork": self.ip_network,
                    "ipReservations": list(self.ip_reservations),
                    "isBYOL": self.is_byol,
                    "notificationEmail": self.notification_email,
                    "region": self.region,
                    "subnet": self.subnet,
                    "useHighPerformanceStorage": self.use_high_performance_storage,
                }
            )
        )
        if self.parameter is not None:
            payload["parameters"] = [self.parameter.to_payload()]
        return payload


@dataclass
class GetServiceInstanceInput:
    name: str


@dataclass
class DeleteServiceInstanceInput:
    name: str


@dataclass
class ServiceInstance:
    """A service instance as reported by the API."""

    name: str
    status: ServiceInstanceStatus | str = ""
    description: str = ""
    edition: Edition | str = ""
    level: Level | str = ""
    shape: str = ""
    subscription_type: SubscriptionType | str = ""
    version: str = ""
    region: str = ""
    availability_domain: str = ""
    ip_network: str = ""
    subnet: str = ""
    is_byol: bool = False
    use_high_performance_storage: bool = False
    backup_destination: BackupDestination | str = ""
    charset: str = ""
    ncharset: NCharSet | str = ""
    pdb_name: str = ""
    sid: str = ""
    timezone: str = ""
    failover_database: bool = False
    cloud_storage_container: str = ""
    compute_site_name: str = ""
    connect_descriptor: str = ""
    dbaas_monitor_url: str = ""
    em_url: str = ""
    glassfish_url: str = ""
    identity_domain: str = ""
    uri: str = ""

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> ServiceInstance:
        """Build a ``ServiceInstance`` from a decoded GET response body."""

        def _str(*keys: str) -> str:
            for key in keys:
                val = data.get(key)
                if val is not None:
                    return str(val)
            return ""

        def _bool(*keys: str) -> bool:
            for key in keys:
                val = data.get(key)
                if val is None:
                    continue
                if isinstance(val, str):
                    return val.strip().lower() in ("true", "yes", "1")
                return bool(val)
            return False

        return cls(
            name=_str("service_name", "serviceName"),
            status=coerce_enum(ServiceInstanceStatus, _str("status")),
            description=_str("description"),
            edition=coerce_enum(Edition, _str("edition")),
            level=coerce_enum(Level, _str("level")),
            shape=_str("shape"),
            subscription_type=coerce_enum(
                SubscriptionType, _str("subscriptionType", "subscription_type")
            ),
            version=_str("version"),
            region=_str("region"),
            availability_domain=_str("availability_domain", "availabilityDomain"),
            ip_network=_str("ipNetwork", "ip_network"),
            subnet=_str("subnet"),
            is_byol=_bool("isBYOL", "is_byol"),
            use_high_performance_storage=_bool(
                "useHighPerformanceStorage", "use_high_performance_storage"
            ),
            backup_destination=coerce_enum(
                BackupDestination, _str("backup_destination", "backupDestination")
            ),
            charset=_str("charset"),
            ncharset=coerce_enum(NCharSet, _str("ncharset")),
            pdb_name=_str("pdbName", "pdb_name"),
            sid=_str("sid"),
            timezone=_str("timezone"),
            failover_database=_bool("failover_database", "failoverDatabase"),
            cloud_storage_container=_str(
                "cloud_storage_container", "cloudStorageContainer"
            ),
            compute_site_name=_str("compute_site_name", "computeSiteName"),
            connect_descriptor=_str("connect_descriptor", "connectDescriptor"),
            dbaas_monitor_url=_str("dbaasmonitor_url", "dbaasMonitorURL"),
            em_url=_str("em_url", "emURL"),
            glassfish_url=_str("glassfish_url", "glassFishURL"),
            identity_domain=_str("identity_domain", "identityDomain"),
            uri=_str("service_uri", "uri"),
        )
