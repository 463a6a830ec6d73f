"""Configuration document for a DBCS service instance.

The document is what a user writes (YAML or JSON) plus what the read path
mirrors back from the API.  Fields fall into three groups:

- required: must be present in user input;
- optional: may be omitted, some with a default;
- computed: filled only from the API, never accepted from users.

Optional nested groups (``database_configuration``, ``instantiate_from_backup``,
``backups``, ``hybrid_disaster_recovery``) accept either a mapping or a list
of at most one mapping, so documents written for the list-of-one style keep
working.  An empty list means "not set".

Sensitive values (passwords, keys, wallet content) are hidden from ``repr``
and never written out by ``model_dump``.
"""

from __future__ import annotations

from typing import Any

import pydantic
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from opaas_dbcs.client.models import (
    BackupDestination,
    Edition,
    Level,
    NCharSet,
    ServiceInstanceType,
    SubscriptionType,
    coerce_enum,
    match_enum,
)
from opaas_dbcs.errors import ValidationError

USABLE_STORAGE_MIN = 15
USABLE_STORAGE_MAX = 2048

COMPUTED_FIELDS = frozenset(
    {
        "cloud_storage_container",
        "compute_site_name",
        "connect_descriptor",
        "dbaas_monitor_url",
        "em_url",
        "glassfish_url",
        "identity_domain",
        "uri",
    }
)

# Validation context flag: set when parsing a user-authored document.
_USER_INPUT = "user_input"


def _is_user_input(info: ValidationInfo) -> bool:
    return bool(info.context and info.context.get(_USER_INPUT))


def _secret(**kwargs: Any) -> Any:
    return Field(default="", repr=False, exclude=True, **kwargs)


def _enum_field(enum_cls: type, v: Any, info: ValidationInfo) -> Any:
    # Stored documents may hold values the API reported but this release
    # does not know; only user input is held to the known members.
    if _is_user_input(info):
        return match_enum(enum_cls, v)
    return coerce_enum(enum_cls, v)


class DatabaseConfiguration(BaseModel):
    """Database-level settings, used only for PaaS-level instances."""

    model_config = ConfigDict(extra="forbid")

    admin_password: str = _secret()
    backup_destination: BackupDestination | str = BackupDestination.NONE
    character_set: str = "AL32UTF8"
    db_demo: str = ""
    disaster_recovery: bool = False
    failover_database: bool = False
    golden_gate: bool = False
    is_rac: bool = False
    national_character_set: NCharSet | str = NCharSet.UTF16
    pdb_name: str = "pdb1"
    sid: str = "ORCL"
    timezone: str = "UTC"
    type: ServiceInstanceType = ServiceInstanceType.DB
    usable_storage: int = Field(ge=USABLE_STORAGE_MIN, le=USABLE_STORAGE_MAX)
    snapshot_name: str = ""
    source_service_name: str = ""

    @field_validator("backup_destination", mode="before")
    @classmethod
    def _backup_destination(cls, v: Any, info: ValidationInfo) -> Any:
        return _enum_field(BackupDestination, v, info)

    @field_validator("national_character_set", mode="before")
    @classmethod
    def _national_character_set(cls, v: Any, info: ValidationInfo) -> Any:
        return _enum_field(NCharSet, v, info)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, v: Any) -> ServiceInstanceType:
        return match_enum(ServiceInstanceType, v)

    @model_validator(mode="after")
    def _require_admin_password(self, info: ValidationInfo) -> DatabaseConfiguration:
        if _is_user_input(info) and not self.admin_password:
            raise ValueError("admin_password is required")
        return self


class InstantiateFromBackup(BaseModel):
    """Restore the new instance from an existing backup (IBKUP)."""

    model_config = ConfigDict(extra="forbid")

    # Sent to the API as the backup's database ID.
    cloud_storage_container: str
    database_id: str
    cloud_storage_username: str = _secret()
    cloud_storage_password: str = _secret()
    decryption_key: str = _secret()
    on_premise: bool = False
    service_id: str = ""
    wallet_file_content: str = _secret()


class Backups(BaseModel):
    """Cloud storage container that receives database backups."""

    model_config = ConfigDict(extra="forbid")

    cloud_storage_container: str
    cloud_storage_username: str = _secret()
    cloud_storage_password: str = _secret()
    create_if_missing: bool = False


class HybridDisasterRecovery(BaseModel):
    """Hybrid Data Guard (HDG) standby configuration."""

    model_config = ConfigDict(extra="forbid")

    cloud_storage_container: str
    cloud_storage_username: str = _secret()
    cloud_storage_password: str = _secret()


class ServiceInstanceConfig(BaseModel):
    """A DBCS service instance resource document.

    ``id`` is owned by the lifecycle: empty until a create succeeds, and
    cleared again when a read finds the instance gone.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = ""

    # Required
    name: str
    edition: Edition | str
    shape: str
    subscription_type: SubscriptionType | str
    version: str
    ssh_public_key: str

    # Optional
    description: str = ""
    level: Level | str = Level.BASIC
    database_configuration: DatabaseConfiguration | None = None
    instantiate_from_backup: InstantiateFromBackup | None = None
    backups: Backups | None = None
    hybrid_disaster_recovery: HybridDisasterRecovery | None = None
    region: str = ""
    availability_domain: str = ""
    ip_network: str = ""
    ip_reservations: list[str] = Field(default_factory=list)
    notification_email: str = ""
    byol: bool = False
    high_performance_storage: bool = False
    subnet: str = ""

    # Computed
    cloud_storage_container: str = ""
    compute_site_name: str = ""
    connect_descriptor: str = ""
    dbaas_monitor_url: str = ""
    em_url: str = ""
    glassfish_url: str = ""
    identity_domain: str = ""
    uri: str = ""

    @model_validator(mode="before")
    @classmethod
    def _reject_computed(cls, data: Any, info: ValidationInfo) -> Any:
        if _is_user_input(info) and isinstance(data, dict):
            supplied = sorted(COMPUTED_FIELDS.intersection(data))
            if "id" in data:
                supplied.insert(0, "id")
            if supplied:
                raise ValueError(
                    f"computed attributes cannot be set: {', '.join(supplied)}"
                )
        return data

    @field_validator("edition", mode="before")
    @classmethod
    def _edition(cls, v: Any, info: ValidationInfo) -> Any:
        return _enum_field(Edition, v, info)

    @field_validator("level", mode="before")
    @classmethod
    def _level(cls, v: Any, info: ValidationInfo) -> Any:
        return _enum_field(Level, v, info)

    @field_validator("subscription_type", mode="before")
    @classmethod
    def _subscription_type(cls, v: Any, info: ValidationInfo) -> Any:
        return _enum_field(SubscriptionType, v, info)

    @field_validator(
        "database_configuration",
        "instantiate_from_backup",
        "backups",
        "hybrid_disaster_recovery",
        mode="before",
    )
    @classmethod
    def _single_item(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            if len(v) > 1:
                raise ValueError(f"at most 1 item allowed, got {len(v)}")
            return v[0] if v else None
        return v

    @model_validator(mode="after")
    def _paas_needs_database_configuration(self) -> ServiceInstanceConfig:
        if self.level == Level.PAAS and self.database_configuration is None:
            raise ValueError("database_configuration is required when level is PAAS")
        return self

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceInstanceConfig:
        """Parse a user-authored document.

        Raises:
            ValidationError: If the document breaks the schema.
        """
        return _validate(data, user_input=True)

    @classmethod
    def from_state(cls, data: dict[str, Any]) -> ServiceInstanceConfig:
        """Parse a previously stored document (computed fields allowed)."""
        return _validate(data, user_input=False)

    @classmethod
    def for_import(cls, name: str) -> ServiceInstanceConfig:
        """Return a bare document identified only by ``name``.

        The read path fills in everything the API reports; values it never
        reports (``ssh_public_key``, credentials) stay empty.
        """
        return cls.model_construct(
            id=name,
            name=name,
            edition="",
            shape="",
            subscription_type="",
            version="",
            ssh_public_key="",
        )

    def to_state(self) -> dict[str, Any]:
        """Return a JSON-safe dict with sensitive values stripped."""
        return self.model_dump(mode="json")


def format_validation_error(e: pydantic.ValidationError) -> str:
    """Return a compact, human-friendly error summary."""
    parts: list[str] = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", []) if p is not None)
        msg = err.get("msg", "invalid")
        if loc:
            parts.append(f"{loc}: {msg}")
        else:
            parts.append(str(msg))
    return "; ".join(parts) if parts else str(e)


def _validate(data: dict[str, Any], *, user_input: bool) -> ServiceInstanceConfig:
    if not isinstance(data, dict):
        raise ValidationError(
            f"configuration root must be a mapping, got {type(data).__name__}"
        )
    try:
        return ServiceInstanceConfig.model_validate(
            data, context={_USER_INPUT: user_input}
        )
    except pydantic.ValidationError as exc:
        raise ValidationError(format_validation_error(exc)) from exc
