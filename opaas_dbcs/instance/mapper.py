"""Translate between the configuration document and API structures.

Forward direction (document -> create request) applies defaults and the
cross-field rules; reverse direction (API record -> document) is assignment,
keeping the document's enum values where the record leaves them out.
Nothing in here performs I/O.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from opaas_dbcs.client.models import (
    AdditionalParameters,
    BackupDestination,
    CreateServiceInstanceInput,
    DeleteServiceInstanceInput,
    GetServiceInstanceInput,
    Level,
    ParameterInput,
    ServiceInstance,
)
from opaas_dbcs.errors import ValidationError
from opaas_dbcs.instance.config import ServiceInstanceConfig

logger = logging.getLogger(__name__)

BACKUPS_REQUIRED_MSG = (
    "backups must be set if backup_destination is set to OSS or BOTH"
)
HDG_EXCLUSIVE_MSG = (
    "hybrid_disaster_recovery cannot be set if is_rac or failover_database "
    "is set to true"
)

_CLOUD_BACKUP_DESTINATIONS = (BackupDestination.OSS, BackupDestination.BOTH)


def build_create_request(config: ServiceInstanceConfig) -> CreateServiceInstanceInput:
    """Build the create request for ``config``.

    Raises:
        ValidationError: If the database parameter breaks a cross-field rule.
            No partial request is returned.
    """
    request = CreateServiceInstanceInput(
        name=config.name,
        edition=config.edition,
        level=config.level,
        shape=config.shape,
        subscription_type=config.subscription_type,
        version=config.version,
        vm_public_key=config.ssh_public_key,
        ip_reservations=list(config.ip_reservations),
        is_byol=config.byol,
        use_high_performance_storage=config.high_performance_storage,
    )
    if config.description:
        request.description = config.description
    if config.notification_email:
        request.enable_notification = True
        request.notification_email = config.notification_email
    if config.ip_network:
        request.ip_network = config.ip_network
    if config.region:
        request.region = config.region
    if config.availability_domain:
        request.availability_domain = config.availability_domain
    if config.subnet:
        request.subnet = config.subnet

    # Only the PaaS level carries a database parameter.
    if request.level == Level.PAAS:
        request.parameter = build_parameter(config)

    logger.debug("Built create request for %s: %r", config.name, request)
    return request


def build_parameter(config: ServiceInstanceConfig) -> ParameterInput:
    """Map ``database_configuration`` and the optional groups to a parameter."""
    db = config.database_configuration
    if db is None:
        raise ValidationError("database_configuration is required when level is PAAS")

    parameter = ParameterInput(
        admin_password=db.admin_password,
        backup_destination=db.backup_destination,
        charset=db.character_set,
        disaster_recovery=db.disaster_recovery,
        failover_database=db.failover_database,
        golden_gate=db.golden_gate,
        is_rac=db.is_rac,
        ncharset=db.national_character_set,
        pdb_name=db.pdb_name,
        sid=db.sid,
        timezone=db.timezone,
        type=db.type,
        usable_storage=str(db.usable_storage),
    )
    if db.snapshot_name:
        parameter.snapshot_name = db.snapshot_name
    if db.source_service_name:
        parameter.source_service_name = db.source_service_name
    if db.db_demo:
        parameter.additional_parameters = AdditionalParameters(db_demo=db.db_demo)

    map_restore_from_backup(config, parameter)
    map_backup_destination(config, parameter)
    map_hybrid_dr(config, parameter)
    return parameter


def map_restore_from_backup(
    config: ServiceInstanceConfig, parameter: ParameterInput
) -> None:
    ibkup = config.instantiate_from_backup
    if ibkup is None:
        return
    parameter.ibkup = True
    # The API takes the container value as the backup's database ID.
    parameter.ibkup_database_id = ibkup.cloud_storage_container
    parameter.ibkup_on_premise = ibkup.on_premise
    if ibkup.cloud_storage_username:
        parameter.ibkup_cloud_storage_user = ibkup.cloud_storage_username
    if ibkup.cloud_storage_password:
        parameter.ibkup_cloud_storage_password = ibkup.cloud_storage_password
    if ibkup.decryption_key:
        parameter.ibkup_decryption_key = ibkup.decryption_key
    if ibkup.service_id:
        parameter.ibkup_service_id = ibkup.service_id
    if ibkup.wallet_file_content:
        parameter.ibkup_wallet_file_content = ibkup.wallet_file_content


def map_backup_destination(
    config: ServiceInstanceConfig, parameter: ParameterInput
) -> None:
    """Attach the backup container.

    Raises:
        ValidationError: If ``parameter.backup_destination`` is OSS or BOTH
            and no ``backups`` group is set.
    """
    backups = config.backups
    if parameter.backup_destination in _CLOUD_BACKUP_DESTINATIONS and backups is None:
        raise ValidationError(BACKUPS_REQUIRED_MSG)
    if backups is None:
        return
    parameter.cloud_storage_container = backups.cloud_storage_container
    parameter.create_storage_container_if_missing = backups.create_if_missing
    if backups.cloud_storage_username:
        parameter.cloud_storage_username = backups.cloud_storage_username
    if backups.cloud_storage_password:
        parameter.cloud_storage_password = backups.cloud_storage_password


def map_hybrid_dr(config: ServiceInstanceConfig, parameter: ParameterInput) -> None:
    """Attach the hybrid disaster recovery settings.

    Raises:
        ValidationError: If the group is set while ``parameter.is_rac`` or
            ``parameter.failover_database`` is true.
    """
    hdg = config.hybrid_disaster_recovery
    if hdg is None:
        return
    if parameter.failover_database or parameter.is_rac:
        raise ValidationError(HDG_EXCLUSIVE_MSG)
    parameter.hdg = True
    parameter.hdg_cloud_storage_container = hdg.cloud_storage_container
    if hdg.cloud_storage_username:
        parameter.hdg_cloud_storage_user = hdg.cloud_storage_username
    if hdg.cloud_storage_password:
        parameter.hdg_cloud_storage_password = hdg.cloud_storage_password


def apply_service_instance_record(
    record: ServiceInstance, config: ServiceInstanceConfig
) -> None:
    """Mirror ``record`` into ``config`` in place."""
    config.name = record.name
    config.region = record.region
    config.availability_domain = record.availability_domain
    config.description = record.description
    config.edition = _reported(record.edition, config.edition)
    config.high_performance_storage = record.use_high_performance_storage
    config.ip_network = record.ip_network
    config.byol = record.is_byol
    config.level = _reported(record.level, config.level)
    config.shape = record.shape
    config.subnet = record.subnet
    config.subscription_type = _reported(
        record.subscription_type, config.subscription_type
    )
    config.version = record.version

    config.cloud_storage_container = record.cloud_storage_container
    config.compute_site_name = record.compute_site_name
    config.connect_descriptor = record.connect_descriptor
    config.dbaas_monitor_url = record.dbaas_monitor_url
    config.em_url = record.em_url
    config.glassfish_url = record.glassfish_url
    config.identity_domain = record.identity_domain
    config.uri = record.uri

    db = config.database_configuration
    if db is not None:
        db.backup_destination = _reported(
            record.backup_destination, db.backup_destination
        )
        db.character_set = record.charset
        db.failover_database = record.failover_database
        db.national_character_set = _reported(
            record.ncharset, db.national_character_set
        )
        db.pdb_name = record.pdb_name
        db.sid = record.sid
        db.timezone = record.timezone
        _set_attributes_from_config(config)


def _reported(value: Any, current: Any) -> Any:
    """Return the API-reported enum ``value``, or ``current`` when omitted."""
    if value in ("", None):
        return current
    if not isinstance(value, Enum):
        logger.warning("API reported unrecognized value %r (was %r)", value, current)
    return value


def _set_attributes_from_config(config: ServiceInstanceConfig) -> None:
    # disaster_recovery is deliberately left as the document holds it: the
    # API never reports it, so there is nothing to mirror.
    db = config.database_configuration
    db.disaster_recovery = db.disaster_recovery


def build_get_request(name: str) -> GetServiceInstanceInput:
    return GetServiceInstanceInput(name=name)


def build_delete_request(name: str) -> DeleteServiceInstanceInput:
    return DeleteServiceInstanceInput(name=name)
