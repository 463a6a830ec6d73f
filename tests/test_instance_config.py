"""Tests for the service instance configuration document.

Covers:
- required / optional / default fields
- case-insensitive enum normalization
- single-item sub-groups (mapping, list of one, empty list, too many)
- usable_storage bounds
- computed attributes rejected in user input, accepted from state
- sensitive values hidden from repr and stored state
"""

from __future__ import annotations

import pytest

from opaas_dbcs.client.models import (
    BackupDestination,
    Edition,
    Level,
    NCharSet,
    ServiceInstanceType,
    SubscriptionType,
)
from opaas_dbcs.errors import ValidationError
from opaas_dbcs.instance.config import ServiceInstanceConfig


class TestDefaults:
    def test_level_defaults_to_basic(self, basic_document):
        cfg = ServiceInstanceConfig.from_dict(basic_document)
        assert cfg.level is Level.BASIC

    def test_optional_flags_default_false(self, basic_document):
        cfg = ServiceInstanceConfig.from_dict(basic_document)
        assert cfg.byol is False
        assert cfg.high_performance_storage is False

    def test_sub_groups_default_absent(self, basic_document):
        cfg = ServiceInstanceConfig.from_dict(basic_document)
        assert cfg.database_configuration is None
        assert cfg.instantiate_from_backup is None
        assert cfg.backups is None
        assert cfg.hybrid_disaster_recovery is None

    def test_id_starts_empty(self, basic_document):
        assert ServiceInstanceConfig.from_dict(basic_document).id == ""

    def test_database_defaults(self, paas_document):
        db = ServiceInstanceConfig.from_dict(paas_document).database_configuration
        assert db.backup_destination is BackupDestination.NONE
        assert db.character_set == "AL32UTF8"
        assert db.national_character_set is NCharSet.UTF16
        assert db.pdb_name == "pdb1"
        assert db.sid == "ORCL"
        assert db.timezone == "UTC"
        assert db.type is ServiceInstanceType.DB
        assert db.disaster_recovery is False
        assert db.is_rac is False

    def test_ip_reservations_keep_order(self, basic_document):
        basic_document["ip_reservations"] = ["ipres-b", "ipres-a"]
        cfg = ServiceInstanceConfig.from_dict(basic_document)
        assert cfg.ip_reservations == ["ipres-b", "ipres-a"]


class TestEnums:
    def test_case_insensitive_values_are_normalized(self, paas_document):
        paas_document["edition"] = "ee_hp"
        paas_document["level"] = "paas"
        paas_document["subscription_type"] = "monthly"
        paas_document["database_configuration"][0]["backup_destination"] = "none"
        paas_document["database_configuration"][0]["national_character_set"] = "utf8"
        cfg = ServiceInstanceConfig.from_dict(paas_document)
        assert cfg.edition is Edition.ENTERPRISE_HIGH_PERFORMANCE
        assert cfg.level is Level.PAAS
        assert cfg.subscription_type is SubscriptionType.MONTHLY
        assert cfg.database_configuration.national_character_set is NCharSet.UTF8

    def test_unknown_edition_rejected(self, basic_document):
        basic_document["edition"] = "XE"
        with pytest.raises(ValidationError, match="edition"):
            ServiceInstanceConfig.from_dict(basic_document)

    def test_unknown_type_rejected(self, paas_document):
        paas_document["database_configuration"][0]["type"] = "dataguard"
        with pytest.raises(ValidationError, match="type"):
            ServiceInstanceConfig.from_dict(paas_document)

    def test_unknown_enum_value_accepted_from_state(self, basic_document):
        basic_document["edition"] = "EE_XX"
        cfg = ServiceInstanceConfig.from_state(basic_document)
        assert cfg.edition == "EE_XX"
        assert cfg.to_state()["edition"] == "EE_XX"

    def test_known_enum_value_normalized_from_state(self, basic_document):
        basic_document["edition"] = "ee"
        cfg = ServiceInstanceConfig.from_state(basic_document)
        assert cfg.edition is Edition.ENTERPRISE


class TestRequiredFields:
    @pytest.mark.parametrize(
        "field",
        ["name", "edition", "shape", "subscription_type", "version", "ssh_public_key"],
    )
    def test_missing_required_field(self, basic_document, field):
        del basic_document[field]
        with pytest.raises(ValidationError, match=field):
            ServiceInstanceConfig.from_dict(basic_document)

    def test_paas_requires_database_configuration(self, basic_document):
        basic_document["level"] = "PAAS"
        with pytest.raises(ValidationError, match="database_configuration is required"):
            ServiceInstanceConfig.from_dict(basic_document)

    def test_admin_password_required_in_user_input(self, paas_document):
        del paas_document["database_configuration"][0]["admin_password"]
        with pytest.raises(ValidationError, match="admin_password is required"):
            ServiceInstanceConfig.from_dict(paas_document)

    def test_backups_container_required(self, paas_document):
        paas_document["backups"] = [{"create_if_missing": True}]
        with pytest.raises(ValidationError, match="cloud_storage_container"):
            ServiceInstanceConfig.from_dict(paas_document)

    def test_unknown_key_rejected(self, basic_document):
        basic_document["colour"] = "blue"
        with pytest.raises(ValidationError, match="colour"):
            ServiceInstanceConfig.from_dict(basic_document)

    def test_non_mapping_root_rejected(self):
        with pytest.raises(ValidationError, match="mapping"):
            ServiceInstanceConfig.from_dict(["not", "a", "mapping"])


class TestUsableStorage:
    @pytest.mark.parametrize("size", [15, 2048])
    def test_bounds_inclusive(self, paas_document, size):
        paas_document["database_configuration"][0]["usable_storage"] = size
        cfg = ServiceInstanceConfig.from_dict(paas_document)
        assert cfg.database_configuration.usable_storage == size

    @pytest.mark.parametrize("size", [14, 2049, 0])
    def test_out_of_range(self, paas_document, size):
        paas_document["database_configuration"][0]["usable_storage"] = size
        with pytest.raises(ValidationError, match="usable_storage"):
            ServiceInstanceConfig.from_dict(paas_document)


class TestSingleItemGroups:
    def test_mapping_form_accepted(self, paas_document):
        paas_document["database_configuration"] = {
            "admin_password": "Pa55_Word#1",
            "usable_storage": 50,
        }
        cfg = ServiceInstanceConfig.from_dict(paas_document)
        assert cfg.database_configuration.usable_storage == 50

    def test_empty_list_means_absent(self, paas_document):
        paas_document["backups"] = []
        cfg = ServiceInstanceConfig.from_dict(paas_document)
        assert cfg.backups is None

    def test_more_than_one_item_rejected(self, paas_document):
        paas_document["backups"] = [
            {"cloud_storage_container": "Storage-a/backups"},
            {"cloud_storage_container": "Storage-b/backups"},
        ]
        with pytest.raises(ValidationError, match="at most 1 item"):
            ServiceInstanceConfig.from_dict(paas_document)


class TestComputedAttributes:
    @pytest.mark.parametrize("field", ["uri", "em_url", "connect_descriptor", "id"])
    def test_rejected_in_user_input(self, basic_document, field):
        basic_document[field] = "x"
        with pytest.raises(ValidationError, match="computed attributes cannot be set"):
            ServiceInstanceConfig.from_dict(basic_document)

    def test_accepted_from_state(self, basic_document):
        basic_document.update(
            {
                "id": "orders-db",
                "uri": "https://dbaas.example.com/orders-db",
                "connect_descriptor": "orders-db:1521/PDB1",
            }
        )
        cfg = ServiceInstanceConfig.from_state(basic_document)
        assert cfg.id == "orders-db"
        assert cfg.connect_descriptor == "orders-db:1521/PDB1"

    def test_state_without_admin_password_loads(self, paas_document):
        del paas_document["database_configuration"][0]["admin_password"]
        cfg = ServiceInstanceConfig.from_state(paas_document)
        assert cfg.database_configuration.admin_password == ""


class TestSensitiveValues:
    def test_repr_hides_secrets(self, paas_document):
        paas_document["backups"] = {
            "cloud_storage_container": "Storage-a/backups",
            "cloud_storage_password": "Bucket#Secret",
        }
        text = repr(ServiceInstanceConfig.from_dict(paas_document))
        assert "Pa55_Word#1" not in text
        assert "Bucket#Secret" not in text

    def test_state_excludes_secrets(self, paas_document):
        state = ServiceInstanceConfig.from_dict(paas_document).to_state()
        assert "admin_password" not in state["database_configuration"]
        assert state["edition"] == "EE"
        assert state["level"] == "PAAS"

    def test_state_round_trips(self, paas_document):
        cfg = ServiceInstanceConfig.from_dict(paas_document)
        cfg.id = "orders-db"
        restored = ServiceInstanceConfig.from_state(cfg.to_state())
        assert restored.id == "orders-db"
        assert restored.database_configuration.usable_storage == 25


class TestForImport:
    def test_bare_document(self):
        cfg = ServiceInstanceConfig.for_import("legacy-db")
        assert cfg.id == "legacy-db"
        assert cfg.name == "legacy-db"
        assert cfg.database_configuration is None
        assert cfg.level is Level.BASIC
