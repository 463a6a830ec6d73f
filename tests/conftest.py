"""Pytest configuration for opaas-dbcs tests."""

import copy

import pytest

_BASIC_DOCUMENT = {
    "name": "orders-db",
    "edition": "EE",
    "shape": "oc3",
    "subscription_type": "HOURLY",
    "version": "12.2.0.1",
    "ssh_public_key": "ssh-rsa AAAAB3NzaC1yc2E test@example",
}


@pytest.fixture
def basic_document():
    """A minimal BASIC-level document."""
    return copy.deepcopy(_BASIC_DOCUMENT)


@pytest.fixture
def paas_document():
    """A minimal PAAS-level document with the required database group."""
    doc = copy.deepcopy(_BASIC_DOCUMENT)
    doc["level"] = "PAAS"
    doc["database_configuration"] = [
        {"admin_password": "Pa55_Word#1", "usable_storage": 25}
    ]
    return doc
