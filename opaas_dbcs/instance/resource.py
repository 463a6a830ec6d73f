"""Create/read/delete lifecycle for a DBCS service instance resource.

``ServiceInstanceResource`` drives the mapper and the API client the way an
infrastructure-as-code framework would: the document's ``id`` is set only
after a successful create, and a read that finds nothing clears it.
Every attribute forces a new instance, so there is no update.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from opaas_dbcs.client.service_instance import ServiceInstanceClient
from opaas_dbcs.errors import NotFoundError, RemoteAPIError
from opaas_dbcs.instance.config import ServiceInstanceConfig
from opaas_dbcs.instance.mapper import (
    apply_service_instance_record,
    build_create_request,
    build_delete_request,
    build_get_request,
)

logger = logging.getLogger(__name__)


class ServiceInstanceResource:
    """Lifecycle operations for one kind of resource over an injected client."""

    def __init__(self, client: ServiceInstanceClient | Any) -> None:
        self._client = client

    def create(
        self,
        config: ServiceInstanceConfig,
        callback: Callable[[str, float], None] | None = None,
    ) -> ServiceInstanceConfig:
        """Create the instance described by ``config`` and refresh it.

        Raises:
            ValidationError: If ``config`` breaks a cross-field rule.  Nothing
                is sent to the API.
            RemoteAPIError: If the API rejects or fails the create.
        """
        logger.debug("Resource state: %r", config)
        logger.info("Creating database service instance %s", config.name)

        request = build_create_request(config)
        try:
            self._client.create_service_instance(request, callback=callback)
        except RemoteAPIError as exc:
            raise RemoteAPIError(
                f"Error creating database service instance: {exc}",
                status_code=exc.status_code,
                body=exc.body,
            ) from exc

        config.id = request.name
        self.read(config)
        return config

    def read(self, config: ServiceInstanceConfig) -> ServiceInstanceConfig:
        """Mirror the API's view of ``config.id`` into ``config``.

        A missing instance clears ``config.id``; it is not an error.
        """
        logger.debug("Reading state of database service instance %s", config.id)
        try:
            record = self._client.get_service_instance(build_get_request(config.id))
        except NotFoundError:
            logger.info(
                "Database service instance %s no longer exists", config.id
            )
            config.id = ""
            return config
        except RemoteAPIError as exc:
            raise RemoteAPIError(
                f"Error reading database service instance {config.id}: {exc}",
                status_code=exc.status_code,
                body=exc.body,
            ) from exc

        if record is None:
            config.id = ""
            return config

        logger.debug(
            "Read state of database service instance %s: %r", config.id, record
        )
        apply_service_instance_record(record, config)
        return config

    def delete(
        self,
        config: ServiceInstanceConfig,
        callback: Callable[[str, float], None] | None = None,
    ) -> None:
        """Delete the instance identified by ``config.id``."""
        logger.info("Deleting database service instance %s", config.id)
        try:
            self._client.delete_service_instance(
                build_delete_request(config.id), callback=callback
            )
        except RemoteAPIError as exc:
            raise RemoteAPIError(
                f"Error deleting database service instance: {exc}",
                status_code=exc.status_code,
                body=exc.body,
            ) from exc

    def import_instance(self, name: str) -> ServiceInstanceConfig:
        """Adopt an existing instance by name.

        Returns the refreshed document; its ``id`` is empty if ``name`` does
        not exist.
        """
        config = ServiceInstanceConfig.for_import(name)
        return self.read(config)
