"""HTTP client for the DBCS service-instance REST API.

Provides ``ServiceInstanceClient``, which creates, reads and deletes service
instances and polls them until they settle.  Requests authenticate with HTTP
basic auth plus the ``X-ID-TENANT-NAME`` identity-domain header.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from opaas_dbcs.client.models import (
    TRANSITIONAL_STATUSES,
    CreateServiceInstanceInput,
    DeleteServiceInstanceInput,
    GetServiceInstanceInput,
    ServiceInstance,
    ServiceInstanceStatus,
)
from opaas_dbcs.errors import NotFoundError, RemoteAPIError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://dbaas.oraclecloud.com"
INSTANCES_PATH = "/paas/service/dbcs/api/v1.1/instances/{identity_domain}"
TENANT_HEADER = "X-ID-TENANT-NAME"

DEFAULT_CREATE_TIMEOUT = 60 * 60
DEFAULT_DELETE_TIMEOUT = 60 * 60
DEFAULT_POLL_INTERVAL = 30.0


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of an API error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "detail", "details"):
            if body.get(key):
                return str(body[key])
    return str(body)


class ServiceInstanceClient:
    """Client for DBCS service instances within one identity domain."""

    def __init__(
        self,
        identity_domain: str,
        user: str,
        password: str,
        endpoint: str = DEFAULT_ENDPOINT,
        http_client: httpx.Client | None = None,
        max_retries: int = 1,
        insecure: bool = False,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        create_timeout: float = DEFAULT_CREATE_TIMEOUT,
        delete_timeout: float = DEFAULT_DELETE_TIMEOUT,
    ) -> None:
        self.identity_domain = identity_domain
        self.endpoint = endpoint.rstrip("/")
        self.poll_interval = poll_interval
        self.create_timeout = create_timeout
        self.delete_timeout = delete_timeout
        self._base_path = INSTANCES_PATH.format(identity_domain=identity_domain)
        headers = {
            TENANT_HEADER: identity_domain,
            "Accept": "application/json",
        }
        if http_client is not None:
            self._http = http_client
            self._http.auth = httpx.BasicAuth(user, password)
            self._http.headers.update(headers)
        else:
            self._http = httpx.Client(
                base_url=self.endpoint,
                auth=httpx.BasicAuth(user, password),
                headers=headers,
                transport=httpx.HTTPTransport(retries=max_retries, verify=not insecure),
                timeout=httpx.Timeout(60.0),
            )

    @classmethod
    def from_settings(cls, settings: Any, **kwargs: Any) -> ServiceInstanceClient:
        """Build a client from a ``ProviderSettings`` object."""
        return cls(
            identity_domain=settings.identity_domain,
            user=settings.user,
            password=settings.password,
            endpoint=settings.database_endpoint,
            max_retries=settings.max_retries,
            insecure=settings.insecure,
            poll_interval=settings.poll_interval,
            create_timeout=settings.create_timeout,
            delete_timeout=settings.delete_timeout,
            **kwargs,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ServiceInstanceClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _url(self, name: str | None = None) -> str:
        url = f"{self.endpoint}{self._base_path}"
        if name:
            url += f"/{name}"
        return url

    def _request(
        self, method: str, name: str | None = None, json: Any = None
    ) -> httpx.Response:
        url = self._url(name)
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(method, url, json=json)
        except httpx.HTTPError as exc:
            raise RemoteAPIError(f"{method} {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(
                f"Service instance {name} not found in {self.identity_domain}",
                status_code=404,
                body=response.text,
            )
        if response.is_error:
            raise RemoteAPIError(
                f"{method} {url} returned {response.status_code}: "
                f"{_error_message(response)}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_service_instance(
        self,
        input: CreateServiceInstanceInput,
        callback: Callable[[str, float], None] | None = None,
    ) -> ServiceInstance:
        """Submit a create request and wait until the instance is running.

        Raises:
            RemoteAPIError: If the request is rejected, the instance lands in
                a failed state, or the create timeout elapses.
        """
        logger.info("Creating service instance %s ...", input.name)
        self._request("POST", json=input.to_payload())
        return self.wait_for_status(
            input.name,
            ServiceInstanceStatus.RUNNING,
            timeout=self.create_timeout,
            callback=callback,
        )

    def get_service_instance(self, input: GetServiceInstanceInput) -> ServiceInstance:
        """Return the current record for ``input.name``.

        Raises:
            NotFoundError: If the instance does not exist.
            RemoteAPIError: On any other failure.
        """
        response = self._request("GET", name=input.name)
        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteAPIError(
                f"Invalid JSON describing service instance {input.name}",
                status_code=response.status_code,
                body=response.text,
            ) from exc
        return ServiceInstance.from_payload(data)

    def delete_service_instance(
        self,
        input: DeleteServiceInstanceInput,
        callback: Callable[[str, float], None] | None = None,
    ) -> None:
        """Request deletion and wait until the instance is gone."""
        logger.info("Deleting service instance %s ...", input.name)
        self._request("DELETE", name=input.name)
        self.wait_for_deleted(input.name, callback=callback)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def wait_for_status(
        self,
        name: str,
        target: ServiceInstanceStatus,
        timeout: float | None = None,
        callback: Callable[[str, float], None] | None = None,
    ) -> ServiceInstance:
        """Poll at a fixed interval until the instance reaches ``target``.

        Args:
            name: Service instance name.
            target: Status to wait for.
            timeout: Maximum seconds to wait (default: the create timeout).
            callback: Optional ``(status, elapsed_seconds)`` called each poll.

        Raises:
            RemoteAPIError: On a settled status other than ``target`` or on
                timeout.
        """
        timeout = self.create_timeout if timeout is None else timeout
        start = time.monotonic()

        while True:
            elapsed = time.monotonic() - start
            instance = self.get_service_instance(GetServiceInstanceInput(name=name))
            status = instance.status
            logger.info(
                "Service instance %s: %s (%.0fs elapsed)",
                name,
                getattr(status, "value", status),
                elapsed,
            )
            if callback is not None:
                callback(str(getattr(status, "value", status)), elapsed)

            if status == target:
                return instance
            if status not in TRANSITIONAL_STATUSES:
                raise RemoteAPIError(
                    f"Service instance {name} ended in status "
                    f"{getattr(status, 'value', status) or '(unknown)'}, "
                    f"expected {target.value}"
                )
            if elapsed >= timeout:
                raise RemoteAPIError(
                    f"Timed out after {elapsed:.0f}s waiting for service "
                    f"instance {name} to reach {target.value}"
                )
            time.sleep(self.poll_interval)

    def wait_for_deleted(
        self,
        name: str,
        timeout: float | None = None,
        callback: Callable[[str, float], None] | None = None,
    ) -> None:
        """Poll until GET on ``name`` returns 404."""
        timeout = self.delete_timeout if timeout is None else timeout
        start = time.monotonic()

        while True:
            elapsed = time.monotonic() - start
            try:
                instance = self.get_service_instance(
                    GetServiceInstanceInput(name=name)
                )
            except NotFoundError:
                logger.info("Service instance %s deleted", name)
                return
            status = getattr(instance.status, "value", instance.status)
            logger.info(
                "Service instance %s: %s (%.0fs elapsed)", name, status, elapsed
            )
            if callback is not None:
                callback(str(status), elapsed)
            if elapsed >= timeout:
                raise RemoteAPIError(
                    f"Timed out after {elapsed:.0f}s waiting for service "
                    f"instance {name} to be deleted"
                )
            time.sleep(self.poll_interval)
