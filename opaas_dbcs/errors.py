"""Exceptions raised by opaas-dbcs.

Two kinds of failure reach callers:

- ``ValidationError``: the configuration document is malformed or violates a
  cross-field rule.  Raised before any request is sent.
- ``RemoteAPIError``: the provisioning API (or the transport to it) failed.
  ``NotFoundError`` is the 404 flavour, which the read path treats as
  "resource absent".
"""

from __future__ import annotations

from typing import Any


class OPaaSError(Exception):
    """Base class for all opaas-dbcs errors."""


class ValidationError(OPaaSError):
    """Configuration document failed schema or cross-field validation."""


class RemoteAPIError(OPaaSError):
    """The provisioning API returned an error or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class NotFoundError(RemoteAPIError):
    """The requested service instance does not exist."""
