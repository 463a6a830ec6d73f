"""Provider settings loader.

Config search order:
1) OPAAS_CONFIG_PATH (explicit override)
2) ~/.config/opaas-dbcs/provider.yaml
3) ./config/provider.yaml (repo-local)

Supported file shapes:
- flat: {user, password, identity_domain, ...}
- profiles: {"profiles": {"default": {...}, "prod": {...}}}

Resolution order (highest precedence first):
1) OPAAS_<FIELD> environment variables (e.g. OPAAS_IDENTITY_DOMAIN)
2) Config file (selected profile)
3) hard defaults
"""

from __future__ import annotations

import os
import stat
import warnings
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from opaas_dbcs.client.service_instance import (
    DEFAULT_CREATE_TIMEOUT,
    DEFAULT_DELETE_TIMEOUT,
    DEFAULT_ENDPOINT,
    DEFAULT_POLL_INTERVAL,
)

DEFAULT_CONFIG_FILENAME = "provider.yaml"
DEFAULT_PROFILE = "default"
ENV_PREFIX = "OPAAS_"

_REQUIRED = ("user", "password", "identity_domain")
_TRUE = ("1", "true", "yes", "on")


@dataclass
class ProviderSettings:
    """Credentials and endpoint for the provisioning API.

    Attributes:
        user: Cloud account user name.
        password: Cloud account password.
        identity_domain: Identity domain (tenant) owning the instances.
        database_endpoint: Base URL of the DBCS REST API.
        max_retries: Connection retries performed by the HTTP transport.
        insecure: Skip TLS certificate verification.
        poll_interval: Seconds between status polls.
        create_timeout: Seconds to wait for a create to finish.
        delete_timeout: Seconds to wait for a delete to finish.
    """

    user: str = ""
    password: str = ""
    identity_domain: str = ""
    database_endpoint: str = DEFAULT_ENDPOINT
    max_retries: int = 1
    insecure: bool = False
    poll_interval: float = DEFAULT_POLL_INTERVAL
    create_timeout: float = DEFAULT_CREATE_TIMEOUT
    delete_timeout: float = DEFAULT_DELETE_TIMEOUT

    def __repr__(self) -> str:
        return (
            f"ProviderSettings(user={self.user!r}, password='***', "
            f"identity_domain={self.identity_domain!r}, "
            f"database_endpoint={self.database_endpoint!r})"
        )

    def missing(self) -> list[str]:
        """Return the names of required settings that are empty."""
        return [name for name in _REQUIRED if not getattr(self, name)]


def _default_config_path() -> Path:
    return Path.home() / ".config" / "opaas-dbcs" / DEFAULT_CONFIG_FILENAME


def _repo_config_path() -> Path:
    return Path.cwd() / "config" / DEFAULT_CONFIG_FILENAME


def get_config_paths() -> list[Path]:
    """Return the ordered list of config paths to search."""
    override = os.environ.get("OPAAS_CONFIG_PATH")
    if override:
        return [Path(override).expanduser()]
    return [_default_config_path(), _repo_config_path()]


def _load_yaml(path: Path) -> dict[str, Any]:
    # Warn if config file is readable by group or others
    try:
        file_stat = os.stat(path)
        if file_stat.st_mode & (stat.S_IRGRP | stat.S_IROTH):
            warnings.warn(
                f"Config file {path} is readable by other users. "
                f"Run: chmod 600 {path}",
                stacklevel=2,
            )
    except OSError:
        pass

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Config root must be a mapping/dict, got {type(data).__name__}"
        )
    return data


def load_config() -> dict[str, Any]:
    """Load the first config file found; return {} if none exists."""
    for path in get_config_paths():
        if path.exists():
            return _load_yaml(path)
    return {}


def _coerce(kind: Any, value: Any) -> Any:
    if kind in (bool, "bool"):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE
    if kind in (int, "int"):
        return int(value)
    if kind in (float, "float"):
        return float(value)
    return str(value)


def get_provider_settings(
    profile: str | None = None, require: bool = True
) -> ProviderSettings:
    """Resolve provider settings for ``profile``.

    Args:
        profile: Profile name in the config file (default: ``default``, or
            ``OPAAS_PROFILE`` when set).
        require: Raise if a required setting is missing.

    Raises:
        ValueError: If ``require`` and user/password/identity_domain are unset.
    """
    profile = profile or os.environ.get(f"{ENV_PREFIX}PROFILE") or DEFAULT_PROFILE

    root = load_config()
    if isinstance(root.get("profiles"), dict):
        file_cfg = root["profiles"].get(profile, {}) or {}
    else:
        file_cfg = root

    values: dict[str, Any] = {}
    for f in fields(ProviderSettings):
        env_val = os.environ.get(f"{ENV_PREFIX}{f.name.upper()}")
        if env_val is not None:
            values[f.name] = _coerce(f.type, env_val)
        elif file_cfg.get(f.name) is not None:
            values[f.name] = _coerce(f.type, file_cfg[f.name])

    settings = ProviderSettings(**values)
    if require:
        missing = settings.missing()
        if missing:
            raise ValueError(
                f"Missing provider settings: {', '.join(missing)}. Set "
                + ", ".join(f"{ENV_PREFIX}{m.upper()}" for m in missing)
                + " or add them to "
                + str(get_config_paths()[0])
            )
    return settings
