"""TOML-based cloud, template and credential configuration.

Loads ~/.hangar/defaults.toml (global) and hangar.toml (project), merges
them, and resolves named clouds and templates.

Example hangar.toml:

    [credentials.hcloud-token]
    type = "secret-text"
    secret_env = "HCLOUD_TOKEN"

    [credentials.agent-key]
    type = "ssh-private-key"
    private_key_file = "~/.ssh/id_ed25519"

    [clouds.ci]
    credentials_id = "hcloud-token"

    [templates.builder]
    cloud = "ci"
    image = "os=ubuntu,role=builder"
    server_type = "cx22"
    location = "fsn1"
    ssh_credentials_id = "agent-key"
    connectivity = "both"
    network = "env=ci"

    [templates.builder.primary_ip]
    type = "by-selector"
    selector = "pool=builders"
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hangar.client import client_factory
from hangar.constants import DEFAULT_PAGE_SIZE, DEFAULT_REQUEST_TIMEOUT, HETZNER_API_BASE
from hangar.credentials import (
    Credential,
    InMemoryCredentialStore,
    SecretText,
    SSHPrivateKey,
    load_private_key_file,
)
from hangar.exceptions import ConfigurationError
from hangar.manager import ResourceManager
from hangar.primary_ip import (
    AllocatePrimaryIp,
    DefaultPrimaryIp,
    PrimaryIpBySelector,
    PrimaryIpStrategy,
)
from hangar.types import ConnectivityType, ServerTemplate

type RawConfig = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".hangar" / "defaults.toml"
PROJECT_CONFIG_NAME = "hangar.toml"

_SECTIONS = ("clouds", "templates", "credentials")


@dataclass(frozen=True, slots=True)
class CloudConfig:
    """Connection settings of one Hetzner project."""

    name: str
    credentials_id: str
    api_url: str = HETZNER_API_BASE
    timeout: float = DEFAULT_REQUEST_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    with path.open("rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    """Merge the global and project files; the project file wins key by key.

    Raises:
        ConfigurationError: On invalid TOML, or when a known section is not a
            table of named tables.
    """
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME
    project_cfg = _read_toml(project_path)

    merged = _deep_merge(global_cfg, project_cfg)
    for section in _SECTIONS:
        entries = merged.setdefault(section, {})
        if not isinstance(entries, dict):
            raise ConfigurationError(f"'{section}' must be a table, got {entries!r}")
        for name, entry in entries.items():
            if not isinstance(entry, dict):
                raise ConfigurationError(
                    f"{section[:-1].capitalize()} '{name}' must be a table, got {entry!r}"
                )
    return merged


def _section(config: RawConfig, section: str, name: str) -> RawConfig:
    entries = config[section]
    if name not in entries:
        raise ConfigurationError(
            f"{section[:-1].capitalize()} '{name}' not found. "
            f"Available: {', '.join(entries) or 'none'}"
        )
    return dict(entries[name])


def _from_env_or_value(raw: RawConfig, key: str, *, credential: str) -> str | None:
    if (env_name := raw.get(f"{key}_env")) is not None:
        if env_name not in os.environ:
            raise ConfigurationError(
                f"Credentials '{credential}' reference unset environment variable {env_name}"
            )
        return os.environ[env_name]
    return raw.get(key)


def _build_credential(credentials_id: str, raw: RawConfig) -> Credential:
    match raw.get("type"):
        case "ssh-private-key":
            passphrase = _from_env_or_value(raw, "passphrase", credential=credentials_id)
            if "private_key" in raw:
                return SSHPrivateKey(credentials_id, raw["private_key"], passphrase)
            if "private_key_file" in raw:
                return load_private_key_file(credentials_id, raw["private_key_file"], passphrase)
            raise ConfigurationError(
                f"Credentials '{credentials_id}' need 'private_key' or 'private_key_file'"
            )
        case "secret-text":
            secret = _from_env_or_value(raw, "secret", credential=credentials_id)
            if secret is None:
                raise ConfigurationError(
                    f"Credentials '{credentials_id}' need 'secret' or 'secret_env'"
                )
            return SecretText(credentials_id, secret)
        case other:
            raise ConfigurationError(
                f"Credentials '{credentials_id}' have unknown type '{other}'. "
                "Valid: ssh-private-key, secret-text"
            )


def resolve_credentials(config: RawConfig) -> InMemoryCredentialStore:
    store = InMemoryCredentialStore()
    for credentials_id, raw in config["credentials"].items():
        store.add(_build_credential(credentials_id, raw))
    return store


def resolve_cloud(name: str, config: RawConfig) -> CloudConfig:
    raw = _section(config, "clouds", name)
    if "credentials_id" not in raw:
        raise ConfigurationError(f"Cloud '{name}' missing 'credentials_id' field")
    try:
        return CloudConfig(name=name, **raw)
    except TypeError as e:
        raise ConfigurationError(f"Invalid cloud '{name}': {e}") from e


def _build_primary_ip(raw: RawConfig | None) -> PrimaryIpStrategy:
    if raw is None:
        return DefaultPrimaryIp()
    raw = dict(raw)
    match raw.pop("type", "default"):
        case "default":
            return DefaultPrimaryIp()
        case "by-selector":
            if "selector" not in raw:
                raise ConfigurationError("Primary IP 'by-selector' missing 'selector' field")
            return PrimaryIpBySelector(**raw)
        case "allocate":
            return AllocatePrimaryIp(**raw)
        case other:
            raise ConfigurationError(
                f"Unknown primary IP type '{other}'. Valid: default, by-selector, allocate"
            )


def _id_field(template: str, key: str, value: Any) -> str:
    """TOML reads bare IDs as integers; templates keep them as strings."""
    match value:
        case str():
            return value
        case int() if not isinstance(value, bool):
            return str(value)
        case list() if key == "volume_ids" and all(type(i) is int for i in value):
            return ",".join(map(str, value))
    raise ConfigurationError(
        f"Template '{template}' has invalid '{key}': {value!r}. "
        "Expected an ID or a label expression"
    )


def resolve_template(name: str, config: RawConfig) -> ServerTemplate:
    raw = _section(config, "templates", name)
    cloud = raw.pop("cloud", None)
    if cloud is None:
        raise ConfigurationError(f"Template '{name}' missing 'cloud' field")
    for key in ("network", "placement_group", "volume_ids"):
        if key in raw:
            raw[key] = _id_field(name, key, raw[key])

    connectivity = ConnectivityType.parse(raw.pop("connectivity", ConnectivityType.PUBLIC))
    try:
        primary_ip = _build_primary_ip(raw.pop("primary_ip", None))
        return ServerTemplate(
            cloud_name=cloud, connectivity=connectivity, primary_ip=primary_ip, **raw
        )
    except TypeError as e:
        raise ConfigurationError(f"Invalid template '{name}': {e}") from e


def build_manager(cloud_name: str, config: RawConfig) -> ResourceManager:
    """Build a ResourceManager for a configured cloud."""
    cloud = resolve_cloud(cloud_name, config)
    credentials = resolve_credentials(config)
    token = credentials.get_secret(cloud.credentials_id)
    return ResourceManager(
        client_factory(token, base_url=cloud.api_url, timeout=cloud.timeout),
        credentials,
        page_size=cloud.page_size,
    )
