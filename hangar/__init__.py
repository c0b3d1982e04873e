"""Hangar - provision Hetzner Cloud servers from declarative templates.

Example:

    from hangar import ResourceManager, ServerAgent, build_manager, load_config, resolve_template

    config = load_config()
    manager = build_manager("ci", config)
    template = resolve_template("builder", config)

    info = manager.create_server(ServerAgent(template, "builder-1"))
    manager.wait_for_running(info)

    for server in manager.fetch_all_servers("ci"):
        print(server["name"], server["status"])

    manager.destroy_server(info.server_detail)
"""

from hangar.builder import ServerRequestBuilder
from hangar.client import ApiResponse, HetznerApi, HetznerClient, client_factory
from hangar.config import (
    CloudConfig,
    build_manager,
    load_config,
    resolve_cloud,
    resolve_credentials,
    resolve_template,
)
from hangar.credentials import (
    CredentialStore,
    InMemoryCredentialStore,
    SecretText,
    SSHPrivateKey,
    derive_public_key,
)
from hangar.exceptions import (
    AmbiguousReferenceError,
    ConfigurationError,
    CredentialError,
    HangarError,
    ProtocolError,
    ProviderError,
    ResourceStateError,
    ServerTimeoutError,
    TransportError,
)
from hangar.logging import LogConfig, setup_logging, teardown_logging
from hangar.manager import ResourceManager
from hangar.models import CreateServerRequest, PublicNet, ServerDetail, SshKeyDetail
from hangar.primary_ip import (
    AllocatePrimaryIp,
    DefaultPrimaryIp,
    PrimaryIpBySelector,
    PrimaryIpStrategy,
)
from hangar.ssh_keys import SshKeyProvisioner
from hangar.types import ConnectivityType, ServerAgent, ServerInfo, ServerTemplate

__all__ = [
    # Manager
    "ResourceManager",
    "ServerRequestBuilder",
    "SshKeyProvisioner",
    # Types
    "ConnectivityType",
    "ServerAgent",
    "ServerInfo",
    "ServerTemplate",
    "CreateServerRequest",
    "PublicNet",
    "ServerDetail",
    "SshKeyDetail",
    # Primary IP
    "PrimaryIpStrategy",
    "DefaultPrimaryIp",
    "PrimaryIpBySelector",
    "AllocatePrimaryIp",
    # Client
    "ApiResponse",
    "HetznerApi",
    "HetznerClient",
    "client_factory",
    # Credentials
    "CredentialStore",
    "InMemoryCredentialStore",
    "SSHPrivateKey",
    "SecretText",
    "derive_public_key",
    # Config
    "CloudConfig",
    "build_manager",
    "load_config",
    "resolve_cloud",
    "resolve_credentials",
    "resolve_template",
    # Logging
    "LogConfig",
    "setup_logging",
    "teardown_logging",
    # Errors
    "HangarError",
    "ProviderError",
    "TransportError",
    "ProtocolError",
    "AmbiguousReferenceError",
    "CredentialError",
    "ResourceStateError",
    "ConfigurationError",
    "ServerTimeoutError",
]
