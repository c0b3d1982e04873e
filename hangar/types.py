"""Server templates, agents and creation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from hangar.exceptions import ConfigurationError
from hangar.models import ServerDetail, SshKeyDetail
from hangar.primary_ip import DefaultPrimaryIp, PrimaryIpStrategy


class ConnectivityType(StrEnum):
    """Which networks a created server is attached to."""

    PUBLIC = "public"
    PRIVATE = "private"
    BOTH = "both"

    @property
    def includes_public(self) -> bool:
        return self in (ConnectivityType.PUBLIC, ConnectivityType.BOTH)

    @property
    def includes_private(self) -> bool:
        return self in (ConnectivityType.PRIVATE, ConnectivityType.BOTH)

    @classmethod
    def parse(cls, value: str) -> ConnectivityType:
        try:
            return cls(value.lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown connectivity '{value}'. Valid: {', '.join(cls)}"
            ) from None


@dataclass(frozen=True, slots=True)
class ServerTemplate:
    """Immutable description of a class of servers.

    Args:
        cloud_name: Logical cloud this template belongs to; servers are labeled with it.
        image: Image name/ID, or a label expression (contains "=").
        server_type: Provider server type, e.g. "cx22".
        location: Datacenter (contains "-", e.g. "fsn1-dc14") or location (e.g. "fsn1").
        ssh_credentials_id: Credential holding the SSH private key.
        network: Network ID or label expression. Only used with private connectivity.
        placement_group: Placement group ID or label expression.
        volume_ids: Comma-separated volume IDs.
        user_data: Cloud-init user data.
        automount_volumes: Mount attached volumes automatically.
        connectivity: Public, private or both.
        primary_ip: Strategy attaching a public address, used with public connectivity.
    """

    cloud_name: str
    image: str
    server_type: str
    location: str
    ssh_credentials_id: str
    network: str | None = None
    placement_group: str | None = None
    volume_ids: str | None = None
    user_data: str | None = None
    automount_volumes: bool = False
    connectivity: ConnectivityType = ConnectivityType.PUBLIC
    primary_ip: PrimaryIpStrategy = field(default_factory=DefaultPrimaryIp)


@dataclass(frozen=True, slots=True)
class ServerAgent:
    """A requested server: template plus node name."""

    template: ServerTemplate
    node_name: str


@dataclass(slots=True)
class ServerInfo:
    """Result of a server creation, refreshed in place."""

    ssh_key: SshKeyDetail
    server_detail: ServerDetail

    @property
    def server_id(self) -> int:
        return self.server_detail["id"]

    @property
    def status(self) -> str:
        return self.server_detail["status"]
