"""Hetzner Cloud API payload types.

TypedDicts for API responses - no conversion needed. Request bodies are
mutable dataclasses because the primary IP strategies amend them in place
before submission.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, NotRequired, TypedDict


# =============================================================================
# Responses
# =============================================================================


class Pagination(TypedDict):
    page: int
    per_page: int
    previous_page: int | None
    next_page: int | None
    last_page: NotRequired[int | None]
    total_entries: NotRequired[int | None]


class Meta(TypedDict):
    pagination: Pagination


class LocationDetail(TypedDict):
    id: int
    name: str
    network_zone: NotRequired[str]


class DatacenterDetail(TypedDict):
    id: int
    name: str
    location: LocationDetail


class IPv4Detail(TypedDict):
    ip: str
    id: NotRequired[int]


class PublicNetDetail(TypedDict):
    ipv4: IPv4Detail | None
    ipv6: NotRequired[dict[str, Any] | None]


class PrivateNetDetail(TypedDict):
    network: int
    ip: str


class ServerDetail(TypedDict):
    """Server as returned by the provider."""

    id: int
    name: str
    status: str
    public_net: NotRequired[PublicNetDetail]
    private_net: NotRequired[list[PrivateNetDetail]]
    datacenter: NotRequired[DatacenterDetail]
    labels: NotRequired[dict[str, str]]
    created: NotRequired[str]


class SshKeyDetail(TypedDict):
    """Cloud-side SSH public key."""

    id: int
    name: str
    fingerprint: NotRequired[str]
    public_key: NotRequired[str]
    labels: NotRequired[dict[str, str]]


class ImageDetail(TypedDict):
    id: int
    name: NotRequired[str | None]
    description: NotRequired[str]
    labels: NotRequired[dict[str, str]]


class NetworkDetail(TypedDict):
    id: int
    name: str
    ip_range: NotRequired[str]
    labels: NotRequired[dict[str, str]]


class PlacementGroupDetail(TypedDict):
    id: int
    name: str
    type: NotRequired[str]
    labels: NotRequired[dict[str, str]]


class PrimaryIpDetail(TypedDict):
    id: int
    ip: str
    type: str
    assignee_id: int | None
    datacenter: DatacenterDetail
    labels: NotRequired[dict[str, str]]


# =============================================================================
# Requests
# =============================================================================


def _compact(value: Any) -> Any:
    match value:
        case dict():
            return {k: _compact(v) for k, v in value.items() if v is not None}
        case list():
            return [_compact(v) for v in value]
        case _ if is_dataclass(value):
            return _compact({f.name: getattr(value, f.name) for f in fields(value)})
        case _:
            return value


@dataclass(slots=True)
class PublicNet:
    """Public networking section of a create-server request."""

    enable_ipv4: bool = True
    enable_ipv6: bool = True
    ipv4: int | None = None
    ipv6: int | None = None


@dataclass(slots=True)
class CreateServerRequest:
    """Body of ``POST /servers``.

    Exactly one of ``location`` and ``datacenter`` is expected to be set.
    """

    name: str
    server_type: str
    image: str
    ssh_keys: list[str] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    location: str | None = None
    datacenter: str | None = None
    networks: list[int] | None = None
    placement_group: int | None = None
    volumes: list[int] | None = None
    automount: bool | None = None
    user_data: str | None = None
    public_net: PublicNet | None = None

    def to_json(self) -> dict[str, Any]:
        """Serialize to the API body, dropping unset fields."""
        return _compact(self)
