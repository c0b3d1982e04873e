"""Primary IP strategies.

A strategy receives the provider client and the in-progress create-server
request and may attach a public IPv4 address to it. Strategies are only
applied when the template's connectivity includes public networking.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from loguru import logger

from hangar.client import HetznerApi
from hangar.constants import LABEL_MANAGED_BY, LABEL_VALUE_MANAGER
from hangar.exceptions import ProviderError, ResourceStateError
from hangar.models import CreateServerRequest, PrimaryIpDetail, PublicNet
from hangar.validation import assert_valid_response

_log = logger.bind(component="primary-ip")


@runtime_checkable
class PrimaryIpStrategy(Protocol):
    def apply(self, client: HetznerApi, request: CreateServerRequest) -> None: ...


def _attach_ipv4(request: CreateServerRequest, ip_id: int) -> None:
    request.public_net = PublicNet(enable_ipv4=True, enable_ipv6=False, ipv4=ip_id)


@dataclass(frozen=True, slots=True)
class _Candidate:
    id: int
    address: str
    assigned: bool
    datacenter: str
    location: str


def _candidate(ip: PrimaryIpDetail) -> _Candidate:
    datacenter = ip["datacenter"]
    return _Candidate(
        id=int(ip["id"]),
        address=ip["ip"],
        assigned=ip.get("assignee_id") is not None,
        datacenter=datacenter["name"],
        location=datacenter["location"]["name"],
    )


def _is_usable(candidate: _Candidate, request: CreateServerRequest) -> bool:
    if candidate.assigned:
        return False
    if request.datacenter is not None:
        return candidate.datacenter == request.datacenter
    return candidate.location == request.location


@dataclass(frozen=True, slots=True)
class DefaultPrimaryIp:
    """Let the provider allocate a fresh address (no-op)."""

    def apply(self, client: HetznerApi, request: CreateServerRequest) -> None:
        pass


@dataclass(frozen=True, slots=True)
class PrimaryIpBySelector:
    """Reuse an unassigned primary IP matching a label selector.

    The IP must live in the request's datacenter, or in its location when
    the request names a location. When nothing usable is found the request
    is left untouched unless ``fail_if_error`` is set.
    """

    selector: str
    fail_if_error: bool = False

    def apply(self, client: HetznerApi, request: CreateServerRequest) -> None:
        try:
            candidates = assert_valid_response(
                client.get_primary_ips_by_selector(self.selector),
                lambda b: [_candidate(ip) for ip in b["primary_ips"]],
            )
            usable = next((c for c in candidates if _is_usable(c, request)), None)
            if usable is None:
                raise ResourceStateError(
                    f"No usable primary IP found for expression '{self.selector}'"
                )
        except (ProviderError, ResourceStateError) as e:
            _log.error(
                "Unable to assign primary IP for server {name}: {error}",
                name=request.name, error=e,
            )
            if self.fail_if_error:
                raise
            return
        _log.info("Using primary IP {ip} for server {name}", ip=usable.address, name=request.name)
        _attach_ipv4(request, usable.id)


@dataclass(frozen=True, slots=True)
class AllocatePrimaryIp:
    """Allocate a new IPv4 primary IP next to the server.

    ``auto_delete`` only takes effect once the IP is assigned. If the server
    creation fails after allocation, the IP stays unassigned and must be
    cleaned up by its labels (``LABEL_MANAGED_BY`` plus ``labels``).
    """

    auto_delete: bool = True
    labels: Mapping[str, str] = field(default_factory=dict)

    def apply(self, client: HetznerApi, request: CreateServerRequest) -> None:
        body: dict[str, object] = {
            "name": f"{request.name}-ipv4",
            "type": "ipv4",
            "assignee_type": "server",
            "auto_delete": self.auto_delete,
            "labels": {LABEL_MANAGED_BY: LABEL_VALUE_MANAGER, **self.labels},
        }
        if request.datacenter is not None:
            body["datacenter"] = request.datacenter
        else:
            body["location"] = request.location
        ip_id, address = assert_valid_response(
            client.create_primary_ip(body),
            lambda b: (int(b["primary_ip"]["id"]), b["primary_ip"]["ip"]),
        )
        _log.info("Allocated primary IP {ip} for server {name}", ip=address, name=request.name)
        _attach_ipv4(request, ip_id)
