"""Synchronous HTTP client for the Hetzner Cloud API.

Uses httpx with bearer-token authentication. Methods return the raw
``ApiResponse`` and never raise on HTTP status: callers validate responses
with ``hangar.validation``. Only transport failures raise.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from loguru import logger

from hangar.constants import DEFAULT_REQUEST_TIMEOUT, HETZNER_API_BASE
from hangar.exceptions import TransportError
from hangar.models import CreateServerRequest


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """Status and decoded JSON body of a provider call."""

    status: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HetznerApi(Protocol):
    """Provider operations needed to manage servers.

    Every method performs exactly one HTTP call.
    """

    def get_images_by_selector(self, selector: str) -> ApiResponse: ...
    def get_networks_by_selector(self, selector: str) -> ApiResponse: ...
    def get_placement_groups_by_selector(self, selector: str) -> ApiResponse: ...
    def get_ssh_keys_by_selector(self, selector: str) -> ApiResponse: ...
    def get_primary_ips_by_selector(self, selector: str) -> ApiResponse: ...

    def get_servers_by_selector(
        self, selector: str, page: int, per_page: int
    ) -> ApiResponse: ...

    def get_server(self, server_id: int) -> ApiResponse: ...
    def create_server(self, request: CreateServerRequest) -> ApiResponse: ...

    def create_ssh_key(
        self, name: str, public_key: str, labels: Mapping[str, str]
    ) -> ApiResponse: ...

    def create_primary_ip(self, body: Mapping[str, Any]) -> ApiResponse: ...
    def power_off_server(self, server_id: int) -> ApiResponse: ...
    def delete_server(self, server_id: int) -> ApiResponse: ...
    def close(self) -> None: ...


type ClientFactory = Callable[[], HetznerApi]


class HetznerClient:
    """httpx-backed implementation of ``HetznerApi``.

    Example:
        with HetznerClient(token) as client:
            response = client.get_server(42)
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = HETZNER_API_BASE,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
        )
        self._log = logger.bind(component="client")

    def __enter__(self) -> HetznerClient:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        self._log.debug("{method} {path}", method=method, path=path)
        try:
            resp = self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            self._log.warning(
                "Request {method} {path} failed: {error}",
                method=method, path=path, error=e,
            )
            raise TransportError(f"{method} {path} failed: {e}") from e

        try:
            body = resp.json() if resp.content else None
        except ValueError:
            body = resp.text
        return ApiResponse(status=resp.status_code, body=body)

    def _search(self, path: str, selector: str) -> ApiResponse:
        return self._request("GET", path, params={"label_selector": selector})

    # =========================================================================
    # Search
    # =========================================================================

    def get_images_by_selector(self, selector: str) -> ApiResponse:
        return self._search("/images", selector)

    def get_networks_by_selector(self, selector: str) -> ApiResponse:
        return self._search("/networks", selector)

    def get_placement_groups_by_selector(self, selector: str) -> ApiResponse:
        return self._search("/placement_groups", selector)

    def get_ssh_keys_by_selector(self, selector: str) -> ApiResponse:
        return self._search("/ssh_keys", selector)

    def get_primary_ips_by_selector(self, selector: str) -> ApiResponse:
        return self._search("/primary_ips", selector)

    def get_servers_by_selector(
        self, selector: str, page: int, per_page: int
    ) -> ApiResponse:
        return self._request(
            "GET",
            "/servers",
            params={"label_selector": selector, "page": page, "per_page": per_page},
        )

    # =========================================================================
    # Servers
    # =========================================================================

    def get_server(self, server_id: int) -> ApiResponse:
        return self._request("GET", f"/servers/{server_id}")

    def create_server(self, request: CreateServerRequest) -> ApiResponse:
        return self._request("POST", "/servers", json=request.to_json())

    def power_off_server(self, server_id: int) -> ApiResponse:
        return self._request("POST", f"/servers/{server_id}/actions/poweroff")

    def delete_server(self, server_id: int) -> ApiResponse:
        return self._request("DELETE", f"/servers/{server_id}")

    # =========================================================================
    # SSH keys and primary IPs
    # =========================================================================

    def create_ssh_key(
        self, name: str, public_key: str, labels: Mapping[str, str]
    ) -> ApiResponse:
        return self._request(
            "POST",
            "/ssh_keys",
            json={"name": name, "public_key": public_key, "labels": dict(labels)},
        )

    def create_primary_ip(self, body: Mapping[str, Any]) -> ApiResponse:
        return self._request("POST", "/primary_ips", json=body)


def client_factory(
    token: str,
    *,
    base_url: str = HETZNER_API_BASE,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> ClientFactory:
    """Return a factory producing a fresh ``HetznerClient`` per operation."""

    def factory() -> HetznerApi:
        return HetznerClient(token, base_url=base_url, timeout=timeout)

    return factory
