from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import asyncssh
import pytest

from hangar.client import ApiResponse
from hangar.credentials import InMemoryCredentialStore, SecretText, SSHPrivateKey
from hangar.models import CreateServerRequest
from hangar.types import ConnectivityType, ServerTemplate


def ok(body: Any, status: int = 200) -> ApiResponse:
    return ApiResponse(status=status, body=body)


def error(status: int, code: str = "invalid_input", message: str = "boom") -> ApiResponse:
    return ApiResponse(status=status, body={"error": {"code": code, "message": message}})


def matches(labels: Mapping[str, str], selector: str) -> bool:
    pairs = (part.split("=", 1) for part in selector.split(","))
    return all(labels.get(key) == value for key, value in pairs)


class FakeHetznerApi:
    """In-memory provider.

    Search calls filter stored resources by their labels. Any method can be
    scripted to fail through ``failures``: an ApiResponse is returned as-is,
    an exception is raised.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.images: list[dict[str, Any]] = []
        self.networks: list[dict[str, Any]] = []
        self.placement_groups: list[dict[str, Any]] = []
        self.ssh_keys: list[dict[str, Any]] = []
        self.primary_ips: list[dict[str, Any]] = []
        self.servers: dict[int, dict[str, Any]] = {}
        self.server_pages: list[list[dict[str, Any]]] | None = None
        self.created_requests: list[CreateServerRequest] = []
        self.failures: dict[str, ApiResponse | Exception] = {}
        self.closed = 0
        self._next_id = 1000

    def _record(self, name: str, *args: Any) -> ApiResponse | None:
        self.calls.append((name, args))
        match self.failures.get(name):
            case Exception() as e:
                raise e
            case ApiResponse() as response:
                return response
            case _:
                return None

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def _search(self, name: str, key: str, items: list[dict[str, Any]], selector: str) -> ApiResponse:
        if scripted := self._record(name, selector):
            return scripted
        return ok({key: [i for i in items if matches(i.get("labels", {}), selector)]})

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def get_images_by_selector(self, selector: str) -> ApiResponse:
        return self._search("get_images_by_selector", "images", self.images, selector)

    def get_networks_by_selector(self, selector: str) -> ApiResponse:
        return self._search("get_networks_by_selector", "networks", self.networks, selector)

    def get_placement_groups_by_selector(self, selector: str) -> ApiResponse:
        return self._search(
            "get_placement_groups_by_selector", "placement_groups", self.placement_groups, selector
        )

    def get_ssh_keys_by_selector(self, selector: str) -> ApiResponse:
        return self._search("get_ssh_keys_by_selector", "ssh_keys", self.ssh_keys, selector)

    def get_primary_ips_by_selector(self, selector: str) -> ApiResponse:
        return self._search("get_primary_ips_by_selector", "primary_ips", self.primary_ips, selector)

    def get_servers_by_selector(self, selector: str, page: int, per_page: int) -> ApiResponse:
        if scripted := self._record("get_servers_by_selector", selector, page, per_page):
            return scripted
        if self.server_pages is not None:
            pages = self.server_pages
        else:
            found = [s for s in self.servers.values() if matches(s.get("labels", {}), selector)]
            pages = [found[i : i + per_page] for i in range(0, len(found), per_page)] or [[]]
        next_page = page + 1 if page < len(pages) else None
        return ok({
            "servers": pages[page - 1],
            "meta": {"pagination": {
                "page": page,
                "per_page": per_page,
                "previous_page": page - 1 or None,
                "next_page": next_page,
            }},
        })

    def get_server(self, server_id: int) -> ApiResponse:
        if scripted := self._record("get_server", server_id):
            return scripted
        if server_id not in self.servers:
            return error(404, "not_found", "server not found")
        return ok({"server": self.servers[server_id]})

    def create_server(self, request: CreateServerRequest) -> ApiResponse:
        if scripted := self._record("create_server", request):
            return scripted
        self.created_requests.append(request)
        server = {
            "id": self._new_id(),
            "name": request.name,
            "status": "initializing",
            "labels": dict(request.labels),
        }
        self.servers[server["id"]] = server
        return ok({"server": server}, status=201)

    def create_ssh_key(self, name: str, public_key: str, labels: Mapping[str, str]) -> ApiResponse:
        if scripted := self._record("create_ssh_key", name, public_key, labels):
            return scripted
        key = {"id": self._new_id(), "name": name, "public_key": public_key, "labels": dict(labels)}
        self.ssh_keys.append(key)
        return ok({"ssh_key": key}, status=201)

    def create_primary_ip(self, body: Mapping[str, Any]) -> ApiResponse:
        if scripted := self._record("create_primary_ip", body):
            return scripted
        ip = {
            "id": self._new_id(),
            "ip": "203.0.113.10",
            "type": body["type"],
            "assignee_id": None,
            "datacenter": {"id": 1, "name": "fsn1-dc14", "location": {"id": 1, "name": "fsn1"}},
            "labels": dict(body.get("labels", {})),
        }
        self.primary_ips.append(ip)
        return ok({"primary_ip": ip}, status=201)

    def power_off_server(self, server_id: int) -> ApiResponse:
        if scripted := self._record("power_off_server", server_id):
            return scripted
        self.servers[server_id]["status"] = "off"
        return ok({"action": {"id": self._new_id(), "command": "stop_server"}}, status=201)

    def delete_server(self, server_id: int) -> ApiResponse:
        if scripted := self._record("delete_server", server_id):
            return scripted
        del self.servers[server_id]
        return ok({"action": {"id": self._new_id(), "command": "delete_server"}})

    def close(self) -> None:
        self.closed += 1


@pytest.fixture
def api() -> FakeHetznerApi:
    return FakeHetznerApi()


@pytest.fixture(scope="session")
def private_key_pem() -> str:
    key = asyncssh.generate_private_key("ssh-ed25519")
    return key.export_private_key("openssh").decode()


@pytest.fixture
def credentials(private_key_pem: str) -> InMemoryCredentialStore:
    return InMemoryCredentialStore({
        "agent-key": SSHPrivateKey("agent-key", private_key_pem),
        "other-key": SSHPrivateKey("other-key", private_key_pem),
        "api-token": SecretText("api-token", "secret-token"),
    })


@pytest.fixture
def template() -> ServerTemplate:
    return ServerTemplate(
        cloud_name="ci",
        image="ubuntu-24.04",
        server_type="cx22",
        location="fsn1",
        ssh_credentials_id="agent-key",
        connectivity=ConnectivityType.PUBLIC,
    )
