"""Server lifecycle management.

The ResourceManager is the composition root: it owns the client factory and
the credential store and exposes create, destroy, refresh and list.

Server creation is fully serialized by one manager-wide lock so concurrent
creations cannot register the same SSH key twice. Destroy, refresh and list
do not take the lock.
"""

from __future__ import annotations

import threading
from contextlib import closing

from loguru import logger
from tenacity import (
    RetryError,
    retry,
    retry_if_result,
    stop_after_delay,
    wait_fixed,
)

from hangar.builder import ServerRequestBuilder
from hangar.client import ClientFactory
from hangar.constants import DEFAULT_PAGE_SIZE, ServerStatus
from hangar.credentials import CredentialStore
from hangar.exceptions import ProviderError, ResourceStateError, ServerTimeoutError
from hangar.labels import server_selector
from hangar.models import ServerDetail
from hangar.pagination import fetch_all_pages
from hangar.ssh_keys import SshKeyProvisioner
from hangar.types import ServerAgent, ServerInfo
from hangar.validation import assert_valid_response


class ResourceManager:
    """Create, destroy, refresh and list managed servers.

    Example:
        manager = ResourceManager(client_factory(token), credentials)
        info = manager.create_server(ServerAgent(template, "worker-1"))
        manager.wait_for_running(info)
        manager.destroy_server(info.server_detail)
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        credentials: CredentialStore,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._client_factory = client_factory
        self._ssh_keys = SshKeyProvisioner(credentials)
        self._page_size = page_size
        self._lock = threading.Lock()
        self._log = logger.bind(component="manager")

    def create_server(self, agent: ServerAgent) -> ServerInfo:
        """Create a server for the agent.

        Raises:
            ResourceStateError: If a provider call fails.
            AmbiguousReferenceError: If a label expression is ambiguous.
            CredentialError: If the SSH credentials are missing or invalid.
        """
        template = agent.template
        with self._lock, closing(self._client_factory()) as client:
            try:
                ssh_key = self._ssh_keys.ensure_key(client, template)
                request = ServerRequestBuilder(client).build(
                    template, ssh_key["name"], agent.node_name
                )
                self._log.info(
                    "Creating server {name} in cloud {cloud}",
                    name=agent.node_name, cloud=template.cloud_name,
                )
                detail: ServerDetail = assert_valid_response(
                    client.create_server(request), lambda b: b["server"]
                )
            except ProviderError as e:
                self._log.error(
                    "Unable to create server {name}: {error}", name=agent.node_name, error=e
                )
                raise ResourceStateError(f"Unable to create server {agent.node_name}: {e}") from e

        self._log.info("Created server {name} (id={id})", name=detail["name"], id=detail["id"])
        return ServerInfo(ssh_key=ssh_key, server_detail=detail)

    def destroy_server(self, server: ServerDetail) -> None:
        """Power off, then delete a server. A failed delete leaves it powered off.

        Raises:
            ResourceStateError: If either call fails.
        """
        server_id = server["id"]
        with closing(self._client_factory()) as client:
            try:
                self._log.info("Powering off server {id}", id=server_id)
                assert_valid_response(client.power_off_server(server_id))
                self._log.info("Deleting server {id}", id=server_id)
                assert_valid_response(client.delete_server(server_id))
            except ProviderError as e:
                self._log.error("Unable to destroy server with ID = {id}: {error}", id=server_id, error=e)
                raise ResourceStateError(f"Unable to destroy server {server_id}: {e}") from e

    def refresh_server_info(self, info: ServerInfo) -> ServerInfo:
        """Re-fetch the server and overwrite ``info.server_detail`` in place.

        Raises:
            ResourceStateError: If the call fails.
        """
        server_id = info.server_id
        with closing(self._client_factory()) as client:
            try:
                info.server_detail = assert_valid_response(
                    client.get_server(server_id), lambda b: b["server"]
                )
            except ProviderError as e:
                raise ResourceStateError(f"Unable to refresh server {server_id}: {e}") from e
        return info

    def fetch_all_servers(self, cloud_name: str) -> list[ServerDetail]:
        """List every server labeled as managed by this cloud.

        Raises:
            ProviderError: If a listing call fails.
        """
        selector = server_selector(cloud_name)
        with closing(self._client_factory()) as client:
            servers = fetch_all_pages(
                lambda page, per_page: client.get_servers_by_selector(selector, page, per_page),
                "servers",
                page_size=self._page_size,
            )
        self._log.debug("Found {n} servers in cloud {cloud}", n=len(servers), cloud=cloud_name)
        return servers

    def wait_for_running(
        self,
        info: ServerInfo,
        *,
        timeout: float = 300,
        interval: float = 5,
    ) -> ServerInfo:
        """Refresh ``info`` until the server reports status running.

        Raises:
            ServerTimeoutError: If the server is not running after ``timeout`` seconds.
            ResourceStateError: If a refresh fails.
        """

        @retry(
            stop=stop_after_delay(timeout),
            wait=wait_fixed(interval),
            retry=retry_if_result(lambda status: status != ServerStatus.RUNNING),
        )
        def _poll() -> str:
            status = self.refresh_server_info(info).status
            self._log.debug("Server {id} status: {status}", id=info.server_id, status=status)
            return status

        try:
            _poll()
        except RetryError as e:
            raise ServerTimeoutError(info.server_id, ServerStatus.RUNNING, timeout) from e
        return info
