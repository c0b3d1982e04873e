"""Create-server request assembly.

Each template field is resolved independently:

- image: label expression -> resolved image ID, otherwise passed through
- location: contains "-" -> datacenter, otherwise location
- network: only with private connectivity; PRIVATE also disables public IPv4/IPv6
- placement group: ID or label expression, regardless of connectivity
- primary IP: strategy applied last, only with public connectivity
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from hangar.client import HetznerApi
from hangar.labels import server_labels
from hangar.models import CreateServerRequest, PublicNet
from hangar.references import (
    ByName,
    BySelector,
    parse_id_list,
    parse_id_or_selector,
    parse_image,
)
from hangar.resolver import resolve_image, resolve_network, resolve_placement_group
from hangar.types import ConnectivityType, ServerTemplate


@dataclass(frozen=True, slots=True)
class ServerRequestBuilder:
    client: HetznerApi

    def _image(self, template: ServerTemplate) -> str:
        match parse_image(template.image):
            case BySelector(expression=expression):
                return str(resolve_image(self.client, expression))
            case ByName(name=name):
                return name

    def build(
        self,
        template: ServerTemplate,
        ssh_key_name: str,
        node_name: str,
    ) -> CreateServerRequest:
        """Build a fully resolved create-server request.

        Args:
            template: Server template.
            ssh_key_name: Name of the provisioned SSH key to attach.
            node_name: Name of the new server.

        Raises:
            AmbiguousReferenceError: If a label expression does not match exactly one resource.
            ProviderError: If a lookup fails.
            ConfigurationError: If volume IDs are malformed.
        """
        log = logger.bind(component="builder", cloud=template.cloud_name)
        request = CreateServerRequest(
            name=node_name,
            server_type=template.server_type,
            image=self._image(template),
            ssh_keys=[ssh_key_name],
            labels=server_labels(template.cloud_name),
        )

        if "-" in template.location:
            request.datacenter = template.location
        else:
            request.location = template.location

        if template.automount_volumes:
            request.automount = True
        if volumes := parse_id_list(template.volume_ids):
            request.volumes = volumes
        if template.user_data:
            request.user_data = template.user_data

        connectivity = template.connectivity
        if connectivity.includes_private and (
            network := parse_id_or_selector(template.network)
        ):
            request.networks = [resolve_network(self.client, network)]

        if connectivity == ConnectivityType.PRIVATE:
            request.public_net = PublicNet(enable_ipv4=False, enable_ipv6=False)

        if placement_group := parse_id_or_selector(template.placement_group):
            request.placement_group = resolve_placement_group(self.client, placement_group)

        if connectivity.includes_public:
            template.primary_ip.apply(self.client, request)

        log.debug(
            "Built request for {name}: image={image} type={type}",
            name=node_name, image=request.image, type=request.server_type,
        )
        return request
