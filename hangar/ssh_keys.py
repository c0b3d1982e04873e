"""SSH key provisioning.

Ensures that the SSH key of a template's credentials exists on the provider,
registering it from the derived public key when missing. Keys are found by
the same labels they are tagged with, so each credential identity maps to at
most one cloud-side key.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from hangar.client import HetznerApi
from hangar.credentials import CredentialStore, derive_public_key
from hangar.exceptions import AmbiguousReferenceError
from hangar.labels import ssh_key_labels, ssh_key_selector
from hangar.models import SshKeyDetail
from hangar.types import ServerTemplate
from hangar.validation import assert_valid_response


@dataclass(frozen=True, slots=True)
class SshKeyProvisioner:
    credentials: CredentialStore

    def ensure_key(self, client: HetznerApi, template: ServerTemplate) -> SshKeyDetail:
        """Get or create the cloud-side SSH key for the template's credentials.

        Args:
            client: Provider client.
            template: Template naming the SSH credentials.

        Returns:
            The existing or newly created key.

        Raises:
            CredentialError: If the credentials are missing or not a private key.
            AmbiguousReferenceError: If several keys carry the credential's labels.
            ProviderError: If a provider call fails.
        """
        credentials_id = template.ssh_credentials_id
        log = logger.bind(component="ssh-keys", credentials_id=credentials_id)
        private_key = self.credentials.get_private_key(credentials_id)

        selector = ssh_key_selector(credentials_id)
        keys: list[SshKeyDetail] = assert_valid_response(
            client.get_ssh_keys_by_selector(selector), lambda b: b["ssh_keys"]
        )
        match keys:
            case [key]:
                log.info("Reusing SSH key {name} (id={id})", name=key["name"], id=key["id"])
                return key
            case []:
                pass
            case _:
                raise AmbiguousReferenceError(selector, len(keys))

        public_key = derive_public_key(private_key.private_key, private_key.passphrase)
        created: SshKeyDetail = assert_valid_response(
            client.create_ssh_key(
                name=credentials_id,
                public_key=public_key,
                labels=ssh_key_labels(credentials_id),
            ),
            lambda b: b["ssh_key"],
        )
        log.info("Created SSH key {name} (id={id})", name=created["name"], id=created["id"])
        return created
