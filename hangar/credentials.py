"""Credential storage and SSH public key derivation.

Credentials are referenced by ID from templates and cloud configs. Two
kinds exist: SSH private keys (for server access) and secret text (API
tokens).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import asyncssh

from hangar.exceptions import CredentialError


@dataclass(frozen=True, slots=True)
class SSHPrivateKey:
    """Private key material plus optional passphrase."""

    credentials_id: str
    private_key: str
    passphrase: str | None = None

    def __repr__(self) -> str:
        return f"SSHPrivateKey(credentials_id={self.credentials_id!r})"


@dataclass(frozen=True, slots=True)
class SecretText:
    credentials_id: str
    secret: str

    def __repr__(self) -> str:
        return f"SecretText(credentials_id={self.credentials_id!r})"


type Credential = SSHPrivateKey | SecretText


class CredentialStore(Protocol):
    def get_private_key(self, credentials_id: str) -> SSHPrivateKey: ...
    def get_secret(self, credentials_id: str) -> str: ...


class InMemoryCredentialStore:
    """Credential store backed by a mapping of ID to credential."""

    def __init__(self, credentials: Mapping[str, Credential] | None = None) -> None:
        self._credentials: dict[str, Credential] = dict(credentials or {})

    def add(self, credential: Credential) -> None:
        self._credentials[credential.credentials_id] = credential

    def _get(self, credentials_id: str) -> Credential:
        try:
            return self._credentials[credentials_id]
        except KeyError:
            raise CredentialError(f"No credentials found for '{credentials_id}'") from None

    def get_private_key(self, credentials_id: str) -> SSHPrivateKey:
        match self._get(credentials_id):
            case SSHPrivateKey() as key:
                return key
            case _:
                raise CredentialError(f"Credentials '{credentials_id}' is not an SSH private key")

    def get_secret(self, credentials_id: str) -> str:
        match self._get(credentials_id):
            case SecretText(secret=secret):
                return secret
            case _:
                raise CredentialError(f"Credentials '{credentials_id}' is not a secret text")


def load_private_key_file(
    credentials_id: str, path: str | Path, passphrase: str | None = None
) -> SSHPrivateKey:
    key_path = Path(path).expanduser()
    try:
        content = key_path.read_text()
    except OSError as e:
        raise CredentialError(f"Could not read private key {key_path}: {e}") from e
    return SSHPrivateKey(credentials_id, content, passphrase)


def derive_public_key(private_key: str, passphrase: str | None = None) -> str:
    """Derive the OpenSSH public key line from private key material.

    Args:
        private_key: Private key in OpenSSH or PEM format.
        passphrase: Passphrase for encrypted keys.

    Returns:
        Public key, e.g. "ssh-ed25519 AAAA...".

    Raises:
        CredentialError: If the key cannot be parsed or decrypted.
    """
    try:
        key = asyncssh.import_private_key(private_key, passphrase or None)
    except (asyncssh.KeyImportError, asyncssh.KeyEncryptionError) as e:
        raise CredentialError(f"Unable to read SSH private key: {e}") from e
    return key.export_public_key("openssh").decode().strip()
