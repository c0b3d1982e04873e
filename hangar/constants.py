"""Centralized constants and enums for Hangar.

All label keys, API defaults and provider state names are defined here so
the tagging side and the searching side can never drift apart.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

# =============================================================================
# Resource Labels
# =============================================================================

LABEL_MANAGED_BY: Final = "hangar/managed-by"
LABEL_VALUE_MANAGER: Final = "hangar"
LABEL_CLOUD_NAME: Final = "hangar/cloud-name"
LABEL_CREDENTIALS_ID: Final = "hangar/credentials-id"


# =============================================================================
# Hetzner Cloud API
# =============================================================================

HETZNER_API_BASE: Final = "https://api.hetzner.cloud/v1"
DEFAULT_PAGE_SIZE: Final = 50
DEFAULT_REQUEST_TIMEOUT: Final = 30


class ServerStatus(StrEnum):
    """Hetzner server status values."""

    RUNNING = "running"
    INITIALIZING = "initializing"
    STARTING = "starting"
    STOPPING = "stopping"
    OFF = "off"
    DELETING = "deleting"
    MIGRATING = "migrating"
    REBUILDING = "rebuilding"
    UNKNOWN = "unknown"
