"""Label sets attached to managed resources and the selectors built from them.

The label set used to search for a resource is exactly the one used to tag
it at creation, so both sides go through these functions.
"""

from __future__ import annotations

from collections.abc import Mapping

from hangar.constants import (
    LABEL_CLOUD_NAME,
    LABEL_CREDENTIALS_ID,
    LABEL_MANAGED_BY,
    LABEL_VALUE_MANAGER,
)


def server_labels(cloud_name: str) -> dict[str, str]:
    return {
        LABEL_MANAGED_BY: LABEL_VALUE_MANAGER,
        LABEL_CLOUD_NAME: cloud_name,
    }


def ssh_key_labels(credentials_id: str) -> dict[str, str]:
    return {
        LABEL_MANAGED_BY: LABEL_VALUE_MANAGER,
        LABEL_CREDENTIALS_ID: credentials_id,
    }


def label_expression(labels: Mapping[str, str]) -> str:
    """Join labels as ``key1=value1,key2=value2`` in insertion order.

    No escaping is applied: values must not contain ``,`` or ``=``.
    """
    return ",".join(f"{key}={value}" for key, value in labels.items())


def server_selector(cloud_name: str) -> str:
    return label_expression(server_labels(cloud_name))


def ssh_key_selector(credentials_id: str) -> str:
    return label_expression(ssh_key_labels(credentials_id))
