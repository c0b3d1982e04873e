"""Label-selector resolution.

A selector must match exactly one resource; zero or several matches are an
error, the first match is never picked silently.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from loguru import logger

from hangar.client import ApiResponse, HetznerApi
from hangar.exceptions import AmbiguousReferenceError
from hangar.references import ById, BySelector, ResourceRef
from hangar.validation import assert_valid_response

type SearchOperation = Callable[[str], ApiResponse]
type Extractor = Callable[[Any], Sequence[Any]]

_log = logger.bind(component="resolver")


def resolve_singular(
    selector: str,
    search: SearchOperation,
    extract: Extractor,
) -> int:
    """Resolve a label selector to the ID of its only match.

    Args:
        selector: Label expression, e.g. "key=value,key2=value2".
        search: Provider search call for the resource kind.
        extract: Pulls the result list out of the response body.

    Returns:
        ID of the single matching resource.

    Raises:
        ProtocolError: If the search response is invalid.
        AmbiguousReferenceError: If the selector matched zero or several resources.
    """
    _log.info("Trying to find single resource for label expression '{selector}'", selector=selector)
    ids = assert_valid_response(
        search(selector), lambda b: [int(item["id"]) for item in extract(b)]
    )
    if len(ids) != 1:
        raise AmbiguousReferenceError(selector, len(ids))
    return ids[0]


def resolve_reference(
    ref: ResourceRef,
    search: SearchOperation,
    extract: Extractor,
) -> int:
    match ref:
        case ById(id=resource_id):
            return resource_id
        case BySelector(expression=expression):
            return resolve_singular(expression, search, extract)


def resolve_image(client: HetznerApi, selector: str) -> int:
    return resolve_singular(selector, client.get_images_by_selector, lambda b: b["images"])


def resolve_network(client: HetznerApi, ref: ResourceRef) -> int:
    return resolve_reference(ref, client.get_networks_by_selector, lambda b: b["networks"])


def resolve_placement_group(client: HetznerApi, ref: ResourceRef) -> int:
    return resolve_reference(
        ref, client.get_placement_groups_by_selector, lambda b: b["placement_groups"]
    )
