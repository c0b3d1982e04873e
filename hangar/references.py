"""Template fields that name a resource either literally or by label selector.

Each field is parsed once into a tagged variant and resolved at
request-build time:

    >>> parse_image("ubuntu-24.04")
    ByName(name='ubuntu-24.04')
    >>> parse_image("type=ubuntu")
    BySelector(expression='type=ubuntu')
    >>> parse_id_or_selector("12345")
    ById(id=12345)
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from hangar.exceptions import ConfigurationError

_NON_NEGATIVE_INT = re.compile(r"[0-9]+")


@dataclass(frozen=True, slots=True)
class ById:
    id: int


@dataclass(frozen=True, slots=True)
class ByName:
    name: str


@dataclass(frozen=True, slots=True)
class BySelector:
    expression: str


type ImageRef = ByName | BySelector
type ResourceRef = ById | BySelector


def is_possibly_id(value: str) -> bool:
    return _NON_NEGATIVE_INT.fullmatch(value) is not None


def _require_text(value: object) -> None:
    if not isinstance(value, str):
        raise ConfigurationError(
            f"Expected an ID or label expression as text, got {type(value).__name__} {value!r}"
        )


def parse_image(value: str) -> ImageRef:
    """Image names never contain ``=``, label expressions always do."""
    if "=" in value:
        return BySelector(value)
    return ByName(value)


def parse_id_or_selector(value: str | None) -> ResourceRef | None:
    """Parse a network or placement group field; empty means not set."""
    if not value:
        return None
    _require_text(value)
    if is_possibly_id(value):
        return ById(int(value))
    return BySelector(value)


def parse_id_list(value: str | None) -> list[int]:
    """Parse a comma-separated list of numeric IDs (e.g. volume IDs)."""
    if not value:
        return []
    _require_text(value)
    ids: list[int] = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        if not is_possibly_id(part):
            raise ConfigurationError(f"Invalid resource ID '{part}' in '{value}'")
        ids.append(int(part))
    return ids
