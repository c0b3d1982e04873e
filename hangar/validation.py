"""Response validation and payload extraction."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, overload

from hangar.client import ApiResponse
from hangar.exceptions import ProtocolError


def _error_details(body: Any) -> tuple[str | None, str]:
    match body:
        case {"error": {"code": code, "message": message}}:
            return str(code), str(message)
        case str() if body:
            return None, body[:500]
        case _:
            return None, "no error details"


@overload
def assert_valid_response(response: ApiResponse) -> None: ...


@overload
def assert_valid_response[T](
    response: ApiResponse, projection: Callable[[Any], T]
) -> T: ...


def assert_valid_response[T](
    response: ApiResponse, projection: Callable[[Any], T] | None = None
) -> T | None:
    """Fail unless the call succeeded, optionally projecting the payload.

    Args:
        response: Response of a provider call.
        projection: Extracts the typed payload from the JSON body.

    Returns:
        The projected payload, or None when no projection is given.

    Raises:
        ProtocolError: On a non-2xx status or a malformed payload.
    """
    if not response.ok:
        code, message = _error_details(response.body)
        raise ProtocolError(
            f"Provider returned HTTP {response.status}: {message}",
            status=response.status,
            code=code,
        )
    if projection is None:
        return None
    return get_payload(response, projection)


def get_payload[T](response: ApiResponse, projection: Callable[[Any], T]) -> T:
    """Project the body of a successful response.

    Raises:
        ProtocolError: If the body lacks the structure the projection expects.
    """
    if not isinstance(response.body, dict):
        raise ProtocolError(
            f"Expected a JSON object, got {type(response.body).__name__}",
            status=response.status,
        )
    try:
        payload = projection(response.body)
    except (KeyError, TypeError, IndexError, ValueError) as e:
        raise ProtocolError(
            f"Malformed response payload: {type(e).__name__}: {e}", status=response.status
        ) from e
    if payload is None:
        raise ProtocolError("Response payload is empty", status=response.status)
    return payload
