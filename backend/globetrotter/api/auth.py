"""Minimal bearer auth dependencies.

Stub implementation: the bearer token is the caller's user id. Token
issuance and signature checks live outside this service.
"""

import uuid
from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.globetrotter.db.context import RequestContext


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def parse_bearer(authorization: str) -> RequestContext:
    """Parse a "Bearer <user_id>" header value into a request context.

    Raises:
        HTTPException: 401 if the header is not a bearer token or the token is not a UUID
    """
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Invalid authorization header format")

    try:
        user_id = uuid.UUID(token.strip())
    except ValueError as e:
        raise _unauthorized("Invalid bearer token (expected user id)") from e

    return RequestContext(user_id=user_id)


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer <user_id>")

    Returns:
        RequestContext with user_id

    Raises:
        HTTPException: If authorization is missing or invalid
    """
    if not authorization:
        raise _unauthorized("Not authenticated")

    return parse_bearer(authorization)


async def get_optional_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext | None:
    """Like get_current_context, but anonymous callers get None."""
    if not authorization:
        return None

    return parse_bearer(authorization)
