"""Minimal auth dependency.

Stub implementation that reads the user id from a bearer token or falls back
to the dev user. Real token validation is handled by the upstream auth
provider and is not part of this service.
"""

import uuid
from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.planner.db.context import RequestContext

# Matches DEV_USER_ID in backend/planner/db/seed_dev.py
DEV_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from the authorization header.

    Accepts "Bearer <user_id>"; with no header the dev user is used.

    Raises:
        HTTPException: If authorization is invalid
    """
    if not authorization:
        return RequestContext(user_id=DEV_USER_ID)

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]  # Strip "Bearer "

    try:
        return RequestContext(user_id=uuid.UUID(token))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format (expected user id)",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
