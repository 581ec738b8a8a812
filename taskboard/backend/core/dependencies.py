"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

import uuid
from typing import Annotated

import structlog
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.backend.core.database import get_db_session
from taskboard.backend.core.exceptions import AuthenticationError
from taskboard.backend.core.logging import get_logger

logger = get_logger(__name__)

OWNER_ID_MAX_LENGTH = 64

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


async def get_owner_id(x_user_id: str | None = Header(None)) -> str:
    """
    Identify the owner of the request from the X-User-Id header.

    The header is set by the authenticating gateway in front of this
    service.

    Raises:
        AuthenticationError: If the header is missing, blank or too long
    """
    owner_id = (x_user_id or "").strip()
    if not owner_id or len(owner_id) > OWNER_ID_MAX_LENGTH:
        raise AuthenticationError("Missing or invalid X-User-Id header")
    structlog.contextvars.bind_contextvars(user_id=owner_id)
    return owner_id


OwnerId = Annotated[str, Depends(get_owner_id)]
