"""
Shared route dependencies: credential extraction, id parsing, pagination.
"""
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.config import get_settings
from vidtube.core.database import get_db
from vidtube.core.errors import ApiError
from vidtube.core.security import ACCESS, TokenError, decode_token
from vidtube.models.models import User
from vidtube.schemas.schemas import PageMeta

logger = logging.getLogger(__name__)
settings = get_settings()


def parse_id(value: str, label: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except (TypeError, ValueError):
        raise ApiError(400, f"Invalid {label} ID")


def _extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get("accessToken")
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


async def _resolve_user(token: str, db: AsyncSession) -> User:
    try:
        claims = decode_token(token, ACCESS)
    except TokenError as e:
        raise ApiError(401, f"Invalid access token: {e}")

    user = await db.get(User, claims["sub"])
    if not user:
        raise ApiError(401, "Invalid access token")
    return user


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    token = _extract_token(request)
    if not token:
        raise ApiError(401, "Unauthorized request")
    return await _resolve_user(token, db)


async def get_optional_user(request: Request, db: AsyncSession = Depends(get_db)) -> Optional[User]:
    """Like ``get_current_user`` but guests get None instead of a 401."""
    token = _extract_token(request)
    if not token:
        return None
    try:
        return await _resolve_user(token, db)
    except ApiError:
        return None


@dataclass
class Pagination:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> PageMeta:
        return PageMeta(
            total=total,
            page=self.page,
            limit=self.limit,
            total_pages=math.ceil(total / self.limit) if total else 0,
        )


def pagination(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
) -> Pagination:
    return Pagination(page=page, limit=limit)
