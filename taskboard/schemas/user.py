"""Pydantic schemas for users."""

from uuid import UUID

from taskboard.schemas.base import BaseResponse, UTCDateTime


class UserResponse(BaseResponse):
    """Public user fields. Never carries the password hash."""

    id: UUID
    email: str
    username: str
    created_at: UTCDateTime
    updated_at: UTCDateTime
