"""Pydantic schemas for authentication."""

from pydantic import BaseModel, EmailStr

from taskboard.schemas.user import UserResponse


class RegisterRequest(BaseModel):
    """Schema for user registration.

    Length rules for username and password are enforced by the auth
    service so they surface as 400 with a specific message.
    """

    email: EmailStr
    username: str
    password: str


class LoginRequest(BaseModel):
    """Schema for user login.

    email is a plain string: a malformed address fails the lookup and gets
    the same 401 as an unknown one.
    """

    email: str
    password: str


class SessionResponse(BaseModel):
    """Current user wrapper returned by /auth/me."""

    user: UserResponse


class LoginResponse(SessionResponse):
    """Login result: public user plus the issued token.

    The same token is also set as an HttpOnly cookie; the body copy is for
    clients that send it as a Bearer header instead.
    """

    access_token: str
    token_type: str = "bearer"
