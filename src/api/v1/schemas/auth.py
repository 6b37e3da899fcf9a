"""Pydantic schemas for Auth API."""

from pydantic import BaseModel, EmailStr, Field


class SignUpRequest(BaseModel):
    """Schema for registering an account."""

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)


class SignInRequest(BaseModel):
    """Schema for email/password sign-in."""

    email: EmailStr
    password: str = Field(..., min_length=6)


class FederatedSignInRequest(BaseModel):
    """Schema for signing in with a federated provider's ID token."""

    provider: str = Field("google", pattern=r"^[a-z_]+$")
    id_token: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    """Schema for a successful sign-up or sign-in."""

    uid: str
    email: str
    name: str
    role: str
    access_token: str | None = None
