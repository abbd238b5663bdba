"""Pydantic schemas for users and their account flows."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    name: str | None = None
    email: str | None = None
    password: str | None = None


class ActivateUserRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    token: str | None = None


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    password: str | None = None
    token: str | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    name: str
    email: str
    activated: bool


class UserEnvelope(BaseModel):
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
