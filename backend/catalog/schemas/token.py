"""Pydantic schemas for token issuance."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AuthenticationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    email: str | None = None
    password: str | None = None


class EmailRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    email: str | None = None


class TokenResponse(BaseModel):
    token: str
    expiry: datetime


class AuthenticationTokenEnvelope(BaseModel):
    authentication_token: TokenResponse
