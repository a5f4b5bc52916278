"""Pydantic models for client configuration, provider payloads and API responses.

Sub-sections:
- config: Client credentials
- domain: Normalized user data handed to callers
- payloads: Strict shapes of the provider's JSON answers
- api: Response bodies of the hosting routes
"""
from __future__ import annotations

import datetime as dt
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    field_validator,
)


# ============================================================================
# CONFIG
# ============================================================================

class CredentialConfig(BaseModel):
    """Immutable client identity registered with the provider."""
    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str
    callback_uri: str
    scopes: tuple[str, ...] = ()

    @field_validator("callback_uri")
    @classmethod
    def _require_absolute_uri(cls, value: str) -> str:
        parsed = urlparse(value)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("callback_uri must be an absolute URI")
        return value


# ============================================================================
# DOMAIN
# ============================================================================

class UserProfile(BaseModel):
    """Authenticated member's identity. All three fields are required and non-empty."""
    model_config = ConfigDict(frozen=True)

    first_name: StrictStr = Field(min_length=1)
    last_name: StrictStr = Field(min_length=1)
    external_id: StrictStr = Field(min_length=1)


class Position(BaseModel):
    """Work-history entry with month precision dates (day is always 1)."""
    model_config = ConfigDict(frozen=True)

    company_name: str
    job_title: str
    start_date: dt.date
    end_date: dt.date


# ============================================================================
# PROVIDER PAYLOADS
# ============================================================================

class TokenPayload(BaseModel):
    access_token: StrictStr = Field(min_length=1)


class TokenErrorPayload(BaseModel):
    error: str | None = None
    error_description: str | None = None


class ProfilePayload(BaseModel):
    first_name: StrictStr = Field(alias="firstName", min_length=1)
    last_name: StrictStr = Field(alias="lastName", min_length=1)
    external_id: StrictStr = Field(alias="id", min_length=1)

    def to_profile(self) -> UserProfile:
        return UserProfile(
            first_name=self.first_name,
            last_name=self.last_name,
            external_id=self.external_id,
        )


class MonthYearPayload(BaseModel):
    model_config = ConfigDict(strict=True)

    year: StrictInt = Field(ge=1, le=9999)
    month: StrictInt = Field(ge=1, le=12)

    def to_date(self) -> dt.date:
        return dt.date(self.year, self.month, 1)


class CompanyPayload(BaseModel):
    name: StrictStr


class PositionPayload(BaseModel):
    company: CompanyPayload
    title: StrictStr
    start_date: MonthYearPayload = Field(alias="startDate")
    end_date: MonthYearPayload = Field(alias="endDate")

    def to_position(self) -> Position:
        return Position(
            company_name=self.company.name,
            job_title=self.title,
            start_date=self.start_date.to_date(),
            end_date=self.end_date.to_date(),
        )


class PositionValuesPayload(BaseModel):
    values: list[PositionPayload]


class WorkHistoryPayload(BaseModel):
    positions: PositionValuesPayload


# ============================================================================
# API
# ============================================================================

class AccessTokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class HealthOut(BaseModel):
    status: str
    oauth_configured: bool
