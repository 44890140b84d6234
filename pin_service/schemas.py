"""Pydantic schemas for stored records and request/response payloads."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PinRecord(BaseModel):
    """Shape of a row in the ``pins`` table."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    pin: str
    user_id: Optional[str]
    created_at: datetime
    expires_at: datetime
    used_at: Optional[datetime]

    @field_validator("created_at", "expires_at", "used_at")
    @classmethod
    def _normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return _as_utc(value)


class CreatePinRequest(BaseModel):
    owner_id: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("ownerId", "userId"),
    )
    ttl_minutes: Optional[int] = Field(
        default=None,
        strict=True,
        validation_alias=AliasChoices("ttlMinutes", "expiresInMinutes"),
    )


class VerifyPinRequest(BaseModel):
    pin: str = Field(min_length=4, max_length=64)

    @field_validator("pin")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return value.strip().upper()


class CreatePinResponse(BaseModel):
    ok: Literal[True] = True
    pin: str
    expiresAt: datetime
    ownerId: Optional[str]

    @classmethod
    def from_record(cls, record: PinRecord) -> "CreatePinResponse":
        return cls(pin=record.pin, expiresAt=record.expires_at, ownerId=record.user_id)


class VerifyPinResponse(BaseModel):
    ok: Literal[True] = True
    pin: str
    ownerId: Optional[str]
    createdAt: datetime
    expiresAt: datetime
    usedAt: datetime

    @classmethod
    def from_record(cls, record: PinRecord) -> "VerifyPinResponse":
        return cls(
            pin=record.pin,
            ownerId=record.user_id,
            createdAt=record.created_at,
            expiresAt=record.expires_at,
            usedAt=record.used_at,
        )


class HealthResponse(BaseModel):
    ok: Literal[True] = True
    service: str
    time: datetime


class ErrorResponse(BaseModel):
    ok: Literal[False] = False
    message: str
