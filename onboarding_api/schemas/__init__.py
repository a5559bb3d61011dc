"""Pydantic schemas for API request/response models."""

from __future__ import annotations
import uuid
from datetime import datetime
from pydantic import BaseModel


# ── User Schemas ───────────────────────────────────────────

class UserCreate(BaseModel):
    telegram_id: int
    full_name: str
    telegram_username: str | None = None


class UserResponse(BaseModel):
    id: uuid.UUID
    telegram_id: int
    full_name: str
    telegram_username: str | None
    created_at: datetime

    class Config:
        from_attributes = True
