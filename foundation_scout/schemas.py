"""Pydantic request/response schemas for the Foundation Scout API."""
from __future__ import annotations

from pydantic import BaseModel, field_validator

from foundation_scout.utils import normalize_input_url


class ResearchRequest(BaseModel):
    url: str | None = None

    @field_validator("url", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    def normalized_url(self) -> str | None:
        return normalize_input_url(self.url)


class HealthOut(BaseModel):
    status: str = "ok"


class ErrorOut(BaseModel):
    error: str
    details: str | None = None
    url: str | None = None
