"""Pydantic models for the runtime app config endpoint."""

from pydantic import BaseModel, field_validator


class AppConfigUpdate(BaseModel):
    vendedor: str | None = None
    prazo: int | None = None

    @field_validator("vendedor")
    @classmethod
    def vendedor_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("vendedor cannot be empty")
        return v

    @field_validator("prazo")
    @classmethod
    def prazo_positive(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("prazo must be at least 1 day")
        return v
