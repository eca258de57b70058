"""LiftType schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LiftTypeCreate(BaseModel):
    name: str = Field(..., max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter a lift type name")
        return v


class LiftTypeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str
