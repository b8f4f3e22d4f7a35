"""Department and position models."""

from __future__ import annotations

from pydantic import Field, field_validator

from peoplehub.models.base import CamelModel, UpdateModel


def _clean_name(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = " ".join(value.split())
    if not cleaned:
        raise ValueError("Name must not be blank")
    return cleaned


class DepartmentCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str | None) -> str | None:
        return _clean_name(value)


class DepartmentUpdate(UpdateModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str | None) -> str | None:
        return _clean_name(value)


class Department(CamelModel):
    id: str
    company_id: str
    name: str
    created_at: str | None = None
    updated_at: str | None = None


class PositionCreate(DepartmentCreate):
    pass


class PositionUpdate(DepartmentUpdate):
    pass


class Position(Department):
    department_id: str
