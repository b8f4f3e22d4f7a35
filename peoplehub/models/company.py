"""Company (tenant) models."""

from __future__ import annotations

from pydantic import EmailStr, Field

from peoplehub.core.validators import CNPJ_PATTERN, PHONE_PATTERN
from peoplehub.models.base import CamelModel, UpdateModel


class FocalPoint(CamelModel):
    """Contact person at the client company."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)


class FocalPointUpdate(UpdateModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)


class CompanyCreate(CamelModel):
    cnpj: str = Field(..., pattern=CNPJ_PATTERN)
    fantasy_name: str = Field(..., min_length=1, max_length=200)
    full_address: str = Field(..., min_length=1, max_length=500)
    owner: str = Field(..., min_length=1, max_length=100)
    focal_point: FocalPoint


class CompanyUpdate(UpdateModel):
    cnpj: str | None = Field(default=None, pattern=CNPJ_PATTERN)
    fantasy_name: str | None = Field(default=None, min_length=1, max_length=200)
    full_address: str | None = Field(default=None, min_length=1, max_length=500)
    owner: str | None = Field(default=None, min_length=1, max_length=100)
    focal_point: FocalPointUpdate | None = None


class Company(CompanyCreate):
    id: str
    created_at: str | None = None
    updated_at: str | None = None
