"""Employee models."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import EmailStr, Field, field_validator

from peoplehub.core.validators import is_valid_cpf, only_digits
from peoplehub.models.base import CamelModel, UpdateModel


class Gender(str, Enum):
    MALE = "Masculino"
    FEMALE = "Feminino"


class EducationLevel(str, Enum):
    ELEMENTARY = "ensino_fundamental"
    HIGH_SCHOOL = "ensino_medio"
    BACHELOR = "ensino_superior"
    POSTGRADUATE = "pos_graduacao"
    MASTER = "mestrado"
    DOCTORATE = "doutorado"


EDUCATION_LABELS: dict[str, EducationLevel] = {
    "ensino fundamental": EducationLevel.ELEMENTARY,
    "ensino médio": EducationLevel.HIGH_SCHOOL,
    "ensino medio": EducationLevel.HIGH_SCHOOL,
    "ensino superior": EducationLevel.BACHELOR,
    "pós-graduação": EducationLevel.POSTGRADUATE,
    "pos-graduacao": EducationLevel.POSTGRADUATE,
    "mestrado": EducationLevel.MASTER,
    "doutorado": EducationLevel.DOCTORATE,
}


def _check_full_name(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = " ".join(value.split())
    if len(cleaned.split(" ")) < 2:
        raise ValueError("Please enter the full name (first and last name)")
    return cleaned


def _check_cpf(value: str | None) -> str | None:
    if value is None:
        return None
    if not is_valid_cpf(value):
        raise ValueError("Invalid CPF")
    return only_digits(value)


class EmployeeFields(CamelModel):
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)


class EmployeeBase(EmployeeFields):
    name: str = Field(..., min_length=1, max_length=100)
    cpf: str = Field(..., min_length=1)
    birth_date: date
    admission_date: date
    gender: Gender
    education_level: EducationLevel
    is_leader: bool

    @field_validator("name")
    @classmethod
    def check_full_name(cls, value: str) -> str:
        return _check_full_name(value)

    @field_validator("cpf")
    @classmethod
    def check_cpf(cls, value: str) -> str:
        return _check_cpf(value)


class EmployeeCreate(EmployeeBase):
    department_id: str = Field(..., min_length=1)
    position_id: str = Field(..., min_length=1)


class EmployeeUpdate(UpdateModel):
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    name: str | None = Field(default=None, min_length=1, max_length=100)
    cpf: str | None = Field(default=None, min_length=1)
    department_id: str | None = Field(default=None, min_length=1)
    position_id: str | None = Field(default=None, min_length=1)
    birth_date: date | None = None
    admission_date: date | None = None
    gender: Gender | None = None
    education_level: EducationLevel | None = None
    is_leader: bool | None = None
    login: str | None = Field(default=None, min_length=1, max_length=50)
    password: str | None = Field(default=None, min_length=6, max_length=100)

    @field_validator("name")
    @classmethod
    def check_full_name(cls, value: str | None) -> str | None:
        return _check_full_name(value)

    @field_validator("login")
    @classmethod
    def check_login(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip().lower()
        if not cleaned or any(c.isspace() for c in cleaned):
            raise ValueError("The login must not contain spaces")
        return cleaned

    @field_validator("cpf")
    @classmethod
    def check_cpf(cls, value: str | None) -> str | None:
        return _check_cpf(value)


class Employee(EmployeeFields):
    """Employee as returned by the API (never includes the password hash)."""

    id: str
    company_id: str
    name: str
    cpf: str
    department_id: str
    position_id: str
    department_name: str | None = None
    position_name: str | None = None
    birth_date: date
    admission_date: date
    gender: Gender
    education_level: EducationLevel
    is_leader: bool
    login: str
    role: str = "employee"
    created_at: str | None = None
    updated_at: str | None = None


class EmployeeCreated(CamelModel):
    message: str
    employee_id: str
    login: str
