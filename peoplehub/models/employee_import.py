"""Pydantic models for spreadsheet employee imports."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from peoplehub.models.base import CamelModel
from peoplehub.models.employee import EmployeeBase, EmployeeCreate


class EmployeeImportRow(EmployeeBase):
    """One spreadsheet row; department and position are given by name."""

    department: str = Field(..., min_length=1, max_length=100)
    position: str = Field(..., min_length=1, max_length=100)

    def to_create(self, department_id: str, position_id: str) -> EmployeeCreate:
        fields = self.model_dump(exclude={"department", "position"})
        return EmployeeCreate(**fields, department_id=department_id, position_id=position_id)


class ImportRowError(CamelModel):
    """A spreadsheet row that could not be imported."""

    row: int = Field(..., ge=2)
    message: str
    data: dict[str, str] = {}


class ImportSummary(CamelModel):
    """Outcome of a whole import run."""

    message: str
    total_rows: int
    success_count: int
    failed_count: int
    errors: list[ImportRowError]


class ImportProgress(CamelModel):
    """Emitted after each row of a streamed import."""

    row: int
    processed: int
    total: int
    status: Literal["imported", "failed"]
    employee_id: str | None = None
    message: str | None = None


class ImportErrorReportRequest(CamelModel):
    errors: list[ImportRowError] = Field(..., min_length=1)
