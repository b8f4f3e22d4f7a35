"""Bulk employee import from a spreadsheet.

Rows are independent: a failing row is recorded in the summary and the run
moves on. Departments and positions named in the sheet are looked up by their
normalized name and created on first use.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import date, datetime

from azure.core.exceptions import AzureError
from pydantic import ValidationError as PydanticValidationError

from peoplehub.core.errors import ServiceError, ValidationError
from peoplehub.core.validators import normalize_name
from peoplehub.models.employee import EDUCATION_LABELS, EducationLevel, Gender
from peoplehub.models.employee_import import EmployeeImportRow, ImportProgress, ImportRowError, ImportSummary
from peoplehub.services.employee_service import EmployeeService, employee_service
from peoplehub.services.integrity import ReferentialIntegrityGuard, integrity_guard
from peoplehub.services.organization_service import OrganizationService, organization_service
from peoplehub.services.spreadsheet import (
    EXPECTED_HEADERS,
    SpreadsheetError,
    SpreadsheetParser,
    check_headers,
    detect_format,
    is_blank,
    spreadsheet_parser,
)

logger = logging.getLogger(__name__)

_FIELD_LABELS = {
    "name": "Nome Completo",
    "cpf": "CPF",
    "email": "Email",
    "phone": "Telefone",
    "department": "Departamento",
    "position": "Cargo",
    "birthDate": "Data Nascimento",
    "admissionDate": "Data Admissão",
    "gender": "Sexo",
    "educationLevel": "Escolaridade",
    "isLeader": "Líder",
}

_TRUE_VALUES = {"sim", "s", "true", "1", "yes"}
_FALSE_VALUES = {"não", "nao", "n", "false", "0", "no"}


def parse_date(value: str) -> str:
    """Accept ``YYYY-MM-DD`` or ``DD/MM/YYYY``; anything else is left for validation to reject."""
    text = value.strip()
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass
    try:
        return datetime.strptime(text, "%d/%m/%Y").date().isoformat()
    except ValueError:
        return text


def parse_leader(value: str) -> bool:
    text = value.strip().casefold()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Líder: expected 'Sim' or 'Não', got '{value}'")


def parse_gender(value: str) -> str:
    text = value.strip().casefold()
    for gender in Gender:
        if gender.value.casefold() == text:
            return gender.value
    return value.strip()


def parse_education(value: str) -> str:
    text = value.strip()
    for level in EducationLevel:
        if level.value == text:
            return level.value
    label = EDUCATION_LABELS.get(text.casefold())
    return label.value if label else text


def parse_cpf(value: str) -> str:
    # Spreadsheets drop leading zeros of CPFs stored as numbers
    text = value.strip()
    return text.zfill(11) if text.isdigit() else text


def row_data(cells: list[str]) -> dict[str, str]:
    padded = list(cells) + [""] * (len(EXPECTED_HEADERS) - len(cells))
    return {header: padded[i].strip() for i, header in enumerate(EXPECTED_HEADERS)}


def map_row(data: dict[str, str]) -> dict[str, object]:
    return {
        "name": data["Nome Completo"],
        "cpf": parse_cpf(data["CPF"]),
        "email": data["Email"] or None,
        "phone": data["Telefone"] or None,
        "department": data["Departamento"],
        "position": data["Cargo"],
        "birthDate": parse_date(data["Data Nascimento"]),
        "admissionDate": parse_date(data["Data Admissão"]),
        "gender": parse_gender(data["Sexo"]),
        "educationLevel": parse_education(data["Escolaridade"]),
        "isLeader": parse_leader(data["Líder"]),
    }


def describe_validation_error(exc: PydanticValidationError) -> str:
    messages = []
    for error in exc.errors():
        loc = str(error["loc"][0]) if error["loc"] else ""
        label = _FIELD_LABELS.get(loc, loc)
        message = error["msg"].removeprefix("Value error, ")
        messages.append(f"{label}: {message}" if label else message)
    return "; ".join(messages)


@dataclass
class ImportJob:
    company_id: str
    rows: list[tuple[int, list[str]]]
    success_count: int = 0
    errors: list[ImportRowError] = field(default_factory=list)
    # normalized name -> id, for departments ("dep:<name>") and positions ("pos:<departmentId>:<name>")
    lookups: dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.rows)


class EmployeeImporter:
    def __init__(
        self,
        employees: EmployeeService,
        organization: OrganizationService,
        guard: ReferentialIntegrityGuard,
        parser: SpreadsheetParser,
    ) -> None:
        self.employees = employees
        self.organization = organization
        self.guard = guard
        self.parser = parser

    def read_rows(self, file_bytes: bytes, filename: str | None, content_type: str | None) -> list[tuple[int, list[str]]]:
        """Parse the file and check its header. Returns ``(line, cells)`` for every non-blank data row."""
        try:
            rows = self.parser.parse(file_bytes, detect_format(filename, content_type))
            if not rows:
                raise SpreadsheetError("The spreadsheet is empty")
            check_headers(rows[0])
        except SpreadsheetError as e:
            raise ValidationError(str(e)) from e
        return [(index + 1, cells) for index, cells in enumerate(rows) if index > 0 and not is_blank(cells)]

    async def open(
        self, company_id: str, file_bytes: bytes, filename: str | None, content_type: str | None
    ) -> ImportJob:
        rows = self.read_rows(file_bytes, filename, content_type)
        await self.guard.require_company(company_id)
        logger.info("Import started for company %s (%d rows)", company_id, len(rows))
        return ImportJob(company_id=company_id, rows=rows)

    async def _department_id(self, job: ImportJob, name: str) -> str:
        key = f"dep:{normalize_name(name)}"
        if key not in job.lookups:
            department, created = await self.organization.find_or_create_department(job.company_id, name)
            if created:
                logger.info("Import created department '%s' for company %s", department["name"], job.company_id)
            job.lookups[key] = department["id"]
        return job.lookups[key]

    async def _position_id(self, job: ImportJob, department_id: str, name: str) -> str:
        key = f"pos:{department_id}:{normalize_name(name)}"
        if key not in job.lookups:
            position, created = await self.organization.find_or_create_position(job.company_id, department_id, name)
            if created:
                logger.info("Import created position '%s' for company %s", position["name"], job.company_id)
            job.lookups[key] = position["id"]
        return job.lookups[key]

    async def _import_row(self, job: ImportJob, data: dict[str, str]) -> str:
        row = EmployeeImportRow.model_validate(map_row(data))
        department_id = await self._department_id(job, row.department)
        position_id = await self._position_id(job, department_id, row.position)
        created = await self.employees.create_employee(job.company_id, row.to_create(department_id, position_id))
        return created.employee_id

    async def run(self, job: ImportJob) -> AsyncIterator[ImportProgress]:
        for processed, (line, cells) in enumerate(job.rows, 1):
            data = row_data(cells)
            try:
                employee_id = await self._import_row(job, data)
            except ServiceError as e:
                message = e.message
            except PydanticValidationError as e:
                message = describe_validation_error(e)
            except ValueError as e:
                message = str(e)
            except AzureError as e:
                logger.exception("Store error importing row %d for company %s", line, job.company_id)
                status_code = getattr(e, "status_code", None)
                message = f"Could not save the employee ({status_code or type(e).__name__})"
            else:
                job.success_count += 1
                yield ImportProgress(row=line, processed=processed, total=job.total, status="imported", employee_id=employee_id)
                continue

            logger.info("Import row %d for company %s failed: %s", line, job.company_id, message)
            job.errors.append(ImportRowError(row=line, message=message, data=data))
            yield ImportProgress(row=line, processed=processed, total=job.total, status="failed", message=message)

        logger.info(
            "Import finished for company %s: %d imported, %d failed",
            job.company_id,
            job.success_count,
            len(job.errors),
        )

    def summarize(self, job: ImportJob) -> ImportSummary:
        failed = len(job.errors)
        return ImportSummary(
            message=f"Import finished: {job.success_count} employees imported, {failed} failed.",
            total_rows=job.total,
            success_count=job.success_count,
            failed_count=failed,
            errors=job.errors,
        )

    async def import_employees(
        self, company_id: str, file_bytes: bytes, filename: str | None, content_type: str | None
    ) -> ImportSummary:
        job = await self.open(company_id, file_bytes, filename, content_type)
        async for _ in self.run(job):
            pass
        return self.summarize(job)


employee_importer = EmployeeImporter(employee_service, organization_service, integrity_guard, spreadsheet_parser)
