from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from peoplehub.core.config import settings
from peoplehub.models.employee_import import ImportRowError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = settings.IMPORT_MAX_FILE_SIZE

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SUPPORTED_CONTENT_TYPES = {
    XLSX_CONTENT_TYPE: "xlsx",
    "text/csv": "csv",
    "application/csv": "csv",
    "application/vnd.ms-excel": "csv",
}

SUPPORTED_EXTENSIONS = {".xlsx": "xlsx", ".csv": "csv"}

EXPECTED_HEADERS = [
    "Nome Completo",
    "CPF",
    "Email",
    "Telefone",
    "Departamento",
    "Cargo",
    "Data Nascimento",
    "Data Admissão",
    "Sexo",
    "Escolaridade",
    "Líder",
]


class SpreadsheetError(Exception):
    pass


class SpreadsheetHeaderError(SpreadsheetError):
    pass


def detect_format(filename: str | None, content_type: str | None) -> str:
    """Pick the parser from the file extension, falling back to the content type."""
    name = (filename or "").lower()
    for extension, fmt in SUPPORTED_EXTENSIONS.items():
        if name.endswith(extension):
            return fmt
    if content_type in SUPPORTED_CONTENT_TYPES:
        return SUPPORTED_CONTENT_TYPES[content_type]
    raise SpreadsheetError(f"Unsupported file type: {content_type or filename}. Use .xlsx or .csv")


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def is_blank(row: list[str]) -> bool:
    return not any(cell.strip() for cell in row)


class SpreadsheetParser:
    def parse_xlsx(self, file_bytes: bytes) -> list[list[str]]:
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(file_bytes), read_only=True, data_only=True)
        except Exception as e:
            logger.error("XLSX parsing failed: %s", e)
            raise SpreadsheetError(f"Failed to read spreadsheet: {e}") from e
        try:
            sheet = workbook.active
            return [[_cell_text(value) for value in row] for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()

    def parse_csv(self, file_bytes: bytes) -> list[list[str]]:
        try:
            text = file_bytes.decode("utf-8-sig")
        except UnicodeDecodeError:
            text = file_bytes.decode("latin-1")

        first_line = text.split("\n", 1)[0]
        try:
            dialect = csv.Sniffer().sniff(first_line, delimiters=",;\t")
            delimiter = dialect.delimiter
        except csv.Error:
            delimiter = ","
        return [[cell.strip() for cell in row] for row in csv.reader(io.StringIO(text), delimiter=delimiter)]

    def parse(self, file_bytes: bytes, fmt: str) -> list[list[str]]:
        if not file_bytes:
            raise SpreadsheetError("Empty file")

        if len(file_bytes) > MAX_FILE_SIZE:
            raise SpreadsheetError(f"File too large: {len(file_bytes)} bytes (max {MAX_FILE_SIZE})")

        if fmt == "xlsx":
            return self.parse_xlsx(file_bytes)
        if fmt == "csv":
            return self.parse_csv(file_bytes)
        raise SpreadsheetError(f"Unsupported format: {fmt}")


def check_headers(header: list[str]) -> None:
    cells = [cell.strip() for cell in header]
    while cells and not cells[-1]:
        cells.pop()
    if cells != EXPECTED_HEADERS:
        raise SpreadsheetHeaderError(
            "Invalid spreadsheet header. Expected columns: " + " | ".join(EXPECTED_HEADERS)
        )


def build_error_report(errors: list[ImportRowError]) -> bytes:
    """Render failed import rows as an .xlsx workbook (line, error, original cells)."""
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "Erros"

    headers = ["Linha", "Erro", *EXPECTED_HEADERS]
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="C0392B", end_color="C0392B", fill_type="solid")
    for col_idx, header in enumerate(headers, 1):
        cell = sheet.cell(row=1, column=col_idx, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")
        sheet.column_dimensions[get_column_letter(col_idx)].width = max(len(header) + 2, 14)
    sheet.column_dimensions["B"].width = 60

    for row_idx, error in enumerate(sorted(errors, key=lambda e: e.row), 2):
        sheet.cell(row=row_idx, column=1, value=error.row)
        sheet.cell(row=row_idx, column=2, value=error.message)
        for col_idx, header in enumerate(EXPECTED_HEADERS, 3):
            sheet.cell(row=row_idx, column=col_idx, value=error.data.get(header, ""))

    output = io.BytesIO()
    workbook.save(output)
    return output.getvalue()


spreadsheet_parser = SpreadsheetParser()
