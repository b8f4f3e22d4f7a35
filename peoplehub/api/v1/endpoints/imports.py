from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse

from peoplehub.core.dependencies import check_company_access, require_admin
from peoplehub.models.auth import UserInfo
from peoplehub.models.employee_import import ImportErrorReportRequest, ImportSummary
from peoplehub.services.employee_import import ImportJob, employee_importer
from peoplehub.services.spreadsheet import XLSX_CONTENT_TYPE, build_error_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/import/employees", tags=["import"])


def _sse(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


@router.post("", response_model=ImportSummary)
async def import_employees(
    company_id: str = Form(..., alias="companyId"),
    file: UploadFile = File(...),  # noqa: B008
    user: UserInfo = Depends(require_admin),  # noqa: B008
):
    check_company_access(user, company_id)
    file_bytes = await file.read()
    logger.info("Import upload %s (%d bytes) for company=%s by user=%s", file.filename, len(file_bytes), company_id, user.id)
    return await employee_importer.import_employees(company_id, file_bytes, file.filename, file.content_type)


async def _progress_events(job: ImportJob) -> AsyncIterator[str]:
    async for progress in employee_importer.run(job):
        yield _sse("progress", progress.to_document())
    yield _sse("summary", employee_importer.summarize(job).to_document())


@router.post("/stream", response_class=StreamingResponse)
async def import_employees_stream(
    company_id: str = Form(..., alias="companyId"),
    file: UploadFile = File(...),  # noqa: B008
    user: UserInfo = Depends(require_admin),  # noqa: B008
):
    check_company_access(user, company_id)
    file_bytes = await file.read()
    job = await employee_importer.open(company_id, file_bytes, file.filename, file.content_type)

    return StreamingResponse(
        _progress_events(job),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


@router.post("/error-report")
async def download_error_report(
    request: ImportErrorReportRequest,
    user: UserInfo = Depends(require_admin),  # noqa: B008
):
    content = build_error_report(request.errors)
    return StreamingResponse(
        iter([content]),
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": 'attachment; filename="import-errors.xlsx"'},
    )
