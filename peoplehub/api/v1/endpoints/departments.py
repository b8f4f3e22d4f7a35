from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from peoplehub.core.dependencies import require_company_access
from peoplehub.models.auth import UserInfo
from peoplehub.models.organization import Department, DepartmentCreate, DepartmentUpdate
from peoplehub.services.organization_service import organization_service

router = APIRouter(prefix="/companies/{company_id}/departments", tags=["departments"])


@router.post("", response_model=Department, status_code=status.HTTP_201_CREATED)
async def create_department(
    company_id: str,
    payload: DepartmentCreate,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await organization_service.create_department(company_id, payload)


@router.get("", response_model=list[Department])
async def list_departments(company_id: str, user: UserInfo = Depends(require_company_access)):  # noqa: B008
    return await organization_service.list_departments(company_id)


@router.get("/{department_id}", response_model=Department)
async def get_department(
    company_id: str,
    department_id: str,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await organization_service.get_department(company_id, department_id)


@router.put("/{department_id}", response_model=Department)
async def update_department(
    company_id: str,
    department_id: str,
    payload: DepartmentUpdate,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await organization_service.update_department(company_id, department_id, payload)


@router.delete("/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_department(
    company_id: str,
    department_id: str,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    await organization_service.delete_department(company_id, department_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
