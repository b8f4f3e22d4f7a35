from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status

from peoplehub.core.dependencies import require_company_access
from peoplehub.models.auth import UserInfo
from peoplehub.models.employee import Employee, EmployeeCreate, EmployeeCreated, EmployeeUpdate
from peoplehub.services.employee_service import employee_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies/{company_id}/employees", tags=["employees"])


@router.post("", response_model=EmployeeCreated, status_code=status.HTTP_201_CREATED)
async def create_employee(
    company_id: str,
    payload: EmployeeCreate,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    logger.info("Employee create for company=%s by user=%s", company_id, user.id)
    return await employee_service.create_employee(company_id, payload)


@router.get("", response_model=list[Employee])
async def list_employees(company_id: str, user: UserInfo = Depends(require_company_access)):  # noqa: B008
    return await employee_service.list_employees(company_id)


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(
    company_id: str,
    employee_id: str,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await employee_service.get_employee(company_id, employee_id)


@router.put("/{employee_id}", response_model=Employee)
async def update_employee(
    company_id: str,
    employee_id: str,
    payload: EmployeeUpdate,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await employee_service.update_employee(company_id, employee_id, payload)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    company_id: str,
    employee_id: str,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    await employee_service.delete_employee(company_id, employee_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
