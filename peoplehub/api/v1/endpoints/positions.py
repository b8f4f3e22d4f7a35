from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from peoplehub.core.dependencies import require_company_access
from peoplehub.models.auth import UserInfo
from peoplehub.models.organization import Position, PositionCreate, PositionUpdate
from peoplehub.services.organization_service import organization_service

router = APIRouter(prefix="/companies/{company_id}/departments/{department_id}/positions", tags=["positions"])


@router.post("", response_model=Position, status_code=status.HTTP_201_CREATED)
async def create_position(
    company_id: str,
    department_id: str,
    payload: PositionCreate,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await organization_service.create_position(company_id, department_id, payload)


@router.get("", response_model=list[Position])
async def list_positions(
    company_id: str,
    department_id: str,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await organization_service.list_positions(company_id, department_id)


@router.get("/{position_id}", response_model=Position)
async def get_position(
    company_id: str,
    department_id: str,
    position_id: str,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await organization_service.get_position(company_id, department_id, position_id)


@router.put("/{position_id}", response_model=Position)
async def update_position(
    company_id: str,
    department_id: str,
    position_id: str,
    payload: PositionUpdate,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await organization_service.update_position(company_id, department_id, position_id, payload)


@router.delete("/{position_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_position(
    company_id: str,
    department_id: str,
    position_id: str,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    await organization_service.delete_position(company_id, department_id, position_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
