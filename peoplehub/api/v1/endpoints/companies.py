from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status

from peoplehub.core.dependencies import require_admin, require_company_access, require_super_admin
from peoplehub.models.auth import UserInfo
from peoplehub.models.company import Company, CompanyCreate, CompanyUpdate
from peoplehub.services.company_service import company_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["companies"])


@router.post("", response_model=Company, status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: CompanyCreate,
    user: UserInfo = Depends(require_super_admin),  # noqa: B008
):
    logger.info("Company create requested by user=%s", user.id)
    return await company_service.create_company(payload)


@router.get("", response_model=list[Company])
async def list_companies(user: UserInfo = Depends(require_admin)):  # noqa: B008
    companies = await company_service.list_companies()
    if user.is_super_admin:
        return companies
    return [c for c in companies if c.id == user.company_id]


@router.get("/{company_id}", response_model=Company)
async def get_company(company_id: str, user: UserInfo = Depends(require_company_access)):  # noqa: B008
    return await company_service.get_company(company_id)


@router.put("/{company_id}", response_model=Company)
async def update_company(
    company_id: str,
    payload: CompanyUpdate,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await company_service.update_company(company_id, payload)


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(company_id: str, user: UserInfo = Depends(require_super_admin)):  # noqa: B008
    await company_service.delete_company(company_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
