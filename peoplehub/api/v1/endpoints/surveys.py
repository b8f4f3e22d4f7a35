from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from peoplehub.core.dependencies import check_company_access, require_admin, require_company_access
from peoplehub.core.errors import ForbiddenError
from peoplehub.models.auth import UserInfo
from peoplehub.models.survey import (
    Campaign,
    CampaignCreate,
    CampaignUpdate,
    ResponseCreate,
    ResponseCreated,
    SurveyResponse,
    SurveyTemplate,
    SurveyTemplateCreate,
)
from peoplehub.services.survey_service import survey_service

templates_router = APIRouter(prefix="/survey-templates", tags=["surveys"])
campaigns_router = APIRouter(prefix="/companies/{company_id}/survey-campaigns", tags=["surveys"])


@templates_router.post("", response_model=SurveyTemplate, status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: SurveyTemplateCreate,
    user: UserInfo = Depends(require_admin),  # noqa: B008
):
    if payload.company_id:
        check_company_access(user, payload.company_id)
    elif not user.is_super_admin:
        raise ForbiddenError("Only super admins can create global templates.")
    return await survey_service.create_template(payload)


@templates_router.get("", response_model=list[SurveyTemplate])
async def list_templates(
    company_id: str | None = Query(None, alias="companyId"),
    user: UserInfo = Depends(require_admin),  # noqa: B008
):
    if company_id:
        check_company_access(user, company_id)
    return await survey_service.list_templates(company_id)


@campaigns_router.post("", response_model=Campaign, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    company_id: str,
    payload: CampaignCreate,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await survey_service.create_campaign(company_id, payload)


@campaigns_router.get("", response_model=list[Campaign])
async def list_campaigns(company_id: str, user: UserInfo = Depends(require_company_access)):  # noqa: B008
    return await survey_service.list_campaigns(company_id)


@campaigns_router.get("/{campaign_id}", response_model=Campaign)
async def get_campaign(
    company_id: str,
    campaign_id: str,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await survey_service.get_campaign(company_id, campaign_id)


@campaigns_router.put("/{campaign_id}", response_model=Campaign)
async def update_campaign(
    company_id: str,
    campaign_id: str,
    payload: CampaignUpdate,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await survey_service.update_campaign(company_id, campaign_id, payload)


@campaigns_router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_campaign(
    company_id: str,
    campaign_id: str,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    await survey_service.delete_campaign(company_id, campaign_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@campaigns_router.post(
    "/{campaign_id}/responses", response_model=ResponseCreated, status_code=status.HTTP_201_CREATED
)
async def submit_response(
    company_id: str,
    campaign_id: str,
    payload: ResponseCreate,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await survey_service.submit_response(company_id, campaign_id, payload)


@campaigns_router.get("/{campaign_id}/responses", response_model=list[SurveyResponse])
async def list_responses(
    company_id: str,
    campaign_id: str,
    user: UserInfo = Depends(require_company_access),  # noqa: B008
):
    return await survey_service.list_responses(company_id, campaign_id)
