"""Survey templates, campaigns and responses."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from peoplehub.core.document_store import (
    ORGANIZATION,
    SURVEY_TEMPLATES,
    DocumentStore,
    document_store,
    utc_now,
)
from peoplehub.core.errors import ForbiddenError, ValidationError, not_found
from peoplehub.models.survey import (
    Campaign,
    CampaignCreate,
    CampaignStatus,
    CampaignUpdate,
    ResponseCreate,
    ResponseCreated,
    SurveyResponse,
    SurveyTemplate,
    SurveyTemplateCreate,
    SurveyType,
)
from peoplehub.services.identity import SURVEY_SCOPE, IdentityKey, IdentityResolver, identity_resolver
from peoplehub.services.integrity import ReferentialIntegrityGuard, integrity_guard

logger = logging.getLogger(__name__)


def _assessor_key(campaign_id: str, assessor_id: str) -> IdentityKey:
    return IdentityKey("survey-response", f"{campaign_id}:{assessor_id}", scope=SURVEY_SCOPE)


class SurveyService:
    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityResolver,
        guard: ReferentialIntegrityGuard,
    ) -> None:
        self.store = store
        self.identity = identity
        self.guard = guard

    # Templates

    async def create_template(self, payload: SurveyTemplateCreate) -> SurveyTemplate:
        if payload.company_id:
            await self.guard.require_company(payload.company_id)
        now = utc_now()
        template_id = str(uuid.uuid4())
        document = {
            **payload.to_document(),
            "id": template_id,
            "isGlobal": not payload.company_id,
            "createdAt": now,
            "updatedAt": now,
        }
        created = await self.store.create(SURVEY_TEMPLATES, document)
        logger.info("Survey template %s created (global=%s)", template_id, document["isGlobal"])
        return SurveyTemplate.model_validate(created)

    async def list_templates(self, company_id: str | None = None) -> list[SurveyTemplate]:
        items = await self.store.query(SURVEY_TEMPLATES, {"isGlobal": True})
        if company_id:
            items += await self.store.query(SURVEY_TEMPLATES, {"companyId": company_id})
        unique = {item["id"]: item for item in items}
        templates = [SurveyTemplate.model_validate(item) for item in unique.values()]
        return sorted(templates, key=lambda t: t.title.casefold())

    async def _require_template(self, company_id: str, template_id: str) -> dict[str, Any]:
        template = await self.store.read(SURVEY_TEMPLATES, template_id, partition_key=template_id)
        if not template or not (template.get("isGlobal") or template.get("companyId") == company_id):
            raise not_found("Survey template", template_id)
        return template

    # Campaigns

    async def _require_campaign(self, company_id: str, campaign_id: str) -> dict[str, Any]:
        campaign = await self.store.read(ORGANIZATION, campaign_id, partition_key=company_id)
        if not campaign or campaign.get("type") != "survey_campaign":
            raise not_found("Campaign", campaign_id)
        return campaign

    async def create_campaign(self, company_id: str, payload: CampaignCreate) -> Campaign:
        if payload.end_date <= payload.start_date:
            raise ValidationError("The end date must be after the start date.")
        await self.guard.require_company(company_id)
        template = await self._require_template(company_id, payload.template_id)

        now = utc_now()
        document = {
            **payload.to_document(),
            "id": str(uuid.uuid4()),
            "type": "survey_campaign",
            "companyId": company_id,
            "surveyType": template["type"],
            "status": CampaignStatus.DRAFT.value,
            "createdAt": now,
            "updatedAt": now,
        }
        created = await self.store.create(ORGANIZATION, document)
        logger.info("Campaign %s created for company %s", document["id"], company_id)
        return Campaign.model_validate(created)

    async def list_campaigns(self, company_id: str) -> list[Campaign]:
        await self.guard.require_company(company_id)
        items = await self.store.query(
            ORGANIZATION,
            {"type": "survey_campaign"},
            partition_key=company_id,
            order_by="createdAt",
            descending=True,
        )
        return [Campaign.model_validate(item) for item in items]

    async def get_campaign(self, company_id: str, campaign_id: str) -> Campaign:
        return Campaign.model_validate(await self._require_campaign(company_id, campaign_id))

    async def update_campaign(self, company_id: str, campaign_id: str, payload: CampaignUpdate) -> Campaign:
        changes = payload.changes()
        if not changes:
            raise ValidationError("No data provided for update.")
        current = await self._require_campaign(company_id, campaign_id)
        saved = await self.store.replace(ORGANIZATION, {**current, **changes, "updatedAt": utc_now()})
        return Campaign.model_validate(saved)

    async def delete_campaign(self, company_id: str, campaign_id: str) -> None:
        await self._require_campaign(company_id, campaign_id)
        await self.guard.ensure_campaign_unanswered(company_id, campaign_id)
        await self.store.delete(ORGANIZATION, campaign_id, partition_key=company_id)
        logger.info("Campaign %s deleted from company %s", campaign_id, company_id)

    # Responses

    async def submit_response(self, company_id: str, campaign_id: str, payload: ResponseCreate) -> ResponseCreated:
        campaign = await self._require_campaign(company_id, campaign_id)
        if campaign.get("status") != CampaignStatus.ACTIVE.value:
            raise ForbiddenError("This campaign is not accepting responses.")

        response_id = str(uuid.uuid4())
        key = _assessor_key(campaign_id, payload.assessor_id)
        await self.identity.claim([key], owner_id=response_id, company_id=company_id)

        document = {
            **payload.to_document(),
            "id": response_id,
            "type": "survey_response",
            "companyId": company_id,
            "campaignId": campaign_id,
            "submittedAt": utc_now(),
        }
        try:
            await self.store.create(ORGANIZATION, document)
        except Exception:
            await self.identity.release([key])
            raise
        return ResponseCreated(id=response_id, message="Response submitted successfully!")

    async def list_responses(self, company_id: str, campaign_id: str) -> list[SurveyResponse]:
        campaign = await self._require_campaign(company_id, campaign_id)
        items = await self.store.query(
            ORGANIZATION,
            {"type": "survey_response", "campaignId": campaign_id},
            partition_key=company_id,
        )
        anonymous = campaign.get("surveyType") == SurveyType.CLIMATE.value
        responses = []
        for item in items:
            if anonymous:
                item.pop("assessorId", None)
            responses.append(SurveyResponse.model_validate(item))
        return responses


survey_service = SurveyService(document_store, identity_resolver, integrity_guard)
