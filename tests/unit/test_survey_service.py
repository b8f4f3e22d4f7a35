from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from peoplehub.core.document_store import COMPANIES
from peoplehub.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from peoplehub.models.survey import (
    CampaignCreate,
    CampaignStatus,
    CampaignUpdate,
    ResponseCreate,
    SurveyTemplateCreate,
    SurveyType,
)
from tests.conftest import COMPANY_A

START = datetime(2025, 3, 1, tzinfo=timezone.utc)


def template_payload(title: str = "Clima 2025", survey_type: str = "climate", company_id: str | None = None):
    return SurveyTemplateCreate.model_validate(
        {
            "title": title,
            "type": survey_type,
            "companyId": company_id,
            "questions": [
                {"id": str(uuid.uuid4()), "text": "Você recomendaria a empresa?", "type": "likert_5", "category": "eNPS"}
            ],
        }
    )


def campaign_payload(template_id: str, **overrides) -> CampaignCreate:
    payload = {
        "title": "Pesquisa de clima",
        "templateId": template_id,
        "participants": ["emp-1", "emp-2"],
        "startDate": START.isoformat(),
        "endDate": (START + timedelta(days=14)).isoformat(),
    }
    payload.update(overrides)
    return CampaignCreate.model_validate(payload)


@pytest.fixture
async def active_campaign(surveys, company):
    template = await surveys.create_template(template_payload())
    campaign = await surveys.create_campaign(COMPANY_A, campaign_payload(template.id))
    return await surveys.update_campaign(COMPANY_A, campaign.id, CampaignUpdate(status=CampaignStatus.ACTIVE))


@pytest.mark.anyio
async def test_template_without_company_is_global(surveys):
    template = await surveys.create_template(template_payload())
    assert template.is_global is True


@pytest.mark.anyio
async def test_list_templates_merges_global_and_company(surveys, containers, company):
    await containers[COMPANIES].create_item(body={"id": "company-b"})
    await surveys.create_template(template_payload("Zeta"))
    await surveys.create_template(template_payload("Alpha", company_id=COMPANY_A))
    await surveys.create_template(template_payload("Beta", company_id="company-b"))

    assert [t.title for t in await surveys.list_templates(COMPANY_A)] == ["Alpha", "Zeta"]
    assert [t.title for t in await surveys.list_templates()] == ["Zeta"]


@pytest.mark.anyio
async def test_campaign_copies_template_type_and_starts_as_draft(surveys, company):
    template = await surveys.create_template(template_payload(survey_type="performance_360"))

    campaign = await surveys.create_campaign(COMPANY_A, campaign_payload(template.id))

    assert campaign.status == CampaignStatus.DRAFT
    assert campaign.survey_type == SurveyType.PERFORMANCE_360


@pytest.mark.anyio
async def test_campaign_dates_must_be_ordered(surveys, company):
    template = await surveys.create_template(template_payload())

    with pytest.raises(ValidationError, match="end date"):
        await surveys.create_campaign(COMPANY_A, campaign_payload(template.id, endDate=START.isoformat()))


@pytest.mark.anyio
async def test_campaign_rejects_other_company_template(surveys, containers, company):
    await containers[COMPANIES].create_item(body={"id": "company-b"})
    template = await surveys.create_template(template_payload(company_id="company-b"))

    with pytest.raises(NotFoundError, match="Survey template"):
        await surveys.create_campaign(COMPANY_A, campaign_payload(template.id))


@pytest.mark.anyio
async def test_campaigns_listed_newest_first(surveys, company):
    template = await surveys.create_template(template_payload())
    first = await surveys.create_campaign(COMPANY_A, campaign_payload(template.id, title="Primeira"))
    second = await surveys.create_campaign(COMPANY_A, campaign_payload(template.id, title="Segunda"))

    listed = await surveys.list_campaigns(COMPANY_A)

    assert {c.id for c in listed} == {first.id, second.id}
    assert listed[0].created_at >= listed[1].created_at


@pytest.mark.anyio
async def test_response_requires_active_campaign(surveys, company):
    template = await surveys.create_template(template_payload())
    campaign = await surveys.create_campaign(COMPANY_A, campaign_payload(template.id))

    with pytest.raises(ForbiddenError):
        await surveys.submit_response(COMPANY_A, campaign.id, ResponseCreate(assessor_id="emp-1", answers={"q1": 5}))


@pytest.mark.anyio
async def test_one_response_per_assessor(surveys, active_campaign):
    await surveys.submit_response(COMPANY_A, active_campaign.id, ResponseCreate(assessor_id="emp-1", answers={"q1": 5}))

    with pytest.raises(ConflictError):
        await surveys.submit_response(
            COMPANY_A, active_campaign.id, ResponseCreate(assessor_id="emp-1", answers={"q1": 1})
        )
    await surveys.submit_response(COMPANY_A, active_campaign.id, ResponseCreate(assessor_id="emp-2", answers={"q1": 4}))


@pytest.mark.anyio
async def test_climate_responses_are_anonymous(surveys, active_campaign):
    await surveys.submit_response(COMPANY_A, active_campaign.id, ResponseCreate(assessor_id="emp-1", answers={"q1": 5}))

    responses = await surveys.list_responses(COMPANY_A, active_campaign.id)

    assert len(responses) == 1
    assert responses[0].assessor_id is None
    assert responses[0].answers == {"q1": 5}


@pytest.mark.anyio
async def test_campaign_with_responses_cannot_be_deleted(surveys, active_campaign):
    await surveys.submit_response(COMPANY_A, active_campaign.id, ResponseCreate(assessor_id="emp-1", answers={"q1": 5}))

    with pytest.raises(ConflictError, match="responses"):
        await surveys.delete_campaign(COMPANY_A, active_campaign.id)


@pytest.mark.anyio
async def test_delete_unanswered_campaign(surveys, active_campaign):
    await surveys.delete_campaign(COMPANY_A, active_campaign.id)

    with pytest.raises(NotFoundError):
        await surveys.get_campaign(COMPANY_A, active_campaign.id)


def test_empty_answers_rejected():
    with pytest.raises(ValueError, match="Answers must not be empty"):
        ResponseCreate(assessor_id="emp-1", answers={})
