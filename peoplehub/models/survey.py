"""Survey templates, campaigns and responses."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator

from peoplehub.models.base import CamelModel, UpdateModel


class QuestionType(str, Enum):
    LIKERT_5 = "likert_5"
    BINARY = "binary"
    OPEN_TEXT = "open_text"


class SurveyType(str, Enum):
    CLIMATE = "climate"
    PERFORMANCE_90 = "performance_90"
    PERFORMANCE_180 = "performance_180"
    PERFORMANCE_360 = "performance_360"


class CampaignStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


class Question(CamelModel):
    id: UUID
    text: str = Field(..., min_length=1)
    type: QuestionType
    category: str = Field(..., min_length=1)
    weight: float | None = None


class SurveyTemplateCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    type: SurveyType
    questions: list[Question] = Field(..., min_length=1)
    company_id: str | None = None


class SurveyTemplate(SurveyTemplateCreate):
    id: str
    is_global: bool
    created_at: str | None = None
    updated_at: str | None = None


class CampaignCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    template_id: str = Field(..., min_length=1)
    participants: list[str] = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime


class CampaignUpdate(UpdateModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    status: CampaignStatus | None = None


class Campaign(CamelModel):
    id: str
    company_id: str
    title: str
    template_id: str
    survey_type: SurveyType
    status: CampaignStatus
    participants: list[str]
    start_date: datetime
    end_date: datetime
    created_at: str | None = None
    updated_at: str | None = None


class ResponseCreate(CamelModel):
    assessor_id: str = Field(..., min_length=1)
    assessee_id: str | None = None
    answers: dict[str, Any]

    @field_validator("answers")
    @classmethod
    def answers_not_empty(cls, value: dict[str, Any]) -> dict[str, Any]:
        if not value:
            raise ValueError("Answers must not be empty")
        return value


class SurveyResponse(CamelModel):
    id: str
    campaign_id: str
    assessor_id: str | None = None
    assessee_id: str | None = None
    answers: dict[str, Any]
    submitted_at: str | None = None


class ResponseCreated(CamelModel):
    id: str
    message: str
