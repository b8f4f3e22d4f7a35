"""Checks that keep references between documents valid.

Deletes are blocked while other documents still point at the target. The
check and the delete are two separate store calls, so an employee created in
between can still end up referencing a deleted department.
"""

from __future__ import annotations

import logging

from peoplehub.core.document_store import COMPANIES, ORGANIZATION, DocumentStore, document_store
from peoplehub.core.errors import ConflictError, not_found

logger = logging.getLogger(__name__)


class ReferentialIntegrityGuard:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def require_company(self, company_id: str) -> dict:
        company = await self.store.read(COMPANIES, company_id, partition_key=company_id)
        if not company:
            raise not_found("Company", company_id)
        return company

    async def require_department(self, company_id: str, department_id: str) -> dict:
        department = await self.store.read(ORGANIZATION, department_id, partition_key=company_id)
        if not department or department.get("type") != "department":
            raise not_found("Department", department_id)
        return department

    async def require_position(self, company_id: str, department_id: str, position_id: str) -> dict:
        position = await self.store.read(ORGANIZATION, position_id, partition_key=company_id)
        if not position or position.get("type") != "position" or position.get("departmentId") != department_id:
            raise not_found("Position", position_id)
        return position

    async def ensure_company_empty(self, company_id: str) -> None:
        for doc_type, label in (
            ("department", "departments"),
            ("employee", "employees"),
            ("survey_campaign", "survey campaigns"),
        ):
            if await self.store.exists(ORGANIZATION, {"type": doc_type}, partition_key=company_id):
                logger.info("Delete of company %s blocked: %s still exist", company_id, label)
                raise ConflictError(f"The company cannot be deleted while it still has {label}.")

    async def ensure_department_unreferenced(self, company_id: str, department_id: str) -> None:
        if await self.store.exists(
            ORGANIZATION,
            {"type": "employee", "departmentId": department_id},
            partition_key=company_id,
        ):
            raise ConflictError("The department cannot be deleted: employees are still assigned to it.")

    async def ensure_position_unreferenced(self, company_id: str, department_id: str, position_id: str) -> None:
        if await self.store.exists(
            ORGANIZATION,
            {"type": "employee", "departmentId": department_id, "positionId": position_id},
            partition_key=company_id,
        ):
            raise ConflictError("The position cannot be deleted: employees are still assigned to it.")

    async def ensure_campaign_unanswered(self, company_id: str, campaign_id: str) -> None:
        if await self.store.exists(
            ORGANIZATION,
            {"type": "survey_response", "campaignId": campaign_id},
            partition_key=company_id,
        ):
            raise ConflictError("The campaign cannot be deleted because it already has responses.")


integrity_guard = ReferentialIntegrityGuard(document_store)
