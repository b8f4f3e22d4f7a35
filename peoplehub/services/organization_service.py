"""Departments and positions (positions are scoped under a department)."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from peoplehub.core.document_store import ORGANIZATION, DocumentStore, document_store, utc_now
from peoplehub.core.errors import ConflictError, ValidationError
from peoplehub.core.validators import normalize_name
from peoplehub.models.organization import (
    Department,
    DepartmentCreate,
    DepartmentUpdate,
    Position,
    PositionCreate,
    PositionUpdate,
)
from peoplehub.services.integrity import ReferentialIntegrityGuard, integrity_guard

logger = logging.getLogger(__name__)

_MAX_BATCH_OPERATIONS = 100


class OrganizationService:
    def __init__(self, store: DocumentStore, guard: ReferentialIntegrityGuard) -> None:
        self.store = store
        self.guard = guard

    async def _find_by_name(self, company_id: str, filters: dict[str, Any], name: str) -> dict | None:
        items = await self.store.query(
            ORGANIZATION,
            {**filters, "normalizedName": normalize_name(name)},
            partition_key=company_id,
            limit=1,
        )
        return items[0] if items else None

    async def _insert(self, company_id: str, doc_type: str, name: str, **fields: Any) -> dict:
        now = utc_now()
        document = {
            "id": str(uuid.uuid4()),
            "type": doc_type,
            "companyId": company_id,
            "name": name,
            "normalizedName": normalize_name(name),
            **fields,
            "createdAt": now,
            "updatedAt": now,
        }
        return await self.store.create(ORGANIZATION, document)

    async def _rename(self, company_id: str, current: dict, name: str, reference_field: str, name_field: str) -> dict:
        saved = await self.store.replace(
            ORGANIZATION,
            {**current, "name": name, "normalizedName": normalize_name(name), "updatedAt": utc_now()},
        )
        employees = await self.store.query(
            ORGANIZATION,
            {"type": "employee", reference_field: current["id"]},
            partition_key=company_id,
        )
        for employee in employees:
            employee[name_field] = name
            employee["updatedAt"] = utc_now()
            await self.store.replace(ORGANIZATION, employee)
        if employees:
            logger.info("Renamed %s %s on %d employees", name_field, current["id"], len(employees))
        return saved

    # Departments

    async def create_department(self, company_id: str, payload: DepartmentCreate) -> Department:
        await self.guard.require_company(company_id)
        if await self._find_by_name(company_id, {"type": "department"}, payload.name):
            raise ConflictError(f"A department named '{payload.name}' already exists.")
        return Department.model_validate(await self._insert(company_id, "department", payload.name))

    async def list_departments(self, company_id: str) -> list[Department]:
        await self.guard.require_company(company_id)
        items = await self.store.query(
            ORGANIZATION, {"type": "department"}, partition_key=company_id, order_by="name"
        )
        return [Department.model_validate(item) for item in items]

    async def get_department(self, company_id: str, department_id: str) -> Department:
        return Department.model_validate(await self.guard.require_department(company_id, department_id))

    async def update_department(self, company_id: str, department_id: str, payload: DepartmentUpdate) -> Department:
        changes = payload.changes()
        if not changes:
            raise ValidationError("No data provided for update.")

        current = await self.guard.require_department(company_id, department_id)
        name = changes["name"]
        existing = await self._find_by_name(company_id, {"type": "department"}, name)
        if existing and existing["id"] != department_id:
            raise ConflictError(f"A department named '{name}' already exists.")
        saved = await self._rename(company_id, current, name, "departmentId", "departmentName")
        return Department.model_validate(saved)

    async def delete_department(self, company_id: str, department_id: str) -> None:
        await self.guard.require_department(company_id, department_id)
        await self.guard.ensure_department_unreferenced(company_id, department_id)

        positions = await self.store.query(
            ORGANIZATION,
            {"type": "position", "departmentId": department_id},
            partition_key=company_id,
        )
        operations = [("delete", (p["id"],), {}) for p in positions]
        operations.append(("delete", (department_id,), {}))
        # Department is deleted in the last chunk
        for start in range(0, len(operations), _MAX_BATCH_OPERATIONS):
            chunk = operations[start : start + _MAX_BATCH_OPERATIONS]
            await self.store.batch(ORGANIZATION, chunk, partition_key=company_id)
        logger.info("Department %s deleted with %d positions", department_id, len(positions))

    async def find_or_create_department(self, company_id: str, name: str) -> tuple[dict, bool]:
        existing = await self._find_by_name(company_id, {"type": "department"}, name)
        if existing:
            return existing, False
        clean = " ".join(name.split())
        return await self._insert(company_id, "department", clean), True

    # Positions

    async def create_position(self, company_id: str, department_id: str, payload: PositionCreate) -> Position:
        await self.guard.require_department(company_id, department_id)
        filters = {"type": "position", "departmentId": department_id}
        if await self._find_by_name(company_id, filters, payload.name):
            raise ConflictError(f"A position named '{payload.name}' already exists in this department.")
        created = await self._insert(company_id, "position", payload.name, departmentId=department_id)
        return Position.model_validate(created)

    async def list_positions(self, company_id: str, department_id: str) -> list[Position]:
        await self.guard.require_department(company_id, department_id)
        items = await self.store.query(
            ORGANIZATION,
            {"type": "position", "departmentId": department_id},
            partition_key=company_id,
            order_by="name",
        )
        return [Position.model_validate(item) for item in items]

    async def get_position(self, company_id: str, department_id: str, position_id: str) -> Position:
        return Position.model_validate(await self.guard.require_position(company_id, department_id, position_id))

    async def update_position(
        self, company_id: str, department_id: str, position_id: str, payload: PositionUpdate
    ) -> Position:
        changes = payload.changes()
        if not changes:
            raise ValidationError("No data provided for update.")

        current = await self.guard.require_position(company_id, department_id, position_id)
        name = changes["name"]
        existing = await self._find_by_name(company_id, {"type": "position", "departmentId": department_id}, name)
        if existing and existing["id"] != position_id:
            raise ConflictError(f"A position named '{name}' already exists in this department.")
        saved = await self._rename(company_id, current, name, "positionId", "positionName")
        return Position.model_validate(saved)

    async def delete_position(self, company_id: str, department_id: str, position_id: str) -> None:
        await self.guard.require_position(company_id, department_id, position_id)
        await self.guard.ensure_position_unreferenced(company_id, department_id, position_id)
        await self.store.delete(ORGANIZATION, position_id, partition_key=company_id)

    async def find_or_create_position(self, company_id: str, department_id: str, name: str) -> tuple[dict, bool]:
        filters = {"type": "position", "departmentId": department_id}
        existing = await self._find_by_name(company_id, filters, name)
        if existing:
            return existing, False
        clean = " ".join(name.split())
        return await self._insert(company_id, "position", clean, departmentId=department_id), True


organization_service = OrganizationService(document_store, integrity_guard)
