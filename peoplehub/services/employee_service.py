"""Employee CRUD on top of the identity index and the integrity guard."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from peoplehub.core.document_store import ORGANIZATION, DocumentStore, document_store, utc_now
from peoplehub.core.errors import ValidationError, not_found
from peoplehub.models.employee import Employee, EmployeeCreate, EmployeeCreated, EmployeeUpdate
from peoplehub.services.identity import IdentityKey, IdentityResolver, identity_resolver
from peoplehub.services.integrity import ReferentialIntegrityGuard, integrity_guard

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "employee"


def profile_id(employee_id: str) -> str:
    return f"user-{employee_id}"


def _profile_document(employee: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": profile_id(employee["id"]),
        "type": "user_profile",
        "companyId": employee["companyId"],
        "employeeId": employee["id"],
        "login": employee["login"],
        "name": employee["name"],
        "role": employee["role"],
        "updatedAt": employee["updatedAt"],
    }


class EmployeeService:
    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityResolver,
        guard: ReferentialIntegrityGuard,
    ) -> None:
        self.store = store
        self.identity = identity
        self.guard = guard

    async def _require_employee(self, company_id: str, employee_id: str) -> dict[str, Any]:
        employee = await self.store.read(ORGANIZATION, employee_id, partition_key=company_id)
        if not employee or employee.get("type") != "employee":
            raise not_found("Employee", employee_id)
        return employee

    async def create_employee(self, company_id: str, payload: EmployeeCreate) -> EmployeeCreated:
        department = await self.guard.require_department(company_id, payload.department_id)
        position = await self.guard.require_position(company_id, payload.department_id, payload.position_id)

        resolved = await self.identity.resolve(payload.name, payload.cpf)
        employee_id = str(uuid.uuid4())
        await self.identity.claim(resolved.keys, owner_id=employee_id, company_id=company_id)

        now = utc_now()
        document = {
            **payload.to_document(),
            "id": employee_id,
            "type": "employee",
            "companyId": company_id,
            "cpf": resolved.cpf,
            "departmentName": department["name"],
            "positionName": position["name"],
            "login": resolved.login,
            "password": resolved.password_hash,
            "role": DEFAULT_ROLE,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            await self.store.batch(
                ORGANIZATION,
                [
                    ("create", (document,), {}),
                    ("create", (_profile_document(document),), {}),
                ],
                partition_key=company_id,
            )
        except Exception:
            logger.exception("Failed to persist employee %s for company %s", employee_id, company_id)
            await self.identity.release(resolved.keys)
            raise

        logger.info("Employee %s created for company %s (login=%s)", employee_id, company_id, resolved.login)
        return EmployeeCreated(message="Employee created successfully!", employee_id=employee_id, login=resolved.login)

    async def list_employees(self, company_id: str) -> list[Employee]:
        await self.guard.require_company(company_id)
        items = await self.store.query(ORGANIZATION, {"type": "employee"}, partition_key=company_id, order_by="name")
        return [Employee.model_validate(item) for item in items]

    async def get_employee(self, company_id: str, employee_id: str) -> Employee:
        return Employee.model_validate(await self._require_employee(company_id, employee_id))

    async def update_employee(self, company_id: str, employee_id: str, payload: EmployeeUpdate) -> Employee:
        changes = payload.changes()
        if not changes:
            raise ValidationError("No data provided for update.")

        current = await self._require_employee(company_id, employee_id)
        password = changes.pop("password", None)
        updated: dict[str, Any] = {**current, **changes}

        if "departmentId" in changes or "positionId" in changes:
            department = await self.guard.require_department(company_id, updated["departmentId"])
            position = await self.guard.require_position(company_id, updated["departmentId"], updated["positionId"])
            updated["departmentName"] = department["name"]
            updated["positionName"] = position["name"]

        if password:
            updated["password"] = await self.identity.hash_password(password)

        # Login and CPF keys share the employee scope: both moves are claimed in one batch
        moved = [
            (IdentityKey(kind, current[kind]), IdentityKey(kind, updated[kind]))
            for kind in ("login", "cpf")
            if current[kind] != updated[kind]
        ]
        old_keys = [old for old, _ in moved]
        new_keys = [new for _, new in moved]
        await self.identity.claim(new_keys, owner_id=employee_id, company_id=company_id)

        updated["updatedAt"] = utc_now()
        try:
            await self.store.batch(
                ORGANIZATION,
                [
                    ("replace", (employee_id, updated), {}),
                    ("upsert", (_profile_document(updated),), {}),
                ],
                partition_key=company_id,
            )
        except Exception:
            logger.exception("Failed to update employee %s for company %s", employee_id, company_id)
            await self.identity.release(new_keys)
            raise
        await self.identity.release(old_keys)
        if password:
            logger.info("Password reset for employee %s of company %s", employee_id, company_id)
        return Employee.model_validate(updated)

    async def delete_employee(self, company_id: str, employee_id: str) -> None:
        current = await self._require_employee(company_id, employee_id)

        operations: list = [("delete", (employee_id,), {})]
        if await self.store.read(ORGANIZATION, profile_id(employee_id), partition_key=company_id):
            operations.append(("delete", (profile_id(employee_id),), {}))
        await self.store.batch(ORGANIZATION, operations, partition_key=company_id)

        await self.identity.release([IdentityKey("login", current["login"]), IdentityKey("cpf", current["cpf"])])
        logger.info("Employee %s deleted from company %s", employee_id, company_id)


employee_service = EmployeeService(document_store, identity_resolver, integrity_guard)
