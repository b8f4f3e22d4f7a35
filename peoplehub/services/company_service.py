"""Company (tenant) CRUD."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from peoplehub.core.document_store import COMPANIES, DocumentStore, document_store, utc_now
from peoplehub.core.errors import ValidationError, not_found
from peoplehub.core.validators import only_digits
from peoplehub.models.company import Company, CompanyCreate, CompanyUpdate
from peoplehub.services.identity import COMPANY_SCOPE, IdentityKey, IdentityResolver, identity_resolver
from peoplehub.services.integrity import ReferentialIntegrityGuard, integrity_guard

logger = logging.getLogger(__name__)


def _cnpj_key(cnpj: str) -> IdentityKey:
    return IdentityKey("cnpj", only_digits(cnpj), scope=COMPANY_SCOPE)


class CompanyService:
    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityResolver,
        guard: ReferentialIntegrityGuard,
    ) -> None:
        self.store = store
        self.identity = identity
        self.guard = guard

    async def create_company(self, payload: CompanyCreate) -> Company:
        company_id = str(uuid.uuid4())
        key = _cnpj_key(payload.cnpj)
        await self.identity.claim([key], owner_id=company_id, company_id=company_id)

        now = utc_now()
        document = {**payload.to_document(), "id": company_id, "createdAt": now, "updatedAt": now}
        try:
            created = await self.store.create(COMPANIES, document)
        except Exception:
            await self.identity.release([key])
            raise
        logger.info("Company %s created (%s)", company_id, payload.fantasy_name)
        return Company.model_validate(created)

    async def list_companies(self) -> list[Company]:
        items = await self.store.query(COMPANIES, {}, order_by="fantasyName")
        return [Company.model_validate(item) for item in items]

    async def get_company(self, company_id: str) -> Company:
        return Company.model_validate(await self.guard.require_company(company_id))

    async def update_company(self, company_id: str, payload: CompanyUpdate) -> Company:
        changes = payload.changes()
        if not changes:
            raise ValidationError("No data provided for update.")

        current = await self.guard.require_company(company_id)

        if "focalPoint" in changes:
            focal_changes = {k: v for k, v in changes["focalPoint"].items() if v is not None}
            changes["focalPoint"] = {**current.get("focalPoint", {}), **focal_changes}

        old_key = _cnpj_key(current["cnpj"])
        new_key = _cnpj_key(changes["cnpj"]) if "cnpj" in changes else old_key
        cnpj_changed = new_key.id != old_key.id
        if cnpj_changed:
            await self.identity.claim([new_key], owner_id=company_id, company_id=company_id)

        updated: dict[str, Any] = {**current, **changes, "updatedAt": utc_now()}
        try:
            saved = await self.store.replace(COMPANIES, updated)
        except Exception:
            if cnpj_changed:
                await self.identity.release([new_key])
            raise
        if cnpj_changed:
            await self.identity.release([old_key])
        return Company.model_validate(saved)

    async def delete_company(self, company_id: str) -> None:
        current = await self.guard.require_company(company_id)
        await self.guard.ensure_company_empty(company_id)
        await self.store.delete(COMPANIES, company_id, partition_key=company_id)
        await self.identity.release([_cnpj_key(current["cnpj"])])
        logger.info("Company %s deleted", company_id)


company_service = CompanyService(document_store, identity_resolver, integrity_guard)
