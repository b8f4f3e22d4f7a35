"""Login/password derivation and the global uniqueness index.

Uniqueness keys live in the ``identity`` container, all in one logical
partition per scope, so several keys can be claimed in a single transactional
batch: either every key is created or none is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from azure.core.exceptions import AzureError
from azure.cosmos.exceptions import CosmosBatchOperationError, CosmosResourceNotFoundError
from fastapi.concurrency import run_in_threadpool
from passlib.context import CryptContext

from peoplehub.core.config import settings
from peoplehub.core.document_store import IDENTITY, DocumentStore, document_store, utc_now
from peoplehub.core.errors import ConflictError, FieldError
from peoplehub.core.validators import only_digits

logger = logging.getLogger(__name__)

EMPLOYEE_SCOPE = "employee"
COMPANY_SCOPE = "company"
SURVEY_SCOPE = "survey"

_CONFLICT_MESSAGES = {
    "login": "The login '{value}' is already in use.",
    "cpf": "The CPF '{value}' is already registered.",
    "cnpj": "The CNPJ '{value}' is already registered.",
    "survey-response": "A response from this assessor was already submitted for this survey.",
}


def derive_login(name: str) -> str:
    """``"Ana Silva Santos"`` -> ``"ana.santos"``.

    Single-token names have no surname to derive from and are rejected.
    """
    parts = name.split()
    if len(parts) < 2:
        raise ValueError("A login needs at least a first and a last name")
    return f"{parts[0].lower()}.{parts[-1].lower()}"


def initial_password(cpf: str) -> str:
    return only_digits(cpf)


class PasswordHasher:
    def __init__(self, rounds: int) -> None:
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__default_rounds=rounds)

    def hash(self, raw_password: str) -> str:
        return self._context.hash(raw_password)

    def verify(self, raw_password: str, hashed_password: str) -> bool:
        return self._context.verify(raw_password, hashed_password)


@dataclass(frozen=True)
class IdentityKey:
    kind: str
    value: str
    scope: str = EMPLOYEE_SCOPE

    @property
    def id(self) -> str:
        # Cosmos ids cannot contain '/', '\\', '?' or '#'
        return f"{self.kind}:{quote(self.value, safe='')}"

    def document(self, *, owner_id: str, company_id: str) -> dict[str, Any]:
        return {
            "id": self.id,
            "scope": self.scope,
            "kind": self.kind,
            "value": self.value,
            "ownerId": owner_id,
            "companyId": company_id,
            "createdAt": utc_now(),
        }

    def conflict(self) -> ConflictError:
        message = _CONFLICT_MESSAGES.get(self.kind, "'{value}' is already in use.").format(value=self.value)
        return ConflictError(message, field_errors=[FieldError(field=self.kind, message=message, code="duplicate")])


@dataclass(frozen=True)
class EmployeeIdentity:
    login: str
    cpf: str
    password_hash: str

    @property
    def keys(self) -> list[IdentityKey]:
        return [IdentityKey("login", self.login), IdentityKey("cpf", self.cpf)]


def _failed_status(exc: CosmosBatchOperationError) -> int | None:
    responses = getattr(exc, "operation_responses", None) or []
    index = getattr(exc, "error_index", None)
    if index is not None and index < len(responses):
        status = responses[index].get("statusCode")
        if status is not None:
            return int(status)
    return exc.status_code


class IdentityResolver:
    def __init__(self, store: DocumentStore, hasher: PasswordHasher) -> None:
        self.store = store
        self.hasher = hasher

    async def resolve(self, name: str, cpf: str) -> EmployeeIdentity:
        """Derive the login and hash the initial password for a new employee."""
        login = derive_login(name)
        digits = only_digits(cpf)
        password_hash = await self.hash_password(initial_password(digits))
        return EmployeeIdentity(login=login, cpf=digits, password_hash=password_hash)

    async def hash_password(self, raw_password: str) -> str:
        return await run_in_threadpool(self.hasher.hash, raw_password)

    def verify_password(self, raw_password: str, password_hash: str) -> bool:
        return self.hasher.verify(raw_password, password_hash)

    async def claim(self, keys: list[IdentityKey], *, owner_id: str, company_id: str) -> None:
        """Create every key or none; an existing key raises ConflictError."""
        if not keys:
            return
        scope = keys[0].scope
        operations = [("create", (key.document(owner_id=owner_id, company_id=company_id),), {}) for key in keys]
        try:
            await self.store.batch(IDENTITY, operations, partition_key=scope)
        except CosmosBatchOperationError as exc:
            if _failed_status(exc) == 409:
                index = exc.error_index if exc.error_index is not None else 0
                raise keys[index].conflict() from exc
            raise

    async def release(self, keys: list[IdentityKey]) -> None:
        """Best-effort removal of keys; a leftover key only blocks reuse of the value."""
        for key in keys:
            try:
                await self.store.delete(IDENTITY, key.id, partition_key=key.scope)
            except CosmosResourceNotFoundError:
                continue
            except AzureError:
                logger.exception("Failed to release identity key %s", key.id)


identity_resolver = IdentityResolver(document_store, PasswordHasher(settings.PASSWORD_HASH_ROUNDS))
