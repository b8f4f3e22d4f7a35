"""Authentication models for identity-provider JWT tokens."""

from __future__ import annotations

from pydantic import BaseModel

SUPER_ADMIN = "super_admin"
COMPANY_ADMIN = "company_admin"


class UserInfo(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    roles: list[str] = []
    company_id: str | None = None

    @property
    def is_super_admin(self) -> bool:
        return SUPER_ADMIN in self.roles

    def can_access_company(self, company_id: str) -> bool:
        return self.is_super_admin or (COMPANY_ADMIN in self.roles and self.company_id == company_id)
