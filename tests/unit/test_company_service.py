from __future__ import annotations

import pytest

from peoplehub.core.document_store import IDENTITY, ORGANIZATION
from peoplehub.core.errors import ConflictError, NotFoundError, ValidationError
from peoplehub.models.company import CompanyCreate, CompanyUpdate
from tests.conftest import company_payload


@pytest.mark.anyio
async def test_create_company_claims_cnpj(companies, containers):
    company = await companies.create_company(CompanyCreate.model_validate(company_payload()))

    assert company.fantasy_name == "Acme Ltda"
    assert company.created_at is not None
    key = containers[IDENTITY].items[("company", "cnpj:12345678000190")]
    assert key["ownerId"] == company.id


@pytest.mark.anyio
async def test_duplicate_cnpj_conflicts(companies):
    await companies.create_company(CompanyCreate.model_validate(company_payload()))

    with pytest.raises(ConflictError, match="CNPJ"):
        await companies.create_company(CompanyCreate.model_validate(company_payload(fantasyName="Other")))


@pytest.mark.anyio
async def test_failed_write_releases_cnpj(companies, containers):
    containers["companies"].fail_next_create = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await companies.create_company(CompanyCreate.model_validate(company_payload()))

    assert containers[IDENTITY].items == {}
    await companies.create_company(CompanyCreate.model_validate(company_payload()))


@pytest.mark.anyio
async def test_list_companies_sorted_by_name(companies):
    await companies.create_company(CompanyCreate.model_validate(company_payload(fantasyName="Zeta")))
    await companies.create_company(
        CompanyCreate.model_validate(company_payload(cnpj="98.765.432/0001-10", fantasyName="Alpha"))
    )

    assert [c.fantasy_name for c in await companies.list_companies()] == ["Alpha", "Zeta"]


@pytest.mark.anyio
async def test_update_company_merges_focal_point(companies):
    created = await companies.create_company(CompanyCreate.model_validate(company_payload()))

    updated = await companies.update_company(
        created.id, CompanyUpdate.model_validate({"focalPoint": {"phone": "(21) 3333-4444"}})
    )

    assert updated.focal_point.phone == "(21) 3333-4444"
    assert updated.focal_point.name == "João Lima"


@pytest.mark.anyio
async def test_update_company_moves_cnpj_key(companies, containers):
    created = await companies.create_company(CompanyCreate.model_validate(company_payload()))

    await companies.update_company(created.id, CompanyUpdate(cnpj="98.765.432/0001-10"))

    keys = containers[IDENTITY].items
    assert ("company", "cnpj:98765432000110") in keys
    assert ("company", "cnpj:12345678000190") not in keys


@pytest.mark.anyio
async def test_update_company_requires_changes(companies):
    created = await companies.create_company(CompanyCreate.model_validate(company_payload()))

    with pytest.raises(ValidationError):
        await companies.update_company(created.id, CompanyUpdate())


@pytest.mark.anyio
async def test_get_missing_company(companies):
    with pytest.raises(NotFoundError):
        await companies.get_company("missing")


@pytest.mark.anyio
async def test_delete_company_blocked_while_departments_exist(companies, organization, containers):
    from peoplehub.models.organization import DepartmentCreate

    created = await companies.create_company(CompanyCreate.model_validate(company_payload()))
    await organization.create_department(created.id, DepartmentCreate(name="TI"))

    with pytest.raises(ConflictError, match="departments"):
        await companies.delete_company(created.id)

    assert containers["companies"].items


@pytest.mark.anyio
async def test_delete_empty_company_releases_cnpj(companies, containers):
    created = await companies.create_company(CompanyCreate.model_validate(company_payload()))

    await companies.delete_company(created.id)

    assert containers["companies"].items == {}
    assert containers[IDENTITY].items == {}
    assert containers[ORGANIZATION].items == {}
