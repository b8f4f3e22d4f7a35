from __future__ import annotations

import pytest

from peoplehub.core.document_store import ORGANIZATION
from peoplehub.core.errors import ConflictError, NotFoundError, ValidationError
from peoplehub.models.employee import EmployeeCreate
from peoplehub.models.organization import DepartmentCreate, DepartmentUpdate, PositionCreate, PositionUpdate
from tests.conftest import COMPANY_A, employee_payload


@pytest.mark.anyio
async def test_create_department_requires_company(organization):
    with pytest.raises(NotFoundError, match="Company"):
        await organization.create_department("missing", DepartmentCreate(name="TI"))


@pytest.mark.anyio
async def test_department_names_unique_per_company(organization, company):
    await organization.create_department(COMPANY_A, DepartmentCreate(name="Recursos Humanos"))

    with pytest.raises(ConflictError):
        await organization.create_department(COMPANY_A, DepartmentCreate(name="  recursos   HUMANOS "))


@pytest.mark.anyio
async def test_department_name_is_trimmed(organization, company):
    department = await organization.create_department(COMPANY_A, DepartmentCreate(name="  Vendas   Externas "))
    assert department.name == "Vendas Externas"


def test_blank_department_name_rejected():
    with pytest.raises(ValueError):
        DepartmentCreate(name="   ")


@pytest.mark.anyio
async def test_list_departments_sorted(organization, company):
    for name in ("Vendas", "Financeiro", "TI"):
        await organization.create_department(COMPANY_A, DepartmentCreate(name=name))

    assert [d.name for d in await organization.list_departments(COMPANY_A)] == ["Financeiro", "TI", "Vendas"]


@pytest.mark.anyio
async def test_position_scoped_under_department(organization, company):
    sales = await organization.create_department(COMPANY_A, DepartmentCreate(name="Vendas"))
    it = await organization.create_department(COMPANY_A, DepartmentCreate(name="TI"))
    position = await organization.create_position(COMPANY_A, sales.id, PositionCreate(name="Analista"))

    # Same name is fine in another department
    await organization.create_position(COMPANY_A, it.id, PositionCreate(name="Analista"))

    with pytest.raises(ConflictError):
        await organization.create_position(COMPANY_A, sales.id, PositionCreate(name="analista"))
    with pytest.raises(NotFoundError):
        await organization.get_position(COMPANY_A, it.id, position.id)

    assert [p.name for p in await organization.list_positions(COMPANY_A, sales.id)] == ["Analista"]


@pytest.mark.anyio
async def test_update_department_rejects_taken_name(organization, company):
    await organization.create_department(COMPANY_A, DepartmentCreate(name="TI"))
    sales = await organization.create_department(COMPANY_A, DepartmentCreate(name="Vendas"))

    with pytest.raises(ConflictError):
        await organization.update_department(COMPANY_A, sales.id, DepartmentUpdate(name="ti"))
    with pytest.raises(ValidationError):
        await organization.update_department(COMPANY_A, sales.id, DepartmentUpdate())

    renamed = await organization.update_department(COMPANY_A, sales.id, DepartmentUpdate(name="VENDAS"))
    assert renamed.name == "VENDAS"


@pytest.mark.anyio
async def test_rename_propagates_to_employees(organization, employees, company):
    department = await organization.create_department(COMPANY_A, DepartmentCreate(name="TI"))
    position = await organization.create_position(COMPANY_A, department.id, PositionCreate(name="Dev"))
    created = await employees.create_employee(
        COMPANY_A, EmployeeCreate.model_validate(employee_payload(department.id, position.id))
    )

    await organization.update_department(COMPANY_A, department.id, DepartmentUpdate(name="Tecnologia"))
    await organization.update_position(COMPANY_A, department.id, position.id, PositionUpdate(name="Desenvolvedor"))

    employee = await employees.get_employee(COMPANY_A, created.employee_id)
    assert employee.department_name == "Tecnologia"
    assert employee.position_name == "Desenvolvedor"


@pytest.mark.anyio
async def test_delete_department_without_employees(organization, containers, company):
    department = await organization.create_department(COMPANY_A, DepartmentCreate(name="TI"))
    await organization.create_position(COMPANY_A, department.id, PositionCreate(name="Dev"))
    await organization.create_position(COMPANY_A, department.id, PositionCreate(name="QA"))

    await organization.delete_department(COMPANY_A, department.id)

    assert containers[ORGANIZATION].items == {}


@pytest.mark.anyio
async def test_delete_department_with_employee_is_blocked(organization, employees, company):
    department = await organization.create_department(COMPANY_A, DepartmentCreate(name="TI"))
    position = await organization.create_position(COMPANY_A, department.id, PositionCreate(name="Dev"))
    await employees.create_employee(
        COMPANY_A, EmployeeCreate.model_validate(employee_payload(department.id, position.id))
    )

    with pytest.raises(ConflictError, match="employees"):
        await organization.delete_department(COMPANY_A, department.id)
    with pytest.raises(ConflictError, match="employees"):
        await organization.delete_position(COMPANY_A, department.id, position.id)

    assert await organization.get_department(COMPANY_A, department.id)
    assert await organization.get_position(COMPANY_A, department.id, position.id)


@pytest.mark.anyio
async def test_delete_missing_department(organization, company):
    with pytest.raises(NotFoundError):
        await organization.delete_department(COMPANY_A, "missing")


@pytest.mark.anyio
async def test_find_or_create_reuses_by_normalized_name(organization, company):
    first, created = await organization.find_or_create_department(COMPANY_A, " Recursos  Humanos")
    again, created_again = await organization.find_or_create_department(COMPANY_A, "recursos humanos")

    assert created and not created_again
    assert first["id"] == again["id"]
    assert first["name"] == "Recursos Humanos"

    position, _ = await organization.find_or_create_position(COMPANY_A, first["id"], "Analista")
    same, created_position = await organization.find_or_create_position(COMPANY_A, first["id"], "ANALISTA ")
    assert not created_position
    assert same["id"] == position["id"]
