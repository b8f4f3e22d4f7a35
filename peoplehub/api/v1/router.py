from fastapi import APIRouter

from peoplehub.api.v1.endpoints import companies, departments, employees, health, imports, positions, surveys

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(companies.router)
api_router.include_router(departments.router)
api_router.include_router(positions.router)
api_router.include_router(employees.router)
api_router.include_router(imports.router)
api_router.include_router(surveys.templates_router)
api_router.include_router(surveys.campaigns_router)
