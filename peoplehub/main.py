from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from peoplehub.api.v1.router import api_router
from peoplehub.core.config import settings
from peoplehub.core.document_store import document_store
from peoplehub.core.errors import ServiceError
from peoplehub.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.LOG_LEVEL)
    try:
        await document_store.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize DocumentStore, continuing without DB")
    yield
    await document_store.close()


app = FastAPI(
    title="PeopleHub API",
    description="Multi-tenant HR administration: companies, organization, employees and surveys",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=int(exc.status_code), content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors = []
    for error in exc.errors():
        loc = [str(part) for part in error["loc"]]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        field_errors.append(
            {
                "field": ".".join(loc),
                "message": error["msg"].removeprefix("Value error, "),
                "code": error["type"],
            }
        )
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid data", "code": "validation_error", "fieldErrors": field_errors},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred", "code": "internal_error"},
    )


app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "PeopleHub API"}
