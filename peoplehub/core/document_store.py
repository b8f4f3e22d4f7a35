"""Cosmos DB access shared by every service.

Logical container names map to the configured Cosmos containers:

    companies          partition /id         company documents
    organization       partition /companyId  departments, positions, employees, surveys
    identity           partition /scope      uniqueness keys (login, cpf, cnpj, ...)
    survey_templates   partition /id         questionnaire templates
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from azure.cosmos.aio import CosmosClient
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from peoplehub.core.config import Settings
from peoplehub.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

COMPANIES = "companies"
ORGANIZATION = "organization"
IDENTITY = "identity"
SURVEY_TEMPLATES = "survey_templates"

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

BatchOperation = tuple[str, tuple[Any, ...], dict[str, Any]]


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_query(
    filters: dict[str, Any],
    *,
    order_by: str | None = None,
    descending: bool = False,
    limit: int | None = None,
) -> tuple[str, list[dict[str, Any]]]:
    """Build a parameterized equality query: one ``c.<field> = @<field>`` per filter."""
    clauses: list[str] = []
    params: list[dict[str, Any]] = []
    for field, value in filters.items():
        if not _FIELD_NAME.match(field):
            raise ValueError(f"Invalid field name: {field!r}")
        clauses.append(f"c.{field} = @{field}")
        params.append({"name": f"@{field}", "value": value})

    query = "SELECT * FROM c"
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    if order_by:
        if not _FIELD_NAME.match(order_by):
            raise ValueError(f"Invalid field name: {order_by!r}")
        query += f" ORDER BY c.{order_by}" + (" DESC" if descending else "")
    if limit is not None:
        query += " OFFSET 0 LIMIT @limit"
        params.append({"name": "@limit", "value": limit})
    return query, params


def strip_system_fields(item: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in item.items() if not k.startswith("_")}


class DocumentStore:
    def __init__(self) -> None:
        self.client: CosmosClient | None = None
        self.containers: dict[str, Any] = {}
        self.initialized: bool = False

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        if not settings.COSMOS_DB_ENDPOINT or not settings.COSMOS_DB_KEY:
            logger.warning("Cosmos DB credentials missing, document store not initialized")
            return

        self.client = CosmosClient(settings.COSMOS_DB_ENDPOINT, settings.COSMOS_DB_KEY)
        db = self.client.get_database_client(settings.COSMOS_DB_DATABASE)
        self.attach(
            **{
                COMPANIES: db.get_container_client(settings.COSMOS_DB_COMPANIES_CONTAINER),
                ORGANIZATION: db.get_container_client(settings.COSMOS_DB_ORGANIZATION_CONTAINER),
                IDENTITY: db.get_container_client(settings.COSMOS_DB_IDENTITY_CONTAINER),
                SURVEY_TEMPLATES: db.get_container_client(settings.COSMOS_DB_SURVEY_TEMPLATES_CONTAINER),
            }
        )
        logger.info("DocumentStore initialized (database=%s)", settings.COSMOS_DB_DATABASE)

    def attach(self, **containers: Any) -> None:
        self.containers = dict(containers)
        self.initialized = True

    def detach(self) -> None:
        self.containers = {}
        self.initialized = False

    async def close(self) -> None:
        if self.client:
            await self.client.close()
            self.client = None
            self.detach()

    def container(self, name: str) -> Any:
        container = self.containers.get(name)
        if container is None:
            raise StoreUnavailableError()
        return container

    async def check_connection(self) -> bool:
        if not self.initialized:
            return False
        try:
            async for _ in self.container(COMPANIES).query_items(
                query="SELECT VALUE COUNT(1) FROM c",
                enable_cross_partition_query=True,
            ):
                return True
            return True
        except Exception:
            logger.exception("Cosmos DB connection check failed")
            return False

    async def read(self, name: str, item_id: str, partition_key: str) -> dict[str, Any] | None:
        try:
            item = await self.container(name).read_item(item=item_id, partition_key=partition_key)
        except CosmosResourceNotFoundError:
            return None
        return strip_system_fields(item)

    async def query(
        self,
        name: str,
        filters: dict[str, Any],
        *,
        partition_key: str | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        query, params = build_query(filters, order_by=order_by, descending=descending, limit=limit)
        kwargs: dict[str, Any] = {"query": query, "parameters": params}
        if partition_key is not None:
            kwargs["partition_key"] = partition_key
        else:
            kwargs["enable_cross_partition_query"] = True

        items: list[dict[str, Any]] = []
        async for item in self.container(name).query_items(**kwargs):
            items.append(strip_system_fields(item))
        return items

    async def exists(self, name: str, filters: dict[str, Any], *, partition_key: str | None = None) -> bool:
        return bool(await self.query(name, filters, partition_key=partition_key, limit=1))

    async def create(self, name: str, item: dict[str, Any]) -> dict[str, Any]:
        created = await self.container(name).create_item(body=item)
        return strip_system_fields(created)

    async def replace(self, name: str, item: dict[str, Any]) -> dict[str, Any]:
        replaced = await self.container(name).replace_item(item=item["id"], body=item)
        return strip_system_fields(replaced)

    async def delete(self, name: str, item_id: str, partition_key: str) -> None:
        await self.container(name).delete_item(item=item_id, partition_key=partition_key)

    async def batch(self, name: str, operations: list[BatchOperation], partition_key: str) -> list[Any]:
        """Run operations atomically inside one logical partition."""
        return await self.container(name).execute_item_batch(
            batch_operations=operations,
            partition_key=partition_key,
        )


document_store = DocumentStore()
