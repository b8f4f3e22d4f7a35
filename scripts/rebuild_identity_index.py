#!/usr/bin/env python3
"""Rebuild the identity index (login, CPF and CNPJ uniqueness keys).

Run from the project root:

    python3 scripts/rebuild_identity_index.py [--dry-run] [--verbose]

Reads every employee and company document, recreates missing keys and
reports values claimed by more than one document. Existing keys are never
overwritten.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from peoplehub.core.config import Settings  # noqa: E402
from peoplehub.core.document_store import COMPANIES, IDENTITY, ORGANIZATION, DocumentStore  # noqa: E402
from peoplehub.core.validators import only_digits  # noqa: E402
from peoplehub.services.identity import COMPANY_SCOPE, IdentityKey  # noqa: E402

logger = logging.getLogger(__name__)


@dataclass
class PlannedKey:
    key: IdentityKey
    owner_id: str
    company_id: str


@dataclass
class RebuildReport:
    created: int = 0
    existing: int = 0
    duplicates: list[str] = field(default_factory=list)


def plan_keys(employees: list[dict[str, Any]], companies: list[dict[str, Any]]) -> tuple[list[PlannedKey], list[str]]:
    """Work out which key every document should own.

    Documents are taken oldest first, so when two documents share a value the
    older one keeps the key and the newer one is reported.
    """
    planned: dict[str, PlannedKey] = {}
    duplicates: list[str] = []

    def add(key: IdentityKey, owner_id: str, company_id: str) -> None:
        slot = f"{key.scope}/{key.id}"
        if slot in planned:
            duplicates.append(f"{key.kind} '{key.value}' used by {planned[slot].owner_id} and {owner_id}")
            return
        planned[slot] = PlannedKey(key=key, owner_id=owner_id, company_id=company_id)

    for company in sorted(companies, key=lambda d: d.get("createdAt") or ""):
        if company.get("cnpj"):
            add(IdentityKey("cnpj", only_digits(company["cnpj"]), scope=COMPANY_SCOPE), company["id"], company["id"])

    for employee in sorted(employees, key=lambda d: d.get("createdAt") or ""):
        if employee.get("login"):
            add(IdentityKey("login", employee["login"]), employee["id"], employee["companyId"])
        if employee.get("cpf"):
            add(IdentityKey("cpf", only_digits(employee["cpf"])), employee["id"], employee["companyId"])

    return list(planned.values()), duplicates


async def rebuild(store: DocumentStore, *, dry_run: bool = False) -> RebuildReport:
    companies = await store.query(COMPANIES, {})
    employees = await store.query(ORGANIZATION, {"type": "employee"})
    logger.info("Found %d companies and %d employees", len(companies), len(employees))

    planned, duplicates = plan_keys(employees, companies)
    report = RebuildReport(duplicates=duplicates)

    for item in planned:
        current = await store.read(IDENTITY, item.key.id, partition_key=item.key.scope)
        if current:
            report.existing += 1
            if current.get("ownerId") != item.owner_id:
                report.duplicates.append(
                    f"{item.key.kind} '{item.key.value}' indexed for {current.get('ownerId')} but also used by {item.owner_id}"
                )
            continue

        logger.debug("Missing key %s (owner %s)", item.key.id, item.owner_id)
        if not dry_run:
            await store.create(IDENTITY, item.key.document(owner_id=item.owner_id, company_id=item.company_id))
        report.created += 1

    return report


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recreate missing identity keys from employee and company documents",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report missing keys without creating them",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = Settings()
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    store = DocumentStore()
    await store.initialize(settings)
    if not store.initialized:
        logger.error("Cosmos DB is not configured (COSMOS_DB_ENDPOINT / COSMOS_DB_KEY)")
        return 1

    try:
        report = await rebuild(store, dry_run=args.dry_run)
    finally:
        await store.close()

    logger.info("=" * 50)
    logger.info("Keys created: %d", report.created)
    logger.info("Keys already present: %d", report.existing)
    for duplicate in report.duplicates:
        logger.warning("Duplicate: %s", duplicate)
    if args.dry_run:
        logger.info("[DRY RUN] No keys were actually created.")
    return 2 if report.duplicates else 0


def main() -> None:
    args = parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
