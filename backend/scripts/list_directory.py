#!/usr/bin/env python3
"""List the staff directory from the command line.

Run from the backend/ directory with DIRECTORY_API_URL set:

    python3 scripts/list_directory.py [--status "Available"] [--range "This Week"] [--search python] [--verbose]

Fetches every employee from the remote store, applies the same search,
status and range filters as the web directory, and prints one line per card.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from staffdir.core.config import Settings  # noqa: E402
from staffdir.models.employee import DirectoryQuery, EmployeeCard, QueryRange  # noqa: E402
from staffdir.services.directory_client import DirectoryClient, DirectoryUnavailableError  # noqa: E402
from staffdir.services.employee_service import EmployeeService  # noqa: E402

logger = logging.getLogger(__name__)


def format_card(card: EmployeeCard) -> str:
    parts = [card.id, card.name or "Unknown", card.availability or "-"]

    if card.from_date_display or card.to_date_display:
        parts.append(f"{card.from_date_display or '—'} → {card.to_date_display or '—'}")
    if card.hours_available is not None:
        parts.append(f"{card.hours_available:g}h/day")
    if card.current_skills:
        parts.append(", ".join(card.current_skills))
    if card.updated.label:
        parts.append(f"{card.updated.label} [{card.updated.severity.value}]")

    return " | ".join(parts)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="List employees from the staff directory",
    )
    parser.add_argument(
        "--status",
        default="All",
        help='Exact availability label to filter on (default: "All")',
    )
    parser.add_argument(
        "--range",
        dest="query_range",
        choices=[r.value for r in QueryRange],
        default=QueryRange.ANY.value,
        help='Only show employees available in this range (default: "Any")',
    )
    parser.add_argument(
        "--search",
        default="",
        help="Case-insensitive match on name, skills, location or role",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


async def list_directory(args: argparse.Namespace) -> int:
    settings = Settings()
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    client = DirectoryClient()
    await client.initialize(settings)
    if not client.initialized:
        logger.error("DIRECTORY_API_URL is not set. Exiting.")
        return 1

    service = EmployeeService(client)
    query = DirectoryQuery(search=args.search, status=args.status, range=QueryRange(args.query_range))
    try:
        cards = await service.get_employees(query)
    except DirectoryUnavailableError as e:
        logger.error("%s", e)
        return 1
    finally:
        await client.close()

    for card in cards:
        print(format_card(card))

    logger.info("%d employee(s) shown", len(cards))
    return 0


def main() -> None:
    args = parse_args()
    sys.exit(asyncio.run(list_directory(args)))


if __name__ == "__main__":
    main()
