#!/usr/bin/env python3
# backend/portal_resources/core/commands/init_sheets.py
"""
Spreadsheet initialization command for the Portal Resources API.

Makes sure the resources tab and the term (taxonomy) tab exist and carry
their header rows. Tabs that already hold data are left untouched, so the
command is safe to run repeatedly.

Usage:
    # Create missing tabs and headers
    python -m portal_resources.core.commands.init_sheets

    # Only report what is missing
    python -m portal_resources.core.commands.init_sheets --check

Environment Variables Required:
    - SPREADSHEET_ID: Target spreadsheet
    - GOOGLE_SERVICE_ACCOUNT_FILE or GOOGLE_ACCESS_TOKEN: Credentials
    (or the equivalent google/resources sections of config.yml)

Note:
    - The service account needs edit access to the spreadsheet
    - Header names are the storage contract; existing headers are not rewritten
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence, Tuple

from ...dependencies import get_tabular_store, resource_setting
from ..records.row_schema import COLUMNS
from ..taxonomy.taxonomy_index import TERM_HEADER

logger = logging.getLogger("portal_resources.commands.init_sheets")


def required_tables() -> List[Tuple[str, Sequence[str]]]:
    return [
        (resource_setting("resources_sheet_name"), COLUMNS),
        (resource_setting("term_sheet_name"), TERM_HEADER),
    ]


def init_sheets(store=None, check_only: bool = False) -> int:
    """
    Create missing tabs and write header rows into empty ones.

    Args:
        store: Tabular store offering ``has_table``/``create_table``
            (defaults to the configured backend)
        check_only: Report problems without changing anything

    Returns:
        0 on success, 1 on failure (or, with ``check_only``, when a tab is missing)
    """
    if store is None:
        try:
            store = get_tabular_store()
        except Exception as e:
            logger.error(f"ERROR: Failed to initialize the tabular store: {e}")
            return 1

    missing = 0
    for table, header in required_tables():
        try:
            exists = store.has_table(table)
            if check_only:
                if exists:
                    logger.info(f"✓ Sheet '{table}' exists")
                else:
                    logger.error(f"Sheet '{table}' is missing")
                    missing += 1
                continue

            store.create_table(table, header)
            logger.info(f"✓ Sheet '{table}' ready ({len(header)} columns)")
        except Exception as e:
            logger.error(f"ERROR: Failed to initialize sheet '{table}': {e}")
            return 1

    return 1 if missing else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the command."""
    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

    parser = argparse.ArgumentParser(
        description="Initialize the Portal Resources spreadsheet tabs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report missing tabs; do not create anything",
    )
    args = parser.parse_args(argv)

    try:
        return init_sheets(check_only=args.check)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
