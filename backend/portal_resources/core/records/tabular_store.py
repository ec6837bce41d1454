"""
Tabular store contract and in-process backend.

A tabular store is a set of named tables (spreadsheet tabs), each an ordered
list of rows. Row indexes are 0-based positions in the list returned by
``read_all_rows``; row 0 is the header on every table this package uses.
The store has no unique index, so callers locate records by scanning.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ..errors import NotFoundError

logger = logging.getLogger("portal_resources.tabular_store")

Row = List[Any]


class TabularStore(Protocol):
    """Operations the record layer needs from a tabular backend."""

    def read_all_rows(self, table: str) -> List[Row]:
        """Return every row of ``table`` in order, header included."""
        ...

    def append_row(self, table: str, row: Sequence[Any]) -> None:
        """Append ``row`` after the last row of ``table``."""
        ...

    def write_row(self, table: str, row_index: int, row: Sequence[Any]) -> None:
        """Overwrite the row at ``row_index`` starting from the first column."""
        ...

    def write_cell(self, table: str, row_index: int, col_index: int, value: Any) -> None:
        """Overwrite a single cell."""
        ...


class InMemoryTabularStore:
    """
    Dictionary-backed tabular store.

    Used by the test suite and by ``STORAGE_BACKEND=memory`` for local
    development. Like the spreadsheet it stands in for, it offers no
    locking: concurrent writers race and the last write wins.

    Storage Structure:
        - _tables: Dict[str, List[Row]] - table name -> rows (row 0 = header)
    """

    def __init__(self, tables: Optional[Dict[str, List[Row]]] = None):
        self._tables: Dict[str, List[Row]] = {}
        for name, rows in (tables or {}).items():
            self._tables[name] = [list(r) for r in rows]

    def create_table(self, table: str, header: Sequence[Any]) -> None:
        """Create ``table`` if missing and give it a header row when it is empty."""
        rows = self._tables.setdefault(table, [])
        if not rows:
            rows.append(list(header))
            logger.debug(f"Created table {table!r}")

    def has_table(self, table: str) -> bool:
        return table in self._tables

    def _rows(self, table: str) -> List[Row]:
        try:
            return self._tables[table]
        except KeyError:
            raise NotFoundError(f"{table} sheet not found") from None

    def read_all_rows(self, table: str) -> List[Row]:
        return copy.deepcopy(self._rows(table))

    def append_row(self, table: str, row: Sequence[Any]) -> None:
        self._rows(table).append(list(row))

    def write_row(self, table: str, row_index: int, row: Sequence[Any]) -> None:
        rows = self._rows(table)
        if row_index >= len(rows):
            rows.extend([] for _ in range(row_index - len(rows) + 1))
        existing = rows[row_index]
        updated = list(row) + existing[len(row):]
        rows[row_index] = updated

    def write_cell(self, table: str, row_index: int, col_index: int, value: Any) -> None:
        rows = self._rows(table)
        if row_index >= len(rows):
            rows.extend([] for _ in range(row_index - len(rows) + 1))
        row = rows[row_index]
        if col_index >= len(row):
            row.extend([""] * (col_index - len(row) + 1))
        row[col_index] = value
