#!/usr/bin/env python3
"""
relmigrate SQLite Source Adapter

Read-only access to the SQLite database being migrated:
- Catalog: tables, columns, foreign keys, indexes (PRAGMA based)
- Data: row counts and LIMIT/OFFSET pages

The file is opened with mode=ro so the source can never be modified.

Usage:
    source = SQLiteSource('./source.sqlite')
    columns = source.get_columns('users')
    page = source.fetch_page('users', limit=5000, offset=0)
"""

import sqlite3
import logging
from pathlib import Path
from typing import Dict, List, Any

from core.errors import ConnectionError, SchemaError
from core.identifiers import quote_ident

logger = logging.getLogger(__name__)


class SQLiteSource:
    """SQLite source connector (read-only)."""

    def __init__(self, database: str, timeout: float = 30.0):
        """
        Open the source database.

        Args:
            database: Path to the SQLite database file
            timeout: Busy timeout in seconds
        """
        self.database = database
        self.timeout = timeout
        self._connection = None
        self._connect()
        logger.info(f"SQLite source opened read-only: {database}")

    def _connect(self) -> None:
        """Establish a read-only connection."""
        path = Path(self.database)
        if not path.is_file():
            raise ConnectionError(f"SQLite source not found: {self.database}", {'path': self.database})

        try:
            self._connection = sqlite3.connect(
                f"{path.resolve().as_uri()}?mode=ro",
                uri=True,
                timeout=self.timeout
            )
            self._connection.row_factory = sqlite3.Row
            # Touch the catalog so a corrupt or non-SQLite file fails here
            self._connection.execute("SELECT count(*) FROM sqlite_master").fetchone()
        except sqlite3.Error as e:
            raise ConnectionError(f"Failed to open SQLite source {self.database}: {e}", {'path': self.database}) from e

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("SQLite source closed")

    def _query(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        if self._connection is None:
            raise ConnectionError("SQLite source is closed")
        try:
            cursor = self._connection.execute(sql, params)
            return [dict(row) for row in cursor.fetchall()]
        except sqlite3.OperationalError as e:
            raise ConnectionError(f"SQLite query failed: {e}", {'sql': sql}) from e

    # Catalog

    def get_tables(self) -> List[str]:
        """User tables, sorted by name."""
        rows = self._query(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [row['name'] for row in rows]

    def table_exists(self, table_name: str) -> bool:
        rows = self._query(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table_name,)
        )
        return bool(rows)

    def _require_table(self, table_name: str):
        if not self.table_exists(table_name):
            raise SchemaError(f"Table not found in source: {table_name}", table=table_name)

    def get_columns(self, table_name: str) -> List[Dict[str, Any]]:
        """PRAGMA table_info rows: cid, name, type, notnull, dflt_value, pk"""
        self._require_table(table_name)
        return self._query(f"PRAGMA table_info({quote_ident(table_name)})")

    def get_foreign_keys(self, table_name: str) -> List[Dict[str, Any]]:
        """PRAGMA foreign_key_list rows: id, seq, table, from, to, on_update, on_delete, match"""
        self._require_table(table_name)
        return self._query(f"PRAGMA foreign_key_list({quote_ident(table_name)})")

    def get_indexes(self, table_name: str) -> List[Dict[str, Any]]:
        """Indexes with their ordered columns and uniqueness."""
        self._require_table(table_name)
        indexes = []
        for idx in self._query(f"PRAGMA index_list({quote_ident(table_name)})"):
            details = self._query(f"PRAGMA index_info({quote_ident(idx['name'])})")
            indexes.append({
                'name': idx['name'],
                'unique': bool(idx['unique']),
                'origin': idx.get('origin'),
                'columns': [d['name'] for d in sorted(details, key=lambda d: d['seqno'])]
            })
        return indexes

    # Data

    def count_rows(self, table_name: str) -> int:
        rows = self._query(f"SELECT COUNT(*) AS cnt FROM {quote_ident(table_name)}")
        return int(rows[0]['cnt']) if rows else 0

    def fetch_page(self, table_name: str, limit: int, offset: int) -> List[Dict[str, Any]]:
        """One page of rows in the source's native order."""
        return self._query(
            f"SELECT * FROM {quote_ident(table_name)} LIMIT ? OFFSET ?",
            (limit, offset)
        )
