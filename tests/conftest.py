#!/usr/bin/env python3
"""
relmigrate Test Configuration - PyTest Configuration and Fixtures

Provides SQLite source databases built in a temporary directory and an
in-memory stand-in for the PostgreSQL destination that records every
statement and inserted row.
"""

import pytest
import tempfile
import os
import sys
import sqlite3
from typing import Any, Dict, List, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from extensions.plugins.sqlite_adapter import SQLiteSource

class FakeDestination:
    """Records what the engine sends to PostgreSQL.

    column_types: {table: {column: data_type}} as information_schema would report
    fail_insert: predicate over the rows of one bulk_insert call; True rejects the call
    fail_statement: substring; any executed statement containing it is rejected
    """

    def __init__(self, column_types: Optional[Dict[str, Dict[str, str]]] = None,
                 fail_insert=None, fail_statement: Optional[str] = None):
        self.column_types = column_types or {}
        self.fail_insert = fail_insert
        self.fail_statement = fail_statement
        self.statements: List[str] = []
        self.inserts: List[Dict[str, Any]] = []
        self.closed = False

    def execute(self, sql, params=None):
        if self.fail_statement and self.fail_statement in sql:
            raise Exception(f"rejected: {sql}")
        self.statements.append(sql)
        return []

    def describe_columns(self, schema, table):
        return dict(self.column_types.get(table, {}))

    def bulk_insert(self, schema, table, columns, rows):
        rows = [tuple(row) for row in rows]
        if self.fail_insert is not None and self.fail_insert(rows):
            raise Exception(f"insert into {table} rejected")
        self.inserts.append({'schema': schema, 'table': table, 'columns': list(columns), 'rows': rows})
        return len(rows)

    def rows_for(self, table) -> List[tuple]:
        return [row for call in self.inserts if call['table'] == table for row in call['rows']]

    def close(self):
        self.closed = True

@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir

@pytest.fixture
def make_sqlite(temp_dir):
    """Factory: build a SQLite file from a script and open it as a read-only source"""
    opened = []

    def _make(script: str, name: str = "source.sqlite") -> SQLiteSource:
        path = os.path.join(temp_dir, name)
        conn = sqlite3.connect(path)
        conn.executescript(script)
        conn.commit()
        conn.close()
        source = SQLiteSource(path)
        opened.append(source)
        return source

    yield _make

    for source in opened:
        source.close()

@pytest.fixture
def shop_source(make_sqlite):
    """Three related tables covering keys, defaults, indexes and foreign keys"""
    return make_sqlite("""
        CREATE TABLE customers (
            id INTEGER PRIMARY KEY,
            email VARCHAR(120) NOT NULL,
            name TEXT DEFAULT 'anonymous',
            vip BOOLEAN DEFAULT 0,
            joined DATETIME DEFAULT CURRENT_TIMESTAMP
        );
        CREATE UNIQUE INDEX idx_customers_email ON customers (email);
        CREATE INDEX idx_customers_name ON customers (name);

        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            customer_id INTEGER NOT NULL REFERENCES customers (id) ON DELETE RESTRICT,
            total DECIMAL(10,2),
            placed INTEGER
        );

        CREATE TABLE order_lines (
            order_id INTEGER,
            line_no INTEGER,
            sku TEXT,
            qty INTEGER,
            PRIMARY KEY (order_id, line_no),
            FOREIGN KEY (order_id) REFERENCES orders (id) ON DELETE CASCADE
        );

        INSERT INTO customers (id, email, name, vip) VALUES (1, 'a@example.com', 'Alice', 1);
        INSERT INTO customers (id, email, name, vip) VALUES (2, 'b@example.com', 'Bob', 'no');
        INSERT INTO orders VALUES (10, 1, '19.990', 1700000000);
        INSERT INTO orders VALUES (11, 2, '', '');
        INSERT INTO order_lines VALUES (10, 1, 'X-1', 2);
        INSERT INTO order_lines VALUES (10, 2, 'X-2', '');
    """)

@pytest.fixture
def shop_types():
    """Column types PostgreSQL reports for the shop tables"""
    return {
        'customers': {
            'id': 'integer', 'email': 'character varying', 'name': 'text',
            'vip': 'boolean', 'joined': 'timestamp with time zone',
        },
        'orders': {
            'id': 'integer', 'customer_id': 'integer', 'total': 'numeric', 'placed': 'integer',
        },
        'order_lines': {
            'order_id': 'integer', 'line_no': 'integer', 'sku': 'text', 'qty': 'integer',
        },
    }

@pytest.fixture
def make_destination():
    """Factory for FakeDestination instances"""
    return FakeDestination
