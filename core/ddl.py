#!/usr/bin/env python3
"""
DDL Synthesizer
===============

Creates destination tables from introspected source tables:

    CREATE SCHEMA IF NOT EXISTS  (once per run)
    DROP TABLE IF EXISTS ... CASCADE
    CREATE TABLE ...
    CREATE UNIQUE INDEX ...      (unique source indexes only)

The destination is treated as disposable: an existing table of the same
name is dropped and recreated. Any rejection is fatal for the run and is
raised as DDLError; tables created earlier in the run are left in place.
"""

import logging
from typing import List, Optional

from core.defaults import parse_default, render_default
from core.errors import DDLError
from core.schema_ir import TableDescriptor
from core.type_mapper import PortableKind, TypeMapper
from core.identifiers import mask_credentials, qualified_name, quote_ident

logger = logging.getLogger(__name__)

class DDLSynthesizer:
    def __init__(self, destination, schema: str = 'public'):
        self.destination = destination
        self.schema = schema
        self._schema_ready = False

    def auto_increment_column(self, table: TableDescriptor) -> Optional[str]:
        """The single integer primary key column, if the table has one"""
        pk = table.primary_key
        if len(pk) != 1:
            return None
        column = table.get_column(pk[0])
        if TypeMapper.map_source_type(column.raw_type).kind == PortableKind.INTEGER:
            return column.name
        return None

    def column_definition(self, table: TableDescriptor, column) -> str:
        portable = TypeMapper.map_source_type(column.raw_type)
        auto_increment = column.name == self.auto_increment_column(table)

        col_def = f"{quote_ident(column.name)} {TypeMapper.to_postgres(portable, auto_increment)}"
        if not column.nullable:
            col_def += " NOT NULL"

        default = parse_default(column.default)
        # SERIAL owns its default
        if default is not None and not auto_increment:
            col_def += f" DEFAULT {render_default(default, portable)}"
        return col_def

    def create_table_sql(self, table: TableDescriptor) -> str:
        parts = [self.column_definition(table, col) for col in table.columns]
        if table.primary_key:
            pk_cols = ", ".join(quote_ident(c) for c in table.primary_key)
            parts.append(f"PRIMARY KEY ({pk_cols})")
        body = ",\n    ".join(parts)
        return f"CREATE TABLE {qualified_name(self.schema, table.name)} (\n    {body}\n)"

    def index_statements(self, table: TableDescriptor) -> List[str]:
        statements = []
        for idx in table.unique_indexes:
            if idx.is_expression:
                logger.warning(f"Skipping unique index {idx.name} on {table.name}: expression indexes are not recreated")
                continue
            cols = ", ".join(quote_ident(c) for c in idx.columns)
            statements.append(
                f"CREATE UNIQUE INDEX {quote_ident(idx.name)} "
                f"ON {qualified_name(self.schema, table.name)} ({cols})"
            )
        return statements

    def schema_statement(self) -> str:
        return f"CREATE SCHEMA IF NOT EXISTS {quote_ident(self.schema)}"

    def build_statements(self, table: TableDescriptor) -> List[str]:
        """All statements for one table, in execution order (schema creation excluded)"""
        return [
            f"DROP TABLE IF EXISTS {qualified_name(self.schema, table.name)} CASCADE",
            self.create_table_sql(table),
        ] + self.index_statements(table)

    def ensure_schema(self):
        if self._schema_ready:
            return
        self._execute(self.schema_statement(), table=None)
        self._schema_ready = True

    def create_table(self, table: TableDescriptor) -> List[str]:
        """Create (or recreate) the table and its unique indexes"""
        self.ensure_schema()
        statements = self.build_statements(table)
        for statement in statements:
            self._execute(statement, table=table.name)
        logger.info(f"Created table {self.schema}.{table.name} ({len(table.columns)} columns)")
        return statements

    def reset_sequence_sql(self, table: TableDescriptor) -> Optional[str]:
        column = self.auto_increment_column(table)
        if column is None:
            return None
        qt = qualified_name(self.schema, table.name)
        qc = quote_ident(column)
        seq_target = qt.replace("'", "''")
        col_literal = column.replace("'", "''")
        return (
            f"SELECT setval(pg_get_serial_sequence('{seq_target}', '{col_literal}'), "
            f"COALESCE(MAX({qc}), 0) + 1, false) FROM {qt}"
        )

    def reset_sequence(self, table: TableDescriptor) -> Optional[str]:
        """Advance an auto-increment key's sequence past the copied rows"""
        sql = self.reset_sequence_sql(table)
        if sql is None:
            return None
        self._execute(sql, table=table.name)
        logger.debug(f"Sequence reset for {table.name}")
        return sql

    def _execute(self, statement: str, table: Optional[str]):
        try:
            self.destination.execute(statement)
        except Exception as e:
            where = f" for {table}" if table else ""
            raise DDLError(
                f"Destination rejected DDL{where}: {mask_credentials(e)}",
                table=table,
                statement=statement
            ) from e
