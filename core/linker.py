"""
Constraint Linker

Recreates source foreign keys as named, deferred PostgreSQL constraints.
Runs only after every table's data has been copied, and only when the
operator opted in.
"""

import logging
from typing import Iterable, List, Optional

from core.errors import DDLError
from core.identifiers import mask_credentials, qualified_name, quote_ident
from core.schema_ir import ForeignKeyGroup, TableDescriptor

logger = logging.getLogger(__name__)

_KEPT_ACTIONS = ('CASCADE', 'SET NULL', 'SET DEFAULT')

def normalize_action(action: Optional[str]) -> str:
    """Collapse RESTRICT to NO ACTION; missing or unknown actions become NO ACTION.

    PostgreSQL checks RESTRICT at each statement even when the constraint
    is deferred, so it would defeat INITIALLY DEFERRED.
    """
    text = ' '.join(str(action or '').upper().split())
    if text in _KEPT_ACTIONS:
        return text
    return 'NO ACTION'

def constraint_name(table_name: str, constraint_id: int) -> str:
    return f"{table_name}_fk_{constraint_id}"

class ConstraintLinker:
    def __init__(self, destination, schema: str = 'public'):
        self.destination = destination
        self.schema = schema

    def foreign_key_sql(self, table: TableDescriptor, fk: ForeignKeyGroup) -> str:
        cols = ", ".join(quote_ident(c) for c in fk.columns)
        references = qualified_name(self.schema, fk.ref_table)
        # SQLite leaves 'to' empty when the parent's primary key is implied
        if not fk.references_primary_key:
            references += " (" + ", ".join(quote_ident(c) for c in fk.ref_columns) + ")"

        return (
            f"ALTER TABLE {qualified_name(self.schema, table.name)} "
            f"ADD CONSTRAINT {quote_ident(constraint_name(table.name, fk.constraint_id))} "
            f"FOREIGN KEY ({cols}) REFERENCES {references} "
            f"ON UPDATE {normalize_action(fk.on_update)} "
            f"ON DELETE {normalize_action(fk.on_delete)} "
            f"DEFERRABLE INITIALLY DEFERRED"
        )

    def link_table(self, table: TableDescriptor, migrated: Optional[Iterable[str]] = None,
                   context=None) -> List[str]:
        """Add every foreign key of one table. Returns the executed statements."""
        migrated = set(migrated) if migrated is not None else None
        statements = []

        for fk in table.foreign_keys:
            if migrated is not None and fk.ref_table not in migrated:
                message = (f"Skipping foreign key {constraint_name(table.name, fk.constraint_id)}: "
                           f"referenced table {fk.ref_table} is not migrated")
                logger.warning(message)
                if context is not None:
                    context.warn(message)
                continue

            sql = self.foreign_key_sql(table, fk)
            try:
                self.destination.execute(sql)
            except Exception as e:
                raise DDLError(
                    f"Destination rejected foreign key on {table.name}: {mask_credentials(e)}",
                    table=table.name,
                    statement=sql
                ) from e
            statements.append(sql)

        if statements:
            logger.info(f"Linked {len(statements)} foreign key(s) on {table.name}")
        return statements
