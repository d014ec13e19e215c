"""
Schema Introspector

Turns the source catalog (PRAGMA rows) into immutable TableDescriptors.
Never writes to the source.
"""

import logging
from collections import OrderedDict
from typing import Iterable, List, Optional

from core.linker import normalize_action
from core.schema_ir import ColumnDescriptor, ForeignKeyGroup, IndexDescriptor, TableDescriptor

logger = logging.getLogger(__name__)

INTERNAL_TABLE_PREFIX = 'sqlite_'

class SchemaIntrospector:
    def __init__(self, source):
        self.source = source

    def list_tables(self, include: Optional[Iterable[str]] = None,
                    exclude: Optional[Iterable[str]] = None) -> List[str]:
        """User tables after include/exclude filtering"""
        include = [name for name in (include or []) if name]
        exclude = set(name for name in (exclude or []) if name)

        tables = []
        for name in self.source.get_tables():
            if name.startswith(INTERNAL_TABLE_PREFIX):
                continue
            if include and name not in include:
                continue
            if name in exclude:
                continue
            tables.append(name)

        missing = [name for name in include if name not in tables and name not in exclude]
        for name in missing:
            logger.warning(f"Included table not found in source: {name}")

        return sorted(tables)

    def describe_table(self, table_name: str) -> TableDescriptor:
        """Describe one table. Raises SchemaError if it does not exist."""
        columns = tuple(
            ColumnDescriptor(
                name=row['name'],
                raw_type=row['type'] or '',
                nullable=row['notnull'] == 0,
                default=row['dflt_value'],
                primary_key=row['pk'] > 0,
                pk_position=row['pk']
            )
            for row in self.source.get_columns(table_name)
        )

        table = TableDescriptor(
            name=table_name,
            columns=columns,
            foreign_keys=self._foreign_keys(table_name),
            indexes=self._indexes(table_name)
        )
        logger.debug(
            f"Introspected {table_name}: {len(table.columns)} columns, "
            f"{len(table.foreign_keys)} foreign keys, {len(table.indexes)} indexes"
        )
        return table

    def _foreign_keys(self, table_name: str) -> tuple:
        groups = OrderedDict()
        for row in sorted(self.source.get_foreign_keys(table_name), key=lambda r: (r['id'], r['seq'])):
            groups.setdefault(row['id'], []).append(row)

        return tuple(
            ForeignKeyGroup(
                constraint_id=fk_id,
                ref_table=parts[0]['table'],
                columns=tuple(p['from'] for p in parts),
                ref_columns=tuple(p['to'] for p in parts),
                on_update=normalize_action(parts[0]['on_update']),
                on_delete=normalize_action(parts[0]['on_delete'])
            )
            for fk_id, parts in groups.items()
        )

    def _indexes(self, table_name: str) -> tuple:
        # The primary key's own index comes back with the table's PRIMARY KEY clause
        return tuple(
            IndexDescriptor(name=idx['name'], columns=tuple(idx['columns']), unique=bool(idx['unique']))
            for idx in self.source.get_indexes(table_name)
            if idx.get('origin') != 'pk'
        )
