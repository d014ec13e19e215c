from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from core.errors import MigrationError

@dataclass(frozen=True)
class ColumnDescriptor:
    """Column definition as declared in the source"""
    name: str
    raw_type: str
    nullable: bool = True
    default: Optional[str] = None  # Raw, untyped literal
    primary_key: bool = False
    pk_position: int = 0  # 1-based position within the key, 0 if not part of it

@dataclass(frozen=True)
class ForeignKeyGroup:
    """All column pairs of one source foreign key constraint"""
    constraint_id: int
    ref_table: str
    columns: Tuple[str, ...]
    ref_columns: Tuple[Optional[str], ...]  # None means the parent's primary key
    on_update: str = "NO ACTION"
    on_delete: str = "NO ACTION"

    @property
    def references_primary_key(self) -> bool:
        return any(col is None for col in self.ref_columns)

@dataclass(frozen=True)
class IndexDescriptor:
    name: str
    columns: Tuple[Optional[str], ...]  # None for expression columns
    unique: bool = False

    @property
    def is_expression(self) -> bool:
        return any(col is None for col in self.columns)

@dataclass(frozen=True)
class TableDescriptor:
    """Table definition, immutable after introspection"""
    name: str
    columns: Tuple[ColumnDescriptor, ...]
    foreign_keys: Tuple[ForeignKeyGroup, ...] = ()
    indexes: Tuple[IndexDescriptor, ...] = ()

    @property
    def column_names(self) -> List[str]:
        return [col.name for col in self.columns]

    @property
    def primary_key(self) -> List[str]:
        pk_cols = [col for col in self.columns if col.primary_key]
        return [col.name for col in sorted(pk_cols, key=lambda c: c.pk_position)]

    @property
    def unique_indexes(self) -> List[IndexDescriptor]:
        return [idx for idx in self.indexes if idx.unique]

    def get_column(self, name: str) -> Optional[ColumnDescriptor]:
        return next((col for col in self.columns if col.name == name), None)

@dataclass
class TableReport:
    name: str
    columns: int
    rows: int = 0
    statements: List[str] = field(default_factory=list)

@dataclass
class MigrationContext:
    """Per-run state handed from the create phase to the copy phase.

    Owns the destination type class map of every table. Entries are written
    once while tables are created and only read while data is copied.
    """
    tables: Dict[str, TableDescriptor] = field(default_factory=dict)
    type_classes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    reports: Dict[str, TableReport] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    dry_run: bool = False

    def add_table(self, table: TableDescriptor):
        self.tables[table.name] = table
        self.reports[table.name] = TableReport(name=table.name, columns=len(table.columns))

    def set_type_classes(self, table_name: str, classes: Dict[str, Any]):
        self.type_classes[table_name] = dict(classes)

    def get_type_classes(self, table_name: str) -> Dict[str, Any]:
        if table_name not in self.type_classes:
            raise MigrationError(f"Destination types for {table_name} were never classified")
        return self.type_classes[table_name]

    def report_for(self, table_name: str) -> TableReport:
        if table_name not in self.reports:
            self.reports[table_name] = TableReport(name=table_name, columns=0)
        return self.reports[table_name]

    def warn(self, message: str):
        if message not in self.warnings:
            self.warnings.append(message)

    @property
    def total_rows(self) -> int:
        return sum(report.rows for report in self.reports.values())
