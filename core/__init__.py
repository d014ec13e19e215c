#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
relmigrate core package
Exports the migration engine components for clean imports
"""

from core.errors import (
    ErrorCode,
    MigrationError,
    ConfigError,
    ConnectionError,
    SchemaError,
    DDLError,
    BatchInsertError,
    RowInsertError,
)
from core.type_mapper import PortableKind, PortableType, TypeMapper
from core.schema_ir import (
    ColumnDescriptor,
    ForeignKeyGroup,
    IndexDescriptor,
    TableDescriptor,
    TableReport,
    MigrationContext,
)
from core.defaults import DefaultKind, DefaultValue, parse_default, render_default
from core.classifier import DestinationTypeClass, DestinationTypeClassifier, classify_native_type
from core.sanitizer import RowSanitizer, sanitize_value
from core.introspector import SchemaIntrospector
from core.ddl import DDLSynthesizer
from core.linker import ConstraintLinker, normalize_action
from core.copier import BatchCopier, diagnose_page
from core.migrator import Migrator

__version__ = "1.0.0"

__all__ = [
    'ErrorCode', 'MigrationError', 'ConfigError', 'ConnectionError', 'SchemaError',
    'DDLError', 'BatchInsertError', 'RowInsertError',
    'PortableKind', 'PortableType', 'TypeMapper',
    'ColumnDescriptor', 'ForeignKeyGroup', 'IndexDescriptor', 'TableDescriptor',
    'TableReport', 'MigrationContext',
    'DefaultKind', 'DefaultValue', 'parse_default', 'render_default',
    'DestinationTypeClass', 'DestinationTypeClassifier', 'classify_native_type',
    'RowSanitizer', 'sanitize_value',
    'SchemaIntrospector', 'DDLSynthesizer', 'ConstraintLinker', 'normalize_action',
    'BatchCopier', 'diagnose_page', 'Migrator',
]
