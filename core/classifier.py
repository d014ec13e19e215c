"""
Destination Type Classifier

After a table is created, PostgreSQL is asked which types it actually
materialized, and each column is placed in the category that drives
sanitization. The requested DDL type is never consulted: the destination
may widen or rename what was asked for.
"""

import logging
from enum import Enum
from typing import Dict

from core.schema_ir import MigrationContext

logger = logging.getLogger(__name__)

class DestinationTypeClass(Enum):
    DATE = "date"
    BOOLEAN = "boolean"
    INT = "int"
    FLOAT = "float"
    DECIMAL = "decimal"
    OTHER = "other"

def classify_native_type(type_name: str) -> DestinationTypeClass:
    """Classify a destination-reported type name"""
    t = str(type_name or '').strip().lower()
    if 'timestamp' in t or t == 'date' or t.startswith('time'):
        return DestinationTypeClass.DATE
    if 'boolean' in t:
        return DestinationTypeClass.BOOLEAN
    if 'double' in t or 'real' in t or 'float' in t:
        return DestinationTypeClass.FLOAT
    # Before 'int' so a numeric type spelled with 'int' is not taken for an integer
    if 'numeric' in t or 'decimal' in t:
        return DestinationTypeClass.DECIMAL
    if 'int' in t:
        return DestinationTypeClass.INT
    return DestinationTypeClass.OTHER

class DestinationTypeClassifier:
    def __init__(self, destination, schema: str):
        self.destination = destination
        self.schema = schema

    def classify_table(self, table_name: str, context: MigrationContext) -> Dict[str, DestinationTypeClass]:
        """Read back the destination's columns, classify them and store the map in the context"""
        native_types = self.destination.describe_columns(self.schema, table_name)
        classes = {col: classify_native_type(native) for col, native in native_types.items()}
        context.set_type_classes(table_name, classes)

        summary = ', '.join(f"{col}={cls.value}" for col, cls in classes.items())
        logger.debug(f"Destination type classes for {table_name}: {summary}")
        return classes
