"""
Batch Copier

Streams one table from the source into the destination in bounded pages:
fetch (LIMIT/OFFSET) -> sanitize -> one multi-row INSERT. A rejected page
is fatal. The optional row-level pass only narrows down which row and
which values the destination refused; it never completes the copy.
"""

import logging
from typing import Any, Dict, List, Sequence

from core.classifier import DestinationTypeClass
from core.errors import BatchInsertError, RowInsertError
from core.identifiers import mask_credentials
from core.sanitizer import RowSanitizer
from core.schema_ir import MigrationContext

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5000

# Classes whose empty/null cells are the usual cause of a rejected page
_SUSPECT_CLASSES = (DestinationTypeClass.INT, DestinationTypeClass.FLOAT, DestinationTypeClass.DECIMAL)

def find_suspects(row: Dict[str, Any], type_classes: Dict[str, DestinationTypeClass]) -> Dict[str, Any]:
    """Numeric/decimal columns of a row holding null or an empty string"""
    suspects = {}
    for col, type_class in type_classes.items():
        if type_class not in _SUSPECT_CLASSES:
            continue
        value = row.get(col)
        if value is None or (isinstance(value, str) and value.strip() == ''):
            suspects[col] = value
    return suspects

def diagnose_page(destination, schema: str, table_name: str, columns: Sequence[str],
                  rows: List[Dict[str, Any]], type_classes: Dict[str, DestinationTypeClass],
                  offset: int, page_error: Exception):
    """
    Insert a rejected page one row at a time to locate the failing row.

    Always raises: RowInsertError for the first row the destination refuses,
    or BatchInsertError when every row goes in individually.
    """
    logger.info(f"Row-level diagnosis for {table_name} at offset {offset} ({len(rows)} rows)")
    for index, row in enumerate(rows):
        try:
            destination.bulk_insert(schema, table_name, columns, [tuple(row.get(c) for c in columns)])
        except Exception as row_error:
            suspects = find_suspects(row, type_classes)
            row_index = offset + index
            logger.error(f"Row {row_index} of {table_name} rejected: {mask_credentials(row_error)}")
            if suspects:
                logger.error(f"Suspect values in row {row_index}: {suspects}")
            raise RowInsertError(
                f"Insert failed for {table_name} at row {row_index}: {mask_credentials(row_error)}",
                table=table_name,
                row_index=row_index,
                suspects=suspects
            ) from page_error

    raise BatchInsertError(
        f"Insert failed for {table_name} at offset {offset} "
        f"but every row succeeded individually: {mask_credentials(page_error)}",
        table=table_name,
        offset=offset
    ) from page_error

class BatchCopier:
    def __init__(self, source, destination, schema: str = 'public',
                 page_size: int = DEFAULT_PAGE_SIZE, row_fallback: bool = False,
                 empty_string_as_null: bool = True):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.source = source
        self.destination = destination
        self.schema = schema
        self.page_size = page_size
        self.row_fallback = row_fallback
        self.empty_string_as_null = empty_string_as_null

    def copy_table(self, table_name: str, context: MigrationContext) -> int:
        """Copy every row of one table. Returns the number of rows inserted."""
        total = self.source.count_rows(table_name)
        if total == 0:
            logger.info(f"{table_name}: no rows to copy")
            return 0

        type_classes = context.get_type_classes(table_name)
        sanitizer = RowSanitizer(type_classes, self.empty_string_as_null)
        logger.info(f"Copying {table_name}: {total} rows")

        copied = 0
        offset = 0
        while offset < total:
            page = self.source.fetch_page(table_name, self.page_size, offset)
            if not page:
                break

            rows = sanitizer.sanitize_rows(page)
            columns = list(rows[0].keys())
            values = [tuple(row.get(c) for c in columns) for row in rows]

            try:
                self.destination.bulk_insert(self.schema, table_name, columns, values)
            except Exception as e:
                logger.error(f"Batch insert failed for {table_name} at offset {offset}: {mask_credentials(e)}")
                if self.row_fallback:
                    diagnose_page(self.destination, self.schema, table_name, columns,
                                  rows, type_classes, offset, e)
                raise BatchInsertError(
                    f"Insert failed for {table_name} at offset {offset}: {mask_credentials(e)}",
                    table=table_name,
                    offset=offset
                ) from e

            copied += len(rows)
            offset += len(page)
            logger.info(f"  {table_name}: Inserted {copied} / {total}")

        context.report_for(table_name).rows = copied
        return copied
