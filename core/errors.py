#!/usr/bin/env python3
"""
relmigrate Error Hierarchy
Canonical exception classes for the migration engine.

Data never raises: type mapping and sanitization are total. Only
configuration, connectivity, schema and DDL/insert rejections do.
"""

from enum import Enum

class ErrorCode(Enum):
    UNKNOWN = "UNKNOWN_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SCHEMA_ERROR = "SCHEMA_ERROR"
    DDL_ERROR = "DDL_ERROR"
    BATCH_INSERT_ERROR = "BATCH_INSERT_ERROR"
    ROW_INSERT_ERROR = "ROW_INSERT_ERROR"

class MigrationError(Exception):
    """Base class for all migration exceptions"""
    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

class ConfigError(MigrationError):
    """Raised when the run configuration is invalid"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, ErrorCode.CONFIG_ERROR, details)

class ConnectionError(MigrationError):
    """Raised when the source or destination is unreachable"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, ErrorCode.CONNECTION_ERROR, details)

class SchemaError(MigrationError):
    """Raised when introspection finds an inconsistency (e.g. missing table)"""
    def __init__(self, message: str, table: str = None):
        super().__init__(message, ErrorCode.SCHEMA_ERROR, {'table': table})

class DDLError(MigrationError):
    """Raised when the destination rejects a table, index or constraint"""
    def __init__(self, message: str, table: str = None, statement: str = None):
        super().__init__(message, ErrorCode.DDL_ERROR, {'table': table, 'statement': statement})

class BatchInsertError(MigrationError):
    """Raised when the destination rejects a page of rows"""
    def __init__(self, message: str, table: str = None, offset: int = None,
                 code: ErrorCode = ErrorCode.BATCH_INSERT_ERROR, details: dict = None):
        merged = {'table': table, 'offset': offset}
        merged.update(details or {})
        super().__init__(message, code, merged)

class RowInsertError(BatchInsertError):
    """Raised by the row-level diagnostic pass once the failing row is found"""
    def __init__(self, message: str, table: str = None, row_index: int = None, suspects: dict = None):
        super().__init__(
            message,
            table=table,
            offset=row_index,
            code=ErrorCode.ROW_INSERT_ERROR,
            details={'row_index': row_index, 'suspects': suspects or {}}
        )
