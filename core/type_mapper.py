import re
from enum import Enum
from typing import Dict, Optional

class PortableKind(Enum):
    INTEGER = "INTEGER"
    TEXT = "TEXT"
    BLOB = "BLOB"
    DOUBLE = "DOUBLE"
    DECIMAL = "DECIMAL"  # With precision/scale
    DATE = "DATE"
    BOOLEAN = "BOOLEAN"
    UUID = "UUID"

class PortableType:
    def __init__(self, kind: PortableKind, length: Optional[int] = None,
                 precision: Optional[int] = None, scale: Optional[int] = None):
        self.kind = kind
        self.length = length
        self.precision = precision
        self.scale = scale

    def __eq__(self, other):
        if not isinstance(other, PortableType):
            return NotImplemented
        return (self.kind, self.length, self.precision, self.scale) == \
               (other.kind, other.length, other.precision, other.scale)

    def __hash__(self):
        return hash((self.kind, self.length, self.precision, self.scale))

    def __repr__(self):
        return f"PortableType({self.kind.value}, l={self.length}, p={self.precision}, s={self.scale})"

_LENGTH_RE = re.compile(r'\((\d+)\)')
_PRECISION_SCALE_RE = re.compile(r'\((\d+)\s*,\s*(\d+)\)')

class TypeMapper:
    # Portable type -> PostgreSQL DDL type
    TO_POSTGRES: Dict[PortableKind, str] = {
        PortableKind.INTEGER: 'INTEGER',
        PortableKind.TEXT: 'TEXT',
        PortableKind.BLOB: 'BYTEA',
        PortableKind.DOUBLE: 'DOUBLE PRECISION',
        PortableKind.DECIMAL: 'DECIMAL',
        PortableKind.DATE: 'TIMESTAMP WITH TIME ZONE',
        PortableKind.BOOLEAN: 'BOOLEAN',
        PortableKind.UUID: 'UUID',
    }

    @staticmethod
    def map_source_type(raw_type: Optional[str]) -> PortableType:
        """Map a declared SQLite column type to a portable type.

        Follows SQLite's affinity order (INT first, then text, blob, real,
        numeric) so 'POINT' or 'INTERVAL' style names land on INTEGER just as
        SQLite itself would store them. Never raises; unknown names map to TEXT.
        """
        type_str = str(raw_type or '').strip().upper()

        if 'INT' in type_str:
            return PortableType(PortableKind.INTEGER)
        if any(tok in type_str for tok in ('CHAR', 'CLOB', 'TEXT')):
            return PortableType(PortableKind.TEXT, length=TypeMapper._parse_length(type_str))
        if 'BLOB' in type_str:
            return PortableType(PortableKind.BLOB)
        if any(tok in type_str for tok in ('REAL', 'FLOA', 'DOUB')):
            return PortableType(PortableKind.DOUBLE)
        if 'DEC' in type_str or 'NUM' in type_str:
            match = _PRECISION_SCALE_RE.search(type_str)
            if match:
                return PortableType(PortableKind.DECIMAL, precision=int(match.group(1)), scale=int(match.group(2)))
            return PortableType(PortableKind.DECIMAL)
        if 'DATE' in type_str or 'TIME' in type_str:
            return PortableType(PortableKind.DATE)
        if type_str == 'BOOLEAN':
            return PortableType(PortableKind.BOOLEAN)
        if type_str == 'UUID':
            return PortableType(PortableKind.UUID)

        return PortableType(PortableKind.TEXT)

    @staticmethod
    def to_postgres(portable: PortableType, auto_increment: bool = False) -> str:
        """Render the PostgreSQL column type for a portable type"""
        if portable.kind == PortableKind.INTEGER and auto_increment:
            return 'SERIAL'
        if portable.kind == PortableKind.TEXT and portable.length:
            return f"VARCHAR({portable.length})"
        if portable.kind == PortableKind.DECIMAL and portable.precision is not None:
            return f"DECIMAL({portable.precision},{portable.scale})"
        return TypeMapper.TO_POSTGRES[portable.kind]

    @staticmethod
    def _parse_length(type_str: str) -> Optional[int]:
        """Parse 'VARCHAR(255)' -> 255"""
        match = _LENGTH_RE.search(type_str)
        return int(match.group(1)) if match else None
