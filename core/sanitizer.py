#!/usr/bin/env python3
"""
Row Sanitizer
=============

Coerces raw SQLite cell values into values PostgreSQL accepts for the
column's destination type class. SQLite is loosely typed: an INTEGER
column happily stores '', 'N/A' or 1.5, and PostgreSQL rejects the whole
batch over one such cell. Every converter here is total: it returns a
typed value or None and never raises.

Empty-string policy: when enabled (the default) a string that is empty
after trimming becomes None before any per-class conversion runs. Columns
classified OTHER are passed through untouched, empty strings included.
"""

import math
import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from core.classifier import DestinationTypeClass

TRUE_WORDS = frozenset({'true', 't', 'yes', 'y', '1'})
FALSE_WORDS = frozenset({'false', 'f', 'no', 'n', '0'})

# Epoch heuristics for integer-encoded dates
EPOCH_MS_MIN = 1e12
EPOCH_SECONDS_MIN = 1e9
EPOCH_SECONDS_MAX = 5e12

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_INTEGER_RE = re.compile(r'^[+-]?\d+$', re.ASCII)
_NUMBER_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$', re.ASCII)
_DECIMAL_RE = re.compile(r'^-?\d+(\.\d+)?([eE][+-]?\d+)?$', re.ASCII)

_DATE_FORMATS = (
    '%Y/%m/%d',
    '%Y/%m/%d %H:%M:%S',
    '%m/%d/%Y',
    '%m/%d/%Y %H:%M:%S',
    '%d %b %Y',
    '%b %d %Y',
    '%a, %d %b %Y %H:%M:%S %z',
    '%a %b %d %Y %H:%M:%S',
)

Number = Union[int, float, Decimal]

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)

def _is_finite(number: Number) -> bool:
    if isinstance(number, Decimal):
        return number.is_finite()
    if isinstance(number, float):
        return math.isfinite(number)
    return True

def _parse_number(value: Any) -> Optional[Number]:
    if _is_number(value):
        return value
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER_RE.match(text):
            return int(text)
        if _NUMBER_RE.match(text):
            return float(text)
    return None

def empty_string_to_null(value: Any, enabled: bool = True) -> Any:
    if enabled and isinstance(value, str) and value.strip() == '':
        return None
    return value

def _from_epoch(number: Number) -> Optional[datetime]:
    if not _is_finite(number) or number == 0:
        return None
    try:
        if number >= EPOCH_MS_MIN:
            return _EPOCH + timedelta(milliseconds=float(number))
        if EPOCH_SECONDS_MIN <= number < EPOCH_SECONDS_MAX:
            return _EPOCH + timedelta(seconds=float(number))
        # Anything else, negatives included, is read as epoch milliseconds
        return _EPOCH + timedelta(milliseconds=float(number))
    except OverflowError:
        return None

def _parse_date_string(text: str) -> Optional[datetime]:
    text = text.strip()
    if not text:
        return None

    parsed = None
    try:
        parsed = datetime.fromisoformat(text[:-1] + '+00:00' if text[-1] in 'Zz' else text)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

def to_date(value: Any, empty_string_as_null: bool = True) -> Optional[Union[date, datetime]]:
    value = empty_string_to_null(value, empty_string_as_null)
    if value is None or value == '':
        return None
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        value = int(value)
    if _is_number(value):
        return _from_epoch(value)
    if isinstance(value, str):
        return _parse_date_string(value)
    return None

def to_boolean(value: Any, empty_string_as_null: bool = True) -> Optional[bool]:
    value = empty_string_to_null(value, empty_string_as_null)
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if _is_number(value):
        return value != 0 if _is_finite(value) else None
    text = str(value).strip().lower()
    if text in TRUE_WORDS:
        return True
    if text in FALSE_WORDS:
        return False
    return None

def to_int(value: Any, empty_string_as_null: bool = True) -> Optional[int]:
    value = empty_string_to_null(value, empty_string_as_null)
    if value is None:
        return None
    number = _parse_number(value)
    if number is None or not _is_finite(number):
        return None
    # int() truncates toward zero for float and Decimal
    return int(number)

def to_float(value: Any, empty_string_as_null: bool = True) -> Optional[float]:
    value = empty_string_to_null(value, empty_string_as_null)
    if value is None:
        return None
    number = _parse_number(value)
    if number is None:
        return None
    try:
        result = float(number)
    except OverflowError:
        return None
    return result if math.isfinite(result) else None

def to_decimal_string(value: Any, empty_string_as_null: bool = True) -> Optional[str]:
    """Decimals travel as strings so no digit (or trailing zero) is lost to a float"""
    value = empty_string_to_null(value, empty_string_as_null)
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        return text if _DECIMAL_RE.match(text) else None
    if _is_number(value):
        return str(value) if _is_finite(value) else None
    return None

_CONVERTERS = {
    DestinationTypeClass.DATE: to_date,
    DestinationTypeClass.BOOLEAN: to_boolean,
    DestinationTypeClass.INT: to_int,
    DestinationTypeClass.FLOAT: to_float,
    DestinationTypeClass.DECIMAL: to_decimal_string,
}

def sanitize_value(type_class: Union[DestinationTypeClass, str], value: Any,
                   empty_string_as_null: bool = True) -> Any:
    """Sanitize one cell for its destination type class"""
    if isinstance(type_class, str):
        type_class = DestinationTypeClass(type_class)
    converter = _CONVERTERS.get(type_class)
    if converter is None:
        return value
    return converter(value, empty_string_as_null)

class RowSanitizer:
    """Applies sanitize_value to every classified column of a row"""

    def __init__(self, type_classes: Dict[str, DestinationTypeClass], empty_string_as_null: bool = True):
        self.type_classes = type_classes
        self.empty_string_as_null = empty_string_as_null

    def sanitize_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        out = dict(row)
        for col, type_class in self.type_classes.items():
            if col in out:
                out[col] = sanitize_value(type_class, out[col], self.empty_string_as_null)
        return out

    def sanitize_rows(self, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [self.sanitize_row(row) for row in rows]
