"""
Column default parsing.

SQLite hands back column defaults as the raw text written in the CREATE
TABLE statement. parse_default() classifies that text into a tagged value
and render_default() emits the PostgreSQL expression for it.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from core.identifiers import quote_literal
from core.type_mapper import PortableKind, PortableType

class DefaultKind(Enum):
    NUMBER = "number"
    STRING = "string"
    EXPRESSION = "expression"

@dataclass(frozen=True)
class DefaultValue:
    kind: DefaultKind
    value: Union[int, float, str]

# SQLite keyword -> PostgreSQL equivalent
CURRENT_TIME_KEYWORDS = {
    'CURRENT_TIMESTAMP': 'CURRENT_TIMESTAMP',
    'CURRENT_DATE': 'CURRENT_DATE',
    'CURRENT_TIME': 'CURRENT_TIME',
}

_NUMBER_RE = re.compile(r'^-?\d+(\.\d+)?$')

def parse_default(raw: Optional[str]) -> Optional[DefaultValue]:
    """Classify a raw default literal. Returns None when there is no default."""
    if raw is None:
        return None
    text = str(raw).strip()

    keyword = CURRENT_TIME_KEYWORDS.get(text.upper())
    if keyword:
        return DefaultValue(DefaultKind.EXPRESSION, keyword)

    if _NUMBER_RE.match(text):
        number = float(text) if '.' in text else int(text)
        return DefaultValue(DefaultKind.NUMBER, number)

    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        quote = text[0]
        return DefaultValue(DefaultKind.STRING, text[1:-1].replace(quote * 2, quote))

    return DefaultValue(DefaultKind.EXPRESSION, text)

def render_default(default: DefaultValue, portable: Optional[PortableType] = None) -> str:
    """Render a parsed default as a PostgreSQL DEFAULT expression"""
    if default.kind == DefaultKind.NUMBER:
        if portable is not None and portable.kind == PortableKind.BOOLEAN:
            return 'TRUE' if default.value else 'FALSE'
        return str(default.value)
    if default.kind == DefaultKind.STRING:
        return quote_literal(default.value)
    return default.value
