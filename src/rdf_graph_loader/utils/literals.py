"""Conversion of RDF literals to native property values.

Explicit XSD datatypes win. Anything else (plain strings, language-tagged
strings, custom datatypes) goes through numeric inference: a lexical form
that reads as a number is stored as a number, everything else as a string.
Malformed lexical forms for a known datatype are kept as their string.
"""

import re
from datetime import date, datetime, time
from typing import Any

from rdflib import Literal

from .uri import get_local_part

INTEGER_TYPES = frozenset(
    {
        "integer",
        "int",
        "long",
        "short",
        "byte",
        "nonNegativeInteger",
        "nonPositiveInteger",
        "positiveInteger",
        "negativeInteger",
        "unsignedLong",
        "unsignedInt",
        "unsignedShort",
        "unsignedByte",
    }
)
FLOAT_TYPES = frozenset({"float", "double", "decimal"})
BOOLEAN_TYPES = frozenset({"boolean"})
DATETIME_TYPES = frozenset({"dateTime", "dateTimeStamp"})
DATE_TYPES = frozenset({"date"})
TIME_TYPES = frozenset({"time"})

_XSD_NS = "http://www.w3.org/2001/XMLSchema#"

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(Z|[+-]\d{2}:\d{2})?$")
_FRACTION_RE = re.compile(r"(?<=:\d{2})\.(\d+)")


def infer_number(value: str) -> Any:
    """Return ``value`` as int or float when it reads as a number, else unchanged."""
    stripped = value.strip()
    if _INT_RE.match(stripped):
        return int(stripped)
    if _FLOAT_RE.match(stripped):
        return float(stripped)
    return value


def parse_boolean(value: str) -> bool:
    return value.strip().lower() in ("true", "1")


def parse_date(value: str) -> date | str:
    # Timezone suffixes ("2025-06-15Z") are dropped, the calendar date is kept.
    match = _DATE_RE.match(value.strip())
    if not match:
        return value
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return value


def _iso_form(value: str) -> str:
    # xsd allows any number of fractional-second digits; fromisoformat wants 3 or 6
    value = _FRACTION_RE.sub(lambda m: "." + (m.group(1) + "000000")[:6], value.strip())
    return value.replace("Z", "+00:00")


def parse_datetime(value: str) -> datetime | str:
    try:
        return datetime.fromisoformat(_iso_form(value))
    except ValueError:
        return value


def parse_time(value: str) -> time | str:
    try:
        return time.fromisoformat(_iso_form(value))
    except ValueError:
        return value


def _convert_typed(lexical: str, type_name: str) -> Any:
    if type_name in INTEGER_TYPES:
        try:
            return int(lexical.strip())
        except ValueError:
            return lexical
    if type_name in FLOAT_TYPES:
        try:
            return float(lexical.strip())
        except ValueError:
            return lexical
    if type_name in BOOLEAN_TYPES:
        return parse_boolean(lexical)
    if type_name in DATETIME_TYPES:
        return parse_datetime(lexical)
    if type_name in DATE_TYPES:
        return parse_date(lexical)
    if type_name in TIME_TYPES:
        return parse_time(lexical)
    return infer_number(lexical)


def convert_literal(literal: Literal) -> Any:
    """
    Convert an RDF literal to the value stored on the graph node.

    Args:
        literal: rdflib Literal (typed, language-tagged or plain)

    Returns:
        int, float, bool, date, datetime, time or str
    """
    lexical = str(literal)
    datatype = literal.datatype
    if datatype is not None and str(datatype).startswith(_XSD_NS):
        return _convert_typed(lexical, get_local_part(str(datatype)))
    return infer_number(lexical)
