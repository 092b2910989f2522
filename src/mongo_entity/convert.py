"""
Conversion of BSON driver values to plain Python values.

Documents returned by the driver may contain BSON wrapper types (ObjectId,
Timestamp, Int64, Decimal128, ...). ``to_native`` walks a value recursively and
replaces every wrapper with a plain equivalent, so callers only ever see
dicts, lists, scalars and ``datetime`` values.

Converting an already converted value returns an equal value.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from bson.binary import Binary
from bson.code import Code
from bson.codec_options import CodecOptions, DatetimeConversion
from bson.datetime_ms import DatetimeMS
from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.objectid import ObjectId
from bson.regex import Regex
from bson.timestamp import Timestamp

# Out-of-range BSON dates are clamped instead of raising
_CLAMP_OPTIONS = CodecOptions(
    tz_aware=True,
    datetime_conversion=DatetimeConversion.DATETIME_CLAMP,
)


def to_native(value: Any) -> Any:
    """
    Recursively convert a driver value into plain Python values.

    Args:
        value: A value decoded by the driver (document, array or scalar)

    Returns:
        The converted value; values that are already plain are returned as is.
    """
    if isinstance(value, ObjectId):
        return str(value)
    elif isinstance(value, Code):
        # Code subclasses str; BSON symbols already decode to str
        return str(value)
    elif isinstance(value, Timestamp):
        return value.as_datetime()
    elif isinstance(value, DatetimeMS):
        return value.as_datetime(_CLAMP_OPTIONS)
    elif isinstance(value, Int64):
        return int(value)
    elif isinstance(value, Decimal128):
        return value.to_decimal()
    elif isinstance(value, Regex):
        return value.pattern
    elif isinstance(value, Binary):
        return bytes(value)
    elif isinstance(value, Mapping):
        return {key: to_native(item) for key, item in value.items()}
    elif isinstance(value, (list, tuple)):
        return [to_native(item) for item in value]
    return value


def to_native_record(document: Mapping[str, Any]) -> dict[str, Any]:
    """Convert one driver document into a plain record."""
    return {key: to_native(item) for key, item in document.items()}


__all__ = ["to_native", "to_native_record"]
