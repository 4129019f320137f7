"""
Type coercion for raw configuration strings.

Every semantic type maps to one pure function taking the raw string and
returning the typed value or raising ``CoercionError``.
"""

import binascii
from decimal import Decimal, InvalidOperation
from enum import Enum
import json
from typing import Any, Callable, Dict

from eth_utils import is_0x_prefixed, to_bytes
from hexbytes import HexBytes

from ..utils.json_helpers import loads
from .base import CoercionError, ConfigError

TRUTHY_VALUES = ("true", "t", "yes", "y")


class SemanticType(str, Enum):
    """How a raw configuration string is interpreted."""

    TEXT = "string"
    JSON = "json"
    INTEGER = "int"
    FLOAT = "float"
    BOOLEAN = "bool"
    BYTES = "buffer"
    DECIMAL = "bn"


def parse_bool(raw: str) -> bool:
    return raw.lower() in TRUTHY_VALUES


def _coerce_text(raw: str, base: int) -> str:
    return raw


def _coerce_json(raw: str, base: int) -> Any:
    try:
        return loads(raw)
    except json.JSONDecodeError as e:
        raise CoercionError(f"Invalid JSON document: {e}", raw=raw)


def _coerce_int(raw: str, base: int) -> int:
    try:
        return int(raw.strip(), base)
    except ValueError:
        raise CoercionError(f"Expected an integer (base {base}), got: {raw!r}", raw=raw)


def _coerce_float(raw: str, base: int) -> float:
    try:
        return float(raw)
    except ValueError:
        raise CoercionError(f"Expected a float, got: {raw!r}", raw=raw)


def _coerce_bool(raw: str, base: int) -> bool:
    return parse_bool(raw)


def _coerce_bytes(raw: str, base: int) -> HexBytes:
    if not is_0x_prefixed(raw):
        return HexBytes(raw.encode("utf-8"))
    try:
        return HexBytes(to_bytes(hexstr=raw))
    except (ValueError, binascii.Error):
        raise CoercionError(f"Invalid hex string: {raw!r}", raw=raw)


def _coerce_decimal(raw: str, base: int) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        raise CoercionError(f"Expected a decimal number, got: {raw!r}", raw=raw)
    if not value.is_finite():
        raise CoercionError(f"Expected a finite decimal number, got: {raw!r}", raw=raw)
    return value


_STRATEGIES: Dict[SemanticType, Callable[[str, int], Any]] = {
    SemanticType.TEXT: _coerce_text,
    SemanticType.JSON: _coerce_json,
    SemanticType.INTEGER: _coerce_int,
    SemanticType.FLOAT: _coerce_float,
    SemanticType.BOOLEAN: _coerce_bool,
    SemanticType.BYTES: _coerce_bytes,
    SemanticType.DECIMAL: _coerce_decimal,
}

_missing = set(SemanticType) - set(_STRATEGIES)
if _missing:
    raise ConfigError(f"No coercion strategy for: {sorted(t.value for t in _missing)}")


def coerce(raw: str, type_: SemanticType = SemanticType.TEXT, numeric_base: int = 10) -> Any:
    """
    Convert a raw string into its semantic type.

    Args:
        raw: Raw string value
        type_: Target semantic type (enum member or its string value)
        numeric_base: Base used when parsing integers

    Returns:
        The typed value

    Raises:
        CoercionError: If the string is not valid for the type
    """
    return _STRATEGIES[SemanticType(type_)](raw, numeric_base)
