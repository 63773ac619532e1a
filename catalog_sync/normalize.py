"""Field-level coercion helpers used by feed decoding and reconciliation."""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .models import DataIssue

_WHITESPACE_RE = re.compile(r"\s+")
_TRUE_STRINGS = frozenset({"1", "true", "yes", "y"})
_CENT = Decimal("0.01")


def collapse_whitespace(value: str | None) -> str:
    """Trim text and collapse internal whitespace runs to a single space."""

    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def coerce_text(value: object, *, field: str) -> tuple[str, list[DataIssue]]:
    """Return trimmed text, defaulting missing or non-text values to `""`."""

    if value is None:
        return "", [DataIssue(code="missing_value", message=f"{field} is missing", field=field)]

    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return "", [
            DataIssue(
                code="invalid_text",
                message=f"{field} is not text: {type(value).__name__}",
                field=field,
            )
        ]

    return str(value).strip(), []


def coerce_sku(value: object) -> tuple[str, list[DataIssue]]:
    """Return the SKU as text; an empty SKU keeps the record out of matching."""

    sku, issues = coerce_text(value, field="sku")
    if sku == "":
        return "", [DataIssue(code="missing_sku", message="sku is missing or empty", field="sku")]
    return sku, issues


def coerce_product_id(value: object) -> tuple[int, list[DataIssue]]:
    """Parse a storefront id; anything that is not a positive integer becomes `0`."""

    invalid = DataIssue(code="invalid_id", message=f"Product id is not a positive integer: {value!r}", field="id")

    if isinstance(value, bool) or value is None:
        return 0, [invalid]

    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed_decimal = Decimal(value.strip())
        except InvalidOperation:
            return 0, [invalid]
        if not parsed_decimal.is_finite() or parsed_decimal != parsed_decimal.to_integral_value():
            return 0, [invalid]
        parsed = int(parsed_decimal)
    elif isinstance(value, float) and value.is_integer():
        parsed = int(value)
    else:
        return 0, [invalid]

    if parsed <= 0:
        return 0, [invalid]
    return parsed, []


def parse_decimal_string(value: object, *, field: str = "price") -> tuple[float, list[DataIssue]]:
    """Parse a price that may use a comma decimal separator or grouping spaces."""

    if isinstance(value, bool):
        return 0.0, [DataIssue(code="invalid_price", message=f"{field} is not numeric: {value}", field=field)]

    if isinstance(value, (int, float)):
        return float(value), []

    cleaned, issues = coerce_text(value, field=field)
    if cleaned == "":
        if not issues:
            issues.append(DataIssue(code="missing_value", message=f"{field} is empty", field=field))
        return 0.0, issues

    normalized = cleaned.replace(" ", "").replace("\u00a0", "").replace(",", ".")
    try:
        return float(normalized), issues
    except ValueError:
        issues.append(
            DataIssue(
                code="invalid_price",
                message=f"{field} is not numeric: {cleaned}",
                field=field,
            )
        )
        return 0.0, issues


def parse_boolean_string(value: object) -> bool:
    """Interpret human-friendly booleans such as `"true"`, `"1"` or `"yes"`."""

    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_STRINGS


def round_price(value: object) -> Decimal:
    """Round a price to cents, half away from zero.

    Values that cannot be read as a finite number round to `0.00`.
    """

    if isinstance(value, bool) or value is None:
        return Decimal(0).quantize(_CENT)
    if isinstance(value, float):
        if not math.isfinite(value):
            return Decimal(0).quantize(_CENT)
        value = repr(value)
    if isinstance(value, str):
        value, _ = parse_decimal_string(value)
        value = repr(value) if math.isfinite(value) else "0"
    try:
        parsed = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return Decimal(0).quantize(_CENT)
    if not parsed.is_finite():
        return Decimal(0).quantize(_CENT)
    return parsed.quantize(_CENT, rounding=ROUND_HALF_UP)


def format_price(value: float | Decimal) -> str:
    """Render a price without trailing zeros, e.g. `400.0 -> "400"`."""

    if isinstance(value, float):
        if not math.isfinite(value):
            return "0"
        value = Decimal(repr(value))
    if value == 0:
        return "0"
    return format(value.normalize(), "f")
