from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar


REASON_TYPES = ("new_shipment", "returns", "other")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """Uniqueness violation (duplicate GST number, e-mail, ...)."""


class NotFoundError(LookupError):
    """404-level: the subject id does not exist."""


# ---------------------------------------------------------------------------
# Reasons
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Reason:
    reason_type: ClassVar[str] = ""
    note: str | None = None


@dataclass(frozen=True)
class NewShipment(Reason):
    reason_type: ClassVar[str] = "new_shipment"


@dataclass(frozen=True)
class Returns(Reason):
    reason_type: ClassVar[str] = "returns"


@dataclass(frozen=True)
class Other(Reason):
    reason_type: ClassVar[str] = "other"

    def __post_init__(self):
        if self.note is None or not str(self.note).strip():
            raise ValidationError("Reason note is required for 'other' type")
        object.__setattr__(self, "note", str(self.note).strip())


_REASONS = {cls.reason_type: cls for cls in (NewShipment, Returns, Other)}


def parse_reason(reason_type: Any, reason_note: Any = None) -> Reason:
    """Build the reason variant from raw payload fields."""
    cls = _REASONS.get(reason_type) if isinstance(reason_type, str) else None
    if cls is None:
        raise ValidationError("Invalid reason type")
    note = reason_note.strip() if isinstance(reason_note, str) else None
    return cls(note=note or None)


# ---------------------------------------------------------------------------
# Scalar coercion
# ---------------------------------------------------------------------------

def parse_int(value: Any, field: str) -> int:
    """
    Strict integer coercion for JSON and form values.

    Accepts ints and digit strings; rejects bools, decimals and scientific notation.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{field} must be an integer, not a decimal")
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{field} must be a plain integer")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    raise ValidationError(f"{field} must be an integer")


def parse_positive_quantity(value: Any, field: str = "quantity") -> int:
    if value is None or value == "":
        raise ValidationError("Quantity must be greater than 0")
    qty = parse_int(value, field)
    if qty <= 0:
        raise ValidationError("Quantity must be greater than 0")
    return qty


def parse_target_quantity(value: Any, field: str = "quantity") -> int:
    if value is None or value == "":
        raise ValidationError("Quantity is required")
    qty = parse_int(value, field)
    if qty < 0:
        raise ValidationError("Quantity cannot be negative")
    return qty


def parse_decimal(value: Any, field: str, *, required: bool = False, minimum: Decimal | None = Decimal("0")) -> Decimal | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not number.is_finite():
        raise ValidationError(f"{field} must be a number")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    return number


def parse_float(value: Any, field: str) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")


def parse_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def require_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value.strip()


def optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
