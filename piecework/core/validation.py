from __future__ import annotations

from decimal import Decimal

from piecework.core.schema import DailyLogEntry, WorkedDaysEntry


class ValidationError(Exception):
    """Raised when domain validation fails."""


class CatalogError(ValidationError):
    """Raised when a catalog mutation references an unknown task or bad price."""


def validate_price(price: Decimal) -> None:
    if not price.is_finite() or price < 0:
        raise CatalogError("price must be a finite, non-negative amount")


def validate_log(record: DailyLogEntry) -> None:
    if not record.quantity.is_finite():
        raise ValidationError("quantity must be finite")


def validate_worked_days(record: WorkedDaysEntry) -> None:
    # a half-month window holds at most 16 calendar days
    if record.days > 16:
        raise ValidationError("worked days exceed the length of the period")
