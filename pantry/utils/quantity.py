from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from pantry.exceptions import ValidationError

QUANTITY_STEP = Decimal("0.001")


def quantize_quantity(value: Decimal | float | int | str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        quantity = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Quantity must be a number, got {value!r}.")
    if not quantity.is_finite():
        raise ValidationError("Quantity must be a finite number.")
    return quantity.quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def require_positive_quantity(value: Decimal | float | int | str | None, field: str = "Quantity") -> Decimal:
    quantity = quantize_quantity(value)
    if quantity is None or quantity <= 0:
        raise ValidationError(f"{field} must be a positive number.")
    return quantity
