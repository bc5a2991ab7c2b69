"""Service layer exceptions for the pantry core.

Hierarchy:
    PantryError
    ├── ValidationError        malformed or missing input (HTTP 400)
    ├── NotFoundError          referenced item or batch absent (HTTP 404)
    ├── InsufficientStockError consumption exceeds stock (HTTP 400, carries shortfall)
    └── StorageFault           persistence failure (HTTP 500)
"""

from decimal import Decimal


class PantryError(Exception):
    """Base class for errors raised by the pantry services."""

    error_code = "pantry_error"


class ValidationError(PantryError, ValueError):
    error_code = "validation_error"


class NotFoundError(PantryError):
    error_code = "not_found"


class InsufficientStockError(PantryError):
    """Raised when a withdrawal asks for more than the item's batches hold.

    ``shortfall`` is the quantity that could not be allocated.
    """

    error_code = "insufficient_stock"

    def __init__(self, item_name: str, shortfall: Decimal, unit: str | None = None):
        self.item_name = item_name
        self.shortfall = shortfall
        self.unit = unit
        super().__init__(f'Not enough quantity available for "{item_name}". Missing: {shortfall} {unit or "units"}')


class StorageFault(PantryError):
    error_code = "storage_fault"

    def __init__(self, message: str, original_error: Exception | None = None):
        self.original_error = original_error
        if original_error is not None:
            message = f"{message}: {original_error}"
        super().__init__(message)
