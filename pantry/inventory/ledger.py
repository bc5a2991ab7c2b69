"""Ledger of quantity-changing events against inventory batches.

Entries reference their batch by id only. Under the default ``batch``
retention they are purged together with the batch; with ``permanent``
retention they outlive it.
"""

from decimal import Decimal

from sqlalchemy.orm import Session

from pantry.exceptions import ValidationError
from pantry.models import TRANSACTION_TYPES, InventoryTransaction
from pantry.utils import quantize_quantity


def append(db: Session, batch_id: int, transaction_type: str, quantity_changed: Decimal) -> InventoryTransaction:
    if transaction_type not in TRANSACTION_TYPES:
        raise ValidationError(f"Unknown transaction type: {transaction_type}")
    quantity_changed = quantize_quantity(quantity_changed)
    if quantity_changed is None or quantity_changed < 0:
        raise ValidationError("Ledger quantity must be zero or positive.")

    entry = InventoryTransaction(
        inventory_id=batch_id,
        transaction_type=transaction_type,
        quantity_changed=quantity_changed,
    )
    db.add(entry)
    db.flush()
    return entry


def list_entries(db: Session, batch_id: int) -> list[InventoryTransaction]:
    return (
        db.query(InventoryTransaction)
        .filter(InventoryTransaction.inventory_id == batch_id)
        .order_by(InventoryTransaction.id.asc())
        .all()
    )


def purge(db: Session, batch_id: int) -> int:
    return (
        db.query(InventoryTransaction)
        .filter(InventoryTransaction.inventory_id == batch_id)
        .delete(synchronize_session="fetch")
    )
