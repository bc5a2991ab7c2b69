"""Batch store: stock batches per item and their FIFO-by-expiry ordering."""

from datetime import date
from decimal import Decimal
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from pantry.exceptions import InsufficientStockError, NotFoundError, ValidationError
from pantry.inventory import ledger
from pantry.models import InventoryBatch
from pantry.utils import quantize_quantity, require_positive_quantity


logger = logging.getLogger(__name__)


def fifo_order():
    # Soonest expiry first, undated batches last; ties broken by purchase date, then insertion.
    return (
        InventoryBatch.expiry_date.is_(None),
        InventoryBatch.expiry_date.asc(),
        InventoryBatch.purchase_date.is_(None),
        InventoryBatch.purchase_date.asc(),
        InventoryBatch.id.asc(),
    )


def list_batches(db: Session, item_id: int, *, for_update: bool = False) -> list[InventoryBatch]:
    query = db.query(InventoryBatch).filter(InventoryBatch.item_id == item_id).order_by(*fifo_order())
    if for_update:
        query = query.with_for_update()
    return query.populate_existing().all()


def find_batch(db: Session, batch_id: int, *, for_update: bool = False) -> InventoryBatch | None:
    query = db.query(InventoryBatch).filter(InventoryBatch.id == batch_id)
    if for_update:
        query = query.with_for_update()
    return query.populate_existing().first()


def get_batch(db: Session, batch_id: int, *, for_update: bool = False) -> InventoryBatch:
    batch = find_batch(db, batch_id, for_update=for_update)
    if batch is None:
        raise NotFoundError(f"Inventory batch {batch_id} not found.")
    return batch


def create_batch(
    db: Session,
    *,
    item_id: int,
    quantity: Decimal,
    unit: str,
    purchase_date: date | None = None,
    expiry_date: date | None = None,
    location: str | None = None,
) -> InventoryBatch:
    quantity = require_positive_quantity(quantity)
    if not unit or not unit.strip():
        raise ValidationError("Unit is required.")

    batch = InventoryBatch(
        item_id=item_id,
        purchase_date=purchase_date,
        expiry_date=expiry_date,
        initial_quantity=quantity,
        remaining_quantity=quantity,
        unit=unit.strip(),
        location=location or None,
    )
    db.add(batch)
    db.flush()
    return batch


def adjust_remaining(db: Session, batch_id: int, delta: Decimal) -> Decimal:
    """Apply ``delta`` to a batch's remaining quantity with a conditional UPDATE.

    The bounds are checked by the UPDATE itself, against whatever value is
    stored when it runs, so a concurrent writer that got there first is never
    overwritten.

    The caller is expected to write the matching ledger entry in the same
    transaction. Returns the new remaining quantity.
    """
    delta = quantize_quantity(delta)
    new_value = func.round(InventoryBatch.remaining_quantity + delta, 3)
    updated = (
        db.query(InventoryBatch)
        .filter(
            InventoryBatch.id == batch_id,
            new_value >= 0,
            new_value <= InventoryBatch.initial_quantity,
        )
        .update({InventoryBatch.remaining_quantity: new_value}, synchronize_session=False)
    )

    batch = get_batch(db, batch_id)
    current = Decimal(batch.remaining_quantity)
    if not updated:
        if current + delta < 0:
            raise InsufficientStockError(
                batch.item.name if batch.item else f"batch {batch_id}",
                -(current + delta),
                batch.unit,
            )
        raise ValidationError(f"Inventory batch {batch_id} cannot exceed its initial quantity.")

    logger.debug("Adjusted batch_id=%s by %s: now %s", batch_id, delta, current)
    return current


def delete_batch_and_ledger(db: Session, batch_id: int, *, purge_ledger: bool = True) -> None:
    """Remove a batch and, unless ledger history is retained, its ledger rows.

    Deleting a batch that is already gone is a no-op.
    """
    if purge_ledger:
        ledger.purge(db, batch_id)
    deleted = (
        db.query(InventoryBatch)
        .filter(InventoryBatch.id == batch_id)
        .delete(synchronize_session="fetch")
    )
    db.flush()
    if deleted:
        logger.info("Deleted depleted batch_id=%s purge_ledger=%s", batch_id, purge_ledger)
