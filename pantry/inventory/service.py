from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from pantry import settings
from pantry.exceptions import InsufficientStockError, NotFoundError, StorageFault, ValidationError
from pantry.inventory import batches, ledger
from pantry.models import (
    TRANSACTION_ADD,
    TRANSACTION_CONSUME,
    TRANSACTION_REMOVE,
    Category,
    InventoryBatch,
    Item,
)
from pantry.utils import require_positive_quantity


logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class ConsumptionPolicy(str, Enum):
    # STRICT checks total stock before touching any batch and commits once.
    # LEGACY commits batch by batch and keeps those decrements on a shortfall.
    STRICT = "strict"
    LEGACY = "legacy"


@dataclass
class BatchAllocation:
    batch_id: int
    quantity: Decimal
    remaining_after: Decimal
    depleted: bool


@dataclass
class ConsumptionResult:
    item_id: int
    item_name: str
    requested: Decimal | None
    consumed: Decimal = ZERO
    allocations: list[BatchAllocation] = field(default_factory=list)

    @property
    def full_removal(self) -> bool:
        return self.requested is None


def _purge_ledger_with_batch() -> bool:
    return settings.ledger_retention() == "batch"


def _resolve_policy(policy: ConsumptionPolicy | str | None) -> ConsumptionPolicy:
    if policy is None:
        return ConsumptionPolicy(settings.consumption_policy())
    try:
        return ConsumptionPolicy(policy)
    except ValueError:
        raise ValidationError(f"Unknown consumption policy: {policy}")


def find_item(db: Session, *, user_id: int, item_name: str) -> Item | None:
    return db.query(Item).filter(Item.name == item_name, Item.user_id == user_id).first()


def get_item(db: Session, *, user_id: int, item_name: str) -> Item:
    item = find_item(db, user_id=user_id, item_name=item_name)
    if item is None:
        raise NotFoundError(f'Item "{item_name}" not found')
    return item


def _get_or_create_item(db: Session, *, user_id: int, item_name: str, category_id: int) -> Item:
    item = find_item(db, user_id=user_id, item_name=item_name)
    if item:
        return item
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError(f"Category {category_id} not found.")
    item = Item(user_id=user_id, name=item_name, category_id=category.id)
    db.add(item)
    db.flush()
    logger.info("Created item_id=%s name=%r for user_id=%s", item.id, item_name, user_id)
    return item


def add_stock(
    db: Session,
    *,
    user_id: int,
    item_name: str,
    category_id: int,
    quantity: Decimal,
    unit: str,
    purchase_date: date | None = None,
    expiry_date: date | None = None,
    location: str | None = None,
) -> InventoryBatch:
    """Stock a new batch of ``item_name``, creating the item on first use.

    The batch and its initial ``add`` ledger entry are written in the caller's
    transaction; the caller commits.
    """
    item_name = (item_name or "").strip()
    if not item_name:
        raise ValidationError("Item name is required.")
    quantity = require_positive_quantity(quantity)
    if not unit or not unit.strip():
        raise ValidationError("Unit is required.")
    if purchase_date and expiry_date and expiry_date < purchase_date:
        raise ValidationError("Expiry date cannot be before purchase date.")

    try:
        item = _get_or_create_item(db, user_id=user_id, item_name=item_name, category_id=category_id)
        batch = batches.create_batch(
            db,
            item_id=item.id,
            quantity=quantity,
            unit=unit,
            purchase_date=purchase_date,
            expiry_date=expiry_date,
            location=location,
        )
        ledger.append(db, batch.id, TRANSACTION_ADD, batch.initial_quantity)
    except SQLAlchemyError as exc:
        raise StorageFault(f'Failed to add inventory for "{item_name}"', original_error=exc)

    logger.info(
        "Stocked batch_id=%s item_id=%s quantity=%s %s expiry=%s",
        batch.id,
        item.id,
        quantity,
        batch.unit,
        expiry_date,
    )
    return batch


def _remove_all(db: Session, item: Item, item_batches: list[InventoryBatch]) -> ConsumptionResult:
    result = ConsumptionResult(item_id=item.id, item_name=item.name, requested=None)
    purge = _purge_ledger_with_batch()
    for batch in item_batches:
        batch_id = batch.id
        remaining = Decimal(batch.remaining_quantity)
        ledger.append(db, batch_id, TRANSACTION_REMOVE, remaining)
        batches.delete_batch_and_ledger(db, batch_id, purge_ledger=purge)
        result.consumed += remaining
        result.allocations.append(
            BatchAllocation(batch_id=batch_id, quantity=remaining, remaining_after=ZERO, depleted=True)
        )
    return result


def _consume_from_batch(db: Session, batch_id: int, wanted: Decimal, purge: bool) -> BatchAllocation | None:
    # Fresh locked read; the batch may have been drained since it was listed.
    batch = batches.find_batch(db, batch_id, for_update=True)
    if batch is None:
        return None
    available = Decimal(batch.remaining_quantity)
    to_remove = min(available, wanted)
    if to_remove <= 0:
        return None

    batches.adjust_remaining(db, batch_id, -to_remove)
    ledger.append(db, batch_id, TRANSACTION_CONSUME, to_remove)

    remaining_after = Decimal(batches.get_batch(db, batch_id).remaining_quantity)
    depleted = remaining_after <= 0
    if depleted:
        batches.delete_batch_and_ledger(db, batch_id, purge_ledger=purge)
    return BatchAllocation(batch_id=batch_id, quantity=to_remove, remaining_after=remaining_after, depleted=depleted)


def _consume_quantity(
    db: Session,
    item: Item,
    item_batches: list[InventoryBatch],
    quantity: Decimal,
    policy: ConsumptionPolicy,
) -> ConsumptionResult:
    result = ConsumptionResult(item_id=item.id, item_name=item.name, requested=quantity)
    unit = item_batches[0].unit if item_batches else None

    if policy is ConsumptionPolicy.STRICT:
        available = sum((Decimal(batch.remaining_quantity) for batch in item_batches), ZERO)
        if available < quantity:
            raise InsufficientStockError(item.name, quantity - available, unit)

    purge = _purge_ledger_with_batch()
    remaining_to_remove = quantity
    for batch_id in [batch.id for batch in item_batches]:
        if remaining_to_remove <= 0:
            break
        allocation = _consume_from_batch(db, batch_id, remaining_to_remove, purge)
        if allocation is None:
            continue
        remaining_to_remove -= allocation.quantity
        result.consumed += allocation.quantity
        result.allocations.append(allocation)
        if policy is ConsumptionPolicy.LEGACY:
            db.commit()

    if remaining_to_remove > 0:
        raise InsufficientStockError(item.name, remaining_to_remove, unit)
    return result


def consume_item(
    db: Session,
    *,
    user_id: int,
    item_name: str,
    quantity: Decimal | None = None,
    policy: ConsumptionPolicy | str | None = None,
) -> ConsumptionResult:
    """Withdraw stock of ``item_name`` from its batches in FIFO-by-expiry order.

    Without ``quantity`` every batch is removed. With a quantity, batches are
    drained soonest-expiring first and depleted batches are deleted.

    Under ``ConsumptionPolicy.STRICT`` a shortfall is detected before any batch
    is touched and the work is committed by the caller as one transaction.
    Under ``ConsumptionPolicy.LEGACY`` each batch step is committed on its own,
    so the decrements made before a shortfall is reported stay in place.

    Raises:
        ValidationError: quantity is not a finite positive number.
        NotFoundError: the item, or any stock for it, does not exist.
        InsufficientStockError: the batches cannot cover ``quantity``.
        StorageFault: the database rejected a write.
    """
    if quantity is not None:
        quantity = require_positive_quantity(quantity)
    policy = _resolve_policy(policy)

    item = get_item(db, user_id=user_id, item_name=item_name)
    try:
        item_batches = batches.list_batches(db, item.id, for_update=True)
        if not item_batches:
            raise NotFoundError(f'No inventory found for "{item_name}"')

        if quantity is None:
            result = _remove_all(db, item, item_batches)
        else:
            result = _consume_quantity(db, item, item_batches, quantity, policy)
    except SQLAlchemyError as exc:
        raise StorageFault(f'Failed to remove "{item_name}" from inventory', original_error=exc)

    logger.info(
        "Consumed item_id=%s requested=%s consumed=%s batches=%s policy=%s",
        item.id,
        quantity if quantity is not None else "all",
        result.consumed,
        [allocation.batch_id for allocation in result.allocations],
        policy.value,
    )
    return result


def list_inventory(db: Session, *, user_id: int) -> list[InventoryBatch]:
    return (
        db.query(InventoryBatch)
        .options(selectinload(InventoryBatch.item).selectinload(Item.category))
        .join(Item, InventoryBatch.item_id == Item.id)
        .filter(Item.user_id == user_id)
        .order_by(Item.name.asc(), *batches.fifo_order())
        .all()
    )


def list_items(db: Session, *, user_id: int) -> list[Item]:
    return (
        db.query(Item)
        .options(selectinload(Item.category))
        .filter(Item.user_id == user_id)
        .order_by(Item.name.asc())
        .all()
    )


def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.name.asc()).all()


def get_user_batch(db: Session, *, user_id: int, batch_id: int) -> InventoryBatch:
    batch = (
        db.query(InventoryBatch)
        .join(Item, InventoryBatch.item_id == Item.id)
        .filter(InventoryBatch.id == batch_id, Item.user_id == user_id)
        .first()
    )
    if not batch:
        raise NotFoundError(f"Inventory batch {batch_id} not found.")
    return batch
