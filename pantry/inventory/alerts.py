from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pantry import settings
from pantry.exceptions import NotFoundError, StorageFault, ValidationError
from pantry.models import InventoryBatch, Item, RestockAlert
from pantry.utils import quantize_quantity


logger = logging.getLogger(__name__)


@dataclass
class RestockAlertStatus:
    alert_id: int
    item_id: int
    item_name: str
    min_quantity: Decimal
    alert_enabled: bool
    total_remaining_quantity: Decimal
    unit: str | None


@dataclass
class ExpiryAlert:
    inventory_id: int
    item_id: int
    item_name: str
    expiry_date: date
    remaining_quantity: Decimal
    unit: str
    days_until_expiry: int


def set_restock_alert(db: Session, *, user_id: int, item_id: int, min_quantity: Decimal) -> RestockAlert:
    """Create or replace the restock threshold for an item and enable it."""
    min_quantity = quantize_quantity(min_quantity)
    if min_quantity is None or min_quantity < 0:
        raise ValidationError("Minimum quantity must be zero or positive.")

    item = db.query(Item).filter(Item.id == item_id, Item.user_id == user_id).first()
    if not item:
        raise NotFoundError(f"Item {item_id} not found.")

    try:
        alert = db.query(RestockAlert).filter(RestockAlert.item_id == item.id).with_for_update().first()
        if alert:
            alert.min_quantity = min_quantity
            alert.alert_enabled = True
        else:
            alert = RestockAlert(item_id=item.id, min_quantity=min_quantity, alert_enabled=True)
            db.add(alert)
        db.flush()
    except SQLAlchemyError as exc:
        raise StorageFault("Failed to set restock alert", original_error=exc)

    logger.info("Restock alert set: item_id=%s min_quantity=%s", item.id, min_quantity)
    return alert


def get_restock_alerts(db: Session, *, user_id: int) -> list[RestockAlertStatus]:
    """Items with an enabled alert whose total remaining stock is at or below the threshold."""
    totals = (
        db.query(
            InventoryBatch.item_id.label("item_id"),
            func.sum(InventoryBatch.remaining_quantity).label("total_remaining"),
            func.min(InventoryBatch.unit).label("unit"),
        )
        .group_by(InventoryBatch.item_id)
        .subquery()
    )
    rows = (
        db.query(RestockAlert, Item, totals.c.total_remaining, totals.c.unit)
        .join(Item, RestockAlert.item_id == Item.id)
        .outerjoin(totals, totals.c.item_id == Item.id)
        .filter(Item.user_id == user_id, RestockAlert.alert_enabled.is_(True))
        .order_by(Item.name.asc())
        .all()
    )

    results: list[RestockAlertStatus] = []
    for alert, item, total_remaining, unit in rows:
        total = Decimal(total_remaining or 0)
        min_quantity = Decimal(alert.min_quantity)
        if total > min_quantity:
            continue
        results.append(
            RestockAlertStatus(
                alert_id=alert.id,
                item_id=item.id,
                item_name=item.name,
                min_quantity=min_quantity,
                alert_enabled=alert.alert_enabled,
                total_remaining_quantity=total,
                unit=unit,
            )
        )
    return results


def get_expiry_alerts(
    db: Session,
    *,
    user_id: int,
    today: date | None = None,
    horizon_days: int | None = None,
) -> list[ExpiryAlert]:
    """Batches still in stock that expire on or before ``today + horizon_days``.

    Already-expired batches are included.
    """
    today = today or date.today()
    if horizon_days is None:
        horizon_days = settings.expiry_horizon_days()
    if horizon_days < 0:
        raise ValidationError("Expiry horizon cannot be negative.")
    cutoff = today + timedelta(days=horizon_days)

    rows = (
        db.query(InventoryBatch, Item.name)
        .join(Item, InventoryBatch.item_id == Item.id)
        .filter(
            Item.user_id == user_id,
            InventoryBatch.expiry_date.isnot(None),
            InventoryBatch.remaining_quantity > 0,
            InventoryBatch.expiry_date <= cutoff,
        )
        .order_by(InventoryBatch.expiry_date.asc(), InventoryBatch.id.asc())
        .all()
    )
    return [
        ExpiryAlert(
            inventory_id=batch.id,
            item_id=batch.item_id,
            item_name=item_name,
            expiry_date=batch.expiry_date,
            remaining_quantity=Decimal(batch.remaining_quantity),
            unit=batch.unit,
            days_until_expiry=(batch.expiry_date - today).days,
        )
        for batch, item_name in rows
    ]
