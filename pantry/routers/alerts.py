from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pantry.auth import get_current_user
from pantry.db import get_db
from pantry.inventory import schemas
from pantry.inventory.alerts import get_expiry_alerts, get_restock_alerts, set_restock_alert
from pantry.models import User


router = APIRouter(prefix="/api", tags=["alerts"])


@router.get("/restock_alerts", response_model=List[schemas.RestockAlertResponse])
def list_restock_alerts(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_restock_alerts(db, user_id=current_user.id)


@router.post("/restock_alerts", response_model=schemas.RestockAlertSetResponse)
def upsert_restock_alert(
    payload: schemas.RestockAlertCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    alert = set_restock_alert(
        db,
        user_id=current_user.id,
        item_id=payload.item_id,
        min_quantity=payload.min_quantity,
    )
    db.commit()
    db.refresh(alert)
    return schemas.RestockAlertSetResponse(
        message="Restock alert set",
        alert_id=alert.id,
        item_id=alert.item_id,
        min_quantity=alert.min_quantity,
        alert_enabled=alert.alert_enabled,
    )


@router.get("/expiry_alerts", response_model=List[schemas.ExpiryAlertResponse])
def list_expiry_alerts(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_expiry_alerts(db, user_id=current_user.id)
