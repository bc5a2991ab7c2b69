from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pantry.auth import get_current_user
from pantry.db import get_db
from pantry.inventory import ledger, schemas
from pantry.inventory.service import (
    add_stock,
    consume_item,
    get_user_batch,
    list_categories,
    list_inventory,
    list_items,
)
from pantry.models import InventoryBatch, User


router = APIRouter(prefix="/api", tags=["inventory"])


def _to_record_response(record: InventoryBatch) -> schemas.InventoryRecordResponse:
    item = record.item
    return schemas.InventoryRecordResponse(
        id=record.id,
        item_id=record.item_id,
        item_name=item.name if item else f"Item #{record.item_id}",
        category_name=item.category.name if item and item.category else None,
        purchase_date=record.purchase_date,
        expiry_date=record.expiry_date,
        initial_quantity=record.initial_quantity,
        remaining_quantity=record.remaining_quantity,
        unit=record.unit,
        location=record.location,
    )


@router.get("/categories", response_model=List[schemas.CategoryResponse])
def get_categories(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return list_categories(db)


@router.get("/items", response_model=List[schemas.ItemResponse])
def get_items(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [
        schemas.ItemResponse(
            id=item.id,
            name=item.name,
            barcode=item.barcode,
            category_id=item.category_id,
            category_name=item.category.name if item.category else None,
        )
        for item in list_items(db, user_id=current_user.id)
    ]


@router.get("/inventory", response_model=List[schemas.InventoryRecordResponse])
def get_inventory(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [_to_record_response(record) for record in list_inventory(db, user_id=current_user.id)]


@router.post("/inventory", response_model=schemas.InventoryAddResponse, status_code=status.HTTP_201_CREATED)
def create_inventory_record(
    payload: schemas.InventoryAddRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    batch = add_stock(
        db,
        user_id=current_user.id,
        item_name=payload.item_name,
        category_id=payload.category_id,
        quantity=payload.initial_quantity,
        unit=payload.unit,
        purchase_date=payload.purchase_date,
        expiry_date=payload.expiry_date,
        location=payload.location,
    )
    db.commit()
    return schemas.InventoryAddResponse(
        message="Item added to inventory",
        inventory_id=batch.id,
        item_id=batch.item_id,
    )


@router.post("/inventory/remove", response_model=schemas.InventoryRemoveResponse)
def remove_inventory(
    payload: schemas.InventoryRemoveRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = consume_item(
        db,
        user_id=current_user.id,
        item_name=payload.item_name,
        quantity=payload.quantity,
    )
    db.commit()
    return schemas.InventoryRemoveResponse(
        message=f'Successfully removed "{result.item_name}" from inventory',
        item_name=result.item_name,
        consumed=result.consumed,
        allocations=[schemas.BatchAllocationResponse.model_validate(allocation) for allocation in result.allocations],
    )


@router.get("/inventory/{inventory_id}/transactions", response_model=List[schemas.InventoryTransactionResponse])
def get_inventory_transactions(
    inventory_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    batch = get_user_batch(db, user_id=current_user.id, batch_id=inventory_id)
    return ledger.list_entries(db, batch.id)
