from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal


QuantityValue = condecimal(max_digits=14, decimal_places=3)


class CategoryResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ItemResponse(BaseModel):
    id: int
    name: str
    barcode: Optional[str] = None
    category_id: int
    category_name: Optional[str] = None


class InventoryRecordResponse(BaseModel):
    id: int
    item_id: int
    item_name: str
    category_name: Optional[str] = None
    purchase_date: Optional[date] = None
    expiry_date: Optional[date] = None
    initial_quantity: QuantityValue
    remaining_quantity: QuantityValue
    unit: str
    location: Optional[str] = None


class InventoryAddRequest(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=200)
    category_id: int
    initial_quantity: Decimal
    unit: str = Field(..., min_length=1, max_length=50)
    purchase_date: Optional[date] = None
    expiry_date: Optional[date] = None
    location: Optional[str] = Field(default=None, max_length=100)


class InventoryAddResponse(BaseModel):
    message: str
    inventory_id: int
    item_id: int


class InventoryRemoveRequest(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=200)
    quantity: Optional[Decimal] = Field(default=None, description="Omit to remove every batch of the item.")


class BatchAllocationResponse(BaseModel):
    batch_id: int
    quantity: QuantityValue
    remaining_after: QuantityValue
    depleted: bool

    model_config = ConfigDict(from_attributes=True)


class InventoryRemoveResponse(BaseModel):
    message: str
    item_name: str
    consumed: QuantityValue
    allocations: List[BatchAllocationResponse]


class InventoryTransactionResponse(BaseModel):
    id: int
    inventory_id: int
    transaction_type: str
    quantity_changed: QuantityValue
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RestockAlertCreate(BaseModel):
    item_id: int
    min_quantity: Decimal


class RestockAlertSetResponse(BaseModel):
    message: str
    alert_id: int
    item_id: int
    min_quantity: QuantityValue
    alert_enabled: bool


class RestockAlertResponse(BaseModel):
    alert_id: int
    item_id: int
    item_name: str
    min_quantity: QuantityValue
    alert_enabled: bool
    total_remaining_quantity: QuantityValue
    unit: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ExpiryAlertResponse(BaseModel):
    inventory_id: int
    item_id: int
    item_name: str
    expiry_date: date
    remaining_quantity: QuantityValue
    unit: str
    days_until_expiry: int

    model_config = ConfigDict(from_attributes=True)
