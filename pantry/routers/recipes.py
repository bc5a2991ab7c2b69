from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pantry.auth import get_current_user
from pantry.db import get_db
from pantry.models import User
from pantry.recipes import schemas
from pantry.recipes.service import get_available_recipes


router = APIRouter(prefix="/api/recipes", tags=["recipes"])


@router.get("/available", response_model=List[schemas.AvailableRecipeResponse])
def list_available_recipes(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_available_recipes(db, user_id=current_user.id)
