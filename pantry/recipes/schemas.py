from typing import Optional

from pydantic import BaseModel, ConfigDict


class AvailableRecipeResponse(BaseModel):
    recipe_id: int
    recipe_name: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
