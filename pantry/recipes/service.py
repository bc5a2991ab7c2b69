from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session, selectinload

from pantry.models import InventoryBatch, Item, Recipe, RecipeIngredient


@dataclass
class AvailableRecipe:
    recipe_id: int
    recipe_name: str
    description: str | None


def _stock_by_item_unit(db: Session, user_id: int) -> dict[int, dict[str, Decimal]]:
    rows = (
        db.query(InventoryBatch.item_id, InventoryBatch.unit, InventoryBatch.remaining_quantity)
        .join(Item, InventoryBatch.item_id == Item.id)
        .filter(Item.user_id == user_id, InventoryBatch.remaining_quantity > 0)
        .all()
    )
    stock: dict[int, dict[str, Decimal]] = defaultdict(lambda: defaultdict(Decimal))
    for item_id, unit, remaining in rows:
        stock[item_id][unit] += Decimal(remaining)
    return stock


def _is_covered(ingredient: RecipeIngredient, stock: dict[int, dict[str, Decimal]]) -> bool:
    by_unit = stock.get(ingredient.item_id)
    if not by_unit:
        return False
    needed = Decimal(ingredient.quantity_needed)
    if ingredient.unit is None:
        # No unit on the recipe side: any stocked unit counts.
        return sum(by_unit.values(), Decimal("0")) >= needed
    return by_unit.get(ingredient.unit, Decimal("0")) >= needed


def get_available_recipes(db: Session, *, user_id: int) -> list[AvailableRecipe]:
    """Recipes whose every ingredient is one of the user's items and is fully in stock.

    Stock is summed across batches of the same unit. Batches stocked in a
    different unit than the recipe asks for never count toward it.
    """
    recipes = (
        db.query(Recipe)
        .options(selectinload(Recipe.ingredients).selectinload(RecipeIngredient.item))
        .order_by(Recipe.name.asc(), Recipe.id.asc())
        .all()
    )
    stock = _stock_by_item_unit(db, user_id)

    available: list[AvailableRecipe] = []
    for recipe in recipes:
        if not recipe.ingredients:
            continue
        if any(ingredient.item is None or ingredient.item.user_id != user_id for ingredient in recipe.ingredients):
            continue
        if all(_is_covered(ingredient, stock) for ingredient in recipe.ingredients):
            available.append(
                AvailableRecipe(recipe_id=recipe.id, recipe_name=recipe.name, description=recipe.description)
            )
    return available
