from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pantry.db import Base
from pantry.inventory.service import add_stock, find_item
from pantry.models import Category, Recipe, RecipeIngredient, User
from pantry.recipes.service import get_available_recipes


def create_session():
    engine = create_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)()


def create_household(db):
    user = User(name="Household", email="household@pantry.local", password_hash="x")
    category = Category(name="Baking")
    db.add_all([user, category])
    db.flush()
    return user, category


def stock(db, user, category, name, quantity, unit):
    return add_stock(
        db,
        user_id=user.id,
        item_name=name,
        category_id=category.id,
        quantity=Decimal(quantity),
        unit=unit,
    )


def create_recipe(db, name, ingredients):
    recipe = Recipe(name=name, description=f"{name} description")
    for item, quantity, unit in ingredients:
        recipe.ingredients.append(RecipeIngredient(item_id=item.id, quantity_needed=Decimal(quantity), unit=unit))
    db.add(recipe)
    db.flush()
    return recipe


def test_recipe_is_available_when_batches_of_matching_unit_cover_it():
    db = create_session()
    user, category = create_household(db)
    stock(db, user, category, "Flour", "300", "g")
    stock(db, user, category, "Flour", "300", "g")
    stock(db, user, category, "Eggs", "2", "pcs")
    flour = find_item(db, user_id=user.id, item_name="Flour")
    eggs = find_item(db, user_id=user.id, item_name="Eggs")
    pancakes = create_recipe(db, "Pancakes", [(flour, "500", "g"), (eggs, "2", "pcs")])
    create_recipe(db, "Omelette", [(eggs, "3", "pcs")])
    db.commit()

    available = get_available_recipes(db, user_id=user.id)

    assert [(r.recipe_id, r.recipe_name) for r in available] == [(pancakes.id, "Pancakes")]


def test_mismatched_units_never_satisfy_an_ingredient():
    db = create_session()
    user, category = create_household(db)
    stock(db, user, category, "Milk", "5", "l")
    milk = find_item(db, user_id=user.id, item_name="Milk")
    create_recipe(db, "Custard", [(milk, "500", "ml")])
    db.commit()

    assert get_available_recipes(db, user_id=user.id) == []


def test_ingredient_without_unit_accepts_any_stock():
    db = create_session()
    user, category = create_household(db)
    stock(db, user, category, "Salt", "1", "kg")
    salt = find_item(db, user_id=user.id, item_name="Salt")
    create_recipe(db, "Brine", [(salt, "1", None)])
    db.commit()

    assert [r.recipe_name for r in get_available_recipes(db, user_id=user.id)] == ["Brine"]


def test_recipes_using_another_households_items_are_not_listed():
    db = create_session()
    user, category = create_household(db)
    other = User(name="Neighbour", email="neighbour@pantry.local", password_hash="x")
    db.add(other)
    db.flush()
    stock(db, other, category, "Sugar", "1", "kg")
    sugar = find_item(db, user_id=other.id, item_name="Sugar")
    create_recipe(db, "Syrup", [(sugar, "1", "kg")])
    db.commit()

    assert get_available_recipes(db, user_id=user.id) == []
    assert [r.recipe_name for r in get_available_recipes(db, user_id=other.id)] == ["Syrup"]
