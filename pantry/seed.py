import logging
import os

from sqlalchemy.orm import Session

from .auth import hash_password
from .db import SessionLocal, init_db
from .models import Category, User

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "Baking",
    "Beverages",
    "Canned Goods",
    "Condiments",
    "Dairy",
    "Frozen",
    "Grains & Pasta",
    "Meat & Fish",
    "Produce",
    "Snacks",
    "Spices",
]

DEMO_USER_EMAIL = "demo@pantry.local"


def _seed_categories(db: Session) -> list[Category]:
    existing = {name for (name,) in db.query(Category.name).all()}
    created: list[Category] = []
    for name in DEFAULT_CATEGORIES:
        if name in existing:
            continue
        category = Category(name=name)
        db.add(category)
        created.append(category)
    db.flush()
    return created


def _get_or_create_demo_user(db: Session) -> User:
    user = db.query(User).filter(User.email == DEMO_USER_EMAIL).first()
    if user:
        return user

    user = User(
        name="Demo Household",
        email=DEMO_USER_EMAIL,
        password_hash=hash_password(os.getenv("SEED_DEMO_PASSWORD", "password123")),
        is_active=True,
    )
    db.add(user)
    db.flush()
    return user


def run_seed(create_tables: bool = True) -> None:
    if create_tables:
        init_db()

    db: Session = SessionLocal()
    try:
        created = _seed_categories(db)
        logger.info("Seeded %s categories", len(created))

        if os.getenv("SEED_DEMO_USER", "0") in {"1", "true", "TRUE", "yes", "YES"}:
            user = _get_or_create_demo_user(db)
            logger.info("Demo user ready: id=%s email=%s", user.id, user.email)

        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_seed()
