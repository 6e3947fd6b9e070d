import logging
from typing import List, Optional

from sqlalchemy.orm import Session

import models
from database import Category, Transaction

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "Food", "color": "#FF6B6B"},
    {"name": "Transport", "color": "#4ECDC4"},
    {"name": "Entertainment", "color": "#45B7D1"},
    {"name": "Salary", "color": "#96CEB4"},
    {"name": "Other", "color": "#FFEAA7"},
]


def to_transaction_model(row: Transaction) -> models.Transaction:
    return models.Transaction.model_validate(row)


def to_category_model(row: Category) -> models.Category:
    return models.Category.model_validate(row)


# --- Transactions ---

def create_transaction(db: Session, payload: models.TransactionCreate) -> Transaction:
    """Record a new income or expense."""
    txn = Transaction(
        amount=payload.amount,
        type=payload.type,
        category_id=payload.category_id,
        description=payload.description or "",
        date=payload.date,
    )
    db.add(txn)
    db.commit()
    db.refresh(txn)
    logger.info("Recorded %s #%s of %.2f", txn.type, txn.id, txn.amount)
    return txn


def get_transaction(db: Session, transaction_id: int) -> Optional[Transaction]:
    return db.query(Transaction).filter(Transaction.id == transaction_id).first()


def list_transactions(db: Session) -> List[Transaction]:
    """All transactions, most recently created first."""
    return db.query(Transaction).order_by(Transaction.created_at.desc(), Transaction.id.desc()).all()


def update_transaction(db: Session, transaction_id: int, payload: models.TransactionUpdate) -> Optional[Transaction]:
    txn = get_transaction(db, transaction_id)
    if not txn:
        return None
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field in ("amount", "type", "date") and value is None:
            continue
        setattr(txn, field, value)
    db.commit()
    db.refresh(txn)
    return txn


def delete_transaction(db: Session, transaction_id: int) -> bool:
    txn = get_transaction(db, transaction_id)
    if not txn:
        return False
    db.delete(txn)
    db.commit()
    logger.info("Deleted transaction #%s", transaction_id)
    return True


# --- Categories ---

def create_category(db: Session, payload: models.CategoryCreate) -> Category:
    category = Category(name=payload.name, color=payload.color)
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Created category %r (#%s)", category.name, category.id)
    return category


def get_category(db: Session, category_id: int) -> Optional[Category]:
    return db.query(Category).filter(Category.id == category_id).first()


def list_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.id).all()


def update_category(db: Session, category_id: int, payload: models.CategoryUpdate) -> Optional[Category]:
    category = get_category(db, category_id)
    if not category:
        return None
    if payload.name is not None:
        category.name = payload.name
    if payload.color is not None:
        category.color = payload.color
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: int) -> bool:
    """Remove a category; transactions that referenced it are left as they are."""
    category = get_category(db, category_id)
    if not category:
        return False
    db.delete(category)
    db.commit()
    logger.info("Deleted category #%s", category_id)
    return True


def seed_default_categories(db: Session) -> int:
    """Insert the starter categories when the table is empty."""
    if db.query(Category).first():
        return 0
    for entry in DEFAULT_CATEGORIES:
        db.add(Category(**entry))
    db.commit()
    return len(DEFAULT_CATEGORIES)


# --- Snapshots for the report functions ---

def load_snapshot(db: Session):
    """Return (transactions, categories) as plain models, detached from the session."""
    transactions = [to_transaction_model(t) for t in list_transactions(db)]
    categories = [to_category_model(c) for c in list_categories(db)]
    return transactions, categories
