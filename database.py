from datetime import datetime
from sqlalchemy import create_engine, Column, Integer, String, Float, Date, DateTime
from sqlalchemy.orm import sessionmaker, declarative_base

from config import DB_URL

# Database Setup
# Default to local SQLite, but allow override for a hosted Postgres
engine = create_engine(DB_URL, connect_args={"check_same_thread": False} if "sqlite" in DB_URL else {})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# --- Models ---

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True)
    password_hash = Column(String) # Store bcrypt hash, not plain text

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    color = Column(String, default="#9CA3AF")
    created_at = Column(DateTime, default=datetime.now)

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Float, nullable=False)        # Always >= 0, sign lives in `type`
    type = Column(String, nullable=False)         # 'expense' or 'income'
    description = Column(String, default="")
    date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    # Plain column, no FK: deleting a category leaves its transactions pointing at a missing id
    category_id = Column(Integer, nullable=True, index=True)

# --- Init DB ---
def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
