import logging
import os

from auth import hash_password
from config import setup_logging
from crud import seed_default_categories
from database import init_db, SessionLocal, User

logger = logging.getLogger(__name__)

def seed_users(db, username: str, password: str) -> bool:
    # Check if users exist
    if db.query(User).first():
        logger.info("Users already exist. Skipping user seed.")
        return False

    db.add(User(username=username, password_hash=hash_password(password)))
    db.commit()
    logger.info("Created login for %s.", username)
    return True

def seed():
    init_db()
    db = SessionLocal()
    try:
        added = seed_default_categories(db)
        logger.info("Seeded %d default categories.", added)

        # Login is optional; only create a user when credentials are provided
        username = os.getenv("ADMIN_USERNAME")
        password = os.getenv("ADMIN_PASSWORD")
        if username and password:
            seed_users(db, username, password)
    finally:
        db.close()

if __name__ == "__main__":
    setup_logging()
    seed()
