import logging
from typing import Optional

import bcrypt
from sqlalchemy.orm import Session

from database import User

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_user(db: Session, username: str, password: str) -> Optional[User]:
    """Return the user when the bcrypt hash matches, else None."""
    user = db.query(User).filter(User.username == username).first()
    if user and bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8")):
        return user
    logger.warning("Failed login attempt for user %s", username)
    return None
