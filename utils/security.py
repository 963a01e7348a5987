import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from config.settings import settings
from schemas.auth import TokenPayload

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# ==========================================================
# [Passwords] bcrypt
# ==========================================================
def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.PASSWORD_HASH_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # malformed hash in the DB
        logger.warning("Stored password hash could not be parsed")
        return False


# ==========================================================
# [JWT] HS256, 24h by default
# ==========================================================
def create_token(teacher_id: int, email: str, name: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "teacher_id": teacher_id,
        "email": email,
        "name": name,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRE_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Optional[TokenPayload]:
    try:
        decoded = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.InvalidTokenError as e:
        logger.info("Token verification failed: %s", e)
        return None
    try:
        return TokenPayload.model_validate(decoded)
    except ValueError:
        logger.info("Token payload has an unexpected shape")
        return None


# ==========================================================
# [Validation] signup / login input
# ==========================================================
def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def is_valid_password(password: str) -> bool:
    # at least 8 characters, one letter and one digit
    return (
        len(password) >= 8
        and re.search(r"[a-zA-Z]", password) is not None
        and re.search(r"[0-9]", password) is not None
    )
