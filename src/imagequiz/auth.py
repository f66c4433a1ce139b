import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .database import transaction
from .errors import StorageError, Unauthorized, ValidationError
from .models import User

logger = logging.getLogger("imagequiz.auth")

bearer_scheme = HTTPBearer(auto_error=False)


def _require_secret() -> str:
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET is not set in environment variables")
    return settings.JWT_SECRET


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user: User, expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.JWT_EXPIRE_MINUTES
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, _require_secret(), algorithm=settings.JWT_ALG)


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, _require_secret(), algorithms=[settings.JWT_ALG])
    except jwt.PyJWTError:
        return None


class UserStore:
    """Admin accounts."""

    def get_by_username(self, username: str) -> Optional[User]:
        with transaction() as conn:
            row = conn.execute(
                "SELECT id, username, password_hash FROM users WHERE username = ?",
                (username,),
            ).fetchone()
        return User(**dict(row)) if row else None

    def get(self, user_id: int) -> Optional[User]:
        with transaction() as conn:
            row = conn.execute(
                "SELECT id, username, password_hash FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()
        return User(**dict(row)) if row else None

    def register(self, username: str, password: str) -> User:
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required.")
        if len(password or "") < settings.MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters."
            )
        if len(password.encode("utf-8")) > 72:
            raise ValidationError("Password must be at most 72 bytes.")

        password_hash = hash_password(password)
        try:
            with transaction() as conn:
                cursor = conn.execute(
                    "INSERT INTO users (username, password_hash) VALUES (?, ?)",
                    (username, password_hash),
                )
        except StorageError as e:
            if isinstance(e.__cause__, sqlite3.IntegrityError):
                raise ValidationError("Username already exists.") from e
            raise
        logger.info(f"Registered user {username}")
        return User(id=cursor.lastrowid, username=username, password_hash=password_hash)

    def authenticate(self, username: str, password: str) -> User:
        user = self.get_by_username((username or "").strip())
        if user is None or not verify_password(password or "", user.password_hash):
            logger.warning(f"Failed login for '{username}'")
            raise Unauthorized("Invalid credentials")
        return user

    def ensure_admin(self, username: str, password: str) -> bool:
        """Creates the bootstrap admin account if it does not exist yet."""
        if not username or not password:
            return False
        if self.get_by_username(username) is not None:
            return False
        self.register(username, password)
        logger.info(f"Admin user '{username}' created")
        return True


user_store = UserStore()


# --- Dependencies ---
def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    if credentials is None:
        raise Unauthorized("No token")
    payload = decode_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise Unauthorized("Invalid token")
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token")
    user = user_store.get(user_id)
    if user is None:
        raise Unauthorized("Invalid token")
    return user
