"""
Password hashing, access tokens, and the access-token gate for profile routes.
"""
import logging
import secrets
from typing import Optional

import bcrypt
from fastapi import Depends, Header

from database import Store, get_store
from errors import AuthError
from schemas import User

logger = logging.getLogger(__name__)

ACCESS_TOKEN_BYTES = 128


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if the password matches. Never raises on mismatch."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash, or a password over bcrypt's 72 byte limit
        return False


def generate_access_token() -> str:
    """128 random bytes, hex-encoded."""
    return secrets.token_bytes(ACCESS_TOKEN_BYTES).hex()


def authenticate_user(
    authorization: Optional[str] = Header(None),
    store: Store = Depends(get_store),
) -> User:
    """
    Resolve the raw token in the Authorization header to its user.

    Unknown or missing tokens are a 401. A store failure during the lookup is
    a 400 so clients can tell it apart from being logged out.
    """
    if not authorization:
        raise AuthError("Please log in")
    # StoreError propagates with its own 400 status
    user = store.find_user_by_token(authorization)
    if user is None:
        logger.info("Rejected unknown access token")
        raise AuthError("Please log in")
    return user
