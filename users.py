"""
User registration, login, and program-progress updates.
"""
import logging
from typing import Optional

from auth import generate_access_token, hash_password, verify_password
from database import Store
from errors import AuthError, NotFoundError, StoreError, ValidationError
from schemas import ActiveProgram, ProgramProgress, User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt ignores/rejects anything longer
CREDENTIALS_MISMATCH = "Credentials didn't match"


def new_user(username: str, password: str) -> User:
    """Build an unsaved user with a fresh token and empty progress."""
    return User(
        username=username,
        password_hash=hash_password(password),
        access_token=generate_access_token(),
        programs=ProgramProgress(),
    )


def register(store: Store, username: str, password: str) -> User:
    if not username or not username.strip():
        raise ValidationError("Username is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")

    user = store.insert_user(new_user(username, password))
    logger.info("Registered user %s", user.username)
    return user


def login(store: Store, username: str, password: str) -> User:
    try:
        user = store.find_user_by_username(username)
    except StoreError as exc:
        raise StoreError(exc.message, status_code=500) from exc

    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", username)
        raise AuthError(CREDENTIALS_MISMATCH, status_code=400)
    return user


def login_payload(user: User) -> dict:
    active = user.programs.active_program
    return {
        "username": user.username,
        "id": user.id,
        "accessToken": user.access_token,
        "activeProgram": active.category,
        "day": active.day,
        "startDate": active.start_date,
        "completedPrograms": list(user.programs.completed_programs),
    }


def get_progress(store: Store, user_id: str) -> ProgramProgress:
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user.programs


def update_active_program(
    store: Store,
    username: str,
    category: Optional[str],
    day: Optional[int],
    start_date: Optional[str],
) -> User:
    active = ActiveProgram(category=category, day=day, start_date=start_date)
    user = store.set_active_program(username, active)
    if user is None:
        raise NotFoundError("User not found")
    return user


def add_completed_program(store: Store, username: str, program_name: str) -> User:
    user = store.push_completed_program(username, program_name)
    if user is None:
        raise NotFoundError("User not found")
    return user


def public_user(user: User) -> dict:
    """User document without credentials."""
    return {
        "id": user.id,
        "username": user.username,
        "programs": user.programs.model_dump(by_alias=True),
    }
