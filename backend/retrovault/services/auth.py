"""Account registration and credential verification."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional

import anyio
import bcrypt
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ..config import get_settings
from ..errors import ConflictError, ValidationError
from ..logging_utils import get_logger
from ..repositories import UserRepository
from ..schemas import MIN_PASSWORD_LENGTH, SignupRequest, UserPublic

logger = get_logger("services.auth")

# bcrypt only considers the first 72 bytes of a password.
BCRYPT_MAX_BYTES = 72


def _trim(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""


def _encode_password(password: str) -> bytes:
    return password.encode("utf8")[:BCRYPT_MAX_BYTES]


def _hash_password_sync(password: str, rounds: int) -> str:
    return bcrypt.hashpw(_encode_password(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def _check_password_sync(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode_password(password), password_hash.encode("ascii"))
    except ValueError:
        logger.warning("Stored password hash is malformed; rejecting credentials.")
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Checked when the email is unknown so both failure paths cost one bcrypt round.
    return _hash_password_sync("retrovault-dummy-password", get_settings().bcrypt_rounds)


async def hash_password(password: str) -> str:
    """Hash a password with bcrypt using the configured cost factor."""
    rounds = get_settings().bcrypt_rounds
    return await anyio.to_thread.run_sync(_hash_password_sync, password, rounds)


async def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison of a password against a stored bcrypt hash."""
    return await anyio.to_thread.run_sync(_check_password_sync, password, password_hash)


def to_public_user(document: dict[str, Any]) -> UserPublic:
    return UserPublic(id=document["id"], name=document.get("name"), email=document["email"])


async def register_user(database: AsyncIOMotorDatabase, payload: SignupRequest) -> UserPublic:
    """Create an account after validating the signup payload."""
    name = _trim(payload.name)
    email = _trim(payload.email)
    password = payload.password or ""
    if not name or not email or not password:
        raise ValidationError("Name, email, and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    repository = UserRepository(database)
    if await repository.find_by_email(email):
        logger.info("Signup rejected: email already registered.")
        raise ConflictError("User with this email already exists")

    password_hash = await hash_password(password)
    try:
        document = await repository.create(email=email, password_hash=password_hash, name=name)
    except DuplicateKeyError as error:
        raise ConflictError("User with this email already exists") from error
    return to_public_user(document)


async def authenticate(
    database: AsyncIOMotorDatabase,
    email: Optional[str],
    password: Optional[str],
) -> Optional[UserPublic]:
    """Return the matching user, or None for any credential failure."""
    email = _trim(email)
    if not email or not password:
        return None

    repository = UserRepository(database)
    document = await repository.find_by_email(email)
    if not document or not document.get("password_hash"):
        await verify_password(password, _dummy_hash())
        return None

    if not await verify_password(password, document["password_hash"]):
        return None
    return to_public_user(document)


async def fetch_user(database: AsyncIOMotorDatabase, user_id: str) -> Optional[UserPublic]:
    repository = UserRepository(database)
    document = await repository.find_by_id(user_id)
    return to_public_user(document) if document else None
