"""
Staff account registration.

Passwords are hashed with bcrypt before they reach the database; the plain
text is never stored or logged.
"""

import asyncio
import logging

import bcrypt

from order_desk.database import Database
from order_desk.models import User
from order_desk.schemas import UserRegister
from order_desk.services.errors import InvalidRequest, PersistenceFailure

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "staff"


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash a password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


class StaffAccountService:
    """Creates back-office accounts."""

    def __init__(self, database: Database, hash_rounds: int = 10):
        self.database = database
        self.hash_rounds = hash_rounds

    async def register(self, data: UserRegister) -> User:
        """
        Create a staff account.

        Raises:
            InvalidRequest: username or password missing
            PersistenceFailure: hashing or insert failed (e.g. duplicate username)
        """
        if not data.username or not data.password:
            raise InvalidRequest("username and password required")

        try:
            # bcrypt is CPU-bound; keep it off the event loop
            password_hash = await asyncio.to_thread(
                hash_password, data.password, self.hash_rounds
            )
            async with self.database.session() as session:
                async with session.begin():
                    user = User(
                        username=data.username,
                        email=data.email or None,
                        password_hash=password_hash,
                        role=data.role or DEFAULT_ROLE,
                    )
                    session.add(user)
                    await session.flush()
        except Exception as e:
            logger.exception(f"Registering user {data.username!r} failed: {e}")
            raise PersistenceFailure("Failed to register user") from e

        logger.info(f"Registered {user.role} account {user.username!r} (#{user.id})")
        return user
