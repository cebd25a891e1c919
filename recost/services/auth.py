"""
Mock authentication.

There is no identity provider behind this: the fixed administrator always
exists, sub-users live in the key-value store, and "Sign in with Google" is
a coin flip. The session is a single persisted current-user record.
"""

import asyncio
import json
import random
import uuid
from typing import List, Optional
from loguru import logger
from .storage.kv_store import KeyValueStoreBase, CURRENT_USER_KEY, USERS_KEY
from ..core.errors import PermissionDeniedError, UnknownUserError
from ..models import User, UserRole

LOGIN_DELAY = 0.8
GOOGLE_LOGIN_DELAY = 1.0

DEFAULT_ADMIN = User(id="admin-1", email="admin@recost.ai", name="Main Administrator", role=UserRole.ADMIN)
GOOGLE_USER = User(id="google-user-1", email="user@gmail.com", name="Google Employee", role=UserRole.USER)


class AuthService:
    def __init__(self, kv: KeyValueStoreBase, latency_scale: float = 1.0):
        self.kv = kv
        self.latency_scale = latency_scale

    async def _simulate_latency(self, seconds: float):
        if self.latency_scale > 0:
            await asyncio.sleep(seconds * self.latency_scale)

    def _start_session(self, user: User) -> User:
        self.kv.set(CURRENT_USER_KEY, user.model_dump_json())
        logger.info("User logged in", user_id=user.id, role=user.role.value)
        return user

    async def login(self, email: str) -> User:
        """
        Log in by email.

        Raises:
            UnknownUserError: if the email matches no known account
        """
        await self._simulate_latency(LOGIN_DELAY)

        if email == DEFAULT_ADMIN.email:
            return self._start_session(DEFAULT_ADMIN)

        found = next((u for u in self.list_sub_users() if u.email == email), None)
        if found:
            return self._start_session(found)

        # Demo convenience: any "admin" address gets an administrator account
        if "admin" in email:
            return self._start_session(User(id=str(uuid.uuid4()), email=email, name="Admin", role=UserRole.ADMIN))

        logger.warning("Login rejected for unknown user", email=email)
        raise UnknownUserError(f"No account for {email}")

    async def login_with_google(self) -> User:
        await self._simulate_latency(GOOGLE_LOGIN_DELAY)
        user = DEFAULT_ADMIN if random.random() > 0.5 else GOOGLE_USER
        return self._start_session(user)

    def logout(self) -> None:
        self.kv.remove(CURRENT_USER_KEY)

    def get_current_user(self) -> Optional[User]:
        stored = self.kv.get(CURRENT_USER_KEY)
        return User.model_validate_json(stored) if stored else None

    # User management (administrators only)

    def list_sub_users(self) -> List[User]:
        stored = self.kv.get(USERS_KEY)
        return [User.model_validate(u) for u in json.loads(stored)] if stored else []

    def create_sub_user(self, actor: User, email: str, name: str) -> User:
        """Create a restricted (USER role) account"""
        if not actor.is_admin:
            raise PermissionDeniedError(f"{actor.email} cannot create users")

        user = User(id=str(uuid.uuid4()), email=email, name=name, role=UserRole.USER)
        users = self.list_sub_users() + [user]
        self.kv.set(USERS_KEY, json.dumps([u.model_dump(mode="json") for u in users]))
        logger.info("Sub-user created", user_id=user.id, created_by=actor.id)
        return user

    def remove_sub_user(self, actor: User, user_id: str) -> bool:
        """
        Delete a sub-user.

        Returns:
            True if a user was removed, False if the id was unknown
        """
        if not actor.is_admin:
            raise PermissionDeniedError(f"{actor.email} cannot remove users")

        users = self.list_sub_users()
        remaining = [u for u in users if u.id != user_id]
        self.kv.set(USERS_KEY, json.dumps([u.model_dump(mode="json") for u in remaining]))
        return len(remaining) < len(users)
