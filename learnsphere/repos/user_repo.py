from __future__ import annotations

import logging
from typing import Protocol

from learnsphere.db.kv_store import KeyValueStore, kv_store, read_json, write_json
from learnsphere.models.user import User

logger = logging.getLogger(__name__)

USERS_KEY = "learnsphere_users"


class UserAlreadyExistsError(Exception):
    pass


class UserRepo(Protocol):
    async def list_all(self) -> list[User]: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def add(self, user: User) -> None: ...


def _decode(raw: dict) -> User | None:
    email = str(raw.get("email") or "").strip().lower()
    if not email:
        return None
    return User(
        id=str(raw.get("id") or email),
        name=str(raw.get("name") or "Student"),
        email=email,
        role=raw.get("role"),
    )


class KVUserRepo:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def list_all(self) -> list[User]:
        rows = await read_json(self._store, USERS_KEY, [])
        users: list[User] = []
        seen: set[str] = set()
        for raw in rows:
            user = _decode(raw) if isinstance(raw, dict) else None
            if user is None:
                logger.warning("Skipping stored user without an email: %r", raw)
                continue
            if user.email in seen:
                continue
            seen.add(user.email)
            users.append(user)
        return users

    async def get_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        for user in await self.list_all():
            if user.email == email:
                return user
        return None

    async def add(self, user: User) -> None:
        rows = await read_json(self._store, USERS_KEY, [])
        if any(
            isinstance(r, dict) and str(r.get("email", "")).lower() == user.email
            for r in rows
        ):
            raise UserAlreadyExistsError(user.email)
        rows.append(
            {"id": user.id, "name": user.name, "email": user.email, "role": user.role}
        )
        await write_json(self._store, USERS_KEY, rows)
        logger.info("Registered user email=%s role=%s", user.email, user.role)


user_repo: UserRepo = KVUserRepo(kv_store)
