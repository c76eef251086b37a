"""Persistence of the authenticated identity across restarts."""
from __future__ import annotations

import logging
from typing import Iterable

from pydantic import ValidationError

from jobdesk.core.schema import User
from jobdesk.infrastructure import KeyValueStore

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "current_user"


class SessionStore:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._user = self._load()

    def _load(self) -> User | None:
        raw = self._store.read(CURRENT_USER_KEY)
        if raw is None:
            return None
        try:
            return User.model_validate(raw)
        except ValidationError:
            logger.warning("Ignoring malformed persisted session")
            return None

    def current(self) -> User | None:
        return self._user

    def login(self, user: User) -> None:
        self._user = user
        self._store.write(CURRENT_USER_KEY, user.to_wire())

    def logout(self) -> None:
        self._user = None
        self._store.remove(CURRENT_USER_KEY)

    def refresh(self, users: Iterable[User]) -> None:
        """Swap the stored identity for its latest roster record, if any."""

        if self._user is None:
            return
        fresh = next((user for user in users if user.email == self._user.email), None)
        if fresh is not None and fresh != self._user:
            self.login(fresh)
