# app/auth.py
"""
Session identity for contributors.

``AuthService`` remembers who is logged in by writing the identity to
the blob store, so a restart keeps the session. Credential checking is
deliberately trivial: any non-blank username/password pair is accepted
and granted the ``admin`` role. Replace ``_check_credentials`` to plug
in a real check; nothing else depends on how it decides.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from .catalog.schemas import UserIdentity
from .storage import AUTH_USER_KEY, BlobStore


logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, blob_store: BlobStore) -> None:
        self._blob_store = blob_store
        self._current: Optional[UserIdentity] = None
        self._load_user()

    def _load_user(self) -> None:
        stored = self._blob_store.get(AUTH_USER_KEY)
        if not stored:
            return
        try:
            self._current = UserIdentity.model_validate_json(stored)
        except ValidationError as exc:
            logger.warning("Ignoring unreadable stored identity: %s", exc)
            self._current = None

    def _save_user(self, identity: Optional[UserIdentity]) -> None:
        if identity is not None:
            self._blob_store.set(AUTH_USER_KEY, identity.model_dump_json())
        else:
            self._blob_store.remove(AUTH_USER_KEY)

    @staticmethod
    def _check_credentials(username: str, password: str) -> bool:
        return bool(username.strip() and password.strip())

    def login(self, username: str, password: str) -> bool:
        """Start a session for ``username``. Returns ``False`` if refused.

        The session only changes once the identity has been stored; a
        ``StorageError`` leaves the previous session in place.
        """
        if not self._check_credentials(username or "", password or ""):
            logger.warning("Login refused: username and password are required")
            return False
        identity = UserIdentity(name=username.strip(), role="admin")
        self._save_user(identity)
        self._current = identity
        logger.info("User logged in (name=%r)", identity.name)
        return True

    def logout(self) -> None:
        self._save_user(None)
        if self._current is not None:
            logger.info("User logged out (name=%r)", self._current.name)
        self._current = None

    def current_identity(self) -> Optional[UserIdentity]:
        return self._current

    def is_logged_in(self) -> bool:
        return self._current is not None

    def is_admin(self) -> bool:
        return self._current is not None and self._current.role == "admin"

    def username(self) -> str:
        return self._current.name if self._current is not None else ""
