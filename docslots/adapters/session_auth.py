"""
Session-backed current-user provider.

The signed-in user id is kept in the OS keyring. When no usable keyring
backend exists the id falls back to a plaintext session file readable only by
the owner.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ..domain.exceptions import AuthenticationError
from ..domain.models import CurrentUser

logger = logging.getLogger(__name__)

KEYRING_SERVICE_NAME = "docslots"
KEYRING_USERNAME = "session"


class SessionAuthProvider:
    """
    Resolves the current user from a stored session.

    login/logout only manage the local session; verifying credentials is the
    job of the external login page that ``login_url`` points to.
    """

    def __init__(
        self,
        login_base_url: str = "/login",
        session_file: Path | None = None,
        use_keyring: bool = True,
    ):
        self.login_base_url = login_base_url
        self.session_file = session_file or Path.home() / ".docslots_session"
        self._keyring_supported = use_keyring
        self._insecure_storage_warning: Optional[str] = None

    @property
    def cache_backend(self) -> str:
        return "keyring" if self._keyring_supported else "file"

    @property
    def insecure_storage_warning(self) -> Optional[str]:
        return self._insecure_storage_warning

    def _handle_keyring_failure(self, reason: str) -> None:
        if self._keyring_supported:
            logger.warning(
                "Secure session storage unavailable (%s). Falling back to %s.",
                reason,
                self.session_file,
            )
        self._keyring_supported = False
        if not self._insecure_storage_warning:
            self._insecure_storage_warning = (
                f"Secure session storage unavailable ({reason}). "
                f"Using plaintext session file at {self.session_file}."
            )

    def _read_session(self) -> Optional[str]:
        if self._keyring_supported:
            try:
                value = keyring.get_password(KEYRING_SERVICE_NAME, KEYRING_USERNAME)
            except KeyringError as exc:
                self._handle_keyring_failure(f"reading session failed: {exc}")
            else:
                if value:
                    return value

        if self.session_file.exists():
            try:
                return self.session_file.read_text(encoding="utf-8").strip() or None
            except OSError as exc:
                logger.warning("Could not read session file %s: %s", self.session_file, exc)
        return None

    def current_user(self) -> CurrentUser:
        user_id = self._read_session()
        if not user_id:
            return CurrentUser.anonymous()
        return CurrentUser.signed_in(user_id)

    def login(self, user_id: str) -> None:
        """
        Store ``user_id`` as the signed-in user.

        Raises:
            AuthenticationError: If the session cannot be stored anywhere
        """
        user_id = user_id.strip()
        if not user_id:
            raise AuthenticationError("A user id is required to sign in.")

        if self._keyring_supported:
            try:
                keyring.set_password(KEYRING_SERVICE_NAME, KEYRING_USERNAME, user_id)
                return
            except KeyringError as exc:
                self._handle_keyring_failure(f"writing session failed: {exc}")

        try:
            self.session_file.parent.mkdir(parents=True, exist_ok=True)
            self.session_file.write_text(user_id, encoding="utf-8")
            self.session_file.chmod(0o600)
        except OSError as exc:
            raise AuthenticationError(f"Could not save session to {self.session_file}: {exc}") from exc

    def logout(self) -> None:
        if self.session_file.exists():
            self.session_file.unlink()
        if self._keyring_supported:
            try:
                keyring.delete_password(KEYRING_SERVICE_NAME, KEYRING_USERNAME)
            except PasswordDeleteError:
                logger.debug("No keyring session to remove")
            except KeyringError as exc:
                logger.warning("Could not remove session from keyring: %s", exc)

    def login_url(self, callback_url: str) -> str:
        return f"{self.login_base_url}?callbackUrl={quote(callback_url, safe='')}"
