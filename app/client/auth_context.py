"""Live identity state for the portal client."""

from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog

from app.client.portal_client import LoginOutcome, PortalClient
from app.client.session_store import SessionIdentity, SessionStore
from app.config import settings
from app.core.exceptions import StorageUnavailableException
from app.core.messages import get_message

logger = structlog.get_logger(__name__)


class AuthEvent(str, Enum):
    """Changes broadcast to subscribers such as route guards."""

    IDENTITY_LOADED = "identity_loaded"
    IDENTITY_CLEARED = "identity_cleared"
    LOADING_CHANGED = "loading_changed"


AuthListener = Callable[[AuthEvent], None]


class AuthContext:
    """
    Holds the logged-in profile and whether it is still being loaded.

    `is_loading` starts out True: until `restore()` has run, nobody knows
    whether the stored marker still points at a live account.
    """

    def __init__(
        self,
        session_store: SessionStore,
        client: PortalClient,
        locale: str | None = None,
    ):
        self.session_store = session_store
        self.client = client
        self.locale = locale or getattr(client, "locale", None) or settings.default_locale
        self.user: dict[str, Any] | None = None
        self.is_loading = True
        self.error: Exception | None = None
        self._listeners: list[AuthListener] = []
        # Bumped by login/logout so a slow restore cannot undo them.
        self._generation = 0

    @property
    def identity(self) -> SessionIdentity | None:
        """Identity of the loaded profile, if any."""
        if self.user is None:
            return None
        return SessionIdentity.from_profile(self.user)

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns the function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def _set_loading(self, value: bool) -> None:
        if self.is_loading != value:
            self.is_loading = value
            self._emit(AuthEvent.LOADING_CHANGED)

    def _set_user(self, profile: dict[str, Any]) -> None:
        self.user = profile
        self.error = None
        self._emit(AuthEvent.IDENTITY_LOADED)

    def _clear_user(self) -> None:
        had_user = self.user is not None
        self.user = None
        if had_user:
            self._emit(AuthEvent.IDENTITY_CLEARED)

    async def restore(self) -> None:
        """
        Re-hydrate the profile behind the stored marker.

        A marker whose account is gone, or that cannot be checked because the
        portal is unreachable, is cleared: restore never grants access it
        could not confirm.
        """
        generation = self._generation
        self._set_loading(True)
        try:
            marker = self.session_store.read()
            if marker is None:
                return

            try:
                profile = await self.client.get_user_profile(marker.user_id)
            except StorageUnavailableException as e:
                logger.warning("session_restore_unavailable", user_id=marker.user_id)
                self.error = e
                profile = None

            if generation != self._generation:
                logger.info("session_restore_superseded", user_id=marker.user_id)
                return

            if profile:
                self._set_user(profile)
                logger.info("session_restored", user_id=marker.user_id)
            else:
                self.session_store.clear()
                self._clear_user()
                logger.info("session_discarded", user_id=marker.user_id)
        finally:
            self._set_loading(False)

    async def sign_in(
        self,
        identifier: str,
        password: str | None = None,
        is_admin: bool = False,
    ) -> LoginOutcome:
        """
        Submit a login form and adopt the profile on success.

        Args:
            identifier: Email or medical ID
            password: Admin password
            is_admin: Whether this is the administrator form

        Returns:
            The endpoint outcome
        """
        if is_admin:
            outcome = await self.client.authenticate_admin(identifier, password or "")
        else:
            outcome = await self.client.authenticate_user(identifier)

        if not outcome.success or not outcome.user:
            return outcome
        if is_admin and not outcome.user.get("is_admin"):
            return LoginOutcome(success=False, error=get_message("not_an_admin", self.locale))

        self.login(outcome.user)
        return outcome

    def login(self, profile: dict[str, Any]) -> None:
        """Adopt a freshly authenticated profile and persist its marker."""
        self._generation += 1
        self.session_store.write(SessionIdentity.from_profile(profile))
        self._set_user(profile)

    def logout(self) -> None:
        """Forget the profile and remove the marker."""
        self._generation += 1
        self.session_store.clear()
        self.error = None
        self._clear_user()

    async def refresh(self) -> None:
        """Reload the current profile; logs out when the account is gone."""
        if self.user is None:
            return

        generation = self._generation
        user_id = str(self.user["id"])
        try:
            profile = await self.client.get_user_profile(user_id)
        except StorageUnavailableException as e:
            logger.warning("profile_refresh_failed", user_id=user_id)
            self.error = e
            return

        if generation != self._generation:
            return
        if profile:
            self._set_user(profile)
        else:
            self.logout()
