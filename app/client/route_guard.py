"""Route guard for protected portal views.

The guard decides, for one protected route tree, whether to show the
protected content, a placeholder, or to send the visitor to the login page.
Two mistakes are avoided at once: bouncing a logged-in visitor to the login
page while their profile is still loading, and never bouncing a visitor who
is not logged in.

Decision order, re-run on every storage check, identity change, loading
change and route change:

1. A session marker in storage renders the content, loaded profile or not.
2. A loaded profile renders the content.
3. A profile still loading renders a placeholder.
4. Otherwise a redirect is armed with a grace period (longer on internal
   routes). If rule 1 or 2 holds when the timer fires, the redirect is
   dropped; otherwise it happens exactly once. It can only happen again
   after the visitor has been authenticated and then lost that state.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

from app.client.auth_context import AuthContext, AuthEvent
from app.client.session_store import SessionStore
from app.config import Settings, settings

logger = structlog.get_logger(__name__)


class AccessDecision(str, Enum):
    """What the inputs say about access right now."""

    RENDER = "render"
    WAIT = "wait"
    DENY = "deny"


def decide_access(marker_present: bool, identity_present: bool, loading: bool) -> AccessDecision:
    """
    Pure decision function; the same inputs always give the same answer.

    Args:
        marker_present: A usable session marker is in storage
        identity_present: The live profile is loaded
        loading: The profile load is still in flight

    Returns:
        The access decision
    """
    if marker_present:
        return AccessDecision.RENDER
    if identity_present:
        return AccessDecision.RENDER
    if loading:
        return AccessDecision.WAIT
    return AccessDecision.DENY


class GuardPhase(str, Enum):
    """Where the guard's state machine currently sits."""

    CHECKING_STORAGE = "checking_storage"
    RENDERING_OPTIMISTIC = "rendering_optimistic"
    RENDERING = "rendering"
    AWAITING_LOAD = "awaiting_load"
    REDIRECT_ARMED = "redirect_armed"
    REDIRECTED = "redirected"
    DISPOSED = "disposed"


class GuardView(str, Enum):
    """What the route shows."""

    CONTENT = "content"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class GuardTimings:
    """Redirect grace periods, in seconds."""

    internal_delay: float = 0.5
    entry_delay: float = 0.2
    internal_prefixes: tuple[str, ...] = ("/dashboard", "/admin")

    @classmethod
    def from_settings(cls, config: Settings) -> "GuardTimings":
        return cls(
            internal_delay=config.guard_internal_delay_ms / 1000,
            entry_delay=config.guard_entry_delay_ms / 1000,
            internal_prefixes=config.guard_internal_prefixes,
        )

    def delay_for(self, path: str) -> float:
        """Grace period for a route; internal routes see frequent transitions."""
        if any(path == prefix or path.startswith(prefix + "/") for prefix in self.internal_prefixes):
            return self.internal_delay
        return self.entry_delay


class RouteGuard:
    """
    Guard for one mounted protected route tree.

    Must be created and driven from inside a running event loop; the
    redirect timer is scheduled on it. Call `dispose()` on unmount.
    """

    def __init__(
        self,
        context: AuthContext,
        session_store: SessionStore,
        navigate: Callable[[str], None],
        path: str,
        require_admin: bool = False,
        login_path: str | None = None,
        timings: GuardTimings | None = None,
    ):
        self.context = context
        self.session_store = session_store
        self.navigate = navigate
        self.path = path
        self.require_admin = require_admin
        self.login_path = login_path or (
            settings.admin_login_path if require_admin else settings.user_login_path
        )
        self.timings = timings or GuardTimings.from_settings(settings)

        self.phase = GuardPhase.CHECKING_STORAGE
        self.redirect_count = 0
        self._timer: asyncio.TimerHandle | None = None
        self._redirected = False
        self._unsubscribe = context.subscribe(self._on_auth_event)

        self.storage_checked()

    @property
    def view(self) -> GuardView:
        if self.phase in (GuardPhase.RENDERING, GuardPhase.RENDERING_OPTIMISTIC):
            return GuardView.CONTENT
        return GuardView.PLACEHOLDER

    @property
    def redirect_armed(self) -> bool:
        return self._timer is not None

    def _marker_grants(self) -> bool:
        marker = self.session_store.read()
        return marker is not None and (not self.require_admin or marker.is_admin)

    def _identity_grants(self) -> bool:
        identity = self.context.identity
        return identity is not None and (not self.require_admin or identity.is_admin)

    def evaluate(self) -> AccessDecision:
        """Run the decision function against the current inputs."""
        return decide_access(
            marker_present=self._marker_grants(),
            identity_present=self._identity_grants(),
            loading=self.context.is_loading,
        )

    # Events

    def storage_checked(self) -> None:
        self._reconcile()

    def identity_loaded(self) -> None:
        self._reconcile()

    def identity_cleared(self) -> None:
        if self.phase is not GuardPhase.DISPOSED:
            self.phase = GuardPhase.CHECKING_STORAGE
        self._reconcile()

    def loading_changed(self) -> None:
        self._reconcile()

    def route_changed(self, path: str) -> None:
        self.path = path
        self._reconcile()

    def _on_auth_event(self, event: AuthEvent) -> None:
        if event is AuthEvent.IDENTITY_LOADED:
            self.identity_loaded()
        elif event is AuthEvent.IDENTITY_CLEARED:
            self.identity_cleared()
        else:
            self.loading_changed()

    # State machine

    def _reconcile(self) -> None:
        if self.phase is GuardPhase.DISPOSED:
            return

        decision = self.evaluate()

        if decision is AccessDecision.RENDER:
            self._cancel_timer()
            self._redirected = False
            if self._identity_grants():
                self.phase = GuardPhase.RENDERING
            else:
                self.phase = GuardPhase.RENDERING_OPTIMISTIC
        elif decision is AccessDecision.WAIT:
            self._cancel_timer()
            if not self._redirected:
                self.phase = GuardPhase.AWAITING_LOAD
        elif self._redirected:
            self.phase = GuardPhase.REDIRECTED
        else:
            if self._timer is None:
                self._arm_redirect()
            self.phase = GuardPhase.REDIRECT_ARMED

    def _arm_redirect(self) -> None:
        delay = self.timings.delay_for(self.path)
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._fire_redirect)
        logger.info("guard_redirect_armed", path=self.path, delay=delay)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.info("guard_redirect_cancelled", path=self.path)

    def _fire_redirect(self) -> None:
        self._timer = None
        if self.phase is GuardPhase.DISPOSED or self._redirected:
            return

        # Last look before committing.
        if self._marker_grants() or self._identity_grants():
            self._reconcile()
            return

        self._redirected = True
        self.redirect_count += 1
        self.phase = GuardPhase.REDIRECTED
        logger.info("guard_redirected", path=self.path, target=self.login_path)
        self.navigate(self.login_path)

    def dispose(self) -> None:
        """Tear down: cancel any pending redirect and stop listening."""
        self._cancel_timer()
        self._unsubscribe()
        self.phase = GuardPhase.DISPOSED
