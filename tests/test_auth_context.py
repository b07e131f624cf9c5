"""Tests for the client-side auth context."""

import asyncio
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from app.client.auth_context import AuthContext, AuthEvent
from app.client.portal_client import LoginOutcome, PortalClient
from app.client.session_store import MemoryStorage, SessionIdentity, SessionStore
from app.core.exceptions import StorageUnavailableException
from app.core.messages import MESSAGES
from app.main import app


@pytest_asyncio.fixture
async def portal_client(client):
    """Portal client talking to the app in-process, with the test database."""
    async with PortalClient(
        base_url="http://test", transport=ASGITransport(app=app)
    ) as portal:
        yield portal


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(MemoryStorage())


class StubClient:
    """Profile source whose answer is released by the test."""

    def __init__(self, profile=None, error: Exception | None = None):
        self.profile = profile
        self.error = error
        self.release = asyncio.Event()
        self.release.set()

    async def get_user_profile(self, user_id):
        await self.release.wait()
        if self.error:
            raise self.error
        return self.profile


@pytest.mark.asyncio
class TestSignIn:
    """Login forms through the context."""

    async def test_user_sign_in_writes_marker(self, portal_client, store, attendee):
        """Test a successful login stores the marker and loads the profile."""
        context = AuthContext(store, portal_client)
        events = []
        context.subscribe(events.append)

        outcome = await context.sign_in("1234567")

        assert outcome.success is True
        assert context.user["email"] == attendee["email"]
        marker = store.read()
        assert marker.user_id == str(attendee["id"])
        assert marker.is_admin is False
        assert AuthEvent.IDENTITY_LOADED in events

    async def test_failed_sign_in_leaves_state_alone(self, portal_client, store):
        """Test a failed login neither stores a marker nor loads a profile."""
        context = AuthContext(store, portal_client)

        outcome = await context.sign_in("ghost@example.com")

        assert outcome.success is False
        assert outcome.error
        assert context.user is None
        assert store.read() is None

    async def test_admin_sign_in(self, portal_client, store, admin_account, admin_password):
        """Test the administrator form marks the session as admin."""
        context = AuthContext(store, portal_client)

        outcome = await context.sign_in(admin_account["email"], admin_password, is_admin=True)

        assert outcome.success is True
        assert store.read().is_admin is True

    async def test_admin_form_rejects_non_admin_profile(self, store):
        """A non-admin profile coming back from the admin form is refused."""

        class NonAdminClient:
            async def authenticate_admin(self, identifier, password):
                return LoginOutcome(success=True, user={"id": "1", "email": identifier})

        context = AuthContext(store, NonAdminClient())

        outcome = await context.sign_in("a@example.com", "pw", is_admin=True)

        assert outcome.success is False
        assert store.read() is None
        assert context.user is None
        assert outcome.error == MESSAGES["en"]["not_an_admin"]

    async def test_admin_form_refusal_is_localized(self, store):
        """The refusal follows the client locale."""

        class NonAdminClient:
            locale = "es"

            async def authenticate_admin(self, identifier, password):
                return LoginOutcome(success=True, user={"id": "1", "email": identifier})

        context = AuthContext(store, NonAdminClient())

        outcome = await context.sign_in("a@example.com", "pw", is_admin=True)

        assert outcome.error == MESSAGES["es"]["not_an_admin"]

    async def test_logout(self, portal_client, store, attendee):
        """Test logout clears the marker and the profile."""
        context = AuthContext(store, portal_client)
        await context.sign_in(attendee["email"])
        events = []
        context.subscribe(events.append)

        context.logout()

        assert context.user is None
        assert store.read() is None
        assert events == [AuthEvent.IDENTITY_CLEARED]


@pytest.mark.asyncio
class TestRestore:
    """Session restore on startup."""

    async def test_restore_loads_profile(self, portal_client, store, attendee):
        """Test a stored marker re-hydrates the profile."""
        store.write(SessionIdentity(user_id=str(attendee["id"]), email=attendee["email"]))
        context = AuthContext(store, portal_client)
        assert context.is_loading is True

        await context.restore()

        assert context.is_loading is False
        assert context.user["id"] == str(attendee["id"])

    async def test_restore_without_marker(self, portal_client, store):
        """Test restore with nothing stored just stops loading."""
        context = AuthContext(store, portal_client)

        await context.restore()

        assert context.is_loading is False
        assert context.user is None

    async def test_restore_discards_stale_marker(self, portal_client, store):
        """Test a marker for a deleted account is removed."""
        store.write(SessionIdentity(user_id=str(uuid4()), email="gone@example.com"))
        context = AuthContext(store, portal_client)

        await context.restore()

        assert context.user is None
        assert store.read() is None

    async def test_restore_when_portal_is_down(self, store):
        """Test an unreachable portal clears the marker rather than trusting it."""
        store.write(SessionIdentity(user_id="abc", email="a@example.com"))
        context = AuthContext(store, StubClient(error=StorageUnavailableException()))

        await context.restore()

        assert context.user is None
        assert store.read() is None
        assert isinstance(context.error, StorageUnavailableException)
        assert context.is_loading is False

    async def test_login_during_restore_wins(self, store):
        """A login that lands while restore is in flight is not undone."""
        store.write(SessionIdentity(user_id="stale", email="stale@example.com"))
        stub = StubClient(profile=None)
        stub.release.clear()
        context = AuthContext(store, stub)

        task = asyncio.create_task(context.restore())
        await asyncio.sleep(0)
        context.login({"id": "fresh", "email": "fresh@example.com", "is_admin": False})
        stub.release.set()
        await task

        assert context.user["id"] == "fresh"
        assert store.read().user_id == "fresh"
        assert context.is_loading is False

    async def test_refresh_logs_out_deleted_account(self, store):
        """Test refresh logs out when the account has disappeared."""
        context = AuthContext(store, StubClient(profile=None))
        context.login({"id": "1", "email": "a@example.com"})

        await context.refresh()

        assert context.user is None
        assert store.read() is None


@pytest.mark.asyncio
class TestPortalClient:
    """HTTP client behavior."""

    async def test_profile_not_found_is_none(self, portal_client):
        """Test a missing account reads as None."""
        assert await portal_client.get_user_profile(str(uuid4())) is None

    async def test_transport_error_is_storage_unavailable(self):
        """Test connection failures surface as storage unavailable."""

        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        async with PortalClient(
            base_url="http://test", transport=httpx.MockTransport(refuse)
        ) as portal:
            with pytest.raises(StorageUnavailableException):
                await portal.get_user_profile("abc")

            outcome = await portal.authenticate_user("a@example.com")

        assert outcome.success is False

    async def test_server_error_is_storage_unavailable(self):
        """Test 5xx answers surface as storage unavailable."""
        transport = httpx.MockTransport(lambda request: httpx.Response(500, json={}))

        async with PortalClient(base_url="http://test", transport=transport) as portal:
            with pytest.raises(StorageUnavailableException):
                await portal.get_user_profile("abc")
