import httpx
import pytest

from app.clients.auth_client import AuthClient
from app.config import settings
from app.routers import auth as auth_router

SESSION_PAYLOAD = {
    "session": {"id": "sess-1", "expiresAt": "2030-01-01T00:00:00Z"},
    "user": {"id": "alice", "email": "alice@example.com", "name": "Alice", "username": "alice"},
}


async def started(handler) -> AuthClient:
    client = AuthClient(base_url="http://auth.test", transport=httpx.MockTransport(handler))
    await client.start()
    return client


class TestGetSession:
    """Session lookup against the auth service, failing closed"""

    async def test_returns_session_and_forwards_credentials(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["cookie"] = request.headers.get("cookie")
            seen["authorization"] = request.headers.get("authorization")
            return httpx.Response(200, json=SESSION_PAYLOAD)

        client = await started(handler)
        session = await client.get_session(
            {"cookie": "session_token=abc", "authorization": "Bearer t", "x-other": "no"}
        )
        await client.stop()

        assert session is not None
        assert session.user.id == "alice"
        assert session.user.email == "alice@example.com"
        # Unknown user fields are kept
        assert session.user.model_dump()["username"] == "alice"
        assert seen == {
            "path": settings.auth_session_path,
            "cookie": "session_token=abc",
            "authorization": "Bearer t",
        }

    async def test_no_credentials_skips_lookup(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("auth service should not be called")

        client = await started(handler)
        assert await client.get_session({"accept": "application/json"}) is None
        await client.stop()

    async def test_null_session(self):
        client = await started(lambda request: httpx.Response(200, json=None))
        assert await client.get_session({"cookie": "x=1"}) is None
        await client.stop()

    @pytest.mark.parametrize(
        "handler",
        [
            lambda request: httpx.Response(500, text="boom"),
            lambda request: httpx.Response(200, text="not json"),
            lambda request: httpx.Response(200, json={"user": {"email": "no-id"}}),
        ],
    )
    async def test_errors_are_treated_as_no_session(self, handler):
        client = await started(handler)
        assert await client.get_session({"cookie": "x=1"}) is None
        await client.stop()

    async def test_transport_failure_is_no_session(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = await started(handler)
        assert await client.get_session({"cookie": "x=1"}) is None
        await client.stop()

    async def test_not_started_is_no_session(self):
        assert await AuthClient().get_session({"cookie": "x=1"}) is None


class TestAuthProxy:
    """/api/auth/* is relayed to the auth service"""

    async def test_forwards_request_and_relays_cookies(self, client, monkeypatch):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["query"] = request.url.query
            seen["body"] = request.content
            return httpx.Response(
                200,
                json={"ok": True},
                headers=[
                    ("set-cookie", "session_token=abc; Path=/"),
                    ("set-cookie", "session_data=xyz; Path=/"),
                ],
            )

        upstream = await started(handler)
        monkeypatch.setattr(auth_router, "auth_client", upstream)

        resp = await client.post(
            "/api/auth/sign-in/email?redirect=no",
            json={"email": "alice@example.com", "password": "pw"},
        )
        await upstream.stop()

        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
        assert resp.headers.get_list("set-cookie") == [
            "session_token=abc; Path=/",
            "session_data=xyz; Path=/",
        ]
        assert seen["method"] == "POST"
        assert seen["path"] == "/api/auth/sign-in/email"
        assert seen["query"] == b"redirect=no"
        assert b"alice@example.com" in seen["body"]

    async def test_unreachable_auth_service_is_502(self, client, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        upstream = await started(handler)
        monkeypatch.setattr(auth_router, "auth_client", upstream)

        resp = await client.get("/api/auth/get-session")
        await upstream.stop()
        assert resp.status_code == 502
