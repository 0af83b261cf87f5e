from __future__ import annotations

import asyncio

import httpx
import pytest
from jobbridge_client.client import JobBridgeClient
from jobbridge_client.errors import ErrorKind
from jobbridge_client.session import TOKEN_KEY, InMemoryBackend, SessionStore
from pytest_bdd import given, parsers, scenario, then, when

pytestmark = pytest.mark.bdd


class CountingTransport(httpx.AsyncBaseTransport):
    def __init__(self, inner: httpx.AsyncBaseTransport) -> None:
        self.inner = inner
        self.sent = 0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.sent += 1
        return await self.inner.handle_async_request(request)


@scenario("features/session.feature", "Calls without a token never reach the network")
def test_calls_without_token_stay_local() -> None:
    pass


@scenario("features/session.feature", "Remember me stores the token durably")
def test_remember_me_stores_token_durably() -> None:
    pass


@scenario("features/session.feature", "Logging out clears every tier")
def test_logout_clears_every_tier() -> None:
    pass


@pytest.fixture
def context() -> dict[str, object]:
    return {}


@given("a client with no stored token", target_fixture="client")
def given_client_without_token(fake_backend, context: dict[str, object]) -> JobBridgeClient:
    transport = CountingTransport(httpx.ASGITransport(app=fake_backend))
    context["transport"] = transport
    return JobBridgeClient(
        base_url="http://jobbridge.test/api",
        session=SessionStore(durable=InMemoryBackend()),
        transport=transport,
    )


@when("the member's resumes are requested", target_fixture="result")
def when_resumes_requested(client: JobBridgeClient):
    return asyncio.run(client.get_my_resumes())


@when("the member logs in with remember me enabled")
def when_member_logs_in(client: JobBridgeClient) -> None:
    result = asyncio.run(client.login("kim@example.com", "secret", remember_me=True))
    assert result.ok


@when("the member logs out")
def when_member_logs_out(client: JobBridgeClient) -> None:
    client.logout()


@then("the result is an unauthorized error")
def then_unauthorized(result) -> None:
    assert result.error.kind is ErrorKind.UNAUTHORIZED


@then("no request was sent")
def then_no_request_sent(context: dict[str, object]) -> None:
    assert context["transport"].sent == 0


@then("the token is stored in the durable tier only")
def then_token_is_durable(client: JobBridgeClient) -> None:
    assert client.session.durable.get(TOKEN_KEY) is not None
    assert client.session._ephemeral is None


@then(parsers.parse('the saved profile name is "{name}"'))
def then_profile_name(client: JobBridgeClient, name: str) -> None:
    profile = client.current_profile()
    assert profile is not None
    assert profile.name == name


@then("no token is stored")
def then_no_token(client: JobBridgeClient) -> None:
    assert client.session.get() is None
    assert client.current_profile() is None
