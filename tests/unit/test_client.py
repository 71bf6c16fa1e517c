"""Tests for HHClient: request shape, headers, timeout, and error mapping."""

from urllib.parse import parse_qs

import httpx
import pytest

from src.core.config import ProviderConfig
from src.core.errors import DecodeError, TransportError
from src.platforms.hh.client import HHClient
from tests.helpers import FakeProvider, token_payload


def _form(request: httpx.Request) -> dict[str, list[str]]:
    return parse_qs(request.content.decode())


class TestLifecycle:
    def test_not_entered_raises(self, provider_config: ProviderConfig) -> None:
        client = HHClient(provider_config)
        with pytest.raises(RuntimeError, match="not entered"):
            _ = client.http

    async def test_timeout_applied(self, provider_config: ProviderConfig) -> None:
        async with HHClient(provider_config.model_copy(update={"timeout_seconds": 7.5})) as c:
            assert c.http.timeout.read == 7.5

    async def test_closed_on_exit(self, provider_config: ProviderConfig) -> None:
        async with HHClient(provider_config) as c:
            http = c.http
        assert http.is_closed


class TestAuthorizeUrl:
    async def test_contains_client_and_redirect(self, client: HHClient) -> None:
        url = httpx.URL(client.authorize_url())
        assert str(url).startswith("https://hh.test/oauth/authorize?")
        assert url.params["response_type"] == "code"
        assert url.params["client_id"] == "client-id"
        assert url.params["redirect_uri"] == "https://app.test/auth/callback"

    def test_requires_oauth_config(self, provider_config: ProviderConfig) -> None:
        with pytest.raises(ValueError, match="OAuth client credentials"):
            HHClient(provider_config).authorize_url()


class TestTokenEndpoint:
    async def test_refresh_token_form(self, client: HHClient, provider: FakeProvider) -> None:
        provider.on_json("POST", "/oauth/token", token_payload())

        tokens = await client.refresh_token("old-refresh")

        assert tokens.access_token == "new-access"
        (request,) = provider.calls("POST", "/oauth/token")
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        assert _form(request) == {
            "grant_type": ["refresh_token"],
            "refresh_token": ["old-refresh"],
        }

    async def test_exchange_code_form(self, client: HHClient, provider: FakeProvider) -> None:
        provider.on_json("POST", "/oauth/token", token_payload())

        await client.exchange_code("the-code")

        (request,) = provider.calls("POST", "/oauth/token")
        assert _form(request) == {
            "grant_type": ["authorization_code"],
            "code": ["the-code"],
            "client_id": ["client-id"],
            "client_secret": ["client-secret"],
            "redirect_uri": ["https://app.test/auth/callback"],
        }

    async def test_http_error_is_transport_error(
        self, client: HHClient, provider: FakeProvider,
    ) -> None:
        provider.on_json("POST", "/oauth/token", {"error": "invalid_grant"}, status=400)
        with pytest.raises(TransportError, match="HTTP 400"):
            await client.refresh_token("old-refresh")

    async def test_network_error_is_transport_error(
        self, client: HHClient, provider: FakeProvider,
    ) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider.on("POST", "/oauth/token", fail)
        with pytest.raises(TransportError, match="connection refused"):
            await client.refresh_token("old-refresh")

    async def test_malformed_body_is_decode_error(
        self, client: HHClient, provider: FakeProvider,
    ) -> None:
        provider.on("POST", "/oauth/token", lambda _: httpx.Response(200, text="<html>"))
        with pytest.raises(DecodeError):
            await client.refresh_token("old-refresh")

    async def test_missing_field_is_decode_error(
        self, client: HHClient, provider: FakeProvider,
    ) -> None:
        provider.on_json("POST", "/oauth/token", {"access_token": "a"})
        with pytest.raises(DecodeError, match="TokenResponse"):
            await client.refresh_token("old-refresh")


class TestSimilarVacancies:
    async def test_request_shape(self, client: HHClient, provider: FakeProvider) -> None:
        provider.on_json("GET", "/resumes/r1/similar_vacancies", {"found": 0, "items": []})

        raw = await client.similar_vacancies("r1", "token-1", "Nest.js")

        assert b'"found"' in raw
        (request,) = provider.calls("GET", "/resumes/r1/similar_vacancies")
        assert request.url.params["text"] == "Nest.js"
        assert request.url.params["per_page"] == "20"
        assert request.headers["authorization"] == "Bearer token-1"
        assert request.headers["hh-user-agent"] == "Test/1.0"
        assert request.headers["accept"] == "application/json"

    async def test_returns_raw_body_without_decoding(
        self, client: HHClient, provider: FakeProvider,
    ) -> None:
        provider.on("GET", "/resumes/r1/similar_vacancies", lambda _: httpx.Response(200, text="{"))
        assert await client.similar_vacancies("r1", "t", "Go") == b"{"

    async def test_unauthorized_is_transport_error(
        self, client: HHClient, provider: FakeProvider,
    ) -> None:
        provider.on_json("GET", "/resumes/r1/similar_vacancies", {}, status=403)
        with pytest.raises(TransportError, match="HTTP 403"):
            await client.similar_vacancies("r1", "t", "Go")


class TestMyResumes:
    async def test_parses_items(self, client: HHClient, provider: FakeProvider) -> None:
        provider.on_json(
            "GET", "/resumes/mine",
            {"found": 1, "items": [{"id": "abc", "title": "Backend", "age": 30}]},
        )
        resumes = await client.my_resumes("token-1")
        assert [r.id for r in resumes.items] == ["abc"]
        (request,) = provider.calls("GET", "/resumes/mine")
        assert request.headers["authorization"] == "Bearer token-1"
