"""Tests for AccountLinker: code exchange, résumé lookup, credential creation."""

import pytest

from src.core.errors import AuthError, PersistenceError
from src.platforms.hh.client import HHClient
from src.platforms.hh.oauth import AccountLinker
from src.storage.sqlite import SQLiteCredentialStore
from tests.helpers import FakeProvider, token_payload


def _clock() -> float:
    return 5_000.0


class TestLink:
    async def test_creates_credential_for_first_resume(
        self,
        client: HHClient,
        provider: FakeProvider,
        credential_store: SQLiteCredentialStore,
    ) -> None:
        provider.on_json("POST", "/oauth/token", token_payload(expires_in=1209600))
        provider.on_json(
            "GET", "/resumes/mine",
            {"found": 2, "items": [{"id": "first"}, {"id": "second"}]},
        )

        cred = await AccountLinker(client, credential_store, _clock).link("  the-code  ")

        assert cred.subject_id == "first"
        assert cred.auth_code == "the-code"
        assert cred.issued_at == 5_000
        assert cred.expires_in == 1209600
        assert credential_store.find_all() == [cred]
        (resume_request,) = provider.calls("GET", "/resumes/mine")
        assert resume_request.headers["authorization"] == "Bearer new-access"

    async def test_empty_code_rejected_without_request(
        self,
        client: HHClient,
        provider: FakeProvider,
        credential_store: SQLiteCredentialStore,
    ) -> None:
        with pytest.raises(AuthError, match="empty"):
            await AccountLinker(client, credential_store).link("   ")
        assert provider.requests == []

    async def test_rejected_code(
        self,
        client: HHClient,
        provider: FakeProvider,
        credential_store: SQLiteCredentialStore,
    ) -> None:
        provider.on_json("POST", "/oauth/token", {"error": "invalid_grant"}, status=400)

        with pytest.raises(AuthError, match="Authorization failed"):
            await AccountLinker(client, credential_store).link("bad-code")
        assert credential_store.find_all() == []

    async def test_no_resumes(
        self,
        client: HHClient,
        provider: FakeProvider,
        credential_store: SQLiteCredentialStore,
    ) -> None:
        provider.on_json("POST", "/oauth/token", token_payload())
        provider.on_json("GET", "/resumes/mine", {"found": 0, "items": []})

        with pytest.raises(AuthError, match="no resumes"):
            await AccountLinker(client, credential_store).link("code")

    async def test_relinking_same_resume_is_persistence_error(
        self,
        client: HHClient,
        provider: FakeProvider,
        credential_store: SQLiteCredentialStore,
    ) -> None:
        provider.on_json("POST", "/oauth/token", token_payload())
        provider.on_json("GET", "/resumes/mine", {"found": 1, "items": [{"id": "r1"}]})
        linker = AccountLinker(client, credential_store)

        await linker.link("code-1")
        with pytest.raises(PersistenceError, match="already linked"):
            await linker.link("code-2")
