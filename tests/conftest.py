"""Shared fixtures: SQLite stores and an HHClient wired to a fake provider."""

import sqlite3
from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from src.core.config import OAuthClientConfig, ProviderConfig
from src.core.db import init_db
from src.platforms.hh.client import HHClient
from src.storage.sqlite import SQLiteCredentialStore, SQLiteVacancyStore
from tests.helpers import API, OAUTH, FakeProvider


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(api_base_url=API, oauth_base_url=OAUTH, user_agent="Test/1.0", per_page=20)


@pytest.fixture
def oauth_config() -> OAuthClientConfig:
    return OAuthClientConfig(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="https://app.test/auth/callback",
    )


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
async def client(
    provider: FakeProvider,
    provider_config: ProviderConfig,
    oauth_config: OAuthClientConfig,
) -> AsyncIterator[HHClient]:
    async with HHClient(provider_config, oauth_config, transport=provider.transport) as c:
        yield c


@pytest.fixture
def db(tmp_path: Path) -> sqlite3.Connection:
    return init_db(tmp_path / "test.db")


@pytest.fixture
def credential_store(db: sqlite3.Connection) -> SQLiteCredentialStore:
    return SQLiteCredentialStore(db)


@pytest.fixture
def vacancy_store(db: sqlite3.Connection) -> SQLiteVacancyStore:
    return SQLiteVacancyStore(db)
