"""Test helpers: a fake hh.ru API on httpx.MockTransport and model builders."""

from collections.abc import Callable
from typing import Any

import httpx

from src.core.schemas import Credential

API = "https://api.hh.test"
OAUTH = "https://hh.test"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeProvider:
    """Routes requests by (method, path) and records every request it sees."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Handler] = {}

    def on(self, method: str, path: str, handler: Handler) -> None:
        self._routes[(method, path)] = handler

    def on_json(self, method: str, path: str, payload: Any, status: int = 200) -> None:
        self.on(method, path, lambda _: httpx.Response(status, json=payload))

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self._routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"errors": [{"type": "not_found"}]})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def token_payload(
    access: str = "new-access",
    refresh: str = "new-refresh",
    expires_in: int = 1209600,
) -> dict[str, Any]:
    return {
        "access_token": access,
        "refresh_token": refresh,
        "expires_in": expires_in,
        "token_type": "bearer",
    }


def vacancy_payload(vacancy_id: str, **overrides: Any) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": vacancy_id,
        "name": f"Vacancy {vacancy_id}",
        "url": f"{API}/vacancies/{vacancy_id}",
        "alternate_url": f"https://hh.ru/vacancy/{vacancy_id}",
    }
    item.update(overrides)
    return item


def make_credential(subject_id: str = "resume-1", **overrides: object) -> Credential:
    defaults: dict[str, object] = {
        "subject_id": subject_id,
        "access_token": f"access-{subject_id}",
        "refresh_token": f"refresh-{subject_id}",
        "auth_code": "code",
        "issued_at": 1_000,
        "expires_in": 100,
    }
    defaults.update(overrides)
    return Credential(**defaults)  # type: ignore[arg-type]
