"""hh.ru API client: token endpoint, résumé lookup, and similar-vacancies search.

Every request carries an explicit timeout. Failures surface as
``TransportError`` (network, non-2xx) or ``DecodeError`` (unexpected body).
"""

import logging
from types import TracebackType
from typing import TypeVar
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ValidationError

from src.core.config import OAuthClientConfig, ProviderConfig
from src.core.errors import DecodeError, TransportError
from src.core.schemas import ResumeList, TokenResponse

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class HHClient:
    """Async context manager that owns one ``httpx.AsyncClient``.

    Usage::

        async with HHClient(settings.provider, oauth) as client:
            tokens = await client.refresh_token(cred.refresh_token)
    """

    def __init__(
        self,
        config: ProviderConfig,
        oauth: OAuthClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._oauth = oauth
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    @property
    def http(self) -> httpx.AsyncClient:
        """The underlying HTTP client. Raises if not entered."""
        if self._http is None:
            msg = "HHClient not entered, use 'async with'"
            raise RuntimeError(msg)
        return self._http

    async def __aenter__(self) -> "HHClient":
        self._http = httpx.AsyncClient(
            timeout=self._config.timeout_seconds,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    # --- OAuth ---

    def authorize_url(self) -> str:
        """URL the user opens to grant access to their hh.ru account."""
        oauth = self._require_oauth()
        params = {
            "response_type": "code",
            "client_id": oauth.client_id,
            "redirect_uri": oauth.redirect_uri,
        }
        return f"{self._config.oauth_base_url}/oauth/authorize?{urlencode(params)}"

    async def refresh_token(self, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for a new access/refresh pair."""
        response = await self._send(
            "POST",
            f"{self._config.oauth_base_url}/oauth/token",
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
        )
        return _decode(TokenResponse, response)

    async def exchange_code(self, code: str) -> TokenResponse:
        """Exchange an authorization code for the first token pair."""
        oauth = self._require_oauth()
        response = await self._send(
            "POST",
            f"{self._config.oauth_base_url}/oauth/token",
            data={
                "grant_type": "authorization_code",
                "code": code,
                "client_id": oauth.client_id,
                "client_secret": oauth.client_secret,
                "redirect_uri": oauth.redirect_uri,
            },
        )
        return _decode(TokenResponse, response)

    # --- API ---

    async def my_resumes(self, access_token: str) -> ResumeList:
        response = await self._send(
            "GET",
            f"{self._config.api_base_url}/resumes/mine",
            headers=self._api_headers(access_token),
        )
        return _decode(ResumeList, response)

    async def similar_vacancies(self, resume_id: str, access_token: str, text: str) -> bytes:
        """Return the raw similar-vacancies body for one résumé and search text."""
        response = await self._send(
            "GET",
            f"{self._config.api_base_url}/resumes/{resume_id}/similar_vacancies",
            params={"per_page": str(self._config.per_page), "text": text},
            headers=self._api_headers(access_token),
        )
        return response.content

    # --- helpers ---

    def _api_headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "HH-User-Agent": self._config.user_agent,
            "Accept": "application/json",
        }

    def _require_oauth(self) -> OAuthClientConfig:
        if self._oauth is None:
            msg = "OAuth client credentials are not configured"
            raise ValueError(msg)
        return self._oauth

    async def _send(self, method: str, url: str, **kwargs: object) -> httpx.Response:
        logger.debug("%s %s", method, url)
        try:
            response = await self.http.request(method, url, **kwargs)  # type: ignore[arg-type]
        except httpx.HTTPError as e:
            msg = f"{method} {url} failed: {e}"
            raise TransportError(msg) from e
        if response.is_error:
            msg = f"{method} {url} returned HTTP {response.status_code}"
            raise TransportError(msg)
        return response


def _decode(model: type[ModelT], response: httpx.Response) -> ModelT:
    try:
        return model.model_validate_json(response.content)
    except ValidationError as e:
        msg = f"Unexpected {model.__name__} payload: {e}"
        raise DecodeError(msg) from e
