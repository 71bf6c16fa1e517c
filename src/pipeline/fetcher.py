"""Vacancy fetcher: one similar-vacancies query per credential and search profile."""

import logging

from src.core.errors import TransportError
from src.core.schemas import Credential
from src.platforms.hh.client import HHClient

logger = logging.getLogger(__name__)


class VacancyFetcher:
    """Fetches raw result sets. Does not check token validity; the caller does."""

    def __init__(self, client: HHClient) -> None:
        self._client = client

    async def fetch_for(self, credential: Credential, keyword: str) -> bytes | None:
        """Return the raw response body, or None on any transport failure."""
        try:
            return await self._client.similar_vacancies(
                credential.subject_id, credential.access_token, keyword,
            )
        except TransportError as e:
            logger.error(
                "Fetching '%s' for resume %s failed: %s", keyword, credential.subject_id, e,
            )
            return None
