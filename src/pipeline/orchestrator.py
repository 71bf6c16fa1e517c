"""Orchestrator: the long-period fetch cycle.

Data flow:
  1. Load all credentials
  2. For each search profile, for each credential still valid *now*:
     fetch similar vacancies -> ingest
  3. Expired credentials are skipped until the refresher rotates them
"""

import json
import logging
import time

from src.core.config import SearchProfile
from src.core.errors import PersistenceError
from src.core.schemas import IngestResult, Vacancy
from src.pipeline.fetcher import VacancyFetcher
from src.pipeline.ingest import IngestionPipeline
from src.pipeline.token_refresher import Clock
from src.storage.base import CredentialStore

logger = logging.getLogger(__name__)


class FetchResult:
    """Summary of one (search profile, credential) fetch."""

    def __init__(
        self,
        keyword: str,
        subject_id: str,
        ingest: IngestResult | None,
    ) -> None:
        self.keyword = keyword
        self.subject_id = subject_id
        self.ingest = ingest

    @property
    def fetched(self) -> bool:
        return self.ingest is not None


async def run_fetch_cycle(
    credential_store: CredentialStore,
    fetcher: VacancyFetcher,
    pipeline: IngestionPipeline,
    searches: list[SearchProfile],
    clock: Clock = time.time,
) -> list[FetchResult]:
    """Fetch and ingest vacancies for every valid credential and search profile.

    Returns one FetchResult per (profile, credential) that was attempted.
    """
    logger.debug("Parsing vacancies...")

    try:
        credentials = credential_store.find_all()
    except PersistenceError as e:
        logger.error("Cannot load credentials: %s", e)
        return []

    results: list[FetchResult] = []
    for search in searches:
        for cred in credentials:
            if not cred.is_valid(clock()):
                continue

            raw = await fetcher.fetch_for(cred, search.keyword)
            if raw is None:
                results.append(FetchResult(search.keyword, cred.subject_id, None))
                continue

            ingest = pipeline.ingest(raw)
            results.append(FetchResult(search.keyword, cred.subject_id, ingest))

    total_new = sum(r.ingest.new for r in results if r.ingest is not None)
    logger.info("Fetch cycle: %d queries, %d new vacancies", len(results), total_new)
    return results


def export_vacancies_json(vacancies: list[Vacancy]) -> str:
    """Export stored vacancies as a JSON string."""
    data = [v.model_dump(mode="json") for v in vacancies]
    return json.dumps(data, indent=2, ensure_ascii=False)
