"""Ingestion pipeline: decode a result set, drop known vacancies, store the rest.

Idempotent by construction: a vacancy id already in the store is never
written again, whether it was seen in an earlier batch or earlier in this one.
"""

import logging

from pydantic import ValidationError

from src.core.errors import PersistenceError
from src.core.schemas import IngestResult, Vacancy, VacancyItem, VacancyPage
from src.storage.base import VacancyStore

logger = logging.getLogger(__name__)


def normalize_item(item: VacancyItem) -> Vacancy:
    """Flatten a provider item into a storable Vacancy.

    Missing salary or contact blocks (or any of their fields) become None.
    """
    salary = item.salary
    contacts = item.contacts
    return Vacancy(
        vacancy_id=item.id,
        name=item.name,
        url=item.url,
        alternate_url=item.alternate_url,
        published_at=item.published_at,
        salary_currency=salary.currency if salary else None,
        salary_from=salary.from_ if salary else None,
        salary_to=salary.to if salary else None,
        salary_gross=salary.gross if salary else None,
        contact_email=contacts.email if contacts else None,
        contact_name=contacts.name if contacts else None,
        notified=False,
    )


class IngestionPipeline:
    def __init__(self, store: VacancyStore) -> None:
        self._store = store

    def ingest(self, raw: bytes | str) -> IngestResult:
        try:
            page = VacancyPage.model_validate_json(raw)
        except ValidationError as e:
            logger.error("Cannot decode vacancies response: %s", e)
            return IngestResult(decoded=False, failed=1)

        result = IngestResult(found=page.found)
        if page.found == 0:
            return result

        for position, raw_item in enumerate(page.items):
            try:
                item = VacancyItem.model_validate(raw_item)
            except ValidationError as e:
                logger.error("Skipping malformed vacancy at position %d: %s", position, e)
                result.failed += 1
                continue
            try:
                if self._store.exists(item.id):
                    result.duplicates += 1
                    continue
                if self._store.create(normalize_item(item)):
                    result.new += 1
                else:
                    result.duplicates += 1
            except PersistenceError as e:
                logger.error("Cannot store vacancy %s: %s", item.id, e)
                result.failed += 1

        logger.info(
            "Ingested %d items: %d new, %d known, %d failed",
            len(page.items), result.new, result.duplicates, result.failed,
        )
        return result
