"""SQLite-backed implementations of the store contracts."""

import logging
import sqlite3

from src.core import db
from src.core.errors import PersistenceError
from src.core.schemas import Credential, Vacancy
from src.storage.base import CredentialStore, VacancyStore

logger = logging.getLogger(__name__)


class SQLiteCredentialStore(CredentialStore):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def find_all(self) -> list[Credential]:
        try:
            return db.get_credentials(self._conn)
        except sqlite3.Error as e:
            msg = f"Failed to read credentials: {e}"
            raise PersistenceError(msg) from e

    def update(self, credential: Credential) -> None:
        try:
            updated = db.update_credential(self._conn, credential)
        except sqlite3.Error as e:
            msg = f"Failed to update credential {credential.subject_id}: {e}"
            raise PersistenceError(msg) from e
        if not updated:
            msg = f"Unknown credential {credential.subject_id}"
            raise PersistenceError(msg)

    def create(self, credential: Credential) -> None:
        try:
            db.insert_credential(self._conn, credential)
        except sqlite3.IntegrityError as e:
            msg = f"Credential {credential.subject_id} is already linked"
            raise PersistenceError(msg) from e
        except sqlite3.Error as e:
            msg = f"Failed to create credential {credential.subject_id}: {e}"
            raise PersistenceError(msg) from e
        logger.info("Linked credential for resume %s", credential.subject_id)


class SQLiteVacancyStore(VacancyStore):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def exists(self, vacancy_id: str) -> bool:
        try:
            return db.vacancy_exists(self._conn, vacancy_id)
        except sqlite3.Error as e:
            msg = f"Failed to look up vacancy {vacancy_id}: {e}"
            raise PersistenceError(msg) from e

    def create(self, vacancy: Vacancy) -> bool:
        try:
            return db.insert_vacancy(self._conn, vacancy)
        except sqlite3.Error as e:
            msg = f"Failed to store vacancy {vacancy.vacancy_id}: {e}"
            raise PersistenceError(msg) from e

    def find_all(self, unnotified_only: bool = False) -> list[Vacancy]:
        try:
            return db.get_vacancies(self._conn, unnotified_only=unnotified_only)
        except sqlite3.Error as e:
            msg = f"Failed to list vacancies: {e}"
            raise PersistenceError(msg) from e

    def mark_notified(self, vacancy_id: str) -> bool:
        try:
            return db.set_notified(self._conn, vacancy_id)
        except sqlite3.Error as e:
            msg = f"Failed to mark vacancy {vacancy_id} notified: {e}"
            raise PersistenceError(msg) from e
