"""Abstract store contracts consumed by the refresh and ingestion units.

Implementations raise ``PersistenceError`` for any backend failure.
"""

from abc import ABC, abstractmethod

from src.core.schemas import Credential, Vacancy


class CredentialStore(ABC):
    """Per-user OAuth token material."""

    @abstractmethod
    def find_all(self) -> list[Credential]:
        """Return every linked credential."""

    @abstractmethod
    def update(self, credential: Credential) -> None:
        """Replace the token fields of an existing credential."""

    @abstractmethod
    def create(self, credential: Credential) -> None:
        """Store a newly linked credential."""


class VacancyStore(ABC):
    """Vacancies keyed by their external id."""

    @abstractmethod
    def exists(self, vacancy_id: str) -> bool:
        """Return True if a vacancy with this id has already been stored."""

    @abstractmethod
    def create(self, vacancy: Vacancy) -> bool:
        """Store a vacancy. Returns False if the id was already present."""

    @abstractmethod
    def find_all(self, unnotified_only: bool = False) -> list[Vacancy]:
        """Return stored vacancies, oldest first."""

    @abstractmethod
    def mark_notified(self, vacancy_id: str) -> bool:
        """Flag a vacancy as delivered. Returns False if the id is unknown."""
