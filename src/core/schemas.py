"""Core data models: stored credentials and vacancies, plus provider payloads."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Credential(BaseModel):
    """OAuth token pair for one linked job-board account.

    Frozen; the refresher builds a replacement via ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    subject_id: str
    access_token: str
    refresh_token: str
    auth_code: str = ""
    issued_at: int
    expires_in: int

    @property
    def expires_at(self) -> int:
        return self.issued_at + self.expires_in

    def is_valid(self, now: float) -> bool:
        """True while the access token has not reached its declared expiry."""
        return now < self.expires_at


class Vacancy(BaseModel):
    """A stored vacancy. Absent salary/contact data is ``None`` (SQL NULL)."""

    model_config = ConfigDict(frozen=True)

    vacancy_id: str
    name: str
    url: str
    alternate_url: str = ""
    published_at: str | None = None
    salary_currency: str | None = None
    salary_from: int | None = None
    salary_to: int | None = None
    salary_gross: bool | None = None
    contact_email: str | None = None
    contact_name: str | None = None
    notified: bool = False
    found_at: datetime = Field(default_factory=datetime.now)


# ---------------------------------------------------------------------------
# Provider wire models
# ---------------------------------------------------------------------------


class TokenResponse(BaseModel):
    """Body of ``POST /oauth/token``."""

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


class SalaryPayload(BaseModel):
    currency: str | None = None
    from_: int | None = Field(default=None, alias="from")
    to: int | None = None
    gross: bool | None = None

    model_config = ConfigDict(populate_by_name=True)


class ContactsPayload(BaseModel):
    email: str | None = None
    name: str | None = None


class VacancyItem(BaseModel):
    """One entry of ``items`` in a similar-vacancies response."""

    id: str
    name: str = ""
    url: str = ""
    alternate_url: str = ""
    published_at: str | None = None
    salary: SalaryPayload | None = None
    contacts: ContactsPayload | None = None

    @field_validator("name", "url", "alternate_url", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class VacancyPage(BaseModel):
    """Body of ``GET /resumes/{id}/similar_vacancies``.

    Items stay raw so one malformed entry cannot reject the whole page;
    each is validated as a ``VacancyItem`` on ingest.
    """

    found: int = 0
    items: list[Any] = Field(default_factory=list)


class ResumeItem(BaseModel):
    id: str
    title: str | None = None


class ResumeList(BaseModel):
    """Body of ``GET /resumes/mine``."""

    found: int = 0
    items: list[ResumeItem] = Field(default_factory=list)


class RunSummary(BaseModel):
    """Counters for one token-refresh run."""

    refreshed: int = 0
    skipped: int = 0
    failed: int = 0


class IngestResult(BaseModel):
    """Counters for one ingested result set."""

    found: int = 0
    new: int = 0
    duplicates: int = 0
    failed: int = 0
    decoded: bool = True
