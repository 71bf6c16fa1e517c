"""SQLite database layer for linked credentials and ingested vacancies."""

import sqlite3
from datetime import datetime
from pathlib import Path

from src.core.schemas import Credential, Vacancy

_CREDENTIALS_TABLE = """
CREATE TABLE IF NOT EXISTS credentials (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    subject_id      TEXT    NOT NULL UNIQUE,
    access_token    TEXT    NOT NULL,
    refresh_token   TEXT    NOT NULL,
    auth_code       TEXT    NOT NULL DEFAULT '',
    issued_at       INTEGER NOT NULL,
    expires_in      INTEGER NOT NULL
);
"""

_VACANCIES_TABLE = """
CREATE TABLE IF NOT EXISTS vacancies (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    vacancy_id      TEXT    NOT NULL UNIQUE,
    name            TEXT    NOT NULL,
    url             TEXT    NOT NULL,
    alternate_url   TEXT    NOT NULL DEFAULT '',
    published_at    TEXT,
    salary_currency TEXT,
    salary_from     INTEGER,
    salary_to       INTEGER,
    salary_gross    INTEGER,
    contact_email   TEXT,
    contact_name    TEXT,
    notified        INTEGER NOT NULL DEFAULT 0,
    found_at        TEXT    NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_CREDENTIALS_TABLE)
    conn.execute(_VACANCIES_TABLE)
    conn.commit()
    return conn


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


def insert_credential(conn: sqlite3.Connection, cred: Credential) -> None:
    """Insert a new credential. Raises ``sqlite3.IntegrityError`` on a duplicate subject."""
    conn.execute(
        """
        INSERT INTO credentials
            (subject_id, access_token, refresh_token, auth_code, issued_at, expires_in)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            cred.subject_id,
            cred.access_token,
            cred.refresh_token,
            cred.auth_code,
            cred.issued_at,
            cred.expires_in,
        ),
    )
    conn.commit()


def get_credentials(conn: sqlite3.Connection) -> list[Credential]:
    rows = conn.execute(
        """
        SELECT subject_id, access_token, refresh_token, auth_code, issued_at, expires_in
        FROM credentials ORDER BY id
        """
    ).fetchall()
    return [Credential(**dict(row)) for row in rows]


def update_credential(conn: sqlite3.Connection, cred: Credential) -> bool:
    """Replace the token fields of an existing credential.

    Returns True if a row was updated, False if the subject is unknown.
    """
    cursor = conn.execute(
        """
        UPDATE credentials
        SET access_token = ?, refresh_token = ?, issued_at = ?, expires_in = ?
        WHERE subject_id = ?
        """,
        (
            cred.access_token,
            cred.refresh_token,
            cred.issued_at,
            cred.expires_in,
            cred.subject_id,
        ),
    )
    conn.commit()
    return cursor.rowcount > 0


# ---------------------------------------------------------------------------
# Vacancies
# ---------------------------------------------------------------------------


def vacancy_exists(conn: sqlite3.Connection, vacancy_id: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM vacancies WHERE vacancy_id = ? LIMIT 1",
        (vacancy_id,),
    ).fetchone()
    return row is not None


def insert_vacancy(conn: sqlite3.Connection, vacancy: Vacancy) -> bool:
    """Insert a vacancy, ignoring it if ``vacancy_id`` already exists.

    Returns True if a new row was inserted, False if it was a duplicate.
    """
    try:
        conn.execute(
            """
            INSERT INTO vacancies
                (vacancy_id, name, url, alternate_url, published_at,
                 salary_currency, salary_from, salary_to, salary_gross,
                 contact_email, contact_name, notified, found_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                vacancy.vacancy_id,
                vacancy.name,
                vacancy.url,
                vacancy.alternate_url,
                vacancy.published_at,
                vacancy.salary_currency,
                vacancy.salary_from,
                vacancy.salary_to,
                None if vacancy.salary_gross is None else int(vacancy.salary_gross),
                vacancy.contact_email,
                vacancy.contact_name,
                int(vacancy.notified),
                vacancy.found_at.isoformat(),
            ),
        )
        conn.commit()
        return True
    except sqlite3.IntegrityError:
        return False


def get_vacancies(conn: sqlite3.Connection, unnotified_only: bool = False) -> list[Vacancy]:
    query = "SELECT * FROM vacancies"
    if unnotified_only:
        query += " WHERE notified = 0"
    rows = conn.execute(query + " ORDER BY id").fetchall()
    return [_row_to_vacancy(row) for row in rows]


def set_notified(conn: sqlite3.Connection, vacancy_id: str) -> bool:
    """Flag a vacancy as notified. Returns False if the id is unknown."""
    cursor = conn.execute(
        "UPDATE vacancies SET notified = 1 WHERE vacancy_id = ?",
        (vacancy_id,),
    )
    conn.commit()
    return cursor.rowcount > 0


def _row_to_vacancy(row: sqlite3.Row) -> Vacancy:
    gross = row["salary_gross"]
    return Vacancy(
        vacancy_id=row["vacancy_id"],
        name=row["name"],
        url=row["url"],
        alternate_url=row["alternate_url"],
        published_at=row["published_at"],
        salary_currency=row["salary_currency"],
        salary_from=row["salary_from"],
        salary_to=row["salary_to"],
        salary_gross=None if gross is None else bool(gross),
        contact_email=row["contact_email"],
        contact_name=row["contact_name"],
        notified=bool(row["notified"]),
        found_at=datetime.fromisoformat(row["found_at"]),
    )
