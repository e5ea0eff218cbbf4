"""
SQLite-backed account and report stores (default local backend).
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from weathercraft.core.exceptions import DuplicateCodeError, StorageError
from weathercraft.models import Account, Report

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    id TEXT PRIMARY KEY,
    external_id TEXT NOT NULL UNIQUE,
    display_name TEXT NOT NULL,
    avatar_url TEXT,
    verification_code TEXT,
    verification_expires_at TEXT,
    verified INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_accounts_verification_code
    ON accounts (verification_code)
    WHERE verification_code IS NOT NULL;

CREATE TABLE IF NOT EXISTS reports (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    city TEXT NOT NULL,
    time TEXT NOT NULL,
    effective_until TEXT NOT NULL,
    type TEXT NOT NULL,
    clouds TEXT,
    moisture TEXT NOT NULL,
    act_kind TEXT NOT NULL,
    damage_classification TEXT NOT NULL,
    photo_url TEXT,
    title TEXT NOT NULL,
    created_at TEXT NOT NULL,
    FOREIGN KEY (user_id) REFERENCES accounts (id)
);
"""

_ACCOUNT_COLUMNS = (
    "id, external_id, display_name, avatar_url, verification_code, "
    "verification_expires_at, verified, created_at"
)


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class _SqliteBase:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        directory = os.path.dirname(os.path.abspath(db_path))
        os.makedirs(directory, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit on success, roll back on error, always close."""
        try:
            conn = sqlite3.connect(self._db_path, timeout=10)
        except sqlite3.Error as e:
            logger.error("SQLite connect error: %s", e)
            raise StorageError("Failed to open database") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "verification_code" in str(e):
                raise DuplicateCodeError() from e
            logger.error("SQLite integrity error: %s", e)
            raise StorageError() from e
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("SQLite error: %s", e)
            raise StorageError() from e
        finally:
            conn.close()


class SqliteAccountStore(_SqliteBase):
    """SQLite implementation of `AccountStore`."""

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Account:
        return Account(
            id=row["id"],
            external_id=row["external_id"],
            display_name=row["display_name"],
            avatar_url=row["avatar_url"],
            verification_code=row["verification_code"],
            verification_expires_at=_parse_dt(row["verification_expires_at"]),
            verified=bool(row["verified"]),
            created_at=_parse_dt(row["created_at"]),
        )

    def _fetch_one(self, conn: sqlite3.Connection, column: str, value: str) -> Optional[Account]:
        row = conn.execute(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE {column} = ?",
            (value,),
        ).fetchone()
        return self._to_domain(row) if row else None

    def get_by_id(self, account_id: str) -> Optional[Account]:
        with self._connect() as conn:
            return self._fetch_one(conn, "id", account_id)

    def get_by_external_id(self, external_id: str) -> Optional[Account]:
        with self._connect() as conn:
            return self._fetch_one(conn, "external_id", external_id)

    def find_by_code(self, code: str) -> List[Account]:
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE verification_code = ?",
                (code,),
            ).fetchall()
            return [self._to_domain(row) for row in rows]

    def upsert_pending(self, account: Account) -> Account:
        expires_at = account.verification_expires_at.isoformat() if account.verification_expires_at else None
        with self._connect() as conn:
            cur = conn.execute(
                """
                UPDATE accounts
                SET display_name = ?, avatar_url = ?, verification_code = ?,
                    verification_expires_at = ?, verified = 0
                WHERE external_id = ?
                """,
                (
                    account.display_name,
                    account.avatar_url,
                    account.verification_code,
                    expires_at,
                    account.external_id,
                ),
            )
            if cur.rowcount == 0:
                self._insert_pending(conn, account, expires_at)
            stored = self._fetch_one(conn, "external_id", account.external_id)
        if stored is None:
            raise StorageError("Account row missing after upsert")
        return stored

    @staticmethod
    def _insert_pending(conn: sqlite3.Connection, account: Account, expires_at: Optional[str]) -> None:
        # ON CONFLICT covers a concurrent first issuance for the same player.
        conn.execute(
            """
            INSERT INTO accounts (
                id, external_id, display_name, avatar_url,
                verification_code, verification_expires_at, verified, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, 0, ?)
            ON CONFLICT (external_id) DO UPDATE SET
                display_name = excluded.display_name,
                avatar_url = excluded.avatar_url,
                verification_code = excluded.verification_code,
                verification_expires_at = excluded.verification_expires_at,
                verified = 0
            """,
            (
                account.id,
                account.external_id,
                account.display_name,
                account.avatar_url,
                account.verification_code,
                expires_at,
                account.created_at.isoformat(),
            ),
        )

    def consume_code(self, account_id: str, code: str) -> bool:
        with self._connect() as conn:
            cur = conn.execute(
                """
                UPDATE accounts
                SET verified = 1, verification_code = NULL
                WHERE id = ? AND verification_code = ?
                """,
                (account_id, code),
            )
            return cur.rowcount == 1


class SqliteReportStore(_SqliteBase):
    """SQLite implementation of `ReportStore`."""

    def list_reports(self) -> List[Report]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT reports.*, accounts.display_name AS author_name
                FROM reports
                LEFT JOIN accounts ON reports.user_id = accounts.id
                ORDER BY reports.created_at DESC
                """
            ).fetchall()
        return [
            Report(**{**dict(row), "created_at": _parse_dt(row["created_at"])})
            for row in rows
        ]

    def create_report(self, report: Report) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO reports (
                    id, user_id, city, time, effective_until, type, clouds,
                    moisture, act_kind, damage_classification, photo_url, title, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    report.id,
                    report.user_id,
                    report.city,
                    report.time,
                    report.effective_until,
                    report.type,
                    report.clouds,
                    report.moisture,
                    report.act_kind,
                    report.damage_classification,
                    report.photo_url,
                    report.title,
                    report.created_at.isoformat(),
                ),
            )
