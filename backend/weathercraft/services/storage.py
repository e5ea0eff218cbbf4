"""
Storage abstractions for accounts and reports, plus the FastAPI dependencies
that pick a backend from settings.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional, Protocol

from weathercraft.core.config import get_settings
from weathercraft.models import Account, Report


class AccountStore(Protocol):
    """
    Persistence for accounts and their verification state.

    Implementations must enforce uniqueness of `external_id` and of every
    non-null `verification_code`.
    """

    def get_by_id(self, account_id: str) -> Optional[Account]:
        ...

    def get_by_external_id(self, external_id: str) -> Optional[Account]:
        ...

    def find_by_code(self, code: str) -> List[Account]:
        """Return every account currently holding `code` (normally zero or one)."""

        ...

    def upsert_pending(self, account: Account) -> Account:
        """
        Insert `account`, or if its `external_id` already exists overwrite the
        display name, avatar, code and expiry and reset `verified` to False.

        Returns the stored row; its `id` and `created_at` are those of the
        existing account on update. Raises `DuplicateCodeError` if the code
        is live on another account.
        """

        ...

    def consume_code(self, account_id: str, code: str) -> bool:
        """
        Atomically mark the account verified and clear its code, only if the
        account still holds `code`. Returns False if nothing was updated.
        """

        ...


class ReportStore(Protocol):
    def list_reports(self) -> List[Report]:
        """Return all reports newest first, with `author_name` filled in."""

        ...

    def create_report(self, report: Report) -> None:
        ...


@lru_cache()
def get_account_store() -> AccountStore:
    """Dependency for FastAPI."""
    settings = get_settings()
    if settings.STORAGE_BACKEND == "supabase":
        from weathercraft.services.supabase_service import SupabaseAccountStore

        return SupabaseAccountStore()
    from weathercraft.services.sqlite_store import SqliteAccountStore

    return SqliteAccountStore(settings.DATABASE_PATH)


@lru_cache()
def get_report_store() -> ReportStore:
    """Dependency for FastAPI."""
    settings = get_settings()
    if settings.STORAGE_BACKEND == "supabase":
        from weathercraft.services.supabase_service import SupabaseReportStore

        return SupabaseReportStore()
    from weathercraft.services.sqlite_store import SqliteReportStore

    return SqliteReportStore(settings.DATABASE_PATH)
