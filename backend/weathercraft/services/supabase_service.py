"""
Supabase-backed account and report stores (STORAGE_BACKEND=supabase).
Tables are defined in backend/supabase/schema.sql.
"""

import logging
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from weathercraft.core.config import get_settings
from weathercraft.core.exceptions import DuplicateCodeError, StorageError
from weathercraft.models import Account, Report

logger = logging.getLogger(__name__)

ACCOUNTS_TABLE = "accounts"
REPORTS_TABLE = "reports"
# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


def _create_client() -> Client:
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)


class SupabaseAccountStore:
    def __init__(self, client: Optional[Client] = None) -> None:
        self.client: Client = client or _create_client()

    def _select_one(self, column: str, value: str) -> Optional[Account]:
        try:
            response = (
                self.client.table(ACCOUNTS_TABLE)
                .select("*")
                .eq(column, value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("Get account by %s error: %s", column, str(e))
            raise StorageError("Failed to load account") from e
        if response.data and len(response.data) > 0:
            return Account.model_validate(response.data[0])
        return None

    def get_by_id(self, account_id: str) -> Optional[Account]:
        return self._select_one("id", account_id)

    def get_by_external_id(self, external_id: str) -> Optional[Account]:
        return self._select_one("external_id", external_id)

    def find_by_code(self, code: str) -> List[Account]:
        try:
            response = (
                self.client.table(ACCOUNTS_TABLE)
                .select("*")
                .eq("verification_code", code)
                .execute()
            )
        except Exception as e:
            logger.error("Find account by code error: %s", str(e))
            raise StorageError("Failed to load account") from e
        return [Account.model_validate(row) for row in response.data or []]

    def upsert_pending(self, account: Account) -> Account:
        """
        Upsert on external_id. `id` and `created_at` are left to column
        defaults so an existing row keeps its identity.
        """
        row: Dict[str, Any] = {
            "external_id": account.external_id,
            "display_name": account.display_name,
            "avatar_url": account.avatar_url,
            "verification_code": account.verification_code,
            "verification_expires_at": (
                account.verification_expires_at.isoformat()
                if account.verification_expires_at
                else None
            ),
            "verified": False,
        }
        try:
            response = (
                self.client.table(ACCOUNTS_TABLE)
                .upsert(row, on_conflict="external_id")
                .execute()
            )
        except Exception as e:
            if getattr(e, "code", None) == UNIQUE_VIOLATION and "verification_code" in str(e):
                raise DuplicateCodeError() from e
            logger.error("Upsert account error: %s", str(e))
            raise StorageError("Failed to save account") from e
        if response.data and len(response.data) > 0:
            return Account.model_validate(response.data[0])
        raise StorageError("Account row missing after upsert")

    def consume_code(self, account_id: str, code: str) -> bool:
        try:
            response = (
                self.client.table(ACCOUNTS_TABLE)
                .update({"verified": True, "verification_code": None})
                .eq("id", account_id)
                .eq("verification_code", code)
                .execute()
            )
        except Exception as e:
            logger.error("Consume code error: %s", str(e))
            raise StorageError("Failed to update account") from e
        return bool(response.data)


class SupabaseReportStore:
    def __init__(self, client: Optional[Client] = None) -> None:
        self.client: Client = client or _create_client()

    def list_reports(self) -> List[Report]:
        try:
            response = (
                self.client.table(REPORTS_TABLE)
                .select("*, accounts(display_name)")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("List reports error: %s", str(e))
            raise StorageError("Failed to load reports") from e
        reports: List[Report] = []
        for row in response.data or []:
            author = row.pop("accounts", None) or {}
            reports.append(Report.model_validate({**row, "author_name": author.get("display_name")}))
        return reports

    def create_report(self, report: Report) -> None:
        row = report.model_dump(mode="json", exclude={"author_name"})
        try:
            self.client.table(REPORTS_TABLE).insert(row).execute()
        except Exception as e:
            logger.error("Create report error: %s", str(e))
            raise StorageError("Failed to submit report") from e
