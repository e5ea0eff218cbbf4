"""Pytest fixtures for Weathercraft tests."""

import os
import tempfile
import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

# Point file-backed settings at a scratch directory before the app is imported.
_TMP_ROOT = tempfile.mkdtemp(prefix="weathercraft-tests-")
os.environ.setdefault("DATABASE_PATH", os.path.join(_TMP_ROOT, "weathercraft.db"))
os.environ.setdefault("UPLOADS_DIR", os.path.join(_TMP_ROOT, "uploads"))
os.environ.setdefault("SESSION_SECRET_KEY", "test-secret-key")
os.environ.setdefault("STORAGE_BACKEND", "sqlite")

import pytest
from fastapi.testclient import TestClient

from weathercraft.core.exceptions import DuplicateCodeError, ExternalLookupFailed
from weathercraft.models import Account
from weathercraft.services.mojang_service import PlayerProfile

NOTCH_UUID = "069a79f444e94726a5befca90e38aaf5"
NOTCH_UUID_DASHED = "069a79f4-44e9-4726-a5be-fca90e38aaf5"
JEB_UUID = "853c80ef3c3749fdaa49938b674adae6"


# =============================================================================
# Test doubles
# =============================================================================


class InMemoryAccountStore:
    def __init__(self) -> None:
        self.accounts: Dict[str, Account] = {}
        self._lock = threading.Lock()

    def get_by_id(self, account_id: str) -> Optional[Account]:
        account = self.accounts.get(account_id)
        return account.model_copy() if account else None

    def get_by_external_id(self, external_id: str) -> Optional[Account]:
        for account in self.accounts.values():
            if account.external_id == external_id:
                return account.model_copy()
        return None

    def find_by_code(self, code: str) -> List[Account]:
        return [a.model_copy() for a in self.accounts.values() if a.verification_code == code]

    def upsert_pending(self, account: Account) -> Account:
        with self._lock:
            for other in self.accounts.values():
                if (
                    other.external_id != account.external_id
                    and other.verification_code == account.verification_code
                ):
                    raise DuplicateCodeError()
            existing = self.get_by_external_id(account.external_id)
            if existing is None:
                stored = account.model_copy(update={"verified": False})
            else:
                stored = existing.model_copy(
                    update={
                        "display_name": account.display_name,
                        "avatar_url": account.avatar_url,
                        "verification_code": account.verification_code,
                        "verification_expires_at": account.verification_expires_at,
                        "verified": False,
                    }
                )
            self.accounts[stored.id] = stored
            return stored.model_copy()

    def consume_code(self, account_id: str, code: str) -> bool:
        with self._lock:
            account = self.accounts.get(account_id)
            if account is None or account.verification_code != code:
                return False
            self.accounts[account_id] = account.model_copy(
                update={"verified": True, "verification_code": None}
            )
            return True


class FakeDirectory:
    """Name directory keyed by lower-cased player name."""

    def __init__(self, profiles: Optional[Dict[str, PlayerProfile]] = None) -> None:
        self.profiles = profiles or {}
        self.calls: List[str] = []
        self.unreachable = False

    def lookup(self, name: str) -> PlayerProfile:
        self.calls.append(name)
        if self.unreachable:
            raise ExternalLookupFailed("Player directory is unreachable, try again")
        profile = self.profiles.get(name.lower())
        if profile is None:
            raise ExternalLookupFailed(f"Unknown Minecraft player: {name}", status_code=400)
        return profile


class FakeClock:
    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory(
        {
            "notch": PlayerProfile(external_id=NOTCH_UUID, display_name="Notch"),
            "jeb_": PlayerProfile(external_id=JEB_UUID, display_name="jeb_"),
        }
    )


@pytest.fixture
def memory_store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "weathercraft.db")


@pytest.fixture
def api(db_path, directory, tmp_path):
    """TestClient wired to fresh SQLite stores and the fake name directory."""
    from weathercraft.main import app
    from weathercraft.services.mojang_service import get_mojang_service
    from weathercraft.services.sqlite_store import SqliteAccountStore, SqliteReportStore
    from weathercraft.services.storage import get_account_store, get_report_store
    from weathercraft.services.upload_storage import LocalUploadStorage, get_upload_storage

    account_store = SqliteAccountStore(db_path)
    report_store = SqliteReportStore(db_path)
    uploads = LocalUploadStorage(str(tmp_path / "uploads"), max_bytes=1024)

    app.dependency_overrides[get_account_store] = lambda: account_store
    app.dependency_overrides[get_report_store] = lambda: report_store
    app.dependency_overrides[get_mojang_service] = lambda: directory
    app.dependency_overrides[get_upload_storage] = lambda: uploads
    # Session cookies are Secure, so talk to the app over https.
    with TestClient(app, base_url="https://testserver") as client:
        client.account_store = account_store
        client.uploads_dir = uploads.directory
        yield client
    app.dependency_overrides.clear()
