# Domain models shared by services and storage backends.

from weathercraft.models.account import Account, normalize_external_id
from weathercraft.models.report import Report

__all__ = [
    "Account",
    "Report",
    "normalize_external_id",
]
