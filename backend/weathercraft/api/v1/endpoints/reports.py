"""
Weather reports: public listing and authenticated submission with optional photo.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from weathercraft.core.exceptions import ValidationError
from weathercraft.core.security import get_current_account
from weathercraft.models import Account, Report
from weathercraft.schemas.common import ErrorResponse
from weathercraft.schemas.report import ReportCreated, ReportOut
from weathercraft.services.storage import ReportStore, get_report_store
from weathercraft.services.upload_storage import LocalUploadStorage, get_upload_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


def _required(value: str, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    return value


@router.get("", response_model=List[ReportOut])
def list_reports(store: ReportStore = Depends(get_report_store)):
    """GET /api/v1/reports: all reports, newest first."""
    return [ReportOut.model_validate(r) for r in store.list_reports()]


@router.post(
    "",
    response_model=ReportCreated,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing field or rejected photo"},
        401: {"model": ErrorResponse, "description": "No valid session"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
)
def submit_report(
    city: str = Form(""),
    time: str = Form(""),
    effective_until: str = Form(""),
    type: str = Form(""),
    clouds: Optional[str] = Form(None),
    moisture: str = Form(""),
    act_kind: str = Form(""),
    damage_classification: str = Form(""),
    title: str = Form(""),
    photo: Optional[UploadFile] = File(None),
    account: Account = Depends(get_current_account),
    store: ReportStore = Depends(get_report_store),
    uploads: LocalUploadStorage = Depends(get_upload_storage),
):
    """POST /api/v1/reports: submit a report. Requires a session."""
    report = Report(
        id=str(uuid.uuid4()),
        user_id=account.id,
        city=_required(city, "city"),
        time=_required(time, "time"),
        effective_until=_required(effective_until, "effective_until"),
        type=_required(type, "type"),
        clouds=(clouds or "").strip() or None,
        moisture=_required(moisture, "moisture"),
        act_kind=_required(act_kind, "act_kind"),
        damage_classification=_required(damage_classification, "damage_classification"),
        title=_required(title, "title"),
        created_at=datetime.now(timezone.utc),
    )
    if photo is not None and photo.filename:
        report.photo_url = uploads.save(photo)

    try:
        store.create_report(report)
    except Exception:
        if report.photo_url:
            uploads.delete(report.photo_url)
        raise
    logger.info("Report %s submitted by %s", report.id, account.display_name)
    return ReportCreated(id=report.id)
