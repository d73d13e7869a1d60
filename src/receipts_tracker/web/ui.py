from __future__ import annotations

from datetime import date
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from receipts_tracker.core.config import settings
from receipts_tracker.core.db import db_session
from receipts_tracker.core.logging import get_logger, log_event
from receipts_tracker.modules.receipts.api import (
    UploadTooLarge,
    log_upload_failure,
    read_upload,
    upload_error_status,
)
from receipts_tracker.modules.receipts.errors import UploadError
from receipts_tracker.modules.receipts.service import store_receipt_upload

WEB_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(WEB_DIR / "templates"))

router = APIRouter(include_in_schema=False)
logger = get_logger(__name__)


def _text(message: str, status_code: int = 200) -> PlainTextResponse:
    return PlainTextResponse(message + "\r\n", status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def upload_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "send.html",
        {
            "allowed_extensions": settings.allowed_extensions,
            "max_upload_mb": settings.max_upload_bytes // (1024 * 1024),
        },
    )


@router.post("/", response_class=PlainTextResponse)
async def upload_form_submit(
    file: UploadFile | None = File(None),
    tags: str = Form(""),
    session: Session = Depends(db_session),
) -> PlainTextResponse:
    if file is None:
        log_event(logger, "upload.rejected", reason="missing_file")
        return _text("Missing 'file' parameter", status_code=400)

    try:
        body = await read_upload(file)
    except UploadTooLarge:
        return _text("Couldn't parse form or mandatory value(s) missing", status_code=413)

    try:
        result = store_receipt_upload(
            session,
            raw_tags=tags,
            original_filename=file.filename or "",
            body=body,
            received_on=date.today(),
        )
    except UploadError as e:
        log_upload_failure(e)
        return _text(e.user_message, status_code=upload_error_status(e))

    return _text(result.message)


@router.api_route("/", methods=["PUT", "PATCH", "DELETE"], response_class=PlainTextResponse)
def unsupported_method() -> PlainTextResponse:
    return _text("Supported methods: GET, POST", status_code=405)
