from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from receipts_tracker.core.config import settings
from receipts_tracker.core.db import db_session
from receipts_tracker.core.logging import get_logger, log_event
from receipts_tracker.modules.receipts.errors import (
    DisallowedExtension,
    EmptyContent,
    PersistenceError,
    UploadError,
)
from receipts_tracker.modules.receipts.schemas import ReceiptOut, ReceiptUploadOut
from receipts_tracker.modules.receipts.service import store_receipt_upload
from receipts_tracker.modules.receipts.store import get_receipt, list_receipt_tags

router = APIRouter(tags=["receipts"])
logger = get_logger(__name__)


class UploadTooLarge(Exception):
    pass


async def read_upload(upload: UploadFile) -> bytes:
    body = await upload.read(settings.max_upload_bytes + 1)
    if len(body) > settings.max_upload_bytes:
        log_event(
            logger,
            "upload.rejected",
            level=logging.WARNING,
            reason="size",
            original_filename=upload.filename,
            max_bytes=settings.max_upload_bytes,
        )
        raise UploadTooLarge()
    log_event(
        logger,
        "upload.received",
        original_filename=upload.filename,
        content_type=upload.content_type,
        byte_size=len(body),
    )
    return body


def upload_error_status(error: UploadError) -> int:
    if isinstance(error, (EmptyContent, DisallowedExtension)):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def log_upload_failure(error: UploadError) -> None:
    log_event(
        logger,
        "upload.failed",
        level=logging.ERROR,
        stage=error.stage,
        error_type=type(error).__name__,
        filename=getattr(error, "filename", None),
        receipt_id=getattr(error, "receipt_id", None),
        receipt_committed=isinstance(error, PersistenceError) and error.receipt_committed,
    )


@router.post("/receipts", response_model=ReceiptUploadOut, status_code=status.HTTP_201_CREATED)
async def upload_receipt(
    file: UploadFile = File(...),
    tags: str = Form(""),
    session: Session = Depends(db_session),
) -> ReceiptUploadOut:
    try:
        body = await read_upload(file)
    except UploadTooLarge as e:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File too large",
        ) from e

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
        raise HTTPException(status_code=upload_error_status(e), detail=e.user_message) from e

    return ReceiptUploadOut(
        receipt_id=result.receipt_id,
        filename=result.filename,
        purchase_date=result.purchase_date,
        expiry_date=result.expiry_date,
        tags=result.tags,
        tags_written=result.tags_written,
        association_count=result.association_count,
        duplicate=result.duplicate,
    )


@router.get("/receipts/{receipt_id}", response_model=ReceiptOut)
def get_receipt_endpoint(
    receipt_id: int,
    session: Session = Depends(db_session),
) -> ReceiptOut:
    receipt = get_receipt(session, receipt_id=receipt_id)
    if not receipt:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receipt not found")
    out = ReceiptOut.model_validate(receipt, from_attributes=True)
    out.tags = list_receipt_tags(session, receipt_id=receipt.id)
    return out
