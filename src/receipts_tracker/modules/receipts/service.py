from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.orm import Session

from receipts_tracker.core.config import settings
from receipts_tracker.core.logging import get_logger, log_event
from receipts_tracker.core.storage import ObjectStorage, StorageError, get_storage
from receipts_tracker.modules.receipts.dates import extract_expiry_date, extract_purchase_date
from receipts_tracker.modules.receipts.errors import DisallowedExtension, FileWriteError
from receipts_tracker.modules.receipts.files import address_for, is_allowed_extension
from receipts_tracker.modules.receipts.store import (
    get_receipt,
    insert_associations,
    insert_receipt,
    insert_tags,
)
from receipts_tracker.modules.receipts.tags import normalize_tags

logger = get_logger(__name__)


@dataclass(frozen=True)
class UploadResult:
    filename: str
    receipt_id: int
    purchase_date: date | None
    expiry_date: date | None
    tags: list[str] = field(default_factory=list)
    tags_written: bool = False
    association_count: int = 0
    duplicate: bool = False

    @property
    def message(self) -> str:
        return f"Storing of receipt {self.filename} completed"


def store_receipt_upload(
    session: Session,
    *,
    raw_tags: str | None,
    original_filename: str,
    body: bytes,
    received_on: date | None = None,
    storage: ObjectStorage | None = None,
) -> UploadResult:
    """Run one upload through tag parsing, file storage and the database.

    `received_on` is the fallback start for an expiry offset when the tags
    carry no purchase date; without either the offset tag is kept as a tag.
    Raises an `UploadError` subclass naming the failed stage.
    """
    tags = normalize_tags(raw_tags)
    log_event(logger, "upload.tags.parsed", original_filename=original_filename, tags=tags)

    purchase = extract_purchase_date(tags)
    tags = purchase.remaining
    if not purchase.found:
        log_event(logger, "upload.purchase_date.missing", level=logging.WARNING)

    expiry_date = None
    start = purchase.value or received_on
    if start is not None:
        expiry = extract_expiry_date(tags, start)
        tags = expiry.remaining
        expiry_date = expiry.value
    if expiry_date is None:
        log_event(logger, "upload.expiry_date.missing", level=logging.WARNING)

    if not is_allowed_extension(original_filename):
        log_event(
            logger,
            "upload.rejected",
            level=logging.WARNING,
            reason="extension",
            original_filename=original_filename,
        )
        raise DisallowedExtension(original_filename, settings.allowed_extensions)

    filename = address_for(body, original_filename)
    log_event(
        logger,
        "upload.addressed",
        original_filename=original_filename,
        filename=filename,
        byte_size=len(body),
    )

    storage = storage or get_storage()
    try:
        stored = storage.put(key=filename, body=body)
    except StorageError as e:
        raise FileWriteError() from e
    duplicate = not stored.created

    receipt_id = insert_receipt(
        session,
        filename=filename,
        purchase_date=purchase.value,
        expiry_date=expiry_date,
    )
    # An existing row keeps the dates it was first stored with.
    receipt = get_receipt(session, receipt_id=receipt_id)
    stored_purchase_date = receipt.purchase_date if receipt else purchase.value
    stored_expiry_date = receipt.expiry_date if receipt else expiry_date

    insert_tags(session, tags=tags, receipt_id=receipt_id)
    association_count = insert_associations(session, receipt_id=receipt_id, tags=tags)

    log_event(
        logger,
        "upload.completed",
        filename=filename,
        receipt_id=receipt_id,
        purchase_date=stored_purchase_date,
        expiry_date=stored_expiry_date,
        association_count=association_count,
        duplicate=duplicate,
    )
    return UploadResult(
        filename=filename,
        receipt_id=receipt_id,
        purchase_date=stored_purchase_date,
        expiry_date=stored_expiry_date,
        tags=tags,
        tags_written=True,
        association_count=association_count,
        duplicate=duplicate,
    )
