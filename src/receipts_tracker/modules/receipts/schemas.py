from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class ReceiptUploadOut(BaseModel):
    receipt_id: int
    filename: str
    purchase_date: date | None
    expiry_date: date | None
    tags: list[str]
    tags_written: bool
    association_count: int
    duplicate: bool


class ReceiptOut(BaseModel):
    id: int
    filename: str
    purchase_date: date | None
    expiry_date: date | None
    tags: list[str] = []
