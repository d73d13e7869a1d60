from __future__ import annotations

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from receipts_tracker.core.models import Base, IntegerPrimaryKey


class Receipt(IntegerPrimaryKey, Base):
    __tablename__ = "receipt"

    filename: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    purchase_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # Reserved for OCR output; nothing writes it yet.
    ocr_text: Mapped[str | None] = mapped_column(String, nullable=True)

    tag_links = relationship("ReceiptTagAssociation", back_populates="receipt")


class Tag(IntegerPrimaryKey, Base):
    __tablename__ = "tag"

    tag: Mapped[str | None] = mapped_column(String, nullable=True, unique=True)


class ReceiptTagAssociation(IntegerPrimaryKey, Base):
    __tablename__ = "receipt_tag_association"
    __table_args__ = (
        UniqueConstraint("receipt_id", "tag_id", name="uq_receipt_tag_association"),
    )

    receipt_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("receipt.id"), nullable=True
    )
    tag_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("tag.id"), nullable=True)

    receipt = relationship("Receipt", back_populates="tag_links")
    tag = relationship("Tag")
