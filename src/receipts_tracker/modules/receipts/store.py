from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from sqlalchemy import Table, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import CompileError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.dml import Insert

from receipts_tracker.core.logging import get_logger, log_event, log_exception
from receipts_tracker.modules.receipts.errors import PersistenceError
from receipts_tracker.modules.receipts.models import Receipt, ReceiptTagAssociation, Tag

logger = get_logger(__name__)


def _insert_ignore(session: Session, table: Table, rows: list[dict]) -> Insert:
    """INSERT that skips rows violating a unique constraint."""
    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        return sqlite.insert(table).values(rows).on_conflict_do_nothing()
    if dialect == "postgresql":
        return postgresql.insert(table).values(rows).on_conflict_do_nothing()
    if dialect in {"mysql", "mariadb"}:
        return insert(table).values(rows).prefix_with("IGNORE")
    raise CompileError(f"insert-or-ignore is not supported for {dialect}")


def _fail(
    session: Session,
    stage: str,
    error: SQLAlchemyError,
    *,
    filename: str | None = None,
    receipt_id: int | None = None,
    **fields,
) -> PersistenceError:
    session.rollback()
    log_exception(
        logger,
        f"receipts.store.{stage}.failure",
        stage=stage,
        filename=filename,
        receipt_id=receipt_id,
        error_type=type(error).__name__,
        **fields,
    )
    return PersistenceError(stage, filename=filename, receipt_id=receipt_id)


def insert_receipt(
    session: Session,
    *,
    filename: str,
    purchase_date: date | None = None,
    expiry_date: date | None = None,
) -> int:
    """Insert the receipt row unless one with this filename exists; return its id.

    An existing row keeps its original dates.
    """
    try:
        stmt = _insert_ignore(
            session,
            Receipt.__table__,
            [{"filename": filename, "purchase_date": purchase_date, "expiry_date": expiry_date}],
        )
        result = session.execute(stmt)
        receipt_id = session.scalar(select(Receipt.id).where(Receipt.filename == filename))
        session.commit()
    except SQLAlchemyError as e:
        raise _fail(session, "receipt", e, filename=filename) from e

    if receipt_id is None:
        log_event(logger, "receipts.store.receipt.missing", filename=filename)
        raise PersistenceError("receipt", filename=filename)

    log_event(
        logger,
        "receipts.store.receipt.success",
        filename=filename,
        receipt_id=receipt_id,
        created=bool(result.rowcount),
        purchase_date=purchase_date,
        expiry_date=expiry_date,
    )
    return receipt_id


def insert_tags(session: Session, *, tags: Sequence[str], receipt_id: int | None = None) -> None:
    """Make sure every tag value exists as a row. Empty input is a no-op."""
    if not tags:
        return
    rows = [{"tag": tag} for tag in dict.fromkeys(tags)]
    try:
        result = session.execute(_insert_ignore(session, Tag.__table__, rows))
        session.commit()
    except SQLAlchemyError as e:
        raise _fail(session, "tags", e, receipt_id=receipt_id, tag_count=len(tags)) from e
    log_event(
        logger,
        "receipts.store.tags.success",
        receipt_id=receipt_id,
        tag_count=len(tags),
        created=result.rowcount,
    )


def get_tag_ids(session: Session, *, tags: Sequence[str]) -> dict[str, int]:
    if not tags:
        return {}
    rows = session.execute(select(Tag.tag, Tag.id).where(Tag.tag.in_(list(tags))))
    return {value: tag_id for value, tag_id in rows}


def insert_associations(session: Session, *, receipt_id: int, tags: Sequence[str]) -> int:
    """Link a receipt to its tags; returns the number of new links.

    Tags without a row are skipped. With nothing to link no statement is
    issued and 0 is returned.
    """
    if not tags:
        return 0
    try:
        tag_ids = get_tag_ids(session, tags=tags)
        unresolved = [tag for tag in tags if tag not in tag_ids]
        rows = [
            {"receipt_id": receipt_id, "tag_id": tag_ids[tag]}
            for tag in dict.fromkeys(tags)
            if tag in tag_ids
        ]
        if not rows:
            session.rollback()
            log_event(
                logger,
                "receipts.store.associations.skipped",
                receipt_id=receipt_id,
                unresolved=unresolved,
            )
            return 0
        result = session.execute(_insert_ignore(session, ReceiptTagAssociation.__table__, rows))
        session.commit()
    except SQLAlchemyError as e:
        raise _fail(session, "associations", e, receipt_id=receipt_id) from e

    affected = result.rowcount
    log_event(
        logger,
        "receipts.store.associations.success",
        receipt_id=receipt_id,
        affected=affected,
        unresolved=unresolved or None,
    )
    return affected


def get_receipt(session: Session, *, receipt_id: int) -> Receipt | None:
    return session.scalar(select(Receipt).where(Receipt.id == receipt_id))


def get_receipt_by_filename(session: Session, *, filename: str) -> Receipt | None:
    return session.scalar(select(Receipt).where(Receipt.filename == filename))


def list_receipt_tags(session: Session, *, receipt_id: int) -> list[str]:
    return list(
        session.scalars(
            select(Tag.tag)
            .join(ReceiptTagAssociation, ReceiptTagAssociation.tag_id == Tag.id)
            .where(ReceiptTagAssociation.receipt_id == receipt_id)
            .order_by(ReceiptTagAssociation.id)
        )
    )
