from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select

from receipts_tracker.modules.receipts.errors import PersistenceError
from receipts_tracker.modules.receipts.models import Receipt, ReceiptTagAssociation, Tag
from receipts_tracker.modules.receipts.store import (
    get_receipt,
    get_tag_ids,
    insert_associations,
    insert_receipt,
    insert_tags,
    list_receipt_tags,
)


def _count(session, model) -> int:
    return session.scalar(select(func.count()).select_from(model))


def test_insert_receipt_persists_dates(session):
    receipt_id = insert_receipt(
        session,
        filename="abc.jpg",
        purchase_date=date(2019, 8, 6),
        expiry_date=date(2021, 8, 6),
    )

    receipt = get_receipt(session, receipt_id=receipt_id)
    assert receipt
    assert receipt.filename == "abc.jpg"
    assert receipt.purchase_date == date(2019, 8, 6)
    assert receipt.expiry_date == date(2021, 8, 6)
    assert receipt.ocr_text is None


def test_insert_receipt_stores_dates_as_iso_text(session):
    insert_receipt(session, filename="abc.jpg", purchase_date=date(2019, 2, 6))

    raw = session.connection().exec_driver_sql(
        "SELECT purchase_date, expiry_date FROM receipt WHERE filename = 'abc.jpg'"
    ).one()
    assert raw[0] == "2019-02-06"
    assert raw[1] is None


def test_insert_receipt_twice_returns_the_existing_id(session):
    first_id = insert_receipt(session, filename="a.jpg", purchase_date=date(2019, 1, 1))
    other_id = insert_receipt(session, filename="b.jpg")
    again_id = insert_receipt(session, filename="a.jpg", purchase_date=date(2020, 1, 1))

    assert again_id == first_id
    assert other_id != first_id
    assert _count(session, Receipt) == 2
    # The existing row is not updated.
    assert get_receipt(session, receipt_id=first_id).purchase_date == date(2019, 1, 1)


def test_insert_tags_is_idempotent(session):
    insert_tags(session, tags=["yo", "dawg"])
    insert_tags(session, tags=["dawg", "computershop"])

    values = list(session.scalars(select(Tag.tag).order_by(Tag.id)))
    assert values == ["yo", "dawg", "computershop"]


def test_insert_tags_empty_is_a_noop(session):
    insert_tags(session, tags=[])

    assert _count(session, Tag) == 0


def test_get_tag_ids_resolves_known_values_only(session):
    insert_tags(session, tags=["computershop", "laptop", "2019-05-15"])

    ids = get_tag_ids(session, tags=["computershop", "laptop", "2019-05-15", "missing"])

    assert set(ids) == {"computershop", "laptop", "2019-05-15"}
    assert ids["computershop"] == 1
    assert ids["laptop"] == 2
    assert ids["2019-05-15"] == 3
    assert get_tag_ids(session, tags=[]) == {}


def test_insert_associations_links_each_resolved_tag_once(session):
    receipt_id = insert_receipt(session, filename="a.jpg")
    insert_tags(session, tags=["computershop", "laptop"])

    first = insert_associations(session, receipt_id=receipt_id, tags=["computershop", "laptop"])
    second = insert_associations(session, receipt_id=receipt_id, tags=["computershop", "laptop"])

    assert first == 2
    assert second == 0
    assert _count(session, ReceiptTagAssociation) == 2
    assert list_receipt_tags(session, receipt_id=receipt_id) == ["computershop", "laptop"]


def test_insert_associations_skips_unresolved_tags(session):
    receipt_id = insert_receipt(session, filename="a.jpg")
    insert_tags(session, tags=["laptop"])

    affected = insert_associations(session, receipt_id=receipt_id, tags=["laptop", "unknown"])

    assert affected == 1
    assert list_receipt_tags(session, receipt_id=receipt_id) == ["laptop"]


def test_insert_associations_with_nothing_to_link_returns_zero(session):
    receipt_id = insert_receipt(session, filename="a.jpg")

    assert insert_associations(session, receipt_id=receipt_id, tags=[]) == 0
    assert insert_associations(session, receipt_id=receipt_id, tags=["never-inserted"]) == 0
    assert _count(session, ReceiptTagAssociation) == 0


def test_tags_are_shared_between_receipts(session):
    first_id = insert_receipt(session, filename="a.jpg")
    second_id = insert_receipt(session, filename="b.jpg")
    insert_tags(session, tags=["laptop"])

    insert_associations(session, receipt_id=first_id, tags=["laptop"])
    insert_associations(session, receipt_id=second_id, tags=["laptop"])

    assert _count(session, Tag) == 1
    assert _count(session, ReceiptTagAssociation) == 2


def test_insert_associations_for_unknown_receipt_is_a_persistence_error(session):
    insert_tags(session, tags=["laptop"])

    with pytest.raises(PersistenceError) as exc_info:
        insert_associations(session, receipt_id=999, tags=["laptop"])

    assert exc_info.value.stage == "associations"
    assert exc_info.value.receipt_id == 999
    assert _count(session, ReceiptTagAssociation) == 0


def test_insert_receipt_failure_is_reported_as_receipt_stage(session, drop_table):
    drop_table("receipt_tag_association")
    drop_table("receipt")

    with pytest.raises(PersistenceError) as exc_info:
        insert_receipt(session, filename="a.jpg")

    err = exc_info.value
    assert err.stage == "receipt"
    assert err.filename == "a.jpg"
    assert not err.receipt_committed
    assert "no such table" not in err.user_message


def test_unsupported_dialect_is_a_persistence_error(session, monkeypatch):
    oracle = SimpleNamespace(dialect=SimpleNamespace(name="oracle"))
    monkeypatch.setattr(session, "get_bind", lambda *args, **kwargs: oracle)

    with pytest.raises(PersistenceError) as exc_info:
        insert_receipt(session, filename="a.jpg")
    assert exc_info.value.stage == "receipt"

    with pytest.raises(PersistenceError) as exc_info:
        insert_tags(session, tags=["laptop"], receipt_id=1)
    assert exc_info.value.stage == "tags"
