from __future__ import annotations

from datetime import date

import pytest

from receipts_tracker.modules.receipts.dates import extract_expiry_date, extract_purchase_date

START = date(2019, 8, 6)


def test_purchase_date_is_consumed_from_tags():
    tags = ["2019-02-06", "testing", "not_a_date"]

    result = extract_purchase_date(tags)

    assert result.found
    assert result.value == date(2019, 2, 6)
    assert result.remaining == ["testing", "not_a_date"]
    # The caller's list is left alone.
    assert tags == ["2019-02-06", "testing", "not_a_date"]


@pytest.mark.parametrize(
    "tags",
    [
        ["02-06-2019", "testing", "not_a_date"],
        ["testing", "not_a_date"],
        [],
    ],
)
def test_purchase_date_not_found_keeps_tags(tags):
    result = extract_purchase_date(tags)

    assert result.value is None
    assert not result.found
    assert result.remaining == tags


def test_purchase_date_skips_impossible_dates_and_keeps_scanning():
    result = extract_purchase_date(["2019-13-99", "shop", "2019-5-15"])

    assert result.value == date(2019, 5, 15)
    assert result.remaining == ["2019-13-99", "shop"]


def test_purchase_date_first_match_wins():
    result = extract_purchase_date(["a", "2020-01-02", "2021-03-04"])

    assert result.value == date(2020, 1, 2)
    assert result.remaining == ["a", "2021-03-04"]


def test_purchase_date_requires_full_token_match():
    result = extract_purchase_date(["x2019-02-06", "2019-02-06x", "12019-02-06"])

    assert result.value is None


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("1_day", date(2019, 8, 7)),
        ("6_days", date(2019, 8, 12)),
        ("1_month", date(2019, 9, 6)),
        ("6_months", date(2020, 2, 6)),
        ("1_year", date(2020, 8, 6)),
        ("6_years", date(2025, 8, 6)),
        ("0_days", date(2019, 8, 6)),
    ],
)
def test_expiry_offsets(token, expected):
    result = extract_expiry_date(["4_habla", "not_a_date", token], START)

    assert result.value == expected
    assert result.remaining == ["4_habla", "not_a_date"]


def test_expiry_single_token_leaves_empty_remainder():
    result = extract_expiry_date(["1_day"], START)

    assert result.value == date(2019, 8, 7)
    assert result.remaining == []


@pytest.mark.parametrize(
    "tags",
    [
        ["4_habla", "f", "asdf"],
        ["4_habla", "d_days", "asdf"],
        ["1_weeks", "day_1", "1_dayss"],
    ],
)
def test_expiry_not_found(tags):
    result = extract_expiry_date(tags, START)

    assert result.value is None
    assert result.remaining == tags


def test_expiry_month_offset_clamps_to_month_end():
    result = extract_expiry_date(["1_month"], date(2019, 1, 31))

    assert result.value == date(2019, 2, 28)


def test_expiry_out_of_range_offset_is_skipped():
    result = extract_expiry_date(["99999_years", "2_days"], START)

    assert result.value == date(2019, 8, 8)
    assert result.remaining == ["99999_years"]


def test_purchase_then_expiry_cannot_consume_the_same_token():
    purchase = extract_purchase_date(["2019-08-06", "warranty", "2_years"])
    expiry = extract_expiry_date(purchase.remaining, purchase.value)

    assert purchase.value == date(2019, 8, 6)
    assert expiry.value == date(2021, 8, 6)
    assert expiry.remaining == ["warranty"]


def test_tokens_with_trailing_newline_are_not_dates():
    assert extract_purchase_date(["2019-02-06\n"]).value is None
    assert extract_expiry_date(["1_day\n"], date(2019, 8, 6)).value is None
