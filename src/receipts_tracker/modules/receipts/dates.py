from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from dateutil.relativedelta import relativedelta

from receipts_tracker.core.logging import get_logger, log_event

logger = get_logger(__name__)

PURCHASE_DATE_RE = re.compile(r"([0-9]{4})-([0-9]{1,2})-([0-9]{1,2})")
EXPIRY_OFFSET_RE = re.compile(r"([0-9]+)_(day|month|year)s?")


@dataclass(frozen=True)
class DateExtraction:
    """Result of scanning tags for a date token.

    `value` is None when no usable token was found; `remaining` holds the
    tags in their original order without the consumed token.
    """

    value: date | None
    remaining: list[str]

    @property
    def found(self) -> bool:
        return self.value is not None


def _without(tags: Sequence[str], index: int) -> list[str]:
    return [t for i, t in enumerate(tags) if i != index]


def _malformed(kind: str, token: str, reason: str) -> None:
    log_event(
        logger,
        "tags.date.malformed",
        level=logging.WARNING,
        kind=kind,
        token=token,
        reason=reason,
    )


def extract_purchase_date(tags: Sequence[str]) -> DateExtraction:
    """Consume the first `YYYY-M-D` tag that names a real calendar date."""
    for index, token in enumerate(tags):
        match = PURCHASE_DATE_RE.fullmatch(token)
        if not match:
            continue
        year, month, day = (int(part) for part in match.groups())
        try:
            parsed = date(year, month, day)
        except ValueError as e:
            _malformed("purchase", token, str(e))
            continue
        return DateExtraction(value=parsed, remaining=_without(tags, index))
    return DateExtraction(value=None, remaining=list(tags))


def _offset(unit: str, amount: int) -> relativedelta:
    if unit == "day":
        return relativedelta(days=amount)
    if unit == "month":
        return relativedelta(months=amount)
    return relativedelta(years=amount)


def extract_expiry_date(tags: Sequence[str], start: date) -> DateExtraction:
    """Consume the first `N_day(s)|N_month(s)|N_year(s)` tag and apply it to `start`.

    Month and year offsets clamp to the end of the target month, so
    2019-01-31 plus `1_month` is 2019-02-28.
    """
    for index, token in enumerate(tags):
        match = EXPIRY_OFFSET_RE.fullmatch(token)
        if not match:
            continue
        raw_amount, unit = match.groups()
        try:
            amount = int(raw_amount)
        except ValueError as e:
            _malformed("expiry", token, str(e))
            continue
        try:
            expires = start + _offset(unit, amount)
        except (OverflowError, ValueError) as e:
            _malformed("expiry", token, str(e))
            continue
        return DateExtraction(value=expires, remaining=_without(tags, index))
    return DateExtraction(value=None, remaining=list(tags))
