"""
Tracking ids: DL + YYYYMMDD + 3-digit daily sequence.
"""
from datetime import date, datetime

import pytest
from sqlalchemy.exc import IntegrityError

from dolu.services.errors import TrackingIdExhaustedError
from dolu.services.tracking import (
    TRACKING_ID_PATTERN, TrackingIdGenerator, format_tracking_id, is_tracking_id_conflict,
    normalize_tracking_id, parse_tracking_id,
)


def test_format_and_parse():
    tracking_id = format_tracking_id(date(2024, 2, 9), 1)
    assert tracking_id == "DL20240209001"
    assert len(tracking_id) == 13
    assert TRACKING_ID_PATTERN.match(tracking_id)
    assert parse_tracking_id(tracking_id) == (date(2024, 2, 9), 1)


def test_sequence_bounds():
    assert format_tracking_id(date(2024, 2, 9), 999) == "DL20240209999"
    with pytest.raises(TrackingIdExhaustedError):
        format_tracking_id(date(2024, 2, 9), 1000)
    with pytest.raises(ValueError):
        format_tracking_id(date(2024, 2, 9), 0)


@pytest.mark.parametrize("bad", ["", "DL2024020900", "XX20240209001", "DL20240209A01", "DL202402090011"])
def test_parse_rejects_malformed(bad):
    with pytest.raises(ValueError):
        parse_tracking_id(bad)


def test_normalize_trims_and_uppercases():
    assert normalize_tracking_id("  dl20240209001 ") == "DL20240209001"
    assert normalize_tracking_id(None) == ""


async def test_first_id_of_the_day(db, generator):
    assert await generator.generate(db) == "DL20240209001"


async def test_sequence_continues_after_highest_used(db, generator, insert_booking):
    await insert_booking("DL20240209001")
    await insert_booking("DL20240209007")
    await insert_booking("DL20240208042")

    assert await generator.generate(db) == "DL20240209008"


async def test_sequence_restarts_next_day(db, insert_booking):
    await insert_booking("DL20240209015")
    next_day = TrackingIdGenerator(clock=lambda: datetime(2024, 2, 10, 0, 5))

    assert await next_day.generate(db) == "DL20240210001"


async def test_exhausted_day_fails_loudly(db, generator, insert_booking):
    await insert_booking("DL20240209999")

    with pytest.raises(TrackingIdExhaustedError):
        await generator.generate(db)


@pytest.mark.parametrize(
    "message, conflict",
    [
        ("UNIQUE constraint failed: bookings.tracking_id", True),
        ('duplicate key value violates unique constraint "ix_bookings_tracking_id"', True),
        ("CHECK constraint failed: ck_bookings_tracking_id_length", False),
        ("FOREIGN KEY constraint failed", False),
    ],
)
def test_only_unique_violations_count_as_conflicts(message, conflict):
    exc = IntegrityError("INSERT INTO bookings ...", {}, Exception(message))
    assert is_tracking_id_conflict(exc) is conflict
