from datetime import date, datetime, timezone

import pytest

from src.evals_attendance.evals_attendance.common.datetime_utils import (
    default_year_start,
    parse_iso_date,
    parse_iso_datetime,
)


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2024, 9, 3), date(2024, 6, 1)),
        (date(2024, 6, 1), date(2024, 6, 1)),
        (date(2025, 2, 14), date(2024, 6, 1)),
    ],
)
def test_default_year_start(today, expected):
    assert default_year_start(today) == expected


def test_parse_iso_datetime_accepts_bare_date():
    assert parse_iso_datetime("2024-09-03") == datetime(2024, 9, 3)
    assert parse_iso_datetime("2024-09-03T18:30:00") == datetime(2024, 9, 3, 18, 30)


def test_parse_iso_datetime_converts_offsets_to_local_time():
    in_utc = datetime(2024, 9, 10, 17, 0, tzinfo=timezone.utc)
    local = in_utc.astimezone().replace(tzinfo=None)

    assert parse_iso_datetime("2024-09-10T19:00:00+02:00") == local
    assert parse_iso_datetime("2024-09-10T17:00:00Z") == local
    assert parse_iso_datetime("2024-09-10T19:00:00+02:00").tzinfo is None


def test_parse_iso_date_rejects_garbage():
    with pytest.raises(ValueError):
        parse_iso_date("03/09/2024")
