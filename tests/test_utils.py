"""Timestamp helpers and date formatting."""

from datetime import datetime, timedelta, timezone

from review_portal.models import Assignment, PendingUser, StoredFile, User
from review_portal.utils import as_utc, format_date, utc_now


def test_utc_now_is_timezone_aware():
    now = utc_now()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_as_utc_treats_naive_values_as_utc():
    naive = datetime(2025, 3, 5, 12, 30)
    assert as_utc(naive) == datetime(2025, 3, 5, 12, 30, tzinfo=timezone.utc)


def test_as_utc_converts_other_offsets():
    plus_two = datetime(2025, 3, 5, 14, 30, tzinfo=timezone(timedelta(hours=2)))
    assert as_utc(plus_two) == datetime(2025, 3, 5, 12, 30, tzinfo=timezone.utc)
    assert as_utc(plus_two).tzinfo == timezone.utc


def test_model_timestamps_default_to_aware_utc():
    records = [
        User(name="Ann", email="a@u.edu", password_hash="x"),
        PendingUser(email="a@u.edu", password_hash="x", role="student"),
        Assignment(
            student_id=1,
            student_name="Ann",
            student_email="a@u.edu",
            department="cs",
            title="T",
            content_ref="1",
        ),
        StoredFile(filename="f.pdf", data=b"x"),
    ]
    stamps = [records[0].created_at, records[1].created_at, records[2].submitted_at,
              records[2].created_at, records[2].updated_at, records[3].upload_date]
    assert all(stamp.tzinfo is not None for stamp in stamps)


def test_format_date():
    assert format_date(datetime(2025, 3, 5)) == "5 Mar 2025"
