"""Tests for duplicate detection against the upload history."""

from datetime import datetime, timezone

import pytest

from app.models.upload_history import UploadHistory
from app.services.duplicate_checker import SCOPE_GLOBAL, find_duplicate


def add_history(db, file_hash="h1", filename="orders.csv", source="shopee", rows=10):
    record = UploadHistory(
        file_hash=file_hash,
        original_filename=filename,
        data_source=source,
        table_name=f"temp_{source}_data",
        rows_inserted=rows,
        upload_date=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
    )
    db.add(record)
    db.commit()
    return record


def test_no_history_no_duplicate(db_session):
    assert find_duplicate(db_session, "h1", "orders.csv", "shopee") is None


def test_content_match_same_source(db_session):
    first = add_history(db_session)
    match = find_duplicate(db_session, "h1", "renamed.csv", "shopee")

    assert match.match_type == "content"
    assert match.upload_id == first.id
    assert match.original_filename == "orders.csv"
    assert match.upload_date.replace(tzinfo=None) == datetime(2026, 3, 1, 12, 0)


def test_content_in_other_source_is_not_a_content_match_by_default(db_session):
    add_history(db_session, source="tiktok")
    assert find_duplicate(db_session, "h1", "renamed.csv", "shopee") is None


def test_global_scope_matches_other_sources(db_session):
    add_history(db_session, source="tiktok")
    match = find_duplicate(db_session, "h1", "renamed.csv", "shopee", scope=SCOPE_GLOBAL)
    assert match.match_type == "content"
    assert match.data_source == "tiktok"


def test_filename_match_in_any_source(db_session):
    add_history(db_session, file_hash="other", source="tiktok")
    match = find_duplicate(db_session, "h1", "orders.csv", "shopee")
    assert match.match_type == "filename"
    assert match.data_source == "tiktok"


def test_content_match_wins_over_filename_match(db_session):
    add_history(db_session, file_hash="other", filename="orders.csv")
    content = add_history(db_session, file_hash="h1", filename="march.csv")
    match = find_duplicate(db_session, "h1", "orders.csv", "shopee")
    assert match.match_type == "content"
    assert match.upload_id == content.id


def test_first_match_is_oldest(db_session):
    first = add_history(db_session)
    add_history(db_session)
    assert find_duplicate(db_session, "h1", "x.csv", "shopee").upload_id == first.id


def test_unknown_scope(db_session):
    with pytest.raises(ValueError):
        find_duplicate(db_session, "h1", "x.csv", "shopee", scope="everywhere")
