"""
Unit tests for FileRecord and SweepReport.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

from fileregistry.domain.file_registry.entities import (
    DEFAULT_CONTENT_TYPE,
    RETENTION_WINDOW,
    FileRecord,
    SweepReport,
    ensure_utc,
)

T0 = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def _record(**overrides):
    kwargs = dict(
        short_id="aZ3k9",
        original_name="report.pdf",
        storage_path="/srv/storage/abc.dat",
        size_bytes=2048,
        content_type="application/pdf",
        created_at=T0,
    )
    kwargs.update(overrides)
    return FileRecord.create(**kwargs)


class TestFileRecordCreate:
    def test_expiry_is_created_at_plus_retention(self):
        record = _record()

        assert record.created_at == T0
        assert record.expires_at == T0 + RETENTION_WINDOW
        assert RETENTION_WINDOW == timedelta(hours=48)

    def test_custom_retention(self):
        record = _record(retention=timedelta(minutes=10))
        assert record.expires_at == T0 + timedelta(minutes=10)

    def test_missing_content_type_defaults(self):
        assert _record(content_type=None).content_type == DEFAULT_CONTENT_TYPE
        assert _record(content_type="").content_type == DEFAULT_CONTENT_TYPE

    def test_naive_created_at_treated_as_utc(self):
        record = _record(created_at=datetime(2024, 1, 15, 12, 0))
        assert record.created_at == T0
        assert record.created_at.tzinfo is not None

    def test_record_is_immutable(self):
        record = _record()
        with pytest.raises(FrozenInstanceError):
            record.size_bytes = 1


class TestFileRecordExpiry:
    def test_live_before_expiry(self):
        record = _record()
        assert not record.is_expired(T0 + timedelta(hours=47, minutes=59, seconds=59))
        assert record.is_live(T0 + timedelta(hours=1))

    def test_expired_exactly_at_expiry(self):
        record = _record()
        assert record.is_expired(T0 + timedelta(hours=48))

    def test_expired_after_expiry(self):
        record = _record()
        assert record.is_expired(T0 + timedelta(hours=49))

    def test_remaining_seconds(self):
        record = _record()
        assert record.get_remaining_seconds(T0 + timedelta(hours=47)) == 3600
        assert record.get_remaining_seconds(T0 + timedelta(hours=50)) == 0

    def test_remaining_time_negative_when_expired(self):
        record = _record()
        assert record.get_remaining_time(T0 + timedelta(hours=49)) == timedelta(hours=-1)


class TestFileRecordSerialization:
    def test_from_dict_restores_record(self):
        record = _record()
        restored = FileRecord.from_dict(record.to_dict())

        assert restored == record
        assert restored.expires_at.tzinfo is not None

    def test_to_dict_uses_iso_timestamps(self):
        data = _record().to_dict()
        assert data["created_at"] == "2024-01-15T12:00:00+00:00"
        assert data["expires_at"] == "2024-01-17T12:00:00+00:00"

    def test_from_dict_missing_field_raises(self):
        data = _record().to_dict()
        del data["storage_path"]
        with pytest.raises(KeyError):
            FileRecord.from_dict(data)


class TestSweepReport:
    def test_defaults(self):
        report = SweepReport(started_at=T0)
        assert report.expired_found == 0
        assert report.file_errors == []

    def test_file_errors_not_shared(self):
        first = SweepReport(started_at=T0)
        second = SweepReport(started_at=T0)
        first.file_errors.append("aZ3k9")
        assert second.file_errors == []

    def test_to_dict(self):
        report = SweepReport(started_at=T0, expired_found=3, files_removed=2,
                             records_removed=3, file_errors=["x1y2z"])
        assert report.to_dict() == {
            "started_at": "2024-01-15T12:00:00+00:00",
            "expired_found": 3,
            "files_removed": 2,
            "records_removed": 3,
            "orphans_reclaimed": 0,
            "file_errors": ["x1y2z"],
        }


def test_ensure_utc_converts_other_timezones():
    eastern = timezone(timedelta(hours=-5))
    value = datetime(2024, 1, 15, 7, 0, tzinfo=eastern)
    assert ensure_utc(value) == T0
    assert ensure_utc(value).utcoffset() == timedelta(0)
