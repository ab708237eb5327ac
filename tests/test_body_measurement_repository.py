from __future__ import annotations

import uuid
from collections.abc import Sequence

import pytest
from sqlalchemy.exc import OperationalError

from app.domain.persistence import MeasurementSinkError
from app.repositories.body_measurement_repository import BodyMeasurementRepository


class _ScalarResult:
    def __init__(self, count: int) -> None:
        self._count = count

    def all(self) -> list[uuid.UUID]:
        return [uuid.uuid4() for _ in range(self._count)]


class FakeSession:
    """
    Session double that returns a scripted number of inserted ids per statement.

    ``None`` in the script makes that statement raise like a dropped connection.
    """

    def __init__(self, inserted_per_statement: Sequence[int | None] | None = None) -> None:
        self._script = list(inserted_per_statement or [])
        self.statements: list[object] = []
        self.commits = 0
        self.rollbacks = 0

    def scalars(self, stmt: object) -> _ScalarResult:
        self.statements.append(stmt)
        count = self._script.pop(0) if self._script else None
        if count is None:
            raise OperationalError("INSERT", {}, Exception("connection reset"))
        return _ScalarResult(count)

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class TestBodyMeasurementRepository:
    def test_empty_batch_touches_nothing(self) -> None:
        session = FakeSession()

        report = BodyMeasurementRepository(session).save_batch([])  # type: ignore[arg-type]

        assert report.success_count == 0
        assert session.statements == []

    def test_inserts_in_chunks_and_commits_each(self, make_measurement) -> None:
        session = FakeSession([2, 1])
        records = [make_measurement(f"2024-01-0{day}") for day in (1, 2, 3)]

        report = BodyMeasurementRepository(session, batch_size=2).save_batch(records)  # type: ignore[arg-type]

        assert len(session.statements) == 2
        assert session.commits == 2
        assert report.success_count == 3
        assert report.failure_count == 0
        assert report.errors == ()

    def test_conflicting_rows_are_counted_as_skipped(self, make_measurement) -> None:
        session = FakeSession([1])
        records = [make_measurement("2024-01-01"), make_measurement("2024-01-02")]

        report = BodyMeasurementRepository(session).save_batch(records)  # type: ignore[arg-type]

        assert report.success_count == 1
        assert report.failure_count == 1
        assert report.errors == ("1 measurements were already imported and were skipped",)

    def test_same_reading_twice_in_one_file_is_sent_once(self, make_measurement) -> None:
        session = FakeSession([1])
        records = [make_measurement("2024-01-01"), make_measurement("2024-01-01")]

        report = BodyMeasurementRepository(session).save_batch(records)  # type: ignore[arg-type]

        assert len(session.statements) == 1
        assert report.success_count == 1
        assert report.failure_count == 1
        assert report.errors == ("1 duplicate readings in the file were stored once",)

    def test_in_file_duplicates_and_prior_imports_are_reported_separately(self, make_measurement) -> None:
        session = FakeSession([1])
        records = [
            make_measurement("2024-01-01"),
            make_measurement("2024-01-01"),
            make_measurement("2024-01-02"),
        ]

        report = BodyMeasurementRepository(session).save_batch(records)  # type: ignore[arg-type]

        assert report.success_count == 1
        assert report.failure_count == 2
        assert report.errors == (
            "1 duplicate readings in the file were stored once",
            "1 measurements were already imported and were skipped",
        )

    def test_different_times_on_same_day_are_both_sent(self, make_measurement) -> None:
        session = FakeSession([2])
        records = [
            make_measurement("2024-01-01", time="7:00 a.m."),
            make_measurement("2024-01-01", time="8:00 p.m."),
        ]

        report = BodyMeasurementRepository(session).save_batch(records)  # type: ignore[arg-type]

        assert report.success_count == 2

    def test_database_error_rolls_back_and_reports_stored_rows(self, make_measurement) -> None:
        session = FakeSession([2, None])
        records = [make_measurement(f"2024-01-0{day}") for day in (1, 2, 3, 4)]

        with pytest.raises(MeasurementSinkError) as exc_info:
            BodyMeasurementRepository(session, batch_size=2).save_batch(records)  # type: ignore[arg-type]

        assert exc_info.value.success_count == 2
        assert session.commits == 1
        assert session.rollbacks == 1

    def test_payload_uses_calendar_date(self, make_measurement) -> None:
        payload = BodyMeasurementRepository._to_payload(make_measurement("2024-02-29", visceral_fat=None))

        assert payload["measured_on"].isoformat() == "2024-02-29"
        assert payload["measured_time"] == "7:57:06 a.m."
        assert payload["source"] == "renpho_import"
        assert payload["visceral_fat"] is None
        assert payload["weight"] == 72.5
