"""
app/repositories/body_measurement_repository.py

Persistence layer for imported body measurements.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from typing import Any

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.measurement import NUMERIC_FIELDS, CanonicalMeasurement, PersistenceReport
from app.domain.persistence import MeasurementSinkError
from db.models.body_measurement import BodyMeasurement

logger = logging.getLogger(__name__)

_DEFAULT_BATCH_SIZE = 500
_DEDUPE_CONSTRAINT = "uq_body_measurements_dedupe"


class BodyMeasurementRepository:
    """
    Measurement sink backed by PostgreSQL.

    Each chunk is committed on its own, so a failure part-way through leaves
    earlier chunks stored and reports them as successful.
    """

    def __init__(self, session: Session, *, batch_size: int = _DEFAULT_BATCH_SIZE) -> None:
        self._session = session
        self._batch_size = max(1, batch_size)

    def save_batch(self, records: Sequence[CanonicalMeasurement]) -> PersistenceReport:
        """
        Insert measurements, skipping readings that were already imported.
        """

        if not records:
            return PersistenceReport(success_count=0)

        payloads = self._deduplicate_payloads([self._to_payload(record) for record in records])
        inserted = 0

        for start in range(0, len(payloads), self._batch_size):
            chunk = payloads[start : start + self._batch_size]
            stmt = (
                insert(BodyMeasurement)
                .values(chunk)
                .on_conflict_do_nothing(constraint=_DEDUPE_CONSTRAINT)
                .returning(BodyMeasurement.id)
            )
            try:
                chunk_inserted = len(self._session.scalars(stmt).all())
                self._session.commit()
            except SQLAlchemyError as exc:
                self._session.rollback()
                logger.error(
                    "Body measurement persistence failed after %d stored rows: %s",
                    inserted,
                    exc,
                )
                raise MeasurementSinkError(
                    "Failed to persist measurements.",
                    success_count=inserted,
                ) from exc
            inserted += chunk_inserted

        in_file_duplicates = len(records) - len(payloads)
        already_imported = len(payloads) - inserted
        errors: list[str] = []
        if in_file_duplicates:
            errors.append(f"{in_file_duplicates} duplicate readings in the file were stored once")
        if already_imported:
            errors.append(f"{already_imported} measurements were already imported and were skipped")
        return PersistenceReport(
            success_count=inserted,
            failure_count=in_file_duplicates + already_imported,
            errors=tuple(errors),
        )

    @staticmethod
    def _to_payload(record: CanonicalMeasurement) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "measured_on": date.fromisoformat(record.date),
            "measured_time": record.time,
            "source": record.source,
        }
        for field_name in NUMERIC_FIELDS:
            payload[field_name] = getattr(record, field_name)
        return payload

    @staticmethod
    def _deduplicate_payloads(payloads: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        seen: set[tuple[date, str, str]] = set()
        deduped_payloads: list[dict[str, Any]] = []

        for payload in payloads:
            key = (payload["measured_on"], payload["measured_time"], payload["source"])
            if key in seen:
                continue
            seen.add(key)
            deduped_payloads.append(payload)

        return deduped_payloads
