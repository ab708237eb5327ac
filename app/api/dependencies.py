"""
app/api/dependencies.py

Shared FastAPI dependencies for scale import endpoints.
"""

from __future__ import annotations

from fastapi import Depends, UploadFile
from sqlalchemy.orm import Session

from app.config import get_scale_import_settings
from app.domain.persistence import MeasurementSink
from app.repositories.body_measurement_repository import BodyMeasurementRepository
from db.session import get_db


async def read_upload_content(file: UploadFile, *, max_bytes: int) -> bytes:
    """
    Read at most ``max_bytes + 1`` bytes of the upload and release it.

    One byte past the limit is enough for the import service's size check to
    reject the file, so an oversized body is never held in memory whole.
    Extension and size rules live in the import service so HTTP and CLI
    callers share them.
    """

    try:
        return await file.read(max(0, max_bytes) + 1)
    finally:
        await file.close()


def get_measurement_sink(db: Session = Depends(get_db)) -> MeasurementSink:
    """
    Provide the PostgreSQL-backed measurement sink for one request.
    """

    settings = get_scale_import_settings()
    return BodyMeasurementRepository(db, batch_size=settings.persist_batch_size)
