"""
app/api/routers/scale_import.py

Scale measurement import HTTP endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from app.api.dependencies import get_measurement_sink, read_upload_content
from app.domain.failures import FailureCode, ImportFailure
from app.domain.measurement import ImportStrategy
from app.domain.persistence import MeasurementSink
from app.logging_utils import log_failure
from app.schemas.scale_import import ImportFailureResponse, ImportResultResponse, ParseResultResponse
from app.services.scale_import_service import ScaleImportService, get_scale_import_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scale-import", tags=["scale-import"])

_STATUS_BY_FAILURE: dict[FailureCode, int] = {
    FailureCode.INVALID_FILE: status.HTTP_400_BAD_REQUEST,
    FailureCode.INVALID_FORMAT: status.HTTP_400_BAD_REQUEST,
    FailureCode.EMPTY_INPUT: status.HTTP_400_BAD_REQUEST,
    FailureCode.TRANSFORM_ERROR: status.HTTP_400_BAD_REQUEST,
    FailureCode.VALIDATION_BLOCKED: 422,
    FailureCode.PERSISTENCE_FAILURE: status.HTTP_502_BAD_GATEWAY,
}


def _failure_exception(failure: ImportFailure) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_FAILURE.get(failure.code, status.HTTP_400_BAD_REQUEST),
        detail=ImportFailureResponse(**failure.to_dict()).model_dump(),
    )


async def _read_upload(file: UploadFile, import_service: ScaleImportService) -> bytes:
    """
    Reject a declared oversize upload before reading, otherwise read a bounded prefix.
    """

    if file.size is not None:
        checked = import_service.check_file(filename=file.filename or "", size=file.size)
        if checked.failure is not None:
            await file.close()
            log_failure(logger, "check_file", checked.failure)
            raise _failure_exception(checked.failure)
    return await read_upload_content(file, max_bytes=import_service.max_file_size_bytes)


@router.post("/preview", response_model=ParseResultResponse)
async def preview_scale_import(
    file: UploadFile = File(...),
    strategy: ImportStrategy = Query(default=ImportStrategy.AVERAGE, description="Strategy to preview"),
    limit: int | None = Query(default=None, ge=1, le=100, description="Preview row count"),
    import_service: ScaleImportService = Depends(get_scale_import_service),
) -> ParseResultResponse:
    """
    Parse and validate one vendor CSV without storing anything.
    """

    content = await _read_upload(file, import_service)
    parsed = import_service.parse(content, filename=file.filename or "")
    if parsed.failure is not None:
        raise _failure_exception(parsed.failure)

    parse_result = parsed.unwrap()
    return ParseResultResponse.from_domain(
        parse_result,
        summary=import_service.summarize(parse_result),
        statistics=import_service.statistics(parse_result),
        strategy=strategy,
        preview=import_service.preview(parse_result, strategy, limit),
    )


@router.post("/commit", response_model=ImportResultResponse)
async def commit_scale_import(
    file: UploadFile = File(...),
    strategy: ImportStrategy = Query(default=ImportStrategy.AVERAGE, description="Duplicate resolution strategy"),
    import_service: ScaleImportService = Depends(get_scale_import_service),
    sink: MeasurementSink = Depends(get_measurement_sink),
) -> ImportResultResponse:
    """
    Parse, validate and store one vendor CSV with the chosen strategy.
    """

    content = await _read_upload(file, import_service)
    parsed = import_service.parse(content, filename=file.filename or "")
    if parsed.failure is not None:
        raise _failure_exception(parsed.failure)

    committed = import_service.commit_import(parsed.unwrap(), strategy, sink)
    if committed.failure is not None:
        raise _failure_exception(committed.failure)

    return ImportResultResponse.from_domain(committed.unwrap())
