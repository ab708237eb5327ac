"""
Structured logging helpers for the import pipeline.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from app.domain.failures import ImportFailure


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def log_failure(logger: logging.Logger, stage: str, failure: ImportFailure) -> None:
    """
    Log a stage failure at WARNING with its structured payload.
    """

    log_event(
        logger,
        logging.WARNING,
        "scale_import.failed",
        stage=stage,
        **failure.to_dict(),
    )
