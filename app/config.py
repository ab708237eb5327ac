"""
app/config.py

Settings for the scale import pipeline, read from the environment.

Project `.env` files are loaded once before the first lookup; values already
present in the process environment win. Unparseable values fall back to the
documented default rather than failing the request path; `app.main` reports
them at startup instead.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from app.domain.measurement import MissingValuePolicy
from db.config import load_env_files

DEFAULT_MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
DEFAULT_PERSIST_BATCH_SIZE = 500
DEFAULT_PREVIEW_LIMIT = 5

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _read(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _positive_int(name: str, default: int) -> int:
    raw = _read(name)
    if raw is None:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


def _flag(name: str, default: bool) -> bool:
    raw = _read(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def parse_missing_value_policy(raw: str | None) -> MissingValuePolicy | None:
    """
    Parse a policy name; None when *raw* is not a known policy.
    """

    if raw is None:
        return MissingValuePolicy.ZERO
    try:
        return MissingValuePolicy(raw.strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class ScaleImportSettings:
    """
    Runtime settings for scale measurement imports.
    """

    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES
    missing_value_policy: MissingValuePolicy = MissingValuePolicy.ZERO
    persist_batch_size: int = DEFAULT_PERSIST_BATCH_SIZE
    preview_limit: int = DEFAULT_PREVIEW_LIMIT
    log_validation_findings: bool = True

    @classmethod
    def from_env(cls) -> ScaleImportSettings:
        policy = parse_missing_value_policy(_read("SCALE_IMPORT_MISSING_OPTIONAL_POLICY"))
        return cls(
            max_file_size_bytes=_positive_int("SCALE_IMPORT_MAX_FILE_BYTES", DEFAULT_MAX_FILE_SIZE_BYTES),
            missing_value_policy=policy or MissingValuePolicy.ZERO,
            persist_batch_size=_positive_int("SCALE_IMPORT_PERSIST_BATCH_SIZE", DEFAULT_PERSIST_BATCH_SIZE),
            preview_limit=_positive_int("SCALE_IMPORT_PREVIEW_LIMIT", DEFAULT_PREVIEW_LIMIT),
            log_validation_findings=_flag("SCALE_IMPORT_LOG_FINDINGS", True),
        )


@lru_cache(maxsize=1)
def get_scale_import_settings() -> ScaleImportSettings:
    return ScaleImportSettings.from_env()
