"""
Parse and validate a vendor scale export from disk without storing it.

Exit codes: 0 valid, 1 validation errors, 2 structural failure.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from app.domain.failures import ScaleImportError
from app.domain.measurement import ImportStrategy
from app.services.scale_import_service import get_scale_import_service


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Preview a scale measurement CSV import.")
    parser.add_argument("path", type=Path, help="CSV file exported by the scale app.")
    parser.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in ImportStrategy],
        default=ImportStrategy.AVERAGE.value,
        help="Duplicate resolution strategy to preview.",
    )
    parser.add_argument("--limit", type=int, default=5, help="Number of preview rows.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s [%(name)s] %(message)s")

    service = get_scale_import_service()
    try:
        parse_result = service.parse(args.path.read_bytes(), filename=args.path.name).unwrap()
    except ScaleImportError as exc:
        print(json.dumps(exc.to_dict(), indent=2, default=str), file=sys.stderr)
        return 2

    statistics = service.statistics(parse_result)
    payload = {
        "summary": service.summarize(parse_result),
        "is_valid": parse_result.validation.is_valid,
        "errors": list(parse_result.validation.errors),
        "warnings": list(parse_result.validation.warnings),
        "statistics": {
            "total_measurements": statistics.total_measurements,
            "unique_dates": statistics.unique_dates,
            "duplicate_dates": statistics.duplicate_dates,
            "date_range": statistics.date_range,
        },
        "preview": [
            record.to_dict()
            for record in service.preview(parse_result, args.strategy, args.limit)
        ],
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if parse_result.validation.is_valid else 1


if __name__ == "__main__":
    raise SystemExit(main())
