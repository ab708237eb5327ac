"""
app/validators/column_validator.py

Validation of resolved vendor column mappings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence


@dataclass(frozen=True)
class ColumnErrorDetail:
    """
    Structured column resolution error detail.
    """

    code: str
    message: str
    canonical_field: str | None = None
    source_column: str | None = None
    context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "canonical_field": self.canonical_field,
            "source_column": self.source_column,
            "context": self.context,
        }


class VendorColumnValidator:
    """
    Checks that every required canonical field resolved to a CSV header.
    """

    def __init__(
        self,
        *,
        required_fields: Sequence[str],
        vendor_columns: Mapping[str, str],
    ) -> None:
        self._required_fields = tuple(required_fields)
        self._vendor_columns = dict(vendor_columns)

    def validate(
        self,
        *,
        mapping: Mapping[str, str],
        source_headers: Sequence[str],
    ) -> list[ColumnErrorDetail]:
        """
        Return one error per problem found; an empty list means the mapping is usable.
        """

        errors: list[ColumnErrorDetail] = []
        headers_set = set(source_headers)

        for canonical_field, source_column in mapping.items():
            if source_column not in headers_set:
                errors.append(
                    ColumnErrorDetail(
                        code="unknown_source_column",
                        message="Mapped source column does not exist in CSV headers.",
                        canonical_field=canonical_field,
                        source_column=source_column,
                    )
                )

        for required in self._required_fields:
            if required not in mapping:
                errors.append(
                    ColumnErrorDetail(
                        code="required_column_missing",
                        message="Required vendor column is missing.",
                        canonical_field=required,
                        source_column=self._vendor_columns.get(required),
                        context={"source_headers": list(source_headers)},
                    )
                )

        return errors

    @staticmethod
    def missing_columns(errors: Sequence[ColumnErrorDetail]) -> list[str]:
        """
        Vendor column names (whitespace-stripped) reported as missing.
        """

        return [
            (error.source_column or error.canonical_field or "").strip()
            for error in errors
            if error.code == "required_column_missing"
        ]
