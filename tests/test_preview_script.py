from __future__ import annotations

import json

import pytest

from scripts import preview_scale_import


@pytest.fixture(autouse=True)
def _use_test_service(monkeypatch, service):
    monkeypatch.setattr(preview_scale_import, "get_scale_import_service", lambda: service)


def test_valid_file_prints_summary_and_exits_zero(tmp_path, capsys, vendor_csv, row) -> None:
    path = tmp_path / "export.csv"
    path.write_text(vendor_csv([row(), row("16/03/24"), row("17/03/24")]), encoding="utf-8")

    exit_code = preview_scale_import.main([str(path), "--strategy", "keep_all", "--limit", "2"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["is_valid"] is True
    assert payload["statistics"]["total_measurements"] == 3
    assert [record["date"] for record in payload["preview"]] == ["2024-03-17", "2024-03-16"]


def test_validation_errors_exit_one(tmp_path, capsys, vendor_csv, row) -> None:
    path = tmp_path / "export.csv"
    path.write_text(vendor_csv([row(peso="400")]), encoding="utf-8")

    exit_code = preview_scale_import.main([str(path)])

    assert exit_code == 1
    payload = json.loads(capsys.readouterr().out)
    assert "Row 1: weight: Maximum weight is 300kg" in payload["errors"]


def test_structural_failure_exits_two(tmp_path, capsys) -> None:
    path = tmp_path / "export.csv"
    path.write_text("Fecha,Hora\n15/03/24,7:00\n", encoding="utf-8")

    exit_code = preview_scale_import.main([str(path)])

    assert exit_code == 2
    assert '"code": "invalid_format"' in capsys.readouterr().err
