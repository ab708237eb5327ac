from __future__ import annotations

import csv
import io
from collections.abc import Callable, Sequence
from datetime import date

import pytest

from app.domain.measurement import CanonicalMeasurement, PersistenceReport
from app.domain.persistence import MeasurementSinkError
from app.services.scale_import_service import ScaleImportService

VENDOR_HEADER: tuple[str, ...] = (
    "Fecha",
    " Hora",
    " Peso(kg)",
    "IMC",
    "Grasa corporal(%)",
    "Músculo esquelético(%)",
    "Peso corporal sin grasa(kg)",
    "Grasa subcutánea(%)",
    "Grasa visceral",
    "Agua corporal(%)",
    "Masa muscular(kg)",
    "Masa ósea(kg)",
    "Proteína (%)",
    "Tasa Metabólica Basal(kcal)",
    "Edad metabólica",
    "Tipo de cuerpo",
)

TODAY = date(2024, 6, 1)


def vendor_row(
    fecha: str = "15/03/24",
    hora: str = " 7:57:06 a.m.",
    peso: str = "72.5",
    imc: str = "23.4",
    grasa: str = "22.1",
    *,
    musculo: str = "45.0",
    sin_grasa: str = "56.5",
    subcutanea: str = "19.8",
    visceral: str = "8",
    agua: str = "55.2",
    masa_muscular: str = "53.6",
    masa_osea: str = "2.9",
    proteina: str = "17.5",
    tmb: str = "1580",
    edad: str = "35",
    tipo: str = "5",
) -> list[str]:
    return [
        fecha,
        hora,
        peso,
        imc,
        grasa,
        musculo,
        sin_grasa,
        subcutanea,
        visceral,
        agua,
        masa_muscular,
        masa_osea,
        proteina,
        tmb,
        edad,
        tipo,
    ]


def build_csv(
    rows: Sequence[Sequence[str]],
    *,
    header: Sequence[str] = VENDOR_HEADER,
    delimiter: str = ",",
) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def measurement(measured_on: str = "2024-01-01", **overrides: object) -> CanonicalMeasurement:
    values: dict[str, object] = {
        "date": measured_on,
        "time": "7:57:06 a.m.",
        "weight": 72.5,
        "bmi": 23.4,
        "body_fat_percentage": 22.1,
        "skeletal_muscle_percentage": 45.0,
        "fat_free_body_weight": 56.5,
        "subcutaneous_fat_percentage": 19.8,
        "visceral_fat": 8.0,
        "body_water_percentage": 55.2,
        "muscle_mass": 53.6,
        "bone_mass": 2.9,
        "protein_percentage": 17.5,
        "basal_metabolic_rate": 1580.0,
        "metabolic_age": 35.0,
        "body_type": 5.0,
    }
    values.update(overrides)
    return CanonicalMeasurement(**values)  # type: ignore[arg-type]


class RecordingSink:
    """In-memory measurement sink that records every batch it receives."""

    def __init__(self, *, fail_after: int | None = None, already_stored: int = 0) -> None:
        self.batches: list[list[CanonicalMeasurement]] = []
        self._fail_after = fail_after
        self._already_stored = already_stored

    def save_batch(self, records: Sequence[CanonicalMeasurement]) -> PersistenceReport:
        self.batches.append(list(records))
        if self._fail_after is not None:
            raise MeasurementSinkError("connection reset", success_count=self._fail_after)
        stored = len(records) - self._already_stored
        errors = (f"{self._already_stored} measurements were already imported",) if self._already_stored else ()
        return PersistenceReport(
            success_count=stored,
            failure_count=self._already_stored,
            errors=errors,
        )


@pytest.fixture()
def vendor_csv() -> Callable[..., str]:
    return build_csv


@pytest.fixture()
def service() -> ScaleImportService:
    return ScaleImportService(max_file_size_bytes=10 * 1024 * 1024)


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def sink_factory() -> type[RecordingSink]:
    return RecordingSink


@pytest.fixture()
def row() ->Callable[..., list[str]]:
    return vendor_row


@pytest.fixture()
def make_measurement() -> Callable[..., CanonicalMeasurement]:
    return measurement


@pytest.fixture()
def today() -> date:
    return TODAY
