"""Tests for the CSV sample export reader."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest
from dateutil import tz

from readiness_tool.collector import MetricCollector
from readiness_tool.config import CollectorConfig
from readiness_tool.model import MeasurementTriple, SleepStage
from readiness_tool.sources import csv_export
from readiness_tool.sources.csv_export import (
    CsvExportPaths,
    CsvExportSource,
    _find_col,
    _normalize_samples,
    parse_stage,
)

SAMPLES_CSV = """type,start,end,value,stage
steps,2025-12-16T08:00:00Z,2025-12-16T09:00:00Z,4000,
steps,2025-12-15T08:00:00Z,2025-12-15T09:00:00Z,9000,
Resting Heart Rate,2025-12-14T06:00:00Z,2025-12-14T06:01:00Z,58,
resting_heart_rate,2025-12-15T06:00:00Z,2025-12-15T06:01:00Z,62,
sleep,2025-12-15T23:00:00Z,2025-12-16T03:00:00Z,,asleepCore
sleep,2025-12-16T03:00:00Z,2025-12-16T04:00:00Z,,REM
sleep,2025-12-16T04:00:00Z,2025-12-16T04:30:00Z,,awake
sleep,2025-12-15T22:30:00Z,2025-12-16T07:00:00Z,,InBed
"""


def _at(day: int, hour: int) -> datetime:
    return datetime(2025, 12, day, hour, tzinfo=tz.UTC)


def _source(tmp_path: Path, text: str = SAMPLES_CSV) -> CsvExportSource:
    path = tmp_path / "samples.csv"
    path.write_text(text, encoding="utf-8")
    return CsvExportSource(CsvExportPaths(root=path))


def test_find_col_matches_spanish_and_english() -> None:
    cols = ["Tipo", "Inicio", "Fin", "Valor", "Fase"]
    assert _find_col(cols, [r"\btype\b", r"\btipo\b"]) == "Tipo"
    assert _find_col(cols, [r"\binicio\b"]) == "Inicio"
    assert _find_col(cols, [r"\bunknown\b"]) is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("HKCategoryValueSleepAnalysisAsleepDeep", SleepStage.DEEP),
        ("asleepREM", SleepStage.REM),
        ("Core", SleepStage.CORE),
        ("light", SleepStage.CORE),
        ("in bed", SleepStage.IN_BED),
        ("Awake", SleepStage.AWAKE),
        ("asleepUnspecified", None),
        ("", None),
        (None, None),
        (float("nan"), None),
    ],
)
def test_parse_stage(raw: object, expected: SleepStage | None) -> None:
    assert parse_stage(raw) is expected


def test_normalize_samples_spanish_headers() -> None:
    df = pd.DataFrame(
        {
            " Tipo ": ["Pasos", "steps"],
            "Inicio": ["2025-12-16T08:00:00Z", "no es fecha"],
            "Fin": ["2025-12-16T09:00:00Z", "2025-12-16T10:00:00Z"],
            "Valor": ["1000", "bad"],
        }
    )
    out = _normalize_samples(df)
    assert list(out.columns) == ["type", "start", "end", "value", "stage"]
    assert len(out) == 1
    assert out.loc[0, "type"] == "pasos"
    assert out.loc[0, "value"] == 1000


def test_normalize_samples_missing_columns() -> None:
    df = pd.DataFrame({"type": ["steps"], "value": [1]})
    with pytest.raises(ValueError, match="start"):
        _normalize_samples(df)


def test_validate_missing_file(tmp_path: Path) -> None:
    source = CsvExportSource(CsvExportPaths(root=tmp_path / "missing.csv"))
    with pytest.raises(FileNotFoundError):
        source.validate()
    with pytest.raises(FileNotFoundError):
        source.load_samples()


def test_step_count_window(tmp_path: Path) -> None:
    source = _source(tmp_path)
    assert asyncio.run(source.step_count(_at(16, 0), _at(16, 10))) == 4000.0
    assert asyncio.run(source.step_count(_at(1, 0), _at(1, 10))) is None


def test_resting_heart_rate_samples(tmp_path: Path) -> None:
    source = _source(tmp_path)
    samples = asyncio.run(source.resting_heart_rate_samples(_at(9, 10), _at(16, 10)))
    assert [s.value for s in samples] == [58.0, 62.0]
    assert samples[0].start == _at(14, 6)


def test_sleep_samples_stages(tmp_path: Path) -> None:
    source = _source(tmp_path)
    samples = asyncio.run(source.sleep_samples(_at(15, 0), _at(16, 10)))
    assert sorted(s.stage.value for s in samples) == [
        "awake",
        "core",
        "in_bed",
        "rem",
    ]


def test_samples_loaded_once_per_collect(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[Path] = []
    real_read_csv = pd.read_csv

    def _read_csv(path: Path) -> pd.DataFrame:
        calls.append(path)
        return real_read_csv(path)

    monkeypatch.setattr(csv_export.pd, "read_csv", _read_csv)
    source = _source(tmp_path)
    collector = MetricCollector(
        source, CollectorConfig(tz_name="UTC"), clock=lambda: _at(16, 10)
    )
    asyncio.run(collector.collect())
    assert len(calls) == 1


def test_changed_export_is_reloaded(tmp_path: Path) -> None:
    source = _source(tmp_path)
    collector = MetricCollector(
        source, CollectorConfig(tz_name="UTC"), clock=lambda: _at(16, 10)
    )
    assert asyncio.run(collector.collect()).steps == 4000

    path = tmp_path / "samples.csv"
    with path.open("a", encoding="utf-8") as fh:
        fh.write("steps,2025-12-16T09:30:00Z,2025-12-16T09:45:00Z,5000,\n")

    assert asyncio.run(collector.collect()).steps == 9000


def test_retry_after_missing_export(tmp_path: Path) -> None:
    path = tmp_path / "samples.csv"
    source = CsvExportSource(CsvExportPaths(root=path))
    collector = MetricCollector(
        source, CollectorConfig(tz_name="UTC"), clock=lambda: _at(16, 10)
    )
    assert asyncio.run(collector.collect()) == MeasurementTriple.empty()

    path.write_text(SAMPLES_CSV, encoding="utf-8")
    assert asyncio.run(collector.collect()) == MeasurementTriple(
        steps=4000, resting_heart_rate=60.0, sleep_hours=5.0
    )


def test_empty_export_has_no_samples(tmp_path: Path) -> None:
    source = _source(tmp_path, text="")
    out = source.load_samples()
    assert out.empty
    assert list(out.columns) == ["type", "start", "end", "value", "stage"]

    collector = MetricCollector(
        source, CollectorConfig(tz_name="UTC"), clock=lambda: _at(16, 10)
    )
    assert asyncio.run(collector.collect()) == MeasurementTriple.empty()


def test_collector_over_csv_export(tmp_path: Path) -> None:
    collector = MetricCollector(
        _source(tmp_path), CollectorConfig(tz_name="UTC"), clock=lambda: _at(16, 10)
    )
    triple = asyncio.run(collector.collect())
    assert triple == MeasurementTriple(
        steps=4000, resting_heart_rate=60.0, sleep_hours=5.0
    )


def test_collector_degrades_missing_export(tmp_path: Path) -> None:
    source = CsvExportSource(CsvExportPaths(root=tmp_path / "missing.csv"))
    collector = MetricCollector(
        source, CollectorConfig(tz_name="UTC"), clock=lambda: _at(16, 10)
    )
    assert asyncio.run(collector.collect()) == MeasurementTriple.empty()
