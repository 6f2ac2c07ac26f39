"""Lectura de muestras de salud desde una exportación CSV."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import cast

import pandas as pd

from readiness_tool.model import QuantitySample, SleepSample, SleepStage
from readiness_tool.sources.base import HealthDataSource, SourcePaths

logger = logging.getLogger(__name__)

SAMPLE_COLUMNS = ["type", "start", "end", "value", "stage"]

_STEPS_TYPES = {"steps", "step_count", "stepcount", "pasos"}
_HEART_RATE_TYPES = {
    "resting_heart_rate",
    "restingheartrate",
    "resting_hr",
    "pulso_en_reposo",
}
_SLEEP_TYPES = {"sleep", "sleep_analysis", "sleepanalysis", "sueño", "sueno"}

# Checked in order: "awake" and "in bed" before the asleep stages.
_STAGE_PATTERNS: list[tuple[str, SleepStage]] = [
    (r"awake", SleepStage.AWAKE),
    (r"in[\s_]?bed", SleepStage.IN_BED),
    (r"rem", SleepStage.REM),
    (r"deep", SleepStage.DEEP),
    (r"core|light", SleepStage.CORE),
]


@dataclass(frozen=True)
class CsvExportPaths(SourcePaths):
    """Path of the CSV sample export."""

    # root: .../samples.csv


class CsvExportSource(HealthDataSource):
    """CSV sample export reader.

    Expected columns (Spanish or English headers, any case):
    type, start, end, value, stage. Naive timestamps are read as UTC.
    """

    def __init__(self, paths: CsvExportPaths) -> None:
        """Create a CSV source.

        Args:
            paths: Location of the export file.
        """
        self._paths = paths
        self._frame_cache: pd.DataFrame | None = None
        self._cache_stamp: tuple[int, int] | None = None
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    def validate(self) -> None:
        """Validate that the export file exists."""
        if not self._paths.root.is_file():
            raise FileNotFoundError(str(self._paths.root))

    def load_samples(self) -> pd.DataFrame:
        """Load and normalize the export.

        Returns DataFrame columns:
            type, start, end, value, stage

        Raises:
            FileNotFoundError: If the export is missing.
            ValueError: If the type/start/end columns cannot be found.
        """
        self.validate()
        try:
            df = pd.read_csv(self._paths.root)
        except pd.errors.EmptyDataError:
            df = pd.DataFrame()
        out = _normalize_samples(df)
        logger.debug("Loaded %d samples from %s", len(out), self._paths.root)
        return out

    def _stamp(self) -> tuple[int, int]:
        st = self._paths.root.stat()
        return (st.st_mtime_ns, st.st_size)

    async def _samples(self) -> pd.DataFrame:
        """Return the parsed export, reloading it when the file changed.

        The lock belongs to the running loop; each ``asyncio.run`` gets its own.
        """
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        async with self._lock:
            stamp = self._stamp()
            if self._frame_cache is None or self._cache_stamp != stamp:
                self._frame_cache = await asyncio.to_thread(self.load_samples)
                self._cache_stamp = stamp
            return self._frame_cache

    async def _window(
        self, types: set[str], start: datetime, end: datetime
    ) -> pd.DataFrame:
        df = await self._samples()
        mask = (
            df["type"].isin(types)
            & (df["end"] >= pd.Timestamp(start))
            & (df["start"] <= pd.Timestamp(end))
        )
        return df.loc[mask]

    async def step_count(self, start: datetime, end: datetime) -> float | None:
        rows = await self._window(_STEPS_TYPES, start, end)
        total = rows["value"].sum(min_count=1)
        if pd.isna(total):
            return None
        return float(total)

    async def resting_heart_rate_samples(
        self, start: datetime, end: datetime
    ) -> list[QuantitySample]:
        rows = await self._window(_HEART_RATE_TYPES, start, end)
        rows = rows.dropna(subset=["value"])
        return [
            QuantitySample(
                start=r.start.to_pydatetime(),
                end=r.end.to_pydatetime(),
                value=float(r.value),
            )
            for r in rows.itertuples(index=False)
        ]

    async def sleep_samples(self, start: datetime, end: datetime) -> list[SleepSample]:
        rows = await self._window(_SLEEP_TYPES, start, end)
        out: list[SleepSample] = []
        for r in rows.itertuples(index=False):
            stage = parse_stage(r.stage)
            if stage is None:
                continue
            out.append(
                SleepSample(
                    start=r.start.to_pydatetime(),
                    end=r.end.to_pydatetime(),
                    stage=stage,
                )
            )
        return out


def _find_col(columns: list[str], patterns: list[str]) -> str | None:
    for pat in patterns:
        rx = re.compile(pat, re.IGNORECASE)
        for c in columns:
            if rx.search(c):
                return c
    return None


def _normalize_samples(df: pd.DataFrame) -> pd.DataFrame:
    """Map raw export columns onto ``SAMPLE_COLUMNS``."""
    if df.empty and not len(df.columns):
        return pd.DataFrame(
            {
                "type": pd.Series(dtype=str),
                "start": pd.Series(dtype="datetime64[ns, UTC]"),
                "end": pd.Series(dtype="datetime64[ns, UTC]"),
                "value": pd.Series(dtype=float),
                "stage": pd.Series(dtype=object),
            }
        )

    df = df.rename(columns={c: str(c).strip() for c in df.columns})
    cols = list(df.columns)

    type_col = _find_col(cols, [r"^type$", r"^tipo$", r"\btype\b", r"\btipo\b"])
    start_col = _find_col(cols, [r"\bstart", r"\binicio\b", r"\bdesde\b"])
    end_col = _find_col(cols, [r"\bend", r"\bfin\b", r"\bhasta\b"])
    value_col = _find_col(cols, [r"\bvalue\b", r"\bvalor\b", r"\bqty\b"])
    stage_col = _find_col(cols, [r"\bstage\b", r"\bfase\b", r"\bcategory\b"])

    missing = [
        name
        for name, col in (("type", type_col), ("start", start_col), ("end", end_col))
        if col is None
    ]
    if missing:
        raise ValueError(f"Missing columns in sample export: {', '.join(missing)}")

    out = pd.DataFrame(
        {
            "type": df[cast(str, type_col)]
            .astype(str)
            .str.strip()
            .str.lower()
            .str.replace(r"[\s-]+", "_", regex=True),
            "start": pd.to_datetime(
                df[cast(str, start_col)], utc=True, errors="coerce", format="mixed"
            ),
            "end": pd.to_datetime(
                df[cast(str, end_col)], utc=True, errors="coerce", format="mixed"
            ),
            "value": (
                pd.to_numeric(df[value_col], errors="coerce")
                if value_col
                else pd.Series(float("nan"), index=df.index)
            ),
            "stage": df[stage_col] if stage_col else pd.Series(None, index=df.index),
        }
    )
    out = out.dropna(subset=["start", "end"])
    return out.sort_values("start").reset_index(drop=True)


def parse_stage(raw: object) -> SleepStage | None:
    """Map a free-form stage label to ``SleepStage`` (None if unknown)."""
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        return None
    text = str(raw).strip().lower()
    if not text:
        return None
    for pat, stage in _STAGE_PATTERNS:
        if re.search(pat, text):
            return stage
    return None
