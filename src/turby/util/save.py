# -*- coding: utf-8 -*-
"""Utilities for saving measurement data.

File Formats
-----------
Dissociation runs are saved as CSV with a header row:

    elapsed_ms,intensity
    10000,4981.2
    ...

Manual sessions use `label,intensity`. The single-shot helper writes one
value per line with no header.

Every write goes to a temporary file in the destination directory, which then
replaces the destination. A reader therefore always sees either the previous
or the new complete file.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, TextIO

import numpy as np
import simplejson as json
from loguru import logger

from turby.types import LabeledSample, LabeledSeries, Sample, SampleSeries

from .defaults import DATA_EXTENSIONS

SERIES_HEADER = "elapsed_ms,intensity"
LABELED_HEADER = "label,intensity"
DELIMITER = ","

# =============================================================================
# Helper functions
# =============================================================================


class NumpyEncoder(json.JSONEncoder):
    """Special json encoder for numpy types"""

    # o = an object to be encoded
    def default(self, o):
        if isinstance(o, np.integer):
            return int(o)
        if isinstance(o, np.floating):
            return float(o)
        if isinstance(o, np.ndarray):
            return o.tolist()
        if isinstance(o, Path):
            return str(o)
        return json.JSONEncoder.default(self, o)


def resolve_output_path(datafile: str | Path, now: datetime | None = None) -> Path:
    """Resolve the configured `datafile` to the path a run writes to.

    A path with a data extension (.csv, .txt, .tsv) is used as-is. Anything
    else is treated as a prefix: `_<YYYYmmdd-HHMMSS>.csv` is appended.

    Examples
    --------
    >>> resolve_output_path("data/run.csv")
    PosixPath('data/run.csv')
    >>> resolve_output_path("data/run", datetime(2024, 1, 2, 3, 4, 5))
    PosixPath('data/run_20240102-030405.csv')
    """
    path = Path(datafile).expanduser()
    if path.suffix.lower() in DATA_EXTENSIONS:
        return path
    stamp = (now if now is not None else datetime.now()).strftime("%Y%m%d-%H%M%S")
    return path.with_name(f"{path.name}_{stamp}.csv")


def _atomic_write(path: str | Path, write: Callable[[TextIO], None]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", newline="") as f:
            write(f)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_path)
        raise
    return path


def _read_rows(path: str | Path, header: str | None) -> list[str]:
    with open(path, "r") as f:
        if header is not None:
            found = f.readline().strip()
            if found != header:
                raise ValueError(
                    f"Unexpected header in {path}: '{found}' (expected '{header}')"
                )
        return [line for line in f if line.strip()]


# =============================================================================
# Save functions
# =============================================================================


def write_series(path: str | Path, series: SampleSeries) -> Path:
    """Rewrite `path` with the complete series."""
    data = np.array(
        [(sample.elapsed_ms, sample.intensity) for sample in series], dtype=np.float64
    ).reshape(-1, 2)

    def write(f: TextIO):
        f.write(SERIES_HEADER + "\n")
        if len(data):
            np.savetxt(f, data, fmt=("%d", "%s"), delimiter=DELIMITER)

    return _atomic_write(path, write)


def read_series(path: str | Path) -> SampleSeries:
    rows = _read_rows(path, SERIES_HEADER)
    if not rows:
        return []
    data = np.loadtxt(rows, delimiter=DELIMITER, ndmin=2)
    return [Sample(elapsed_ms=int(e), intensity=float(i)) for e, i in data]


def write_labeled_series(path: str | Path, series: LabeledSeries) -> Path:
    """Write a manual session, one `label,intensity` row per reading."""
    for sample in series:
        if DELIMITER in sample.label or "\n" in sample.label:
            raise ValueError(f"Invalid character in sample label '{sample.label}'")
    rows = np.array(
        [(sample.label, sample.intensity) for sample in series], dtype=object
    ).reshape(-1, 2)

    def write(f: TextIO):
        f.write(LABELED_HEADER + "\n")
        if len(rows):
            np.savetxt(f, rows, fmt="%s", delimiter=DELIMITER)

    return _atomic_write(path, write)


def read_labeled_series(path: str | Path) -> LabeledSeries:
    rows = _read_rows(path, LABELED_HEADER)
    series = []
    for row in rows:
        label, intensity = row.rstrip("\r\n").rsplit(DELIMITER, 1)
        series.append(LabeledSample(label=label, intensity=float(intensity)))
    return series


def write_values(path: str | Path, values: Iterable[float]) -> Path:
    """Write plain readings, one per line."""
    data = np.asarray(list(values), dtype=np.float64)

    def write(f: TextIO):
        if len(data):
            np.savetxt(f, data, fmt="%s")

    return _atomic_write(path, write)


def read_values(path: str | Path) -> list[float]:
    rows = _read_rows(path, None)
    if not rows:
        return []
    return [float(v) for v in np.loadtxt(rows, ndmin=1)]


def metadata_path(data_path: str | Path) -> Path:
    data_path = Path(data_path)
    return data_path.with_name(data_path.stem + "_metadata.json")


def save_metadata(data_path: str | Path, metadata: dict) -> Path:
    """Save run metadata as json next to the data file."""
    path = metadata_path(data_path)

    def write(f: TextIO):
        json.dump(metadata, f, cls=NumpyEncoder, indent=4, allow_nan=True)

    _atomic_write(path, write)
    logger.debug("Saved run metadata to {}", path)
    return path


# =============================================================================
# Recorder
# =============================================================================


class DataRecorder:
    """Append-only sample series, persisted in full after every sample.

    Parameters
    ----------
    path : str | Path
        Destination file. Rewritten (atomically) on each `append`.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._series: SampleSeries = []

    def __len__(self):
        return len(self._series)

    @property
    def series(self) -> SampleSeries:
        """A copy of the samples recorded so far."""
        return list(self._series)

    def append(self, sample: Sample) -> None:
        self._series.append(sample)
        write_series(self.path, self._series)
        logger.debug(
            "Saved {} samples to {}",
            len(self._series),
            self.path,
        )
