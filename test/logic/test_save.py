"""Tests for data persistence."""

from datetime import datetime
from pathlib import Path

import pytest
import simplejson as json

from turby.types import LabeledSample, Sample
from turby.util import (
    DataRecorder,
    read_labeled_series,
    read_series,
    read_values,
    resolve_output_path,
    save_metadata,
    write_labeled_series,
    write_series,
    write_values,
)
from turby.util.save import metadata_path

SERIES = [
    Sample(elapsed_ms=15000, intensity=5000.0),
    Sample(elapsed_ms=210000, intensity=4804.9),
    Sample(elapsed_ms=405000, intensity=4619.35),
]


class TestSeries:
    def test_file_format(self, tmp_path):
        path = write_series(tmp_path / "run.csv", SERIES[:2])
        assert path.read_text().splitlines() == [
            "elapsed_ms,intensity",
            "15000,5000.0",
            "210000,4804.9",
        ]

    def test_read_back(self, tmp_path):
        path = write_series(tmp_path / "run.csv", SERIES)
        assert read_series(path) == SERIES

    def test_single_sample(self, tmp_path):
        path = write_series(tmp_path / "run.csv", SERIES[:1])
        assert read_series(path) == SERIES[:1]

    def test_empty_series(self, tmp_path):
        path = write_series(tmp_path / "run.csv", [])
        assert path.read_text() == "elapsed_ms,intensity\n"
        assert read_series(path) == []

    def test_wrong_header(self, tmp_path):
        path = tmp_path / "run.csv"
        path.write_text("time,value\n1,2\n")
        with pytest.raises(ValueError, match="header"):
            read_series(path)

    def test_creates_parent_directories(self, tmp_path):
        path = write_series(tmp_path / "a" / "b" / "run.csv", SERIES)
        assert path.exists()

    def test_no_temporary_files_left(self, tmp_path):
        write_series(tmp_path / "run.csv", SERIES)
        write_series(tmp_path / "run.csv", SERIES[:1])
        assert [p.name for p in tmp_path.iterdir()] == ["run.csv"]


class TestLabeledSeries:
    def test_read_back(self, tmp_path):
        series = [
            LabeledSample(label="control", intensity=1200.0),
            LabeledSample(label="day 3 well 2", intensity=980.5),
        ]
        path = write_labeled_series(tmp_path / "manual.csv", series)
        assert path.read_text().splitlines()[0] == "label,intensity"
        assert read_labeled_series(path) == series

    def test_delimiter_in_label_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="a,b"):
            write_labeled_series(
                tmp_path / "manual.csv", [LabeledSample(label="a,b", intensity=1.0)]
            )
        assert not (tmp_path / "manual.csv").exists()

    def test_empty(self, tmp_path):
        path = write_labeled_series(tmp_path / "manual.csv", [])
        assert read_labeled_series(path) == []


def test_values(tmp_path):
    path = write_values(tmp_path / "readings.txt", [512.0, 498.0, 505.5])
    assert path.read_text().splitlines() == ["512.0", "498.0", "505.5"]
    assert read_values(path) == [512.0, 498.0, 505.5]


class TestResolveOutputPath:
    @pytest.mark.parametrize("name", ["run.csv", "run.txt", "run.TSV"])
    def test_data_extension_kept(self, name):
        assert resolve_output_path(f"data/{name}") == Path("data") / name

    def test_prefix_gets_timestamp(self):
        path = resolve_output_path("data/run", datetime(2024, 1, 2, 3, 4, 5))
        assert path == Path("data/run_20240102-030405.csv")

    def test_other_extension_treated_as_prefix(self):
        path = resolve_output_path("run.v2", datetime(2024, 1, 2, 3, 4, 5))
        assert path == Path("run.v2_20240102-030405.csv")


class TestDataRecorder:
    def test_rewrites_file_on_each_append(self, tmp_path):
        recorder = DataRecorder(tmp_path / "run.csv")
        for i, sample in enumerate(SERIES, start=1):
            recorder.append(sample)
            assert len(recorder) == i
            assert read_series(recorder.path) == SERIES[:i]

    def test_series_is_a_copy(self, tmp_path):
        recorder = DataRecorder(tmp_path / "run.csv")
        recorder.append(SERIES[0])
        series = recorder.series
        series.clear()
        assert recorder.series == SERIES[:1]

    def test_nothing_written_before_first_sample(self, tmp_path):
        recorder = DataRecorder(tmp_path / "run.csv")
        assert recorder.series == []
        assert not recorder.path.exists()


def test_save_metadata(tmp_path):
    path = save_metadata(tmp_path / "run.csv", {"num_tumble": 36, "path": tmp_path})
    assert path == metadata_path(tmp_path / "run.csv") == tmp_path / "run_metadata.json"
    with path.open() as f:
        assert json.load(f) == {"num_tumble": 36, "path": str(tmp_path)}
