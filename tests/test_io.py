"""Tests for JSONL reading and writing."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from chart_form.builders import Observation
from chart_form.io import read_jsonl, read_submissions, write_jsonl


class TestReadJsonl:
    """Tests for JSONL input."""

    def test_skips_blank_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "in.jsonl"
        path.write_text('{"a": 1}\n\n{"a": 2}\n')

        assert list(read_jsonl(path)) == [(1, {"a": 1}), (3, {"a": 2})]

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "in.jsonl"
        path.write_text('{"a": 1}\n{not json}\n')

        with pytest.raises(ValueError, match="line 2"):
            list(read_jsonl(path))

    def test_submissions(self, tmp_path: Path) -> None:
        path = tmp_path / "in.jsonl"
        record = {
            "encounter_id": 100,
            "patient_id": "p-7",
            "observed_at": "2025-01-15T10:30:00Z",
            "data": {"heart_rate": 72},
        }
        path.write_text(json.dumps(record) + "\n")

        [(line_num, submission)] = list(read_submissions(path))
        assert line_num == 1
        assert submission.encounter_id == 100
        assert submission.patient_id == "p-7"
        assert submission.observer_id is None
        assert submission.observed_at == datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert submission.data == {"heart_rate": 72}


class TestWriteJsonl:
    """Tests for JSONL output."""

    def test_writes_models_by_alias(self, tmp_path: Path) -> None:
        path = tmp_path / "out.jsonl"
        obs = Observation(
            observation_id="x",
            encounter_id=1,
            patient_id=1,
            concept_id=4,
            code="HR",
            value_number=72.0,
            observed_at=datetime(2025, 1, 15, tzinfo=timezone.utc),
        )

        assert write_jsonl(path, [obs, {"plain": True}]) == 2
        lines = path.read_text().splitlines()
        assert json.loads(lines[0])["schema"] == "com.chartform.observation.v1"
        assert json.loads(lines[1]) == {"plain": True}
