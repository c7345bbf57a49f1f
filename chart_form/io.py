"""Reading submissions from and writing observations to JSONL files."""

import json
from collections.abc import Iterable, Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class Submission(BaseModel):
    """One form submission record of a JSONL input file."""

    encounter_id: int | str
    patient_id: int | str
    observer_id: int | str | None = None
    observed_at: datetime | None = None
    data: dict[str, Any] = Field(default_factory=dict)


def read_jsonl(path: Path | str) -> Iterator[tuple[int, dict[str, Any]]]:
    """Read a JSONL file and yield (line number, record) pairs.

    Args:
        path: Path to the JSONL file.

    Yields:
        Each parsed JSON record with its 1-based line number.

    Raises:
        ValueError: If a line is not valid JSON.
    """
    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                yield line_num, json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON on line {line_num}: {e}") from e


def read_submissions(path: Path | str) -> Iterator[tuple[int, Submission]]:
    """Read submission records from a JSONL file."""
    for line_num, record in read_jsonl(path):
        yield line_num, Submission.model_validate(record)


def write_jsonl(path: Path | str, records: Iterable[BaseModel | dict[str, Any]]) -> int:
    """Write models or dicts to a JSONL file.

    Returns:
        Number of records written.
    """
    count = 0
    with open(path, "w") as f:
        for record in records:
            if isinstance(record, BaseModel):
                f.write(record.model_dump_json(by_alias=True) + "\n")
            else:
                f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
            count += 1
    return count
