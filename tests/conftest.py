"""Shared pytest fixtures for ranctl tests."""

from __future__ import annotations

import json
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture
def tmp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """Two records with the shape used in most rendering tests."""
    return [
        {"ID": "a", "Status": "up"},
        {"ID": "bb", "Status": "down"},
    ]


@pytest.fixture
def transaction_events() -> list[dict[str, Any]]:
    """Nested event records, as produced by a transaction watch stream."""
    return [
        {
            "Type": "CREATED",
            "Transaction": {"ID": "tx-1", "Index": 1, "Status": {"State": "PENDING"}},
        },
        {
            "Type": "UPDATED",
            "Transaction": {"ID": "tx-1", "Index": 1, "Status": {"State": "COMMITTED"}},
        },
        {
            "Type": "CREATED",
            "Transaction": {"ID": "tx-2", "Index": 2, "Status": {"State": "PENDING"}},
        },
    ]


@pytest.fixture
def events_file(tmp_dir: Path, transaction_events: list[dict[str, Any]]) -> Path:
    """Write transaction events as a JSONL file."""
    path = tmp_dir / "events.jsonl"
    path.write_text("".join(json.dumps(event) + "\n" for event in transaction_events))
    return path
