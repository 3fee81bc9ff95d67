"""Pytest configuration to make the local package importable without installation."""
import json
import sys
from pathlib import Path
from typing import Dict, List, Sequence

import pytest

# Ensure repository root is on sys.path for module resolution
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from announcements.cli import main as cli_main
from announcements.core.errors import ScoringBatchError
from announcements.ingestion.loader import load_file
import announcements.processing.scorer as scorer_module


class FakeScorer:
    """Deterministic stand-in for the external scoring service.

    Every text gets the same scores; ``fail_batches`` lists 0-based batch
    indexes whose call raises, ``responses`` overrides the raw response per
    batch index.
    """

    def __init__(self, scores: Dict[str, float] | None = None, fail_batches=(), responses=None) -> None:
        self.scores = scores or {
            "clareza": 8,
            "empatia": 7,
            "coerencia": 9,
            "formalidade": 6,
            "eficacia": 8,
            "linguistica": 10,
        }
        self.fail_batches = set(fail_batches)
        self.responses = responses or {}
        self.calls: List[List[Dict[str, str]]] = []

    def score_batch(self, payload: Sequence[Dict[str, str]]) -> str:
        index = len(self.calls)
        self.calls.append(list(payload))
        if index in self.fail_batches:
            raise ScoringBatchError("service unavailable")
        if index in self.responses:
            return self.responses[index]
        return json.dumps(
            [{"id": item["id"], **self.scores, "comentario": f"ok {item['id']}"} for item in payload]
        )


@pytest.fixture(autouse=True)
def isolate_ai_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests away from real credentials and remote LLM calls."""

    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("AI_SECRET_FILE", str(tmp_path / "missing.env"))
    monkeypatch.setenv("SCORING_BATCH_DELAY_MS", "0")
    monkeypatch.setattr(scorer_module, "_AI_ENV_LOADED", False)


@pytest.fixture
def fake_scorer() -> FakeScorer:
    return FakeScorer()


@pytest.fixture
def make_scorer():
    """Factory for scorers with custom failures or responses."""

    return FakeScorer


@pytest.fixture
def dummy_data_dir() -> Path:
    """Return the built-in dummy data directory for tests."""

    return ROOT / "dummy_data"


@pytest.fixture
def sample_file(dummy_data_dir: Path) -> Path:
    return dummy_data_dir / "comunicados.json"


@pytest.fixture
def expected_record_count(sample_file: Path) -> int:
    """Number of object-shaped elements in the sample file."""

    return len(load_file(sample_file))


@pytest.fixture
def run_cli(monkeypatch: pytest.MonkeyPatch):
    """Helper to invoke the CLI with custom arguments inside tests."""

    def _run(args: list[str]) -> None:
        monkeypatch.setattr(sys, "argv", ["announcements.cli", *args])
        cli_main()

    return _run
