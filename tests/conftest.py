from __future__ import annotations

import sys
from pathlib import Path

# Add src directory to path immediately on import - MUST be before any other imports
_src_dir = Path(__file__).resolve().parents[1] / "src"
_src_str = str(_src_dir)
if _src_str not in sys.path:
    sys.path.insert(0, _src_str)

import pytest

from config.rubrics import ScoringConfig
from engine import ScoringService
from store.memory import InMemoryClaimStore, InMemoryScoreStore


def pytest_configure(config: pytest.Config) -> None:
    """Ensure src directory is on sys.path so tests can import modules."""
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


@pytest.fixture
def score_store() -> InMemoryScoreStore:
    return InMemoryScoreStore()


@pytest.fixture
def claim_store() -> InMemoryClaimStore:
    return InMemoryClaimStore()


@pytest.fixture
def service(score_store: InMemoryScoreStore, claim_store: InMemoryClaimStore) -> ScoringService:
    return ScoringService(score_store, claim_store, ScoringConfig())
