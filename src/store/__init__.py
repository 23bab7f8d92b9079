"""Store contracts and the in-memory reference implementation."""
from store.base import ClaimStore, ScoreStore
from store.memory import InMemoryClaimStore, InMemoryScoreStore

__all__ = [
    "ClaimStore",
    "ScoreStore",
    "InMemoryClaimStore",
    "InMemoryScoreStore",
]
