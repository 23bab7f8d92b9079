"""In-memory stores.

Every read returns copies so callers can never mutate stored records in
place. One re-entrant lock guards each store; ``project_lock`` hands out a
per-project lock that serializes verify-and-aggregate runs inside this
process only.
"""
from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

import structlog

from models.claims import Claim, IntegrityScore, Reference
from models.shared import ClaimStatus
from models.stats import Aim, RationaleBlock, RigorCheck, StatsIntake
from utils.error_handler import NotFoundError

logger = structlog.get_logger(__name__)


class InMemoryScoreStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._aims: dict[str, Aim] = {}
        self._intakes: dict[str, StatsIntake] = {}
        self._rationale: dict[str, list[RationaleBlock]] = {}
        self._checks: dict[str, list[RigorCheck]] = {}
        self._adequacy: dict[str, dict[str, Any]] = {}
        self._quality: dict[str, dict[str, Any]] = {}

    # Aims
    def add_aim(self, aim: Aim) -> None:
        with self._lock:
            self._aims[aim.id] = aim.model_copy()

    def get_aim(self, aim_id: str) -> Optional[Aim]:
        with self._lock:
            aim = self._aims.get(aim_id)
            return aim.model_copy() if aim else None

    def list_aims(self, project_id: str) -> list[Aim]:
        with self._lock:
            aims = [a.model_copy() for a in self._aims.values() if a.project_id == project_id]
        return sorted(aims, key=lambda a: a.aim_index)

    def _require_aim(self, aim_id: str) -> None:
        if aim_id not in self._aims:
            raise NotFoundError("Aim", aim_id=aim_id)

    # Stats intake and rationale
    def save_stats_intake(self, intake: StatsIntake) -> None:
        with self._lock:
            self._require_aim(intake.aim_id)
            self._intakes[intake.aim_id] = intake.model_copy(deep=True)

    def get_stats_intake(self, aim_id: str) -> Optional[StatsIntake]:
        with self._lock:
            intake = self._intakes.get(aim_id)
            return intake.model_copy(deep=True) if intake else None

    def save_rationale_blocks(self, aim_id: str, blocks: list[RationaleBlock]) -> None:
        with self._lock:
            self._require_aim(aim_id)
            self._rationale[aim_id] = [b.model_copy() for b in blocks]

    def get_rationale_blocks(self, aim_id: str) -> list[RationaleBlock]:
        with self._lock:
            return [b.model_copy() for b in self._rationale.get(aim_id, [])]

    # Results
    def replace_rigor_checks(self, aim_id: str, checks: list[RigorCheck]) -> None:
        replacement = [c.model_copy() for c in checks]
        with self._lock:
            self._require_aim(aim_id)
            self._checks[aim_id] = replacement
        logger.debug("rigor_checks_replaced", aim_id=aim_id, checks=len(replacement))

    def get_rigor_checks(self, aim_id: str) -> list[RigorCheck]:
        with self._lock:
            return [c.model_copy() for c in self._checks.get(aim_id, [])]

    def save_adequacy_score(self, aim_id: str, score: dict[str, Any]) -> None:
        with self._lock:
            self._require_aim(aim_id)
            self._adequacy[aim_id] = dict(score)

    def get_adequacy_score(self, aim_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            score = self._adequacy.get(aim_id)
            return dict(score) if score is not None else None

    def save_quality_result(self, project_id: str, result: dict[str, Any]) -> None:
        with self._lock:
            self._quality[project_id] = dict(result)

    def get_quality_result(self, project_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            result = self._quality.get(project_id)
            return dict(result) if result is not None else None


class InMemoryClaimStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._claims: dict[str, Claim] = {}
        self._references: dict[str, list[Reference]] = defaultdict(list)
        self._integrity: dict[str, IntegrityScore] = {}
        self._project_locks: dict[str, threading.Lock] = {}

    def add_claims(self, claims: Iterable[Claim]) -> None:
        """Insert new claims; an id that already exists is left untouched."""
        with self._lock:
            for claim in claims:
                if claim.id not in self._claims:
                    self._claims[claim.id] = claim.model_copy()

    def get_claim(self, claim_id: str) -> Optional[Claim]:
        with self._lock:
            claim = self._claims.get(claim_id)
            return claim.model_copy() if claim else None

    def list_claims(
        self,
        project_id: str,
        status: Optional[ClaimStatus] = None,
        claim_ids: Optional[list[str]] = None,
        limit: Optional[int] = None,
    ) -> list[Claim]:
        wanted = set(claim_ids) if claim_ids is not None else None
        with self._lock:
            claims = [
                c.model_copy()
                for c in self._claims.values()
                if c.project_id == project_id
                and (status is None or c.status == status)
                and (wanted is None or c.id in wanted)
            ]
        return claims[:limit] if limit is not None else claims

    def update_claim(self, claim: Claim) -> None:
        with self._lock:
            if claim.id not in self._claims:
                raise NotFoundError("Claim", claim_id=claim.id, project_id=claim.project_id)
            self._claims[claim.id] = claim.model_copy()

    def add_references(self, references: Iterable[Reference]) -> None:
        with self._lock:
            for ref in references:
                self._references[ref.claim_id].append(ref.model_copy())

    def list_references(self, claim_id: str) -> list[Reference]:
        with self._lock:
            return [r.model_copy() for r in self._references.get(claim_id, [])]

    def save_integrity_score(self, score: IntegrityScore) -> None:
        with self._lock:
            self._integrity[score.project_id] = score.model_copy(deep=True)

    def get_integrity_score(self, project_id: str) -> Optional[IntegrityScore]:
        with self._lock:
            score = self._integrity.get(project_id)
            return score.model_copy(deep=True) if score else None

    @contextmanager
    def project_lock(self, project_id: str) -> Iterator[None]:
        with self._lock:
            lock = self._project_locks.setdefault(project_id, threading.Lock())
        with lock:
            yield
