"""Store contracts the scoring core reads from and writes to.

The core stays store-agnostic: any row/document store that satisfies these
protocols can back the ScoringService.
"""
from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Iterable, Optional, Protocol, runtime_checkable

from models.claims import Claim, IntegrityScore, Reference
from models.shared import ClaimStatus
from models.stats import Aim, RationaleBlock, RigorCheck, StatsIntake


@runtime_checkable
class ScoreStore(Protocol):
    """Aims, stats intake, rigor checks and computed scores."""

    def add_aim(self, aim: Aim) -> None: ...

    def get_aim(self, aim_id: str) -> Optional[Aim]: ...

    def list_aims(self, project_id: str) -> list[Aim]: ...

    def save_stats_intake(self, intake: StatsIntake) -> None: ...

    def get_stats_intake(self, aim_id: str) -> Optional[StatsIntake]: ...

    def save_rationale_blocks(self, aim_id: str, blocks: list[RationaleBlock]) -> None: ...

    def get_rationale_blocks(self, aim_id: str) -> list[RationaleBlock]: ...

    def replace_rigor_checks(self, aim_id: str, checks: list[RigorCheck]) -> None:
        """Atomically replace the aim's full check set; readers never see a partial set."""
        ...

    def get_rigor_checks(self, aim_id: str) -> list[RigorCheck]: ...

    def save_adequacy_score(self, aim_id: str, score: dict) -> None: ...

    def save_quality_result(self, project_id: str, result: dict) -> None: ...


@runtime_checkable
class ClaimStore(Protocol):
    """Claims, their references and the project integrity score."""

    def add_claims(self, claims: Iterable[Claim]) -> None: ...

    def list_claims(
        self,
        project_id: str,
        status: Optional[ClaimStatus] = None,
        claim_ids: Optional[list[str]] = None,
        limit: Optional[int] = None,
    ) -> list[Claim]: ...

    def update_claim(self, claim: Claim) -> None: ...

    def add_references(self, references: Iterable[Reference]) -> None: ...

    def list_references(self, claim_id: str) -> list[Reference]: ...

    def save_integrity_score(self, score: IntegrityScore) -> None: ...

    def get_integrity_score(self, project_id: str) -> Optional[IntegrityScore]: ...

    def project_lock(self, project_id: str) -> AbstractContextManager:
        """Serialize verify-and-aggregate runs for one project."""
        ...
