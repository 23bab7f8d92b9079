"""Public scoring operations.

Module-level functions are pure: they take plain records and return plain
records. ``ScoringService`` binds them to a ScoreStore/ClaimStore pair and
owns the read-score-write sequencing, including the per-project lock held
across a claim verification batch.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

import structlog

from config.rubrics import AdequacyRubric, ClaimRubric, ScoringConfig, get_scoring_config
from models.claims import Claim, IntegrityScore
from models.document import Module, Section
from models.shared import ClaimStatus
from models.stats import Aim, RationaleBlock, RigorCheck, StatsIntake
from nodes.aim_parser import classify_aim, parse_aims
from nodes.claim_extractor import extract_claims_from_text
from nodes.module_mapper import completion_percent, map_modules
from nodes.section_extractor import extract_sections
from scoring.adequacy_scorer import AdequacyScore, score_adequacy
from scoring.claim_verifier import VerificationResult, apply_verification, verify_claim
from scoring.criteria_scorer import ReviewCriteriaResult, score_review_criteria
from scoring.integrity import compute_integrity_score, compute_section_breakdown
from scoring.quality_scorer import ModuleScore, QualityResult, score_quality
from store.base import ClaimStore, ScoreStore
from utils.error_handler import (
    ComputationError,
    InputError,
    NotFoundError,
    ScoringError,
    StoreError,
)
from utils.text import word_count
from validation.rigor_validator import validate_rigor

logger = structlog.get_logger(__name__)


@contextmanager
def _computation(stage: str, **ids: Any) -> Iterator[None]:
    """Re-raise unexpected failures in pure scoring code as ComputationError."""
    try:
        yield
    except ScoringError:
        raise
    except (ArithmeticError, TypeError, ValueError, KeyError, AttributeError) as e:
        logger.error("computation_failed", stage=stage, error=str(e), **ids)
        raise ComputationError(stage, e, **ids) from e


@dataclass
class DocumentScoreResult:
    """Everything one document scoring run produces."""
    sections: dict[str, Section]
    modules: list[Module]
    module_scores: list[ModuleScore]
    quality_result: QualityResult
    completion_percent: int
    word_count: int
    review_criteria: Optional[ReviewCriteriaResult] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "sections": {
                name: {
                    "status": s.status.value,
                    "word_count": s.word_count,
                    "start_offset": s.start_offset,
                }
                for name, s in self.sections.items()
            },
            "modules": [
                {
                    "number": m.number,
                    "name": m.name,
                    "status": m.status.value,
                    "critical": m.critical,
                    "score": ms.to_dict(),
                }
                for m, ms in zip(self.modules, self.module_scores)
            ],
            "quality_result": self.quality_result.to_dict(),
            "completion_percent": self.completion_percent,
            "word_count": self.word_count,
        }
        if self.review_criteria is not None:
            out["review_criteria"] = self.review_criteria.to_dict()
        return out


@dataclass
class VerificationBatch:
    """Results of one verification batch plus the recomputed aggregate."""
    project_id: str
    results: list[VerificationResult]
    integrity_score: IntegrityScore
    skipped: list[str] = field(default_factory=list)
    claim_texts: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_id": self.project_id,
            "verified_count": len(self.results),
            "results": [r.to_dict(self.claim_texts.get(r.claim_id, "")) for r in self.results],
            "skipped": list(self.skipped),
            "integrity_score": self.integrity_score.model_dump(mode="json"),
        }


def _resolve_config(config: Optional[ScoringConfig]) -> ScoringConfig:
    return config if config is not None else get_scoring_config()


def extract_and_score_document(
    raw_text: str,
    config: Optional[ScoringConfig] = None,
) -> DocumentScoreResult:
    """Extract sections, map modules and compute the calibrated quality score."""
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise InputError("Document text is required")
    config = _resolve_config(config)

    with _computation("document_scoring"):
        sections = extract_sections(raw_text, config.sections)
        modules = map_modules(sections, config.quality)
        module_scores, quality = score_quality(modules, sections, config.quality)
        result = DocumentScoreResult(
            sections=sections,
            modules=modules,
            module_scores=module_scores,
            quality_result=quality,
            completion_percent=completion_percent(modules),
            word_count=word_count(raw_text),
            review_criteria=score_review_criteria(sections, modules),
        )

    logger.info(
        "document_scored",
        calibrated_score=quality.calibrated_score,
        completion_percent=result.completion_percent,
        word_count=result.word_count,
    )
    return result


def validate_aim_rigor(intake: StatsIntake) -> list[RigorCheck]:
    if intake is None:
        raise InputError("Stats intake is required")
    with _computation("rigor_validation", aim_id=intake.aim_id):
        return validate_rigor(intake)


def score_aim_adequacy(
    intake: StatsIntake,
    rationale_blocks: Optional[list[RationaleBlock]] = None,
    rubric: Optional[AdequacyRubric] = None,
) -> AdequacyScore:
    if intake is None:
        raise InputError("Stats intake is required")
    with _computation("adequacy_scoring", aim_id=intake.aim_id):
        return score_adequacy(intake, rationale_blocks or [], rubric)


def extract_claims(
    section_text: str,
    section_type: str,
    project_id: Optional[str] = None,
    rubric: Optional[ClaimRubric] = None,
) -> list[Claim]:
    """Extract pending claims from one section. Blank text yields no claims."""
    if not section_type:
        raise InputError("Section type is required", project_id=project_id)
    if section_text is None:
        raise InputError("Section text is required", section_type=section_type, project_id=project_id)
    with _computation("claim_extraction", section_type=section_type, project_id=project_id):
        return extract_claims_from_text(section_text, section_type, project_id, rubric)


class ScoringService:
    """Store-backed orchestration of the scoring operations."""

    def __init__(
        self,
        score_store: ScoreStore,
        claim_store: ClaimStore,
        config: Optional[ScoringConfig] = None,
    ):
        self.score_store = score_store
        self.claim_store = claim_store
        self.config = _resolve_config(config)

    def _store_call(self, operation: str, fn: Callable[..., Any], *args: Any, **ids: Any) -> Any:
        try:
            return fn(*args)
        except ScoringError:
            raise
        except Exception as e:
            logger.error("store_failed", operation=operation, error=str(e), **ids)
            raise StoreError(operation, e, **ids) from e

    # Documents
    def score_document(self, project_id: str, raw_text: str) -> DocumentScoreResult:
        if not project_id:
            raise InputError("Project id is required")
        result = extract_and_score_document(raw_text, self.config)
        self._store_call(
            "save_quality_result",
            self.score_store.save_quality_result,
            project_id,
            result.quality_result.to_dict(),
            project_id=project_id,
        )
        return result

    # Aims
    def register_aims(self, project_id: str, aims_text: str) -> list[Aim]:
        """Parse aims out of prose and store each with an empty stats intake."""
        if not project_id:
            raise InputError("Project id is required")
        if not aims_text or not aims_text.strip():
            raise InputError("Aims text is required", project_id=project_id)

        aims = [
            Aim(
                id=f"{project_id}-aim-{index}",
                project_id=project_id,
                aim_index=index,
                text=text,
                question_type=classify_aim(text),
            )
            for index, text in enumerate(parse_aims(aims_text), start=1)
        ]
        for aim in aims:
            self._store_call("add_aim", self.score_store.add_aim, aim, project_id=project_id, aim_id=aim.id)
            self._store_call(
                "save_stats_intake",
                self.score_store.save_stats_intake,
                StatsIntake(aim_id=aim.id),
                project_id=project_id,
                aim_id=aim.id,
            )

        logger.info("aims_registered", project_id=project_id, aims=len(aims))
        return aims

    def _load_intake(self, aim_id: str) -> StatsIntake:
        if not aim_id:
            raise InputError("Aim id is required")
        aim = self._store_call("get_aim", self.score_store.get_aim, aim_id, aim_id=aim_id)
        if aim is None:
            raise NotFoundError("Aim", aim_id=aim_id)
        intake = self._store_call("get_stats_intake", self.score_store.get_stats_intake, aim_id, aim_id=aim_id)
        if intake is None:
            raise InputError("Stats intake record is missing", aim_id=aim_id)
        return intake

    def validate_aim(self, aim_id: str) -> list[RigorCheck]:
        """Validate an aim's intake and atomically replace its stored checks."""
        intake = self._load_intake(aim_id)
        checks = validate_aim_rigor(intake)
        self._store_call(
            "replace_rigor_checks",
            self.score_store.replace_rigor_checks,
            aim_id,
            checks,
            aim_id=aim_id,
        )
        return checks

    def score_aim(self, aim_id: str) -> AdequacyScore:
        intake = self._load_intake(aim_id)
        blocks = self._store_call(
            "get_rationale_blocks", self.score_store.get_rationale_blocks, aim_id, aim_id=aim_id
        )
        score = score_aim_adequacy(intake, blocks, self.config.adequacy)
        self._store_call(
            "save_adequacy_score",
            self.score_store.save_adequacy_score,
            aim_id,
            score.to_dict(),
            aim_id=aim_id,
        )
        return score

    # Claims
    def extract_section_claims(self, project_id: str, section_type: str, section_text: str) -> list[Claim]:
        if not project_id:
            raise InputError("Project id is required")
        claims = extract_claims(section_text, section_type, project_id, self.config.claims)
        self._store_call("add_claims", self.claim_store.add_claims, claims, project_id=project_id)
        return claims

    def verify_pending_claims(
        self,
        project_id: str,
        max_batch: Optional[int] = None,
        claim_ids: Optional[list[str]] = None,
    ) -> VerificationBatch:
        """Verify up to ``max_batch`` pending claims and recompute the integrity score.

        The per-project lock is held across the whole verify-then-aggregate
        sequence so two batches for one project cannot interleave.
        """
        if not project_id:
            raise InputError("Project id is required")
        batch_size = max_batch if max_batch is not None else self.config.verification.batch_size
        if batch_size < 1:
            raise InputError("Batch size must be at least 1", project_id=project_id)
        rubric = self.config.verification

        with self.claim_store.project_lock(project_id):
            pending = self._store_call(
                "list_claims",
                self.claim_store.list_claims,
                project_id,
                ClaimStatus.PENDING,
                claim_ids,
                batch_size,
                project_id=project_id,
            )

            results: list[VerificationResult] = []
            for claim in pending:
                with _computation("claim_verification", project_id=project_id, claim_id=claim.id):
                    result = verify_claim(claim, rubric)
                    updated = apply_verification(claim, result)
                self._store_call(
                    "update_claim", self.claim_store.update_claim, updated,
                    project_id=project_id, claim_id=claim.id,
                )
                if result.references:
                    self._store_call(
                        "add_references", self.claim_store.add_references, result.references,
                        project_id=project_id, claim_id=claim.id,
                    )
                results.append(result)

            all_claims = self._store_call(
                "list_claims", self.claim_store.list_claims, project_id, project_id=project_id
            )
            with _computation("integrity_aggregation", project_id=project_id):
                integrity = compute_integrity_score(project_id, all_claims, self.config.integrity)
            self._store_call(
                "save_integrity_score", self.claim_store.save_integrity_score, integrity,
                project_id=project_id,
            )

        processed = {c.id for c in pending}
        skipped = [cid for cid in (claim_ids or []) if cid not in processed]
        logger.info(
            "claims_verified",
            project_id=project_id,
            verified=len(results),
            skipped=len(skipped),
            overall_score=integrity.overall_score,
        )
        return VerificationBatch(
            project_id=project_id,
            results=results,
            integrity_score=integrity,
            skipped=skipped,
            claim_texts={c.id: c.text for c in pending},
        )

    def get_integrity_report(self, project_id: str) -> IntegrityScore:
        """Stored integrity score with a section breakdown rebuilt from current claims."""
        if not project_id:
            raise InputError("Project id is required")
        stored = self._store_call(
            "get_integrity_score", self.claim_store.get_integrity_score, project_id, project_id=project_id
        )
        if stored is None:
            raise NotFoundError("Integrity score", project_id=project_id)
        claims = self._store_call("list_claims", self.claim_store.list_claims, project_id, project_id=project_id)
        return stored.model_copy(update={"section_breakdown": compute_section_breakdown(claims)})
