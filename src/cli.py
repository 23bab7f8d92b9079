from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from config.loader import CONFIG_ENV_VAR, get_config
from config.rubrics import get_scoring_config
from engine import (
    ScoringService,
    extract_and_score_document,
    score_aim_adequacy,
    validate_aim_rigor,
)
from models.shared import SectionStatus
from models.stats import RationaleBlock, StatsIntake
from nodes.aim_parser import classify_aim, parse_aims
from parsers.document_reader import load_document_text
from pipeline_runner import create_runner
from store.memory import InMemoryClaimStore, InMemoryScoreStore
from utils.error_handler import InputError, ScoringError, exit_with_error


logger = logging.getLogger(__name__)

COMMANDS = ("score-document", "audit-claims", "score-aim", "parse-aims")


def _add_common_arguments(parser: argparse.ArgumentParser, input_help: str) -> None:
    parser.add_argument(
        "--input",
        dest="input_path",
        required=True,
        help=input_help,
    )
    parser.add_argument(
        "--output",
        dest="output_path",
        default="",
        help="Optional output JSON file path. If not set, writes to outputs/.",
    )
    parser.add_argument(
        "--output-dir",
        dest="output_dir",
        default=os.getenv("GRANT_RIGOR_OUTPUT_DIR", "outputs"),
        help="Directory to save outputs when --output is not set.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default="",
        help=f"Rubric YAML to use instead of the bundled one (or set {CONFIG_ENV_VAR}).",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=os.getenv("GRANT_RIGOR_LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--dotenv",
        dest="dotenv_path",
        default=".env",
        help="Path to .env file to load (default: .env at repo root)",
    )


def build_score_document_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grant-rigor score-document",
        description="Extract sections and modules and compute the calibrated 1-9 quality score",
    )
    _add_common_arguments(parser, "Path to proposal document (.txt/.md/.docx/.pdf/.html)")
    parser.add_argument(
        "--project-id",
        dest="project_id",
        default="cli-project",
        help="Project identifier recorded with the result.",
    )
    return parser


def build_audit_claims_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grant-rigor audit-claims",
        description="Extract claims from every written section, verify them and grade the document",
    )
    _add_common_arguments(parser, "Path to proposal document (.txt/.md/.docx/.pdf/.html)")
    parser.add_argument(
        "--project-id",
        dest="project_id",
        default="cli-project",
        help="Project identifier the claims are filed under.",
    )
    parser.add_argument(
        "--max-batch",
        dest="max_batch",
        type=int,
        default=0,
        help="Claims verified per batch (default: verification.batch_size from config).",
    )
    return parser


def build_score_aim_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grant-rigor score-aim",
        description="Validate statistical rigor and score statistical adequacy for one aim",
    )
    _add_common_arguments(
        parser,
        "Path to a stats-intake JSON file (intake fields plus optional rationale_blocks list)",
    )
    return parser


def build_parse_aims_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grant-rigor parse-aims",
        description="Split specific-aims text into aims and classify their statistical question type",
    )
    _add_common_arguments(parser, "Path to a document holding the specific-aims text")
    return parser


def run_score_document(
    input_path: str,
    output_path: str = "",
    output_dir: str = "outputs",
    project_id: str = "cli-project",
) -> int:
    runner = create_runner(input_path, output_path, output_dir, output_prefix="quality")
    runner.log_plan([
        "Document Quality Scoring",
        "Load document text",
        "Extract sections and map modules",
        "Score modules and calibrate 1-9 estimate",
        "Write JSON output",
    ])
    runner.log_run(project_id=project_id)

    service = ScoringService(InMemoryScoreStore(), InMemoryClaimStore(), get_scoring_config())

    def _score(results: dict[str, Any]) -> Any:
        scored = service.score_document(project_id, results["load"])
        runner.log_step(
            "score",
            calibrated=scored.quality_result.calibrated_score,
            band=scored.quality_result.probability_band,
            completion=scored.completion_percent,
        )
        return scored

    results, code = runner.run_with_steps(
        [
            ("load", lambda _: load_document_text(runner.input_path)),
            ("score", _score),
        ],
        on_error=lambda step, e: exit_with_error(e, context=step),
    )
    if code:
        return code

    payload = {"project_id": project_id, **results["score"].to_dict()}
    runner.write_output(payload)
    return 0


def run_audit_claims(
    input_path: str,
    output_path: str = "",
    output_dir: str = "outputs",
    project_id: str = "cli-project",
    max_batch: int = 0,
) -> int:
    runner = create_runner(input_path, output_path, output_dir, output_prefix="integrity")
    runner.log_plan([
        "Claim Integrity Audit",
        "Load document text and extract sections",
        "Extract claims from every non-missing section",
        "Verify pending claims in batches",
        "Write JSON output with integrity grade",
    ])
    runner.log_run(project_id=project_id, max_batch=max_batch or "config")

    config = get_scoring_config()
    service = ScoringService(InMemoryScoreStore(), InMemoryClaimStore(), config)

    def _extract(results: dict[str, Any]) -> Any:
        scored = extract_and_score_document(results["load"], config)
        claims = []
        for name, section in scored.sections.items():
            if section.status == SectionStatus.MISSING:
                continue
            claims.extend(service.extract_section_claims(project_id, name, section.raw_text))
        runner.log_step("extract", sections=len(scored.sections), claims=len(claims))
        return claims

    def _verify(results: dict[str, Any]) -> Any:
        batches = []
        while True:
            batch = service.verify_pending_claims(project_id, max_batch=max_batch or None)
            if not batch.results:
                break
            batches.append(batch)
            runner.log_step("verify", batch=len(batches), verified=len(batch.results))
        return batches

    results, code = runner.run_with_steps(
        [
            ("load", lambda _: load_document_text(runner.input_path)),
            ("extract", _extract),
            ("verify", _verify),
            ("report", lambda _: service.get_integrity_report(project_id)),
        ],
        on_error=lambda step, e: exit_with_error(e, context=step),
    )
    if code:
        return code

    report = results["report"]
    payload = {
        "project_id": project_id,
        "claims_extracted": len(results["extract"]),
        "verification": [r for batch in results["verify"] for r in batch.to_dict()["results"]],
        "integrity_score": report.model_dump(mode="json"),
    }
    runner.log_step(
        "report",
        overall=report.overall_score,
        grade=report.grade.grade if report.grade else "-",
    )
    runner.write_output(payload)
    return 0


def _load_intake_file(path: str) -> tuple[StatsIntake, list[RationaleBlock]]:
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InputError(f"Intake file is not valid JSON: {e.msg}", path=path) from e
    if not isinstance(data, dict):
        raise InputError("Intake file must hold a JSON object", path=path)

    blocks_data = data.pop("rationale_blocks", None) or []
    try:
        intake = StatsIntake.model_validate(data)
        blocks = [RationaleBlock.model_validate(b) for b in blocks_data]
    except ValidationError as e:
        raise InputError("Intake file does not match the stats intake schema", path=path) from e
    return intake, blocks


def run_score_aim(
    input_path: str,
    output_path: str = "",
    output_dir: str = "outputs",
) -> int:
    runner = create_runner(input_path, output_path, output_dir, output_prefix="aim")
    runner.log_plan([
        "Aim Statistical Review",
        "Load stats intake and rationale blocks",
        "Run rigor rule set",
        "Score six-category adequacy rubric",
        "Write JSON output",
    ])
    runner.log_run()

    config = get_scoring_config()
    results, code = runner.run_with_steps(
        [
            ("load", lambda _: _load_intake_file(input_path)),
            ("rigor", lambda r: validate_aim_rigor(r["load"][0])),
            ("adequacy", lambda r: score_aim_adequacy(r["load"][0], r["load"][1], config.adequacy)),
        ],
        on_error=lambda step, e: exit_with_error(e, context=step),
    )
    if code:
        return code

    intake = results["load"][0]
    adequacy = results["adequacy"]
    runner.log_step("adequacy", score=adequacy.value, checks=len(results["rigor"]))
    payload = {
        "aim_id": intake.aim_id,
        "rigor_checks": [c.model_dump(mode="json") for c in results["rigor"]],
        **adequacy.to_dict(),
    }
    runner.write_output(payload)
    return 0


def run_parse_aims(
    input_path: str,
    output_path: str = "",
    output_dir: str = "outputs",
) -> int:
    runner = create_runner(input_path, output_path, output_dir, output_prefix="aims")
    runner.log_plan([
        "Specific Aims Parsing",
        "Load text",
        "Split on Aim markers (numbered list fallback)",
        "Classify statistical question type",
        "Write JSON output",
    ])
    runner.log_run()

    results, code = runner.run_with_steps(
        [
            ("load", lambda _: load_document_text(runner.input_path)),
            ("parse", lambda r: parse_aims(r["load"])),
        ],
        on_error=lambda step, e: exit_with_error(e, context=step),
    )
    if code:
        return code

    aims = [
        {"aim_index": i, "text": text, "question_type": classify_aim(text)}
        for i, text in enumerate(results["parse"], start=1)
    ]
    runner.log_step("parse", aims=len(aims))
    runner.write_output({"aims": aims})
    return 0


def _setup(args: argparse.Namespace) -> None:
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO))

    load_dotenv(args.dotenv_path)
    # Reload on every run so an earlier --config never carries into the next one.
    get_config().reload(args.config_path or None)


def main(argv: Optional[list[str]] = None) -> int:
    argv_list = list(argv) if argv is not None else sys.argv[1:]

    if not argv_list or argv_list[0] not in COMMANDS:
        print(f"usage: grant-rigor {{{','.join(COMMANDS)}}} --input PATH [options]", file=sys.stderr)
        return 2

    command, rest = argv_list[0], argv_list[1:]
    try:
        if command == "score-document":
            args = build_score_document_parser().parse_args(rest)
            _setup(args)
            return run_score_document(
                input_path=args.input_path,
                output_path=args.output_path,
                output_dir=args.output_dir,
                project_id=args.project_id,
            )

        if command == "audit-claims":
            args = build_audit_claims_parser().parse_args(rest)
            _setup(args)
            return run_audit_claims(
                input_path=args.input_path,
                output_path=args.output_path,
                output_dir=args.output_dir,
                project_id=args.project_id,
                max_batch=int(args.max_batch),
            )

        if command == "score-aim":
            args = build_score_aim_parser().parse_args(rest)
            _setup(args)
            return run_score_aim(
                input_path=args.input_path,
                output_path=args.output_path,
                output_dir=args.output_dir,
            )

        args = build_parse_aims_parser().parse_args(rest)
        _setup(args)
        return run_parse_aims(
            input_path=args.input_path,
            output_path=args.output_path,
            output_dir=args.output_dir,
        )
    except ScoringError as e:
        return exit_with_error(e, context=command)


if __name__ == "__main__":
    raise SystemExit(main())
