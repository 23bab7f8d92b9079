"""Pipeline runner utilities for CLI commands.

Provides the shared plan/run/output logging and output-file naming used by
every ``grant-rigor`` subcommand.
"""
from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from utils.error_handler import InputError, ScoringError

logger = logging.getLogger(__name__)


class PipelineRunner:
    """Shared run plumbing for the grant-rigor subcommands.

    Validates the input path up front and fixes the output file: either the
    explicit ``output_path`` or ``<output_dir>/<prefix>_<input stem>_<run_id>.json``.
    """

    def __init__(
        self,
        input_path: str,
        output_path: str = "",
        output_dir: str = "outputs",
        output_prefix: str = "output",
    ):
        self.input_path = Path(input_path)
        self.output_dir = output_dir
        self.output_prefix = output_prefix

        if not self.input_path.exists():
            raise InputError(f"Input file not found: {input_path}", path=input_path)

        self.run_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S") + "_" + uuid.uuid4().hex[:8]

        if output_path:
            self.output_file = Path(output_path)
        else:
            out_dir_path = Path(output_dir)
            out_dir_path.mkdir(parents=True, exist_ok=True)
            self.output_file = out_dir_path / f"{output_prefix}_{self.input_path.stem}_{self.run_id}.json"

    def log_plan(self, steps: list[str]) -> None:
        """Log the subcommand title followed by its planned steps."""
        logger.info("[plan] %s", steps[0] if steps else "Pipeline")
        for step in steps[1:]:
            logger.info("[plan] - %s", step)

    def log_run(self, **kwargs) -> None:
        """Log the input, the output target and run parameters such as project_id."""
        params = " ".join(f"{k}={v}" for k, v in kwargs.items())
        logger.info("[run] input=%s output=%s %s", str(self.input_path), str(self.output_file), params)

    def log_step(self, step_name: str, **kwargs) -> None:
        """Log a step start, or its metrics (calibrated=, claims=, ...) once it has run."""
        if kwargs:
            metrics = " ".join(f"{k}={v}" for k, v in kwargs.items())
            logger.info("[%s] %s", step_name, metrics)
        else:
            logger.info("[%s] started", step_name)

    def log_error(self, step_name: str, message: str) -> None:
        """Log the ScoringError that stopped a step."""
        logger.error("[%s] %s", step_name, message)

    def write_output(self, payload: dict[str, Any]) -> None:
        """Write the scoring payload as indented JSON; datetimes and enums fall back to str."""
        text = json.dumps(payload, indent=2, default=str)
        self.output_file.parent.mkdir(parents=True, exist_ok=True)
        self.output_file.write_text(text, encoding="utf-8")
        logger.info("[output] wrote=%s", str(self.output_file))

    def run_with_steps(
        self,
        steps: list[tuple[str, Callable[[dict[str, Any]], Any]]],
        on_error: Optional[Callable[[str, ScoringError], int]] = None,
    ) -> tuple[dict[str, Any], int]:
        """Run a sequence of named steps.

        Each step receives the results gathered so far. A ScoringError stops
        the run; anything else propagates.

        Args:
            steps: (step_name, step_function) pairs, run in order
            on_error: Maps the failing step and its ScoringError to an exit code

        Returns:
            (results_dict, exit_code)
        """
        results: dict[str, Any] = {}

        for step_name, step_fn in steps:
            try:
                self.log_step(step_name)
                results[step_name] = step_fn(results)
            except ScoringError as e:
                self.log_error(step_name, str(e))
                if on_error:
                    return results, on_error(step_name, e)
                return results, 1

        return results, 0


def create_runner(
    input_path: str,
    output_path: str = "",
    output_dir: str = "outputs",
    output_prefix: str = "output",
) -> PipelineRunner:
    """Build the PipelineRunner one grant-rigor subcommand uses."""
    return PipelineRunner(
        input_path=input_path,
        output_path=output_path,
        output_dir=output_dir,
        output_prefix=output_prefix,
    )
