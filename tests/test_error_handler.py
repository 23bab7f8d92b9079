"""Tests for the error taxonomy and the CLI run helpers."""
from __future__ import annotations

from pathlib import Path

import pytest

from pipeline_runner import create_runner
from utils.error_handler import (
    GENERIC_USER_MESSAGE,
    ComputationError,
    InputError,
    NotFoundError,
    StoreError,
    exit_with_error,
)


class TestUserMessages:
    def test_input_error_is_shown(self):
        err = InputError("Project id is required")

        assert err.get_user_message() == "Project id is required"
        assert err.error_type == "INPUT_INVALID"

    @pytest.mark.parametrize(
        "err",
        [
            NotFoundError("Aim", aim_id="a1"),
            StoreError("save_quality_result", RuntimeError("boom"), project_id="p1"),
            ComputationError("adequacy_scoring", ZeroDivisionError("division by zero"), aim_id="a1"),
        ],
    )
    def test_internal_errors_are_generic(self, err):
        assert err.get_user_message() == GENERIC_USER_MESSAGE

    def test_identifiers_in_str(self):
        err = NotFoundError("Aim", aim_id="a1")

        assert str(err) == "Aim not found (aim_id=a1)"

    def test_computation_error_details(self):
        err = ComputationError("adequacy_scoring", ZeroDivisionError("division by zero"), aim_id="a1")

        assert err.details == "ZeroDivisionError: division by zero"
        assert err.context == {"aim_id": "a1"}

    def test_exit_with_error(self, capsys):
        assert exit_with_error(StoreError("get_aim", aim_id="a1")) == 1
        assert GENERIC_USER_MESSAGE in capsys.readouterr().err


class TestPipelineRunner:
    def test_missing_input(self, tmp_path: Path):
        with pytest.raises(InputError):
            create_runner(str(tmp_path / "absent.txt"))

    def test_output_naming(self, tmp_path: Path):
        source = tmp_path / "proposal.txt"
        source.write_text("x", encoding="utf-8")

        runner = create_runner(str(source), output_dir=str(tmp_path / "out"), output_prefix="quality")

        assert runner.output_file.parent == tmp_path / "out"
        assert runner.output_file.name.startswith("quality_proposal_")

    def test_steps_stop_on_scoring_error(self, tmp_path: Path):
        source = tmp_path / "proposal.txt"
        source.write_text("x", encoding="utf-8")
        runner = create_runner(str(source), output_path=str(tmp_path / "o.json"))
        calls: list[str] = []

        def failing(_):
            raise InputError("bad input")

        results, code = runner.run_with_steps(
            [
                ("first", lambda _: calls.append("first") or 1),
                ("second", failing),
                ("third", lambda _: calls.append("third")),
            ],
            on_error=lambda step, e: 7,
        )

        assert code == 7
        assert results == {"first": 1}
        assert calls == ["first"]

    def test_steps_see_earlier_results(self, tmp_path: Path):
        source = tmp_path / "proposal.txt"
        source.write_text("x", encoding="utf-8")
        runner = create_runner(str(source), output_path=str(tmp_path / "o.json"))

        results, code = runner.run_with_steps(
            [("a", lambda _: 2), ("b", lambda r: r["a"] * 3)]
        )

        assert code == 0
        assert results == {"a": 2, "b": 6}
