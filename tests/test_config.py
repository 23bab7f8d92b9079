"""Tests for rubric configuration loading."""
from __future__ import annotations

from pathlib import Path

import pytest

from config.loader import CONFIG_ENV_VAR, get_config
from config.rubrics import DEFAULT_SECTION_RULES, ScoringConfig, get_scoring_config


@pytest.fixture
def override_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point the loader at a temporary YAML file, restoring the bundled one afterwards."""

    def _write(text: str) -> Path:
        path = tmp_path / "scoring.yaml"
        path.write_text(text, encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        get_config().reload()
        return path

    yield _write

    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    get_config().reload()


class TestBundledConfig:
    def test_yaml_matches_model_defaults(self):
        loaded = get_scoring_config()
        defaults = ScoringConfig()

        assert loaded.sections.names == defaults.sections.names
        assert [r.patterns for r in loaded.sections.rules] == [r.patterns for r in DEFAULT_SECTION_RULES]
        assert loaded.quality.max_possible_weighted == 47.5
        assert loaded.quality.structural_cap_floor == 6.0
        assert loaded.adequacy.weights == defaults.adequacy.weights
        assert loaded.verification.batch_size == 10
        assert [b.grade for b in loaded.integrity.bands] == ["A", "B", "C", "D"]

    def test_dot_notation_lookup(self):
        config = get_config()

        assert config.get("verification.batch_size") == 10
        assert config.get("nonexistent.key", default=100) == 100
        assert config.get_section("nonexistent") == {}


class TestOverrides:
    def test_yaml_overrides_defaults(self, override_config):
        override_config("verification:\n  batch_size: 3\n  verified_at_or_above: 0.8\n")

        config = get_scoring_config()

        assert config.verification.batch_size == 3
        assert config.verification.verified_at_or_above == 0.8
        assert config.verification.base_score == 0.5
        assert config.quality.structural_cap_floor == 6.0

    def test_missing_file_falls_back_to_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.yaml"))
        get_config().reload()
        try:
            assert get_scoring_config().verification.batch_size == 10
        finally:
            monkeypatch.delenv(CONFIG_ENV_VAR)
            get_config().reload()

    def test_invalid_thresholds_rejected(self, override_config):
        override_config("verification:\n  verified_at_or_above: 0.3\n  unverified_below: 0.5\n")

        with pytest.raises(ValueError):
            get_scoring_config()

    def test_explicit_reload_path_wins_over_env(self, tmp_path, override_config):
        override_config("verification:\n  batch_size: 3\n")
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("verification:\n  batch_size: 7\n", encoding="utf-8")

        get_config().reload(str(explicit))

        assert get_scoring_config().verification.batch_size == 7
