"""Tests for specific-aims parsing and question-type classification."""
from __future__ import annotations

import pytest

from nodes.aim_parser import classify_aim, parse_aims


class TestParseAims:
    def test_marked_aims(self):
        text = (
            "Specific Aim 1: Determine whether drug X reduces tumor growth in mice. "
            "Specific Aim 2: Compare survival between treated and control groups."
        )

        assert parse_aims(text) == [
            "Determine whether drug X reduces tumor growth in mice.",
            "Compare survival between treated and control groups.",
        ]

    def test_short_marked_aims_dropped(self):
        text = "Aim 1: short. Aim 2: Quantify receptor density in cortex"

        assert parse_aims(text) == ["Quantify receptor density in cortex"]

    def test_numbered_list_fallback(self):
        text = (
            "Goals:\n"
            "1. Establish the dose response profile in adult zebrafish\n"
            "2) Characterize behavioural changes under chronic exposure"
        )

        assert parse_aims(text) == [
            "Establish the dose response profile in adult zebrafish",
            "Characterize behavioural changes under chronic exposure",
        ]

    def test_nothing_to_parse(self):
        assert parse_aims("") == []


class TestClassifyAim:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Compare the proportion of responders between arms", "difference_proportions"),
            ("Compare mean tumor volume between treated and control mice", "difference_means"),
            ("Estimate the hazard of relapse after surgery", "time_to_event"),
            ("Track tumor volume along a longitudinal trajectory", "repeated_measures"),
            ("Model clinics as a multilevel structure", "clustered"),
            ("Relate plasma levels with cognitive decline via regression", "association_regression"),
            ("Profile genomic markers of relapse", "high_dimensional"),
            ("Establish noninferiority of the new dosing regimen", "equivalence_noninferiority"),
            ("Characterize the morphology of neurons", "difference_means"),
        ],
    )
    def test_question_types(self, text, expected):
        assert classify_aim(text) == expected
