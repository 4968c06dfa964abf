"""Unit tests for the classifier rules."""

import pytest

from go_detector.core.classifier import classify, decide
from go_detector.core.models import Evidence, Signal, Verdict
from go_detector.core.scoring import Score


class TestClassify:
    """Tests for classify()."""

    def test_no_score(self) -> None:
        assert classify(0.0, 0.0, 0, 0) == (Verdict.UNCLEAR, 0.0)

    def test_strong_cli(self) -> None:
        verdict, confidence = classify(10.0, 2.0, 3, 0)
        assert verdict is Verdict.CLI
        assert confidence == pytest.approx(10 / 12)

    def test_strong_library(self) -> None:
        verdict, confidence = classify(1.0, 10.0, 0, 3)
        assert verdict is Verdict.LIBRARY
        assert confidence == pytest.approx(10 / 11)

    def test_secondary_cli(self) -> None:
        verdict, confidence = classify(10.0, 9.0, 2, 0)
        assert verdict is Verdict.CLI
        assert confidence == pytest.approx(10 / 19 * 0.85)

    def test_secondary_library(self) -> None:
        verdict, confidence = classify(9.0, 10.0, 0, 2)
        assert verdict is Verdict.LIBRARY
        assert confidence == pytest.approx(10 / 19 * 0.85)

    def test_weak_cli(self) -> None:
        verdict, confidence = classify(10.0, 9.0, 1, 0)
        assert verdict is Verdict.CLI
        assert confidence == pytest.approx(10 / 19 * 0.7)

    def test_weak_library(self) -> None:
        verdict, confidence = classify(2.0, 3.0, 0, 0)
        assert verdict is Verdict.LIBRARY
        assert confidence == pytest.approx(0.6 * 0.7)

    def test_exact_tie(self) -> None:
        assert classify(5.0, 5.0, 3, 3) == (Verdict.UNCLEAR, 0.5)

    def test_confidence_capped(self) -> None:
        assert classify(100.0, 0.0, 3, 0) == (Verdict.CLI, 0.98)

    def test_cli_rule_checked_first(self) -> None:
        verdict, _ = classify(10.0, 1.0, 3, 10)
        assert verdict is Verdict.CLI

    def test_strong_margin_needs_checks(self) -> None:
        # margin is large but only two checks: secondary rule applies
        verdict, confidence = classify(10.0, 2.0, 2, 0)
        assert verdict is Verdict.CLI
        assert confidence == pytest.approx(10 / 12 * 0.85)

    @pytest.mark.parametrize("cli,lib,cc,lc", [
        (0.1, 0.0, 0, 0),
        (3.0, 2.9, 5, 5),
        (0.0, 50.0, 0, 20),
        (7.0, 7.5, 1, 1),
    ])
    def test_confidence_in_range(self, cli: float, lib: float, cc: int, lc: int) -> None:
        _, confidence = classify(cli, lib, cc, lc)
        assert 0.1 <= confidence <= 0.98


class TestDecide:
    """Tests for decide()."""

    def test_no_evidence_ignores_bonuses(self) -> None:
        score = Score(cli=3.0, library=0.0, cli_checks=0, library_checks=0)
        assert decide([], score) == (Verdict.UNCLEAR, 0.0)

    def test_with_evidence_delegates(self) -> None:
        evidence = [Evidence.create(Signal.MAIN_FUNCTION, "Found main() function", "main.go", 1.0, 0.99)]
        score = Score(cli=10.0, library=2.0, cli_checks=3, library_checks=0)
        verdict, confidence = decide(evidence, score)
        assert verdict is Verdict.CLI
        assert confidence == pytest.approx(10 / 12)
