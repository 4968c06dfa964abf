"""
分类器 - 将两个分数映射为判定和置信度

Ordered rules, first match wins.
"""

from typing import Sequence

from go_detector.core.models import Evidence, Verdict
from go_detector.core.scoring import Score

CLI_THRESHOLD = 1.3
LIBRARY_THRESHOLD = 1.2
STRONG_CHECKS = 3
SECONDARY_CHECKS = 2
SECONDARY_FACTOR = 0.85
WEAK_FACTOR = 0.7
TIE_CONFIDENCE = 0.5

MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.98


def _clamp(confidence: float) -> float:
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))


def classify(
    cli_score: float,
    library_score: float,
    cli_checks: int,
    library_checks: int,
) -> tuple[Verdict, float]:
    """
    分数 -> (判定, 置信度)

    Both scores zero gives (UNCLEAR, 0.0); every other result has its
    confidence clamped to [0.1, 0.98].
    """
    total = cli_score + library_score
    if total == 0:
        return Verdict.UNCLEAR, 0.0

    cli_share = cli_score / total
    library_share = library_score / total

    if cli_score > library_score * CLI_THRESHOLD and cli_checks >= STRONG_CHECKS:
        verdict, confidence = Verdict.CLI, cli_share
    elif library_score > cli_score * LIBRARY_THRESHOLD and library_checks >= STRONG_CHECKS:
        verdict, confidence = Verdict.LIBRARY, library_share
    elif cli_score > library_score and cli_checks >= SECONDARY_CHECKS:
        verdict, confidence = Verdict.CLI, cli_share * SECONDARY_FACTOR
    elif library_score > cli_score and library_checks >= SECONDARY_CHECKS:
        verdict, confidence = Verdict.LIBRARY, library_share * SECONDARY_FACTOR
    elif cli_score > library_score:
        verdict, confidence = Verdict.CLI, cli_share * WEAK_FACTOR
    elif library_score > cli_score:
        verdict, confidence = Verdict.LIBRARY, library_share * WEAK_FACTOR
    else:
        verdict, confidence = Verdict.UNCLEAR, TIE_CONFIDENCE

    return verdict, _clamp(confidence)


def decide(evidence: Sequence[Evidence], score: Score) -> tuple[Verdict, float]:
    """没有任何证据时始终为 UNCLEAR / 0.0，不受加成影响"""
    if not evidence:
        return Verdict.UNCLEAR, 0.0
    return classify(score.cli, score.library, score.cli_checks, score.library_checks)
