"""Weighted evidence scoring.

Accumulates a CLI score and a library score from the evidence chain, then
adds corroboration bonuses derived from the indicator flags.
"""

from dataclasses import dataclass
from typing import Callable, Iterable

from go_detector.core.models import Evidence, Indicators, Side, Signal


# Per-signal multipliers applied to weight x confidence
MULTIPLIERS: dict[Signal, float] = {
    Signal.MAIN_FUNCTION: 2.5,        # Entry point is the strongest CLI signal
    Signal.MAIN_PACKAGE: 2.0,
    Signal.LIBRARY_PACKAGE: 1.2,
    # CLI behavioral patterns
    Signal.OS_EXIT: 1.3,
    Signal.FLAG_USAGE: 1.3,
    Signal.STDIN_READING: 1.3,
    Signal.FATAL_LOGGING: 1.3,
    Signal.SUBCOMMANDS: 1.3,
    Signal.VERSION_FLAG: 1.3,
    Signal.HELP_TEXT: 1.3,
    Signal.MAIN_WITH_INIT: 1.3,
    # Library behavioral patterns
    Signal.INTERFACES: 1.1,
    Signal.EXPORTED_CONSTANTS: 1.1,
    # Generic patterns
    Signal.OUTPUT_CALLS: 1.0,
    Signal.FILE_OPERATIONS: 1.0,
    Signal.VERSION_CONSTANT: 1.0,
    # Imports
    Signal.CLI_FRAMEWORK: 1.8,
    Signal.MAJOR_CLI_FRAMEWORK: 2.2,  # cobra, urfave
    Signal.WEB_FRAMEWORK: 1.2,
    Signal.TEST_FRAMEWORK: 1.2,
    Signal.DATABASE_LIBRARY: 1.2,
    Signal.INTERNAL_IMPORT: 1.0,
    Signal.PUBLIC_API: 1.5,
    # Structure
    Signal.CMD_DIRECTORY: 1.4,
    Signal.CLI_DIRECTORY: 1.4,
    Signal.LIBRARY_DIRECTORY: 1.1,
    Signal.INTERNAL_DIRECTORY: 1.1,
    Signal.DOC_FILE: 1.3,
    Signal.GO_GENERATE: 1.3,
    # Tests
    Signal.EXAMPLE_TESTS: 1.2,
    Signal.BENCHMARK_TESTS: 1.2,
    # Metadata
    Signal.CLI_MODULE_NAME: 1.0,
    Signal.RELEASE_CONFIG: 1.0,
    Signal.GO_MOD: 0.3,               # Slightly more common in libraries, not decisive
    Signal.BUILD_CONFIG: 0.0,
    Signal.APP_CONFIG: 0.0,
}

# Per-check bonus for each redundancy point
CLI_CHECK_BONUS = 0.4
LIBRARY_CHECK_BONUS = 0.3

# (points, predicate) pairs; predicates read the indicator flags
CLI_CHECKS: list[tuple[int, Callable[[Indicators], bool]]] = [
    (3, lambda ind: ind.has_main_function),
    (2, lambda ind: ind.has_main_package),
    (2, lambda ind: ind.has_flag_usage),
    (3, lambda ind: ind.has_cobra_usage),
    (2, lambda ind: ind.has_os_exit),
    (2, lambda ind: ind.has_cmd_directory),
    (2, lambda ind: ind.has_subcommands),
    (1, lambda ind: ind.has_version_flag),
    (1, lambda ind: ind.has_help_text),
    (1, lambda ind: ind.has_stdin_reading),
]

LIBRARY_CHECKS: list[tuple[int, Callable[[Indicators], bool]]] = [
    (2, lambda ind: ind.has_exported_symbols),
    (2, lambda ind: ind.has_public_api),
    (2, lambda ind: ind.has_interfaces),
    (2, lambda ind: ind.has_doc_go),
    (2, lambda ind: ind.has_example_tests),
    (1, lambda ind: ind.has_benchmark_tests),
    (1, lambda ind: ind.has_internal_packages),
    (1, lambda ind: ind.has_go_generate),
    (1, lambda ind: ind.has_constants),
    (1, lambda ind: ind.has_type_definitions),
    (2, lambda ind: len(ind.library_packages) > 2),
    (2, lambda ind: ind.exported_symbol_count > 10),
    (1, lambda ind: ind.package_depth > 2),
]

# Shape adjustments
HIGH_RATIO_THRESHOLD = 0.8
HIGH_RATIO_BONUS = 2.0
LOW_RATIO_THRESHOLD = 0.2
LOW_RATIO_BONUS = 1.5
SINGLETON_CLI_BONUS = 1.0
MANY_TESTS_BONUS = 1.0


@dataclass
class Score:
    """Two accumulators plus the redundancy check counts."""
    cli: float = 0.0
    library: float = 0.0
    cli_checks: int = 0
    library_checks: int = 0


def evidence_value(evidence: Evidence) -> float:
    """Contribution of one record to its side's accumulator."""
    if evidence.side is Side.NEUTRAL:
        return 0.0
    return evidence.weight * evidence.confidence * MULTIPLIERS[evidence.signal]


def count_checks(indicators: Indicators, checks: list[tuple[int, Callable[[Indicators], bool]]]) -> int:
    return sum(points for points, predicate in checks if predicate(indicators))


def score_evidence(evidence: Iterable[Evidence], indicators: Indicators) -> Score:
    """
    Score an evidence chain.

    Args:
        evidence: Evidence records in collection order
        indicators: Flags gathered alongside the evidence

    Returns:
        Score with both accumulators and redundancy counts
    """
    score = Score()

    for ev in evidence:
        value = evidence_value(ev)
        if ev.side is Side.CLI:
            score.cli += value
        elif ev.side is Side.LIBRARY:
            score.library += value

    score.cli_checks = count_checks(indicators, CLI_CHECKS)
    score.library_checks = count_checks(indicators, LIBRARY_CHECKS)
    score.cli += score.cli_checks * CLI_CHECK_BONUS
    score.library += score.library_checks * LIBRARY_CHECK_BONUS

    ratio = indicators.main_to_library_ratio
    if ratio > HIGH_RATIO_THRESHOLD:
        score.cli += HIGH_RATIO_BONUS
    elif 0 < ratio < LOW_RATIO_THRESHOLD:
        score.library += LOW_RATIO_BONUS

    if indicators.is_singleton_cli:
        score.cli += SINGLETON_CLI_BONUS
    if indicators.has_many_tests:
        score.library += MANY_TESTS_BONUS

    return score
