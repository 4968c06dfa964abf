"""
项目分析入口

analyze() = collect evidence -> score -> classify -> ProjectAnalysis.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from go_detector.core.classifier import decide
from go_detector.core.collector import collect_evidence
from go_detector.core.models import ProjectAnalysis
from go_detector.core.scoring import score_evidence
from go_detector.filters.pathspec_filter import ExclusionFilter

logger = logging.getLogger(__name__)


def analyze(
    root: Union[str, Path],
    *,
    remote_source: Optional[str] = None,
    exclusions: Optional[ExclusionFilter] = None,
) -> ProjectAnalysis:
    """
    分析一个 Go 项目目录

    Args:
        root: 项目根目录
        remote_source: 远程源描述（远程分析时设置）
        exclusions: 目录排除规则

    Returns:
        ProjectAnalysis

    Raises:
        ProjectReadError: 项目目录不存在或无法读取
    """
    root_path = Path(root).resolve()
    logger.info(f"Analyzing {root_path}")

    evidence, indicators = collect_evidence(root_path, exclusions)
    score = score_evidence(evidence, indicators)
    verdict, confidence = decide(evidence, score)

    logger.debug(
        f"cli_score={score.cli:.2f} library_score={score.library:.2f} "
        f"cli_checks={score.cli_checks} library_checks={score.library_checks}"
    )

    return ProjectAnalysis(
        verdict=verdict,
        confidence=confidence,
        evidence=tuple(evidence),
        indicators=indicators,
        cli_score=score.cli,
        library_score=score.library,
        cli_checks=score.cli_checks,
        library_checks=score.library_checks,
        project_path=str(root_path),
        analyzed_at=datetime.now().astimezone().isoformat(timespec="seconds"),
        is_remote=remote_source is not None,
        remote_source=remote_source,
    )
