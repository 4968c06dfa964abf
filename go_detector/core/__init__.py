"""
Core Layer - 核心层

包含声明提取、结构检查、证据收集、评分和分类。
"""

from go_detector.core.models import (
    Category,
    Side,
    Signal,
    Verdict,
    ExitCode,
    Evidence,
    Indicators,
    ProjectAnalysis,
)
from go_detector.core.declarations import (
    parse_declarations,
    extract_declarations,
    Declarations,
    FunctionDecl,
    TypeDecl,
    ValueDecl,
)
from go_detector.core.structure import inspect_structure, StructuralFacts
from go_detector.core.collector import collect_evidence
from go_detector.core.scoring import score_evidence, Score
from go_detector.core.classifier import classify, decide
from go_detector.core.analyzer import analyze

__all__ = [
    # models
    "Category",
    "Side",
    "Signal",
    "Verdict",
    "ExitCode",
    "Evidence",
    "Indicators",
    "ProjectAnalysis",
    # declarations
    "parse_declarations",
    "extract_declarations",
    "Declarations",
    "FunctionDecl",
    "TypeDecl",
    "ValueDecl",
    # pipeline
    "inspect_structure",
    "StructuralFacts",
    "collect_evidence",
    "score_evidence",
    "Score",
    "classify",
    "decide",
    "analyze",
]
