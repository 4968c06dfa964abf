"""
Reporters Layer - 报告层

把 ProjectAnalysis 输出为 Rich 终端摘要或 JSON 记录。
"""

from go_detector.reporters.base import Reporter
from go_detector.reporters.rich_reporter import RichReporter
from go_detector.reporters.json_reporter import JsonReporter

__all__ = [
    "Reporter",
    "RichReporter",
    "JsonReporter",
]
