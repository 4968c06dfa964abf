"""
报告器接口 - 每个报告器消费一个 ProjectAnalysis
"""

from typing import Protocol

from go_detector.core.models import ProjectAnalysis


class Reporter(Protocol):
    """报告器协议"""

    def report(self, analysis: ProjectAnalysis) -> None:
        """生成报告"""
        ...
