"""
JSON 报告器 - 将分类结果输出为 JSON 记录

The record is ProjectAnalysis.to_dict(), flattened indicators included.
"""

import json
import sys
from typing import TextIO

from go_detector.core.models import ProjectAnalysis


class JsonReporter:
    """JSON 报告器"""

    def __init__(self, output: TextIO | None = None):
        self.output = output or sys.stdout

    def report(self, analysis: ProjectAnalysis) -> None:
        """生成 JSON 格式报告"""
        json_str = json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False)
        print(json_str, file=self.output)
