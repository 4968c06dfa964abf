"""
批量处理 - 从输入文件并行分析多个远程项目

Each input line names one remote project. Analyses run on a thread pool and
results are yielded as they complete, so output order follows completion
order, not input order.
"""

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from go_detector.core.models import ProjectAnalysis
from go_detector.errors import DetectorError
from go_detector.repo.loader import SourceKind, detect_source_kind

logger = logging.getLogger(__name__)


def default_workers() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class InputItem:
    """
    输入文件中的一项

    Attributes:
        source: URL 或模块路径
        kind: 来源类型
        line_number: 在输入文件中的行号（从 1 开始）
    """
    source: str
    kind: SourceKind
    line_number: int


@dataclass
class BatchResult:
    """单项处理结果：analysis 与 error 二者有其一"""
    item: InputItem
    analysis: Optional[ProjectAnalysis] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchSummary:
    successful: int = 0
    errors: int = 0

    @property
    def total(self) -> int:
        return self.successful + self.errors

    def add(self, result: BatchResult) -> None:
        if result.ok:
            self.successful += 1
        else:
            self.errors += 1


def parse_input_lines(lines: Iterable[str]) -> list[InputItem]:
    """
    解析输入内容

    Blank lines and `#` comments are skipped but still counted, so every item
    keeps the line number it had in the file.
    """
    items: list[InputItem] = []
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        items.append(InputItem(source=line, kind=detect_source_kind(line), line_number=line_number))
    return items


def parse_input_file(path: Path) -> list[InputItem]:
    """
    读取输入文件

    Raises:
        DetectorError: 文件无法读取
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise DetectorError(f"Failed to open input file {path}: {e}") from e
    return parse_input_lines(text.splitlines())


def _run_one(item: InputItem, analyze_item: Callable[[InputItem], ProjectAnalysis]) -> BatchResult:
    try:
        return BatchResult(item=item, analysis=analyze_item(item))
    except Exception as e:
        logger.debug(f"Line {item.line_number} ({item.source}) failed: {e}")
        return BatchResult(item=item, error=e)


def run_batch(
    items: list[InputItem],
    analyze_item: Callable[[InputItem], ProjectAnalysis],
    workers: Optional[int] = None,
) -> Iterator[BatchResult]:
    """
    并行处理所有输入项

    Args:
        items: 输入项
        analyze_item: 单项分析函数（在工作线程中调用）
        workers: 工作线程数，默认 CPU 数

    Yields:
        BatchResult，按完成顺序

    Interrupting the consumer (KeyboardInterrupt, or closing the generator)
    cancels every item that has not started yet.
    """
    if not items:
        return

    max_workers = max(1, workers or default_workers())
    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="go-detector")
    futures: list[Future] = [executor.submit(_run_one, item, analyze_item) for item in items]
    logger.info(f"Processing {len(items)} items with {max_workers} workers")

    try:
        for future in as_completed(futures):
            yield future.result()
    except BaseException:
        cancelled = sum(1 for future in futures if future.cancel())
        if cancelled:
            logger.warning(f"Cancelled {cancelled} pending items")
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    executor.shutdown(wait=True)
