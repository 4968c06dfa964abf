"""
CLI 入口模块 - 使用 Typer 构建命令行界面

检测流程：
1. 确定来源（本地目录 / 远程归档 / Go 模块代理 / Git 仓库 / 批量输入文件）
2. 下载（远程来源）
3. 收集证据、评分、分类
4. 生成报告，以退出码表示判定
"""

import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from go_detector.batch import BatchSummary, InputItem, default_workers, parse_input_file, run_batch
from go_detector.core.models import ExitCode, ProjectAnalysis
from go_detector.errors import DetectorError
from go_detector.filters.pathspec_filter import DEFAULT_EXCLUDE_PATTERNS, ExclusionFilter
from go_detector.repo.loader import DEFAULT_PROXY_URL, FetchConfig, SourceKind, analyze_source
from go_detector.reporters import JsonReporter, RichReporter

# 创建 Typer 应用实例
app = typer.Typer(
    name="go-detector",
    help="go-detector: classify a Go project as a CLI tool or a library.",
    add_completion=False,
)

# 人类可读输出走 stderr，stdout 只留给 JSON
console = Console(stderr=True)

USAGE = """\
Usage: go-detector detect [OPTIONS] --local <path> | --remote <url> | --goproxy <module> | --git <url> | --input <file>

Examples:
  go-detector detect --local .
  go-detector detect --remote https://github.com/user/repo/archive/main.zip
  go-detector detect --goproxy github.com/spf13/cobra
  go-detector detect --git https://github.com/user/repo.git
  go-detector detect --input urls.txt --workers 4

Exit codes:
  0: CLI application detected
  1: Library/module detected
  2: Unclear project type
  3: Error occurred
"""


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """在 go_detector 日志器上安装 RichHandler（stderr）"""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logger = logging.getLogger("go_detector")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def _select_source(
    local: Optional[str],
    remote: Optional[str],
    goproxy: Optional[str],
    git: Optional[str],
) -> Optional[tuple[str, SourceKind]]:
    """唯一给出的来源；未给出或给出多个时返回 None"""
    selected = [
        (value, kind)
        for value, kind in (
            (local, SourceKind.LOCAL),
            (remote, SourceKind.ARCHIVE),
            (goproxy, SourceKind.GO_PROXY),
            (git, SourceKind.GIT),
        )
        if value is not None
    ]
    if len(selected) != 1:
        return None
    return selected[0]


def _error(message: str, quiet: bool) -> None:
    if not quiet:
        console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)


@app.command()
def detect(
    local: Optional[str] = typer.Option(
        None,
        "--local",
        help="Analyze local project path",
    ),
    remote: Optional[str] = typer.Option(
        None,
        "--remote",
        help="Download and analyze remote archive (zip/tar.gz)",
    ),
    goproxy: Optional[str] = typer.Option(
        None,
        "--goproxy",
        help="Download and analyze Go module from proxy",
    ),
    git: Optional[str] = typer.Option(
        None,
        "--git",
        help="Shallow-clone and analyze a Git repository",
    ),
    input_file: Optional[Path] = typer.Option(
        None,
        "--input",
        help="File containing list of URLs/modules to process (one per line)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Quiet mode - only exit codes",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose output (ignored in JSON mode)",
    ),
    workers: int = typer.Option(
        default_workers(),
        "--workers",
        min=1,
        help="Number of parallel workers for --input",
    ),
    proxy_url: str = typer.Option(
        DEFAULT_PROXY_URL,
        "--proxy-url",
        help="Go proxy URL",
    ),
    timeout: int = typer.Option(
        60,
        "--timeout",
        min=1,
        help="Network timeout in seconds",
    ),
    retries: int = typer.Option(
        3,
        "--retries",
        min=0,
        help="Retries after a failed download",
    ),
    exclude: Optional[List[str]] = typer.Option(
        None,
        "--exclude",
        help="Extra gitignore-style directory pattern to skip (repeatable)",
    ),
) -> None:
    """
    Classify a Go project as a CLI tool or a library.

    Examples:
        go-detector detect --local .
        go-detector detect --goproxy github.com/spf13/cobra --json
        go-detector detect --input modules.txt --workers 8
    """
    configure_logging(verbose=verbose, quiet=quiet)

    config = FetchConfig(proxy_url=proxy_url, timeout=timeout, max_retries=retries)
    exclusions = ExclusionFilter([*DEFAULT_EXCLUDE_PATTERNS, *(exclude or [])])

    if input_file is not None:
        if any(option is not None for option in (local, remote, goproxy, git)):
            _usage_error(quiet)
        _run_batch_mode(input_file, config, exclusions, workers, json_output, quiet, verbose)
        raise typer.Exit(0)

    source = _select_source(local, remote, goproxy, git)
    if source is None:
        _usage_error(quiet)
    target, kind = source
    try:
        analysis = analyze_source(target, kind, config, exclusions)
    except DetectorError as e:
        _error(f"Error analyzing project: {e}", quiet)
        raise typer.Exit(int(ExitCode.ERROR))

    if json_output:
        JsonReporter().report(analysis)
        raise typer.Exit(0)  # JSON 模式始终返回 0

    if not quiet:
        RichReporter(console, verbose=verbose).report(analysis)
    raise typer.Exit(int(analysis.exit_code))


def _usage_error(quiet: bool) -> NoReturn:
    if not quiet:
        console.print(USAGE, markup=False, highlight=False)
    raise typer.Exit(int(ExitCode.ERROR))


def _run_batch_mode(
    input_file: Path,
    config: FetchConfig,
    exclusions: ExclusionFilter,
    workers: int,
    json_output: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """批量模式：逐项输出结果，最后输出汇总"""
    try:
        items = parse_input_file(input_file)
    except DetectorError as e:
        _error(f"Error processing input file: {e}", quiet)
        raise typer.Exit(int(ExitCode.ERROR))

    if not items:
        if not quiet:
            console.print("No valid items found in input file")
        return

    def analyze_item(item: InputItem) -> ProjectAnalysis:
        return analyze_source(item.source, item.kind, config, exclusions)

    summary = BatchSummary()
    reporter = RichReporter(console, verbose=verbose)

    try:
        for result in run_batch(items, analyze_item, workers):
            summary.add(result)
            item = result.item
            if result.error is not None:
                _error(f"Error processing line {item.line_number} ({item.source}): {result.error}", quiet)
                continue
            if json_output:
                JsonReporter().report(result.analysis)
            elif not quiet:
                console.print(f"\n=== Line {item.line_number}: {item.source} ===", markup=False)
                reporter.report(result.analysis)
    except KeyboardInterrupt:
        _error(f"Interrupted after {summary.total} of {len(items)} items, pending items cancelled", quiet)
        raise typer.Exit(int(ExitCode.ERROR))

    if not quiet and not json_output:
        console.print("\n=== SUMMARY ===", markup=False)
        console.print(f"Processed: {summary.successful} successful, {summary.errors} errors")


@app.command()
def version() -> None:
    """Show the version of go-detector."""
    from go_detector import __version__
    console.print(f"[bold]go-detector[/bold] v{__version__}")


if __name__ == "__main__":
    app()
