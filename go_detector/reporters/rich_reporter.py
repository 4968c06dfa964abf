"""
Rich 终端报告器 - 使用 Rich 库输出彩色终端格式

分类摘要：各类指标得分、判定面板、关键指标，verbose 模式下列出证据。
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from go_detector.core.models import ProjectAnalysis, Verdict


# 判定 -> (图标, 标题, 颜色)
VERDICT_STYLES: dict[Verdict, tuple[str, str, str]] = {
    Verdict.CLI: ("🔧", "CLI TOOL", "green"),
    Verdict.LIBRARY: ("📚", "LIBRARY", "blue"),
    Verdict.UNCLEAR: ("❓", "UNCLEAR", "yellow"),
}

# verbose 模式下最多显示的证据条数
MAX_EVIDENCE_SHOWN = 10


def category_scores(analysis: ProjectAnalysis) -> dict[str, int]:
    """
    展示用的分类积分（与分类器的评分无关）

    Returns:
        main / directory / executable / library 四项积分
    """
    ind = analysis.indicators

    main_score = len(ind.main_files) * 5 if ind.has_main_function else 0

    dir_score = 0
    if ind.has_cmd_directory:
        dir_score += 4
    if ind.has_internal_packages:
        dir_score += 2
    if ind.has_library_packages:
        dir_score += 1

    exec_score = 0
    if ind.has_flag_usage:
        exec_score += 3
    if ind.has_cobra_usage:
        exec_score += 4
    if ind.has_os_exit:
        exec_score += 2
    if ind.has_subcommands:
        exec_score += 3
    if ind.has_version_flag:
        exec_score += 1
    if ind.has_stdin_reading:
        exec_score += 2

    lib_score = 0
    if ind.has_exported_symbols:
        lib_score += 3
    if ind.has_interfaces:
        lib_score += 2
    if ind.has_example_tests:
        lib_score += 2
    if ind.has_doc_go:
        lib_score += 2
    if ind.exported_symbol_count > 5:
        lib_score += 2

    return {
        "main": main_score,
        "directory": dir_score,
        "executable": exec_score,
        "library": lib_score,
    }


def key_indicators(analysis: ProjectAnalysis) -> list[str]:
    """判定对应的关键指标"""
    ind = analysis.indicators
    found: list[str] = []

    if analysis.verdict is Verdict.CLI:
        if ind.has_main_function:
            found.append("main()")
        if ind.has_cobra_usage:
            found.append("Cobra")
        if ind.has_flag_usage:
            found.append("flags")
        if ind.has_subcommands:
            found.append("subcommands")
        if ind.has_cmd_directory:
            found.append("cmd/")
    elif analysis.verdict is Verdict.LIBRARY:
        if ind.has_exported_symbols:
            found.append(f"{ind.exported_symbol_count} exports")
        if ind.has_interfaces:
            found.append("interfaces")
        if ind.has_example_tests:
            found.append("examples")
        if ind.has_doc_go:
            found.append("doc.go")
        if len(ind.library_packages) > 1:
            found.append(f"{len(ind.library_packages)} packages")

    return found


class RichReporter:
    """Rich 终端报告器"""

    def __init__(self, console: Console | None = None, verbose: bool = False):
        self.console = console or Console(stderr=True)
        self.verbose = verbose

    def report(self, analysis: ProjectAnalysis) -> None:
        """生成 Rich 格式报告"""
        self.console.print()
        self._print_header(analysis)
        self._print_breakdown(analysis)
        self._print_verdict(analysis)
        if self.verbose:
            self._print_evidence(analysis)

    def _print_header(self, analysis: ProjectAnalysis) -> None:
        if analysis.is_remote:
            self.console.print("=== REMOTE ANALYSIS RESULTS ===", style="bold cyan")
            self.console.print(f"Source: {escape(analysis.remote_source or '')}", style="dim")
        else:
            self.console.print("=== ANALYSIS RESULTS ===", style="bold cyan")

    def _print_breakdown(self, analysis: ProjectAnalysis) -> None:
        """打印分类积分"""
        scores = category_scores(analysis)
        ind = analysis.indicators

        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("指标", style="dim")
        table.add_column("值", justify="right")

        table.add_row(
            "Main package indicators",
            f"{len(ind.main_files)} (×5 = {scores['main']} points)",
        )
        table.add_row("Directory structure score", f"{scores['directory']} points")
        table.add_row("Executable indicators", f"{scores['executable']} points")
        table.add_row("Library indicators", f"{scores['library']} points")
        table.add_row("Exported symbols", str(ind.exported_symbol_count))
        table.add_row("Package depth", str(ind.package_depth))
        if ind.main_to_library_ratio > 0:
            table.add_row("Main/Library ratio", f"{ind.main_to_library_ratio:.2f}")
        table.add_row("[bold]Total score[/bold]", f"[bold]{sum(scores.values())} points[/bold]")

        self.console.print(table)

    def _print_verdict(self, analysis: ProjectAnalysis) -> None:
        """打印判定面板"""
        icon, title, color = VERDICT_STYLES[analysis.verdict]

        content = Text()
        content.append(f"{icon} RESULT: ", style=color)
        content.append(title, style=f"bold {color}")
        content.append(" ==> ", style="dim")
        content.append(f"{analysis.project_path}\n", style="cyan")
        content.append("Confidence: ", style="dim")
        content.append(f"{analysis.confidence * 100:.1f}%", style=f"bold {color}")

        indicators = key_indicators(analysis)
        if indicators:
            content.append("\nKey indicators: ", style="dim")
            content.append(", ".join(indicators))

        if analysis.verdict is Verdict.UNCLEAR:
            content.append(
                "\nCould be either a library or CLI tool. Manual inspection recommended.",
                style="red",
            )
            ind = analysis.indicators
            if ind.has_main_function and ind.has_exported_symbols:
                content.append("\nFound both main() function and exported symbols", style="dim")

        self.console.print(Panel(content, border_style=color))

    def _print_evidence(self, analysis: ProjectAnalysis) -> None:
        """打印证据（最多 10 条）"""
        self.console.print()
        self.console.print("[bold]Detailed Evidence:[/bold]")

        for ev in analysis.evidence[:MAX_EVIDENCE_SHOWN]:
            line = Text(style="dim")
            line.append(f"[{ev.category.value}] ")
            line.append(ev.description)
            line.append(f" ({ev.weight:.2f}/{ev.confidence:.2f})")
            self.console.print(line)

        remaining = len(analysis.evidence) - MAX_EVIDENCE_SHOWN
        if remaining > 0:
            self.console.print(f"... and {remaining} more pieces of evidence", style="dim")
