"""
证据收集器 - 遍历项目并记录每一条证据

Walks the project once, feeding every Go source file through the declaration
extractor and turning what it finds into tagged Evidence plus the redundant
Indicators the scorer uses for corroboration bonuses.
"""

import logging
from pathlib import Path
from typing import Optional

from go_detector.core.declarations import Declarations, FunctionDecl, extract_declarations
from go_detector.core.models import Evidence, Indicators, Signal
from go_detector.core.patterns import (
    CLI_FRAMEWORKS,
    DATABASE_LIBRARIES,
    DOC_FILE_NAME,
    GO_EXTENSION,
    MAJOR_CLI_FRAMEWORKS,
    TEST_FRAMEWORKS,
    TEST_SUFFIX,
    VERSION_IDENTIFIERS,
    WEB_FRAMEWORKS,
    CallKind,
    LiteralHint,
    is_internal_import,
    match_import,
)
from go_detector.core.structure import inspect_structure
from go_detector.filters.pathspec_filter import ExclusionFilter, TreeEntry, iter_tree

logger = logging.getLogger(__name__)


# 调用类别 -> (信号, 描述, 权重, 置信度)
CALL_KIND_EVIDENCE: dict[CallKind, tuple[Signal, str, float, float]] = {
    CallKind.PROCESS_EXIT: (Signal.OS_EXIT, "Uses os.Exit() (CLI pattern)", 0.85, 0.9),
    CallKind.FLAG_PARSING: (Signal.FLAG_USAGE, "Uses flag package (CLI pattern)", 0.9, 0.95),
    CallKind.STDIN_READING: (Signal.STDIN_READING, "Reads from stdin (CLI pattern)", 0.8, 0.85),
    CallKind.FATAL_LOGGING: (Signal.FATAL_LOGGING, "Uses log.Fatal (CLI error handling)", 0.7, 0.8),
    CallKind.FORMATTED_OUTPUT: (Signal.OUTPUT_CALLS, "Uses fmt output functions", 0.4, 0.7),
    CallKind.FILE_OPEN: (Signal.FILE_OPERATIONS, "File operations detected", 0.5, 0.7),
}

# 文字提示 -> (信号, 描述, 权重, 置信度)
LITERAL_HINT_EVIDENCE: dict[LiteralHint, tuple[Signal, str, float, float]] = {
    LiteralHint.VERSION: (Signal.VERSION_FLAG, "Version flag handling detected", 0.8, 0.85),
    LiteralHint.HELP: (Signal.HELP_TEXT, "Help text detected", 0.7, 0.8),
    LiteralHint.SUBCOMMAND: (Signal.SUBCOMMANDS, "Subcommand handling detected", 0.9, 0.9),
}

# 保持证据顺序稳定
_CALL_KIND_ORDER = list(CALL_KIND_EVIDENCE)
_LITERAL_HINT_ORDER = list(LITERAL_HINT_EVIDENCE)


class EvidenceCollector:
    """
    单次分析的证据收集器

    一个实例只服务一次分析，证据和指标归该实例独占。
    """

    def __init__(self, root: Path, exclusions: Optional[ExclusionFilter] = None):
        self.root = root
        self.exclusions = exclusions or ExclusionFilter()
        self.evidence: list[Evidence] = []
        self.indicators = Indicators()

    def add(
        self,
        signal: Signal,
        description: str,
        file: Optional[str],
        weight: float,
        confidence: float,
    ) -> None:
        self.evidence.append(Evidence.create(signal, description, file, weight, confidence))

    def collect(self) -> tuple[list[Evidence], Indicators]:
        """
        执行收集

        Raises:
            ProjectReadError: 根目录不存在或某个目录无法列出
        """
        facts = inspect_structure(self.root, self.exclusions)
        self.evidence.extend(facts.evidence)
        self.indicators.has_go_mod = facts.has_go_mod
        self.indicators.module_name = facts.module_name
        self.indicators.has_config_files = facts.has_config_files
        self.indicators.package_depth = facts.max_depth

        for entry in iter_tree(self.root, self.exclusions):
            if entry.is_dir:
                self._visit_directory(entry)
            elif entry.name.endswith(TEST_SUFFIX):
                self._visit_test_file(entry)
            elif entry.name.endswith(GO_EXTENSION):
                self._visit_source_file(entry)

        self._derive_ratios()
        logger.debug(
            f"Collected {len(self.evidence)} evidence records from "
            f"{self.indicators.total_go_files} source files"
        )
        return self.evidence, self.indicators

    # ============================================================
    # 目录与测试文件
    # ============================================================

    def _visit_directory(self, entry: TreeEntry) -> None:
        if entry.name == "cmd":
            self.indicators.has_cmd_directory = True
            self.add(Signal.CMD_DIRECTORY, "Found cmd/ directory (CLI pattern)", entry.relative, 0.9, 0.95)
        elif entry.name == "internal":
            self.indicators.has_internal_packages = True
            self.add(
                Signal.INTERNAL_DIRECTORY,
                "Found internal/ directory (library pattern)",
                entry.relative, 0.7, 0.85,
            )

    def _visit_test_file(self, entry: TreeEntry) -> None:
        self.indicators.test_files += 1
        decls = extract_declarations(entry.path)
        if decls is None:
            return

        names = [func.name for func in decls.functions]
        if any(name.startswith("Example") for name in names):
            self.indicators.has_example_tests = True
            self.add(
                Signal.EXAMPLE_TESTS,
                "Found example tests (library documentation pattern)",
                entry.relative, 0.85, 0.9,
            )
        if any(name.startswith("Benchmark") for name in names):
            self.indicators.has_benchmark_tests = True
            self.add(
                Signal.BENCHMARK_TESTS,
                "Found benchmark tests (library pattern)",
                entry.relative, 0.8, 0.85,
            )

    # ============================================================
    # 源文件
    # ============================================================

    def _visit_source_file(self, entry: TreeEntry) -> None:
        self.indicators.total_go_files += 1
        decls = extract_declarations(entry.path)
        if decls is None:
            return

        rel = entry.relative
        if entry.name == DOC_FILE_NAME:
            self.indicators.has_doc_go = True
            self.add(Signal.DOC_FILE, "Found doc.go file", rel, 0.8, 0.85)

        if decls.directives:
            self.indicators.has_go_generate = True
            self.add(Signal.GO_GENERATE, "Found go:generate directive", rel, 0.6, 0.8)

        if decls.package == "main":
            self.indicators.has_main_package = True
            self.add(Signal.MAIN_PACKAGE, "Found main package", rel, 0.9, 0.95)
            self._analyze_entry_point(decls, rel)
        else:
            self.indicators.has_library_packages = True
            if decls.package not in self.indicators.library_packages:
                self.indicators.library_packages.append(decls.package)
            self.add(
                Signal.LIBRARY_PACKAGE,
                f"Found library package: {decls.package}",
                rel, 0.7, 0.85,
            )
            self._analyze_library(decls, rel)

        self._analyze_imports(decls, rel)

    def _analyze_entry_point(self, decls: Declarations, rel: str) -> None:
        main = decls.find_function("main")
        has_init = decls.find_function("init") is not None
        if has_init:
            self.indicators.has_main_init = True

        for func in decls.functions:
            if func is main:
                self.indicators.has_main_function = True
                self.indicators.main_files.append(rel)
                self.add(Signal.MAIN_FUNCTION, "Found main() function", rel, 1.0, 0.99)
                if func.has_body:
                    self._analyze_main_body(func, rel)

            if func.has_body:
                self._analyze_calls(func, rel)

        for value in decls.values:
            if value.name.lower() in VERSION_IDENTIFIERS:
                self.add(Signal.VERSION_CONSTANT, "Found version constant/variable", rel, 0.7, 0.8)

        if main is not None and has_init:
            self.add(
                Signal.MAIN_WITH_INIT,
                "Main package with init function (CLI setup pattern)",
                rel, 0.8, 0.85,
            )

    def _analyze_main_body(self, func: FunctionDecl, rel: str) -> None:
        hints = set(func.literal_hints())
        if func.has_switch:
            # switch 语句通常表示子命令分发
            hints.add(LiteralHint.SUBCOMMAND)

        for hint in _LITERAL_HINT_ORDER:
            if hint not in hints:
                continue
            signal, description, weight, confidence = LITERAL_HINT_EVIDENCE[hint]
            self.add(signal, description, rel, weight, confidence)

        if LiteralHint.VERSION in hints:
            self.indicators.has_version_flag = True
        if LiteralHint.HELP in hints:
            self.indicators.has_help_text = True
        if LiteralHint.SUBCOMMAND in hints:
            self.indicators.has_subcommands = True

    def _analyze_calls(self, func: FunctionDecl, rel: str) -> None:
        kinds = func.call_kinds()
        for kind in _CALL_KIND_ORDER:
            if kind not in kinds:
                continue
            signal, description, weight, confidence = CALL_KIND_EVIDENCE[kind]
            self.add(signal, description, rel, weight, confidence)

        if CallKind.PROCESS_EXIT in kinds:
            self.indicators.has_os_exit = True
        if CallKind.FLAG_PARSING in kinds:
            self.indicators.has_flag_usage = True
        if CallKind.STDIN_READING in kinds:
            self.indicators.has_stdin_reading = True

    def _analyze_library(self, decls: Declarations, rel: str) -> None:
        package = decls.package
        exported_funcs = sum(1 for func in decls.functions if func.exported)
        exported_types = [t for t in decls.types if t.exported]
        interfaces = sum(1 for t in exported_types if t.is_interface)
        exported_consts = sum(1 for v in decls.values if v.exported and v.kind == "const")
        exported_vars = sum(1 for v in decls.values if v.exported and v.kind == "var")

        total = exported_funcs + len(exported_types) + exported_consts + exported_vars
        self.indicators.exported_symbol_count += total

        if exported_types:
            self.indicators.has_type_definitions = True
        if interfaces:
            self.indicators.has_interfaces = True
        if exported_consts:
            self.indicators.has_constants = True

        if total > 0:
            self.indicators.has_exported_symbols = True
            self.indicators.has_public_api = True
            self.add(
                Signal.PUBLIC_API,
                f"Package {package} has {total} exported symbols",
                rel,
                0.9 if total > 5 else 0.8,
                min(0.95, 0.7 + total / 20.0),
            )

        if interfaces > 0:
            self.add(
                Signal.INTERFACES,
                f"Package {package} defines {interfaces} interface(s)",
                rel, 0.8, min(0.95, 0.8 + interfaces / 10.0),
            )

        if exported_consts > 0:
            self.add(
                Signal.EXPORTED_CONSTANTS,
                f"Package {package} has {exported_consts} exported constants",
                rel, 0.7, 0.8,
            )

    # ============================================================
    # 导入
    # ============================================================

    def _analyze_imports(self, decls: Declarations, rel: str) -> None:
        for path in decls.imports:
            key = match_import(path, CLI_FRAMEWORKS)
            if key is not None:
                if "cobra" in key:
                    self.indicators.has_cobra_usage = True
                signal = Signal.MAJOR_CLI_FRAMEWORK if key in MAJOR_CLI_FRAMEWORKS else Signal.CLI_FRAMEWORK
                confidence = 0.8 if key == "flag" else 0.95
                self.add(signal, f"Imports CLI framework: {path}", rel, CLI_FRAMEWORKS[key], confidence)

            if is_internal_import(path):
                self.add(Signal.INTERNAL_IMPORT, "Uses internal packages (library pattern)", rel, 0.7, 0.8)

            key = match_import(path, TEST_FRAMEWORKS)
            if key is not None:
                self.add(Signal.TEST_FRAMEWORK, f"Imports testing framework: {path}", rel, TEST_FRAMEWORKS[key], 0.8)

            key = match_import(path, WEB_FRAMEWORKS)
            if key is not None:
                self.add(Signal.WEB_FRAMEWORK, f"Imports web framework: {path}", rel, WEB_FRAMEWORKS[key], 0.8)

            if match_import(path, DATABASE_LIBRARIES) is not None:
                self.add(Signal.DATABASE_LIBRARY, f"Imports database library: {path}", rel, 0.6, 0.7)

    def _derive_ratios(self) -> None:
        total = self.indicators.total_go_files
        if total == 0:
            return
        entry_files = len(self.indicators.main_files)
        other_files = total - entry_files
        if other_files > 0:
            self.indicators.main_to_library_ratio = entry_files / other_files
        else:
            self.indicators.main_to_library_ratio = float(entry_files)


def collect_evidence(
    root: Path,
    exclusions: Optional[ExclusionFilter] = None,
) -> tuple[list[Evidence], Indicators]:
    """收集项目证据，返回 (证据列表, 指标)"""
    return EvidenceCollector(root, exclusions).collect()
