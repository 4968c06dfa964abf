"""
数据模型定义

Evidence, indicator flags and the final ProjectAnalysis record.
"""

import json
from dataclasses import dataclass, field, asdict
from enum import Enum, IntEnum
from typing import Any, Optional


class Category(Enum):
    """Evidence category (closed set)."""
    DECLARATION = "declaration"
    PACKAGE_KIND = "package-kind"
    BEHAVIORAL_PATTERN = "behavioral-pattern"
    IMPORT = "import"
    PUBLIC_SURFACE = "public-surface"
    STRUCTURAL = "structural"
    TEST = "test"
    METADATA = "metadata"


class Side(Enum):
    """Which accumulator a piece of evidence feeds."""
    CLI = "cli"
    LIBRARY = "library"
    NEUTRAL = "neutral"


class Signal(Enum):
    """Detector that produced a piece of evidence."""
    MAIN_FUNCTION = "main_function"
    MAIN_PACKAGE = "main_package"
    LIBRARY_PACKAGE = "library_package"
    # behavioral patterns
    OS_EXIT = "os_exit"
    FLAG_USAGE = "flag_usage"
    STDIN_READING = "stdin_reading"
    FATAL_LOGGING = "fatal_logging"
    SUBCOMMANDS = "subcommands"
    VERSION_FLAG = "version_flag"
    HELP_TEXT = "help_text"
    MAIN_WITH_INIT = "main_with_init"
    INTERFACES = "interfaces"
    EXPORTED_CONSTANTS = "exported_constants"
    OUTPUT_CALLS = "output_calls"
    FILE_OPERATIONS = "file_operations"
    VERSION_CONSTANT = "version_constant"
    # imports
    CLI_FRAMEWORK = "cli_framework"
    MAJOR_CLI_FRAMEWORK = "major_cli_framework"
    WEB_FRAMEWORK = "web_framework"
    TEST_FRAMEWORK = "test_framework"
    DATABASE_LIBRARY = "database_library"
    INTERNAL_IMPORT = "internal_import"
    # public surface
    PUBLIC_API = "public_api"
    # structure
    CMD_DIRECTORY = "cmd_directory"
    CLI_DIRECTORY = "cli_directory"
    LIBRARY_DIRECTORY = "library_directory"
    INTERNAL_DIRECTORY = "internal_directory"
    DOC_FILE = "doc_file"
    # tests
    EXAMPLE_TESTS = "example_tests"
    BENCHMARK_TESTS = "benchmark_tests"
    # metadata
    GO_MOD = "go_mod"
    CLI_MODULE_NAME = "cli_module_name"
    GO_GENERATE = "go_generate"
    RELEASE_CONFIG = "release_config"
    BUILD_CONFIG = "build_config"
    APP_CONFIG = "app_config"


# 每种信号的 (类别, 倾向) 在创建时确定，评分阶段不再解析描述文本
SIGNAL_TAGS: dict[Signal, tuple[Category, Side]] = {
    Signal.MAIN_FUNCTION: (Category.DECLARATION, Side.CLI),
    Signal.MAIN_PACKAGE: (Category.PACKAGE_KIND, Side.CLI),
    Signal.LIBRARY_PACKAGE: (Category.PACKAGE_KIND, Side.LIBRARY),
    Signal.OS_EXIT: (Category.BEHAVIORAL_PATTERN, Side.CLI),
    Signal.FLAG_USAGE: (Category.BEHAVIORAL_PATTERN, Side.CLI),
    Signal.STDIN_READING: (Category.BEHAVIORAL_PATTERN, Side.CLI),
    Signal.FATAL_LOGGING: (Category.BEHAVIORAL_PATTERN, Side.CLI),
    Signal.SUBCOMMANDS: (Category.BEHAVIORAL_PATTERN, Side.CLI),
    Signal.VERSION_FLAG: (Category.BEHAVIORAL_PATTERN, Side.CLI),
    Signal.HELP_TEXT: (Category.BEHAVIORAL_PATTERN, Side.CLI),
    Signal.MAIN_WITH_INIT: (Category.BEHAVIORAL_PATTERN, Side.CLI),
    Signal.INTERFACES: (Category.BEHAVIORAL_PATTERN, Side.LIBRARY),
    Signal.EXPORTED_CONSTANTS: (Category.BEHAVIORAL_PATTERN, Side.LIBRARY),
    Signal.OUTPUT_CALLS: (Category.BEHAVIORAL_PATTERN, Side.LIBRARY),
    Signal.FILE_OPERATIONS: (Category.BEHAVIORAL_PATTERN, Side.LIBRARY),
    Signal.VERSION_CONSTANT: (Category.BEHAVIORAL_PATTERN, Side.LIBRARY),
    Signal.CLI_FRAMEWORK: (Category.IMPORT, Side.CLI),
    Signal.MAJOR_CLI_FRAMEWORK: (Category.IMPORT, Side.CLI),
    Signal.WEB_FRAMEWORK: (Category.IMPORT, Side.LIBRARY),
    Signal.TEST_FRAMEWORK: (Category.IMPORT, Side.LIBRARY),
    Signal.DATABASE_LIBRARY: (Category.IMPORT, Side.LIBRARY),
    Signal.INTERNAL_IMPORT: (Category.IMPORT, Side.LIBRARY),
    Signal.PUBLIC_API: (Category.PUBLIC_SURFACE, Side.LIBRARY),
    Signal.CMD_DIRECTORY: (Category.STRUCTURAL, Side.CLI),
    Signal.CLI_DIRECTORY: (Category.STRUCTURAL, Side.CLI),
    Signal.LIBRARY_DIRECTORY: (Category.STRUCTURAL, Side.LIBRARY),
    Signal.INTERNAL_DIRECTORY: (Category.STRUCTURAL, Side.LIBRARY),
    Signal.DOC_FILE: (Category.STRUCTURAL, Side.LIBRARY),
    Signal.EXAMPLE_TESTS: (Category.TEST, Side.LIBRARY),
    Signal.BENCHMARK_TESTS: (Category.TEST, Side.LIBRARY),
    Signal.GO_MOD: (Category.METADATA, Side.LIBRARY),
    Signal.CLI_MODULE_NAME: (Category.METADATA, Side.CLI),
    Signal.GO_GENERATE: (Category.DECLARATION, Side.LIBRARY),
    Signal.RELEASE_CONFIG: (Category.METADATA, Side.CLI),
    Signal.BUILD_CONFIG: (Category.METADATA, Side.NEUTRAL),
    Signal.APP_CONFIG: (Category.METADATA, Side.NEUTRAL),
}


class Verdict(Enum):
    """Final classification."""
    UNCLEAR = 0
    CLI = 1
    LIBRARY = 2

    def __str__(self) -> str:
        return self.name.lower()


class ExitCode(IntEnum):
    """Process exit codes used by the command line."""
    CLI = 0
    LIBRARY = 1
    UNCLEAR = 2
    ERROR = 3

    @classmethod
    def for_verdict(cls, verdict: Verdict) -> "ExitCode":
        if verdict is Verdict.CLI:
            return cls.CLI
        if verdict is Verdict.LIBRARY:
            return cls.LIBRARY
        return cls.UNCLEAR


@dataclass(frozen=True)
class Evidence:
    """
    一条证据

    Attributes:
        signal: 产生该证据的检测器
        category: 证据类别
        side: 支持 CLI 还是 Library
        description: 可读描述
        file: 相对于项目根目录的文件路径
        weight: 该类信号的区分度 [0, 1]
        confidence: 检测器识别正确的把握 [0, 1]
    """
    signal: Signal
    category: Category
    side: Side
    description: str
    file: Optional[str]
    weight: float
    confidence: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.weight <= 1.0:
            raise ValueError(f"weight out of range: {self.weight}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")

    @classmethod
    def create(
        cls,
        signal: Signal,
        description: str,
        file: Optional[str],
        weight: float,
        confidence: float,
    ) -> "Evidence":
        """Build evidence with the category and side registered for its signal."""
        category, side = SIGNAL_TAGS[signal]
        return cls(
            signal=signal,
            category=category,
            side=side,
            description=description,
            file=file,
            weight=weight,
            confidence=confidence,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.category.value,
            "side": self.side.value,
            "signal": self.signal.value,
            "description": self.description,
            "weight": self.weight,
            "confidence": self.confidence,
        }
        if self.file:
            data["file"] = self.file
        return data


@dataclass
class Indicators:
    """
    指标标志

    Redundant boolean/numeric facts derived while collecting evidence, so the
    scorer can award corroboration bonuses without re-reading descriptions.
    """
    # Core indicators
    has_main_function: bool = False
    has_main_package: bool = False
    has_library_packages: bool = False
    has_exported_symbols: bool = False

    # File analysis
    main_files: list[str] = field(default_factory=list)
    library_packages: list[str] = field(default_factory=list)
    total_go_files: int = 0
    test_files: int = 0

    # Structure / metadata
    has_cmd_directory: bool = False
    has_internal_packages: bool = False
    has_go_mod: bool = False
    module_name: Optional[str] = None
    has_config_files: bool = False

    # CLI-specific indicators
    has_flag_usage: bool = False
    has_cobra_usage: bool = False
    has_os_exit: bool = False
    has_main_init: bool = False
    has_version_flag: bool = False
    has_help_text: bool = False
    has_stdin_reading: bool = False
    has_subcommands: bool = False

    # Library-specific indicators
    has_doc_go: bool = False
    has_example_tests: bool = False
    has_public_api: bool = False
    has_interfaces: bool = False
    has_benchmark_tests: bool = False
    has_go_generate: bool = False
    has_constants: bool = False
    has_type_definitions: bool = False

    # Advanced indicators
    main_to_library_ratio: float = 0.0
    exported_symbol_count: int = 0
    package_depth: int = 0

    @property
    def is_singleton_cli(self) -> bool:
        """Exactly one source file, and it holds the entry point."""
        return self.total_go_files == 1 and len(self.main_files) == 1

    @property
    def has_many_tests(self) -> bool:
        return self.test_files > 3

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["is_singleton_cli"] = self.is_singleton_cli
        data["has_many_tests"] = self.has_many_tests
        return data


@dataclass(frozen=True)
class ProjectAnalysis:
    """
    项目分析结果

    Attributes:
        verdict: 最终判定
        confidence: 置信度
        evidence: 证据链（按遍历顺序）
        indicators: 指标标志
        cli_score / library_score: 两个累加器的最终值
        cli_checks / library_checks: 冗余检查计数
        project_path: 被分析目录的绝对路径
        analyzed_at: ISO-8601 时间戳
        is_remote: 是否来自远程源
        remote_source: 远程源描述
    """
    verdict: Verdict
    confidence: float
    evidence: tuple[Evidence, ...]
    indicators: Indicators
    cli_score: float
    library_score: float
    cli_checks: int
    library_checks: int
    project_path: str
    analyzed_at: str
    is_remote: bool = False
    remote_source: Optional[str] = None

    @property
    def exit_code(self) -> ExitCode:
        return ExitCode.for_verdict(self.verdict)

    def to_dict(self) -> dict[str, Any]:
        """序列化为结构化记录"""
        data: dict[str, Any] = {
            "type": self.verdict.value,
            "type_string": str(self.verdict),
            "confidence": self.confidence,
            "exit_code": int(self.exit_code),
        }
        data.update(self.indicators.to_dict())
        data["cli_score"] = self.cli_score
        data["library_score"] = self.library_score
        data["cli_checks"] = self.cli_checks
        data["library_checks"] = self.library_checks
        data["evidence"] = [ev.to_dict() for ev in self.evidence]
        data["project_path"] = self.project_path
        data["analyzed_at"] = self.analyzed_at
        if self.remote_source:
            data["remote_source"] = self.remote_source
        data["is_remote"] = self.is_remote
        return data

    def to_json(self) -> str:
        """序列化为 JSON 字符串"""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)
