"""
识别词表定义

Call vocabularies, literal hints and import classification tables used by
the declaration extractor and the evidence collector.
"""

from enum import Enum
from typing import Iterable, Optional


class CallKind(Enum):
    """Recognized call vocabulary inside function bodies."""
    PROCESS_EXIT = "process_exit"
    FLAG_PARSING = "flag_parsing"
    FORMATTED_OUTPUT = "formatted_output"
    STDIN_READING = "stdin_reading"
    FILE_OPEN = "file_open"
    FATAL_LOGGING = "fatal_logging"


class LiteralHint(Enum):
    """Hints found in string literals (case-insensitive substrings)."""
    VERSION = "version"
    HELP = "help"
    SUBCOMMAND = "subcommand"


# 限定调用名 -> 调用类别
CALL_VOCABULARY: dict[str, CallKind] = {
    "os.Exit": CallKind.PROCESS_EXIT,
    "flag.Parse": CallKind.FLAG_PARSING,
    "flag.String": CallKind.FLAG_PARSING,
    "flag.Int": CallKind.FLAG_PARSING,
    "flag.Bool": CallKind.FLAG_PARSING,
    "flag.Duration": CallKind.FLAG_PARSING,
    "fmt.Println": CallKind.FORMATTED_OUTPUT,
    "fmt.Printf": CallKind.FORMATTED_OUTPUT,
    "fmt.Print": CallKind.FORMATTED_OUTPUT,
    "fmt.Fprint": CallKind.FORMATTED_OUTPUT,
    "fmt.Fprintf": CallKind.FORMATTED_OUTPUT,
    "os.Stdin": CallKind.STDIN_READING,
    "bufio.NewScanner": CallKind.STDIN_READING,
    "bufio.NewReader": CallKind.STDIN_READING,
    "os.Open": CallKind.FILE_OPEN,
    "os.Create": CallKind.FILE_OPEN,
    "os.OpenFile": CallKind.FILE_OPEN,
    "ioutil.ReadFile": CallKind.FILE_OPEN,
    "os.ReadFile": CallKind.FILE_OPEN,
    "log.Fatal": CallKind.FATAL_LOGGING,
    "log.Fatalf": CallKind.FATAL_LOGGING,
}

# Selectors that count even when they are not called (os.Stdin is a value)
SELECTOR_VOCABULARY: dict[str, CallKind] = {
    "os.Stdin": CallKind.STDIN_READING,
}

LITERAL_HINTS: dict[LiteralHint, tuple[str, ...]] = {
    LiteralHint.VERSION: ("version", "-v"),
    LiteralHint.HELP: ("help", "-h", "usage"),
    LiteralHint.SUBCOMMAND: ("command", "subcommand"),
}

VERSION_IDENTIFIERS: frozenset[str] = frozenset({"version", "buildversion", "appversion"})


# ============================================================
# 导入分类表
# ============================================================

# CLI 参数解析框架 -> 权重
CLI_FRAMEWORKS: dict[str, float] = {
    "alecthomas/kingpin": 0.92,
    "alecthomas/kingpin/v2": 0.92,
    "docopt/docopt-go": 0.85,
    "flag": 0.75,
    "jessevdk/go-flags": 0.88,
    "spf13/cobra": 0.98,
    "urfave/cli": 0.97,
    "urfave/cli/v2": 0.97,
}

# 两个最常用的框架使用更高的乘数
MAJOR_CLI_FRAMEWORKS: frozenset[str] = frozenset({
    "spf13/cobra",
    "urfave/cli",
    "urfave/cli/v2",
})

TEST_FRAMEWORKS: dict[str, float] = {
    "stretchr/testify": 0.7,
    "onsi/ginkgo": 0.7,
    "onsi/gomega": 0.7,
    "gopkg.in/check.v1": 0.6,
}

WEB_FRAMEWORKS: dict[str, float] = {
    "gin-gonic/gin": 0.8,
    "gorilla/mux": 0.8,
    "labstack/echo": 0.8,
    "go-chi/chi": 0.8,
    "net/http": 0.6,
}

DATABASE_LIBRARIES: tuple[str, ...] = (
    "database/sql",
    "jinzhu/gorm",
    "gorm.io/gorm",
    "jmoiron/sqlx",
)


# 标准库条目只按路径前缀匹配，避免 github.com/x/flag 之类误判
STANDARD_LIBRARY_KEYS: frozenset[str] = frozenset({"flag", "net/http", "database/sql"})


def match_import(path: str, table: Iterable[str]) -> Optional[str]:
    """
    Match an import path against a table of known packages.

    A key matches a run of whole segments anywhere in the path, so
    "spf13/cobra" matches "github.com/spf13/cobra", and "stretchr/testify"
    matches "github.com/stretchr/testify/assert". Major-version suffixes
    ("github.com/urfave/cli/v3") are sub-paths and match the same way.
    Standard-library keys only match the path itself or its sub-packages.
    When several keys match, the longest one wins.
    """
    padded = f"/{path}/"
    best: Optional[str] = None
    for key in table:
        if key in STANDARD_LIBRARY_KEYS:
            matched = path == key or path.startswith(key + "/")
        else:
            matched = f"/{key}/" in padded
        if matched and (best is None or len(key) > len(best)):
            best = key
    return best


def is_internal_import(path: str) -> bool:
    """Import of an internal-only package (Go forbids importing these from outside)."""
    return "/internal/" in path or path.endswith("/internal")


# ============================================================
# 目录与配置文件
# ============================================================

CLI_DIRECTORIES: tuple[str, ...] = ("cmd", "cli", "main", "tools", "bin")
LIBRARY_DIRECTORIES: tuple[str, ...] = ("pkg", "lib", "internal", "api", "examples", "docs")

CLI_MODULE_HINTS: tuple[str, ...] = ("cli", "tool", "cmd")

RELEASE_CONFIG_FILES: tuple[str, ...] = (".goreleaser.yml", ".goreleaser.yaml")
BUILD_CONFIG_FILES: tuple[str, ...] = ("Dockerfile", "docker-compose.yml", "Makefile", "makefile")
APP_CONFIG_FILES: tuple[str, ...] = ("config.yml", "config.yaml", "config.json")

GO_EXTENSION = ".go"
TEST_SUFFIX = "_test.go"
DOC_FILE_NAME = "doc.go"
GO_MOD_FILE = "go.mod"
GENERATE_DIRECTIVE = "go:generate"
