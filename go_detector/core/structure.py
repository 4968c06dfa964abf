"""
结构检查器 - 检查项目目录结构、元数据和配置文件

Reports the top-level directories that suggest a CLI or a library, the go.mod
module name, release/build/config files, and the maximum directory depth.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from go_detector.core.models import Evidence, Signal
from go_detector.core.patterns import (
    APP_CONFIG_FILES,
    BUILD_CONFIG_FILES,
    CLI_DIRECTORIES,
    CLI_MODULE_HINTS,
    GO_MOD_FILE,
    LIBRARY_DIRECTORIES,
    RELEASE_CONFIG_FILES,
)
from go_detector.errors import ProjectReadError
from go_detector.filters.pathspec_filter import ExclusionFilter, iter_tree

logger = logging.getLogger(__name__)

MODULE_PATTERN = re.compile(r'^\s*module\s+"?([^\s"]+)"?', re.MULTILINE)


@dataclass
class StructuralFacts:
    """
    结构检查结果

    Attributes:
        evidence: 结构/元数据证据（按检查顺序）
        cli_directories: 存在的 CLI 倾向目录
        library_directories: 存在的库倾向目录
        has_go_mod: 是否存在 go.mod
        module_name: go.mod 声明的模块名
        config_files: 存在的发布/构建/配置文件
        max_depth: 最大目录深度（根目录计为 1）
    """
    evidence: list[Evidence] = field(default_factory=list)
    cli_directories: list[str] = field(default_factory=list)
    library_directories: list[str] = field(default_factory=list)
    has_go_mod: bool = False
    module_name: Optional[str] = None
    config_files: list[str] = field(default_factory=list)
    max_depth: int = 1

    @property
    def has_config_files(self) -> bool:
        return bool(self.config_files)


def _check_root(root: Path) -> None:
    if not root.exists():
        raise ProjectReadError(f"Path does not exist: {root}")
    if not root.is_dir():
        raise ProjectReadError(f"Path is not a directory: {root}")


def parse_module_name(content: str) -> Optional[str]:
    """从 go.mod 提取模块名: module github.com/user/repo"""
    match = MODULE_PATTERN.search(content)
    return match.group(1) if match else None


def _inspect_go_mod(root: Path, facts: StructuralFacts) -> None:
    go_mod = root / GO_MOD_FILE
    if not go_mod.is_file():
        return
    try:
        content = go_mod.read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        logger.debug(f"Cannot read {go_mod}: {e}")
        return

    facts.has_go_mod = True
    facts.evidence.append(Evidence.create(
        Signal.GO_MOD, "Found go.mod file", GO_MOD_FILE, 0.4, 0.95,
    ))

    facts.module_name = parse_module_name(content)
    if facts.module_name:
        lowered = facts.module_name.lower()
        if any(hint in lowered for hint in CLI_MODULE_HINTS):
            facts.evidence.append(Evidence.create(
                Signal.CLI_MODULE_NAME, "Module name suggests CLI tool", None, 0.6, 0.8,
            ))


def _inspect_directories(root: Path, facts: StructuralFacts) -> None:
    for name in CLI_DIRECTORIES:
        if (root / name).is_dir():
            facts.cli_directories.append(name)
            signal = Signal.CMD_DIRECTORY if name == "cmd" else Signal.CLI_DIRECTORY
            weight = 0.9 if name == "cmd" else 0.7
            facts.evidence.append(Evidence.create(
                signal, f"Found {name}/ directory", None, weight, 0.85,
            ))

    for name in LIBRARY_DIRECTORIES:
        if (root / name).is_dir():
            facts.library_directories.append(name)
            weight = 0.8 if name in ("pkg", "internal") else 0.6
            facts.evidence.append(Evidence.create(
                Signal.LIBRARY_DIRECTORY, f"Found {name}/ directory", None, weight, 0.8,
            ))


def _inspect_config_files(root: Path, facts: StructuralFacts) -> None:
    for name in RELEASE_CONFIG_FILES:
        if (root / name).is_file():
            facts.config_files.append(name)
            facts.evidence.append(Evidence.create(
                Signal.RELEASE_CONFIG, "Found .goreleaser config (CLI release tool)", name, 0.8, 0.9,
            ))
    for name in BUILD_CONFIG_FILES:
        if (root / name).is_file():
            facts.config_files.append(name)
            facts.evidence.append(Evidence.create(
                Signal.BUILD_CONFIG, f"Found {name} (deployment/build config)", name, 0.5, 0.7,
            ))
    for name in APP_CONFIG_FILES:
        if (root / name).is_file():
            facts.config_files.append(name)
            facts.evidence.append(Evidence.create(
                Signal.APP_CONFIG, f"Found {name} (application config)", name, 0.6, 0.7,
            ))


def measure_depth(root: Path, exclusions: Optional[ExclusionFilter] = None) -> int:
    """最大目录嵌套深度，跳过排除目录"""
    depth = 1
    for entry in iter_tree(root, exclusions):
        if entry.is_dir:
            depth = max(depth, entry.depth)
    return depth


def inspect_structure(root: Path, exclusions: Optional[ExclusionFilter] = None) -> StructuralFacts:
    """
    检查项目结构

    Args:
        root: 项目根目录
        exclusions: 目录排除规则

    Returns:
        StructuralFacts

    Raises:
        ProjectReadError: 根目录不存在或无法读取
    """
    _check_root(root)
    facts = StructuralFacts()
    _inspect_go_mod(root, facts)
    _inspect_directories(root, facts)
    _inspect_config_files(root, facts)
    facts.max_depth = measure_depth(root, exclusions)
    return facts
