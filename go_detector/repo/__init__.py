"""
Repository Layer - 仓库层

负责远程源下载、归档解压和临时资源管理。
"""

from go_detector.repo.loader import (
    analyze_source,
    detect_source_kind,
    escape_module_path,
    fetch_source,
    fetch_with_retry,
    FetchConfig,
    SourceKind,
)
from go_detector.repo.archive import extract_archive, find_project_root
from go_detector.repo.workspace import TempWorkspace

__all__ = [
    # loader
    "analyze_source",
    "detect_source_kind",
    "escape_module_path",
    "fetch_source",
    "fetch_with_retry",
    "FetchConfig",
    "SourceKind",
    # archive
    "extract_archive",
    "find_project_root",
    # workspace
    "TempWorkspace",
]
