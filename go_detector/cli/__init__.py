"""
CLI Layer - 命令行接口层

提供命令行入口。
"""

from go_detector.cli.app import app, detect, version

__all__ = [
    "app",
    "detect",
    "version",
]
