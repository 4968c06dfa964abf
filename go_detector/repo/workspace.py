"""
临时工作区 - 跟踪一次远程分析创建的临时文件和目录

A TempWorkspace belongs to whoever performs the remote analysis; everything it
created is removed when the `with` block exits, on success or failure.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

TEMP_PREFIX = "go-detector-"


class TempWorkspace:
    """
    临时资源上下文管理器

    Example:
        with TempWorkspace() as ws:
            archive = ws.make_file(suffix=".zip")
            target = ws.make_dir()
    """

    def __init__(self, prefix: str = TEMP_PREFIX):
        self.prefix = prefix
        self._files: list[Path] = []
        self._dirs: list[Path] = []

    def __enter__(self) -> "TempWorkspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def make_file(self, suffix: Optional[str] = None) -> Path:
        """创建一个空的临时文件并登记"""
        fd, name = tempfile.mkstemp(prefix=self.prefix, suffix=suffix)
        os.close(fd)
        path = Path(name)
        self._files.append(path)
        return path

    def make_dir(self) -> Path:
        """创建一个临时目录并登记"""
        path = Path(tempfile.mkdtemp(prefix=self.prefix))
        self._dirs.append(path)
        return path

    def cleanup(self) -> None:
        """删除所有登记的临时资源"""
        for path in self._files:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.debug(f"Cannot remove temp file {path}: {e}")
        for path in self._dirs:
            shutil.rmtree(path, ignore_errors=True)
        self._files.clear()
        self._dirs.clear()
