"""
归档解压 - zip 与 gzip tarball

Only regular files and directories are extracted. Any member whose target
would land outside the destination directory aborts the extraction.
"""

import logging
import os
import shutil
import tarfile
import zipfile
from pathlib import Path

from go_detector.errors import ArchiveError

logger = logging.getLogger(__name__)

ZIP_MAGIC = b"PK"
ZIP_SUFFIXES = (".zip",)
TAR_SUFFIXES = (".tar.gz", ".tgz")


def is_zip_file(path: Path) -> bool:
    """按文件头判断是否为 zip"""
    try:
        with open(path, "rb") as f:
            return f.read(2) == ZIP_MAGIC
    except OSError:
        return False


def _safe_target(dest: Path, name: str) -> Path:
    """成员路径必须位于目标目录之内"""
    root = dest.resolve()
    target = (root / name).resolve()
    if target != root and root not in target.parents:
        raise ArchiveError(f"Invalid file path in archive: {name}")
    return target


def extract_zip(src: Path, dest: Path) -> None:
    """
    解压 zip 文件

    Raises:
        ArchiveError: 文件损坏或包含越界路径
    """
    try:
        with zipfile.ZipFile(src) as archive:
            for info in archive.infolist():
                target = _safe_target(dest, info.filename)
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as source, open(target, "wb") as out:
                    shutil.copyfileobj(source, out)
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveError(f"Cannot extract zip archive {src}: {e}") from e


def extract_tar_gz(src: Path, dest: Path) -> None:
    """
    解压 gzip tarball

    Raises:
        ArchiveError: 文件损坏或包含越界路径
    """
    try:
        with tarfile.open(src, mode="r:gz") as archive:
            for member in archive:
                target = _safe_target(dest, member.name)
                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                elif member.isfile():
                    target.parent.mkdir(parents=True, exist_ok=True)
                    source = archive.extractfile(member)
                    if source is None:
                        continue
                    with source, open(target, "wb") as out:
                        shutil.copyfileobj(source, out)
                # 链接和设备文件被忽略
    except (tarfile.TarError, OSError) as e:
        raise ArchiveError(f"Cannot extract tar archive {src}: {e}") from e


def extract_archive(src: Path, dest: Path, name_hint: str = "") -> None:
    """
    根据名称后缀（或文件内容）选择解压方式

    Args:
        src: 归档文件
        dest: 解压目录
        name_hint: 原始 URL 或文件名，用于判断格式
    """
    hint = name_hint.lower()
    if hint.endswith(ZIP_SUFFIXES):
        extract_zip(src, dest)
    elif hint.endswith(TAR_SUFFIXES):
        extract_tar_gz(src, dest)
    elif is_zip_file(src):
        extract_zip(src, dest)
    else:
        extract_tar_gz(src, dest)


def find_project_root(extract_dir: Path) -> Path:
    """
    查找实际项目目录

    The shortest directory path holding go.mod or a .go file; the extraction
    directory itself when none does.
    """
    candidates: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(extract_dir):
        dirnames.sort()
        if "go.mod" in filenames or any(name.endswith(".go") for name in filenames):
            candidates.append(Path(dirpath))

    if not candidates:
        logger.debug(f"No Go sources found under {extract_dir}")
        return extract_dir

    return min(candidates, key=lambda p: len(str(p)))
