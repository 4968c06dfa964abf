"""
远程源加载器 - 下载并分析远程 Go 项目

支持：
1. 远程归档（zip / tar.gz）
2. Go 模块代理（proxy.golang.org 协议）
3. Git 仓库（浅克隆）
4. 超时和重试机制
"""

import logging
import re
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, TypeVar

import requests
from git import GitCommandError, Repo

from go_detector.core.analyzer import analyze
from go_detector.core.models import ProjectAnalysis
from go_detector.errors import FetchError, FetchNotFoundError, FetchTimeoutError
from go_detector.filters.pathspec_filter import ExclusionFilter
from go_detector.repo.archive import extract_archive, extract_zip, find_project_root
from go_detector.repo.workspace import TempWorkspace

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================================
# 配置常量
# ============================================================

DEFAULT_PROXY_URL = "https://proxy.golang.org"

# GitHub 仓库 URL（非归档下载链接）
GITHUB_URL_PATTERN = re.compile(
    r'^https?://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$'
)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


class SourceKind(Enum):
    """项目来源类型"""
    LOCAL = "local"
    ARCHIVE = "archive"
    GO_PROXY = "goproxy"
    GIT = "git"


@dataclass
class FetchConfig:
    """
    下载配置

    Attributes:
        proxy_url: Go 模块代理地址
        timeout: 单次请求超时（秒）
        max_retries: 最大重试次数（总尝试次数 = max_retries + 1）
        retry_delay: 初始重试延迟（秒）
        backoff_factor: 指数退避因子
    """
    proxy_url: str = DEFAULT_PROXY_URL
    timeout: int = 60
    max_retries: int = 3
    retry_delay: float = 1.0
    backoff_factor: float = 2.0


# ============================================================
# 来源识别
# ============================================================

def is_url(target: str) -> bool:
    return target.startswith(("http://", "https://"))


def is_git_url(target: str) -> bool:
    """以 .git 结尾的 URL，或 GitHub 仓库首页 URL"""
    return is_url(target) and (target.endswith(".git") or bool(GITHUB_URL_PATTERN.match(target)))


def detect_source_kind(target: str) -> SourceKind:
    """
    判断批量输入项的来源类型

    http(s) URL 为归档或 Git 仓库，其余视为 Go 模块路径。
    """
    if is_url(target):
        return SourceKind.GIT if is_git_url(target) else SourceKind.ARCHIVE
    return SourceKind.GO_PROXY


def escape_module_path(path: str) -> str:
    """
    Go 模块代理的大小写转义: 大写字母 X -> !x

    Example:
        github.com/BurntSushi/toml -> github.com/!burnt!sushi/toml
    """
    return "".join(f"!{ch.lower()}" if ch.isupper() else ch for ch in path)


def remote_source_label(target: str, kind: SourceKind, config: FetchConfig) -> str:
    if kind is SourceKind.GO_PROXY:
        return f"{config.proxy_url.rstrip('/')}/{target}"
    return target


# ============================================================
# 重试
# ============================================================

def fetch_with_retry(
    operation: Callable[[], T],
    config: Optional[FetchConfig] = None,
    label: str = "",
) -> T:
    """
    带指数退避的重试

    Args:
        operation: 下载操作，失败时抛出 FetchError
        config: 下载配置
        label: 日志中使用的来源描述

    Returns:
        operation 的返回值

    Raises:
        FetchNotFoundError: 资源不存在（不重试）
        FetchError: 所有尝试均失败
    """
    if config is None:
        config = FetchConfig()

    attempts = config.max_retries + 1
    last_error: Optional[FetchError] = None

    for attempt in range(attempts):
        try:
            result = operation()
            if attempt > 0:
                logger.info(f"[{label}] Download succeeded on attempt {attempt + 1}")
            return result
        except FetchNotFoundError:
            raise
        except FetchError as e:
            last_error = e
            if attempt == attempts - 1:
                break
            delay = config.retry_delay * (config.backoff_factor ** attempt)
            logger.warning(
                f"[{label}] Download attempt {attempt + 1} failed, retrying in {delay:.1f}s: {e}"
            )
            time.sleep(delay)

    raise type(last_error)(
        f"[{label}] failed to download/extract after {attempts} attempts: {last_error}"
    ) from last_error


# ============================================================
# HTTP 下载
# ============================================================

def _check_status(response: requests.Response, url: str) -> None:
    if response.status_code == 404:
        raise FetchNotFoundError(f"Resource not found (status: 404): {url}")
    if response.status_code != 200:
        raise FetchError(f"Download failed with status {response.status_code}: {url}")


def _get(url: str, config: FetchConfig, stream: bool = False) -> requests.Response:
    try:
        response = requests.get(url, timeout=config.timeout, stream=stream)
    except requests.Timeout as e:
        raise FetchTimeoutError(f"Request timed out after {config.timeout}s: {url}") from e
    except requests.RequestException as e:
        raise FetchError(f"Request failed: {url}: {e}") from e
    _check_status(response, url)
    return response


def download_file(url: str, dest: Path, config: FetchConfig) -> None:
    """流式下载到文件"""
    response = _get(url, config, stream=True)
    try:
        with open(dest, "wb") as out:
            for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                out.write(chunk)
    except requests.RequestException as e:
        raise FetchError(f"Download interrupted: {url}: {e}") from e
    finally:
        response.close()


def latest_module_version(module: str, config: FetchConfig) -> str:
    """GET {proxy}/{module}/@latest -> Version"""
    url = f"{config.proxy_url.rstrip('/')}/{escape_module_path(module)}/@latest"
    response = _get(url, config)
    try:
        info = response.json()
    except ValueError as e:
        raise FetchError(f"Failed to decode version info for {module}: {e}") from e
    version = info.get("Version") if isinstance(info, dict) else None
    if not version:
        raise FetchError(f"No version reported for module {module}")
    return version


def download_go_module(module: str, config: FetchConfig, workspace: TempWorkspace) -> Path:
    """
    从 Go 模块代理下载最新版本并解压

    Returns:
        解压后的项目根目录
    """
    version = latest_module_version(module, config)
    logger.debug(f"Resolved {module} to {version}")

    url = (
        f"{config.proxy_url.rstrip('/')}/{escape_module_path(module)}"
        f"/@v/{escape_module_path(version)}.zip"
    )
    archive = workspace.make_file(suffix=".zip")
    download_file(url, archive, config)

    target = workspace.make_dir()
    extract_zip(archive, target)
    return find_project_root(target)


def download_archive(url: str, config: FetchConfig, workspace: TempWorkspace) -> Path:
    """
    下载归档并解压

    Returns:
        解压后的项目根目录
    """
    archive = workspace.make_file()
    download_file(url, archive, config)

    target = workspace.make_dir()
    extract_archive(archive, target, name_hint=url)
    return find_project_root(target)


# ============================================================
# Git 克隆
# ============================================================

def clone_repository(url: str, config: FetchConfig, workspace: TempWorkspace) -> Path:
    """
    浅克隆 Git 仓库

    Raises:
        FetchNotFoundError: 仓库不存在
        FetchTimeoutError: 克隆超时
        FetchError: 其他克隆失败
    """
    target = workspace.make_dir()
    try:
        Repo.clone_from(
            url,
            target,
            depth=1,
            env={
                "GIT_HTTP_LOW_SPEED_LIMIT": "1000",
                "GIT_HTTP_LOW_SPEED_TIME": str(config.timeout),
                "GIT_TERMINAL_PROMPT": "0",
            },
        )
    except GitCommandError as e:
        message = str(e).lower()
        if "not found" in message or "404" in message:
            raise FetchNotFoundError(f"Repository not found: {url}") from e
        if "timeout" in message or "timed out" in message:
            raise FetchTimeoutError(f"Clone timed out: {url}") from e
        raise FetchError(f"Clone failed: {url}: {e}") from e
    return target


# ============================================================
# 对外接口
# ============================================================

def fetch_source(
    target: str,
    kind: SourceKind,
    config: FetchConfig,
    workspace: TempWorkspace,
) -> Path:
    """下载一个远程源并返回本地项目目录（单次尝试）"""
    if kind is SourceKind.GO_PROXY:
        return download_go_module(target, config, workspace)
    if kind is SourceKind.GIT:
        return clone_repository(target, config, workspace)
    if kind is SourceKind.ARCHIVE:
        return download_archive(target, config, workspace)
    raise ValueError(f"Not a remote source kind: {kind}")


def analyze_source(
    target: str,
    kind: SourceKind,
    config: Optional[FetchConfig] = None,
    exclusions: Optional[ExclusionFilter] = None,
) -> ProjectAnalysis:
    """
    分析一个本地或远程项目

    Remote sources are fetched into a TempWorkspace that is removed once the
    analysis is built.

    Raises:
        ProjectReadError: 本地目录无法读取
        FetchError: 远程下载失败
    """
    if config is None:
        config = FetchConfig()

    if kind is SourceKind.LOCAL:
        return analyze(target, exclusions=exclusions)

    with TempWorkspace() as workspace:
        root = fetch_with_retry(
            lambda: fetch_source(target, kind, config, workspace),
            config,
            label=target,
        )
        return analyze(
            root,
            remote_source=remote_source_label(target, kind, config),
            exclusions=exclusions,
        )
