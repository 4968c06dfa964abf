"""Unit tests for remote source loading (network access is faked)."""

import io
import json
import tarfile
import zipfile
from pathlib import Path

import pytest
import requests
from git import GitCommandError

from go_detector.core.models import Verdict
from go_detector.errors import ArchiveError, FetchError, FetchNotFoundError, FetchTimeoutError
from go_detector.repo import loader
from go_detector.repo.archive import extract_archive, extract_tar_gz, extract_zip, find_project_root
from go_detector.repo.loader import (
    FetchConfig,
    SourceKind,
    analyze_source,
    detect_source_kind,
    escape_module_path,
    fetch_with_retry,
)
from go_detector.repo.workspace import TempWorkspace


MAIN_GO = b"package main\n\nimport \"os\"\n\nfunc main() { os.Exit(0) }\n"


def zip_bytes(files: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def tar_gz_bytes(files: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            archive.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, status_code: int = 200, body: bytes = b""):
        self.status_code = status_code
        self.body = body

    def json(self):
        return json.loads(self.body)

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.body), chunk_size):
            yield self.body[start:start + chunk_size]

    def close(self) -> None:
        pass


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    """Record retry delays instead of sleeping."""
    delays: list[float] = []
    monkeypatch.setattr(loader.time, "sleep", delays.append)
    return delays


class TestSourceDetection:
    """Tests for source kind detection and module path escaping."""

    def test_escape_module_path(self) -> None:
        assert escape_module_path("github.com/BurntSushi/toml") == "github.com/!burnt!sushi/toml"
        assert escape_module_path("golang.org/x/tools") == "golang.org/x/tools"

    @pytest.mark.parametrize("target,kind", [
        ("https://example.com/project.zip", SourceKind.ARCHIVE),
        ("https://github.com/user/repo/archive/main.tar.gz", SourceKind.ARCHIVE),
        ("https://github.com/user/repo", SourceKind.GIT),
        ("https://github.com/user/repo.git", SourceKind.GIT),
        ("https://gitlab.com/user/repo.git", SourceKind.GIT),
        ("github.com/spf13/cobra", SourceKind.GO_PROXY),
    ])
    def test_detect_source_kind(self, target: str, kind: SourceKind) -> None:
        assert detect_source_kind(target) is kind


class TestFetchWithRetry:
    """Tests for fetch_with_retry()."""

    def test_succeeds_after_failures(self, sleeps: list[float]) -> None:
        calls = []

        def operation() -> str:
            calls.append(1)
            if len(calls) < 3:
                raise FetchError("connection reset")
            return "ok"

        assert fetch_with_retry(operation, FetchConfig(max_retries=3)) == "ok"
        assert len(calls) == 3
        assert sleeps == [1.0, 2.0]

    def test_not_found_is_not_retried(self, sleeps: list[float]) -> None:
        calls = []

        def operation() -> None:
            calls.append(1)
            raise FetchNotFoundError("404")

        with pytest.raises(FetchNotFoundError):
            fetch_with_retry(operation, FetchConfig(max_retries=3))
        assert len(calls) == 1
        assert sleeps == []

    def test_exhaustion_keeps_error_type(self, sleeps: list[float]) -> None:
        def operation() -> None:
            raise FetchTimeoutError("timed out")

        with pytest.raises(FetchTimeoutError, match="after 3 attempts"):
            fetch_with_retry(operation, FetchConfig(max_retries=2), label="mod")
        assert sleeps == [1.0, 2.0]

    def test_zero_retries(self, sleeps: list[float]) -> None:
        calls = []

        def operation() -> None:
            calls.append(1)
            raise FetchError("boom")

        with pytest.raises(FetchError):
            fetch_with_retry(operation, FetchConfig(max_retries=0))
        assert len(calls) == 1
        assert sleeps == []

    def test_other_exceptions_propagate(self, sleeps: list[float]) -> None:
        def operation() -> None:
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            fetch_with_retry(operation)
        assert sleeps == []


class TestArchives:
    """Tests for archive extraction."""

    def test_extract_zip(self, tmp_path: Path) -> None:
        src = tmp_path / "a.zip"
        src.write_bytes(zip_bytes({"repo-main/main.go": MAIN_GO, "repo-main/docs/": b""}))
        dest = tmp_path / "out"
        dest.mkdir()
        extract_zip(src, dest)
        assert (dest / "repo-main" / "main.go").read_bytes() == MAIN_GO
        assert (dest / "repo-main" / "docs").is_dir()

    def test_extract_tar_gz(self, tmp_path: Path) -> None:
        src = tmp_path / "a.tar.gz"
        src.write_bytes(tar_gz_bytes({"repo-1.0/main.go": MAIN_GO}))
        dest = tmp_path / "out"
        dest.mkdir()
        extract_tar_gz(src, dest)
        assert (dest / "repo-1.0" / "main.go").read_bytes() == MAIN_GO

    def test_format_sniffed_without_hint(self, tmp_path: Path) -> None:
        src = tmp_path / "download"
        src.write_bytes(zip_bytes({"main.go": MAIN_GO}))
        dest = tmp_path / "out"
        dest.mkdir()
        extract_archive(src, dest)
        assert (dest / "main.go").is_file()

    @pytest.mark.parametrize("builder,suffix", [(zip_bytes, ".zip"), (tar_gz_bytes, ".tar.gz")])
    def test_path_traversal_rejected(self, tmp_path: Path, builder, suffix: str) -> None:
        src = tmp_path / f"evil{suffix}"
        src.write_bytes(builder({"../evil.go": MAIN_GO}))
        dest = tmp_path / "out"
        dest.mkdir()
        with pytest.raises(ArchiveError):
            extract_archive(src, dest, name_hint=src.name)
        assert not (tmp_path / "evil.go").exists()

    def test_corrupt_archive(self, tmp_path: Path) -> None:
        src = tmp_path / "bad.zip"
        src.write_bytes(b"PK not really")
        with pytest.raises(ArchiveError):
            extract_zip(src, tmp_path)

    def test_find_project_root(self, tmp_path: Path) -> None:
        (tmp_path / "repo-main" / "sub").mkdir(parents=True)
        (tmp_path / "repo-main" / "go.mod").write_text("module x\n")
        (tmp_path / "repo-main" / "sub" / "a.go").write_text("package sub\n")
        assert find_project_root(tmp_path) == tmp_path / "repo-main"

    def test_find_project_root_without_go(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").write_text("hi\n")
        assert find_project_root(tmp_path) == tmp_path


class TestTempWorkspace:
    """Tests for TempWorkspace."""

    def test_cleanup_on_exit(self) -> None:
        with TempWorkspace() as workspace:
            file = workspace.make_file(suffix=".zip")
            directory = workspace.make_dir()
            (directory / "x.go").write_text("package x\n")
            assert file.exists() and directory.is_dir()
        assert not file.exists()
        assert not directory.exists()

    def test_cleanup_on_error(self) -> None:
        with pytest.raises(RuntimeError):
            with TempWorkspace() as workspace:
                directory = workspace.make_dir()
                raise RuntimeError("fail")
        assert not directory.exists()


class TestAnalyzeSource:
    """Tests for analyze_source() with a faked network."""

    def test_go_proxy(self, monkeypatch) -> None:
        module_zip = zip_bytes({"github.com/acme/hello@v1.2.0/main.go": MAIN_GO})
        responses = {
            "https://proxy.test/github.com/acme/hello/@latest": FakeResponse(body=b'{"Version": "v1.2.0"}'),
            "https://proxy.test/github.com/acme/hello/@v/v1.2.0.zip": FakeResponse(body=module_zip),
        }
        requested = []

        def fake_get(url, timeout=None, stream=False):
            requested.append(url)
            return responses[url]

        monkeypatch.setattr(loader.requests, "get", fake_get)
        config = FetchConfig(proxy_url="https://proxy.test/")

        analysis = analyze_source("github.com/acme/hello", SourceKind.GO_PROXY, config)

        assert requested == list(responses)
        assert analysis.verdict is Verdict.CLI
        assert analysis.is_remote is True
        assert analysis.remote_source == "https://proxy.test/github.com/acme/hello"
        assert not Path(analysis.project_path).exists()

    def test_archive(self, monkeypatch) -> None:
        body = tar_gz_bytes({"hello-main/main.go": MAIN_GO})
        monkeypatch.setattr(loader.requests, "get", lambda url, timeout=None, stream=False: FakeResponse(body=body))

        url = "https://example.com/hello/archive/main.tar.gz"
        analysis = analyze_source(url, SourceKind.ARCHIVE)

        assert analysis.verdict is Verdict.CLI
        assert analysis.remote_source == url
        assert Path(analysis.project_path).name == "hello-main"

    def test_not_found(self, monkeypatch, sleeps: list[float]) -> None:
        calls = []

        def fake_get(url, timeout=None, stream=False):
            calls.append(url)
            return FakeResponse(status_code=404)

        monkeypatch.setattr(loader.requests, "get", fake_get)
        with pytest.raises(FetchNotFoundError):
            analyze_source("example.com/missing", SourceKind.GO_PROXY)
        assert len(calls) == 1

    def test_server_error_is_retried(self, monkeypatch, sleeps: list[float]) -> None:
        monkeypatch.setattr(
            loader.requests, "get",
            lambda url, timeout=None, stream=False: FakeResponse(status_code=502),
        )
        with pytest.raises(FetchError, match="after 2 attempts"):
            analyze_source("https://example.com/a.zip", SourceKind.ARCHIVE, FetchConfig(max_retries=1))
        assert sleeps == [1.0]

    def test_timeout(self, monkeypatch, sleeps: list[float]) -> None:
        def fake_get(url, timeout=None, stream=False):
            raise requests.Timeout("slow")

        monkeypatch.setattr(loader.requests, "get", fake_get)
        with pytest.raises(FetchTimeoutError):
            analyze_source("https://example.com/a.zip", SourceKind.ARCHIVE, FetchConfig(max_retries=0))

    def test_git_clone(self, monkeypatch) -> None:
        def fake_clone(url, to_path, **kwargs):
            assert kwargs["depth"] == 1
            (Path(to_path) / "main.go").write_bytes(MAIN_GO)

        monkeypatch.setattr(loader.Repo, "clone_from", fake_clone)
        analysis = analyze_source("https://github.com/acme/hello", SourceKind.GIT)
        assert analysis.verdict is Verdict.CLI
        assert analysis.remote_source == "https://github.com/acme/hello"

    def test_git_repository_missing(self, monkeypatch, sleeps: list[float]) -> None:
        def fake_clone(url, to_path, **kwargs):
            raise GitCommandError(["git", "clone"], 128, stderr="fatal: repository not found")

        monkeypatch.setattr(loader.Repo, "clone_from", fake_clone)
        with pytest.raises(FetchNotFoundError):
            analyze_source("https://github.com/acme/missing", SourceKind.GIT)
        assert sleeps == []

    def test_local(self, cli_project: Path) -> None:
        analysis = analyze_source(str(cli_project), SourceKind.LOCAL)
        assert analysis.verdict is Verdict.CLI
        assert analysis.is_remote is False
