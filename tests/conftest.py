"""Shared test fixtures for tinygit tests."""

import gzip
import io
import tarfile
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tinygit.config import Settings
from tinygit.http import TransportError


class FakeTransport:
    """Recording HttpTransport with canned responses keyed by URL.

    ``texts`` maps API URLs to 200 bodies; unknown URLs behave like a 404.
    ``downloads`` maps archive URLs to ``(status, body)`` or to an exception
    to raise after a partial body has been written; unknown URLs write a
    small error page and return 404.
    """

    def __init__(
        self,
        texts: dict[str, str] | None = None,
        downloads: dict[str, tuple[int, bytes] | Exception] | None = None,
    ) -> None:
        self.texts = texts or {}
        self.downloads = downloads or {}
        self.calls: list[str] = []
        self.closed = False

    def fetch_text(self, url: str) -> str | None:
        self.calls.append(url)
        return self.texts.get(url)

    def download(self, url: str, destination: Path) -> int:
        self.calls.append(url)
        canned = self.downloads.get(url, (404, b"Not Found"))
        if isinstance(canned, Exception):
            destination.write_bytes(b"partial")
            raise canned
        status, body = canned
        destination.write_bytes(body)
        return status

    def close(self) -> None:
        self.closed = True


def build_tar_gz(root: str, files: dict[str, str]) -> bytes:
    """Build a tar.gz archive with every file under a single root folder."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        folder = tarfile.TarInfo(root)
        folder.type = tarfile.DIRTYPE
        folder.mode = 0o755
        folder.mtime = 0
        tar.addfile(folder)
        for name, content in sorted(files.items()):
            data = content.encode()
            info = tarfile.TarInfo(f"{root}/{name}")
            info.size = len(data)
            info.mode = 0o644
            info.mtime = 0
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def build_truncated_tar_gz(root: str, files: dict[str, bytes], keep: int) -> bytes:
    """Build a gzip stream holding only the first ``keep`` bytes of a tar."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(f"{root}/{name}")
            info.size = len(data)
            info.mtime = 0
            tar.addfile(info, io.BytesIO(data))
    return gzip.compress(buffer.getvalue()[:keep], mtime=0)


def build_zip(root: str, files: dict[str, str]) -> bytes:
    """Build a zip archive with every file under a single root folder."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr(f"{root}/", "")
        for name, content in sorted(files.items()):
            zf.writestr(f"{root}/{name}", content)
    return buffer.getvalue()


TransportFactory = Callable[..., FakeTransport]


@pytest.fixture
def settings() -> Settings:
    """Default settings."""
    return Settings()


@pytest.fixture
def fake_transport() -> TransportFactory:
    """Factory for FakeTransport instances."""
    return FakeTransport


@pytest.fixture
def tar_gz_bytes() -> Callable[[str, dict[str, str]], bytes]:
    """Factory for in-memory tar.gz archives."""
    return build_tar_gz


@pytest.fixture
def truncated_tar_gz_bytes() -> bytes:
    """A tar.gz whose tar stream ends partway through its second member."""
    files = {"a.txt": b"first\n", "b.bin": bytes(range(256)) * 256}
    return build_truncated_tar_gz("widget-main", files, keep=4096)


@pytest.fixture
def zip_bytes() -> Callable[[str, dict[str, str]], bytes]:
    """Factory for in-memory zip archives."""
    return build_zip


@pytest.fixture
def transport_error() -> TransportError:
    """A transport-level failure (no HTTP status)."""
    return TransportError("connection refused")


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point TINYGIT_CONFIG at a file that does not exist yet."""
    config_path = tmp_path / "tinygit-config.yaml"
    monkeypatch.setenv("TINYGIT_CONFIG", str(config_path))
    return config_path
