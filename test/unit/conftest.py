"""Test fixtures for upfile unit tests."""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from upfile.core.settings import settings

SAMPLE_FILES: dict[str, tuple[bytes, str]] = {
    "lorem.txt": (b"Lorem ipsum dolor sit amet, consectetur adipiscing elit.\n", "text/plain"),
    "random.csv": (b"id,value\n1,0.42\n2,0.17\n3,0.99\n", "text/csv"),
    "tux.png": (b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + bytes(range(64)), "image/png"),
}


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request."""

    _data: dict = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key, default)


@dataclass
class MockRequest:
    """Mock Request object for Robyn carrying multipart files."""

    files: dict[str, bytes] = field(default_factory=dict)
    headers: MockHeaders = field(default_factory=MockHeaders)
    method: str = "POST"
    path: str = "/"


# -----------------------------------------------------------------------------
# Upload directories
# -----------------------------------------------------------------------------


@pytest.fixture
def upload_tmp_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary directory trusted by the default uploaded-file check."""
    directory = tmp_path / "upload_tmp"
    directory.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_TMP_DIR", directory)
    return directory


@pytest.fixture
def outside_dir(tmp_path: Path) -> Path:
    """Directory outside the upload mechanism's reach."""
    directory = tmp_path / "outside"
    directory.mkdir()
    return directory


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    """Destination directory for move operations."""
    directory = tmp_path / "upload"
    directory.mkdir()
    return directory


@pytest.fixture
def sample_files() -> dict[str, tuple[bytes, str]]:
    """Sample upload payloads keyed by client filename, with their media types."""
    return SAMPLE_FILES


@pytest.fixture
def make_upload(upload_tmp_dir: Path) -> Callable[[str, bytes | None], Path]:
    """Factory fixture writing a file into the upload temp dir."""

    def _make(name: str, content: bytes | None = None) -> Path:
        path = upload_tmp_dir / name
        path.write_bytes(content if content is not None else SAMPLE_FILES[name][0])
        return path

    return _make


@pytest.fixture
def make_mock_request() -> Callable[[dict[str, bytes] | None], MockRequest]:
    """Factory fixture to create mock requests."""

    def _make(files: dict[str, bytes] | None = None) -> MockRequest:
        return MockRequest(files=files or {})

    return _make
