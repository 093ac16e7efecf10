"""Shared pytest fixtures for the create-starter test suite.

Provides reusable fixtures for:
- In-memory starter tarballs shaped like codeload archives
- httpx clients backed by ``httpx.MockTransport``
- Mock subprocess helpers
- Configurations that never launch a dev server
"""

from __future__ import annotations

import io
import json
import tarfile
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from create_starter.builder import RunConfiguration
from create_starter.config import StarterConfig


# ---------------------------------------------------------------------------
# Archives
# ---------------------------------------------------------------------------

def build_tarball(files: dict[str, str | bytes], top_level: str = "starter-main") -> bytes:
    """Return a tar.gz archive whose entries all live under *top_level*/."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        root = tarfile.TarInfo(top_level)
        root.type = tarfile.DIRTYPE
        root.mode = 0o755
        archive.addfile(root)
        for name, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            info = tarfile.TarInfo(f"{top_level}/{name}")
            info.size = len(data)
            info.mode = 0o644
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


@pytest.fixture
def make_tarball():
    """The ``build_tarball`` helper, exposed as a fixture."""
    return build_tarball


@pytest.fixture
def starter_files() -> dict[str, str]:
    """Minimal blog starter: a descriptor plus a one-file frontend."""
    return {
        "starter.json": json.dumps({"template": "blog"}),
        "frontend/index.html": "<!doctype html><title>Blog</title>\n",
        "README.md": "# Blog starter\n",
    }


@pytest.fixture
def starter_tarball(starter_files: dict[str, str]) -> bytes:
    return build_tarball(starter_files, top_level="strapi-starter-blog-main")


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture
def codeload_client():
    """Factory for an ``httpx.Client`` that serves a fixed archive.

    Usage:
        def test_fetch(codeload_client):
            client, requests = codeload_client(archive=b"...", status=200)
    """
    clients: list[httpx.Client] = []

    def factory(archive: bytes = b"", status: int = 200) -> tuple[httpx.Client, list[httpx.Request]]:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if status >= 400:
                return httpx.Response(status, text="Not Found")
            return httpx.Response(
                status, content=archive, headers={"content-type": "application/x-gzip"}
            )

        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client, requests

    yield factory
    for client in clients:
        client.close()


# ---------------------------------------------------------------------------
# Subprocesses
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> StarterConfig:
    """Configuration that stops before launching the dev server."""
    return StarterConfig(run_app=False)


@pytest.fixture
def scratch_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect ``tempfile.mkdtemp`` into the test's tmp_path."""
    root = tmp_path / "scratch"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


class RecordingGenerator:
    """Stand-in for the backend generator; records calls and writes a marker file."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, RunConfiguration]] = []

    async def __call__(self, path: Path, options: RunConfiguration) -> None:
        self.calls.append((Path(path), options.model_copy()))
        backend = Path(path)
        backend.mkdir(parents=True, exist_ok=True)
        (backend / "package.json").write_text(json.dumps({"name": "backend"}), encoding="utf-8")


@pytest.fixture
def recording_generator() -> RecordingGenerator:
    return RecordingGenerator()
