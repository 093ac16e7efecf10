"""Starter archive download and extraction.

Fetches ``https://<codeload-host>/<owner>/<repo>/tar.gz/<ref>`` with httpx and
streams the gzip-compressed tarball straight into a destination directory,
dropping the ``<repo>-<ref>/`` directory every codeload archive is wrapped in.
"""

from __future__ import annotations

import asyncio
import io
import tarfile
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

import httpx

from create_starter.config import StarterConfig
from create_starter.errors import DownloadError
from create_starter.source.locator import TemplateSource

_CHUNK_SIZE = 64 * 1024


class _ChunkReader(io.RawIOBase):
    """Read-only file object over an iterator of byte chunks."""

    def __init__(self, chunks: Iterator[bytes]):
        self._chunks = chunks
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


def _strip_top_level(member: tarfile.TarInfo) -> tarfile.TarInfo | None:
    """Drop the first path component of *member*, or return None for the root itself."""
    parts = PurePosixPath(member.name).parts
    if len(parts) <= 1:
        return None
    member.name = "/".join(parts[1:])
    if member.islnk():
        link_parts = PurePosixPath(member.linkname).parts
        member.linkname = "/".join(link_parts[1:])
    return member


def extract_archive(stream: io.BufferedIOBase, destination: str | Path) -> int:
    """Extract a tar.gz *stream* into *destination* with the top-level directory stripped.

    Members are read in a single forward pass, so *stream* need not be
    seekable. Entries escaping *destination* are rejected by the ``data``
    extraction filter.

    Returns:
        The number of entries written.
    """
    dest = Path(destination)
    dest.mkdir(parents=True, exist_ok=True)
    extracted = 0
    with tarfile.open(fileobj=stream, mode="r|gz") as archive:
        for member in archive:
            stripped = _strip_top_level(member)
            if stripped is None:
                continue
            archive.extract(stripped, dest, filter="data")
            extracted += 1
    return extracted


class ArchiveFetcher:
    """Downloads starter repositories as tarballs.

    An ``httpx.Client`` may be injected (tests use ``httpx.MockTransport``);
    otherwise a fresh client is opened for each download.
    """

    def __init__(self, config: StarterConfig | None = None, client: httpx.Client | None = None):
        self.config = config or StarterConfig()
        self._client = client

    def archive_url(self, source: TemplateSource) -> str:
        """Return the codeload URL for *source*."""
        return f"https://{self.config.codeload_host}/{source.full_name}/tar.gz/{source.ref}"

    async def fetch(self, source: TemplateSource, destination: str | Path) -> int:
        """Download *source* and extract it into *destination*.

        Raises:
            DownloadError: On any transport error, non-2xx response or
                unreadable archive. Nothing is written to *destination* when
                the response status is not successful.
        """
        return await asyncio.to_thread(self._download, source, Path(destination))

    def _download(self, source: TemplateSource, destination: Path) -> int:
        if self._client is not None:
            return self._stream_into(self._client, source, destination)
        with httpx.Client(timeout=httpx.Timeout(self.config.download_timeout)) as client:
            return self._stream_into(client, source, destination)

    def _stream_into(
        self, client: httpx.Client, source: TemplateSource, destination: Path
    ) -> int:
        url = self.archive_url(source)
        try:
            with client.stream("GET", url, follow_redirects=True) as response:
                if not response.is_success:
                    raise DownloadError(
                        f"Could not download the {source.name} repository "
                        f"(HTTP {response.status_code})",
                        repo=source.full_name,
                    )
                reader = io.BufferedReader(
                    _ChunkReader(response.iter_bytes(chunk_size=_CHUNK_SIZE)),
                    buffer_size=_CHUNK_SIZE,
                )
                return extract_archive(reader, destination)
        except httpx.HTTPError as exc:
            raise DownloadError(
                f"Could not download the {source.name} repository: {exc}",
                repo=source.full_name,
            ) from exc
        except (tarfile.TarError, EOFError, OSError) as exc:
            raise DownloadError(
                f"Could not extract the {source.name} repository: {exc}",
                repo=source.full_name,
            ) from exc
