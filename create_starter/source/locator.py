"""Starter URL parsing.

Turns the starter identifier given on the command line into a
``TemplateSource``. Supported shapes::

    https://github.com/owner/repo
    https://github.com/owner/repo.git#ref
    https://github.com/owner/repo/tree/ref
    git@github.com:owner/repo.git#ref
    github.com/owner/repo
    owner/repo#ref
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from create_starter.config import DEFAULT_REF
from create_starter.errors import ParseError

DEFAULT_HOST = "github.com"

_SCP_RE = re.compile(r"^(?:[\w.-]+@)?(?P<host>[\w.-]+):(?P<path>[^/].*)$")
_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class TemplateSource:
    """A starter repository resolved from its URL."""

    host: str
    owner: str
    name: str
    ref: str = DEFAULT_REF

    @property
    def full_name(self) -> str:
        """``owner/repo`` as used by the hosting provider."""
        return f"{self.owner}/{self.name}"


def _split_host_and_path(raw: str) -> tuple[str, str]:
    if "://" in raw:
        parts = urlsplit(raw)
        return parts.hostname or "", parts.path

    match = _SCP_RE.match(raw)
    if match:
        return match.group("host"), match.group("path")

    segments = raw.strip("/").split("/")
    # "github.com/owner/repo" carries its own host; "owner/repo" does not.
    if len(segments) >= 3 and "." in segments[0]:
        return segments[0], "/".join(segments[1:])
    return DEFAULT_HOST, raw


def parse_repo_url(url: str, default_ref: str = DEFAULT_REF) -> TemplateSource:
    """Parse a starter URL into a ``TemplateSource``.

    Args:
        url: Repository URL, optionally suffixed with ``#ref``.
        default_ref: Branch used when the URL does not name one.

    Returns:
        The parsed source. No network access is performed, so an absent ref
        always resolves to *default_ref* even for repositories whose default
        branch has another name.

    Raises:
        ParseError: If host, owner and repository cannot be extracted.
    """
    raw = (url or "").strip()
    if not raw:
        raise ParseError("Starter URL is empty")

    raw, _, fragment = raw.partition("#")
    ref = fragment.strip() or None

    host, path = _split_host_and_path(raw)
    segments = [segment for segment in path.strip("/").split("/") if segment]
    if not host or len(segments) < 2:
        raise ParseError(f"Could not parse starter URL: {url}")

    owner, name = segments[0], segments[1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not _NAME_RE.match(owner) or not _NAME_RE.match(name):
        raise ParseError(f"Could not parse starter URL: {url}")

    if ref is None and len(segments) >= 4 and segments[2] == "tree":
        ref = "/".join(segments[3:])

    return TemplateSource(host=host, owner=owner, name=name, ref=ref or default_ref)
