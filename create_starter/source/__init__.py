"""Starter source handling.

Locates a starter repository from its URL, downloads and extracts its
archive, and reads the ``starter.json`` descriptor it ships.

Key classes:
    TemplateSource     - Parsed ``owner/repo#ref`` identity of a starter
    ArchiveFetcher     - Tarball download and top-level-stripping extraction
    StarterDescriptor  - Validated ``starter.json`` contents
"""

from .descriptor import STARTER_FILE, StarterDescriptor, read_starter_json
from .fetcher import ArchiveFetcher, extract_archive
from .locator import TemplateSource, parse_repo_url

__all__ = [
    # Locator
    "TemplateSource",
    "parse_repo_url",
    # Fetcher
    "ArchiveFetcher",
    "extract_archive",
    # Descriptor
    "StarterDescriptor",
    "STARTER_FILE",
    "read_starter_json",
]
