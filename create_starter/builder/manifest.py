"""Root ``package.json`` generation for assembled starter projects."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field

from create_starter.errors import FilesystemError

from .process import PackageManager

MANIFEST_FILE = "package.json"


class ProjectManifest(BaseModel):
    """The monorepo ``package.json`` tying backend and frontend together."""

    name: str
    scripts: dict[str, str] = Field(default_factory=dict)


def build_manifest(
    name: str,
    package_manager: PackageManager,
    admin_url: str = "http://localhost:1337/admin",
) -> ProjectManifest:
    """Build the manifest whose ``develop`` script runs both apps concurrently.

    The frontend waits for the backend admin panel to answer before it
    starts.
    """
    develop = package_manager.script_invocation("develop")
    # npm only forwards script arguments after a "--" separator.
    open_flag = "--open" if package_manager is PackageManager.YARN else "-- --open"
    return ProjectManifest(
        name=name,
        scripts={
            "dev:backend": f"cd backend && {develop}",
            "dev:frontend": f"wait-on {admin_url} && cd frontend && {develop} {open_flag}",
            "develop": (
                f'concurrently "{package_manager.script_invocation("dev:backend")}" '
                f'"{package_manager.script_invocation("dev:frontend")}"'
            ),
        },
    )


def write_manifest(root: str | Path, manifest: ProjectManifest) -> Path:
    """Write *manifest* to ``<root>/package.json`` and return the file path."""
    target = Path(root) / MANIFEST_FILE
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            json.dumps(manifest.model_dump(), indent=2) + "\n", encoding="utf-8"
        )
    except OSError as exc:
        raise FilesystemError(f"Could not write {target}: {exc}", path=target) from exc
    return target
