"""Starter assembly configuration.

Typed settings for a single ``create-starter`` run. Values are validated by
Pydantic at construction time and can be overridden from the environment
(``STARTER_*``) or from CLI flags.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_REF = "main"
DEFAULT_DEV_TOOLS = ["concurrently", "wait-on"]

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip().lower() in _TRUTHY


class StarterConfig(BaseModel):
    """Settings shared by every component of an assembly run.

    Instances are created once by the CLI entry point (or by tests) and then
    passed to ``ProjectAssembler``, ``ArchiveFetcher`` and ``ProcessRunner``.
    """

    codeload_host: str = Field(
        default="codeload.github.com",
        description="Host serving repository tarballs",
    )
    default_ref: str = Field(
        default=DEFAULT_REF, description="Branch used when the starter URL carries no ref"
    )
    scratch_prefix: str = Field(default="strapi-", description="Prefix for the scratch directory")
    dev_tools: list[str] = Field(default_factory=lambda: list(DEFAULT_DEV_TOOLS))
    commit_message: str = Field(default="Create Strapi starter project")
    admin_url: str = Field(
        default="http://localhost:1337/admin",
        description="URL the frontend waits on before starting",
    )
    download_timeout: float | None = Field(
        default=None, gt=0, description="Archive download timeout in seconds (None disables it)"
    )
    keep_scratch_on_failure: bool = Field(
        default=False,
        description="Leave the scratch directory on disk when the run fails before copying",
    )
    use_npm: bool = Field(default=False, description="Force npm even when yarn is installed")
    run_app: bool = Field(default=True, description="Launch the dev server as the final step")

    @classmethod
    def from_env(cls) -> "StarterConfig":
        """Build a ``StarterConfig`` from environment variables.

        Recognised variables (all optional):
            STARTER_CODELOAD_HOST, STARTER_DEFAULT_REF, STARTER_DOWNLOAD_TIMEOUT,
            STARTER_KEEP_SCRATCH, STARTER_USE_NPM, STARTER_RUN_APP.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("STARTER_CODELOAD_HOST"):
            kwargs["codeload_host"] = os.environ["STARTER_CODELOAD_HOST"]
        if os.environ.get("STARTER_DEFAULT_REF"):
            kwargs["default_ref"] = os.environ["STARTER_DEFAULT_REF"]
        if os.environ.get("STARTER_DOWNLOAD_TIMEOUT"):
            kwargs["download_timeout"] = float(os.environ["STARTER_DOWNLOAD_TIMEOUT"])

        flags = {
            "keep_scratch_on_failure": _env_flag("STARTER_KEEP_SCRATCH"),
            "use_npm": _env_flag("STARTER_USE_NPM"),
            "run_app": _env_flag("STARTER_RUN_APP"),
        }
        kwargs.update({key: value for key, value in flags.items() if value is not None})

        return cls(**kwargs)
