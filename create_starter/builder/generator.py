"""Backend generation capability.

The backend of a starter project is produced by an external app generator.
``ProjectAssembler`` only depends on the ``AppGenerator`` protocol; the
default implementation shells out to ``create-strapi-app`` through the
configured package manager.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field

from .process import ProcessRunner


class RunConfiguration(BaseModel):
    """Options handed to the app generator.

    The assembler mutates this in place (``template``, ``run``,
    ``quickstart``) before invoking the generator.
    """

    template: str | None = Field(default=None, description="Backend template to apply")
    run: bool = Field(default=True, description="Start the backend once generated")
    quickstart: bool = Field(default=False, description="Non-interactive install with defaults")
    use_npm: bool = Field(default=False)
    debug: bool = Field(default=False)


class AppGenerator(Protocol):
    async def __call__(self, path: Path, options: RunConfiguration) -> None: ...


class CreateAppGenerator:
    """Generates the backend with the package manager's ``create strapi-app``."""

    def __init__(self, runner: ProcessRunner):
        self.runner = runner

    @staticmethod
    def build_args(options: RunConfiguration) -> list[str]:
        args: list[str] = []
        if options.quickstart:
            args.append("--quickstart")
        if not options.run:
            args.append("--no-run")
        if options.template:
            args.extend(["--template", options.template])
        if options.use_npm:
            args.append("--use-npm")
        if options.debug:
            args.append("--debug")
        return args

    async def __call__(self, path: Path, options: RunConfiguration) -> None:
        target = Path(path).resolve()
        command = self.runner.package_manager.create_app_command(target, self.build_args(options))
        # create-strapi-app refuses a pre-existing target, so run from its parent.
        target.parent.mkdir(parents=True, exist_ok=True)
        await self.runner.run(command, target.parent, inherit=True)
