"""Package-manager and git subprocess execution.

``ProcessRunner`` wraps every external command a starter run needs: frontend
installs, dev-tool installation, the dev server, ``git init`` and the initial
commit. The package manager is chosen once (``detect_package_manager``) and
injected, so both backends can be exercised without touching ``PATH``.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from rich.markup import escape

from create_starter.config import StarterConfig
from create_starter.errors import ProcessError
from create_starter.utils import print_warning

OutputCallback = Callable[[str], None]

_INSTALL_ARGS = ["install", "--production", "--no-optional"]
_READ_SIZE = 4096
_STDERR_TAIL = 2000


class PackageManager(str, Enum):
    """The two interchangeable Node package managers."""

    YARN = "yarn"
    NPM = "npm"

    def install_command(self) -> list[str]:
        return [self.value, *_INSTALL_ARGS]

    def add_command(self, packages: Sequence[str]) -> list[str]:
        if self is PackageManager.YARN:
            return ["yarn", "add", *packages]
        return ["npm", "install", "--save", *packages]

    def run_script_command(self, script: str) -> list[str]:
        if self is PackageManager.YARN:
            return ["yarn", script]
        return ["npm", "run", script]

    def create_app_command(self, path: str | Path, args: Sequence[str] = ()) -> list[str]:
        if self is PackageManager.YARN:
            return ["yarn", "create", "strapi-app", str(path), *args]
        return ["npx", "create-strapi-app@latest", str(path), *args]

    def script_invocation(self, script: str) -> str:
        """Shell form used inside ``package.json`` scripts."""
        return " ".join(self.run_script_command(script))


def detect_package_manager(prefer_npm: bool = False) -> PackageManager:
    """Return yarn when it is on ``PATH`` (and npm is not forced), npm otherwise."""
    if not prefer_npm and shutil.which("yarn"):
        return PackageManager.YARN
    return PackageManager.NPM


@dataclass
class StepOutcome:
    """Result of a step whose failure must not abort the run."""

    name: str
    warning: str | None = None

    @property
    def ok(self) -> bool:
        return self.warning is None


class ProcessRunner:
    """Runs package-manager and git commands inside a project directory."""

    def __init__(self, package_manager: PackageManager, config: StarterConfig | None = None):
        self.package_manager = package_manager
        self.config = config or StarterConfig()

    # -- Generic execution -------------------------------------------------

    async def run(
        self,
        cmd: Sequence[str],
        cwd: str | Path,
        *,
        inherit: bool = False,
        on_output: OutputCallback | None = None,
    ) -> str:
        """Run *cmd* in *cwd* and return its captured stdout.

        Args:
            cmd: Program and arguments.
            cwd: Working directory.
            inherit: Share the terminal's stdin/stdout/stderr with the child
                (nothing is captured).
            on_output: When given, stdin is closed, stderr is merged into
                stdout and each chunk read is passed to this callback.

        Raises:
            ProcessError: If the program cannot be started or exits non-zero.
        """
        argv = [str(part) for part in cmd]
        cmd_str = " ".join(argv)

        if inherit:
            pipes = {}
        elif on_output is not None:
            pipes = {
                "stdin": asyncio.subprocess.DEVNULL,
                "stdout": asyncio.subprocess.PIPE,
                "stderr": asyncio.subprocess.STDOUT,
            }
        else:
            pipes = {
                "stdout": asyncio.subprocess.PIPE,
                "stderr": asyncio.subprocess.PIPE,
            }

        try:
            process = await asyncio.create_subprocess_exec(*argv, cwd=str(cwd), **pipes)
        except OSError as exc:
            raise ProcessError(
                f"Could not start {argv[0]}: {exc}",
                command=cmd_str,
                returncode=127,
            ) from exc

        if inherit:
            await process.wait()
            stdout, stderr = "", ""
        elif on_output is not None:
            stdout = await self._pump(process, on_output)
            await process.wait()
            stderr = stdout
        else:
            stdout_bytes, stderr_bytes = await process.communicate()
            stdout = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
            stderr = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()

        if process.returncode != 0:
            tail = stderr[-_STDERR_TAIL:]
            raise ProcessError(
                f"Command failed (exit {process.returncode}): {cmd_str}"
                + (f"\n{tail}" if tail else ""),
                command=cmd_str,
                returncode=process.returncode,
                stderr=tail,
            )
        return stdout

    @staticmethod
    async def _pump(process: asyncio.subprocess.Process, on_output: OutputCallback) -> str:
        assert process.stdout is not None  # guaranteed by PIPE
        collected: list[str] = []
        while True:
            chunk = await process.stdout.read(_READ_SIZE)
            if not chunk:
                break
            text = chunk.decode("utf-8", errors="replace")
            collected.append(text)
            on_output(text)
        return "".join(collected).strip()

    # -- Package manager -----------------------------------------------------

    async def install_dependencies(
        self, path: str | Path, on_output: OutputCallback | None = None
    ) -> None:
        """Install production dependencies (no optional ones) in *path*."""
        await self.run(
            self.package_manager.install_command(),
            path,
            on_output=on_output or (lambda _chunk: None),
        )

    async def add_dev_tools(self, path: str | Path) -> None:
        """Add the process-runner and port-wait utilities to *path*."""
        await self.run(self.package_manager.add_command(self.config.dev_tools), path)

    async def run_dev_server(self, path: str | Path) -> None:
        """Run the ``develop`` script attached to the terminal until it exits."""
        await self.run(self.package_manager.run_script_command("develop"), path, inherit=True)

    # -- Git ---------------------------------------------------------------

    async def init_repository(self, path: str | Path) -> None:
        await self.run(["git", "init"], path)

    async def commit_all(self, path: str | Path) -> StepOutcome:
        """Stage everything and create the initial commit.

        A failure (for example, no git identity configured) is reported
        as a warning outcome instead of raising.
        """
        try:
            await self.run(["git", "add", "-A"], path)
            await self.run(["git", "commit", "-m", self.config.commit_message], path)
        except ProcessError as exc:
            print_warning(f"Could not create the initial git commit: {escape(str(exc))}")
            return StepOutcome(name="commit", warning=str(exc))
        return StepOutcome(name="commit")
