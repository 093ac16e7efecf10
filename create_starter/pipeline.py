"""create-starter assembly orchestrator.

Builds a full-stack project from a starter repository:

1. Parse the starter URL and download its archive into a scratch directory.
2. Read ``starter.json`` and copy the starter's ``frontend/`` into the project.
3. Install the frontend dependencies.
4. Generate the backend from the template named in ``starter.json``.
5. Write the root ``package.json`` and ``.gitignore``, add the dev tools,
   initialise git and create the first commit.
6. Launch the development server.

Usage::

    create-starter my-project https://github.com/strapi/strapi-starter-next-blog
    python -m create_starter.pipeline my-project owner/repo#branch --use-npm
"""

from __future__ import annotations

import asyncio
import shutil
import sys
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path

from rich.markup import escape

from create_starter.builder import (
    AppGenerator,
    CreateAppGenerator,
    ProcessRunner,
    RunConfiguration,
    StepOutcome,
    build_manifest,
    detect_package_manager,
    write_manifest,
)
from create_starter.config import StarterConfig
from create_starter.errors import DownloadError, FilesystemError, StarterError
from create_starter.source import (
    ArchiveFetcher,
    StarterDescriptor,
    TemplateSource,
    parse_repo_url,
    read_starter_json,
)
from create_starter.utils import (
    console,
    copy_tree,
    create_progress,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    remove_tree,
    single_line,
)

GITIGNORE_RESOURCE = Path(__file__).parent / "resources" / "gitignore"

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class AssemblyResult:
    """What a completed assembly produced."""

    project_root: Path
    source: TemplateSource
    descriptor: StarterDescriptor
    outcomes: list[StepOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def warnings(self) -> list[str]:
        return [outcome.warning for outcome in self.outcomes if outcome.warning]


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------


class ProjectAssembler:
    """Sequences download, copy, install, generation and git setup.

    Every step is awaited before the next begins. Fatal steps raise a
    ``StarterError`` subclass and leave any partially assembled project on
    disk; the ``.gitignore`` copy and the initial commit are recorded as
    ``StepOutcome`` warnings instead.

    Attributes:
        config: Run configuration.
        runner: Package-manager / git executor.
        generator: Capability that produces ``<project>/backend``.
        fetcher: Starter archive downloader.
    """

    def __init__(
        self,
        config: StarterConfig,
        runner: ProcessRunner,
        generator: AppGenerator | None = None,
        fetcher: ArchiveFetcher | None = None,
        gitignore_path: Path = GITIGNORE_RESOURCE,
    ) -> None:
        self.config = config
        self.runner = runner
        self.generator = generator or CreateAppGenerator(runner)
        self.fetcher = fetcher or ArchiveFetcher(config)
        self.gitignore_path = Path(gitignore_path)

    async def assemble(
        self,
        project_name: str,
        starter_url: str,
        options: RunConfiguration | None = None,
    ) -> AssemblyResult:
        """Assemble *project_name* from the starter at *starter_url*.

        Args:
            project_name: Target directory (relative paths resolve against
                the current working directory).
            starter_url: Starter repository URL, optionally ``#ref``-suffixed.
            options: Generator options; mutated in place before the backend
                is generated.

        Returns:
            An ``AssemblyResult``. When ``config.run_app`` is set this only
            returns once the dev server exits.
        """
        started = time.monotonic()
        if options is None:
            options = RunConfiguration(use_npm=self.config.use_npm)

        source = parse_repo_url(starter_url, default_ref=self.config.default_ref)
        project_root = Path(project_name).resolve()
        frontend_dir = project_root / "frontend"

        descriptor = await self._prepare_frontend(source, frontend_dir)
        console.print(
            f"Creating starter frontend at [green]{escape(str(frontend_dir))}[/green]."
        )

        await self._install_frontend(source, frontend_dir)

        options.template = descriptor.template
        options.run = False
        options.quickstart = True
        await self.generator(Path(project_name) / "backend", options)

        write_manifest(
            project_root,
            build_manifest(project_root.name, self.runner.package_manager, self.config.admin_url),
        )

        outcomes: list[StepOutcome] = []
        with create_progress() as progress:
            progress.add_task("Setting up the starter", total=None)
            outcomes.append(await asyncio.to_thread(self._copy_gitignore, project_root))
            await self.runner.add_dev_tools(project_root)
            await self.runner.init_repository(project_root)
            outcomes.append(await self.runner.commit_all(project_root))

        result = AssemblyResult(
            project_root=project_root,
            source=source,
            descriptor=descriptor,
            outcomes=outcomes,
            duration_seconds=time.monotonic() - started,
        )
        print_summary_table(
            {
                "Project": str(project_root),
                "Starter": f"{source.full_name}#{source.ref}",
                "Template": descriptor.template,
                "Package manager": self.runner.package_manager.value,
                "Warnings": str(len(result.warnings)),
                "Duration": format_duration(result.duration_seconds),
            },
            title="Starter Ready",
        )

        if self.config.run_app:
            print_success("Starting the app")
            await self.runner.run_dev_server(project_root)

        return result

    # -- Steps -------------------------------------------------------------

    async def _prepare_frontend(
        self, source: TemplateSource, frontend_dir: Path
    ) -> StarterDescriptor:
        """Download the starter, read its descriptor and copy its frontend out.

        The scratch directory is always removed once the frontend is copied.
        If a step fails first, it is removed too unless
        ``config.keep_scratch_on_failure`` is set.
        """
        scratch = Path(await asyncio.to_thread(tempfile.mkdtemp, prefix=self.config.scratch_prefix))
        try:
            await self.fetcher.fetch(source, scratch)
            descriptor = read_starter_json(scratch)
            await asyncio.to_thread(copy_tree, scratch / "frontend", frontend_dir)
        except Exception:
            self._discard_scratch(scratch)
            raise

        await asyncio.to_thread(remove_tree, scratch)
        return descriptor

    def _discard_scratch(self, scratch: Path) -> None:
        if self.config.keep_scratch_on_failure:
            print_warning(f"Scratch directory kept for inspection: {escape(str(scratch))}")
            return
        shutil.rmtree(scratch, ignore_errors=True)

    async def _install_frontend(self, source: TemplateSource, frontend_dir: Path) -> None:
        console.print(f"Installing [yellow]{escape(source.full_name)}[/yellow] starter")
        prefix = "[yellow]Installing dependencies:[/yellow]"

        with create_progress() as progress:
            task = progress.add_task(prefix, total=None)

            def show(chunk: str) -> None:
                line = single_line(chunk)
                if line:
                    progress.update(task, description=f"{prefix} {escape(line)}")

            await self.runner.install_dependencies(frontend_dir, on_output=show)

        console.print("Dependencies installed [green]successfully[/green].")

    def _copy_gitignore(self, project_root: Path) -> StepOutcome:
        try:
            shutil.copyfile(self.gitignore_path, project_root / ".gitignore")
        except OSError as exc:
            print_warning(f"Could not add .gitignore: {escape(str(exc))}")
            return StepOutcome(name="gitignore", warning=str(exc))
        return StepOutcome(name="gitignore")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _report(exc: StarterError) -> None:
    print_error(f"Error: {escape(str(exc))}")
    if isinstance(exc, DownloadError) and exc.repo:
        console.print(f"  Repository: [yellow]{escape(exc.repo)}[/yellow]")
    elif isinstance(exc, FilesystemError) and exc.path:
        console.print(f"  Path: [yellow]{escape(exc.path)}[/yellow]")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``create-starter``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="create-starter",
        description="Create a full-stack project from a starter repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-starter my-blog https://github.com/strapi/strapi-starter-next-blog\n"
            "  create-starter my-blog strapi/strapi-starter-next-blog#v2 --use-npm\n"
        ),
    )
    parser.add_argument("directory", help="Directory of the new project")
    parser.add_argument("starter_url", help="Starter repository URL (optionally #ref)")
    parser.add_argument("--use-npm", action="store_true", help="Use npm even if yarn is installed")
    parser.add_argument("--debug", action="store_true", help="Pass --debug to the app generator")
    parser.add_argument(
        "--no-run", action="store_true", help="Do not start the dev server when done"
    )
    parser.add_argument(
        "--keep-scratch",
        action="store_true",
        help="Keep the download directory if the run fails before copying",
    )

    args = parser.parse_args(argv)

    config = StarterConfig.from_env()
    if args.use_npm:
        config.use_npm = True
    if args.no_run:
        config.run_app = False
    if args.keep_scratch:
        config.keep_scratch_on_failure = True

    runner = ProcessRunner(detect_package_manager(prefer_npm=config.use_npm), config)
    assembler = ProjectAssembler(config, runner)
    options = RunConfiguration(use_npm=config.use_npm, debug=args.debug)

    try:
        asyncio.run(assembler.assemble(args.directory, args.starter_url, options))
    except StarterError as exc:
        _report(exc)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("[dim]Interrupted.[/dim]")
        sys.exit(130)


if __name__ == "__main__":
    main()
