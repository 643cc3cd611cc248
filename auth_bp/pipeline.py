"""auth-bp generation pipeline.

Wraps the pure composition engine with everything that touches the outside
world:

Step 1: COMPOSE    -- render every artifact for the configuration.
Step 2: SCAFFOLD   -- optionally run ``nest g`` for the enabled modules.
Step 3: WRITE      -- materialize the artifacts under the output directory.
Step 4: MANIFEST   -- record the configuration in ``.auth-bp-config.json``.

The clock is read here, never inside the engine.  Regenerating from a
manifest reuses its timestamp, which makes the rerun byte-identical.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field
from rich.panel import Panel

from .config import (
    Configuration,
    Manifest,
    RunSettings,
    load_manifest,
    save_manifest,
)
from .errors import ConfigurationError, ScaffoldError
from .models import RenderedArtifact
from .nest_cli import NestCli
from .orchestrator import CompositionOrchestrator
from .utils import (
    console,
    format_duration,
    print_success,
    print_summary_table,
    print_warning,
)
from .writer import materialize

NEXT_STEPS = (
    "npm install",
    "Copy .env.example to .env.local and fill in your credentials",
    "npm run build",
    "npx prisma migrate dev",
    "npm run dev",
)


class PipelineResult(BaseModel):
    """Outcome of one pipeline run."""

    configuration: Configuration
    timestamp: str
    written: list[Path] = Field(default_factory=list)
    manifest_path: Path | None = None
    scaffolded: bool | None = Field(
        default=None, description="None when scaffolding was not requested"
    )
    duration: str = ""


class GenerationPipeline:
    """Drives one generation run end to end.

    Attributes:
        settings: Output directory and Nest CLI options.
    """

    def __init__(self, settings: RunSettings | None = None) -> None:
        self.settings = settings or RunSettings()

    async def run(
        self, config: Configuration, timestamp: str | None = None
    ) -> PipelineResult:
        """Generate, optionally scaffold, write and record one configuration.

        Raises:
            CompositionError: If the engine fails; nothing is written.
            OSError: If the output directory cannot be written.
        """
        started = time.monotonic()
        stamp = timestamp or datetime.now(timezone.utc).isoformat()
        output_dir = self.settings.output_dir

        console.print(
            Panel(
                f"[bold bright_cyan]Auth Boilerplate - NestJS Backend[/bold bright_cyan]\n"
                f"Output   : {output_dir.resolve()}\n"
                f"Database : {config.database.display_name}",
                title="[bold]Generation Start[/bold]",
                border_style="bright_cyan",
            )
        )

        # Compose before touching the filesystem so a failed run leaves no trace.
        artifacts = self.compose(config, stamp)

        scaffolded = None
        if self.settings.scaffold:
            scaffolded = await self.scaffold(config)

        written = await materialize(output_dir, artifacts)
        manifest_path = await save_manifest(
            output_dir, Manifest.from_configuration(config, stamp)
        )

        result = PipelineResult(
            configuration=config,
            timestamp=stamp,
            written=written,
            manifest_path=manifest_path,
            scaffolded=scaffolded,
            duration=format_duration(time.monotonic() - started),
        )
        self._print_summary(result)
        return result

    async def regenerate(self) -> PipelineResult:
        """Rerun with the configuration and timestamp of the saved manifest.

        Raises:
            ConfigurationError: If no manifest exists or it is invalid.
        """
        manifest = load_manifest(self.settings.output_dir)
        if manifest is None:
            raise ConfigurationError(
                "manifest", f"no manifest found at {self.settings.manifest_path}"
            )
        return await self.run(manifest.configuration(), timestamp=manifest.timestamp)

    def compose(self, config: Configuration, timestamp: str) -> list[RenderedArtifact]:
        """Render every artifact without writing anything."""
        orchestrator = CompositionOrchestrator(config, generated_at=timestamp)
        artifacts = orchestrator.run()
        print_success(f"Composed {len(artifacts)} artifacts")
        return artifacts

    async def scaffold(self, config: Configuration) -> bool:
        """Run the Nest CLI for the enabled modules; report pass/fail only."""
        cli = NestCli(self.settings.output_dir, timeout=self.settings.nest_timeout)
        version = await cli.version()
        if version is None:
            print_warning("Nest CLI not available -- skipping module scaffolding.")
            return False

        console.print(f"[cyan]Scaffolding modules with Nest CLI {version}...[/cyan]")
        try:
            specs = await cli.generate_modules(config)
        except ScaffoldError as exc:
            print_warning(f"Nest CLI scaffolding failed: {exc}")
            return False
        print_success(f"Scaffolded {len(specs)} modules: {', '.join(s.path for s in specs)}")
        return True

    def _print_summary(self, result: PipelineResult) -> None:
        print_summary_table(result.configuration.summary(), title="Configuration Summary")

        scaffold_status = {None: "skipped", True: "ok", False: "failed"}[result.scaffolded]
        console.print(
            Panel(
                "\n".join([
                    "[bold green]GENERATION SUCCEEDED[/bold green]",
                    "",
                    f"Files     : {len(result.written)}",
                    f"Manifest  : {result.manifest_path}",
                    f"Scaffold  : {scaffold_status}",
                    f"Duration  : {result.duration}",
                ]),
                title="[bold]Generation Complete[/bold]",
                border_style="bold green",
            )
        )
        console.print("[bold cyan]Next steps:[/bold cyan]")
        for number, step in enumerate(NEXT_STEPS, start=1):
            console.print(f"  {number}. {step}")
        console.print(
            "[dim]Check the .context.md files in each folder for detailed guidance.[/dim]"
        )
