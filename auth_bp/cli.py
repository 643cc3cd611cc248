"""Command-line entry point for auth-bp.

Usage::

    auth-bp                                  # interactive prompts
    auth-bp --rbac --multitenant -o ./api    # non-interactive
    auth-bp --from-manifest -o ./api         # regenerate a previous run
    auth-bp --rbac --dry-run                 # show the plan, write nothing
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.table import Table

from .config import Configuration, DatabaseVariant, RunSettings, load_manifest
from .errors import AuthBPError, ConfigurationError
from .orchestrator import CompositionOrchestrator
from .pipeline import GenerationPipeline
from .prompts import prompt_configuration
from .utils import console, print_error

_FLAGS = ("whitelabel", "rbac", "multitenant")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="auth-bp",
        description="Compose authentication boilerplate for a NestJS backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  auth-bp\n"
            "  auth-bp --database gcloud-sql --rbac -o ./api\n"
            "  auth-bp --from-manifest -o ./api\n"
        ),
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Project root to write into (default: $AUTH_BP_OUTPUT_DIR or .)",
    )
    parser.add_argument(
        "--database",
        choices=[variant.value for variant in DatabaseVariant],
        default=None,
        help="Database backend (default: supabase)",
    )
    parser.add_argument("--whitelabel", action="store_true", help="Enable whitelabeling")
    parser.add_argument("--rbac", action="store_true", help="Enable role-based access control")
    parser.add_argument("--multitenant", action="store_true", help="Enable multitenant support")
    parser.add_argument(
        "--non-interactive", "-y",
        action="store_true",
        help="Do not prompt; use the flags given on the command line",
    )
    parser.add_argument(
        "--from-manifest",
        action="store_true",
        help="Regenerate using the .auth-bp-config.json in the output directory",
    )
    parser.add_argument(
        "--scaffold",
        action="store_true",
        default=None,
        help="Run the Nest CLI to scaffold modules (default: $AUTH_BP_SCAFFOLD)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the generation plan and exit without writing",
    )
    return parser


def _settings(args: argparse.Namespace) -> RunSettings:
    settings = RunSettings.from_env()
    updates = {}
    if args.output is not None:
        updates["output_dir"] = Path(args.output)
    if args.scaffold is not None:
        updates["scaffold"] = args.scaffold
    return settings.model_copy(update=updates)


def _configuration(args: argparse.Namespace) -> Configuration:
    flags_given = args.database is not None or any(getattr(args, f) for f in _FLAGS)
    if not (args.non_interactive or flags_given):
        return prompt_configuration()
    data = {flag: getattr(args, flag) for flag in _FLAGS}
    if args.database is not None:
        data["database"] = args.database
    return Configuration.from_mapping(data)


def print_plan(config: Configuration) -> None:
    """Print the generation plan for *config* as a table."""
    plan = CompositionOrchestrator(config).plan()
    table = Table(title="Generation Plan", show_header=True, header_style="bold cyan")
    table.add_column("Path", no_wrap=True)
    table.add_column("Family", style="dim")
    table.add_column("Kind", style="dim")
    for entry in plan.entries:
        table.add_row(entry.path, entry.family.value, entry.kind.value)
    console.print(table)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``auth-bp`` / ``python -m auth_bp``."""
    args = build_parser().parse_args(argv)

    try:
        settings = _settings(args)
        pipeline = GenerationPipeline(settings)
        if args.from_manifest:
            manifest = load_manifest(settings.output_dir)
            if manifest is None:
                raise ConfigurationError(
                    "manifest", f"no manifest found at {settings.manifest_path}"
                )
            if args.dry_run:
                print_plan(manifest.configuration())
            else:
                asyncio.run(pipeline.regenerate())
            return

        config = _configuration(args)
        if args.dry_run:
            print_plan(config)
            return
        asyncio.run(pipeline.run(config))
    except AuthBPError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    except OSError as exc:
        print_error(f"Error writing output: {exc}")
        sys.exit(1)
