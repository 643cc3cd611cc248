"""Interactive configuration prompts."""

from __future__ import annotations

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .config import Configuration, DatabaseVariant
from .utils import console as default_console


def prompt_configuration(console: Console | None = None) -> Configuration:
    """Ask for the database backend and the three feature flags.

    Every flag defaults to off and the database to ``supabase``, so pressing
    enter through the prompts yields the minimal configuration.
    """
    console = console or default_console
    console.print("\n[bold cyan]Auth Boilerplate - NestJS Backend[/bold cyan]\n")
    for variant in DatabaseVariant:
        console.print(f"  [cyan]{variant.value}[/cyan] - {variant.display_name}")

    database = Prompt.ask(
        "Which database are you using?",
        choices=[variant.value for variant in DatabaseVariant],
        default=DatabaseVariant.SUPABASE.value,
        console=console,
    )
    whitelabel = Confirm.ask("Enable whitelabeling?", default=False, console=console)
    rbac = Confirm.ask(
        "Enable RBAC (Role-Based Access Control)?", default=False, console=console
    )
    multitenant = Confirm.ask(
        "Enable multitenant support?", default=False, console=console
    )
    return Configuration.from_mapping(
        {
            "database": database,
            "whitelabel": whitelabel,
            "rbac": rbac,
            "multitenant": multitenant,
        }
    )
