"""Wrapper around the host project's Nest CLI.

Generates module/controller/service boilerplate with ``nest g ...`` before
the composed artifacts are written.  The generator only cares whether each
command succeeded; output is not parsed beyond ``--version``.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from .builders import ALWAYS, MULTITENANT, RBAC, Predicate
from .config import Configuration
from .errors import ScaffoldError
from .utils import run_command


@dataclass(frozen=True)
class ModuleSpec:
    """One Nest module to scaffold."""

    name: str
    path: str
    controller: bool = True
    service: bool = True


# (predicate, module) in scaffolding order.
MODULES: tuple[tuple[Predicate, ModuleSpec], ...] = (
    (ALWAYS, ModuleSpec("Auth", "auth")),
    (ALWAYS, ModuleSpec("Database", "database", controller=False)),
    (RBAC, ModuleSpec("RBAC", "rbac")),
    (MULTITENANT, ModuleSpec("Tenant", "tenant")),
)


def modules_for(config: Configuration) -> list[ModuleSpec]:
    """Modules to scaffold for *config*."""
    return [spec for predicate, spec in MODULES if predicate(config)]


def _default_executable() -> list[str]:
    return ["nest.cmd"] if sys.platform == "win32" else ["nest"]


class NestCli:
    """Runs ``nest`` commands inside a project directory.

    Args:
        project_root: Directory containing the Nest project.
        timeout: Per-command timeout in seconds.
        use_npx: Invoke through ``npx nest`` instead of a global ``nest``.
    """

    def __init__(
        self,
        project_root: str | Path,
        timeout: int = 120,
        use_npx: bool = False,
    ) -> None:
        self.project_root = Path(project_root)
        self.timeout = timeout
        self.executable = ["npx", "nest"] if use_npx else _default_executable()

    async def run(self, *args: str) -> str:
        """Run ``nest <args>`` and return stdout.

        Raises:
            ScaffoldError: On a non-zero exit, a timeout or a missing binary.
        """
        rc, stdout, stderr = await run_command(
            [*self.executable, *args], cwd=self.project_root, timeout=self.timeout
        )
        if rc != 0:
            raise ScaffoldError(" ".join(args), rc, stderr)
        return stdout

    async def is_available(self) -> bool:
        return await self.version() is not None

    async def version(self) -> str | None:
        """Installed CLI version, or ``None`` when the CLI cannot run."""
        try:
            output = await self.run("--version")
        except ScaffoldError:
            return None
        return output or None

    async def generate_module(self, spec: ModuleSpec) -> list[str]:
        """Generate the module and, if requested, its controller and service.

        Returns:
            The commands that were run, in order.
        """
        commands = [("g", "module", spec.path)]
        if spec.controller:
            commands.append(("g", "controller", spec.path))
        if spec.service:
            commands.append(("g", "service", spec.path))

        for command in commands:
            await self.run(*command)
        return [" ".join(command) for command in commands]

    async def generate_modules(self, config: Configuration) -> list[ModuleSpec]:
        """Scaffold every module enabled by *config*, sequentially."""
        specs = modules_for(config)
        for spec in specs:
            await self.generate_module(spec)
        return specs
