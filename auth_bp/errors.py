"""Exception hierarchy for the auth-bp generator.

Every failure inside the composition engine is fatal for the run.  The
exceptions carry enough context (configuration field, catalog key, artifact
name, pipeline stage) to diagnose the problem without inspecting internals.
"""

from __future__ import annotations


class AuthBPError(Exception):
    """Base class for all auth-bp errors."""


class ConfigurationError(AuthBPError):
    """Raised when a configuration value is missing or unsupported."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"Invalid configuration for '{field}': {message}")


class UnknownFieldKey(AuthBPError, KeyError):
    """Raised when a builder references a field key absent from the catalog."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Unknown field key: {self.key!r}"


class MalformedDefinition(AuthBPError):
    """Raised when a renderer receives a definition it cannot represent."""

    def __init__(self, artifact: str, message: str) -> None:
        self.artifact = artifact
        super().__init__(f"Cannot render '{artifact}': {message}")


class CompositionError(AuthBPError):
    """Raised when a generation run aborts.

    Attributes:
        stage: Orchestrator state in which the failure happened.
        family: Artifact family being processed, if any.
    """

    def __init__(self, stage: str, family: str | None, message: str) -> None:
        self.stage = stage
        self.family = family
        where = f"{stage}/{family}" if family else stage
        super().__init__(f"Generation aborted during {where}: {message}")


class ScaffoldError(AuthBPError):
    """Raised when the external Nest CLI exits unsuccessfully."""

    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr}" if stderr else ""
        super().__init__(f"'nest {command}' exited with code {returncode}{detail}")
