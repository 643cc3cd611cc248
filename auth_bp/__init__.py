"""auth-bp: authentication boilerplate composition engine for NestJS backends."""

from .config import Configuration, DatabaseVariant, Manifest
from .orchestrator import CompositionOrchestrator, compose

__version__ = "1.0.0"

__all__ = [
    "CompositionOrchestrator",
    "Configuration",
    "DatabaseVariant",
    "Manifest",
    "compose",
]
