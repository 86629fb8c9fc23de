"""
EventDesk CLI adapter.
Thin interactive shell over engines/catalog.
"""

from adapters.cli.shell import Shell, main
from adapters.cli.wiring import build_service, configure_logging

__all__ = [
    "Shell",
    "main",
    "build_service",
    "configure_logging",
]
