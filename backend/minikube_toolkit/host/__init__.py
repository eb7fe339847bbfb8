"""
Host adapters - collaborator implementations for running without a desktop host
"""

from minikube_toolkit.host.local import (
    CliContainerEngine,
    ConsoleTaskLogger,
    ConsoleWindow,
    InMemoryProvider,
    LocalCliTool,
    LocalHost,
)

__all__ = [
    "CliContainerEngine",
    "ConsoleTaskLogger",
    "ConsoleWindow",
    "InMemoryProvider",
    "LocalCliTool",
    "LocalHost",
]
