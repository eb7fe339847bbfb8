"""
minikube binary lifecycle - locate, install, update, uninstall
"""

from minikube_toolkit.binary.controller import MinikubeCliController
from minikube_toolkit.binary.installer import BinaryInstaller
from minikube_toolkit.binary.locator import BinaryLocator
from minikube_toolkit.binary.models import CliState, InstallationSource, InstallResult, ManagedBinary
from minikube_toolkit.binary.tool import CliToolRegistration

__all__ = [
    "BinaryInstaller",
    "BinaryLocator",
    "CliState",
    "CliToolRegistration",
    "InstallResult",
    "InstallationSource",
    "ManagedBinary",
    "MinikubeCliController",
]
