"""
Minikube Toolkit

Lifecycle manager for the minikube command-line tool: detects, installs,
updates and uninstalls the binary, and keeps the local clusters it runs in
sync with a container-engine backed provider.
"""

__version__ = "0.4.0"
__author__ = "Minikube Toolkit contributors"
__license__ = "Apache-2.0"

from minikube_toolkit.binary.controller import MinikubeCliController
from minikube_toolkit.binary.models import CliState, InstallationSource, ManagedBinary
from minikube_toolkit.clusters.reconciler import ClusterReconciler
from minikube_toolkit.images.mover import ImageMover

__all__ = [
    "MinikubeCliController",
    "ManagedBinary",
    "CliState",
    "InstallationSource",
    "ClusterReconciler",
    "ImageMover",
]
