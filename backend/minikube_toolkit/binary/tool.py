"""
CLI tool registration exposed to the host preferences page
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable

from minikube_toolkit.binary.models import InstallationSource

if TYPE_CHECKING:
    from minikube_toolkit.core.interfaces import ITaskLogger

MINIKUBE_CLI_NAME = "minikube"
MINIKUBE_DISPLAY_NAME = "Minikube"
MINIKUBE_DESCRIPTION = (
    "minikube quickly sets up a local Kubernetes cluster on macOS, Linux, and Windows. "
    "We proudly focus on helping application developers and new Kubernetes users.\n\n"
    "More information: [minikube.sigs.k8s.io](https://minikube.sigs.k8s.io/)"
)
MINIKUBE_ICON = "./icon.png"

TaskCallback = Callable[["ITaskLogger | None"], Awaitable[None]]


@dataclass
class CliToolRegistration:
    """
    Everything the host needs to list, install, update and uninstall minikube

    select_version() lets the user choose a release and returns its
    version string; do_install/do_update then act on that choice.
    """

    select_version: Callable[[], Awaitable[str]]
    do_install: TaskCallback
    do_update: TaskCallback
    do_uninstall: TaskCallback
    name: str = MINIKUBE_CLI_NAME
    display_name: str = MINIKUBE_DISPLAY_NAME
    markdown_description: str = MINIKUBE_DESCRIPTION
    images: dict[str, str] = field(default_factory=lambda: {"icon": MINIKUBE_ICON})
    version: str | None = None
    path: str | None = None
    installation_source: InstallationSource | None = None
