"""
Host collaborator protocols

The toolkit runs embedded in a host application that owns the provider
registry, the container engine connection, notifications and the CLI tool
preferences page. These protocols describe that boundary; host/local.py
implements them for standalone use.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol, Sequence

from minikube_toolkit.core.events import Disposable

if TYPE_CHECKING:
    from minikube_toolkit.binary.models import ManagedBinary
    from minikube_toolkit.binary.tool import CliToolRegistration
    from minikube_toolkit.clusters.models import ContainerInfo, ProviderConnection
    from minikube_toolkit.process.cancellation import CancellationToken


class ITaskLogger(Protocol):
    """Per-operation logger supplied by the host (install dialog, task panel)"""

    def log(self, message: str) -> None:
        ...

    def warn(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class IWindow(Protocol):
    """User-facing notifications and prompts"""

    async def show_information_message(self, message: str) -> None:
        ...

    async def show_error_message(self, message: str) -> None:
        ...

    async def show_quick_pick(self, items: Sequence[Any], placeholder: str = "") -> Any | None:
        """
        Let the user pick one item

        Returns:
            The chosen item, or None if the user cancelled
        """
        ...


class IContainerEngine(Protocol):
    """Container engine API (podman or docker)"""

    async def list_containers(self) -> list["ContainerInfo"]:
        ...

    async def save_image(self, engine_id: str, image_ref: str, destination: str) -> None:
        ...

    def on_event(self, callback: Callable[[dict], Awaitable[None] | None]) -> Disposable:
        """Subscribe to engine events; each event carries at least a 'Type' key"""
        ...


ConnectionFactory = Callable[[dict[str, Any], "ITaskLogger | None", "CancellationToken | None"], Awaitable[None]]


class IProvider(Protocol):
    """Host provider holding Kubernetes connections"""

    def register_connection(self, connection: "ProviderConnection") -> Disposable:
        ...

    def set_connection_factory(self, factory: ConnectionFactory, display_name: str) -> Disposable:
        ...

    def dispose(self) -> None:
        ...


class ICliTool(Protocol):
    """Host-side handle of the registered CLI tool"""

    def update_version(self, binary: "ManagedBinary") -> None:
        ...

    def register_update(self, version: str, do_update: Callable[["ITaskLogger | None"], Awaitable[None]]) -> Disposable:
        ...

    def dispose(self) -> None:
        ...


class IHost(Protocol):
    """Everything the extension needs from its host application"""

    storage_path: Path
    window: IWindow
    container_engine: IContainerEngine

    def create_provider(self, options: dict[str, Any]) -> IProvider:
        ...

    def create_cli_tool(self, registration: "CliToolRegistration") -> ICliTool:
        ...

    def register_command(self, command_id: str, callback: Callable[..., Awaitable[Any]]) -> Disposable:
        ...

    def on_container_connection_change(self, callback: Callable[[], Awaitable[None]]) -> Disposable:
        """Fires when a container provider connection is registered, unregistered or updated"""
        ...

    def on_provider_update(self, callback: Callable[[], Awaitable[None]]) -> Disposable:
        ...
