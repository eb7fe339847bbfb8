"""
Standalone host

Implements the host collaborator protocols without a desktop application:
containers come from the podman/docker CLIs, notifications and prompts go
to a rich console, connections live in memory. Used by the command line.
"""

import asyncio
import json
import logging
import shutil
from pathlib import Path
from typing import Any, Awaitable, Callable, Sequence

import click
from rich.console import Console
from rich.markup import escape

from minikube_toolkit.binary.models import ManagedBinary
from minikube_toolkit.binary.tool import CliToolRegistration
from minikube_toolkit.clusters.models import ContainerInfo, PortBinding, ProviderConnection
from minikube_toolkit.core.events import Disposable, EventEmitter
from minikube_toolkit.core.exceptions import ExternalProcessError, InvalidArgumentError
from minikube_toolkit.core.interfaces import ConnectionFactory, ITaskLogger
from minikube_toolkit.process.executor import ProcessExecutor

logger = logging.getLogger(__name__)

SUPPORTED_ENGINES = ("podman", "docker")


def container_from_inspect(data: dict[str, Any], engine: str) -> ContainerInfo:
    """
    Map `<engine> inspect` output (same shape for podman and docker) to ContainerInfo

    NetworkSettings.Ports looks like {"8443/tcp": [{"HostIp": "127.0.0.1", "HostPort": "55000"}]}.
    """
    ports: list[PortBinding] = []
    for key, bindings in ((data.get("NetworkSettings") or {}).get("Ports") or {}).items():
        private_port, _, protocol = key.partition("/")
        for binding in bindings or []:
            host_port = binding.get("HostPort")
            ports.append(
                PortBinding(
                    private_port=int(private_port),
                    public_port=int(host_port) if host_port else None,
                    type=protocol or "tcp",
                    ip=binding.get("HostIp", ""),
                )
            )

    state = data.get("State") or {}
    return ContainerInfo(
        id=data.get("Id", ""),
        labels=dict((data.get("Config") or {}).get("Labels") or {}),
        state=state.get("Status", "") if isinstance(state, dict) else str(state),
        ports=ports,
        engine_id=engine,
        engine_type=engine,
    )


class ConsoleTaskLogger:
    """Task logger printing to the console and the module log"""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def log(self, message: str) -> None:
        logger.info(message)
        self.console.print(f"  {message}", markup=False, highlight=False)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.console.print(f"[yellow]  {escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        logger.error(message)
        self.console.print(f"[red]  {escape(message)}[/red]")


class ConsoleWindow:
    """Notifications and numbered quick picks on a rich console"""

    def __init__(self, console: Console | None = None, interactive: bool = True):
        self.console = console or Console()
        self.interactive = interactive

    async def show_information_message(self, message: str) -> None:
        self.console.print(f"[green]{escape(message)}[/green]")

    async def show_error_message(self, message: str) -> None:
        self.console.print(f"[bold red]{escape(message)}[/bold red]")

    async def show_quick_pick(self, items: Sequence[Any], placeholder: str = "") -> Any | None:
        if not items or not self.interactive:
            return None

        self.console.print(f"[bold cyan]{placeholder or 'Select an item'}[/bold cyan]")
        for index, item in enumerate(items, start=1):
            self.console.print(f"  {index}. {escape(str(item))}")
        self.console.print("  0. Cancel")

        choice = await asyncio.to_thread(click.prompt, "Choice", type=click.IntRange(0, len(items)))
        if choice == 0:
            return None
        return items[choice - 1]


class CliContainerEngine:
    """
    Container engine backed by the podman and docker CLIs

    engine_id of each container is the engine name ('podman' / 'docker').
    """

    def __init__(self, executor: ProcessExecutor, engines: Sequence[str] = SUPPORTED_ENGINES):
        self.executor = executor
        self.engines = list(engines)
        self._events: EventEmitter[dict] = EventEmitter("container-engine")

    def available_engines(self) -> list[str]:
        return [engine for engine in self.engines if shutil.which(engine)]

    async def list_containers(self) -> list[ContainerInfo]:
        containers: list[ContainerInfo] = []
        for engine in self.available_engines():
            try:
                containers.extend(await self._list_engine_containers(engine))
            except ExternalProcessError as e:
                logger.warning(f"Cannot list {engine} containers: {e.message}")
        return containers

    async def _list_engine_containers(self, engine: str) -> list[ContainerInfo]:
        ids_result = await self.executor.exec(engine, ["ps", "-a", "-q", "--no-trunc"])
        container_ids = ids_result.stdout.split()
        if not container_ids:
            return []

        inspect_result = await self.executor.exec(engine, ["inspect", *container_ids])
        return [container_from_inspect(item, engine) for item in json.loads(inspect_result.stdout or "[]")]

    async def save_image(self, engine_id: str, image_ref: str, destination: str) -> None:
        if engine_id not in self.engines:
            raise InvalidArgumentError(f"Unknown container engine: {engine_id}")
        await self.executor.exec(engine_id, ["save", "-o", destination, image_ref])

    def on_event(self, callback: Callable[[dict], Awaitable[None] | None]) -> Disposable:
        return self._events.subscribe(callback)

    async def notify_event(self, event: dict) -> None:
        """Deliver an engine event (e.g. {'Type': 'container'}) to subscribers."""
        await self._events.fire(event)


class InMemoryProvider:
    """Provider keeping registered connections in a dict"""

    def __init__(self, options: dict[str, Any]):
        self.options = options
        self.connections: dict[str, ProviderConnection] = {}
        self.connection_factory: ConnectionFactory | None = None
        self.factory_display_name = ""

    def register_connection(self, connection: ProviderConnection) -> Disposable:
        self.connections[connection.name] = connection

        def _unregister() -> None:
            if self.connections.get(connection.name) is connection:
                del self.connections[connection.name]

        return Disposable(_unregister)

    def set_connection_factory(self, factory: ConnectionFactory, display_name: str) -> Disposable:
        self.connection_factory = factory
        self.factory_display_name = display_name

        def _clear() -> None:
            if self.connection_factory is factory:
                self.connection_factory = None

        return Disposable(_clear)

    def dispose(self) -> None:
        self.connections.clear()
        self.connection_factory = None


class LocalCliTool:
    """Records what the host preferences page would show"""

    def __init__(self, registration: CliToolRegistration):
        self.registration = registration
        self.version = registration.version
        self.path = registration.path
        self.update_version_available: str | None = None
        self.do_update: Callable[[ITaskLogger | None], Awaitable[None]] | None = None

    def update_version(self, binary: ManagedBinary) -> None:
        self.version = binary.version
        self.path = binary.path

    def register_update(self, version: str, do_update: Callable[[ITaskLogger | None], Awaitable[None]]) -> Disposable:
        self.update_version_available = version
        self.do_update = do_update

        def _clear() -> None:
            if self.do_update is do_update:
                self.update_version_available = None
                self.do_update = None

        return Disposable(_clear)

    def dispose(self) -> None:
        self.do_update = None


class LocalHost:
    """
    Host implementation for the command line

    Example:
        host = LocalHost(settings.storage_path)
        extension = MinikubeExtension(host, settings)
        await extension.activate(check_updates=False)
    """

    def __init__(
        self,
        storage_path: Path,
        executor: ProcessExecutor | None = None,
        console: Console | None = None,
        interactive: bool = True,
    ):
        self.storage_path = Path(storage_path)
        self.executor = executor or ProcessExecutor()
        self.console = console or Console()
        self.window = ConsoleWindow(self.console, interactive=interactive)
        self.container_engine = CliContainerEngine(self.executor)
        self.providers: list[InMemoryProvider] = []
        self.cli_tools: list[LocalCliTool] = []
        self.commands: dict[str, Callable[..., Awaitable[Any]]] = {}
        self._connection_changes: EventEmitter[None] = EventEmitter("container-connection")
        self._provider_updates: EventEmitter[None] = EventEmitter("provider-update")

    def create_provider(self, options: dict[str, Any]) -> InMemoryProvider:
        provider = InMemoryProvider(options)
        self.providers.append(provider)
        return provider

    def create_cli_tool(self, registration: CliToolRegistration) -> LocalCliTool:
        tool = LocalCliTool(registration)
        self.cli_tools.append(tool)
        return tool

    def register_command(self, command_id: str, callback: Callable[..., Awaitable[Any]]) -> Disposable:
        self.commands[command_id] = callback
        return Disposable(lambda: self.commands.pop(command_id, None))

    async def execute_command(self, command_id: str, *args: Any) -> Any:
        if command_id not in self.commands:
            raise InvalidArgumentError(f"Unknown command: {command_id}")
        return await self.commands[command_id](*args)

    def on_container_connection_change(self, callback: Callable[[], Awaitable[None]]) -> Disposable:
        return self._connection_changes.subscribe(lambda _: callback())

    def on_provider_update(self, callback: Callable[[], Awaitable[None]]) -> Disposable:
        return self._provider_updates.subscribe(lambda _: callback())

    async def notify_container_connection_change(self) -> None:
        await self._connection_changes.fire(None)

    async def notify_provider_update(self) -> None:
        await self._provider_updates.fire(None)
