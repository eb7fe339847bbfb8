"""
Cluster Reconciler

Turns the container engine's container list into minikube clusters and
keeps one provider connection per cluster: new clusters are registered,
surviving ones updated in place, vanished ones disposed.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable

from minikube_toolkit.clusters.models import (
    ClusterStatus,
    ConnectionEndpoint,
    ConnectionLifecycle,
    ContainerInfo,
    ManagedCluster,
    ProviderConnection,
)
from minikube_toolkit.core.config import Settings, get_minikube_additional_envs
from minikube_toolkit.core.events import Disposable
from minikube_toolkit.core.exceptions import CliNotInstalledError
from minikube_toolkit.process.executor import ProcessExecutor

if TYPE_CHECKING:
    from minikube_toolkit.core.interfaces import IContainerEngine, IProvider, ITaskLogger

logger = logging.getLogger(__name__)

MINIKUBE_CLUSTER_LABEL = "name.minikube.sigs.k8s.io"
API_MINIKUBE_INTERNAL_API_PORT = 8443


def endpoint_url(api_port: int) -> str:
    return f"https://localhost:{api_port}"


def is_minikube_container(container: ContainerInfo) -> bool:
    return bool(container.labels.get(MINIKUBE_CLUSTER_LABEL))


def to_managed_cluster(container: ContainerInfo) -> ManagedCluster:
    """Derive a cluster record from a labelled container."""
    listening_port = next(
        (
            port
            for port in container.ports
            if port.private_port == API_MINIKUBE_INTERNAL_API_PORT and port.type == "tcp"
        ),
        None,
    )
    status = ClusterStatus.STARTED if container.state == "running" else ClusterStatus.STOPPED
    return ManagedCluster(
        name=container.labels[MINIKUBE_CLUSTER_LABEL],
        status=status,
        api_port=(listening_port.public_port or 0) if listening_port else 0,
        engine_type=container.engine_type,
        engine_id=container.engine_id,
        container_id=container.id,
    )


@dataclass
class RegisteredConnection:
    connection: ProviderConnection
    disposable: Disposable


class ClusterReconciler:
    """
    Keeps provider connections in sync with running minikube containers

    Passes are serialized with an asyncio.Lock so overlapping events cannot
    register the same cluster twice.

    Example:
        reconciler = ClusterReconciler(provider, executor, lambda: controller.binary and controller.binary.path, engine)
        await reconciler.refresh()
        for cluster in reconciler.clusters:
            print(cluster.name, cluster.status)
    """

    def __init__(
        self,
        provider: "IProvider",
        executor: ProcessExecutor,
        binary_path: Callable[[], str | None],
        container_engine: "IContainerEngine | None" = None,
        settings: Settings | None = None,
    ):
        """
        Args:
            provider: Host provider receiving the connections
            executor: Runs minikube for start/stop/delete
            binary_path: Returns the current minikube path (None if not installed)
            container_engine: Source of containers for refresh()
            settings: Settings for MINIKUBE_HOME / KUBECONFIG overrides
        """
        self.provider = provider
        self.executor = executor
        self.container_engine = container_engine
        self.settings = settings
        self._binary_path = binary_path
        self._clusters: list[ManagedCluster] = []
        self._registered: list[RegisteredConnection] = []
        self._lock = asyncio.Lock()

    @property
    def clusters(self) -> list[ManagedCluster]:
        return list(self._clusters)

    @property
    def connections(self) -> list[ProviderConnection]:
        return [item.connection for item in self._registered]

    def get_connection(self, name: str) -> ProviderConnection | None:
        for item in self._registered:
            if item.connection.name == name:
                return item.connection
        return None

    async def refresh(self) -> None:
        """List containers from the engine and reconcile them."""
        if self.container_engine is None:
            raise RuntimeError("ClusterReconciler.refresh() needs a container engine")
        async with self._lock:
            containers = await self.container_engine.list_containers()
            self._apply(containers)

    async def reconcile(self, containers: Iterable[ContainerInfo]) -> None:
        """Reconcile against an already fetched container list."""
        async with self._lock:
            self._apply(containers)

    def _apply(self, containers: Iterable[ContainerInfo]) -> None:
        # last write wins on duplicate labels
        by_name: dict[str, ManagedCluster] = {}
        for container in containers:
            if is_minikube_container(container):
                cluster = to_managed_cluster(container)
                by_name[cluster.name] = cluster
        self._clusters = list(by_name.values())

        for cluster in self._clusters:
            status = self._status_accessor(cluster.status)
            existing = self.get_connection(cluster.name)
            if existing is None:
                connection = ProviderConnection(
                    name=cluster.name,
                    status=status,
                    endpoint=ConnectionEndpoint(api_url=endpoint_url(cluster.api_port)),
                    lifecycle=self._build_lifecycle(cluster.name),
                )
                disposable = self.provider.register_connection(connection)
                self._registered.append(RegisteredConnection(connection, disposable))
                logger.info(f"Registered minikube cluster '{cluster.name}' ({cluster.status.value})")
            else:
                existing.status = status
                existing.endpoint.api_url = endpoint_url(cluster.api_port)

        for item in list(self._registered):
            if item.connection.name not in by_name:
                item.disposable.dispose()
                self._registered.remove(item)
                logger.info(f"Removed minikube cluster '{item.connection.name}'")

    @staticmethod
    def _status_accessor(status: ClusterStatus) -> Callable[[], ClusterStatus]:
        return lambda: status

    def _build_lifecycle(self, name: str) -> ConnectionLifecycle:
        async def start(task_logger: "ITaskLogger | None" = None) -> None:
            try:
                await self._run_minikube(["start", "--profile", name], task_logger)
            except Exception as e:
                logger.error(f"Failed to start minikube cluster '{name}': {e}")
                raise

        async def stop(task_logger: "ITaskLogger | None" = None) -> None:
            await self._run_minikube(["stop", "--profile", name, "--keep-context-active"], task_logger)

        async def delete(task_logger: "ITaskLogger | None" = None) -> None:
            await self._run_minikube(["delete", "--profile", name], task_logger)

        return ConnectionLifecycle(start=start, stop=stop, delete=delete)

    async def _run_minikube(self, args: list[str], task_logger: "ITaskLogger | None") -> None:
        path = self._binary_path()
        if not path:
            raise CliNotInstalledError()
        await self.executor.exec(
            path,
            args,
            env=get_minikube_additional_envs(self.settings),
            task_logger=task_logger,
        )

    def dispose(self) -> None:
        """Dispose every registered connection."""
        for item in self._registered:
            item.disposable.dispose()
        self._registered.clear()
        self._clusters = []
