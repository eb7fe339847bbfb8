"""
Cluster data models

Containers as reported by the container engine, the minikube clusters
derived from them, and the provider connections registered with the host.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Literal

if TYPE_CHECKING:
    from minikube_toolkit.core.interfaces import ITaskLogger

EngineType = Literal["podman", "docker"]


class ClusterStatus(str, Enum):
    """Connection status as shown by the host"""

    STARTED = "started"
    STOPPED = "stopped"


@dataclass
class PortBinding:
    """One published container port"""

    private_port: int
    public_port: int | None = None
    type: str = "tcp"
    ip: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "PortBinding":
        return cls(
            private_port=int(data.get("PrivatePort", 0)),
            public_port=int(data["PublicPort"]) if data.get("PublicPort") else None,
            type=data.get("Type", "tcp"),
            ip=data.get("IP", ""),
        )


@dataclass
class ContainerInfo:
    """
    Container summary from the engine's container list

    Attributes:
        id: Container id
        labels: Container labels
        state: Runtime state ('running', 'exited', ...)
        ports: Published ports
        engine_id: Id of the engine connection owning the container
        engine_type: 'podman' or 'docker'
    """

    id: str
    labels: dict[str, str] = field(default_factory=dict)
    state: str = ""
    ports: list[PortBinding] = field(default_factory=list)
    engine_id: str = ""
    engine_type: EngineType = "podman"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ContainerInfo":
        """Build from a Docker-API shaped container summary."""
        return cls(
            id=data.get("Id", ""),
            labels=dict(data.get("Labels") or {}),
            state=data.get("State", ""),
            ports=[PortBinding.from_api(port) for port in data.get("Ports") or []],
            engine_id=data.get("engineId", ""),
            engine_type=data.get("engineType", "podman"),
        )


@dataclass
class ManagedCluster:
    """
    A minikube cluster backed by one container

    Attributes:
        name: Profile name
        status: started when the container is running, else stopped
        api_port: Host port bound to the API server's 8443/tcp (0 if none)
        engine_type: Engine running the container
    """

    name: str
    status: ClusterStatus
    api_port: int
    engine_type: EngineType
    engine_id: str = ""
    container_id: str = ""


LifecycleAction = Callable[["ITaskLogger | None"], Awaitable[None]]


@dataclass
class ConnectionEndpoint:
    api_url: str


@dataclass
class ConnectionLifecycle:
    """start/stop/delete bound to one cluster profile"""

    start: LifecycleAction
    stop: LifecycleAction
    delete: LifecycleAction


@dataclass(eq=False)
class ProviderConnection:
    """
    Kubernetes connection registered with the host provider

    Compared by identity: the host keeps references to the object, so the
    reconciler updates status and endpoint in place.
    """

    name: str
    status: Callable[[], ClusterStatus]
    endpoint: ConnectionEndpoint
    lifecycle: ConnectionLifecycle

    def get_status(self) -> ClusterStatus:
        return self.status()
