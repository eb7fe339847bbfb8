"""
minikube clusters - reconciliation with the container engine and creation
"""

from minikube_toolkit.clusters.creation import ClusterCreationOptions, create_cluster
from minikube_toolkit.clusters.models import (
    ClusterStatus,
    ConnectionEndpoint,
    ConnectionLifecycle,
    ContainerInfo,
    ManagedCluster,
    PortBinding,
    ProviderConnection,
)
from minikube_toolkit.clusters.reconciler import (
    API_MINIKUBE_INTERNAL_API_PORT,
    MINIKUBE_CLUSTER_LABEL,
    ClusterReconciler,
)

__all__ = [
    "API_MINIKUBE_INTERNAL_API_PORT",
    "MINIKUBE_CLUSTER_LABEL",
    "ClusterCreationOptions",
    "ClusterReconciler",
    "ClusterStatus",
    "ConnectionEndpoint",
    "ConnectionLifecycle",
    "ContainerInfo",
    "ManagedCluster",
    "PortBinding",
    "ProviderConnection",
    "create_cluster",
]
