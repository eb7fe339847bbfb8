"""
Cluster creation

Builds the `minikube start` invocation for a new cluster from the host's
creation form parameters.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from minikube_toolkit.core.config import Settings, get_minikube_additional_envs, get_settings
from minikube_toolkit.core.exceptions import CliNotInstalledError, ExecutionCancelledError, ExternalProcessError
from minikube_toolkit.process.cancellation import CancellationToken
from minikube_toolkit.process.executor import ProcessExecutor

if TYPE_CHECKING:
    from minikube_toolkit.core.interfaces import ITaskLogger

logger = logging.getLogger(__name__)

CREATION_PREFIX = "minikube.cluster.creation."
CREATION_DISPLAY_NAME = "Minikube cluster"


@dataclass
class ClusterCreationOptions:
    """Parameters of `minikube start` for a new profile"""

    name: str
    driver: str
    runtime: str
    base_image: str | None = None
    mount_string: str | None = None

    @classmethod
    def from_params(cls, params: dict[str, Any], settings: Settings | None = None) -> "ClusterCreationOptions":
        """
        Read the host's creation form

        Missing values fall back to the cluster_* settings.
        """
        settings = settings or get_settings()
        return cls(
            name=params.get(f"{CREATION_PREFIX}name") or settings.cluster_name,
            driver=params.get(f"{CREATION_PREFIX}driver") or settings.cluster_driver,
            runtime=params.get(f"{CREATION_PREFIX}runtime") or settings.cluster_runtime,
            base_image=params.get(f"{CREATION_PREFIX}base-image") or None,
            mount_string=params.get(f"{CREATION_PREFIX}mount-string") or None,
        )

    def to_args(self) -> list[str]:
        args = ["start", "--profile", self.name, "--driver", self.driver, "--container-runtime", self.runtime]
        if self.base_image:
            args += ["--base-image", self.base_image]
        if self.mount_string:
            args += ["--mount", "--mount-string", self.mount_string]
        return args


async def create_cluster(
    params: dict[str, Any],
    binary_path: str | None,
    executor: ProcessExecutor,
    settings: Settings | None = None,
    task_logger: "ITaskLogger | None" = None,
    token: CancellationToken | None = None,
) -> ClusterCreationOptions:
    """
    Create (start) a new minikube cluster

    Args:
        params: Creation form values keyed 'minikube.cluster.creation.*'
        binary_path: minikube executable
        executor: Process executor
        settings: Settings for defaults and MINIKUBE_HOME/KUBECONFIG
        task_logger: Host logger receiving minikube's output
        token: Cancels the (long) start and kills minikube

    Returns:
        The options the cluster was created with

    Raises:
        CliNotInstalledError: binary_path is not set
        ExecutionCancelledError: token was cancelled
        ExternalProcessError: minikube start failed
    """
    if not binary_path:
        raise CliNotInstalledError()

    settings = settings or get_settings()
    options = ClusterCreationOptions.from_params(params, settings)
    logger.info(f"Creating minikube cluster '{options.name}' (driver={options.driver}, runtime={options.runtime})")

    try:
        await executor.exec(
            binary_path,
            options.to_args(),
            env=get_minikube_additional_envs(settings),
            task_logger=task_logger,
            token=token,
        )
    except ExecutionCancelledError:
        logger.info(f"Creation of minikube cluster '{options.name}' cancelled")
        raise
    except ExternalProcessError as e:
        logger.error(f"Failed to create minikube cluster '{options.name}': {e.message}")
        raise ExternalProcessError(
            f"Failed to create minikube cluster. {e.message}",
            command=e.command,
            args=e.args_list,
            returncode=e.returncode,
            stderr=e.stderr,
        ) from e

    return options
