"""
Tests for cluster creation
"""

import pytest

from minikube_toolkit.clusters.creation import CREATION_PREFIX, ClusterCreationOptions, create_cluster
from minikube_toolkit.core.exceptions import CliNotInstalledError, ExecutionCancelledError, ExternalProcessError


class TestClusterCreationOptions:
    """Tests for option parsing"""

    def test_defaults_from_settings(self, settings):
        options = ClusterCreationOptions.from_params({}, settings)

        assert options.name == "minikube"
        assert options.to_args() == [
            "start", "--profile", "minikube", "--driver", "podman", "--container-runtime", "cri-o",
        ]

    def test_all_parameters(self, settings):
        params = {
            f"{CREATION_PREFIX}name": "dev",
            f"{CREATION_PREFIX}driver": "docker",
            f"{CREATION_PREFIX}runtime": "containerd",
            f"{CREATION_PREFIX}base-image": "gcr.io/k8s-minikube/kicbase:v0.0.45",
            f"{CREATION_PREFIX}mount-string": "/home/me:/host",
        }

        args = ClusterCreationOptions.from_params(params, settings).to_args()

        assert args == [
            "start", "--profile", "dev", "--driver", "docker", "--container-runtime", "containerd",
            "--base-image", "gcr.io/k8s-minikube/kicbase:v0.0.45",
            "--mount", "--mount-string", "/home/me:/host",
        ]


class TestCreateCluster:
    """Tests for create_cluster"""

    @pytest.mark.asyncio
    async def test_runs_minikube_start(self, executor, settings, task_logger):
        options = await create_cluster(
            {f"{CREATION_PREFIX}name": "dev"}, "/usr/local/bin/minikube", executor, settings, task_logger
        )

        assert options.name == "dev"
        call = executor.calls[0]
        assert call.command == "/usr/local/bin/minikube"
        assert call.args[:3] == ["start", "--profile", "dev"]
        assert call.kwargs["task_logger"] is task_logger

    @pytest.mark.asyncio
    async def test_failure_message(self, executor, settings):
        executor.fail(lambda cmd, args: True, stderr="Exiting due to PROVIDER_PODMAN_NOT_RUNNING")

        with pytest.raises(ExternalProcessError) as exc_info:
            await create_cluster({}, "/usr/local/bin/minikube", executor, settings)

        assert exc_info.value.message.startswith("Failed to create minikube cluster. ")
        assert "PROVIDER_PODMAN_NOT_RUNNING" in exc_info.value.stderr

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, executor, settings):
        executor.raise_on(lambda cmd, args: True, ExecutionCancelledError())

        with pytest.raises(ExecutionCancelledError):
            await create_cluster({}, "/usr/local/bin/minikube", executor, settings)

    @pytest.mark.asyncio
    async def test_requires_binary(self, executor, settings):
        with pytest.raises(CliNotInstalledError):
            await create_cluster({}, None, executor, settings)
