"""
Process execution - async external commands with cancellation and elevation
"""

from minikube_toolkit.process.cancellation import CancellationToken
from minikube_toolkit.process.executor import ProcessExecutor, RunResult, build_environment

__all__ = ["CancellationToken", "ProcessExecutor", "RunResult", "build_environment"]
