"""
Release management - minikube releases published on GitHub
"""

from minikube_toolkit.releases.github import GitHubReleaseClient
from minikube_toolkit.releases.models import ReleaseMetadata, strip_version
from minikube_toolkit.releases.source import ReleaseSource, asset_name_for

__all__ = [
    "GitHubReleaseClient",
    "ReleaseMetadata",
    "ReleaseSource",
    "asset_name_for",
    "strip_version",
]
