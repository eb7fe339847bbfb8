"""
Release Source

Selects installable minikube releases and the asset matching the host
OS/architecture.
"""

import logging
from pathlib import Path

from minikube_toolkit.core.exceptions import AssetNotFoundError, ReleaseNotFoundError
from minikube_toolkit.core.paths import MINIKUBE_BINARY_NAME
from minikube_toolkit.releases.github import GitHubReleaseClient
from minikube_toolkit.releases.models import ReleaseMetadata

logger = logging.getLogger(__name__)

RELEASES_FETCHED = 10
RELEASES_RETAINED = 5
ASSETS_PER_PAGE = 60


def normalize_os_arch(operating_system: str, arch: str) -> tuple[str, str, str]:
    """
    Map Node-style platform names onto minikube asset naming.

    Returns:
        Tuple of (os, arch, extension), e.g. ('windows', 'amd64', '.exe')
    """
    extension = ""
    if operating_system == "win32":
        operating_system = "windows"
        extension = ".exe"
    if arch == "x64":
        arch = "amd64"
    return operating_system, arch, extension


def asset_name_for(tool_name: str, operating_system: str, arch: str) -> str:
    """Expected asset name, e.g. 'minikube-windows-amd64.exe'."""
    os_name, arch_name, extension = normalize_os_arch(operating_system, arch)
    return f"{tool_name}-{os_name}-{arch_name}{extension}"


class ReleaseSource:
    """
    Release metadata and asset retrieval for one tool hosted on GitHub

    Holds no state between calls.
    """

    def __init__(
        self,
        client: GitHubReleaseClient,
        owner: str = "kubernetes",
        repo: str = "minikube",
        tool_name: str = MINIKUBE_BINARY_NAME,
    ):
        self.client = client
        self.owner = owner
        self.repo = repo
        self.tool_name = tool_name

    async def list_recent_releases(self) -> list[ReleaseMetadata]:
        """
        Up to 5 most recent non-prerelease releases, newest first.

        Only the 10 latest releases are fetched, so fewer than 5 are returned
        when the registry has a run of prereleases.
        """
        raw_releases = await self.client.list_releases(self.owner, self.repo, per_page=RELEASES_FETCHED)
        releases = [
            ReleaseMetadata(
                label=release.get("name") or release["tag_name"],
                tag=release["tag_name"],
                id=release["id"],
            )
            for release in raw_releases
            if not release.get("prerelease", False)
        ]
        return releases[:RELEASES_RETAINED]

    async def latest(self) -> ReleaseMetadata:
        """
        Newest non-prerelease release

        Raises:
            ReleaseNotFoundError: The registry returned no usable release
        """
        releases = await self.list_recent_releases()
        if not releases:
            raise ReleaseNotFoundError(f"No releases found for {self.owner}/{self.repo}")
        return releases[0]

    async def resolve_asset_id(self, release_id: int, operating_system: str, arch: str) -> int:
        """
        Asset id of the binary built for operating_system/arch

        Args:
            release_id: Release id from ReleaseMetadata.id
            operating_system: 'win32', 'darwin' or 'linux'
            arch: 'x64', 'arm64', ...

        Raises:
            AssetNotFoundError: No asset follows <tool>-<os>-<arch>[.exe]
        """
        os_name, arch_name, _ = normalize_os_arch(operating_system, arch)
        searched_name = asset_name_for(self.tool_name, operating_system, arch)

        assets = await self.client.list_release_assets(self.owner, self.repo, release_id, per_page=ASSETS_PER_PAGE)
        for asset in assets:
            if asset.get("name") == searched_name:
                logger.debug(f"Found asset {searched_name} (id {asset['id']})")
                return asset["id"]

        raise AssetNotFoundError(os_name, arch_name)

    async def fetch_asset(self, asset_id: int, destination: Path) -> Path:
        """Download an asset to destination, creating parent directories."""
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        return await self.client.download_release_asset(self.owner, self.repo, asset_id, destination)
