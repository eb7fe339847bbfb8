"""
GitHub Releases API client

Thin httpx wrapper over the three endpoints needed to install minikube:
list releases, list a release's assets, download one asset.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from minikube_toolkit.core.exceptions import ReleaseRegistryError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
TIMEOUT_SECONDS = 30.0
DOWNLOAD_TIMEOUT_SECONDS = 300.0


class GitHubReleaseClient:
    """
    Async client for the GitHub Releases API

    Example:
        client = GitHubReleaseClient(token=settings.github_token)
        releases = await client.list_releases("kubernetes", "minikube", per_page=10)
    """

    def __init__(
        self,
        base_url: str = GITHUB_API_URL,
        token: str = "",
        timeout: float = TIMEOUT_SECONDS,
        download_timeout: float = DOWNLOAD_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: API root (GitHub Enterprise installs differ)
            token: Optional token, raises the anonymous rate limit
            timeout: Timeout for metadata requests (seconds)
            download_timeout: Timeout for asset downloads (seconds)
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.download_timeout = download_timeout
        self._transport = transport
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers,
            timeout=timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        try:
            async with self._client(self.timeout) as client:
                response = await client.get(path, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"GitHub request {path} failed: HTTP {e.response.status_code}")
            raise ReleaseRegistryError(
                f"GitHub request {path} failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise ReleaseRegistryError(f"GitHub request {path} timed out") from e
        except httpx.HTTPError as e:
            raise ReleaseRegistryError(f"GitHub request {path} failed: {e}") from e

    async def list_releases(self, owner: str, repo: str, per_page: int = 10) -> list[dict]:
        """Most recent releases, newest first (raw API objects)."""
        logger.info(f"Listing releases of {owner}/{repo}")
        return await self._get_json(f"/repos/{owner}/{repo}/releases", {"per_page": per_page})

    async def list_release_assets(self, owner: str, repo: str, release_id: int, per_page: int = 60) -> list[dict]:
        """Assets attached to one release (raw API objects)."""
        return await self._get_json(
            f"/repos/{owner}/{repo}/releases/{release_id}/assets",
            {"per_page": per_page},
        )

    async def download_release_asset(
        self,
        owner: str,
        repo: str,
        asset_id: int,
        destination: Path,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> Path:
        """
        Stream an asset's binary content to destination

        Args:
            owner: Repository owner
            repo: Repository name
            asset_id: Asset id from list_release_assets()
            destination: File to replace once the download completes (parent must exist)
            progress_callback: Optional callback(downloaded_bytes, total_bytes)

        Returns:
            Path: destination
        """
        path = f"/repos/{owner}/{repo}/releases/assets/{asset_id}"
        logger.info(f"Downloading asset {asset_id} to {destination}")

        destination = Path(destination)
        # Stream beside destination so a failed download never touches the existing file
        partial = tempfile.NamedTemporaryFile(dir=destination.parent, prefix=f".{destination.name}-", delete=False)
        partial_path = Path(partial.name)
        downloaded = 0

        try:
            with partial:
                async with self._client(self.download_timeout) as client:
                    async with client.stream("GET", path, headers={"Accept": "application/octet-stream"}) as response:
                        response.raise_for_status()

                        total_size = int(response.headers.get("content-length", 0))

                        async for chunk in response.aiter_bytes(chunk_size=65536):
                            partial.write(chunk)
                            downloaded += len(chunk)

                            if progress_callback and total_size > 0:
                                progress_callback(downloaded, total_size)

            os.replace(partial_path, destination)
        except httpx.HTTPStatusError as e:
            partial_path.unlink(missing_ok=True)
            raise ReleaseRegistryError(
                f"Download of asset {asset_id} failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            partial_path.unlink(missing_ok=True)
            raise ReleaseRegistryError(f"Download of asset {asset_id} failed: {e}") from e
        except BaseException:
            partial_path.unlink(missing_ok=True)
            raise

        logger.info(f"Download complete: {destination} ({downloaded / 1024 / 1024:.2f} MB)")
        return destination
