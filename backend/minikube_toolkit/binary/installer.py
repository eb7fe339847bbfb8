"""
Binary Installer

Downloads a minikube release into extension-private storage, promotes it
to the system-wide bin directory when the user grants privileges, and
removes it again on uninstall.
"""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from minikube_toolkit.binary.locator import BinaryLocator
from minikube_toolkit.binary.models import InstallResult, ManagedBinary
from minikube_toolkit.core.exceptions import ExternalProcessError, NotManagedError, PermissionDeniedError
from minikube_toolkit.process.executor import ProcessExecutor
from minikube_toolkit.releases.models import ReleaseMetadata
from minikube_toolkit.releases.source import ReleaseSource

if TYPE_CHECKING:
    from minikube_toolkit.core.interfaces import ITaskLogger

logger = logging.getLogger(__name__)


def same_path(first: str | Path, second: str | Path) -> bool:
    """Compare two paths lexically (case-insensitive on Windows)."""
    return os.path.normcase(os.path.abspath(first)) == os.path.normcase(os.path.abspath(second))


class BinaryInstaller:
    """
    Install and uninstall the minikube binary

    Installation always succeeds once the download succeeded; placing the
    binary in the system-wide directory is best-effort and its failure is
    reported through InstallResult.promotion_error.
    """

    def __init__(
        self,
        release_source: ReleaseSource,
        executor: ProcessExecutor,
        locator: BinaryLocator,
    ):
        self.release_source = release_source
        self.executor = executor
        self.locator = locator
        self.platform = locator.platform

    async def download(self, release: ReleaseMetadata) -> Path:
        """
        Download release into extension storage and make it executable

        Returns:
            Path: <storage>/minikube[.exe]
        """
        asset_id = await self.release_source.resolve_asset_id(release.id, self.platform.os_name, self.platform.arch)

        destination = self.locator.extension_path
        destination.parent.mkdir(parents=True, exist_ok=True)

        await self.release_source.fetch_asset(asset_id, destination)
        self.platform.make_executable(destination)
        logger.info(f"Downloaded minikube {release.tag} to {destination}")
        return destination

    async def install_to_system(self, binary_path: Path) -> Path:
        """
        Copy binary_path to the system-wide location with elevated privileges

        Returns:
            Path: System-wide path of the binary

        Raises:
            ExternalProcessError: The privileged copy failed or was declined
        """
        destination = self.locator.system_path
        command, args = self.platform.install_command(Path(binary_path), destination)
        await self.executor.exec(command, args, elevate=True)
        logger.info(f"Installed minikube system-wide at {destination}")
        return destination

    async def install(self, release: ReleaseMetadata, task_logger: "ITaskLogger | None" = None) -> InstallResult:
        """
        Download and install a release

        Args:
            release: Release to install
            task_logger: Host logger for progress messages

        Returns:
            InstallResult whose path is the system-wide path when promotion
            worked, else the extension storage path
        """
        if task_logger:
            task_logger.log(f"downloading {release.tag}")
        downloaded = await self.download(release)

        try:
            system_path = await self.install_to_system(downloaded)
        except ExternalProcessError as e:
            logger.warning(f"cannot install minikube system-wide: {e}")
            if task_logger:
                task_logger.warn(f"cannot install minikube system-wide: {e}")
            result = InstallResult(path=str(downloaded), downloaded_path=str(downloaded), promoted=False, promotion_error=e)
        else:
            result = InstallResult(path=str(system_path), downloaded_path=str(downloaded), promoted=True)

        if task_logger:
            task_logger.log(f"minikube {release.tag} installed at {result.path}")
        return result

    async def uninstall(self, binary: ManagedBinary, task_logger: "ITaskLogger | None" = None) -> None:
        """
        Remove a binary this toolkit installed

        Raises:
            NotManagedError: binary.path is neither the system-wide nor the
                extension storage location (nothing is deleted)
            PermissionDeniedError: Elevated removal failed too
        """
        extension_path = self.locator.extension_path
        system_path = self.locator.system_path

        if same_path(binary.path, extension_path):
            await self.delete_file(extension_path)
        elif same_path(binary.path, system_path):
            if task_logger:
                task_logger.log("Removing minikube system-wide installed")
            await self.delete_file(system_path)
            # final cleanup of the copy kept in extension storage
            await self.delete_file(extension_path)
        else:
            logger.error(f"cannot uninstall minikube at {binary.path}: not installed by the extension")
            if task_logger:
                task_logger.error("cannot uninstall minikube not-installed by the extension.")
            raise NotManagedError(binary.path)

        logger.info(f"Uninstalled minikube from {binary.path}")

    async def delete_file(self, path: str | Path) -> None:
        """
        Delete a file, retrying once with elevated privileges on EACCES/EPERM

        Missing files are ignored; other OS errors propagate.
        """
        path = Path(path)
        if not path.exists():
            return
        try:
            path.unlink()
        except PermissionError:
            logger.info(f"Permission denied removing {path}, retrying with elevated privileges")
            await self.delete_file_as_admin(path)

    async def delete_file_as_admin(self, path: Path) -> None:
        command, args = self.platform.remove_command(path)
        try:
            await self.executor.exec(command, args, elevate=True)
        except ExternalProcessError as e:
            logger.error(f"Failed to uninstall '{path}': {e}")
            raise PermissionDeniedError(f"Unable to remove {path}: {e.stderr.strip() or e.message}") from e
