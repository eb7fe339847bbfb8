"""
Binary Locator

Finds the minikube executable: first on the (augmented) PATH, then in
extension-private storage. Absence is a normal outcome reported as None.
"""

import logging
import shutil
from pathlib import Path

from minikube_toolkit.core.config import get_minikube_path
from minikube_toolkit.core.paths import MINIKUBE_BINARY_NAME, get_extension_binary_path
from minikube_toolkit.system import PlatformSupport, get_platform

logger = logging.getLogger(__name__)


class BinaryLocator:
    """
    Resolve where minikube lives on this host

    Example:
        locator = BinaryLocator(storage_dir=settings.storage_path)
        path = locator.locate()
        if path is None:
            print("minikube not installed")
    """

    def __init__(
        self,
        storage_dir: Path,
        platform: PlatformSupport | None = None,
        binary_name: str = MINIKUBE_BINARY_NAME,
    ):
        self.storage_dir = Path(storage_dir)
        self.platform = platform or get_platform()
        self.binary_name = binary_name

    @property
    def extension_path(self) -> Path:
        """Where the extension keeps its own copy: <storage>/minikube[.exe]"""
        return get_extension_binary_path(self.storage_dir, self.platform.binary_extension())

    @property
    def system_path(self) -> Path:
        """Where a promoted copy goes: /usr/local/bin/minikube or WindowsApps"""
        return self.platform.system_binary_path(self.binary_name)

    def where_binary(self, executable: str | None = None) -> str | None:
        """
        PATH lookup (which/where equivalent) using the minikube search path

        Returns:
            Absolute path, or None if not on PATH
        """
        executable = executable or self.binary_name
        found = shutil.which(executable, path=get_minikube_path(self.platform.is_mac))
        if not found:
            logger.debug(f"{executable} not found on PATH")
            return None
        # where.exe style output may carry line breaks
        return found.replace("\r", "").replace("\n", "")

    def locate(self) -> str | None:
        """
        Path of the minikube binary, or None when it is not installed

        Checks in order:
        1. PATH (with the macOS extra search list)
        2. Extension-private storage
        """
        path = self.where_binary()
        if path:
            logger.info(f"minikube found on PATH: {path}")
            return path

        extension_path = self.extension_path
        if extension_path.exists():
            logger.info(f"minikube found in extension storage: {extension_path}")
            return str(extension_path)

        logger.info("minikube not found on PATH nor in extension storage")
        return None
