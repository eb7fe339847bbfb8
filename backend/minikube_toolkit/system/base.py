"""
Platform abstraction

Consolidates every OS-specific decision (executable suffix, system-wide
install location, privilege elevation, process-tree termination) behind one
interface so installer and reconciler logic stays platform-neutral.
"""

import logging
import os
import platform
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

# Node-style architecture names used by the release naming convention
_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "ppc64le": "ppc64",
    "s390x": "s390x",
}


def normalize_machine(machine: str) -> str:
    """Map platform.machine() output to x64/arm64/... names."""
    return _ARCH_ALIASES.get(machine.lower(), machine.lower())


class PlatformSupport(ABC):
    """
    OS-specific operations

    Attributes:
        os_name: 'linux', 'darwin' or 'win32'
    """

    os_name: str = ""

    # Windows-specific subprocess flag to hide console window; 0 elsewhere
    creation_flags: int = 0

    @property
    def is_windows(self) -> bool:
        return self.os_name == "win32"

    @property
    def is_mac(self) -> bool:
        return self.os_name == "darwin"

    @property
    def is_linux(self) -> bool:
        return self.os_name == "linux"

    @property
    def arch(self) -> str:
        """Host CPU architecture ('x64', 'arm64', ...)"""
        return normalize_machine(platform.machine())

    def binary_extension(self) -> str:
        """Executable suffix ('' on POSIX)"""
        return ""

    @abstractmethod
    def system_install_dir(self) -> Path:
        """Well-known system-wide directory for promoted binaries"""

    def system_binary_path(self, binary_name: str) -> Path:
        return self.system_install_dir() / f"{binary_name}{self.binary_extension()}"

    @abstractmethod
    def elevate_command(self, command: str, args: list[str]) -> tuple[str, list[str]]:
        """
        Wrap a command so it runs with administrator privileges

        Returns:
            Tuple of (command, args) for the privileged invocation
        """

    @abstractmethod
    def install_command(self, source: Path, destination: Path) -> tuple[str, list[str]]:
        """Command copying source to destination, creating the target dir when needed"""

    @abstractmethod
    def remove_command(self, path: Path) -> tuple[str, list[str]]:
        """Command deleting a single file"""

    def make_executable(self, path: Path) -> None:
        """chmod 0755 on POSIX, no-op on Windows"""
        os.chmod(path, 0o755)

    @abstractmethod
    def kill_process_tree(self, pid: int) -> None:
        """Terminate a child process and everything it spawned"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(os_name={self.os_name!r})"
