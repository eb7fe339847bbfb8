"""
Linux and macOS platform support

Privileges are requested through polkit (pkexec) on Linux, via
flatpak-spawn when sandboxed, and through an AppleScript administrator
prompt on macOS.
"""

import logging
import os
import shlex
import signal
from pathlib import Path

from minikube_toolkit.system.base import PlatformSupport

logger = logging.getLogger(__name__)

SYSTEM_BIN_DIR = Path("/usr/local/bin")


class PosixPlatform(PlatformSupport):
    """Behaviour shared by Linux and macOS"""

    def system_install_dir(self) -> Path:
        return SYSTEM_BIN_DIR

    def install_command(self, source: Path, destination: Path) -> tuple[str, list[str]]:
        target_dir = destination.parent
        if target_dir.exists():
            return "cp", [str(source), str(destination)]

        # Fold directory creation into the same (single) privileged call
        script = f"mkdir -p {shlex.quote(str(target_dir))} && cp {shlex.quote(str(source))} {shlex.quote(str(destination))}"
        return "/bin/sh", ["-c", script]

    def remove_command(self, path: Path) -> tuple[str, list[str]]:
        return "rm", ["-f", str(path)]

    def kill_process_tree(self, pid: int) -> None:
        try:
            os.kill(pid, signal.SIGTERM)
        except ProcessLookupError:
            logger.debug(f"Process {pid} already exited")


class LinuxPlatform(PosixPlatform):
    os_name = "linux"

    @staticmethod
    def is_flatpak() -> bool:
        return bool(os.environ.get("FLATPAK_ID")) or Path("/.flatpak-info").exists()

    def elevate_command(self, command: str, args: list[str]) -> tuple[str, list[str]]:
        if self.is_flatpak():
            return "flatpak-spawn", ["--host", "pkexec", command, *args]
        return "pkexec", [command, *args]


class MacPlatform(PosixPlatform):
    os_name = "darwin"

    def elevate_command(self, command: str, args: list[str]) -> tuple[str, list[str]]:
        shell_command = shlex.join([command, *args])
        # AppleScript string literal: escape backslashes first, then quotes
        escaped = shell_command.replace("\\", "\\\\").replace('"', '\\"')
        script = f'do shell script "{escaped}" with administrator privileges'
        return "osascript", ["-e", script]
