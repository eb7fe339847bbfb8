"""
Windows platform support

Elevation goes through PowerShell's Start-Process -Verb RunAs (UAC prompt);
process trees are killed with taskkill.
"""

import logging
import subprocess
from pathlib import Path

from minikube_toolkit.system.base import PlatformSupport

logger = logging.getLogger(__name__)


def _ps_quote(value: str) -> str:
    """Single-quoted PowerShell literal"""
    return "'" + value.replace("'", "''") + "'"


class WindowsPlatform(PlatformSupport):
    os_name = "win32"
    creation_flags = getattr(subprocess, "CREATE_NO_WINDOW", 0)

    def binary_extension(self) -> str:
        return ".exe"

    def system_install_dir(self) -> Path:
        return Path.home() / "AppData" / "Local" / "Microsoft" / "WindowsApps"

    def elevate_command(self, command: str, args: list[str]) -> tuple[str, list[str]]:
        argument_list = ", ".join(_ps_quote(arg) for arg in args) or "''"
        script = (
            f"$p = Start-Process -FilePath {_ps_quote(command)} -ArgumentList {argument_list} "
            "-Verb RunAs -Wait -PassThru -WindowStyle Hidden; exit $p.ExitCode"
        )
        return "powershell.exe", ["-NoProfile", "-NonInteractive", "-Command", script]

    def install_command(self, source: Path, destination: Path) -> tuple[str, list[str]]:
        return "cmd.exe", ["/c", "copy", "/Y", str(source), str(destination)]

    def remove_command(self, path: Path) -> tuple[str, list[str]]:
        return "cmd.exe", ["/c", "del", "/F", "/Q", str(path)]

    def make_executable(self, path: Path) -> None:
        # Executability comes from the .exe suffix
        return None

    def kill_process_tree(self, pid: int) -> None:
        result = subprocess.run(
            ["taskkill", "/pid", str(pid), "/T", "/F"],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            creationflags=self.creation_flags,
        )
        if result.returncode != 0:
            logger.warning(f"taskkill for pid {pid} failed: {result.stderr.strip()}")
