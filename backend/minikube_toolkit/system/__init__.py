"""
Platform support - OS-specific paths, elevation and process control
"""

import sys

from minikube_toolkit.system.base import PlatformSupport, normalize_machine
from minikube_toolkit.system.platform_posix import LinuxPlatform, MacPlatform, PosixPlatform
from minikube_toolkit.system.platform_windows import WindowsPlatform

_platform: PlatformSupport | None = None


def platform_for(os_name: str) -> PlatformSupport:
    """Platform support for an explicit OS name ('win32', 'darwin', 'linux')."""
    if os_name == "win32":
        return WindowsPlatform()
    if os_name == "darwin":
        return MacPlatform()
    return LinuxPlatform()


def get_platform() -> PlatformSupport:
    """Platform support for the running host (singleton)."""
    global _platform
    if _platform is None:
        _platform = platform_for(sys.platform)
    return _platform


__all__ = [
    "PlatformSupport",
    "PosixPlatform",
    "LinuxPlatform",
    "MacPlatform",
    "WindowsPlatform",
    "get_platform",
    "platform_for",
    "normalize_machine",
]
