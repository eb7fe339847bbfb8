"""
Dynamic path resolution for Minikube Toolkit.

All paths are calculated from the installed package location or from the
MINIKUBE_TOOLKIT_DATA environment variable, never from the current working
directory.
"""

import os
from pathlib import Path

MINIKUBE_BINARY_NAME = "minikube"


def get_package_root() -> Path:
    """
    Get the directory containing the minikube_toolkit/ package.

    Returns:
        Path: Absolute path to package root (e.g., /git/minikube-toolkit/backend)
    """
    # This file is at: minikube_toolkit/core/paths.py
    return Path(__file__).parent.parent.parent.resolve()


def get_data_dir() -> Path:
    """
    Get the toolkit data directory.

    Priority order:
    1. MINIKUBE_TOOLKIT_DATA environment variable
    2. ~/.minikube-toolkit

    Returns:
        Path to data directory (not created)
    """
    env_path = os.getenv("MINIKUBE_TOOLKIT_DATA")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path.home() / ".minikube-toolkit"


def get_default_storage_dir() -> Path:
    """Extension-private storage, persisted across restarts."""
    return get_data_dir() / "storage"


def get_extension_binary_path(storage_dir: Path, extension: str = "") -> Path:
    """
    Deterministic location of the extension-managed minikube binary.

    Args:
        storage_dir: Extension-private storage directory
        extension: Executable suffix for the host OS ('.exe' on Windows)

    Returns:
        Path: <storage>/minikube[.exe]
    """
    return Path(storage_dir) / f"{MINIKUBE_BINARY_NAME}{extension}"
