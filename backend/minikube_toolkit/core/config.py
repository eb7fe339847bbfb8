"""
Configuration management

Centralized settings using Pydantic BaseSettings for type-safe configuration
with environment variable support.

Also provides the environment handed to every minikube invocation
(PATH augmentation, MINIKUBE_HOME and KUBECONFIG overrides).
"""

import logging
import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .paths import get_default_storage_dir, get_package_root

logger = logging.getLogger(__name__)

# Locations where Homebrew, MacPorts and the podman installer put binaries;
# GUI apps on macOS do not inherit them from the login shell.
MACOS_EXTRA_PATH = "/usr/local/bin:/opt/homebrew/bin:/opt/local/bin:/opt/podman/bin"


class Settings(BaseSettings):
    """
    Toolkit settings with environment variable support

    Settings can be overridden via environment variables:
    - MINIKUBE_TOOLKIT_MINIKUBE_HOME=/data/.minikube
    - MINIKUBE_TOOLKIT_STORAGE_PATH=/var/lib/minikube-toolkit
    - MINIKUBE_TOOLKIT_GITHUB_TOKEN=ghp_...
    """

    # Host configuration overrides (empty = fall back to the process env)
    minikube_home: str = ""
    kubeconfig: str = ""

    # Extension-private storage
    storage_path: Path = get_default_storage_dir()

    # Release registry
    github_api_url: str = "https://api.github.com"
    github_token: str = ""
    release_owner: str = "kubernetes"
    release_repo: str = "minikube"
    request_timeout: float = 30.0
    download_timeout: float = 300.0

    # Cluster creation defaults
    cluster_name: str = "minikube"
    cluster_driver: str = "podman"
    cluster_runtime: str = "cri-o"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="MINIKUBE_TOOLKIT_",
        env_file=str(get_package_root() / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton pattern for settings
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get toolkit settings (singleton)

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None


# ============================================================
# Environment for minikube invocations
# ============================================================


def get_minikube_path(is_mac: bool | None = None) -> str:
    """
    PATH used to run minikube, with the macOS extra search list appended.

    Args:
        is_mac: Override platform detection (defaults to the running host)
    """
    if is_mac is None:
        from minikube_toolkit.system import get_platform

        is_mac = get_platform().is_mac

    path = os.environ.get("PATH", "")
    if is_mac:
        if not path:
            return MACOS_EXTRA_PATH
        return f"{path}:{MACOS_EXTRA_PATH}"
    return path


def get_minikube_home(settings: Settings | None = None) -> str | None:
    """
    MINIKUBE_HOME from configuration, else from the environment, else None.

    Never defaults to a computed home directory; minikube picks its own.
    """
    settings = settings or get_settings()
    if settings.minikube_home:
        return settings.minikube_home
    return os.environ.get("MINIKUBE_HOME") or None


def get_kubeconfig(settings: Settings | None = None) -> str | None:
    """KUBECONFIG from configuration, else from the environment, else None."""
    settings = settings or get_settings()
    if settings.kubeconfig:
        return settings.kubeconfig
    return os.environ.get("KUBECONFIG") or None


def get_minikube_additional_envs(settings: Settings | None = None) -> dict[str, str]:
    """
    Environment variables layered on top of the inherited environment for
    every minikube invocation.

    Returns:
        dict with PATH, plus MINIKUBE_HOME / KUBECONFIG when defined
    """
    env: dict[str, str] = {"PATH": get_minikube_path()}
    minikube_home = get_minikube_home(settings)
    if minikube_home:
        env["MINIKUBE_HOME"] = minikube_home
    kubeconfig = get_kubeconfig(settings)
    if kubeconfig:
        env["KUBECONFIG"] = kubeconfig
    return env
