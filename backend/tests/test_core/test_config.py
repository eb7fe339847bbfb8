"""
Tests for settings and the minikube environment
"""

from pathlib import Path

from minikube_toolkit.core.config import (
    MACOS_EXTRA_PATH,
    Settings,
    get_kubeconfig,
    get_minikube_additional_envs,
    get_minikube_home,
    get_minikube_path,
    get_settings,
)
from minikube_toolkit.core.paths import get_data_dir, get_extension_binary_path


class TestSettings:
    """Tests for the pydantic settings"""

    def test_defaults(self):
        settings = Settings()

        assert settings.release_owner == "kubernetes"
        assert settings.release_repo == "minikube"
        assert settings.cluster_driver == "podman"
        assert settings.cluster_runtime == "cri-o"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("MINIKUBE_TOOLKIT_CLUSTER_NAME", "dev")
        monkeypatch.setenv("MINIKUBE_TOOLKIT_REQUEST_TIMEOUT", "5")

        settings = Settings()

        assert settings.cluster_name == "dev"
        assert settings.request_timeout == 5.0

    def test_get_settings_is_singleton(self):
        assert get_settings() is get_settings()


class TestPaths:
    """Tests for data and storage paths"""

    def test_data_dir_from_environment(self, tmp_path):
        assert get_data_dir() == (tmp_path / "data").resolve()

    def test_extension_binary_path(self):
        storage = Path("/tmp/storage")
        assert get_extension_binary_path(storage) == storage / "minikube"
        assert get_extension_binary_path(storage, ".exe") == storage / "minikube.exe"


class TestMinikubePath:
    """Tests for the PATH used to run minikube"""

    def test_linux_keeps_path(self, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin:/bin")
        assert get_minikube_path(is_mac=False) == "/usr/bin:/bin"

    def test_macos_appends_extra_path(self, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")
        assert get_minikube_path(is_mac=True) == f"/usr/bin:{MACOS_EXTRA_PATH}"

    def test_macos_with_empty_path(self, monkeypatch):
        monkeypatch.setenv("PATH", "")
        assert get_minikube_path(is_mac=True) == MACOS_EXTRA_PATH


class TestAdditionalEnvs:
    """Tests for MINIKUBE_HOME / KUBECONFIG propagation"""

    def test_unset_values_are_absent(self, settings):
        env = get_minikube_additional_envs(settings)

        assert "PATH" in env
        assert "MINIKUBE_HOME" not in env
        assert "KUBECONFIG" not in env

    def test_configured_values_win(self, monkeypatch, settings):
        monkeypatch.setenv("MINIKUBE_HOME", "/from/env")
        settings.minikube_home = "/from/config"
        settings.kubeconfig = "/kube/config"

        env = get_minikube_additional_envs(settings)

        assert env["MINIKUBE_HOME"] == "/from/config"
        assert env["KUBECONFIG"] == "/kube/config"

    def test_environment_fallback(self, monkeypatch, settings):
        monkeypatch.setenv("MINIKUBE_HOME", "/from/env")
        monkeypatch.setenv("KUBECONFIG", "/env/kubeconfig")

        assert get_minikube_home(settings) == "/from/env"
        assert get_kubeconfig(settings) == "/env/kubeconfig"
