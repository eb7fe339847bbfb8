"""
Shared pytest fixtures for Minikube Toolkit tests.

This module provides:
- FakeExecutor: records minikube/engine invocations and replays canned results
- FakeWindow / FakeTaskLogger: host notification doubles
- Settings isolated from the developer's environment
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add backend directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from minikube_toolkit.core.config import Settings, reset_settings  # noqa: E402
from minikube_toolkit.core.exceptions import ExternalProcessError  # noqa: E402
from minikube_toolkit.process.executor import RunResult  # noqa: E402
from minikube_toolkit.system import LinuxPlatform  # noqa: E402


# =============================================================================
# Process execution
# =============================================================================


@dataclass
class ExecCall:
    """Record of one exec() call"""

    command: str
    args: list[str]
    kwargs: dict[str, Any] = field(default_factory=dict)

    @property
    def env(self) -> dict:
        return self.kwargs.get("env") or {}


@dataclass
class CannedResponse:
    matcher: Callable[[str, list[str]], bool]
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
    error: BaseException | None = None
    side_effect: Callable[[str, list[str]], None] | None = None


class FakeExecutor:
    """
    Stand-in for ProcessExecutor

    Responses are matched in registration order; unmatched calls succeed
    with empty output.

    Example:
        executor.on(lambda cmd, args: args[:1] == ["version"], stdout="v1.34.0\\n")
        executor.fail(lambda cmd, args: "load" in args, stderr="boom")
    """

    def __init__(self, platform=None):
        self.platform = platform or LinuxPlatform()
        self.calls: list[ExecCall] = []
        self._responses: list[CannedResponse] = []

    def on(self, matcher: Callable[[str, list[str]], bool], stdout: str = "", **kwargs) -> "FakeExecutor":
        self._responses.append(CannedResponse(matcher=matcher, stdout=stdout, **kwargs))
        return self

    def fail(self, matcher: Callable[[str, list[str]], bool], stderr: str = "failed", returncode: int = 1) -> "FakeExecutor":
        return self.on(matcher, stderr=stderr, returncode=returncode)

    def raise_on(self, matcher: Callable[[str, list[str]], bool], error: BaseException) -> "FakeExecutor":
        return self.on(matcher, error=error)

    async def exec(self, command: str, args: list[str] | None = None, **kwargs) -> RunResult:
        args = list(args or [])
        self.calls.append(ExecCall(command=command, args=args, kwargs=kwargs))

        for response in self._responses:
            if not response.matcher(command, args):
                continue
            if response.side_effect is not None:
                response.side_effect(command, args)
            if response.error is not None:
                raise response.error
            if response.returncode != 0:
                raise ExternalProcessError(
                    f"Command '{command} {' '.join(args)}' failed with exit code {response.returncode}: {response.stderr}",
                    command=command,
                    args=args,
                    returncode=response.returncode,
                    stderr=response.stderr,
                )
            task_logger = kwargs.get("task_logger")
            if task_logger is not None:
                for line in response.stdout.splitlines():
                    task_logger.log(line)
            return RunResult(command=command, args=args, stdout=response.stdout, stderr=response.stderr)

        return RunResult(command=command, args=args)

    def calls_to(self, command: str) -> list[ExecCall]:
        return [call for call in self.calls if call.command == command]


# =============================================================================
# Host doubles
# =============================================================================


class FakeWindow:
    """Records notifications; quick picks return pick_result(items)"""

    def __init__(self, pick: Callable[[list], Any] | None = None):
        self.info_messages: list[str] = []
        self.error_messages: list[str] = []
        self.quick_picks: list[tuple[list, str]] = []
        self._pick = pick or (lambda items: items[0] if items else None)

    async def show_information_message(self, message: str) -> None:
        self.info_messages.append(message)

    async def show_error_message(self, message: str) -> None:
        self.error_messages.append(message)

    async def show_quick_pick(self, items, placeholder: str = ""):
        self.quick_picks.append((list(items), placeholder))
        return self._pick(list(items))


class FakeTaskLogger:
    def __init__(self):
        self.lines: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def log(self, message: str) -> None:
        self.lines.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.minikube-toolkit and MINIKUBE_* variables"""
    monkeypatch.setenv("MINIKUBE_TOOLKIT_DATA", str(tmp_path / "data"))
    for name in ("MINIKUBE_HOME", "KUBECONFIG", "FLATPAK_ID"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def storage_dir(tmp_path) -> Path:
    path = tmp_path / "storage"
    path.mkdir()
    return path


@pytest.fixture
def settings(storage_dir) -> Settings:
    return Settings(storage_path=storage_dir, minikube_home="", kubeconfig="", github_token="")


@pytest.fixture
def linux_platform(monkeypatch):
    platform = LinuxPlatform()
    monkeypatch.setattr(LinuxPlatform, "is_flatpak", staticmethod(lambda: False))
    monkeypatch.setattr(type(platform), "arch", property(lambda self: "x64"))
    return platform


@pytest.fixture
def executor(linux_platform) -> FakeExecutor:
    return FakeExecutor(linux_platform)


@pytest.fixture
def window() -> FakeWindow:
    return FakeWindow()


@pytest.fixture
def task_logger() -> FakeTaskLogger:
    return FakeTaskLogger()


@pytest.fixture
def which():
    """PATH lookup for minikube; nothing found unless a test sets return_value"""
    with patch("minikube_toolkit.binary.locator.shutil.which", return_value=None) as mock_which:
        yield mock_which


@pytest.fixture
def release_client():
    """GitHubReleaseClient double serving v1.34.0 with a linux/amd64 asset"""
    client = MagicMock()
    client.list_releases = AsyncMock(
        return_value=[
            {"id": 1, "tag_name": "v1.34.0", "name": "v1.34.0", "prerelease": False},
            {"id": 2, "tag_name": "v1.33.1", "name": "v1.33.1", "prerelease": False},
        ]
    )
    client.list_release_assets = AsyncMock(return_value=[{"id": 5, "name": "minikube-linux-amd64"}])

    async def download(owner, repo, asset_id, destination):
        Path(destination).write_bytes(b"minikube")
        return destination

    client.download_release_asset = AsyncMock(side_effect=download)
    return client
