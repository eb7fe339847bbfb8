"""
minikube CLI lifecycle controller

Owns the answer to "is a usable minikube known, and at what path/version",
drives install/update/uninstall, and notifies observers on every
state transition.

States:
    UNINSTALLED -> INSTALLED -> UPDATE_AVAILABLE, with the transient
    INSTALLING / UPDATING / UNINSTALLING states while an operation runs.
    A failed operation restores the state it started from.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from minikube_toolkit.binary.installer import BinaryInstaller, same_path
from minikube_toolkit.binary.locator import BinaryLocator
from minikube_toolkit.binary.models import CliState, InstallationSource, InstallResult, ManagedBinary
from minikube_toolkit.binary.tool import CliToolRegistration
from minikube_toolkit.core.config import Settings, get_minikube_additional_envs
from minikube_toolkit.core.events import EventEmitter
from minikube_toolkit.core.exceptions import CliNotInstalledError, InvalidArgumentError, ToolkitError
from minikube_toolkit.process.executor import ProcessExecutor
from minikube_toolkit.releases.models import ReleaseMetadata, strip_version
from minikube_toolkit.releases.source import ReleaseSource

if TYPE_CHECKING:
    from minikube_toolkit.core.interfaces import ITaskLogger, IWindow

logger = logging.getLogger(__name__)


class MinikubeCliController:
    """
    State machine for the minikube binary

    Example:
        controller = MinikubeCliController(locator, release_source, installer, executor)
        controller.on_cli_update.subscribe(lambda binary: print(binary))
        await controller.detect()
        if controller.state is CliState.UNINSTALLED:
            await controller.install(await release_source.latest())
    """

    def __init__(
        self,
        locator: BinaryLocator,
        release_source: ReleaseSource,
        installer: BinaryInstaller,
        executor: ProcessExecutor,
        window: "IWindow | None" = None,
        settings: Settings | None = None,
    ):
        self.locator = locator
        self.release_source = release_source
        self.installer = installer
        self.executor = executor
        self.window = window
        self.settings = settings

        self._binary: ManagedBinary | None = None
        self._state = CliState.UNINSTALLED
        self._latest_release: ReleaseMetadata | None = None
        self._selected_release: ReleaseMetadata | None = None
        self._last_install_result: InstallResult | None = None
        self._lock = asyncio.Lock()

        self.on_cli_update: EventEmitter[ManagedBinary | None] = EventEmitter("cli-update")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> CliState:
        return self._state

    @property
    def binary(self) -> ManagedBinary | None:
        return self._binary

    @property
    def latest_release(self) -> ReleaseMetadata | None:
        return self._latest_release

    @property
    def last_install_result(self) -> InstallResult | None:
        return self._last_install_result

    def is_installed(self) -> bool:
        return self._binary is not None

    def get_info(self) -> ManagedBinary:
        """
        Raises:
            CliNotInstalledError: No binary is currently known
        """
        if self._binary is None:
            raise CliNotInstalledError()
        return self._binary

    def _settled_state(self, binary: ManagedBinary | None) -> CliState:
        if binary is None:
            return CliState.UNINSTALLED
        if self._latest_release is not None and self._latest_release.version != strip_version(binary.version):
            return CliState.UPDATE_AVAILABLE
        return CliState.INSTALLED

    async def _transition(self, state: CliState, binary: ManagedBinary | None) -> None:
        if state != self._state:
            logger.info(f"minikube CLI: {self._state.value} -> {state.value}")
        self._state = state
        self._binary = binary
        await self.on_cli_update.fire(binary)

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    async def get_version(self, executable: str) -> str:
        """Run `<executable> version --short` and return e.g. '1.34.0'."""
        result = await self.executor.exec(
            executable,
            ["version", "--short"],
            env=get_minikube_additional_envs(self.settings),
        )
        return strip_version(result.stdout)

    async def detect(self) -> ManagedBinary | None:
        """
        Locate minikube and query its version

        Idempotent and never raises: a missing or broken binary resolves to
        UNINSTALLED.

        Returns:
            The detected binary, or None
        """
        async with self._lock:
            binary: ManagedBinary | None = None
            path = self.locator.locate()
            if path is not None:
                try:
                    version = await self.get_version(path)
                except ToolkitError as e:
                    logger.error(f"Something went wrong while trying to detect minikube on the system: {e}")
                else:
                    source = (
                        InstallationSource.EXTENSION
                        if same_path(path, self.locator.extension_path)
                        else InstallationSource.EXTERNAL
                    )
                    binary = ManagedBinary(path=path, version=version, installation_source=source)
                    logger.info(f"Detected minikube {version} at {path}")

            await self._transition(self._settled_state(binary), binary)
            return binary

    async def check_for_update(self) -> ReleaseMetadata | None:
        """
        Compare the installed version with the latest registry release

        The comparison is textual on the stripped version strings, so any
        difference (including an older registry tag) counts as an update.

        Returns:
            The latest release when an update is available, else None
        """
        latest = await self.release_source.latest()
        async with self._lock:
            self._latest_release = latest
            if self._binary is None or self._state.is_transient:
                return None

            state = self._settled_state(self._binary)
            if state != self._state:
                await self._transition(state, self._binary)
            if state is CliState.UPDATE_AVAILABLE:
                logger.info(f"minikube update available: {self._binary.version} -> {latest.version}")
                return latest
            return None

    # ------------------------------------------------------------------
    # Version selection
    # ------------------------------------------------------------------

    async def list_installable_releases(self) -> list[ReleaseMetadata]:
        """Recent releases, without the one already installed."""
        releases = await self.release_source.list_recent_releases()
        if self._binary is not None:
            installed = strip_version(self._binary.version)
            releases = [release for release in releases if release.version != installed]
        return releases

    async def select_version(self) -> ReleaseMetadata:
        """
        Ask the user which release to install

        Raises:
            InvalidArgumentError: The user dismissed the prompt
        """
        releases = await self.list_installable_releases()
        selected = None
        if self.window is not None and releases:
            selected = await self.window.show_quick_pick(releases, placeholder="Select minikube version to download")
        if selected is None:
            raise InvalidArgumentError("No version selected")
        self._selected_release = selected
        return selected

    # ------------------------------------------------------------------
    # Install / update / uninstall
    # ------------------------------------------------------------------

    async def install(self, release: ReleaseMetadata, task_logger: "ITaskLogger | None" = None) -> ManagedBinary:
        """Install release (INSTALLING), keeping the previous state on failure."""
        return await self._install(release, CliState.INSTALLING, task_logger)

    async def update(
        self,
        release: ReleaseMetadata | None = None,
        task_logger: "ITaskLogger | None" = None,
    ) -> ManagedBinary:
        """Install release, or the latest one when omitted (UPDATING)."""
        if release is None:
            release = self._latest_release or await self.release_source.latest()
        return await self._install(release, CliState.UPDATING, task_logger)

    async def _install(
        self,
        release: ReleaseMetadata,
        transient: CliState,
        task_logger: "ITaskLogger | None",
    ) -> ManagedBinary:
        async with self._lock:
            previous_state, previous_binary = self._state, self._binary
            await self._transition(transient, previous_binary)
            try:
                result = await self.installer.install(release, task_logger)
                version = await self._installed_version(result.path, release)
            except BaseException:
                await self._transition(previous_state, previous_binary)
                raise

            binary = ManagedBinary(path=result.path, version=version, installation_source=InstallationSource.EXTENSION)
            self._last_install_result = result
            await self._transition(self._settled_state(binary), binary)
            return binary

    async def _installed_version(self, path: str, release: ReleaseMetadata) -> str:
        try:
            return await self.get_version(path)
        except ToolkitError as e:
            logger.warning(f"Cannot query version of {path}, using release tag {release.tag}: {e}")
            return release.version

    async def uninstall(self, task_logger: "ITaskLogger | None" = None) -> None:
        """
        Remove the installed binary (UNINSTALLING)

        Raises:
            CliNotInstalledError: Nothing is installed
            NotManagedError: The binary was not installed by this toolkit
        """
        async with self._lock:
            if self._binary is None:
                raise CliNotInstalledError("cannot uninstall minikube: the extension did not detect any installed.")

            previous_state, previous_binary = self._state, self._binary
            await self._transition(CliState.UNINSTALLING, previous_binary)
            try:
                await self.installer.uninstall(previous_binary, task_logger)
            except BaseException:
                await self._transition(previous_state, previous_binary)
                raise

            self._selected_release = None
            await self._transition(CliState.UNINSTALLED, None)

    # ------------------------------------------------------------------
    # Host registration
    # ------------------------------------------------------------------

    def registration(self) -> CliToolRegistration:
        """CLI tool description with install/update/uninstall callbacks bound to this controller."""

        async def select_version() -> str:
            release = await self.select_version()
            return release.version

        async def do_install(task_logger: "ITaskLogger | None" = None) -> None:
            if self._selected_release is None:
                raise InvalidArgumentError("select version undefined")
            await self.install(self._selected_release, task_logger)

        async def do_update(task_logger: "ITaskLogger | None" = None) -> None:
            await self.update(self._selected_release, task_logger)

        async def do_uninstall(task_logger: "ITaskLogger | None" = None) -> None:
            await self.uninstall(task_logger)

        binary = self._binary
        return CliToolRegistration(
            select_version=select_version,
            do_install=do_install,
            do_update=do_update,
            do_uninstall=do_uninstall,
            version=binary.version if binary else None,
            path=binary.path if binary else None,
            installation_source=binary.installation_source if binary else None,
        )

    def dispose(self) -> None:
        self.on_cli_update.dispose()
