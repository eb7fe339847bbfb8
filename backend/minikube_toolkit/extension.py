"""
Extension activation

Wires locator, release source, installer, CLI controller, cluster
reconciler and image mover to a host, and subscribes them to the host's
events for the lifetime of the activation.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from minikube_toolkit.binary.controller import MinikubeCliController
from minikube_toolkit.binary.installer import BinaryInstaller
from minikube_toolkit.binary.locator import BinaryLocator
from minikube_toolkit.binary.models import ManagedBinary
from minikube_toolkit.binary.tool import MINIKUBE_DESCRIPTION, MINIKUBE_DISPLAY_NAME, MINIKUBE_ICON
from minikube_toolkit.clusters.creation import CREATION_DISPLAY_NAME, create_cluster
from minikube_toolkit.clusters.reconciler import ClusterReconciler
from minikube_toolkit.core.config import Settings, get_settings
from minikube_toolkit.core.events import Disposable, DisposableStore
from minikube_toolkit.core.exceptions import ToolkitError
from minikube_toolkit.images.mover import MOVE_IMAGE_COMMAND, ImageInfo, ImageMover
from minikube_toolkit.process.cancellation import CancellationToken
from minikube_toolkit.process.executor import ProcessExecutor
from minikube_toolkit.releases.github import GitHubReleaseClient
from minikube_toolkit.releases.source import ReleaseSource
from minikube_toolkit.system import PlatformSupport, get_platform

if TYPE_CHECKING:
    from minikube_toolkit.core.interfaces import ICliTool, IHost, IProvider, ITaskLogger

logger = logging.getLogger(__name__)

MINIKUBE_PROVIDER_ID = "minikube"
MINIKUBE_INSTALL_COMMAND = "minikube.install"


@dataclass
class ToolkitServices:
    """The long-lived components of one activation"""

    settings: Settings
    platform: PlatformSupport
    executor: ProcessExecutor
    locator: BinaryLocator
    release_source: ReleaseSource
    installer: BinaryInstaller
    controller: MinikubeCliController


def build_services(
    host: "IHost",
    settings: Settings | None = None,
    executor: ProcessExecutor | None = None,
    release_client: GitHubReleaseClient | None = None,
) -> ToolkitServices:
    """Construct the component graph for a host."""
    settings = settings or get_settings()
    platform = executor.platform if executor else get_platform()
    executor = executor or ProcessExecutor(platform)
    release_client = release_client or GitHubReleaseClient(
        base_url=settings.github_api_url,
        token=settings.github_token,
        timeout=settings.request_timeout,
        download_timeout=settings.download_timeout,
    )
    locator = BinaryLocator(host.storage_path, platform)
    release_source = ReleaseSource(release_client, settings.release_owner, settings.release_repo)
    installer = BinaryInstaller(release_source, executor, locator)
    controller = MinikubeCliController(locator, release_source, installer, executor, host.window, settings)
    return ToolkitServices(settings, platform, executor, locator, release_source, installer, controller)


class MinikubeExtension:
    """
    One activation of the minikube integration

    Example:
        extension = MinikubeExtension(host)
        await extension.activate()
        ...
        extension.deactivate()
    """

    def __init__(self, host: "IHost", settings: Settings | None = None, services: ToolkitServices | None = None):
        self.host = host
        self.services = services or build_services(host, settings)
        self.settings = self.services.settings
        self.controller = self.services.controller
        self.image_mover = ImageMover(host.container_engine, host.window, self.services.executor, self.settings)

        self.provider: "IProvider | None" = None
        self.reconciler: ClusterReconciler | None = None
        self.cli_tool: "ICliTool | None" = None
        self._subscriptions = DisposableStore()
        self._factory_registration: Disposable | None = None
        self._updater: Disposable | None = None
        self._install_command: Disposable | None = None

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    async def activate(self, check_updates: bool = True) -> None:
        """
        Register the CLI tool, detect minikube and, when found, the provider

        Args:
            check_updates: Query the release registry for a newer version
        """
        logger.info("Activating minikube extension")

        self.cli_tool = self._subscriptions.add(self.host.create_cli_tool(self.controller.registration()))
        self._subscriptions.add(self.controller.on_cli_update.subscribe(self._on_cli_update))

        binary = await self.controller.detect()
        if binary is None:
            logger.warning("[WARN]  minikube not found on the system; provider is created after installation")
            self._install_command = self._subscriptions.add(
                self.host.register_command(MINIKUBE_INSTALL_COMMAND, self.install_latest)
            )
        elif self.provider is None:
            await self._create_provider()

        if check_updates:
            await self.post_activate()

        logger.info("[OK] minikube extension is active")

    async def post_activate(self) -> None:
        """Offer an update when the latest release differs from the installed version."""
        try:
            latest = await self.controller.check_for_update()
        except ToolkitError as e:
            logger.warning(f"[WARN]  Unable to check for minikube updates: {e}")
            return

        if latest is None or self.cli_tool is None:
            return

        if self._updater is not None:
            self._updater.dispose()

        async def do_update(task_logger: "ITaskLogger | None" = None) -> None:
            await self.controller.update(latest, task_logger)
            if self._updater is not None:
                self._updater.dispose()
                self._updater = None

        self._updater = self._subscriptions.add(self.cli_tool.register_update(latest.version, do_update))

    def deactivate(self) -> None:
        self._subscriptions.dispose()
        self.controller.dispose()
        self.provider = None
        self.reconciler = None
        self.cli_tool = None
        logger.info("minikube extension deactivated")

    # ------------------------------------------------------------------
    # Provider
    # ------------------------------------------------------------------

    async def _create_provider(self) -> None:
        provider = self.host.create_provider(
            {
                "name": MINIKUBE_DISPLAY_NAME,
                "id": MINIKUBE_PROVIDER_ID,
                "status": "unknown",
                "images": {
                    "icon": MINIKUBE_ICON,
                    "logo": {"dark": "./logo-dark.png", "light": "./logo-light.png"},
                },
                "emptyConnectionMarkdownDescription": MINIKUBE_DESCRIPTION,
            }
        )
        self.provider = self._subscriptions.add(provider)
        self.reconciler = ClusterReconciler(
            provider,
            self.services.executor,
            self._binary_path,
            self.host.container_engine,
            self.settings,
        )
        self._subscriptions.add(Disposable(self.reconciler.dispose))
        self._register_connection_factory()

        self._subscriptions.add(self.host.register_command(MOVE_IMAGE_COMMAND, self.move_image))
        self._subscriptions.add(self.host.container_engine.on_event(self._on_engine_event))
        self._subscriptions.add(self.host.on_container_connection_change(self.refresh_clusters))
        self._subscriptions.add(self.host.on_provider_update(self._on_provider_update))

        try:
            await self.refresh_clusters()
        except ToolkitError as e:
            logger.warning(f"[WARN]  Initial minikube cluster search failed: {e}")

    def _register_connection_factory(self) -> None:
        if self.provider is None:
            return
        if self._factory_registration is not None:
            self._factory_registration.dispose()
        self._factory_registration = self._subscriptions.add(
            self.provider.set_connection_factory(self.create_cluster, CREATION_DISPLAY_NAME)
        )

    async def _on_provider_update(self) -> None:
        self._register_connection_factory()
        await self.refresh_clusters()

    async def _on_engine_event(self, event: dict) -> None:
        if event.get("Type") == "container":
            await self.refresh_clusters()

    async def _on_cli_update(self, binary: ManagedBinary | None) -> None:
        if binary is None:
            return
        if self.cli_tool is not None:
            self.cli_tool.update_version(binary)
        if self.controller.state.is_transient:
            return
        if self.provider is None:
            await self._create_provider()
        else:
            await self.refresh_clusters()

    def _binary_path(self) -> str | None:
        binary = self.controller.binary
        return binary.path if binary else None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def refresh_clusters(self) -> None:
        if self.reconciler is not None:
            await self.reconciler.refresh()

    async def create_cluster(
        self,
        params: dict[str, Any],
        task_logger: "ITaskLogger | None" = None,
        token: CancellationToken | None = None,
    ) -> None:
        try:
            await create_cluster(params, self._binary_path(), self.services.executor, self.settings, task_logger, token)
        except ToolkitError as e:
            logger.info(f"usage: createCluster failed: {e}")
            raise
        logger.info("usage: createCluster succeeded")

    async def move_image(self, image: ImageInfo) -> str | None:
        logger.info(f"usage: moveImage {image.reference}")
        clusters = self.reconciler.clusters if self.reconciler else []
        return await self.image_mover.move_image(image, clusters, self._binary_path())

    async def install_latest(self, task_logger: "ITaskLogger | None" = None) -> ManagedBinary:
        """Install the newest release (offered when minikube was not found)."""
        try:
            release = await self.services.release_source.latest()
            binary = await self.controller.install(release, task_logger)
        except ToolkitError as e:
            await self.host.window.show_error_message(f"Minikube installation failed {e}")
            raise

        if self._install_command is not None:
            self._install_command.dispose()
            self._install_command = None
        return binary
