"""
Image Mover

Pushes an image from the host container engine into a running minikube
cluster: save to a temporary archive, `minikube image load` it, remove
the archive.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from minikube_toolkit.clusters.models import ClusterStatus, ManagedCluster
from minikube_toolkit.core.config import Settings, get_minikube_additional_envs
from minikube_toolkit.core.exceptions import (
    CliNotInstalledError,
    ClusterNotFoundError,
    ImageMoveError,
    InvalidArgumentError,
    TempFileCleanupError,
)
from minikube_toolkit.process.executor import ProcessExecutor

if TYPE_CHECKING:
    from minikube_toolkit.core.interfaces import IContainerEngine, IWindow

logger = logging.getLogger(__name__)

MOVE_IMAGE_COMMAND = "minikube.image.move"


@dataclass
class ImageInfo:
    """Image selected in the host (name and tag may be missing for dangling images)"""

    engine_id: str
    name: str | None = None
    tag: str | None = None

    @property
    def reference(self) -> str:
        """name[:tag]"""
        if self.name and self.tag:
            return f"{self.name}:{self.tag}"
        return self.name or ""

    @classmethod
    def parse(cls, reference: str, engine_id: str = "") -> "ImageInfo":
        """
        Split 'registry:5000/app:1.0' into name and tag

        A colon only starts the tag when it comes after the last slash.
        """
        name, tag = reference, None
        last_colon = reference.rfind(":")
        if last_colon > reference.rfind("/"):
            name, tag = reference[:last_colon], reference[last_colon + 1:]
        return cls(engine_id=engine_id, name=name or None, tag=tag or None)


class ImageMover:
    """
    Move images from podman/docker into minikube

    Example:
        mover = ImageMover(engine, window, executor)
        await mover.move_image(ImageInfo(engine_id="podman", name="quay.io/app", tag="1.0"),
                               reconciler.clusters, controller.get_info().path)
    """

    def __init__(
        self,
        container_engine: "IContainerEngine",
        window: "IWindow",
        executor: ProcessExecutor,
        settings: Settings | None = None,
    ):
        self.container_engine = container_engine
        self.window = window
        self.executor = executor
        self.settings = settings

    async def select_cluster(self, clusters: Sequence[ManagedCluster]) -> str | None:
        """
        Pick the target among started clusters

        Returns:
            Cluster name, or None if the user cancelled the prompt

        Raises:
            ClusterNotFoundError: No started cluster
        """
        started = [cluster for cluster in clusters if cluster.status == ClusterStatus.STARTED]
        if not started:
            raise ClusterNotFoundError("No minikube clusters to push to")
        if len(started) == 1:
            return started[0].name

        selected = await self.window.show_quick_pick(
            [cluster.name for cluster in started],
            placeholder="Select a minikube cluster to push to",
        )
        return selected or None

    async def move_image(
        self,
        image: ImageInfo,
        clusters: Sequence[ManagedCluster],
        binary_path: str | None,
    ) -> str | None:
        """
        Push image into a started cluster

        The temporary archive is removed whatever happens. A failure to
        remove it is raised as TempFileCleanupError when the move itself
        succeeded, and attached as a note to ImageMoveError otherwise.

        Returns:
            Name of the cluster the image was pushed to, None if cancelled

        Raises:
            InvalidArgumentError: image has no name
            ClusterNotFoundError: no started cluster
            ImageMoveError: saving or loading failed
        """
        if not image.name:
            raise InvalidArgumentError("Image selection not supported yet")

        cluster_name = await self.select_cluster(clusters)
        if cluster_name is None:
            logger.info("Image move cancelled: no cluster selected")
            return None

        if not binary_path:
            raise CliNotInstalledError()

        reference = image.reference
        fd, filename = tempfile.mkstemp(prefix="minikube-image-", suffix=".tar")
        os.close(fd)

        cleanup_error: TempFileCleanupError | None = None
        try:
            try:
                await self.container_engine.save_image(image.engine_id, reference, filename)
                await self.executor.exec(
                    binary_path,
                    ["-p", cluster_name, "image", "load", filename],
                    env=get_minikube_additional_envs(self.settings),
                )
                await self.window.show_information_message(
                    f"Image {image.name} pushed to minikube cluster: {cluster_name}"
                )
            except Exception as err:
                await self.window.show_error_message(
                    f"Unable to push image {image.name} to minikube cluster: {cluster_name}. Error: {err}"
                )
                raise ImageMoveError(f"Unable to push image to minikube cluster: {err}") from err
            finally:
                cleanup_error = self._remove_temp_file(filename)
        except ImageMoveError as err:
            if cleanup_error is not None:
                logger.error(str(cleanup_error))
                err.add_note(str(cleanup_error))
            raise

        if cleanup_error is not None:
            raise cleanup_error

        logger.info(f"Image {reference} pushed to minikube cluster {cluster_name}")
        return cluster_name

    @staticmethod
    def _remove_temp_file(filename: str) -> TempFileCleanupError | None:
        try:
            os.remove(filename)
        except FileNotFoundError:
            return None
        except OSError as e:
            return TempFileCleanupError(filename, str(e))
        return None
