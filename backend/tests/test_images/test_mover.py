"""
Tests for ImageMover
"""

import os
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from minikube_toolkit.clusters.models import ClusterStatus, ManagedCluster
from minikube_toolkit.core.exceptions import (
    CliNotInstalledError,
    ClusterNotFoundError,
    ImageMoveError,
    InvalidArgumentError,
    TempFileCleanupError,
)
from minikube_toolkit.images.mover import ImageInfo, ImageMover

MINIKUBE = "/usr/local/bin/minikube"
IMAGE = ImageInfo(engine_id="podman", name="quay.io/podman/hello", tag="latest")


def cluster(name: str, status: ClusterStatus = ClusterStatus.STARTED) -> ManagedCluster:
    return ManagedCluster(name=name, status=status, api_port=55000, engine_type="podman")


@pytest.fixture
def saved_files():
    return []


@pytest.fixture
def engine(saved_files):
    async def save_image(engine_id, image_ref, destination):
        Path(destination).write_bytes(b"image-archive")
        saved_files.append(destination)

    engine = MagicMock()
    engine.save_image = AsyncMock(side_effect=save_image)
    return engine


@pytest.fixture
def mover(engine, window, executor, settings):
    return ImageMover(engine, window, executor, settings)


class TestImageInfo:
    """Tests for ImageInfo parsing"""

    @pytest.mark.parametrize(
        "reference,name,tag",
        [
            ("nginx", "nginx", None),
            ("nginx:1.27", "nginx", "1.27"),
            ("localhost:5000/app", "localhost:5000/app", None),
            ("localhost:5000/app:dev", "localhost:5000/app", "dev"),
        ],
    )
    def test_parse(self, reference, name, tag):
        image = ImageInfo.parse(reference, engine_id="docker")

        assert (image.name, image.tag, image.engine_id) == (name, tag, "docker")
        assert image.reference == reference


class TestSelectCluster:
    """Tests for target cluster selection"""

    @pytest.mark.asyncio
    async def test_no_started_cluster(self, mover):
        with pytest.raises(ClusterNotFoundError) as exc_info:
            await mover.select_cluster([cluster("stopped", ClusterStatus.STOPPED)])

        assert exc_info.value.message == "No minikube clusters to push to"

    @pytest.mark.asyncio
    async def test_single_cluster_is_auto_selected(self, mover, window):
        assert await mover.select_cluster([cluster("minikube"), cluster("old", ClusterStatus.STOPPED)]) == "minikube"
        assert window.quick_picks == []

    @pytest.mark.asyncio
    async def test_several_clusters_prompt(self, mover, window):
        window._pick = lambda items: items[1]

        assert await mover.select_cluster([cluster("minikube"), cluster("dev")]) == "dev"
        assert window.quick_picks == [(["minikube", "dev"], "Select a minikube cluster to push to")]


class TestMoveImage:
    """Tests for move_image"""

    @pytest.mark.asyncio
    async def test_pushes_image(self, mover, engine, executor, window, saved_files):
        result = await mover.move_image(IMAGE, [cluster("minikube")], MINIKUBE)

        assert result == "minikube"
        archive = saved_files[0]
        engine.save_image.assert_awaited_once_with("podman", "quay.io/podman/hello:latest", archive)
        call = executor.calls[0]
        assert call.command == MINIKUBE
        assert call.args == ["-p", "minikube", "image", "load", archive]
        assert window.info_messages == ["Image quay.io/podman/hello pushed to minikube cluster: minikube"]
        assert not os.path.exists(archive)

    @pytest.mark.asyncio
    async def test_image_without_name(self, mover):
        with pytest.raises(InvalidArgumentError) as exc_info:
            await mover.move_image(ImageInfo(engine_id="podman"), [cluster("minikube")], MINIKUBE)

        assert exc_info.value.message == "Image selection not supported yet"

    @pytest.mark.asyncio
    async def test_zero_clusters(self, mover, engine):
        with pytest.raises(ClusterNotFoundError):
            await mover.move_image(IMAGE, [], MINIKUBE)

        engine.save_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancelled_prompt(self, mover, window, engine):
        window._pick = lambda items: None

        assert await mover.move_image(IMAGE, [cluster("a"), cluster("b")], MINIKUBE) is None
        engine.save_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_binary(self, mover):
        with pytest.raises(CliNotInstalledError):
            await mover.move_image(IMAGE, [cluster("minikube")], None)

    @pytest.mark.asyncio
    async def test_load_failure_removes_archive(self, mover, executor, window, saved_files):
        executor.fail(lambda cmd, args: "load" in args, stderr="no space left on device")

        with pytest.raises(ImageMoveError) as exc_info:
            await mover.move_image(IMAGE, [cluster("minikube")], MINIKUBE)

        assert exc_info.value.message.startswith("Unable to push image to minikube cluster: ")
        assert "no space left on device" in str(exc_info.value)
        assert window.error_messages[0].startswith(
            "Unable to push image quay.io/podman/hello to minikube cluster: minikube. Error: "
        )
        assert not os.path.exists(saved_files[0])

    @pytest.mark.asyncio
    async def test_cleanup_failure_after_success(self, mover):
        with patch("minikube_toolkit.images.mover.os.remove", side_effect=PermissionError("busy")):
            with pytest.raises(TempFileCleanupError) as exc_info:
                await mover.move_image(IMAGE, [cluster("minikube")], MINIKUBE)

        assert "busy" in exc_info.value.message
        os.remove(exc_info.value.path)

    @pytest.mark.asyncio
    async def test_cleanup_failure_after_move_failure(self, mover, executor, saved_files):
        executor.fail(lambda cmd, args: "load" in args)

        with patch("minikube_toolkit.images.mover.os.remove", side_effect=PermissionError("busy")):
            with pytest.raises(ImageMoveError) as exc_info:
                await mover.move_image(IMAGE, [cluster("minikube")], MINIKUBE)

        notes = getattr(exc_info.value, "__notes__", [])
        assert any("Unable to remove temporary file" in note for note in notes)
        os.remove(saved_files[0])
