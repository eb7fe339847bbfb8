"""
Image handling - push container images into minikube clusters
"""

from minikube_toolkit.images.mover import MOVE_IMAGE_COMMAND, ImageInfo, ImageMover

__all__ = ["ImageInfo", "ImageMover", "MOVE_IMAGE_COMMAND"]
