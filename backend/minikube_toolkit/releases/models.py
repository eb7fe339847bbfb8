"""
Release data models
"""

from dataclasses import dataclass


def strip_version(value: str) -> str:
    """
    Canonical version string: surrounding whitespace and a leading 'v' removed.

    >>> strip_version("v1.2.3 ")
    '1.2.3'
    """
    return value.strip().lstrip("v").strip()


@dataclass(frozen=True)
class ReleaseMetadata:
    """
    One release of the minikube binary on the registry

    Attributes:
        label: Display name (release name, or tag when unnamed)
        tag: Version tag as published (e.g. 'v1.34.0')
        id: Registry-internal release id used to list assets
    """

    label: str
    tag: str
    id: int

    @property
    def version(self) -> str:
        return strip_version(self.tag)

    def __str__(self) -> str:
        return self.label
