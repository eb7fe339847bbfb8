"""
Managed binary data models
"""

from dataclasses import dataclass
from enum import Enum


class InstallationSource(str, Enum):
    """Who put the binary where it is"""

    EXTENSION = "extension"
    EXTERNAL = "external"


class CliState(str, Enum):
    """Lifecycle states of the minikube CLI"""

    UNINSTALLED = "uninstalled"
    INSTALLED = "installed"
    UPDATE_AVAILABLE = "update_available"
    INSTALLING = "installing"
    UPDATING = "updating"
    UNINSTALLING = "uninstalling"

    @property
    def is_transient(self) -> bool:
        return self in (CliState.INSTALLING, CliState.UPDATING, CliState.UNINSTALLING)


@dataclass(frozen=True)
class ManagedBinary:
    """
    A minikube executable that answered `version --short`

    The binary being absent is modelled as None rather than as an instance
    with empty fields, so path and version are always both present.
    """

    path: str
    version: str
    installation_source: InstallationSource = InstallationSource.EXTERNAL

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "version": self.version,
            "installation_source": self.installation_source.value,
        }


@dataclass
class InstallResult:
    """
    Outcome of an installation

    The download is the primary operation; promotion to the system-wide
    directory is best-effort. promotion_error keeps the reason promotion
    failed when the binary stayed in extension storage.
    """

    path: str
    downloaded_path: str
    promoted: bool
    promotion_error: Exception | None = None

    @property
    def promotion_failed(self) -> bool:
        return not self.promoted and self.promotion_error is not None
