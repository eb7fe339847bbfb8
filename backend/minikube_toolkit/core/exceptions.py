"""
Base exception hierarchy

Provides a consistent exception structure across the toolkit
with clear error messages and recovery hints.
"""


class ToolkitError(Exception):
    """
    Base exception for all toolkit errors

    Attributes:
        message: Error message
        component: Component that raised the error
        recovery_hint: Optional hint for recovery
    """

    def __init__(self, message: str, component: str = "", recovery_hint: str = ""):
        self.message = message
        self.component = component
        self.recovery_hint = recovery_hint
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.component:
            msg = f"[{self.component}] {msg}"
        if self.recovery_hint:
            msg += f"\nRecovery: {self.recovery_hint}"
        return msg


class ConfigurationError(ToolkitError):
    """Configuration-related errors"""

    def __init__(self, message: str, recovery_hint: str = ""):
        super().__init__(
            message,
            component="Configuration",
            recovery_hint=recovery_hint or "Check your .env file and MINIKUBE_TOOLKIT_* settings",
        )


class InvalidArgumentError(ToolkitError):
    """Malformed input to a public operation"""

    def __init__(self, message: str, recovery_hint: str = ""):
        super().__init__(message, component="Validation", recovery_hint=recovery_hint)


class NotManagedError(InvalidArgumentError):
    """Refusal to touch a binary this toolkit did not install"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"cannot uninstall minikube at {path}: not managed by this extension",
            recovery_hint="Remove it with the package manager that installed it",
        )


class NotFoundError(ToolkitError):
    """Something expected is absent (binary, release, asset, cluster)"""

    def __init__(self, message: str, recovery_hint: str = ""):
        super().__init__(message, component="Resource", recovery_hint=recovery_hint)


class ReleaseNotFoundError(NotFoundError):
    """The release registry returned no usable release"""


class AssetNotFoundError(NotFoundError):
    """No release asset matches the host OS/architecture"""

    def __init__(self, operating_system: str, arch: str):
        self.operating_system = operating_system
        self.arch = arch
        super().__init__(f"No asset found for {operating_system} and {arch}")


class CliNotInstalledError(NotFoundError):
    """An operation needs the minikube binary but none is known"""

    def __init__(self, message: str = "minikube executable not installed"):
        super().__init__(message, recovery_hint="Install minikube with 'minikube-toolkit install'")


class ClusterNotFoundError(NotFoundError):
    """No managed cluster available for the requested operation"""


class PermissionDeniedError(ToolkitError):
    """File operation blocked by OS permissions, even after elevation"""

    def __init__(self, message: str, recovery_hint: str = ""):
        super().__init__(message, component="Permissions", recovery_hint=recovery_hint)


class ExternalProcessError(ToolkitError):
    """
    Non-zero exit or spawn failure of an external command

    Attributes:
        command: Executable that was run
        args: Argument vector
        returncode: Exit code (None when the process could not be spawned)
        stderr: Captured standard error
    """

    def __init__(
        self,
        message: str,
        command: str = "",
        args: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        self.command = command
        self.args_list = list(args or [])
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, component="Process")


class ExecutionCancelledError(ToolkitError):
    """The operation was aborted through its cancellation token"""

    def __init__(self, message: str = "Execution cancelled"):
        super().__init__(message, component="Process")


class ReleaseRegistryError(ToolkitError):
    """HTTP failure talking to the release registry"""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(
            message,
            component="Releases",
            recovery_hint="Check network access to api.github.com or set MINIKUBE_TOOLKIT_GITHUB_TOKEN",
        )


class ImageMoveError(ToolkitError):
    """Saving or loading an image into a cluster failed"""

    def __init__(self, message: str):
        super().__init__(message, component="Image")


class TempFileCleanupError(ToolkitError):
    """The temporary image archive could not be removed"""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Unable to remove temporary file {path}: {reason}", component="Image")
