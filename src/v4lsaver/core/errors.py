"""Exceptions raised by v4l-saver."""


class V4LSaverError(Exception):
    """Base class for v4l-saver errors."""


class GatewayError(V4LSaverError):
    """A v4l2-ctl invocation failed or could not be started."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class DeviceNotFoundError(V4LSaverError):
    """An explicitly requested device path or serial matched nothing."""


class MissingDependencyError(V4LSaverError):
    """A required external program is not installed."""

    def __init__(self, missing: list[str]):
        super().__init__(f"Missing required dependencies: {' '.join(missing)}")
        self.missing = missing
