"""Exception classes for bbcount."""


class BBCountError(Exception):
    """Base exception for all bbcount errors."""


class InputPathError(BBCountError):
    """Raised when the input root cannot be read."""

    def __init__(self, path: str | None = None, reason: str | None = None) -> None:
        msg = f"Input path not readable: {path}" if path else "Input path not readable"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
        self.path = path
        self.reason = reason


class OutputPathError(BBCountError):
    """Raised when the output root cannot be created or written."""

    def __init__(self, path: str | None = None, reason: str | None = None) -> None:
        msg = f"Output path not writable: {path}" if path else "Output path not writable"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
        self.path = path
        self.reason = reason


class FormatError(BBCountError):
    """Raised when a container file is corrupt or in an unsupported format."""

    def __init__(self, path: str | None = None, reason: str | None = None) -> None:
        msg = f"Cannot read container: {path}" if path else "Cannot read container"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.path = path
        self.reason = reason


class ShapeError(BBCountError):
    """Raised when series data has unexpected dimensions."""


class GeometryError(BBCountError):
    """Raised when an ROI does not fit the image it is applied to."""


class ConfigError(BBCountError):
    """Raised for invalid configuration values or configuration files."""
