"""
Exception types raised by compose2podman.
"""

from pathlib import Path
from typing import Optional, Union


class ComposeError(Exception):
    """Base class for all compose2podman errors."""


class ComposeParseError(ComposeError):
    """Compose file could not be decoded into a document."""


class ConfigError(ComposeError):
    """Converter config file is malformed."""


class MissingImageError(ComposeError, ValueError):
    """A service has no image and cannot be converted."""

    def __init__(self, service: str):
        self.service = service
        super().__init__(f"service {service}: image is required (build not supported)")


class OutputDirectoryError(ComposeError, OSError):
    """Output directory for unit files could not be created."""

    def __init__(self, path: Union[str, Path], reason: Optional[str] = None):
        self.path = Path(path)
        message = f"failed to create output directory {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class UnitFileError(ComposeError, OSError):
    """A unit file could not be written."""

    def __init__(self, name: str, kind: str, path: Union[str, Path], reason: Optional[str] = None):
        self.name = name
        self.kind = kind
        self.path = Path(path)
        message = f"failed to write {kind} file for {name} ({self.path})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]
