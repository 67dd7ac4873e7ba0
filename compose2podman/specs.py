"""
Parsers for compose port, volume and user specifications.
"""

import posixpath
from dataclasses import dataclass
from typing import Tuple

ANONYMOUS_VOLUME_NAME = "unnamed-vol"
FALLBACK_VOLUME_NAME = "volume"
VOLUME_NAME_PREFIX = "vol-"
MAX_VOLUME_NAME_LENGTH = 63

_NAME_SEPARATORS = ("/", "\\", ":", ".", "_")


@dataclass
class PortMapping:
    """Port mapping configuration."""
    container_port: str
    host_port: str = ""

    @classmethod
    def parse(cls, port_spec: str) -> "PortMapping":
        """
        Parse port specification from docker-compose format.

        "ip:host:container", "host:container" or "container". Anything
        else is kept whole as the container port.
        """
        parts = port_spec.split(":")
        if len(parts) == 3:
            return cls(container_port=parts[2], host_port=f"{parts[0]}:{parts[1]}")
        if len(parts) == 2:
            return cls(container_port=parts[1], host_port=parts[0])
        return cls(container_port=port_spec)

    @property
    def host_ip(self) -> str:
        """Address part of an "ip:host" host port, or empty."""
        ip, sep, _ = self.host_port.rpartition(":")
        return ip if sep else ""

    @property
    def host_port_number(self) -> str:
        """Host port without its address."""
        return self.host_port.rpartition(":")[2]


@dataclass
class VolumeMount:
    """Volume mount parsed from "source:target[:options]"."""
    mount_path: str
    name: str
    host_path: str = ""
    is_path: bool = False

    @classmethod
    def parse(cls, volume_spec: str) -> "VolumeMount":
        """Parse volume specification from docker-compose format."""
        # Windows drive letter: C:/path:/target
        if len(volume_spec) >= 3 and volume_spec[1] == ":" and volume_spec[2] in ("/", "\\"):
            idx = volume_spec.find(":", 3)
            if idx == -1:
                return cls.anonymous(volume_spec)
            source = volume_spec[:idx]
            mount_path = volume_spec[idx + 1:].split(":")[0]
        else:
            parts = volume_spec.split(":")
            if len(parts) < 2:
                return cls.anonymous(volume_spec)
            source, mount_path = parts[0], parts[1]

        if is_host_path(source):
            return cls(
                mount_path=mount_path,
                name=path_to_volume_name(source),
                host_path=source,
                is_path=True,
            )

        # Named volume
        return cls(mount_path=mount_path, name=source)

    @classmethod
    def anonymous(cls, volume_spec: str) -> "VolumeMount":
        return cls(mount_path=volume_spec, name=ANONYMOUS_VOLUME_NAME)


@dataclass
class UserSpec:
    """User and optional group from "user[:group]"."""
    user: str
    group: str = ""

    @classmethod
    def parse(cls, user_spec: str) -> "UserSpec":
        parts = user_spec.split(":")
        if len(parts) == 2:
            return cls(user=parts[0], group=parts[1])
        return cls(user=user_spec)


def parse_port(port_spec: str) -> Tuple[str, str]:
    """Return (container_port, host_port) for a port specification."""
    port = PortMapping.parse(port_spec)
    return port.container_port, port.host_port


def parse_volume(volume_spec: str) -> VolumeMount:
    """Parse a volume specification."""
    return VolumeMount.parse(volume_spec)


def parse_user(user_spec: str) -> Tuple[str, str]:
    """Return (user, group) for a user specification."""
    spec = UserSpec.parse(user_spec)
    return spec.user, spec.group


def is_host_path(source: str) -> bool:
    """
    Check whether a volume source is a host path rather than a named volume.

    Any source containing a path separator counts as a path, even without
    a leading "./".
    """
    if source.startswith("/"):
        return True
    if source.startswith("./") or source.startswith("../"):
        return True
    # Windows drive letter
    if len(source) >= 2 and source[1] == ":":
        return True
    return "/" in source or "\\" in source


def path_to_volume_name(path: str) -> str:
    """Convert a host path to a stable name usable as a volume identifier."""
    name = posixpath.normpath(path)
    for sep in _NAME_SEPARATORS:
        name = name.replace(sep, "-")
    name = name.lower().strip("-")

    if name and (name[0] == "-" or "0" <= name[0] <= "9"):
        name = VOLUME_NAME_PREFIX + name

    if len(name) > MAX_VOLUME_NAME_LENGTH:
        name = name[:MAX_VOLUME_NAME_LENGTH].rstrip("-")

    return name or FALLBACK_VOLUME_NAME
