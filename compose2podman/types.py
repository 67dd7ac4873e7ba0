"""
Type definitions for compose2podman.

These dataclasses represent a Docker Compose document. Compose allows several
encodings for some service fields (environment, command, networks, ...); those
are stored as decoded and normalized through the accessor functions below.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import ComposeParseError


class RestartPolicy(str, Enum):
    """Compose restart policy tokens."""
    NO = "no"
    ALWAYS = "always"
    ON_FAILURE = "on-failure"
    UNLESS_STOPPED = "unless-stopped"


def environment_map(value: Any) -> Dict[str, str]:
    """
    Normalize a compose environment field to a dict.

    Accepts a mapping of names to string values, or a list of KEY=VALUE
    strings split at the first "=". Entries of any other shape are dropped.
    """
    env: Dict[str, str] = {}

    if isinstance(value, dict):
        for key, val in value.items():
            if isinstance(key, str) and isinstance(val, str):
                env[key] = val
    elif isinstance(value, list):
        for item in value:
            if not isinstance(item, str):
                continue
            key, sep, val = item.partition("=")
            # No "=" or an empty key
            if sep and key:
                env[key] = val

    return env


def name_list(value: Any) -> List[str]:
    """Normalize a list-or-mapping of names (networks, depends_on)."""
    if isinstance(value, list):
        return [n for n in value if isinstance(n, str)]
    if isinstance(value, dict):
        return [n for n in value if isinstance(n, str)]
    return []


def token_list(value: Any) -> List[str]:
    """
    Normalize a command or entrypoint field.

    A string is a single argument, it is not split on whitespace.
    """
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [t for t in value if isinstance(t, str)]
    return []


def _string_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): "" if v is None else str(v) for k, v in value.items()}


def _string_list(value: Any) -> List[str]:
    """Keep scalar entries; long-syntax mappings are not supported."""
    if not isinstance(value, list):
        return []
    return [
        str(v) for v in value
        if isinstance(v, (str, int)) and not isinstance(v, bool)
    ]


def _flag(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _external(value: Any) -> bool:
    # Older compose files write "external: {name: ...}"
    return isinstance(value, dict) or _flag(value)


def _entity_map(data: Dict, section: str) -> Dict:
    """Return a top-level section, checking it is a mapping of mappings."""
    entries = data.get(section) or {}
    if not isinstance(entries, dict):
        raise ComposeParseError(
            f"{section}: expected a mapping, got {type(entries).__name__}"
        )
    for name, entry in entries.items():
        if entry is not None and not isinstance(entry, dict):
            raise ComposeParseError(
                f"{section}.{name}: expected a mapping, got {type(entry).__name__}"
            )
    return entries


@dataclass
class ComposeService:
    """Docker Compose service definition."""
    name: str
    image: str = ""
    container_name: str = ""
    restart: str = ""
    working_dir: str = ""
    user: str = ""
    hostname: str = ""
    privileged: bool = False
    build: Any = None
    ports: List[str] = field(default_factory=list)
    environment: Any = None
    volumes: List[str] = field(default_factory=list)
    networks: Any = None
    depends_on: Any = None
    command: Any = None
    entrypoint: Any = None
    labels: Dict[str, str] = field(default_factory=dict)
    cap_add: List[str] = field(default_factory=list)
    cap_drop: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, name: str, data: Optional[Dict]) -> "ComposeService":
        """Parse from docker-compose service definition."""
        if not data:
            return cls(name=name)

        return cls(
            name=name,
            image=str(data.get("image") or ""),
            container_name=str(data.get("container_name") or ""),
            restart=str(data.get("restart") or ""),
            working_dir=str(data.get("working_dir") or ""),
            user=str(data.get("user") or ""),
            hostname=str(data.get("hostname") or ""),
            privileged=_flag(data.get("privileged")),
            build=data.get("build"),
            ports=_string_list(data.get("ports")),
            environment=data.get("environment"),
            volumes=_string_list(data.get("volumes")),
            networks=data.get("networks"),
            depends_on=data.get("depends_on"),
            command=data.get("command"),
            entrypoint=data.get("entrypoint"),
            labels=_string_map(data.get("labels")),
            cap_add=_string_list(data.get("cap_add")),
            cap_drop=_string_list(data.get("cap_drop")),
        )

    @property
    def effective_name(self) -> str:
        """Container name, falling back to the service key."""
        return self.container_name or self.name

    def environment_map(self) -> Dict[str, str]:
        return environment_map(self.environment)

    def networks_list(self) -> List[str]:
        return name_list(self.networks)

    def depends_on_list(self) -> List[str]:
        return name_list(self.depends_on)

    def command_list(self) -> List[str]:
        return token_list(self.command)

    def entrypoint_list(self) -> List[str]:
        return token_list(self.entrypoint)


@dataclass
class ComposeNetwork:
    """Docker Compose network definition."""
    name: str
    driver: str = ""
    external: bool = False
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: Optional[Dict]) -> "ComposeNetwork":
        """Parse from docker-compose network definition."""
        if not data:
            return cls(name=name)

        return cls(
            name=name,
            driver=str(data.get("driver") or ""),
            external=_external(data.get("external")),
            labels=_string_map(data.get("labels")),
        )


@dataclass
class ComposeVolume:
    """Docker Compose volume definition."""
    name: str
    driver: str = ""
    external: bool = False
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: Optional[Dict]) -> "ComposeVolume":
        """Parse from docker-compose volume definition."""
        if not data:
            return cls(name=name)

        return cls(
            name=name,
            driver=str(data.get("driver") or ""),
            external=_external(data.get("external")),
            labels=_string_map(data.get("labels")),
        )


@dataclass
class ComposeFile:
    """Parsed docker-compose document."""
    version: str = ""
    services: Dict[str, ComposeService] = field(default_factory=dict)
    networks: Dict[str, ComposeNetwork] = field(default_factory=dict)
    volumes: Dict[str, ComposeVolume] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "ComposeFile":
        """
        Parse from docker-compose.yaml content.

        Raises:
            ComposeParseError: If a section or entity is not a mapping
        """
        if not data:
            return cls()

        services = {}
        for svc_name, svc_data in _entity_map(data, "services").items():
            services[str(svc_name)] = ComposeService.from_dict(str(svc_name), svc_data)

        networks = {}
        for net_name, net_data in _entity_map(data, "networks").items():
            networks[str(net_name)] = ComposeNetwork.from_dict(str(net_name), net_data)

        volumes = {}
        for vol_name, vol_data in _entity_map(data, "volumes").items():
            volumes[str(vol_name)] = ComposeVolume.from_dict(str(vol_name), vol_data)

        version = data.get("version")

        return cls(
            version="" if version is None else str(version),
            services=services,
            networks=networks,
            volumes=volumes,
        )
