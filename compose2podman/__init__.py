"""
compose2podman - Docker Compose to Podman converter

Converts docker-compose.yaml to a Kubernetes Pod manifest for podman play kube,
or to Podman Quadlet unit files.
"""

__version__ = "0.1.0"

from .types import (
    RestartPolicy,
    ComposeService,
    ComposeNetwork,
    ComposeVolume,
    ComposeFile,
    environment_map,
    name_list,
    token_list,
)

from .specs import (
    PortMapping,
    VolumeMount,
    UserSpec,
    parse_port,
    parse_volume,
    parse_user,
    is_host_path,
    path_to_volume_name,
)

from .config import (
    ConverterConfig,
    load_converter_config,
)

from .errors import (
    ComposeError,
    ComposeParseError,
    ConfigError,
    MissingImageError,
    OutputDirectoryError,
    UnitFileError,
)

from .parser import (
    load_compose_file,
    parse_compose,
)

from .kube import (
    generate_pod,
    generate_kube_yaml,
)

from .quadlet import (
    QuadletGenerator,
    generate_quadlet_files,
    map_restart_policy,
    render_container_unit,
    render_volume_unit,
    render_network_unit,
)

__all__ = [
    # Types
    "RestartPolicy",
    "ComposeService",
    "ComposeNetwork",
    "ComposeVolume",
    "ComposeFile",
    "environment_map",
    "name_list",
    "token_list",
    # Spec parsers
    "PortMapping",
    "VolumeMount",
    "UserSpec",
    "parse_port",
    "parse_volume",
    "parse_user",
    "is_host_path",
    "path_to_volume_name",
    # Config
    "ConverterConfig",
    "load_converter_config",
    # Errors
    "ComposeError",
    "ComposeParseError",
    "ConfigError",
    "MissingImageError",
    "OutputDirectoryError",
    "UnitFileError",
    # Parser
    "load_compose_file",
    "parse_compose",
    # Generators
    "generate_pod",
    "generate_kube_yaml",
    "QuadletGenerator",
    "generate_quadlet_files",
    "map_restart_policy",
    "render_container_unit",
    "render_volume_unit",
    "render_network_unit",
]
