"""
Docker Compose parser for compose2podman.

Loads and parses docker-compose.yaml files.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ComposeParseError
from .types import ComposeFile

logger = logging.getLogger(__name__)

COMPOSE_FILE_NAMES = [
    "docker-compose.yaml",
    "docker-compose.yml",
    "compose.yaml",
    "compose.yml",
]


def find_compose_file(path: str) -> Path:
    """
    Resolve the compose file for a path.

    Args:
        path: Compose file, or a directory containing one

    Returns:
        Path to the compose file

    Raises:
        FileNotFoundError: If no compose file is found
    """
    compose_path = Path(path)
    if compose_path.is_dir():
        for name in COMPOSE_FILE_NAMES:
            candidate = compose_path / name
            if candidate.exists():
                return candidate
        raise FileNotFoundError(
            f"No docker-compose file found in {path}. "
            f"Tried: {', '.join(COMPOSE_FILE_NAMES)}"
        )

    if not compose_path.exists():
        raise FileNotFoundError(f"compose file not found at {path}")
    return compose_path


def load_docker_compose(path: str) -> Dict[str, Any]:
    """
    Load the raw content of a compose file.

    Args:
        path: Compose file, or a directory containing one

    Returns:
        Decoded YAML mapping (empty for an empty file)

    Raises:
        FileNotFoundError: If the compose file is not found
        ComposeParseError: If the file is not valid YAML or not a mapping
    """
    compose_path = find_compose_file(path)

    try:
        with open(compose_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ComposeParseError(f"failed to parse compose file {compose_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ComposeParseError(
            f"failed to parse compose file {compose_path}: "
            f"expected a mapping, got {type(data).__name__}"
        )
    return data


def parse_compose(data: Optional[Dict[str, Any]]) -> ComposeFile:
    """Build a ComposeFile from decoded compose content."""
    return ComposeFile.from_dict(data)


def load_compose_file(path: str) -> ComposeFile:
    """
    Load and parse a compose file.

    Args:
        path: Compose file, or a directory containing one

    Returns:
        Parsed ComposeFile
    """
    compose = parse_compose(load_docker_compose(path))
    logger.debug(
        f"Loaded {path}: {len(compose.services)} services, "
        f"{len(compose.networks)} networks, {len(compose.volumes)} volumes"
    )
    return compose
