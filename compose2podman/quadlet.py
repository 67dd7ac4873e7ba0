"""
Podman Quadlet unit file generator.

Writes one .network file per declared network, one .volume file per declared
volume and one .container file per service.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .config import ConverterConfig
from .errors import OutputDirectoryError, UnitFileError
from .specs import VolumeMount
from .types import ComposeFile, ComposeNetwork, ComposeService, ComposeVolume, RestartPolicy

logger = logging.getLogger(__name__)

UnitWriter = Callable[[Path, str], None]

# Compose restart token -> systemd Restart=
RESTART_POLICY_MAP = {
    RestartPolicy.NO.value: "no",
    RestartPolicy.ALWAYS.value: "always",
    RestartPolicy.ON_FAILURE.value: "on-failure",
    RestartPolicy.UNLESS_STOPPED.value: "always",
}
DEFAULT_RESTART = "always"


def map_restart_policy(restart: Optional[str]) -> str:
    """Map a compose restart policy to a systemd Restart= value."""
    return RESTART_POLICY_MAP.get(restart or "", DEFAULT_RESTART)


def unit_service_name(name: str) -> str:
    """Name of the systemd service Quadlet generates for a container."""
    return f"{name}.service"


def write_unit_file(path: Path, content: str, mode: int = 0o644) -> None:
    """Write a unit file and set its permissions."""
    path.write_text(content, encoding="utf-8")
    os.chmod(path, mode)


def _install_section(config: ConverterConfig) -> List[str]:
    return ["", "[Install]", f"WantedBy={config.wanted_by}"]


def _label_lines(labels: Dict[str, str]) -> List[str]:
    return [f"Label={key}={val}" for key, val in labels.items()]


def _volume_line(spec: str, declared_volumes: Dict[str, ComposeVolume]) -> str:
    """Reference declared named volumes through their .volume unit."""
    mount = VolumeMount.parse(spec)
    if not mount.is_path and mount.name in declared_volumes:
        source, sep, rest = spec.partition(":")
        if sep and source == mount.name:
            return f"Volume={source}.volume:{rest}"
    return f"Volume={spec}"


def render_container_unit(
    name: str,
    service: ComposeService,
    config: Optional[ConverterConfig] = None,
    declared_volumes: Optional[Dict[str, ComposeVolume]] = None,
) -> str:
    """
    Render a .container unit for a compose service.

    Args:
        name: Service key in the compose document
        service: Compose service
        config: Converter configuration
        declared_volumes: Top-level volumes of the document

    Returns:
        Unit file content
    """
    config = config or ConverterConfig()
    declared_volumes = declared_volumes or {}

    lines = ["[Unit]", f"Description={name} container"]

    deps = service.depends_on_list()
    if deps:
        units = " ".join(unit_service_name(dep) for dep in deps)
        lines.append(f"After={units}")
        lines.append(f"Requires={units}")

    lines += ["", "[Container]"]

    if service.image:
        lines.append(f"Image={service.image}")
    lines.append(f"ContainerName={service.effective_name}")

    for key, val in service.environment_map().items():
        lines.append(f"Environment={key}={val}")

    for port in service.ports:
        lines.append(f"PublishPort={port}")

    for vol in service.volumes:
        lines.append(_volume_line(vol, declared_volumes))

    for net in service.networks_list():
        lines.append(f"Network={net}.network")

    if service.working_dir:
        lines.append(f"WorkingDir={service.working_dir}")
    if service.user:
        lines.append(f"User={service.user}")

    entrypoint = service.entrypoint_list()
    if entrypoint:
        lines.append(f"Entrypoint={' '.join(entrypoint)}")
    command = service.command_list()
    if command:
        lines.append(f"Exec={' '.join(command)}")

    if service.hostname:
        lines.append(f"HostName={service.hostname}")
    if service.privileged:
        lines.append("SecurityLabelDisable=true")

    for cap in service.cap_add:
        lines.append(f"AddCapability={cap}")
    for cap in service.cap_drop:
        lines.append(f"DropCapability={cap}")

    lines += _label_lines(service.labels)

    lines += [
        "",
        "[Service]",
        f"Restart={map_restart_policy(service.restart)}",
        f"TimeoutStartSec={config.start_timeout}",
    ]
    lines += _install_section(config)

    return "\n".join(lines) + "\n"


def render_volume_unit(
    name: str,
    volume: ComposeVolume,
    config: Optional[ConverterConfig] = None,
) -> str:
    """Render a .volume unit for a declared volume."""
    config = config or ConverterConfig()

    lines = ["[Unit]", f"Description={name} volume", "", "[Volume]"]
    if volume.driver and volume.driver != "local":
        lines.append(f"Driver={volume.driver}")
    lines += _label_lines(volume.labels)
    lines += _install_section(config)

    return "\n".join(lines) + "\n"


def render_network_unit(
    name: str,
    network: ComposeNetwork,
    config: Optional[ConverterConfig] = None,
) -> str:
    """Render a .network unit for a declared network."""
    config = config or ConverterConfig()

    lines = ["[Unit]", f"Description={name} network", "", "[Network]"]
    if network.driver:
        lines.append(f"Driver={network.driver}")
    lines += _label_lines(network.labels)
    lines += _install_section(config)

    return "\n".join(lines) + "\n"


class QuadletGenerator:
    """Generates Quadlet unit files for a compose document."""

    def __init__(
        self,
        compose: ComposeFile,
        output_dir: Union[str, Path],
        writer: Optional[UnitWriter] = None,
        config: Optional[ConverterConfig] = None,
    ):
        self.compose = compose
        self.output_dir = Path(output_dir)
        self.config = config or ConverterConfig()
        self.writer = writer or self._default_writer

    def _default_writer(self, path: Path, content: str) -> None:
        write_unit_file(path, content, self.config.file_mode)

    def generate(self) -> List[Path]:
        """
        Write all unit files.

        Returns:
            Paths of the written files, in write order

        Raises:
            OutputDirectoryError: If the output directory cannot be created
            UnitFileError: On the first file that cannot be written
        """
        try:
            self.output_dir.mkdir(mode=self.config.dir_mode, parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(self.output_dir, str(e)) from e

        written = []

        for name in sorted(self.compose.networks):
            content = render_network_unit(name, self.compose.networks[name], self.config)
            written.append(self._write(name, "network", content))

        for name in sorted(self.compose.volumes):
            content = render_volume_unit(name, self.compose.volumes[name], self.config)
            written.append(self._write(name, "volume", content))

        for name in sorted(self.compose.services):
            content = render_container_unit(
                name,
                self.compose.services[name],
                self.config,
                self.compose.volumes,
            )
            written.append(self._write(name, "container", content))

        logger.info(f"Generated {len(written)} quadlet files in {self.output_dir}")
        return written

    def _write(self, name: str, kind: str, content: str) -> Path:
        path = self.output_dir / f"{name}.{kind}"
        logger.debug(f"Writing {kind} file {path}")
        try:
            self.writer(path, content)
        except OSError as e:
            raise UnitFileError(name, kind, path, str(e)) from e
        return path


def generate_quadlet_files(
    compose: ComposeFile,
    output_dir: Union[str, Path],
    writer: Optional[UnitWriter] = None,
    config: Optional[ConverterConfig] = None,
) -> List[Path]:
    """Write Quadlet unit files for a compose document into output_dir."""
    return QuadletGenerator(compose, output_dir, writer, config).generate()
