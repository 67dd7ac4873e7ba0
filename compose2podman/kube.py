"""
Kubernetes Pod generator for podman play kube.

Converts all services of a compose document into the containers of a single
Pod manifest.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import yaml

from .config import ConverterConfig
from .errors import MissingImageError
from .specs import PortMapping, UserSpec, VolumeMount
from .types import ComposeFile, ComposeService

logger = logging.getLogger(__name__)


@dataclass
class VolumeInfo:
    """Volume referenced by at least one container of the pod."""
    name: str
    host_path: str = ""
    is_path: bool = False


def _scalar(value: str) -> Union[int, str]:
    """Emit numeric strings as integers."""
    return int(value) if value.isdecimal() else value


def generate_container(
    name: str,
    service: ComposeService,
    used_volumes: Dict[str, VolumeInfo],
) -> Dict[str, Any]:
    """
    Generate a Pod container spec from a compose service.

    Args:
        name: Service key in the compose document
        service: Compose service
        used_volumes: Volume table of the pod, updated with this service's mounts

    Returns:
        Container spec dict

    Raises:
        MissingImageError: If the service has no image
    """
    if not service.image:
        raise MissingImageError(name)

    container: Dict[str, Any] = {
        "name": service.container_name or name,
        "image": service.image,
    }

    # Entrypoint replaces the image entrypoint, command its arguments.
    # The Go compose2podman tool swapped the two; see README.
    entrypoint = service.entrypoint_list()
    if entrypoint:
        container["command"] = entrypoint
    command = service.command_list()
    if command:
        container["args"] = command

    env = service.environment_map()
    if env:
        container["env"] = [{"name": key, "value": value} for key, value in env.items()]

    if service.ports:
        ports = []
        for spec in service.ports:
            port = PortMapping.parse(spec)
            entry: Dict[str, Any] = {"containerPort": _scalar(port.container_port)}
            if port.host_port:
                entry["hostPort"] = _scalar(port.host_port_number)
                if port.host_ip:
                    entry["hostIP"] = port.host_ip
            ports.append(entry)
        container["ports"] = ports

    if service.volumes:
        mounts = []
        for spec in service.volumes:
            mount = VolumeMount.parse(spec)
            mounts.append({"name": mount.name, "mountPath": mount.mount_path})
            if mount.name not in used_volumes:
                used_volumes[mount.name] = VolumeInfo(
                    name=mount.name,
                    host_path=mount.host_path,
                    is_path=mount.is_path,
                )
        container["volumeMounts"] = mounts

    if service.working_dir:
        container["workingDir"] = service.working_dir

    if service.user or service.privileged:
        security_context: Dict[str, Any] = {}
        if service.user:
            user = UserSpec.parse(service.user)
            if user.user:
                security_context["runAsUser"] = _scalar(user.user)
            if user.group:
                security_context["runAsGroup"] = _scalar(user.group)
        if service.privileged:
            security_context["privileged"] = True
        container["securityContext"] = security_context

    return container


def generate_volume(volume: VolumeInfo) -> Dict[str, Any]:
    """Generate a Pod volume: hostPath for paths, PVC for named volumes."""
    if volume.is_path:
        return {
            "name": volume.name,
            "hostPath": {
                "path": volume.host_path,
                "type": "DirectoryOrCreate",
            },
        }
    return {
        "name": volume.name,
        "persistentVolumeClaim": {
            "claimName": volume.name,
        },
    }


def generate_pod(
    compose: ComposeFile,
    pod_name: Optional[str] = None,
    config: Optional[ConverterConfig] = None,
) -> Dict[str, Any]:
    """
    Generate a Pod manifest holding every service of the document.

    Args:
        compose: Parsed compose document
        pod_name: Pod name (blank falls back to config.pod_name)
        config: Converter configuration

    Returns:
        Pod manifest dict

    Raises:
        MissingImageError: On the first service without an image
    """
    config = config or ConverterConfig()
    name = config.resolve_pod_name(pod_name)

    used_volumes: Dict[str, VolumeInfo] = {}
    containers: List[Dict[str, Any]] = []
    for svc_name in sorted(compose.services):
        logger.debug(f"Generating container for service {svc_name}")
        containers.append(
            generate_container(svc_name, compose.services[svc_name], used_volumes)
        )

    pod_spec: Dict[str, Any] = {"containers": containers}
    if used_volumes:
        pod_spec["volumes"] = [
            generate_volume(used_volumes[vol_name]) for vol_name in sorted(used_volumes)
        ]
    pod_spec["restartPolicy"] = config.pod_restart_policy

    logger.info(
        f"Generated pod {name} with {len(containers)} containers "
        f"and {len(used_volumes)} volumes"
    )

    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": name,
            "labels": {
                "app": config.app_label,
            },
        },
        "spec": pod_spec,
    }


def generate_kube_yaml(
    compose: ComposeFile,
    pod_name: Optional[str] = None,
    config: Optional[ConverterConfig] = None,
) -> str:
    """Generate the Pod manifest as a YAML document."""
    pod = generate_pod(compose, pod_name, config)
    return yaml.safe_dump(pod, default_flow_style=False, sort_keys=False)
