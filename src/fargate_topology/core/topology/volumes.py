"""Writable scratch volumes for a container with a read-only root filesystem."""

from fargate_topology.core.topology.resources import (
    ContainerDefinition,
    MountPoint,
    TaskDefinition,
    TopologyError,
    Volume,
)
from fargate_topology.core.topology.service import ServiceBundle

# nginx and the session-manager agent write to exactly these paths.
SCRATCH_VOLUMES: tuple[tuple[str, str], ...] = (
    ("cacheVolume", "/var/cache/nginx"),
    ("runVolume", "/var/run"),
    ("tmpVolume", "/tmp/nginx"),  # nosec B108
    ("confVolume", "/etc/nginx"),
    ("libAmazonVolume", "/var/lib/amazon"),
    ("logAmazonVolume", "/var/log/amazon"),
)


def mount_volume(
    task_definition: TaskDefinition,
    container: ContainerDefinition,
    volume_name: str,
    container_path: str,
    read_only: bool = False,
) -> MountPoint:
    """Mount a declared volume of the task definition into a container."""
    if not task_definition.has_volume(volume_name):
        raise TopologyError(
            f"Volume {volume_name} is not declared on {task_definition.logical_id}."
        )
    mount_point = MountPoint(
        container_path=container_path,
        source_volume=volume_name,
        read_only=read_only,
    )
    container.add_mount_points(mount_point)
    return mount_point


def declare_scratch_volumes(bundle: ServiceBundle) -> list[Volume]:
    """Add the scratch volumes to the task definition and mount them read-write."""
    volumes = []
    for name, container_path in SCRATCH_VOLUMES:
        volume = bundle.task_definition.add_volume(Volume(name=name))
        mount_volume(bundle.task_definition, bundle.container, name, container_path)
        volumes.append(volume)
    return volumes
