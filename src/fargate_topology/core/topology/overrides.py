"""Property overrides applied across a declared subtree."""

import logging
from collections.abc import Callable

from fargate_topology.core.topology.context import TopologyContext
from fargate_topology.core.topology.resources import Resource, TaskDefinition

logger = logging.getLogger(__name__)

Visitor = Callable[[Resource], None]

READONLY_ROOT_FILESYSTEM = "ReadonlyRootFilesystem"
INIT_PROCESS_ENABLED = "LinuxParameters.InitProcessEnabled"


def apply_overrides(context: TopologyContext, scope: str, visitor: Visitor) -> int:
    """Run a visitor over every resource at or below a scope.

    Returns:
        The number of resources visited.
    """
    visited = 0
    for resource in context.walk(scope):
        visitor(resource)
        visited += 1
    logger.debug(f"Visited {visited} resources under {scope}")
    return visited


def harden_task_definitions(resource: Resource) -> None:
    """Force a read-only root filesystem and an init process on every container.

    The init process reaps the zombie children the embedded session-manager
    agent leaves behind.
    """
    if not isinstance(resource, TaskDefinition):
        return
    for index in range(len(resource.containers)):
        prefix = f"ContainerDefinitions.{index}"
        resource.add_property_override(f"{prefix}.{READONLY_ROOT_FILESYSTEM}", True)
        resource.add_property_override(f"{prefix}.{INIT_PROCESS_ENABLED}", True)
