"""Assembly of the full topology in dependency order."""

import logging
from dataclasses import dataclass
from typing import Any

from fargate_topology.core.settings import TopologySettings
from fargate_topology.core.topology.cluster import ClusterPlacement, define_cluster
from fargate_topology.core.topology.context import TopologyContext
from fargate_topology.core.topology.grants import (
    grant_exec_channels,
    grant_pull_push,
    grant_write,
)
from fargate_topology.core.topology.images import ImageReference
from fargate_topology.core.topology.logs import define_log_group, route_container_logs
from fargate_topology.core.topology.network import NetworkBoundary, define_network
from fargate_topology.core.topology.overrides import apply_overrides, harden_task_definitions
from fargate_topology.core.topology.resources import LogGroup, Volume
from fargate_topology.core.topology.service import ServiceBundle, define_load_balanced_service
from fargate_topology.core.topology.volumes import declare_scratch_volumes

logger = logging.getLogger(__name__)


@dataclass
class Topology:
    """The assembled graph and handles to its main parts."""

    context: TopologyContext
    image: ImageReference
    network: NetworkBoundary
    placement: ClusterPlacement
    service: ServiceBundle
    volumes: list[Volume]
    log_group: LogGroup

    def template(self) -> dict[str, Any]:
        return self.context.to_template()


def assemble_topology(settings: TopologySettings, image: ImageReference) -> Topology:
    """Declare every resource of the topology around a published image.

    Args:
        settings: Topology identifiers and sizing.
        image: Reference of the image the service runs.

    Returns:
        The assembled topology, ready to be rendered and submitted.
    """
    context = TopologyContext(
        settings.stack_name,
        description=settings.description,
        tags={**settings.tags, "topology": settings.stack_name},
    )

    network = define_network(
        context,
        max_azs=settings.max_azs,
        cidr_mask=settings.cidr_mask,
        cidr_block=settings.vpc_cidr,
    )
    placement = define_cluster(context, network, settings.cluster_name)
    service = define_load_balanced_service(
        context,
        placement,
        image,
        settings.service_name,
        container_port=settings.container_port,
        public_load_balancer=settings.public_load_balancer,
        assign_public_ip=settings.assign_public_ip,
        enable_execute_command=settings.enable_execute_command,
        exec_channel_resources=settings.exec_channel_resources,
        desired_count=settings.desired_count,
        cpu=settings.cpu,
        memory=settings.memory,
    )

    apply_overrides(context, service.scope, harden_task_definitions)
    volumes = declare_scratch_volumes(service)

    grant_pull_push(service.execution_role, image)

    log_group = define_log_group(context, settings.log_group_name)
    route_container_logs(service.container, log_group, settings.service_name)
    grant_write(service.execution_role, log_group)

    grant_exec_channels(service.execution_role, settings.exec_channel_resources)

    logger.info(
        f"Assembled topology {settings.stack_name} with {len(context.resources)} resources"
    )
    return Topology(
        context=context,
        image=image,
        network=network,
        placement=placement,
        service=service,
        volumes=volumes,
        log_group=log_group,
    )
