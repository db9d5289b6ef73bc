"""Declarative model of the Fargate service topology."""

from fargate_topology.core.topology.assembler import Topology, assemble_topology
from fargate_topology.core.topology.cluster import ClusterPlacement, define_cluster
from fargate_topology.core.topology.context import TopologyContext
from fargate_topology.core.topology.grants import (
    grant_exec_channels,
    grant_pull_push,
    grant_write,
)
from fargate_topology.core.topology.images import ImageReference, describe_image, directory_hash
from fargate_topology.core.topology.logs import define_log_group, route_container_logs
from fargate_topology.core.topology.network import NetworkBoundary, define_network
from fargate_topology.core.topology.overrides import apply_overrides, harden_task_definitions
from fargate_topology.core.topology.resources import RemovalPolicy, Resource, TopologyError
from fargate_topology.core.topology.service import ServiceBundle, define_load_balanced_service
from fargate_topology.core.topology.volumes import SCRATCH_VOLUMES, declare_scratch_volumes

__all__ = [
    "ClusterPlacement",
    "ImageReference",
    "NetworkBoundary",
    "RemovalPolicy",
    "Resource",
    "SCRATCH_VOLUMES",
    "ServiceBundle",
    "Topology",
    "TopologyContext",
    "TopologyError",
    "apply_overrides",
    "assemble_topology",
    "declare_scratch_volumes",
    "define_cluster",
    "define_load_balanced_service",
    "define_log_group",
    "define_network",
    "describe_image",
    "directory_hash",
    "grant_exec_channels",
    "grant_pull_push",
    "grant_write",
    "harden_task_definitions",
    "route_container_logs",
]
