"""Fargate topology - a hardened, load-balanced nginx service on ECS Fargate."""

from fargate_topology.core import (
    Topology,
    TopologyContext,
    TopologySettings,
    assemble_topology,
    get_settings,
)

__all__ = [
    "Topology",
    "TopologyContext",
    "TopologySettings",
    "assemble_topology",
    "get_settings",
]
