"""Fargate topology core modules."""

from fargate_topology.core.settings import AWSSettings, TopologySettings, get_settings
from fargate_topology.core.topology import Topology, TopologyContext, assemble_topology

__all__ = [
    "AWSSettings",
    "Topology",
    "TopologyContext",
    "TopologySettings",
    "assemble_topology",
    "get_settings",
]
