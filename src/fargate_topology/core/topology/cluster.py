"""Compute cluster declaration."""

from dataclasses import dataclass

from fargate_topology.core.topology.context import TopologyContext
from fargate_topology.core.topology.network import NetworkBoundary
from fargate_topology.core.topology.resources import Cluster


@dataclass
class ClusterPlacement:
    """A cluster and the network boundary its workloads are placed in."""

    cluster: Cluster
    network: NetworkBoundary

    @property
    def name(self) -> str:
        return self.cluster.cluster_name


def define_cluster(
    context: TopologyContext,
    network: NetworkBoundary,
    cluster_name: str,
    scope: str = "MyEcsCluster",
) -> ClusterPlacement:
    """Declare a named ECS cluster inside the network boundary."""
    cluster = context.add(Cluster(scope=scope, cluster_name=cluster_name))
    return ClusterPlacement(cluster=cluster, network=network)
