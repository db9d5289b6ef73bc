"""Log destination for container output."""

from fargate_topology.core.topology.context import TopologyContext
from fargate_topology.core.topology.intrinsics import ref
from fargate_topology.core.topology.resources import (
    ContainerDefinition,
    LogGroup,
    RemovalPolicy,
)


def define_log_group(
    context: TopologyContext,
    log_group_name: str,
    scope: str = "MyLogGroup",
    removal_policy: RemovalPolicy = RemovalPolicy.DESTROY,
) -> LogGroup:
    """Declare a named log group that is removed with the stack by default."""
    return context.add(
        LogGroup(scope=scope, log_group_name=log_group_name, removal_policy=removal_policy)
    )


def route_container_logs(
    container: ContainerDefinition,
    log_group: LogGroup,
    stream_prefix: str,
) -> None:
    """Send the container's output to the log group through the awslogs driver."""
    container.log_configuration = {
        "LogDriver": "awslogs",
        "Options": {
            "awslogs-group": log_group.ref(),
            "awslogs-region": ref("AWS::Region"),
            "awslogs-stream-prefix": stream_prefix,
        },
    }
