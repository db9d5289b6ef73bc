"""AWS deployment helpers for the Fargate topology."""

from fargate_topology.core.deployments.aws_ecs.deploy import (
    deploy_topology,
    destroy_topology,
    synth_topology,
)
from fargate_topology.core.deployments.aws_ecs.ecr import (
    delete_repository,
    ensure_repository,
    image_exists,
)
from fargate_topology.core.deployments.aws_ecs.images import build_and_push_image
from fargate_topology.core.deployments.aws_ecs.models import (
    CallerIdentity,
    RepositoryInfo,
    StackResourceStatus,
    StackStatus,
)
from fargate_topology.core.deployments.aws_ecs.session import create_session, get_identity
from fargate_topology.core.deployments.aws_ecs.stacks import destroy_stack, submit_stack
from fargate_topology.core.deployments.aws_ecs.status import check_stack

__all__ = [
    "CallerIdentity",
    "RepositoryInfo",
    "StackResourceStatus",
    "StackStatus",
    "build_and_push_image",
    "check_stack",
    "create_session",
    "delete_repository",
    "deploy_topology",
    "destroy_stack",
    "destroy_topology",
    "ensure_repository",
    "get_identity",
    "image_exists",
    "submit_stack",
    "synth_topology",
]
