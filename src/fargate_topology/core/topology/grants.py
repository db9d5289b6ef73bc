"""Permission grants attached to task roles."""

from collections.abc import Sequence
from typing import Any

from fargate_topology.core.topology.images import ImageReference
from fargate_topology.core.topology.policies import PolicyStatement
from fargate_topology.core.topology.resources import LogGroup, Role
from fargate_topology.core.topology.service import EXEC_CHANNEL_ACTIONS

ECR_PULL_ACTIONS = (
    "ecr:BatchCheckLayerAvailability",
    "ecr:GetDownloadUrlForLayer",
    "ecr:BatchGetImage",
)
ECR_PUSH_ACTIONS = (
    "ecr:PutImage",
    "ecr:InitiateLayerUpload",
    "ecr:UploadLayerPart",
    "ecr:CompleteLayerUpload",
)
ECR_AUTH_ACTION = "ecr:GetAuthorizationToken"
LOG_WRITE_ACTIONS = ("logs:CreateLogStream", "logs:PutLogEvents")


def grant_pull_push(role: Role, image: ImageReference) -> None:
    """Allow the role to pull from and push to the image's repository."""
    role.add_to_principal_policy(
        PolicyStatement(
            actions=ECR_PULL_ACTIONS + ECR_PUSH_ACTIONS,
            resources=(image.repository_arn(),),
        )
    )
    # Registry login is not scoped to a repository.
    role.add_to_principal_policy(PolicyStatement(actions=(ECR_AUTH_ACTION,), resources=("*",)))


def grant_write(role: Role, log_group: LogGroup) -> None:
    """Allow the role to create streams in and write events to the log group."""
    role.add_to_principal_policy(
        PolicyStatement(actions=LOG_WRITE_ACTIONS, resources=(log_group.get_att("Arn"),))
    )


def grant_exec_channels(role: Role, resources: Sequence[Any] = ("*",)) -> None:
    """Allow the role to open the session-manager control and data channels."""
    role.add_to_principal_policy(
        PolicyStatement(actions=EXEC_CHANNEL_ACTIONS, resources=tuple(resources))
    )
