"""Deployment status checks for the stack."""

from boto3.session import Session
from botocore.exceptions import ClientError

from fargate_topology.core.deployments.aws_ecs.models import (
    NOT_DEPLOYED,
    StackResourceStatus,
    StackStatus,
)
from fargate_topology.core.deployments.aws_ecs.stacks import stack_outputs


def check_stack(session: Session, stack_name: str) -> StackStatus:
    """Return the stack status, its resources and outputs."""
    cloudformation = session.client("cloudformation")
    try:
        response = cloudformation.describe_stacks(StackName=stack_name)
    except ClientError as exc:
        if "does not exist" in str(exc):
            return StackStatus(stack_name=stack_name, status=NOT_DEPLOYED)
        raise RuntimeError(f"Failed to read stack {stack_name}: {exc}") from exc

    stacks = response.get("Stacks", [])
    if not stacks:
        return StackStatus(stack_name=stack_name, status=NOT_DEPLOYED)

    status = StackStatus(
        stack_name=stack_name,
        status=str(stacks[0].get("StackStatus", "")),
        outputs=stack_outputs(cloudformation, stack_name),
    )
    try:
        resources = cloudformation.describe_stack_resources(StackName=stack_name)
    except ClientError as exc:
        raise RuntimeError(f"Failed to list resources of {stack_name}: {exc}") from exc

    for resource in resources.get("StackResources", []):
        status.resources.append(
            StackResourceStatus(
                logical_id=str(resource["LogicalResourceId"]),
                resource_type=str(resource.get("ResourceType", "")),
                status=str(resource.get("ResourceStatus", "")),
                physical_id=resource.get("PhysicalResourceId"),
            )
        )
    return status
