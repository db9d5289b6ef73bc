"""Deployment entrypoints for the Fargate topology."""

import logging
from collections.abc import Callable

from fargate_topology.core.deployments.aws_ecs.ecr import delete_repository
from fargate_topology.core.deployments.aws_ecs.images import build_and_push_image
from fargate_topology.core.deployments.aws_ecs.session import create_session, get_identity
from fargate_topology.core.deployments.aws_ecs.stacks import destroy_stack, submit_stack
from fargate_topology.core.settings import TopologySettings
from fargate_topology.core.topology import Topology, assemble_topology, describe_image

logger = logging.getLogger(__name__)


def synth_topology(settings: TopologySettings) -> Topology:
    """Assemble the topology without touching AWS."""
    image = describe_image(settings.image_directory, settings.repository_name)
    return assemble_topology(settings, image)


def deploy_topology(settings: TopologySettings, reporter: Callable[[str], None]) -> dict[str, str]:
    """Publish the image, assemble the topology and submit it.

    Returns:
        The stack outputs.
    """
    reporter("Checking AWS credentials")
    session = create_session(settings.aws)
    identity = get_identity(session)
    reporter(f"Using AWS account {identity.account} ({identity.arn})")

    image = build_and_push_image(
        session,
        settings.image_directory,
        settings.repository_name,
        reporter,
        platform=settings.image_platform,
    )

    reporter("Assembling topology")
    topology = assemble_topology(settings, image)

    outputs = submit_stack(
        session,
        settings.stack_name,
        topology.template(),
        reporter,
        tags=settings.tags,
        waiter_delay=settings.waiter_delay_seconds,
        waiter_max_attempts=settings.waiter_max_attempts,
    )
    logger.info(f"Deployed {settings.stack_name} with image {image.uri}")
    return outputs


def destroy_topology(
    settings: TopologySettings,
    reporter: Callable[[str], None],
    delete_image_repository: bool = False,
) -> None:
    """Tear the stack down and optionally remove the image repository.

    The repository lives outside the stack, so deleting the stack leaves it in
    place unless asked otherwise.
    """
    session = create_session(settings.aws)
    destroy_stack(
        session,
        settings.stack_name,
        reporter,
        waiter_delay=settings.waiter_delay_seconds,
        waiter_max_attempts=settings.waiter_max_attempts,
    )
    if delete_image_repository:
        delete_repository(session, settings.repository_name, reporter)
