"""AWS session helpers."""

import logging
from typing import Any

from boto3.session import Session
from botocore.exceptions import ClientError

from fargate_topology.core.deployments.aws_ecs.models import CallerIdentity
from fargate_topology.core.settings import AWSSettings

logger = logging.getLogger(__name__)


def create_session(settings: AWSSettings) -> Session:
    """Create a boto3 session for the configured region and profile."""
    options: dict[str, Any] = {"region_name": settings.region}
    if settings.profile:
        options["profile_name"] = settings.profile
    logger.debug(f"Creating AWS session with {options}")
    return Session(**options)


def get_identity(session: Session) -> CallerIdentity:
    """Return the identity the session's credentials resolve to."""
    try:
        response = session.client("sts").get_caller_identity()
    except ClientError as exc:
        raise RuntimeError(f"Failed to read AWS identity: {exc}") from exc

    return CallerIdentity(
        account=str(response.get("Account", "")),
        arn=str(response.get("Arn", "")),
        user_id=str(response.get("UserId", "")),
    )
