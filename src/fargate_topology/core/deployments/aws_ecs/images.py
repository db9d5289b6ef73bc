"""Docker build and push helpers."""

import base64
import logging
import shutil
import subprocess  # nosec B404
from collections.abc import Callable
from pathlib import Path

from boto3.session import Session
from botocore.exceptions import ClientError

from fargate_topology.core.deployments.aws_ecs.ecr import ensure_repository, image_exists
from fargate_topology.core.topology.images import ImageReference, describe_image

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM = "linux/amd64"


def build_and_push_image(
    session: Session,
    directory: Path,
    repository_name: str,
    reporter: Callable[[str], None],
    platform: str = DEFAULT_PLATFORM,
) -> ImageReference:
    """Build the directory's image and push it to ECR.

    The image is tagged with the content hash of the directory; when the
    repository already holds that tag the build is skipped.

    Args:
        session: boto3 session.
        directory: Directory holding the Dockerfile.
        repository_name: ECR repository to publish to.
        reporter: Progress callback.
        platform: Target platform passed to ``docker build``.

    Returns:
        The published image reference.
    """
    reference = describe_image(directory, repository_name)
    reporter(f"Ensuring ECR repository {repository_name}")
    repository = ensure_repository(session, repository_name)
    uri = f"{repository.uri}:{reference.tag}"
    published = ImageReference(repository_name=repository.name, tag=reference.tag, uri=uri)

    if image_exists(session, repository.name, reference.tag):
        reporter(f"Image {uri} already published, skipping build")
        return published

    docker = _docker_executable()
    _docker_login(session, docker, reporter)

    reporter(f"Building and pushing image ({platform})")
    _docker(docker, reporter, "build", "--platform", platform, "-t", uri, str(directory))
    _docker(docker, reporter, "push", uri)

    logger.info(f"Published image {uri}")
    return published


def _docker_executable() -> str:
    executable = shutil.which("docker")
    if not executable:
        raise RuntimeError("Docker is required to build and push images.")
    return executable


def _docker_login(session: Session, docker: str, reporter: Callable[[str], None]) -> None:
    """Log Docker in to the account's ECR registry."""
    reporter("Authenticating Docker with ECR")
    try:
        # spellchecker:ignore-next-line
        response = session.client("ecr").get_authorization_token()
    except ClientError as exc:
        raise RuntimeError(f"Failed to authenticate with ECR: {exc}") from exc

    # spellchecker:ignore-next-line
    grant = response["authorizationData"][0]
    # spellchecker:ignore-next-line
    username, password = base64.b64decode(grant["authorizationToken"]).decode().split(":", 1)
    _docker(
        docker,
        reporter,
        "login",
        "--username",
        username,
        "--password-stdin",
        grant["proxyEndpoint"],
        stdin=password.encode("utf-8"),
    )


def _docker(
    docker: str,
    reporter: Callable[[str], None],
    *args: str,
    stdin: bytes | None = None,
) -> None:
    """Run one docker subcommand, failing on a non-zero exit."""
    command = [docker, *args]
    reporter(f"Running: {' '.join(command)}")
    try:
        subprocess.run(command, check=True, input=stdin)  # nosec B603
    except subprocess.CalledProcessError as exc:
        raise RuntimeError(f"docker {args[0]} failed with exit code {exc.returncode}") from exc
