"""ECR helpers for the image repository."""

from collections.abc import Callable
from typing import Any

from boto3.session import Session
from botocore.exceptions import ClientError

from fargate_topology.core.deployments.aws_ecs.models import RepositoryInfo


def ensure_repository(session: Session, name: str) -> RepositoryInfo:
    """Ensure an ECR repository exists and return its details."""
    ecr = session.client("ecr")
    try:
        response = ecr.describe_repositories(repositoryNames=[name])
        return _repository_info(response["repositories"][0])
    except ClientError as exc:
        code = exc.response.get("Error", {}).get("Code")
        if code != "RepositoryNotFoundException":
            raise RuntimeError(f"Failed to read ECR repo {name}: {exc}") from exc

    try:
        response = ecr.create_repository(repositoryName=name)
    except ClientError as exc:
        raise RuntimeError(f"Failed to create ECR repo {name}: {exc}") from exc
    return _repository_info(response["repository"])


def image_exists(session: Session, repository_name: str, tag: str) -> bool:
    """Return true when the repository already holds an image with the tag."""
    ecr = session.client("ecr")
    try:
        response = ecr.describe_images(
            repositoryName=repository_name,
            imageIds=[{"imageTag": tag}],
        )
    except ClientError as exc:
        code = exc.response.get("Error", {}).get("Code")
        if code in {"ImageNotFoundException", "RepositoryNotFoundException"}:
            return False
        raise RuntimeError(f"Failed to read images of {repository_name}: {exc}") from exc
    return bool(response.get("imageDetails"))


def delete_repository(session: Session, name: str, reporter: Callable[[str], None]) -> None:
    """Delete an ECR repository and its images if it exists."""
    ecr = session.client("ecr")
    try:
        ecr.delete_repository(repositoryName=name, force=True)
    except ClientError as exc:
        code = exc.response.get("Error", {}).get("Code")
        if code == "RepositoryNotFoundException":
            reporter(f"ECR repository {name} does not exist")
            return
        raise RuntimeError(f"Failed to delete ECR repo {name}: {exc}") from exc
    reporter(f"Deleted ECR repository {name}")


def _repository_info(repository: dict[str, Any]) -> RepositoryInfo:
    return RepositoryInfo(
        name=str(repository["repositoryName"]),
        uri=str(repository["repositoryUri"]),
        arn=str(repository["repositoryArn"]),
    )
