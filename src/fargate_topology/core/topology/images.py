"""Container image references addressed by source content hash."""

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fargate_topology.core.topology.intrinsics import sub

IGNORED_NAMES = frozenset({".git", "__pycache__", ".DS_Store"})


@dataclass(frozen=True)
class ImageReference:
    """An immutable image in an ECR repository.

    The tag is the content hash of the build directory, so the same sources
    always resolve to the same URI.
    """

    repository_name: str
    tag: str
    uri: str | None = None

    def image_uri(self) -> dict[str, Any]:
        """Return the image URI as a template value."""
        return sub(
            "${AWS::AccountId}.dkr.ecr.${AWS::Region}.${AWS::URLSuffix}/"
            f"{self.repository_name}:{self.tag}"
        )

    def repository_arn(self) -> dict[str, Any]:
        """Return the repository ARN as a template value."""
        return sub(
            "arn:${AWS::Partition}:ecr:${AWS::Region}:${AWS::AccountId}:repository/"
            f"{self.repository_name}"
        )


def directory_hash(directory: Path) -> str:
    """Return a stable SHA-256 over the relative paths and contents of a directory."""
    if not directory.is_dir():
        raise RuntimeError(f"Image directory not found: {directory}")

    digest = hashlib.sha256()
    for path in sorted(directory.rglob("*")):
        relative = path.relative_to(directory)
        if IGNORED_NAMES.intersection(relative.parts) or not path.is_file():
            continue
        digest.update(relative.as_posix().encode("utf-8"))
        digest.update(b"\0")
        digest.update(path.read_bytes())
        digest.update(b"\0")
    return digest.hexdigest()


def describe_image(directory: Path, repository_name: str) -> ImageReference:
    """Return the reference the directory's image will be published under."""
    return ImageReference(repository_name=repository_name, tag=directory_hash(directory))
