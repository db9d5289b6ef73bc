"""Shared fixtures for the topology tests."""

from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError

from fargate_topology.core.settings import AWSSettings, TopologySettings
from fargate_topology.core.topology import ImageReference, Topology, assemble_topology

IMAGE_TAG = "0123456789abcdef"


def client_error(code: str, message: str = "error", operation: str = "Operation") -> ClientError:
    """Build a botocore ClientError with the given error code."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def resources_of_type(template: dict[str, Any], resource_type: str) -> dict[str, dict[str, Any]]:
    """Return the template resources of one type keyed by logical id."""
    return {
        logical_id: body
        for logical_id, body in template["Resources"].items()
        if body["Type"] == resource_type
    }


@pytest.fixture
def image_directory(tmp_path: Path) -> Path:
    directory = tmp_path / "docker"
    directory.mkdir()
    (directory / "Dockerfile").write_text("FROM nginx:stable\n", encoding="utf-8")
    (directory / "index.html").write_text("<h1>hello</h1>\n", encoding="utf-8")
    return directory


@pytest.fixture
def settings(image_directory: Path) -> TopologySettings:
    return TopologySettings(
        image_directory=image_directory,
        aws=AWSSettings(region="eu-west-2", profile=None),
    )


@pytest.fixture
def image() -> ImageReference:
    return ImageReference(repository_name="my-fargate-service", tag=IMAGE_TAG)


@pytest.fixture
def topology(settings: TopologySettings, image: ImageReference) -> Topology:
    return assemble_topology(settings, image)


@pytest.fixture
def template(topology: Topology) -> dict[str, Any]:
    return topology.template()
