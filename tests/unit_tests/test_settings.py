"""Tests for topology settings."""

from pathlib import Path

import pytest

import fargate_topology
from fargate_topology.core.settings import AWSSettings, TopologySettings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TOPOLOGY_STACK_NAME",
        "TOPOLOGY_CLUSTER_NAME",
        "TOPOLOGY_IMAGE_DIRECTORY",
        "AWS_REGION",
        "AWS_PROFILE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_the_fixed_identifiers() -> None:
    settings = TopologySettings(_env_file=None, aws=AWSSettings(_env_file=None))

    assert settings.stack_name == "EcsStack"
    assert settings.cluster_name == "my-ecs-cluster"
    assert settings.service_name == "ecs-service"
    assert settings.repository_name == "my-fargate-service"
    assert settings.log_group_name == "/ecs/my-fargate-service"
    assert settings.container_port == 80
    assert settings.max_azs == 2
    assert settings.cidr_mask == 24
    assert settings.exec_channel_resources == ["*"]
    assert settings.image_directory.name == "docker"


def test_default_image_directory_ships_with_the_package() -> None:
    settings = TopologySettings(_env_file=None, aws=AWSSettings(_env_file=None))

    package_dir = Path(fargate_topology.__file__).resolve().parent
    assert settings.image_directory == package_dir / "docker"
    assert (settings.image_directory / "Dockerfile").is_file()
    assert (settings.image_directory / "index.html").is_file()


def test_environment_overrides_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TOPOLOGY_STACK_NAME", "StagingStack")
    monkeypatch.setenv("AWS_REGION", "us-east-1")

    settings = TopologySettings(_env_file=None, aws=AWSSettings(_env_file=None))

    assert settings.stack_name == "StagingStack"
    assert settings.aws.region == "us-east-1"
