"""Runtime settings for the Fargate topology."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fargate_topology.config.paths import bundled_image_dir, env_path

ENV_FILE_PATH = str(env_path())


class AWSSettings(BaseSettings):
    """AWS account access used for publishing and submission."""

    model_config = SettingsConfigDict(env_prefix="AWS_", env_file=ENV_FILE_PATH, extra="ignore")

    region: str = Field(default="eu-west-2", description="AWS region")
    profile: str | None = Field(default=None, description="AWS named profile")


class TopologySettings(BaseSettings):
    """Identifiers and sizing for the deployed topology.

    The defaults are the fixed external-facing identifiers of the service, so
    changing them produces a different deployment rather than an update of the
    existing one.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOPOLOGY_",
        env_file=ENV_FILE_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    stack_name: str = Field(default="EcsStack", description="CloudFormation stack name")
    description: str = Field(
        default="Load-balanced Fargate service with a read-only root filesystem",
        description="CloudFormation template description",
    )

    # Network boundary
    vpc_cidr: str = Field(default="10.0.0.0/16", description="VPC address space")
    max_azs: int = Field(default=2, description="Number of availability zones")
    cidr_mask: int = Field(default=24, description="Public subnet mask size")

    # Cluster and service
    cluster_name: str = Field(default="my-ecs-cluster")
    service_name: str = Field(default="ecs-service")
    container_port: int = Field(default=80)
    desired_count: int = Field(default=1)
    cpu: int = Field(default=256, description="Task CPU units")
    memory: int = Field(default=512, description="Task memory (MiB)")
    public_load_balancer: bool = Field(default=True)
    assign_public_ip: bool = Field(default=True)
    enable_execute_command: bool = Field(default=True)

    # Image
    image_directory: Path = Field(
        default_factory=bundled_image_dir,
        description="Directory holding the image Dockerfile",
    )
    repository_name: str = Field(default="my-fargate-service", description="ECR repository")
    image_platform: str = Field(default="linux/amd64")

    # Logging and permissions
    log_group_name: str = Field(default="/ecs/my-fargate-service")
    exec_channel_resources: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Resource scope for the session-manager channel grant",
    )

    tags: dict[str, str] = Field(
        default_factory=lambda: {"managed-by": "fargate-topology"},
        description="Tags applied to every taggable resource",
    )

    waiter_delay_seconds: int = Field(default=15)
    waiter_max_attempts: int = Field(default=240)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")

    aws: AWSSettings = Field(default_factory=AWSSettings)


def get_settings() -> TopologySettings:
    """Load and return the topology configuration.

    Values come from the environment and the user env file, thanks to
    pydantic-settings.
    """
    return TopologySettings(aws=AWSSettings())
