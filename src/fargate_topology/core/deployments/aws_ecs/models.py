"""Data models for stack deployment."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CallerIdentity:
    """The AWS principal a session acts as."""

    account: str
    arn: str
    user_id: str


@dataclass(frozen=True)
class RepositoryInfo:
    """An ECR repository the image is published to."""

    name: str
    uri: str
    arn: str


@dataclass
class StackResourceStatus:
    """Status of one resource in a deployed stack."""

    logical_id: str
    resource_type: str
    status: str
    physical_id: str | None = None


@dataclass
class StackStatus:
    """Status of a deployed stack."""

    stack_name: str
    status: str
    resources: list[StackResourceStatus] = field(default_factory=list)
    outputs: dict[str, str] = field(default_factory=dict)

    @property
    def deployed(self) -> bool:
        return self.status != NOT_DEPLOYED


NOT_DEPLOYED = "not deployed"
