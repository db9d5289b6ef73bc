"""IAM policy documents for the topology."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

POLICY_VERSION = "2012-10-17"


class Effect(StrEnum):
    """Effect of a policy statement."""

    ALLOW = "Allow"
    DENY = "Deny"


@dataclass(frozen=True)
class PolicyStatement:
    """A single IAM policy statement.

    Resources may be plain ARNs or CloudFormation intrinsics, so they are kept
    as a tuple of arbitrary values and rendered as-is.
    """

    actions: tuple[str, ...]
    resources: tuple[Any, ...]
    effect: Effect = Effect.ALLOW

    def to_json(self) -> dict[str, Any]:
        """Render the statement in IAM JSON form."""
        return {
            "Action": self.actions[0] if len(self.actions) == 1 else list(self.actions),
            "Effect": self.effect.value,
            "Resource": self.resources[0] if len(self.resources) == 1 else list(self.resources),
        }


def policy_document(statements: list[PolicyStatement]) -> dict[str, Any]:
    """Return a policy document holding the given statements."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [statement.to_json() for statement in statements],
    }


def service_trust_policy(service_principal: str) -> dict[str, Any]:
    """Return a trust policy letting an AWS service assume the role."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": service_principal},
                "Action": "sts:AssumeRole",
            }
        ],
    }
