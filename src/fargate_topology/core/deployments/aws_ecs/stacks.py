"""CloudFormation stack submission and teardown."""

import json
import logging
from collections.abc import Callable
from typing import Any

from boto3.session import Session
from botocore.exceptions import ClientError, WaiterError

logger = logging.getLogger(__name__)

CAPABILITIES = ["CAPABILITY_IAM"]
NO_UPDATES_MESSAGE = "No updates are to be performed"
UNUSABLE_STATUSES = {"ROLLBACK_COMPLETE", "ROLLBACK_FAILED", "DELETE_FAILED"}
MAX_FAILURE_EVENTS = 5


def submit_stack(
    session: Session,
    stack_name: str,
    template: dict[str, Any],
    reporter: Callable[[str], None],
    tags: dict[str, str] | None = None,
    waiter_delay: int = 15,
    waiter_max_attempts: int = 240,
) -> dict[str, str]:
    """Create or update a stack from a template and wait for it to settle.

    A failed creation deletes the stack again; a failed update rolls back.

    Returns:
        The stack outputs keyed by output name.
    """
    cloudformation = session.client("cloudformation")
    body = json.dumps(template)

    reporter("Validating template")
    try:
        cloudformation.validate_template(TemplateBody=body)
    except ClientError as exc:
        raise RuntimeError(f"Template rejected by CloudFormation: {exc}") from exc

    stack_tags = [{"Key": key, "Value": value} for key, value in sorted((tags or {}).items())]
    status = _stack_status(cloudformation, stack_name)
    if status in UNUSABLE_STATUSES:
        raise RuntimeError(
            f"Stack {stack_name} is in status {status} and cannot be updated. "
            "Destroy it before deploying again."
        )

    if status is None:
        reporter(f"Creating stack {stack_name}")
        try:
            response = cloudformation.create_stack(
                StackName=stack_name,
                TemplateBody=body,
                Capabilities=CAPABILITIES,
                OnFailure="DELETE",
                Tags=stack_tags,
            )
        except ClientError as exc:
            raise RuntimeError(f"Failed to create stack {stack_name}: {exc}") from exc
        waiter_name = "stack_create_complete"
    else:
        reporter(f"Updating stack {stack_name} (currently {status})")
        try:
            response = cloudformation.update_stack(
                StackName=stack_name,
                TemplateBody=body,
                Capabilities=CAPABILITIES,
                Tags=stack_tags,
            )
        except ClientError as exc:
            if NO_UPDATES_MESSAGE in str(exc):
                reporter("Stack is already up to date")
                return stack_outputs(cloudformation, stack_name)
            raise RuntimeError(f"Failed to update stack {stack_name}: {exc}") from exc
        waiter_name = "stack_update_complete"

    # A stack deleted after a failed create only resolves by id.
    stack_id = str(response.get("StackId", stack_name))
    reporter("Waiting for CloudFormation (this can take several minutes)")
    _wait(cloudformation, waiter_name, stack_name, stack_id, waiter_delay, waiter_max_attempts)
    logger.info(f"Stack {stack_name} reached {waiter_name}")
    return stack_outputs(cloudformation, stack_name)


def destroy_stack(
    session: Session,
    stack_name: str,
    reporter: Callable[[str], None],
    waiter_delay: int = 15,
    waiter_max_attempts: int = 240,
) -> bool:
    """Delete a stack and everything it created.

    Returns:
        False when the stack did not exist.
    """
    cloudformation = session.client("cloudformation")
    stack = _describe_stack(cloudformation, stack_name)
    if stack is None:
        reporter(f"Stack {stack_name} does not exist")
        return False

    reporter(f"Deleting stack {stack_name}")
    try:
        cloudformation.delete_stack(StackName=stack_name)
    except ClientError as exc:
        raise RuntimeError(f"Failed to delete stack {stack_name}: {exc}") from exc

    _wait(
        cloudformation,
        "stack_delete_complete",
        stack_name,
        str(stack.get("StackId", stack_name)),
        waiter_delay,
        waiter_max_attempts,
    )
    reporter(f"Stack {stack_name} deleted")
    return True


def stack_outputs(cloudformation: Any, stack_name: str) -> dict[str, str]:
    """Return the outputs of a stack."""
    stack = _describe_stack(cloudformation, stack_name)
    if stack is None:
        return {}
    return {
        str(output["OutputKey"]): str(output.get("OutputValue", ""))
        for output in stack.get("Outputs", [])
    }


def _describe_stack(cloudformation: Any, stack_name: str) -> dict[str, Any] | None:
    """Return the stack description, or None when it does not exist."""
    try:
        response = cloudformation.describe_stacks(StackName=stack_name)
    except ClientError as exc:
        if "does not exist" in str(exc):
            return None
        raise RuntimeError(f"Failed to read stack {stack_name}: {exc}") from exc
    stacks = response.get("Stacks", [])
    return stacks[0] if stacks else None


def _stack_status(cloudformation: Any, stack_name: str) -> str | None:
    stack = _describe_stack(cloudformation, stack_name)
    if stack is None:
        return None
    return str(stack.get("StackStatus", ""))


def _wait(
    cloudformation: Any,
    waiter_name: str,
    stack_name: str,
    stack_id: str,
    delay: int,
    max_attempts: int,
) -> None:
    """Wait on a CloudFormation waiter, surfacing failed resource events."""
    waiter = cloudformation.get_waiter(waiter_name)
    try:
        waiter.wait(
            StackName=stack_id,
            WaiterConfig={"Delay": delay, "MaxAttempts": max_attempts},
        )
    except WaiterError as exc:
        reasons = _failure_reasons(cloudformation, stack_id)
        detail = "; ".join(reasons) if reasons else str(exc)
        raise RuntimeError(
            f"Stack {stack_name} did not complete ({waiter_name}): {detail}"
        ) from exc


def _failure_reasons(cloudformation: Any, stack_id: str) -> list[str]:
    """Return the most recent failure reasons from the stack events."""
    try:
        response = cloudformation.describe_stack_events(StackName=stack_id)
    except ClientError as exc:
        logger.debug(f"Could not read events of {stack_id}: {exc}")
        return []

    reasons = []
    for event in response.get("StackEvents", []):
        if not str(event.get("ResourceStatus", "")).endswith("_FAILED"):
            continue
        reason = event.get("ResourceStatusReason", "no reason given")
        reasons.append(f"{event.get('LogicalResourceId')}: {reason}")
        if len(reasons) >= MAX_FAILURE_EVENTS:
            break
    return reasons
