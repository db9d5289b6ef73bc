"""Error rendering for CLI commands."""

from collections.abc import Callable
from dataclasses import dataclass

from botocore.exceptions import (
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
    ProfileNotFound,
)
from pydantic import ValidationError
from rich.markup import escape

from fargate_topology.cli.ui import console
from fargate_topology.config.paths import env_path
from fargate_topology.core.topology import TopologyError

AUTH_ERROR_CODES = frozenset(
    {
        "ExpiredToken",
        "ExpiredTokenException",
        # spellchecker:ignore-next-line
        "UnrecognizedClientException",
        "InvalidClientTokenId",
        "InvalidSignatureException",
        "AccessDenied",
        "AccessDeniedException",
    }
)


@dataclass(frozen=True)
class ErrorAdvice:
    """What went wrong and what to do about it."""

    title: str
    hint: str | None = None


def report_error(exc: Exception) -> None:
    """Print an error raised by a command, with guidance where we have some.

    Args:
        exc: Raised exception from a CLI command.
    """
    advice = classify_error(exc)
    console.print(f"[red]{escape(advice.title)}[/red]")
    if advice.hint:
        console.print(f"[dim]{escape(advice.hint)}[/dim]")


def classify_error(exc: Exception) -> ErrorAdvice:
    """Map an exception to the message shown to the user."""
    for matches, advise in _CLASSIFIERS:
        if matches(exc):
            return advise(exc)
    return ErrorAdvice(f"Deployment failed: {exc}")


def is_aws_auth_error(exc: BaseException) -> bool:
    """Return true when the exception chain holds a credentials problem."""
    for item in exception_chain(exc):
        if isinstance(item, (NoCredentialsError, ProfileNotFound)):
            return True
        if _error_code(item) in AUTH_ERROR_CODES:
            return True
        if "security token included in the request is expired" in str(item).lower():
            return True
    return False


def is_aws_endpoint_error(exc: BaseException) -> bool:
    """Return true when the exception chain holds an unreachable endpoint."""
    return any(isinstance(item, EndpointConnectionError) for item in exception_chain(exc))


def exception_chain(exc: BaseException) -> list[BaseException]:
    """Return the exception followed by its causes, outermost first.

    Args:
        exc: Root exception.

    Returns:
        The exception and every cause or context reachable from it.
    """
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and all(current is not item for item in chain):
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def _error_code(exc: BaseException) -> str:
    if not isinstance(exc, ClientError):
        return ""
    return str(exc.response.get("Error", {}).get("Code", ""))


def _mentions(text: str) -> Callable[[Exception], bool]:
    return lambda exc: text in str(exc)


_CLASSIFIERS: list[tuple[Callable[[Exception], bool], Callable[[Exception], ErrorAdvice]]] = [
    (
        lambda exc: isinstance(exc, ValidationError),
        lambda exc: ErrorAdvice(
            f"Invalid configuration: {exc}",
            f"Check the TOPOLOGY_* and AWS_* variables in the environment and in {env_path()}.",
        ),
    ),
    (
        is_aws_auth_error,
        lambda _: ErrorAdvice(
            "AWS authentication failed. Your credentials are missing, invalid, or expired.",
            "If using an AWS profile or SSO, run: aws sso login --profile <profile>. "
            "If using temporary keys, refresh AWS_SESSION_TOKEN and retry.",
        ),
    ),
    (
        is_aws_endpoint_error,
        lambda _: ErrorAdvice(
            "Could not reach the AWS endpoint from this environment.",
            "Check network connectivity and the --region option.",
        ),
    ),
    (
        lambda exc: isinstance(exc, TopologyError),
        lambda exc: ErrorAdvice(f"Invalid topology: {exc}"),
    ),
    (
        _mentions("Docker is required"),
        lambda exc: ErrorAdvice(
            str(exc), "Install Docker and make sure the daemon is running."
        ),
    ),
    (
        _mentions("Destroy it before deploying again"),
        lambda exc: ErrorAdvice(
            f"Deployment failed: {exc}", "Run: fargate-topology destroy --yes"
        ),
    ),
    (
        _mentions("Template rejected"),
        lambda exc: ErrorAdvice(
            f"Deployment failed: {exc}",
            "Run fargate-topology synth to inspect the rendered template.",
        ),
    ),
]
