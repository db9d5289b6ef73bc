"""Tests for CLI error classification."""

import pytest
from botocore.exceptions import EndpointConnectionError, NoCredentialsError
from conftest import client_error

from fargate_topology.cli.errors import (
    classify_error,
    exception_chain,
    is_aws_auth_error,
    is_aws_endpoint_error,
    report_error,
)
from fargate_topology.core.topology import TopologyError


def _wrapped(cause: Exception) -> RuntimeError:
    try:
        raise RuntimeError("Failed to read AWS identity") from cause
    except RuntimeError as exc:
        return exc


def test_expired_token_is_an_auth_error() -> None:
    assert is_aws_auth_error(_wrapped(client_error("ExpiredToken")))


def test_missing_credentials_is_an_auth_error() -> None:
    assert is_aws_auth_error(_wrapped(NoCredentialsError()))


def test_other_client_errors_are_not_auth_errors() -> None:
    assert not is_aws_auth_error(_wrapped(client_error("ValidationError")))


def test_endpoint_errors_are_detected() -> None:
    error = _wrapped(EndpointConnectionError(endpoint_url="https://ecr.example.com"))

    assert is_aws_endpoint_error(error)
    assert not is_aws_auth_error(error)


def test_exception_chain_follows_causes() -> None:
    cause = client_error("AccessDenied")
    error = _wrapped(cause)

    assert exception_chain(error) == [error, cause]


def test_topology_errors_are_reported_as_invalid(capsys: pytest.CaptureFixture[str]) -> None:
    report_error(TopologyError("Volume cacheVolume is already declared"))

    assert "Invalid topology" in capsys.readouterr().out


def test_missing_docker_suggests_installing_it() -> None:
    advice = classify_error(RuntimeError("Docker is required to build and push images."))

    assert advice.title == "Docker is required to build and push images."
    assert advice.hint is not None and "Install Docker" in advice.hint


def test_unknown_errors_fall_back_to_a_generic_message() -> None:
    advice = classify_error(RuntimeError("boom"))

    assert advice.title == "Deployment failed: boom"
    assert advice.hint is None
