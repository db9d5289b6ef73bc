"""Tests for the command line interface."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from fargate_topology.cli.main import cli
from fargate_topology.core.deployments.aws_ecs import StackStatus


@pytest.fixture
def runner(image_directory: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.setenv("TOPOLOGY_IMAGE_DIRECTORY", str(image_directory))
    monkeypatch.setenv("AWS_REGION", "eu-west-2")
    return CliRunner()


def test_synth_prints_the_template(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["synth"])

    assert result.exit_code == 0, result.output
    template = json.loads(result.output)
    assert "MyFargateServiceTaskDef" in template["Resources"]


def test_synth_writes_the_template_to_a_file(runner: CliRunner, tmp_path: Path) -> None:
    output = tmp_path / "template.json"

    result = runner.invoke(cli, ["synth", "--output", str(output)])

    assert result.exit_code == 0, result.output
    template = json.loads(output.read_text(encoding="utf-8"))
    assert template["AWSTemplateFormatVersion"] == "2010-09-09"


def test_synth_reports_a_missing_image_directory(
    runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("TOPOLOGY_IMAGE_DIRECTORY", str(tmp_path / "missing"))

    result = runner.invoke(cli, ["synth"])

    assert result.exit_code == 1
    assert "Image directory not found" in result.output


def test_deploy_prints_stack_outputs(runner: CliRunner) -> None:
    with patch(
        "fargate_topology.cli.main.deploy_topology",
        return_value={"ServiceURL": "http://lb.example.com"},
    ) as deploy:
        result = runner.invoke(cli, ["--region", "us-east-1", "deploy", "--yes"])

    assert result.exit_code == 0, result.output
    assert "http://lb.example.com" in result.output
    settings = deploy.call_args.args[0]
    assert settings.aws.region == "us-east-1"


def test_deploy_can_be_cancelled(runner: CliRunner) -> None:
    with (
        patch("fargate_topology.cli.main._confirm", return_value=False),
        patch("fargate_topology.cli.main.deploy_topology") as deploy,
    ):
        result = runner.invoke(cli, ["deploy"])

    assert result.exit_code == 0
    assert "cancelled" in result.output
    deploy.assert_not_called()


def test_deploy_failure_exits_non_zero(runner: CliRunner) -> None:
    with patch(
        "fargate_topology.cli.main.deploy_topology",
        side_effect=RuntimeError("stack rolled back"),
    ):
        result = runner.invoke(cli, ["deploy", "--yes"])

    assert result.exit_code == 1
    assert "stack rolled back" in result.output


def test_destroy_can_remove_the_repository(runner: CliRunner) -> None:
    with patch("fargate_topology.cli.main.destroy_topology") as destroy:
        result = runner.invoke(cli, ["destroy", "--yes", "--delete-repository"])

    assert result.exit_code == 0, result.output
    assert destroy.call_args.kwargs["delete_image_repository"] is True


def test_status_reports_an_absent_stack(runner: CliRunner) -> None:
    with (
        patch("fargate_topology.cli.main.create_session"),
        patch(
            "fargate_topology.cli.main.check_stack",
            return_value=StackStatus(stack_name="EcsStack", status="not deployed"),
        ),
    ):
        result = runner.invoke(cli, ["status"])

    assert result.exit_code == 0, result.output
    assert "not deployed" in result.output


def test_invalid_configuration_is_reported_without_a_traceback(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("TOPOLOGY_DESIRED_COUNT", "many")

    result = runner.invoke(cli, ["synth"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    assert "desired_count" in result.output
    assert "Traceback" not in result.output


def test_unknown_log_level_is_rejected(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("TOPOLOGY_LOG_LEVEL", "LOUD")

    result = runner.invoke(cli, ["synth"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    assert "log_level" in result.output
