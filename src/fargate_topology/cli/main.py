"""CLI entrypoint for the Fargate topology."""

import logging
import sys
from pathlib import Path

import click
import questionary

from fargate_topology.cli.errors import report_error
from fargate_topology.cli.status import print_stack_status
from fargate_topology.cli.ui import console, report_step
from fargate_topology.core.deployments.aws_ecs import (
    check_stack,
    create_session,
    deploy_topology,
    destroy_topology,
    synth_topology,
)
from fargate_topology.core.settings import TopologySettings, get_settings


@click.group()
@click.option("--region", default=None, help="AWS region (overrides AWS_REGION).")
@click.option("--profile", default=None, help="AWS named profile (overrides AWS_PROFILE).")
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, region: str | None, profile: str | None, verbose: bool) -> None:
    """Assemble and deploy the Fargate service topology.

    Args:
        ctx: Click context for the command invocation.
        region: AWS region override.
        profile: AWS profile override.
        verbose: Whether to log at debug level.
    """
    try:
        settings = get_settings()
    except Exception as exc:  # noqa: BLE001
        report_error(exc)
        sys.exit(1)

    updates = {key: value for key, value in {"region": region, "profile": profile}.items() if value}
    if updates:
        settings = settings.model_copy(update={"aws": settings.aws.model_copy(update=updates)})

    logging.basicConfig(level=logging.DEBUG if verbose else settings.log_level)
    # botocore is noisy at debug level.
    logging.getLogger("botocore").setLevel(logging.WARNING)
    ctx.obj = settings


@cli.command()
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the template to a file instead of stdout.",
)
@click.pass_obj
def synth(settings: TopologySettings, output: Path | None) -> None:
    """Render the CloudFormation template without deploying it."""
    try:
        topology = synth_topology(settings)
    except Exception as exc:  # noqa: BLE001
        report_error(exc)
        sys.exit(1)

    template = topology.context.to_json()
    if output is None:
        click.echo(template)
        return
    output.write_text(template + "\n", encoding="utf-8")
    console.print(f"[green]Template written to {output}[/green]")


@cli.command()
@click.option("--yes", is_flag=True, help="Deploy without asking for confirmation.")
@click.pass_obj
def deploy(settings: TopologySettings, yes: bool) -> None:
    """Publish the image and create or update the stack."""
    if not yes and not _confirm(f"Deploy stack {settings.stack_name} to {settings.aws.region}?"):
        console.print("[yellow]Deployment cancelled.[/yellow]")
        return

    try:
        outputs = deploy_topology(settings, report_step)
    except Exception as exc:  # noqa: BLE001
        report_error(exc)
        sys.exit(1)

    console.print(f"[green]Stack {settings.stack_name} deployed.[/green]")
    for name, value in outputs.items():
        console.print(f"[cyan]{name}[/cyan]: {value}")


@cli.command()
@click.pass_obj
def status(settings: TopologySettings) -> None:
    """Show the stack status, its resources and outputs."""
    try:
        stack_status = check_stack(create_session(settings.aws), settings.stack_name)
    except Exception as exc:  # noqa: BLE001
        report_error(exc)
        sys.exit(1)
    print_stack_status(stack_status)


@cli.command()
@click.option("--yes", is_flag=True, help="Destroy without asking for confirmation.")
@click.option(
    "--delete-repository",
    is_flag=True,
    help="Also delete the ECR repository holding the image.",
)
@click.pass_obj
def destroy(settings: TopologySettings, yes: bool, delete_repository: bool) -> None:
    """Delete the stack and every resource it created."""
    if not yes and not _confirm(f"Destroy stack {settings.stack_name}?"):
        console.print("[yellow]Destroy cancelled.[/yellow]")
        return

    try:
        destroy_topology(settings, report_step, delete_image_repository=delete_repository)
    except Exception as exc:  # noqa: BLE001
        report_error(exc)
        sys.exit(1)
    console.print(f"[green]Stack {settings.stack_name} destroyed.[/green]")


def _confirm(message: str) -> bool:
    """Ask a yes/no question, treating an aborted prompt as no."""
    return bool(questionary.confirm(message, default=False).ask())


def main() -> None:
    """Run the CLI."""
    cli()
