"""Stack status rendering for the CLI."""

from rich.table import Table

from fargate_topology.cli.ui import console
from fargate_topology.core.deployments.aws_ecs import StackStatus


def print_stack_status(status: StackStatus) -> None:
    """Print the stack status, a resource table and the outputs.

    Args:
        status: Stack status collected from CloudFormation.
    """
    if not status.deployed:
        console.print(f"[yellow]Stack {status.stack_name} is not deployed.[/yellow]")
        return

    console.print(f"Stack [bold]{status.stack_name}[/bold]: {style_status(status.status)}")
    table = Table(title="Stack resources", show_header=True, header_style="bold cyan")
    table.add_column("Resource", style="white", no_wrap=True)
    table.add_column("Type", style="bright_white")
    table.add_column("Status", style="white", no_wrap=True)
    for resource in status.resources:
        table.add_row(resource.logical_id, resource.resource_type, style_status(resource.status))
    console.print(table)

    for name, value in status.outputs.items():
        console.print(f"[cyan]{name}[/cyan]: {value}")


def style_status(status: str) -> str:
    """Return a Rich-styled status string.

    Args:
        status: CloudFormation status string.

    Returns:
        The styled status.
    """
    if status.endswith("_FAILED") or "ROLLBACK" in status:
        return f"[red]{status}[/red]"
    if status.endswith("_IN_PROGRESS"):
        return f"[yellow]{status}[/yellow]"
    return f"[green]{status}[/green]"
