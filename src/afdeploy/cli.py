"""afdeploy command line interface.

Commands:
    provision          Create web apps behind Azure Front Door, then clean up
    deprovision-agent  Run the Azure Linux agent deprovision command over SSH
    render-template    Print a parameterized ARM template
"""

import logging

import click
from rich.console import Console
from rich.table import Table

from afdeploy import __version__
from afdeploy.auth import AzureCredentials
from afdeploy.config import DeployConfig
from afdeploy.exceptions import AfdeployError
from afdeploy.orchestrator import DEFAULT_REGIONS, DeploymentSession, FrontDoorOrchestrator
from afdeploy.remote_exec import RemoteCommandExecutor
from afdeploy.resources import AzureResourceClient
from afdeploy.template_manager import ArmTemplateParameterizer


def _load_config(ctx: click.Context, **overrides) -> DeployConfig:
    try:
        return DeployConfig.from_environment(**overrides)
    except AfdeployError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def _display_session(orchestrator: FrontDoorOrchestrator, session: DeploymentSession) -> None:
    table = Table(title="Resources created (resource group deleted)")
    table.add_column("Kind", style="cyan")
    table.add_column("Name")
    table.add_column("Location")
    table.add_column("Host")
    for row in orchestrator.summary(session):
        table.add_row(row["kind"], row["name"], row["location"], row["host"])
    Console().print(table)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
def main(verbose: bool) -> None:
    """afdeploy - Azure Front Door multi-region deployment sample.

    \b
    Credentials are read from CLIENT_ID, CLIENT_SECRET, TENANT_ID and
    SUBSCRIPTION_ID. Settings are read from AFDEPLOY_* variables.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")


@main.command()
@click.option(
    "--region",
    "regions",
    multiple=True,
    help="Region for a web app (repeatable; default: 8 regions across 5 geographies)",
)
@click.pass_context
def provision(ctx: click.Context, regions: tuple[str, ...]) -> None:
    """Create web apps, front them with Front Door, then delete everything.

    \b
    Examples:
        $ afdeploy provision
        $ afdeploy provision --region eastus --region westeurope
    """
    config = _load_config(ctx)

    try:
        credentials = AzureCredentials.from_environment()
        client = AzureResourceClient.from_credentials(credentials)
    except AfdeployError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    orchestrator = FrontDoorOrchestrator(client, config)
    session = orchestrator.run(list(regions) or DEFAULT_REGIONS)
    if session is None:
        click.echo("Provisioning failed; see log above.", err=True)
        ctx.exit(1)

    _display_session(orchestrator, session)


@main.command(name="deprovision-agent")
@click.argument("host")
@click.option("--port", default=22, show_default=True, type=int, help="SSH port")
@click.option("--user", "username", required=True, help="SSH user name")
@click.option(
    "--password",
    required=True,
    envvar="AFDEPLOY_SSH_PASSWORD",
    help="SSH password (or AFDEPLOY_SSH_PASSWORD)",
)
@click.pass_context
def deprovision_agent(
    ctx: click.Context, host: str, port: int, username: str, password: str
) -> None:
    """Deprovision the Azure Linux agent on HOST over SSH."""
    config = _load_config(ctx)
    executor = RemoteCommandExecutor(config)

    try:
        executor.deprovision_agent(host, port, username, password)
    except AfdeployError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@main.command(name="render-template")
@click.argument("template_kind")
@click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False),
    help="Directory containing the Asset folder (default: AFDEPLOY_PROJECT_ROOT or .)",
)
@click.pass_context
def render_template(ctx: click.Context, template_kind: str, project_root: str | None) -> None:
    """Print TEMPLATE_KIND (e.g. ArmTemplate.json) with generated parameters."""
    overrides = {"project_root": project_root} if project_root else {}
    config = _load_config(ctx, **overrides)

    try:
        click.echo(ArmTemplateParameterizer(config).render(template_kind))
    except AfdeployError as e:
        click.echo(f"Error loading template: {e}", err=True)
        ctx.exit(1)


if __name__ == "__main__":
    main()
