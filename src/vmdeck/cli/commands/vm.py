"""CLI commands for the deployed VM.

Implements the 'vmdeck vm' command group for creating the deployment's VM
and inspecting or clearing the current VM record.
"""

from __future__ import annotations

import sys
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

import click

from vmdeck.config.loader import ConfigLoader
from vmdeck.deploy.cloud import create_cloud
from vmdeck.deploy.ids import UUIDGenerator
from vmdeck.deploy.name_resolution import HostsFileResolver
from vmdeck.deploy.state import DeploymentStateService
from vmdeck.deploy.vm.manager import VMManager
from vmdeck.deploy.vm_repo import VMRepo
from vmdeck.lib.errors import ConfigError, DeploymentError, VMDeckError
from vmdeck.lib.logging_config import get_logger, setup_logging
from vmdeck.models.config import DeckConfig
from vmdeck.models.stemcell import CloudStemcell

logger = get_logger(__name__)

state_file_option = click.option(
    "--state-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Deployment state file (default: .vmdeck/deployment-state.json)",
)


@contextmanager
def handle_deployment_errors() -> Generator[None, None, None]:
    """Context manager for consistent error handling in vm commands.

    Exit codes:
        2: Configuration error
        3: Deployment/execution error, or any unexpected error
    """
    try:
        yield
    except click.exceptions.Abort:
        raise
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        click.secho("Error: Configuration error", fg="red", err=True)
        click.echo(f"  {e.message}", err=True)
        sys.exit(2)
    except DeploymentError as e:
        logger.error(f"Deployment error: {e}")
        click.secho(f"Error: {e.operation} failed", fg="red", err=True)
        click.echo(f"  {e.message}", err=True)
        sys.exit(3)
    except VMDeckError as e:
        logger.error(f"Error: {e}")
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(3)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(3)


def _vm_repo(config: DeckConfig) -> VMRepo:
    return VMRepo(DeploymentStateService(config.state_file))


@click.group(name="vm", invoke_without_command=True)
@click.pass_context
def vm(ctx: click.Context) -> None:
    """Manage the deployment's VM.

    Subcommands:

        create   Create the VM from a manifest and stemcell
        current  Show the current VM record
        clear    Forget the current VM record

    Example:

        vmdeck vm create manifest.yml --stemcell-cid img-123
    """
    ctx.ensure_object(dict)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@vm.command()
@click.argument(
    "manifest",
    type=click.Path(exists=True, dir_okay=False),
    default="manifest.yml",
    required=False,
)
@click.option("--stemcell-cid", required=True, help="Cloud identifier of the stemcell")
@click.option("--cpi", "cpi_command", default=None, help="CPI executable")
@state_file_option
@click.option(
    "--hosts-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Hosts file to map the VM hostname in (disabled when unset)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Suppress progress output")
def create(
    manifest: str,
    stemcell_cid: str,
    cpi_command: str | None,
    state_file: Path | None,
    hosts_file: Path | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Create the VM described by MANIFEST and record it as current.

    Example:

        vmdeck vm create manifest.yml --stemcell-cid img-123 --cpi ./cpi
    """
    setup_logging(verbose=verbose, quiet=quiet)

    with handle_deployment_errors():
        loader = ConfigLoader()
        config = loader.resolve_deck_config(
            {
                "state_file": state_file,
                "cpi_command": cpi_command,
                "hosts_file": hosts_file,
            },
            base_dir=Path(manifest).resolve().parent,
        )
        deployment_manifest = loader.load_manifest(manifest)

        manager = VMManager(
            vm_repo=_vm_repo(config),
            cloud=create_cloud(config),
            id_generator=UUIDGenerator(),
            name_resolver=HostsFileResolver(config.hosts_file)
            if config.hosts_file
            else None,
            director_name=config.director_name,
        )

        if not quiet:
            click.echo(
                f"Creating VM for deployment '{deployment_manifest.name}' "
                f"from stemcell {stemcell_cid}..."
            )
        created = manager.create(CloudStemcell(cid=stemcell_cid), deployment_manifest)

        if not quiet:
            click.secho(f"Created VM {created.cid}", fg="green")
        else:
            click.echo(created.cid)


@vm.command()
@state_file_option
def current(state_file: Path | None) -> None:
    """Show the current VM CID and agent ID."""
    with handle_deployment_errors():
        config = ConfigLoader().resolve_deck_config({"state_file": state_file})
        repo = _vm_repo(config)
        cid = repo.find_current()
        if cid is None:
            click.echo("No current VM")
            return
        agent_id = repo.find_current_agent_id()
        click.echo(f"VM CID:   {cid}")
        click.echo(f"Agent ID: {agent_id or '-'}")


@vm.command()
@state_file_option
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def clear(state_file: Path | None, yes: bool) -> None:
    """Forget the current VM record without touching the cloud."""
    with handle_deployment_errors():
        config = ConfigLoader().resolve_deck_config({"state_file": state_file})
        repo = _vm_repo(config)
        cid = repo.find_current()
        if cid is None:
            click.echo("No current VM")
            return
        if not yes:
            click.confirm(
                f"Forget VM {cid}? The cloud resource will not be deleted",
                abort=True,
            )
        repo.clear_current()
        click.echo(f"Cleared current VM {cid}")
