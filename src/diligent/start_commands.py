"""`workon start` - launch a project workspace."""

import logging
import sys
from typing import Optional

import click

from diligent.config import get_host_mode, get_poll_interval, get_wait_timeout
from diligent.exceptions import DiligentError, HostUnavailableError
from diligent.exit_codes import EXIT_FAILURE, EXIT_SUCCESS, exit_code_for
from diligent.hosts import DryRunHost, Host, create_host
from diligent.json_output import output_json
from diligent.launcher import LaunchConfig, Launcher, LaunchResult
from diligent.logging import DiligentLogger
from diligent.project_loader import load_project
from diligent.start_request import StartRequest, build_start_request

logger = logging.getLogger(__name__)


def _event_log() -> Optional[DiligentLogger]:
    try:
        return DiligentLogger()
    except OSError as e:
        logger.warning("event log disabled: %s", e)
        return None


def _print_dry_run_preview(request: StartRequest) -> None:
    click.echo("DRY RUN MODE - No actual spawning will occur")
    click.echo(f"✓ Project loaded successfully: {request.project_name}")
    click.echo(f"Resources to start: {len(request.resources)}")
    for resource in request.resources:
        click.echo(f"  • {resource.name}: {resource.command} (tag: {resource.tag_spec.raw})")
    click.echo()


def _output_human(result: LaunchResult, host: Host) -> None:
    click.echo(result.response.format())

    untagged = [r for r in result.records if r.success and not r.tagged and r.wait_message]
    if untagged:
        click.echo()
        click.echo("WARNINGS:")
        for record in untagged:
            click.echo(f"  ⚠ {record.name}: {record.wait_message}")

    if result.summary.recommendations:
        click.echo()
        click.echo("Recommendations:")
        for recommendation in result.summary.recommendations:
            click.echo(f"  • {recommendation}")

    if isinstance(host, DryRunHost):
        spawns = [e for e in host.get_execution_log() if e.operation == "spawn"]
        click.echo()
        click.echo(f"Simulated {len(spawns)} spawn(s), {len(host.get_execution_log())} host operations")
        for entry in spawns:
            click.echo(f"  $ {entry.details['command']}")


def _output_json(result: LaunchResult, host: Host) -> None:
    data = result.to_dict()
    if isinstance(host, DryRunHost):
        data["dry_run"] = True
        data["execution_log"] = [e.to_dict() for e in host.get_execution_log()]
    click.echo(output_json(data))


def register_start_commands(cli):
    """Register start command with the CLI."""

    @cli.command()
    @click.argument('project_name', required=False)
    @click.option('--file', '-f', 'file_path', default=None,
                  help='Path to a project file to start')
    @click.option('--dry-run', is_flag=True, default=False,
                  help='Preview operations without spawning anything')
    @click.option('--no-wait', is_flag=True, default=False,
                  help="Don't wait for windows to appear and tag them")
    @click.option('--timeout', type=float, default=None,
                  help='Seconds to wait for each window (default: config wait_timeout)')
    @click.option('--json', 'as_json', is_flag=True, default=False,
                  help='Output as JSON for programmatic access')
    def start(project_name: Optional[str], file_path: Optional[str], dry_run: bool,
              no_wait: bool, timeout: Optional[float], as_json: bool):
        """Start a project workspace.

        \b
        Loads PROJECT_NAME from the projects directory
        (~/.config/diligent/projects/<name>.dsl) or a file given with --file,
        then spawns every resource on its tag.

        \b
        Examples:
            workon start webapp              # Start a named project
            workon start -f ./demo.dsl       # Start from a file
            workon start webapp --dry-run    # Preview without spawning
            workon start webapp --json       # Machine-readable result
        """
        try:
            project = load_project(project_name, file_path)
        except DiligentError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(exit_code_for(e))

        request = build_start_request(project)

        try:
            host = DryRunHost() if dry_run else create_host(get_host_mode())
        except (HostUnavailableError, ValueError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(EXIT_FAILURE)

        dry_run = isinstance(host, DryRunHost)
        if dry_run and not as_json:
            _print_dry_run_preview(request)

        config = LaunchConfig(
            wait_for_clients=not (no_wait or dry_run),
            wait_timeout=get_wait_timeout(timeout),
            poll_interval=get_poll_interval(),
        )
        result = Launcher(host, config, event_log=_event_log()).launch(request)

        if as_json:
            _output_json(result, host)
        else:
            _output_human(result, host)

        sys.exit(EXIT_SUCCESS if result.success else EXIT_FAILURE)
