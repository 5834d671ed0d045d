"""`workon clients` - list windows launched by diligent."""

import sys
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from diligent.clients import ClientTracker, get_client_info, read_process_env
from diligent.config import get_host_mode
from diligent.exceptions import DiligentError
from diligent.exit_codes import EXIT_FAILURE
from diligent.hosts import create_host
from diligent.json_output import output_json


def register_client_commands(cli):
    """Register client commands with the CLI."""

    @cli.command()
    @click.option('--project', '-p', default=None,
                  help='Only show clients of this project')
    @click.option('--json', 'as_json', is_flag=True, default=False,
                  help='Output as JSON for programmatic access')
    def clients(project: Optional[str], as_json: bool):
        """List running windows that belong to diligent projects.

        A window counts when its process carries DILIGENT_* environment
        variables or the window has diligent_* properties.
        """
        try:
            host = create_host(get_host_mode())
            tracked = ClientTracker(host).all_tracked()
        except (DiligentError, ValueError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(EXIT_FAILURE)

        rows = []
        for client in tracked:
            info = get_client_info(client)
            env = read_process_env(host, client.pid) if client.pid is not None else None
            diligent_env = env.diligent_vars if env is not None else {}
            info["diligent_env"] = diligent_env
            info["project"] = (
                client.properties.get("diligent_project")
                or diligent_env.get("DILIGENT_PROJECT")
            )
            info["role"] = (
                client.properties.get("diligent_role")
                or diligent_env.get("DILIGENT_ROLE")
            )
            if project is None or info["project"] == project:
                rows.append(info)

        if as_json:
            click.echo(output_json({"clients": rows, "total": len(rows)}))
            return

        console = Console()
        if not rows:
            console.print("[yellow]No tracked clients found[/yellow]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("PID", justify="right")
        table.add_column("Project")
        table.add_column("Role")
        table.add_column("Class")
        table.add_column("Tag")
        for info in rows:
            table.add_row(
                str(info["pid"]),
                escape(str(info["project"] or "-")),
                escape(str(info["role"] or "-")),
                escape(info["class"]),
                escape(f"{info['tag_name']} [{info['tag_index']}]"),
            )
        console.print(table)
