"""`workon validate` - check a project file without starting it."""

import sys
from collections.abc import Mapping
from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from diligent.dsl import evaluate_source, validation_summary
from diligent.dsl.helpers import type_name
from diligent.dsl.validator import ValidationSummary
from diligent.exceptions import CompileError, DiligentError
from diligent.exit_codes import EXIT_FAILURE, EXIT_SUCCESS, exit_code_for
from diligent.json_output import output_json
from diligent.project_loader import project_path


def _print_summary(console: Console, summary: ValidationSummary, raw: Mapping) -> None:
    if summary.project_name:
        console.print(f'Project name: "{escape(summary.project_name)}"')

    if summary.resources:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Resource")
        table.add_column("Type")
        table.add_column("Status")
        table.add_column("Details")
        for resource in summary.resources:
            status = "[green]valid[/green]" if resource.valid else "[red]invalid[/red]"
            details = resource.description if resource.valid else resource.error
            table.add_row(escape(resource.name), escape(resource.type or "-"), status, escape(details or ""))
        console.print(table)

    hooks = raw.get("hooks")
    if summary.has_hooks and isinstance(hooks, Mapping):
        console.print(f"Hooks configured: {', '.join(sorted(str(h) for h in hooks))}")

    if summary.valid:
        checks = 2 + summary.resource_count + (1 if summary.has_hooks else 0)
        console.print(f"[green]✓ Validation passed: {checks} checks passed, 0 errors[/green]")
    else:
        console.print(f"[red]✗ Validation failed: {len(summary.errors)} errors[/red]")
        for error in summary.errors:
            console.print(f"  • {error}", markup=False)


def register_project_commands(cli):
    """Register project commands with the CLI."""

    @cli.command()
    @click.argument('project_name', required=False)
    @click.option('--file', '-f', 'file_path', default=None,
                  help='Path to a project file to validate')
    @click.option('--json', 'as_json', is_flag=True, default=False,
                  help='Output as JSON for programmatic access')
    def validate(project_name: Optional[str], file_path: Optional[str], as_json: bool):
        """Validate a project file without starting anything.

        \b
        Examples:
            workon validate webapp
            workon validate -f ./demo.dsl --json
        """
        try:
            path = project_path(project_name, file_path)
        except DiligentError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(exit_code_for(e))

        raw: Any
        try:
            raw = evaluate_source(path.read_bytes(), str(path))
            if not isinstance(raw, Mapping):
                raise CompileError(f"project file must return a table, got {type_name(raw)}")
        except (CompileError, OSError) as e:
            if as_json:
                click.echo(output_json({"valid": False, "errors": [str(e)]}))
            else:
                click.echo(f"Error: {e}", err=True)
            sys.exit(EXIT_FAILURE)

        summary = validation_summary(raw)

        if as_json:
            click.echo(output_json(summary.to_dict()))
        else:
            console = Console()
            console.print("✓ Project file syntax valid")
            _print_summary(console, summary, raw)

        sys.exit(EXIT_SUCCESS if summary.valid else EXIT_FAILURE)
