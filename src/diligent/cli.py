import logging

import click

from diligent import __version__

# Import command modules for registration
from diligent.start_commands import register_start_commands
from diligent.project_commands import register_project_commands
from diligent.client_commands import register_client_commands


@click.group()
@click.version_option(version=__version__, prog_name="workon")
@click.option('--verbose', '-v', is_flag=True, default=False,
              help='Show debug logging on stderr')
def cli(verbose):
    """Launch and inspect project workspaces on the Awesome window manager."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register commands from external modules
register_start_commands(cli)
register_project_commands(cli)
register_client_commands(cli)


if __name__ == '__main__':
    cli()
