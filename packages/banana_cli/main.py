"""Main CLI entry point"""

import logging

import click
from rich.console import Console

from banana_cli.commands.chops import chops
from banana_cli.commands.render import render
from banana_cli.commands.serve import serve
from banana_cli.commands.status import status
from banana_cli.utils.output import OutputFormatter


@click.group()
@click.option('--url', default='http://localhost:8000', help='Banana API URL')
@click.option('--timeout', default=30.0, help='Request timeout in seconds')
@click.option('--json', 'json_mode', is_flag=True, help='Output as JSON')
@click.option('--verbose', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, url: str, timeout: float, json_mode: bool, verbose: bool):
    """Banana CLI - loop rendering, sample inspection and the HTTP API

    Examples:
        banana render loop.yaml -o loop.wav
        banana chops break.wav
        banana serve
        banana --json status
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # Initialize context
    ctx.ensure_object(dict)
    ctx.obj['url'] = url
    ctx.obj['timeout'] = timeout
    ctx.obj['verbose'] = verbose

    # Initialize output formatter
    console = Console()
    ctx.obj['console'] = console
    ctx.obj['formatter'] = OutputFormatter(json_mode=json_mode, console=console)


# Register commands
cli.add_command(render)
cli.add_command(chops)
cli.add_command(serve)
cli.add_command(status)


if __name__ == '__main__':
    cli()
