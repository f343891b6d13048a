"""Serve command - run the HTTP API"""

import click


@click.command()
@click.option('--host', default=None, help='Bind address (default: API_HOST or 127.0.0.1)')
@click.option('--port', type=int, default=None, help='Port (default: API_PORT or 8000)')
@click.pass_context
def serve(ctx, host: str | None, port: int | None):
    """Run the loop engine with its HTTP API

    Example:
        banana serve --port 8000
    """
    from banana_api.main import run

    run(host=host, port=port, debug=ctx.obj['verbose'])
