"""Status command - query a running server"""

import asyncio

import click
import httpx


@click.command()
@click.pass_context
def status(ctx):
    """Show playback status of a running server

    Example:
        banana status
        banana --url http://localhost:8000 --json status
    """
    formatter = ctx.obj['formatter']

    try:
        result = asyncio.run(_status_async(ctx.obj['url'], ctx.obj['timeout']))
    except httpx.HTTPError as e:
        formatter.error("Failed to get status", str(e))
        raise click.Abort()

    recording = result.get("recording", {})
    formatter.success("Banana status", {
        "playing": result.get("playing"),
        "bpm": result.get("bpm"),
        "beat": result.get("current_beat"),
        "recording": recording.get("mode"),
        "sample": result.get("sample") or "none",
    })


async def _status_async(url: str, timeout: float) -> dict:
    """Get status asynchronously"""
    async with httpx.AsyncClient(base_url=url, timeout=timeout) as client:
        response = await client.get("/playback/status")
        response.raise_for_status()
        return response.json()
