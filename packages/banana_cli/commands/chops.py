"""Chops command - inspect how a sample is sliced"""

from pathlib import Path

import click

from banana_core.errors import DecodeFailed
from banana_loop.sampler import chop_sample, load_sample_file


@click.command()
@click.argument('sample', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--sample-rate', type=click.IntRange(min=8000), default=44100,
              show_default=True, help='Decode sample rate')
@click.pass_context
def chops(ctx, sample: Path, sample_rate: int):
    """Show the sixteen chop frame ranges of a sample

    Example:
        banana chops break.wav
        banana --json chops break.wav
    """
    formatter = ctx.obj['formatter']

    try:
        chop_set = chop_sample(load_sample_file(sample, sample_rate))
    except DecodeFailed as e:
        formatter.error("Could not decode sample", str(e))
        raise click.Abort()

    rows = [
        [c.index, c.start, c.end, c.length, f"{c.length / sample_rate:.3f}"]
        for c in chop_set.chops
    ]
    formatter.table(
        f"{chop_set.name} ({chop_set.sample.length} frames @ {sample_rate} Hz)",
        ["chop", "start", "end", "frames", "seconds"],
        rows,
    )
