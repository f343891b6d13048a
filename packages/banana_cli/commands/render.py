"""Render command - offline export of a project file"""

from pathlib import Path

import click

from banana_core.constants import EXPORT_FILENAME
from banana_core.errors import BananaError
from banana_loop.project import load_project
from banana_loop.render import OfflineRenderer


@click.command()
@click.argument('project', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('-o', '--output', type=click.Path(dir_okay=False, path_type=Path),
              default=EXPORT_FILENAME, show_default=True, help='Output WAV file')
@click.option('--loops', type=click.IntRange(min=1), default=None,
              help='Loop repetitions (default: about 30 seconds)')
@click.option('--sample-rate', type=click.IntRange(min=8000), default=44100,
              show_default=True, help='Render sample rate')
@click.pass_context
def render(ctx, project: Path, output: Path, loops: int | None, sample_rate: int):
    """Render a project description to a WAV file

    Drum grid rows are not part of the export.

    Example:
        banana render loop.yaml -o loop.wav
        banana render loop.json --loops 2 --sample-rate 48000
    """
    formatter = ctx.obj['formatter']

    try:
        project_file = load_project(project)
        session = project_file.to_session(project.parent, sample_rate)
        result = OfflineRenderer(sample_rate).render(session, loops)
        output.write_bytes(result.to_wav())
    except (BananaError, OSError) as e:
        formatter.error("Render failed", str(e))
        raise click.Abort()

    formatter.success(f"Rendered {output}", {
        "loops": result.plan.loops,
        "loop_duration": round(result.plan.loop_duration, 4),
        "duration": round(result.plan.duration, 4),
        "frames": result.frames,
        "peak": round(result.peak, 4),
    })
