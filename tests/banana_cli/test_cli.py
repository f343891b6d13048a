"""Tests for the banana CLI"""

import io
import json

import numpy as np
import pytest
import soundfile as sf
from click.testing import CliRunner

from banana_cli.main import cli

PROJECT = """
bpm: 120
sample: break.wav
sequencer: [0, null, null, null, 4, null, null, null, 8, null, null, null, 12, null, null, null]
layers:
  - waveform: triangle
    events:
      - {time: 0.0, kind: start, frequency: 220}
      - {time: 2.0, kind: stop}
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def sample_path(tmp_path):
    t = np.arange(4000) / 8000
    buf = io.BytesIO()
    sf.write(buf, (0.5 * np.sin(2 * np.pi * 220 * t)).astype(np.float32), 8000, format="WAV")
    path = tmp_path / "break.wav"
    path.write_bytes(buf.getvalue())
    return path


class TestChops:
    def test_json_table(self, runner, sample_path):
        result = runner.invoke(cli, ["--json", "chops", str(sample_path), "--sample-rate", "8000"])

        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert len(rows) == 16
        assert rows[0] == {"chop": 0, "start": 0, "end": 250, "frames": 250, "seconds": "0.031"}
        assert rows[15]["end"] == 4000

    def test_human_table(self, runner, sample_path):
        result = runner.invoke(cli, ["chops", str(sample_path), "--sample-rate", "8000"])

        assert result.exit_code == 0
        assert "BREAK" in result.stdout

    def test_undecodable(self, runner, tmp_path):
        path = tmp_path / "junk.wav"
        path.write_bytes(b"junk")

        result = runner.invoke(cli, ["chops", str(path)])

        assert result.exit_code == 1


class TestRender:
    def test_render_project(self, runner, tmp_path, sample_path):
        project = tmp_path / "loop.yaml"
        project.write_text(PROJECT)
        output = tmp_path / "out.wav"

        result = runner.invoke(cli, [
            "--json", "render", str(project), "-o", str(output),
            "--loops", "1", "--sample-rate", "8000",
        ])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["status"] == "success"
        assert payload["data"]["loops"] == 1
        assert payload["data"]["frames"] == 64000
        assert payload["data"]["peak"] > 0

        data, sr = sf.read(output)
        assert sr == 8000
        assert data.shape == (64000, 2)

    def test_default_loop_count(self, runner, tmp_path, sample_path):
        project = tmp_path / "loop.yaml"
        project.write_text(PROJECT)
        output = tmp_path / "out.wav"

        result = runner.invoke(cli, [
            "--json", "render", str(project), "-o", str(output), "--sample-rate", "8000",
        ])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["loops"] == 4

    def test_invalid_project(self, runner, tmp_path):
        project = tmp_path / "bad.yaml"
        project.write_text("bpm: -1\n")
        output = tmp_path / "out.wav"

        result = runner.invoke(cli, ["render", str(project), "-o", str(output)])

        assert result.exit_code == 1
        assert not output.exists()


class TestStatus:
    def test_status(self, runner, monkeypatch):
        from banana_cli.commands import status as status_module

        async def fake_status(url, timeout):
            assert url == "http://example:9000"
            return {"playing": True, "bpm": 96.0, "current_beat": 3,
                    "recording": {"mode": "pads"}, "sample": None}

        monkeypatch.setattr(status_module, "_status_async", fake_status)

        result = runner.invoke(cli, ["--url", "http://example:9000", "--json", "status"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data == {"playing": True, "bpm": 96.0, "beat": 3, "recording": "pads", "sample": "none"}
