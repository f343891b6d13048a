"""Tests for sampler and export endpoints"""

import struct


def _upload(client, wav_bytes, name="break.wav"):
    return client.post("/sampler/sample", files={"file": (name, wav_bytes, "audio/wav")})


class TestSample:
    def test_upload(self, client, wav_bytes):
        response = _upload(client, wav_bytes)

        assert response.status_code == 200
        assert response.json()["name"] == "BREAK"
        assert response.json()["chop_frames"] == 100

        sampler = client.get("/sampler").json()
        assert sampler["sample"] == "BREAK"
        assert len(sampler["chops"]) == 16
        assert sampler["chops"][1] == {"index": 1, "start": 100, "end": 200}

    def test_undecodable_upload(self, client):
        response = _upload(client, b"this is not audio", "notes.txt")
        assert response.status_code == 400

    def test_too_large(self, client, wav_bytes, monkeypatch):
        from banana_api.config import settings

        monkeypatch.setattr(settings, "max_sample_size_mb", 0)
        assert _upload(client, wav_bytes).status_code == 413

    def test_clear(self, client, wav_bytes):
        _upload(client, wav_bytes)
        client.post("/sampler/sequencer/0", json={"chop": 3})

        assert client.delete("/sampler/sample").status_code == 200

        sampler = client.get("/sampler").json()
        assert sampler["sample"] is None
        assert sampler["sequencer"][0] is None


class TestPads:
    def test_pad_without_sample(self, client):
        response = client.post("/sampler/pads/0")

        assert response.status_code == 200
        assert response.json()["message"] == "No sample loaded"

    def test_pad_plays(self, client, graph, wav_bytes):
        _upload(client, wav_bytes)

        response = client.post("/sampler/pads/5")

        assert response.status_code == 200
        assert response.json()["recorded"] is False
        assert len(graph.voices) == 1

    def test_sequencer_step(self, client):
        response = client.post("/sampler/sequencer/2", json={"chop": 9})

        assert response.json()["steps"][2] == 9
        assert client.post("/sampler/sequencer/2", json={}).json()["steps"][2] is None

    def test_sequencer_step_out_of_range(self, client):
        assert client.post("/sampler/sequencer/16", json={"chop": 1}).status_code == 400

    def test_settings(self, client, engine):
        response = client.post("/sampler/settings", json={"pitch": -7, "reversed": True})

        assert response.status_code == 200
        assert engine.session.settings.pad_pitch == -7
        assert engine.session.settings.reversed is True

    def test_settings_range(self, client):
        assert client.post("/sampler/settings", json={"pitch": 13}).status_code == 422


class TestExport:
    def test_export_empty_loop(self, client):
        response = client.get("/export")

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/wav"
        assert 'filename="love-banana-loop.wav"' in response.headers["content-disposition"]

        body = response.content
        assert body[:4] == b"RIFF"
        (data_length,) = struct.unpack("<I", body[40:44])
        assert data_length == 8 * 8000 * 2 * 2

    def test_export_loop_count(self, client):
        response = client.get("/export", params={"loops": 2})
        assert len(response.content) == 44 + 2 * 8 * 8000 * 4

    def test_export_loop_count_range(self, client):
        assert client.get("/export", params={"loops": 0}).status_code == 422
