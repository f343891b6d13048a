"""Tests for sample decoding and drum kit loading"""

import pytest

from banana_core.errors import DecodeFailed
from banana_loop.sampler import decode_sample, display_name, load_drum_kit, load_sample_file


class TestDecode:
    def test_same_rate(self, wav_bytes):
        sample = decode_sample(wav_bytes, 8000, "BREAK")

        assert sample.frames.shape == (4000, 1)
        assert sample.sample_rate == 8000
        assert sample.name == "BREAK"

    def test_resampled_to_engine_rate(self, wav_bytes):
        sample = decode_sample(wav_bytes, 16000)

        assert sample.length == 8000
        assert sample.duration == pytest.approx(0.5)

    @pytest.mark.parametrize("raw", [b"", b"RIFF....garbage", b"\x00" * 64])
    def test_undecodable(self, raw):
        with pytest.raises(DecodeFailed):
            decode_sample(raw, 8000)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeFailed):
            load_sample_file(tmp_path / "nope.wav", 8000)

    @pytest.mark.parametrize(
        "filename,expected",
        [("my loop.WAV", "MY LOOP"), ("break.mp3", "BREAK"), (None, "SAMPLE"), ("", "SAMPLE")],
    )
    def test_display_name(self, filename, expected):
        assert display_name(filename) == expected


class TestDrumKit:
    def test_missing_rows_are_silent(self, tmp_path, wav_bytes):
        kick = tmp_path / "kick.wav"
        kick.write_bytes(wav_bytes)

        kit = load_drum_kit([kick, None, tmp_path / "missing.wav", None], 8000)

        assert kit.loaded_rows == [0]
        assert kit.names[0] == "KICK"
        assert kit.voice(2) is None
        assert kit.voice(9) is None
