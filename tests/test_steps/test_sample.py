"""Tests for Sample: representative frames."""

from pathlib import Path

import pytest

from videoclipper.steps.sample.config import SampleConfig
from videoclipper.steps.sample.contracts import SampleInput
from videoclipper.steps.sample.step import SampleStep, sample_timestamps


class TestSampleTimestamps:
    def test_single_is_midpoint(self):
        assert sample_timestamps(10000, 1) == [5000]

    def test_evenly_spread(self):
        assert sample_timestamps(10000, 3) == [2500, 5000, 7500]

    def test_integer_interval(self):
        assert sample_timestamps(1000, 6) == [142, 284, 426, 568, 710, 852]


class TestSampleStep:
    def test_single_frame_file(self, video_file: Path, fake_tools):
        output = SampleStep(config=SampleConfig()).execute(SampleInput(video_path=video_file))
        assert output.output_path == video_file.parent / "sample_frame.png"
        assert output.timestamps_ms == [5000]
        assert output.output_path.exists()
        cmd = fake_tools.command("extract frame")
        assert cmd[cmd.index("-ss") + 1] == "5.000"

    def test_single_frame_into_directory_hint(self, video_file: Path, fake_tools, tmp_path: Path):
        hint = tmp_path / "stills"
        hint.mkdir()
        output = SampleStep(config=SampleConfig()).execute(
            SampleInput(video_path=video_file, output_hint=hint)
        )
        assert output.output_path == hint / "sample_frame.png"

    def test_multiple_frames(self, video_file: Path, fake_tools):
        output = SampleStep(config=SampleConfig(sampling_number=3)).execute(
            SampleInput(video_path=video_file)
        )
        assert output.output_path == video_file.parent / "sample_frames"
        assert [p.name for p in output.frame_paths] == [
            "sample_frame_1.png", "sample_frame_2.png", "sample_frame_3.png",
        ]
        assert output.timestamps_ms == [2500, 5000, 7500]
        assert fake_tools.stages.count("extract frame") == 3

    def test_audio_duration(self, video_file: Path, audio_file: Path, fake_tools):
        fake_tools.durations["song.mp3"] = 4.0
        output = SampleStep(config=SampleConfig()).execute(
            SampleInput(video_path=video_file, audio_path=audio_file)
        )
        assert output.timestamps_ms == [2000]

    def test_rejects_zero_count(self):
        with pytest.raises(ValueError):
            SampleConfig(sampling_number=0)
