"""Tests for Filter: G'MIC over a frame directory."""

from pathlib import Path

import pytest

from videoclipper.core.errors import ParameterError, ToolFailureError
from videoclipper.steps.filter.config import FilterConfig
from videoclipper.steps.filter.contracts import FilterInput
from videoclipper.steps.filter.step import FilterStep


class TestFilterConfig:
    def test_needs_arguments(self):
        with pytest.raises(ValueError):
            FilterConfig(filter_args=[])


class TestFilterStep:
    def test_filters_every_frame(self, make_frames, fake_tools):
        frames = make_frames(["frame_1.png", "frame_2.png"])
        output = FilterStep(config=FilterConfig(filter_args=["-v", "blur", "3"])).execute(
            FilterInput(input_dir=frames)
        )
        assert output.output_dir.parent == frames.parent
        assert output.output_dir.name.startswith("frames_blur_")
        assert len(output.output_dir.name) == len("frames_blur_") + 2
        assert sorted(p.name for p in output.output_dir.iterdir()) == ["image_0001.png", "image_0002.png"]
        assert output.frame_count == 2
        assert output.multi_output_groups == []
        _, cmd = fake_tools.calls[0]
        assert cmd == ["gmic", str(frames / "frame_0001.png"), "blur", "3", "-output", str(output.output_dir / "image_0001.png")]

    def test_explicit_output_replaced(self, make_frames, fake_tools, tmp_path: Path):
        frames = make_frames(["frame_0001.png"])
        hint = tmp_path / "filtered"
        hint.mkdir()
        (hint / "old.png").write_bytes(b"x")
        output = FilterStep(config=FilterConfig(filter_args=["sharpen", "50"])).execute(
            FilterInput(input_dir=frames, output_hint=hint)
        )
        assert sorted(p.name for p in hint.iterdir()) == ["image_0001.png"]
        assert output.output_dir == hint

    def test_only_verbosity_flags(self, make_frames):
        frames = make_frames(["frame_0001.png"])
        with pytest.raises(ParameterError):
            FilterStep(config=FilterConfig(filter_args=["-v", "-vv"])).execute(FilterInput(input_dir=frames))

    def test_input_must_be_directory(self, tmp_path: Path):
        image = tmp_path / "frame_0001.png"
        image.write_bytes(b"x")
        with pytest.raises(ParameterError):
            FilterStep(config=FilterConfig(filter_args=["blur"])).execute(FilterInput(input_dir=image))

    def test_failure_propagates(self, make_frames, fake_tools):
        fake_tools.fail_stage = "filter"
        frames = make_frames(["frame_0001.png"])
        with pytest.raises(ToolFailureError):
            FilterStep(config=FilterConfig(filter_args=["blur"])).execute(FilterInput(input_dir=frames))
