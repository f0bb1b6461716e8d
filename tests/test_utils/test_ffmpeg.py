"""Tests for ffmpeg/ffprobe command assembly and the duration rules."""

from pathlib import Path

import pytest

from videoclipper.core.duration import derive_duration_ms
from videoclipper.core.errors import ToolFailureError
from videoclipper.utils import ffmpeg


class TestScaledDimensions:
    @pytest.mark.parametrize(
        "size, limit, expected",
        [
            ((1920, 1080), 480, (480, 270)),
            ((1080, 1920), 480, (270, 480)),
            ((1000, 1000), 481, (480, 480)),
            ((1920, 1080), 481, (480, 270)),
            ((640, 480), 500, (500, 376)),
        ],
    )
    def test_scaling(self, size, limit, expected):
        assert ffmpeg.scaled_dimensions(*size, limit) == expected

    def test_both_even(self):
        width, height = ffmpeg.scaled_dimensions(1279, 719, 333)
        assert width % 2 == 0 and height % 2 == 0

    @pytest.mark.parametrize("limit", [333, 481, 1001])
    def test_odd_limit_never_exceeded(self, limit):
        width, height = ffmpeg.scaled_dimensions(1080, 1920, limit)
        assert height == limit - 1
        assert width <= limit


class TestProbe:
    def test_duration_ms(self, fake_tools):
        fake_tools.durations["song.mp3"] = 12.3456
        assert ffmpeg.probe_duration_ms(Path("/music/song.mp3")) == 12346
        cmd = fake_tools.command("probe duration")
        assert cmd[:3] == ["ffprobe", "-v", "error"]
        assert "format=duration" in cmd

    def test_dimensions(self, fake_tools):
        fake_tools.dimensions = "1280x720"
        assert ffmpeg.probe_dimensions(Path("in.mp4")) == (1280, 720)

    def test_garbage_output(self, monkeypatch: pytest.MonkeyPatch):
        import subprocess

        monkeypatch.setattr(
            ffmpeg, "run_command",
            lambda cmd, stage, **kw: subprocess.CompletedProcess(cmd, 0, "N/A\n", ""),
        )
        with pytest.raises(ToolFailureError):
            ffmpeg.probe_duration_ms(Path("broken.mp4"))


class TestCommands:
    def test_common_flags(self, fake_tools, tmp_path: Path):
        ffmpeg.resize_video(tmp_path / "a.mp4", tmp_path / "b.mp4", 480, 270)
        cmd = fake_tools.command("resize video")
        assert cmd[:5] == ["ffmpeg", "-y", "-nostdin", "-loglevel", "error"]
        assert "scale=480:270" in cmd

    def test_cut_adds_margin(self, fake_tools, tmp_path: Path):
        ffmpeg.cut_video(tmp_path / "a.mp4", tmp_path / "b.mp4", 5000)
        cmd = fake_tools.command("cut video")
        assert cmd[cmd.index("-t") + 1] == "6.000"
        assert cmd[cmd.index("-c") + 1] == "copy"

    def test_adjust_framerate(self, fake_tools, tmp_path: Path):
        ffmpeg.adjust_framerate(tmp_path / "a.mp4", tmp_path / "b.mp4", 24)
        cmd = fake_tools.command("adjust framerate")
        assert "fps=fps=24" in cmd
        assert cmd[cmd.index("-c:a") + 1] == "copy"

    def test_encode_frames(self, fake_tools, tmp_path: Path):
        ffmpeg.encode_frames(tmp_path, "image_%04d.png", 30, tmp_path / "out.mp4")
        cmd = fake_tools.command("encode frames")
        assert cmd[cmd.index("-framerate") + 1] == "30"
        assert cmd[cmd.index("-start_number") + 1] == "1"
        assert cmd[cmd.index("-i") + 1] == str(tmp_path / "image_%04d.png")
        assert cmd[cmd.index("-c:v") + 1] == "libx264"
        assert cmd[cmd.index("-pix_fmt") + 1] == "yuv420p"

    def test_mux_and_trim(self, fake_tools, tmp_path: Path):
        ffmpeg.mux_audio(tmp_path / "v.mp4", tmp_path / "a.mp3", tmp_path / "m.mp4")
        ffmpeg.trim_video(tmp_path / "m.mp4", tmp_path / "t.mp4", 61500)
        mux = fake_tools.command("mux audio")
        assert mux[mux.index("-c:a") + 1] == "aac"
        trim = fake_tools.command("trim video")
        assert trim[trim.index("-t") + 1] == "61.500"

    def test_extract_frame(self, fake_tools, tmp_path: Path):
        ffmpeg.extract_frame(tmp_path / "v.mp4", 2500, tmp_path / "f.png")
        cmd = fake_tools.command("extract frame")
        assert cmd[cmd.index("-ss") + 1] == "2.500"
        assert cmd[cmd.index("-frames:v") + 1] == "1"

    def test_extract_frames_is_one_invocation(self, fake_tools, tmp_path: Path):
        ffmpeg.extract_frames(tmp_path / "v.mp4", tmp_path, 12)
        assert fake_tools.stages == ["extract frames"]
        assert len(list(tmp_path.glob("frame_*.png"))) == 12
        assert (tmp_path / "frame_0001.png").exists()


class TestDuration:
    def test_explicit_wins(self, fake_tools, tmp_path: Path):
        assert derive_duration_ms(4000, tmp_path / "song.mp3", tmp_path / "video.mp4") == 4000

    def test_audio_before_video(self, fake_tools, tmp_path: Path):
        fake_tools.durations.update({"song.mp3": 3.0, "video.mp4": 8.0})
        assert derive_duration_ms(None, tmp_path / "song.mp3", tmp_path / "video.mp4") == 3000

    def test_video_fallback(self, fake_tools, tmp_path: Path):
        fake_tools.durations["video.mp4"] = 8.0
        assert derive_duration_ms(None, None, tmp_path / "video.mp4") == 8000

    def test_clamped_to_video(self, fake_tools, tmp_path: Path):
        fake_tools.durations.update({"song.mp3": 30.0, "video.mp4": 8.0})
        assert derive_duration_ms(None, tmp_path / "song.mp3", tmp_path / "video.mp4") == 8000
        assert derive_duration_ms(20000, None, tmp_path / "video.mp4") == 8000

    def test_no_source(self, fake_tools):
        assert derive_duration_ms() is None
