"""Shared pytest fixtures for videoclipper tests."""

import shutil
import subprocess
from pathlib import Path

import numpy as np
import pytest

from videoclipper.core.contracts import AppConfig
from videoclipper.core.errors import ToolFailureError
from videoclipper.core.params import ALL_PARAMETERS


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Clear the parameter environment variables and point the app dir at tmp."""
    for spec in ALL_PARAMETERS:
        if spec.env_var:
            monkeypatch.delenv(spec.env_var, raising=False)
    app_home = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(app_home))
    monkeypatch.setattr("videoclipper.core.config.app_dir", lambda: app_home / "videoclipper")
    return app_home


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def make_frames(tmp_path: Path):
    """Factory: create a directory holding placeholder files with the given names."""

    def _make(names, dirname: str = "frames") -> Path:
        directory = tmp_path / dirname
        directory.mkdir(parents=True, exist_ok=True)
        for name in names:
            (directory / name).write_bytes(f"frame {name}".encode())
        return directory

    return _make


@pytest.fixture
def make_images(tmp_path: Path):
    """Factory: create a directory of real images (requires OpenCV)."""
    cv2 = pytest.importorskip("cv2")

    def _make(names, dirname: str = "images", value: int = 100, size=(40, 60)) -> Path:
        directory = tmp_path / dirname
        directory.mkdir(parents=True, exist_ok=True)
        for name in names:
            img = np.full((size[0], size[1], 3), value, dtype=np.uint8)
            cv2.imwrite(str(directory / name), img)
        return directory

    return _make


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    path = tmp_path / "music" / "song.mp3"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"ID3")
    return path


@pytest.fixture
def video_file(tmp_path: Path) -> Path:
    path = tmp_path / "videos" / "input.mp4"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return path


class FakeRunner:
    """Stands in for ``run_command``: records invocations and fakes tool outputs."""

    def __init__(self):
        self.calls: list[tuple[str, list[str]]] = []
        self.durations: dict[str, float] = {}
        self.default_duration = 10.0
        self.dimensions = "1920x1080"
        self.fail_stage: str | None = None

    def __call__(self, cmd, stage, cancel=None, poll_interval=0.1, on_tick=None, capture=False, cwd=None):
        cmd = [str(c) for c in cmd]
        self.calls.append((stage, cmd))
        if self.fail_stage is not None and stage.startswith(self.fail_stage):
            raise ToolFailureError(Path(cmd[0]).name, stage, 1, "simulated failure")
        if on_tick is not None:
            on_tick()

        if Path(cmd[0]).name == "ffprobe":
            if "format=duration" in cmd:
                seconds = self.durations.get(Path(cmd[-1]).name, self.default_duration)
                return subprocess.CompletedProcess(cmd, 0, f"{seconds}\n", "")
            return subprocess.CompletedProcess(cmd, 0, f"{self.dimensions}\n", "")

        output = cmd[-1]
        if stage == "extract frames":
            count = int(cmd[cmd.index("-frames:v") + 1])
            for i in range(1, count + 1):
                Path(output % i).write_bytes(b"png")
        elif stage.startswith(("clut ", "filter ")) and Path(cmd[1]).is_file():
            # image tools pass the picture through unchanged
            shutil.copyfile(cmd[1], output)
        else:
            Path(output).write_bytes(b"data")
        return subprocess.CompletedProcess(cmd, 0, None, None)

    @property
    def stages(self) -> list[str]:
        return [stage for stage, _ in self.calls]

    def command(self, stage: str) -> list[str]:
        return next(cmd for s, cmd in self.calls if s == stage)


@pytest.fixture
def fake_tools(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    runner = FakeRunner()
    monkeypatch.setattr("videoclipper.utils.ffmpeg.run_command", runner)
    monkeypatch.setattr("videoclipper.utils.image_tools.run_command", runner)
    return runner
