"""Tests for output target resolution."""

from pathlib import Path

import pytest

from videoclipper.core.contracts import Mode, OutputTarget
from videoclipper.core.errors import InvalidHintError, OutputError
from videoclipper.core.output import (
    encoder_path,
    finalize_encoded,
    format_opacity,
    resolve_output,
    unique_directory,
)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "data"
    (directory / "a").mkdir(parents=True)
    return directory


class TestUniqueDirectory:
    def test_free_name_used(self, tmp_path: Path):
        assert unique_directory(tmp_path, "out") == tmp_path / "out"
        assert (tmp_path / "out").is_dir()

    def test_sequential_suffixes(self, tmp_path: Path):
        (tmp_path / "out").mkdir()
        (tmp_path / "out_1").mkdir()
        assert unique_directory(tmp_path, "out") == tmp_path / "out_2"


class TestMerge:
    def test_auto_generated_name(self, data_dir: Path):
        target = resolve_output(Mode.MERGE, data_dir / "a", opacity=0.5)
        assert target == OutputTarget.directory(data_dir / "a_merged_0.5")
        assert target.path.is_dir()

    def test_auto_gen_collision(self, data_dir: Path):
        (data_dir / "a_merged_0.5").mkdir()
        target = resolve_output(Mode.MERGE, data_dir / "a", opacity=0.5)
        assert target.path == data_dir / "a_merged_0.5_1"
        assert target.path.is_dir()

    def test_auto_gen_on_auto_gen_path_does_not_collide(self, data_dir: Path):
        first = resolve_output(Mode.MERGE, data_dir / "a", opacity=0.5)
        second = resolve_output(Mode.MERGE, data_dir / "a", opacity=0.5)
        assert first.path != second.path

    def test_explicit_directory_kept(self, data_dir: Path):
        explicit = data_dir / "mine"
        explicit.mkdir()
        (explicit / "keep.png").write_bytes(b"x")
        target = resolve_output(Mode.MERGE, data_dir / "a", explicit, opacity=0.5)
        assert target.path == explicit
        assert (explicit / "keep.png").exists()

    def test_explicit_file_rejected(self, data_dir: Path):
        existing = data_dir / "file.txt"
        existing.write_text("x")
        with pytest.raises(InvalidHintError):
            resolve_output(Mode.MERGE, data_dir / "a", existing, opacity=0.5)

    def test_opacity_required_for_auto_name(self, data_dir: Path):
        with pytest.raises(OutputError):
            resolve_output(Mode.MERGE, data_dir / "a")

    @pytest.mark.parametrize("opacity, text", [(0.5, "0.5"), (1.0, "1"), (0.25, "0.25"), (0.0, "0")])
    def test_format_opacity(self, opacity, text):
        assert format_opacity(opacity) == text


class TestExport:
    def test_auto_generated_name(self, tmp_path: Path):
        video = tmp_path / "movie.mp4"
        target = resolve_output(Mode.EXPORT, video)
        assert target.path == tmp_path / "movie_original_frames"
        assert target.is_directory

    def test_collision(self, tmp_path: Path):
        (tmp_path / "movie_original_frames").mkdir()
        target = resolve_output(Mode.EXPORT, tmp_path / "movie.mp4")
        assert target.path == tmp_path / "movie_original_frames_1"


class TestSample:
    def test_single_default(self, tmp_path: Path):
        target = resolve_output(Mode.SAMPLE, tmp_path / "movie.mp4")
        assert target == OutputTarget.file(tmp_path / "sample_frame.png")
        assert not target.path.exists()

    def test_single_hint_directory(self, tmp_path: Path):
        out = tmp_path / "out"
        out.mkdir()
        target = resolve_output(Mode.SAMPLE, tmp_path / "movie.mp4", out)
        assert target.path == out / "sample_frame.png"

    def test_single_hint_file_parent_created(self, tmp_path: Path):
        target = resolve_output(Mode.SAMPLE, tmp_path / "movie.mp4", tmp_path / "new" / "thumb.png")
        assert target.is_file
        assert (tmp_path / "new").is_dir()

    def test_multiple(self, tmp_path: Path):
        (tmp_path / "sample_frames").mkdir()
        target = resolve_output(Mode.SAMPLE, tmp_path / "movie.mp4", sampling_number=4)
        assert target == OutputTarget.directory(tmp_path / "sample_frames_1")


class TestClut:
    def test_auto_generated_name(self, data_dir: Path):
        target = resolve_output(Mode.CLUT, data_dir / "a")
        assert target.path == data_dir / "a_clutted"

    def test_explicit_directory_replaced(self, data_dir: Path):
        explicit = data_dir / "out"
        explicit.mkdir()
        (explicit / "old.png").write_bytes(b"x")
        target = resolve_output(Mode.CLUT, data_dir / "a", explicit)
        assert target.path == explicit
        assert list(explicit.iterdir()) == []

    def test_input_directory_as_hint_rejected(self, data_dir: Path):
        with pytest.raises(InvalidHintError):
            resolve_output(Mode.CLUT, data_dir / "a", data_dir / "a")

    @pytest.mark.parametrize("mode", [Mode.CLUT, Mode.FILTER])
    def test_parent_of_input_as_hint_rejected(self, mode, data_dir: Path):
        frame = data_dir / "a" / "frame_0001.png"
        frame.write_bytes(b"x")
        with pytest.raises(InvalidHintError, match="contains the input directory"):
            resolve_output(mode, data_dir / "a", data_dir, filter_args=["blur"])
        assert frame.exists()


class TestFilter:
    def test_random_suffix(self, data_dir: Path):
        target = resolve_output(Mode.FILTER, data_dir / "a", filter_args=["blur", "3"])
        assert target.path.parent == data_dir
        assert target.path.name.startswith("a_blur_")
        assert len(target.path.name) == len("a_blur_") + 2
        assert target.path.is_dir()

    def test_explicit_directory_replaced(self, data_dir: Path):
        explicit = data_dir / "filtered"
        explicit.mkdir()
        (explicit / "old.png").write_bytes(b"x")
        resolve_output(Mode.FILTER, data_dir / "a", explicit, filter_args=["blur"])
        assert list(explicit.iterdir()) == []


class TestClip:
    def test_default_from_input(self, data_dir: Path):
        target = resolve_output(Mode.CLIP, data_dir / "a")
        assert target == OutputTarget.file(data_dir / "a.mp4")

    def test_default_from_audio(self, data_dir: Path, audio_file: Path):
        target = resolve_output(Mode.CLIP, data_dir / "a", audio_path=audio_file)
        assert target.path == audio_file.parent / "song.mp4"

    def test_auto_gen_collision(self, data_dir: Path):
        (data_dir / "a.mp4").write_bytes(b"old")
        target = resolve_output(Mode.CLIP, data_dir / "a")
        assert target.path == data_dir / "a_1.mp4"

    def test_explicit_file_overwritten(self, data_dir: Path):
        existing = data_dir / "final.mp4"
        existing.write_bytes(b"old")
        target = resolve_output(Mode.CLIP, data_dir / "a", existing)
        assert target.path == existing

    def test_hint_directory_joins_base(self, data_dir: Path, audio_file: Path):
        out = data_dir / "renders"
        out.mkdir()
        target = resolve_output(Mode.CLIP, data_dir / "a", out, audio_path=audio_file)
        assert target.path == out / "song.mp4"

    def test_file_parent_created_not_file(self, tmp_path: Path):
        target = resolve_output(Mode.CLIP, tmp_path / "in", tmp_path / "out" / "song.mkv")
        assert target.path == tmp_path / "out" / "song.mkv"
        assert (tmp_path / "out").is_dir()
        assert not target.path.exists()


class TestEncoderPath:
    def test_mp4_untouched(self):
        assert encoder_path(Path("/out/song.MP4")) == Path("/out/song.MP4")

    def test_other_extension_coerced(self):
        assert encoder_path(Path("/out/song.mkv")) == Path("/out/song.mp4")

    def test_no_extension(self):
        assert encoder_path(Path("/out/song")) == Path("/out/song.mp4")

    def test_finalize_renames(self, tmp_path: Path):
        encoded = tmp_path / "song.mp4"
        encoded.write_bytes(b"video")
        final = finalize_encoded(encoded, tmp_path / "song.mkv")
        assert final == tmp_path / "song.mkv"
        assert final.read_bytes() == b"video"
        assert not encoded.exists()
