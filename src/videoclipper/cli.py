"""CLI entry point for videoclipper.

Usage:
    videoclipper init                              # Interactive configuration
    videoclipper info                              # Resolved parameters and their source
    videoclipper export -i clip.mp4                # Video to frames
    videoclipper sample -i clip.mp4 -u -n 5        # Representative frames
    videoclipper merge -i frames_a -r frames_b     # Blend two frame directories
    videoclipper clut -i frames -l lut.png         # Colour lookup per frame
    videoclipper clip -i frames -a song.mp3        # Frames + audio to MP4
    videoclipper filter -i frames blur 3           # G'MIC command per frame
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from videoclipper.core.config import default_config_path, default_log_dir, initialize_configuration, load_config
from videoclipper.core.contracts import AppConfig, Mode
from videoclipper.core.errors import ParameterError, PipelineCancelled, VideoClipperError
from videoclipper.core.logging import setup_logging, verbosity_to_level
from videoclipper.core import params
from videoclipper.core.pipeline_runner import run_mode
from videoclipper.utils.interrupt import CancelToken, install_interrupt_handler, restore_interrupt_handler

app = typer.Typer(name="videoclipper", help="Build music-video clips from image sequences")
console = Console()
err_console = Console(stderr=True)

EXIT_FAILURE = 1
EXIT_CANCELLED = 130


@dataclass
class CliState:
    verbose: int = 0
    quiet: bool = False
    keep_temp: bool | None = None
    config_path: Path | None = None

    def load(self) -> AppConfig:
        return load_config(self.config_path)

    def keep_scratch(self, config: AppConfig) -> bool:
        return config.keep_scratch if self.keep_temp is None else self.keep_temp


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Turn expected failures into one red line and an exit status."""
    try:
        yield
    except PipelineCancelled as e:
        err_console.print(f"error: {e}", style="red", markup=False)
        raise typer.Exit(EXIT_CANCELLED)
    except VideoClipperError as e:
        err_console.print(f"error: {e}", style="red", markup=False)
        raise typer.Exit(EXIT_FAILURE)


def _execute(state: CliState, config: AppConfig, mode: Mode, step_config: BaseModel, inputs: dict) -> BaseModel:
    """Run one mode with SIGINT routed to a cancel token."""
    token = CancelToken()
    previous = install_interrupt_handler(token)
    try:
        return run_mode(mode, step_config, inputs, cancel=token, keep_scratch=state.keep_scratch(config))
    finally:
        restore_interrupt_handler(previous)


def _cli_audio(value: Optional[str]) -> Path | None:
    """Audio named on the command line only (export and sample)."""
    return params.find_audio_file(value) if value else None


@app.callback()
def main(
    ctx: typer.Context,
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="-v debug (with session log file), -vv trace"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only warnings and errors"),
    keep_temp: Optional[bool] = typer.Option(
        None, "--keep-temp/--no-keep-temp", help="Keep scratch directories (default from config)"
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Configuration file path"),
) -> None:
    """Build music-video clips from image sequences."""
    level = verbosity_to_level(verbose, quiet)
    setup_logging(level, log_dir=default_log_dir())
    ctx.obj = CliState(verbose=verbose, quiet=quiet, keep_temp=keep_temp, config_path=config_path)


@app.command()
def init(ctx: typer.Context) -> None:
    """Enter interactive configuration."""
    state: CliState = ctx.obj
    with _handle_errors():
        initialize_configuration(state.config_path)
    path = state.config_path or default_config_path()
    console.print(f"[green]Configuration saved to[/green] {escape(str(path))}")


@app.command()
def info(ctx: typer.Context) -> None:
    """Show every parameter with its resolved value and source."""
    state: CliState = ctx.obj
    with _handle_errors():
        config = state.load()

    table = Table(title="videoclipper parameters")
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source", style="yellow")
    table.add_column("Variable", style="dim")

    for spec in params.ALL_PARAMETERS:
        if spec is params.DURATION:
            continue
        try:
            resolved = params.resolve_with_source(spec, None, config)
            value, source = escape(str(resolved.value)), resolved.source
        except VideoClipperError as e:
            value, source = f"[red]{escape(str(e))}[/red]", "error"
        table.add_row(spec.name, value, source, spec.env_var or "-")
    table.add_row("keep scratch", str(state.keep_scratch(config)), "cli" if state.keep_temp is not None else "config", "-")
    console.print(table)
    console.print(f"[dim]Configuration file: {escape(str(state.config_path or default_config_path()))}[/dim]")


@app.command()
def export(
    ctx: typer.Context,
    input_path: Path = typer.Option(..., "--input", "-i", help="Video to export frames from"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory"),
    audio: Optional[str] = typer.Option(None, "--audio", "-a", help="Audio file (or directory) bounding the duration"),
    duration: Optional[int] = typer.Option(None, "--duration", "-d", help="Duration in milliseconds"),
    fps: Optional[int] = typer.Option(None, "--fps", "-f", help="Frames per second"),
    pixel: Optional[int] = typer.Option(None, "--pixel", "-p", help="Pixel upper limit of the longer side"),
) -> None:
    """Export the frames of a video, resized and resampled."""
    from videoclipper.steps.export.config import ExportConfig

    state: CliState = ctx.obj
    with _handle_errors():
        config = state.load()
        step_config = ExportConfig(
            fps=params.resolve(params.FPS, fps, config),
            pixel_upper_limit=params.resolve(params.PIXEL_LIMIT, pixel, config),
        )
        inputs = {
            "video_path": input_path,
            "output_hint": output,
            "audio_path": _cli_audio(audio),
            "duration_ms": params.resolve(params.DURATION, duration),
        }
        result = _execute(state, config, Mode.EXPORT, step_config, inputs)
    console.print(f"[green]Exported {result.frame_count} frames to[/green] {escape(str(result.frames_dir))}")


@app.command()
def sample(
    ctx: typer.Context,
    input_path: Path = typer.Option(..., "--input", "-i", help="Video to sample"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file or directory"),
    multiple: bool = typer.Option(False, "--multiple", "-u", help="Sample several frames"),
    number: Optional[int] = typer.Option(None, "--number", "-n", help="Number of frames to sample"),
    audio: Optional[str] = typer.Option(None, "--audio", "-a", help="Audio file (or directory) bounding the duration"),
    duration: Optional[int] = typer.Option(None, "--duration", "-d", help="Duration in milliseconds"),
) -> None:
    """Sample one frame from the middle of a video, or several evenly spaced."""
    from videoclipper.steps.sample.config import SampleConfig

    state: CliState = ctx.obj
    with _handle_errors():
        config = state.load()
        step_config = SampleConfig(
            sampling_number=params.resolve_sampling_number(multiple, number, config)
        )
        inputs = {
            "video_path": input_path,
            "output_hint": output,
            "audio_path": _cli_audio(audio),
            "duration_ms": params.resolve(params.DURATION, duration),
        }
        result = _execute(state, config, Mode.SAMPLE, step_config, inputs)
    console.print(f"[green]Sampled {len(result.frame_paths)} frame(s) to[/green] {escape(str(result.output_path))}")


@app.command()
def merge(
    ctx: typer.Context,
    input_path: Path = typer.Option(..., "--input", "-i", help="Base frame directory"),
    second: Path = typer.Option(..., "--second", "-r", help="Frame directory blended on top"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory"),
    opacity: Optional[float] = typer.Option(None, "--opacity", "-t", help="Opacity of the second directory (0.0 - 1.0)"),
) -> None:
    """Blend two frame directories pixel-wise."""
    from videoclipper.steps.merge.config import MergeConfig

    state: CliState = ctx.obj
    with _handle_errors():
        config = state.load()
        step_config = MergeConfig(opacity=params.resolve(params.OPACITY, opacity, config))
        inputs = {"first_dir": input_path, "second_dir": second, "output_hint": output}
        result = _execute(state, config, Mode.MERGE, step_config, inputs)
    console.print(f"[green]Merged {result.merged_count} frames into[/green] {escape(str(result.output_dir))}")


@app.command()
def clut(
    ctx: typer.Context,
    input_path: Path = typer.Option(..., "--input", "-i", help="Frame directory"),
    clut_image: Path = typer.Option(..., "--clut", "-l", help="Colour lookup table image"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output directory (an existing directory is replaced)"
    ),
    clut_opacity: Optional[float] = typer.Option(None, "--clut-opacity", help="Merge with the originals at this opacity"),
    clut_multiple: bool = typer.Option(False, "--clut-multiple", help="Merge once per configured multiple opacity"),
    clut_merge: bool = typer.Option(False, "--clut-merge", help="Merge at the resolved opacity"),
) -> None:
    """Apply a colour lookup table to every frame."""
    from videoclipper.steps.clut.config import ClutConfig, resolve_merge_opacities

    state: CliState = ctx.obj
    with _handle_errors():
        config = state.load()
        step_config = ClutConfig(
            merge_opacities=resolve_merge_opacities(clut_opacity, clut_multiple, clut_merge, config)
        )
        inputs = {"input_dir": input_path, "clut_path": clut_image, "output_hint": output}
        result = _execute(state, config, Mode.CLUT, step_config, inputs)
    console.print(f"[green]Recoloured {result.frame_count} frames into[/green] {escape(str(result.output_dir))}")
    for merged in result.merged_dirs:
        console.print(f"[green]Merged into[/green] {escape(str(merged))}")


@app.command()
def clip(
    ctx: typer.Context,
    input_path: Path = typer.Option(..., "--input", "-i", help="Frame directory"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file, or directory to place it in"),
    audio: Optional[str] = typer.Option(None, "--audio", "-a", help="Audio file or directory holding one"),
    duration: Optional[int] = typer.Option(None, "--duration", "-d", help="Clip duration in milliseconds"),
    fps: Optional[int] = typer.Option(None, "--fps", "-f", help="Frames per second"),
) -> None:
    """Encode a frame directory (and audio) into the final MP4."""
    from videoclipper.steps.clip.config import ClipConfig

    state: CliState = ctx.obj
    with _handle_errors():
        config = state.load()
        step_config = ClipConfig(fps=params.resolve(params.FPS, fps, config))
        inputs = {
            "frames_dir": input_path,
            "output_hint": output,
            "audio_path": params.resolve(params.AUDIO, audio, config),
            "duration_ms": params.resolve(params.DURATION, duration),
        }
        result = _execute(state, config, Mode.CLIP, step_config, inputs)
    console.print(f"[green]Clip written to[/green] {escape(str(result.video_path))}")


@app.command(
    name="filter",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def filter_frames(
    ctx: typer.Context,
    input_path: Path = typer.Option(..., "--input", "-i", help="Frame directory"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output directory (an existing directory is replaced)"
    ),
    args: Optional[List[str]] = typer.Argument(None, help="G'MIC arguments, passed through"),
) -> None:
    """Run a G'MIC command over every frame."""
    from videoclipper.steps.filter.config import FilterConfig

    state: CliState = ctx.obj
    filter_args = list(args or []) + list(ctx.args)
    with _handle_errors():
        if not filter_args:
            raise ParameterError("filter arguments", "at least one G'MIC argument is required")
        config = state.load()
        step_config = FilterConfig(filter_args=filter_args)
        inputs = {"input_dir": input_path, "output_hint": output}
        result = _execute(state, config, Mode.FILTER, step_config, inputs)
    console.print(f"[green]Filtered {result.frame_count} frames into[/green] {escape(str(result.output_dir))}")


if __name__ == "__main__":
    app()
