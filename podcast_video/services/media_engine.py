"""Media Engine - duration probing, looped clip assembly and clip concatenation."""

import math
import subprocess
from pathlib import Path
from typing import Any, Optional

import imageio_ffmpeg
from moviepy import AudioFileClip, VideoFileClip, vfx

from podcast_video.core.config import Settings
from podcast_video.core.errors import ClipAssemblyError, ConcatenationError, DurationProbeError


def escape_concat_path(path: Path) -> str:
    """Quote a path for an ffmpeg concat manifest line."""
    return "file '{}'".format(str(path).replace("'", "'\\''"))


class MediaEngine:
    """Wraps moviepy and the bundled ffmpeg binary."""

    def __init__(self, settings: Settings, logger: Any, ffmpeg_exe: Optional[str] = None):
        """
        Initialize the media engine.

        Args:
            settings: Application settings (codecs, pixel format, fps)
            logger: Logger instance
            ffmpeg_exe: Optional ffmpeg binary; defaults to the one bundled with imageio-ffmpeg
        """
        self.settings = settings
        self.logger = logger
        self._ffmpeg_exe = ffmpeg_exe

    @property
    def ffmpeg_exe(self) -> str:
        if self._ffmpeg_exe is None:
            self._ffmpeg_exe = imageio_ffmpeg.get_ffmpeg_exe()
        return self._ffmpeg_exe

    def probe_duration(self, audio_path: Path) -> float:
        """
        Return the duration of an audio file in seconds.

        Raises:
            DurationProbeError: if the file cannot be read or the duration is
                not a positive finite number
        """
        try:
            audio = AudioFileClip(str(audio_path))
        except Exception as e:
            raise DurationProbeError(f"Unable to determine audio duration for {audio_path.name}: {e}") from e

        try:
            duration = audio.duration
        finally:
            audio.close()

        if duration is None or not isinstance(duration, (int, float)) or not math.isfinite(duration) or duration <= 0:
            raise DurationProbeError(f"Unable to determine audio duration for {audio_path.name} (got {duration!r}).")
        return float(duration)

    def loop_video_with_audio(
        self,
        video_path: Path,
        audio_path: Path,
        duration: float,
        output_path: Path,
        temp_audio_path: Optional[Path] = None,
    ) -> Path:
        """
        Loop a background video under an audio track, capped to exactly `duration`.

        Every clip is encoded with the same codec, pixel format and frame rate
        so the clips can later be joined with stream copy.
        """
        video = None
        audio = None
        clip = None
        try:
            video = VideoFileClip(str(video_path), audio=False)
            audio = AudioFileClip(str(audio_path))
            clip = (
                video.with_effects([vfx.Loop(duration=duration)])
                .with_audio(audio)
                .with_duration(duration)
            )
            clip.write_videofile(
                str(output_path),
                fps=self.settings.clip_fps,
                codec=self.settings.video_codec,
                audio_codec=self.settings.audio_codec,
                temp_audiofile=str(temp_audio_path) if temp_audio_path else None,
                ffmpeg_params=["-pix_fmt", self.settings.pixel_format],
                logger=None,  # Suppress MoviePy progress bars
            )
        except Exception as e:
            raise ClipAssemblyError(f"Failed to assemble clip {output_path.name}: {e}") from e
        finally:
            for resource in (clip, audio, video):
                if resource is not None:
                    resource.close()

        return output_path

    def concatenate(self, clip_paths: list[Path], output_path: Path, manifest_path: Path) -> Path:
        """
        Join clips in order with the concat demuxer and stream copy (no re-encode).

        Args:
            clip_paths: Clips in playback order
            output_path: Final file
            manifest_path: Manifest file to write (must already be registered for cleanup)
        """
        if not clip_paths:
            raise ConcatenationError("No clips to concatenate.")

        try:
            manifest_path.write_text("\n".join(escape_concat_path(p.resolve()) for p in clip_paths), encoding="utf-8")
        except OSError as e:
            raise ConcatenationError(f"Could not write concat manifest: {e}") from e

        cmd = [
            self.ffmpeg_exe,
            "-hide_banner",
            "-loglevel", "error",
            "-y",
            "-f", "concat",
            "-safe", "0",
            "-i", str(manifest_path),
            "-c", "copy",
            str(output_path),
        ]
        self.logger.debug(f"Running: {' '.join(cmd)}")

        try:
            subprocess.run(cmd, check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except subprocess.CalledProcessError as e:
            tail = e.stderr.decode(errors="ignore")[-2000:] if e.stderr else ""
            raise ConcatenationError(f"ffmpeg concat failed: {tail.strip() or e}") from e
        except OSError as e:
            raise ConcatenationError(f"Could not run ffmpeg: {e}") from e

        return output_path
