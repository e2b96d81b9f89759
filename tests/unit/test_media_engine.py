"""Tests for the Media Engine."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from podcast_video.core.errors import ClipAssemblyError, ConcatenationError, DurationProbeError
from podcast_video.services.media_engine import MediaEngine, escape_concat_path


@pytest.fixture
def media_engine(settings, logger):
    """Create MediaEngine instance with a fake ffmpeg path."""
    return MediaEngine(settings, logger, ffmpeg_exe="/usr/bin/ffmpeg")


def test_escape_concat_path_quotes_single_quotes():
    assert escape_concat_path(Path("/tmp/it's.mp4")) == "file '/tmp/it'\\''s.mp4'"


@patch("podcast_video.services.media_engine.AudioFileClip")
def test_probe_duration_returns_clip_duration(mock_audio_clip, media_engine, tmp_path):
    mock_audio_clip.return_value.duration = 3.25

    assert media_engine.probe_duration(tmp_path / "a.mp3") == 3.25
    mock_audio_clip.return_value.close.assert_called_once()


@pytest.mark.parametrize("duration", [None, 0, -1.0, float("nan"), float("inf")])
@patch("podcast_video.services.media_engine.AudioFileClip")
def test_probe_duration_rejects_unusable_values(mock_audio_clip, duration, media_engine, tmp_path):
    mock_audio_clip.return_value.duration = duration

    with pytest.raises(DurationProbeError):
        media_engine.probe_duration(tmp_path / "a.mp3")


@patch("podcast_video.services.media_engine.AudioFileClip", side_effect=OSError("cannot read"))
def test_probe_duration_unreadable_file(mock_audio_clip, media_engine, tmp_path):
    with pytest.raises(DurationProbeError):
        media_engine.probe_duration(tmp_path / "a.mp3")


@patch("podcast_video.services.media_engine.vfx")
@patch("podcast_video.services.media_engine.AudioFileClip")
@patch("podcast_video.services.media_engine.VideoFileClip")
def test_loop_video_with_audio_caps_duration_and_uses_uniform_encoding(
    mock_video_clip, mock_audio_clip, mock_vfx, media_engine, settings, tmp_path
):
    video = mock_video_clip.return_value
    looped = video.with_effects.return_value
    with_audio = looped.with_audio.return_value
    final = with_audio.with_duration.return_value
    output = tmp_path / "clip.mp4"

    result = media_engine.loop_video_with_audio(tmp_path / "bg.mp4", tmp_path / "a.mp3", 4.5, output, tmp_path / "t.m4a")

    assert result == output
    mock_vfx.Loop.assert_called_once_with(duration=4.5)
    looped.with_audio.assert_called_once_with(mock_audio_clip.return_value)
    with_audio.with_duration.assert_called_once_with(4.5)
    kwargs = final.write_videofile.call_args.kwargs
    assert kwargs["codec"] == settings.video_codec
    assert kwargs["audio_codec"] == settings.audio_codec
    assert kwargs["fps"] == settings.clip_fps
    assert kwargs["ffmpeg_params"] == ["-pix_fmt", settings.pixel_format]
    assert kwargs["temp_audiofile"] == str(tmp_path / "t.m4a")
    final.close.assert_called_once()
    video.close.assert_called_once()


@patch("podcast_video.services.media_engine.AudioFileClip")
@patch("podcast_video.services.media_engine.VideoFileClip", side_effect=OSError("moov atom not found"))
def test_loop_video_with_audio_wraps_failures(mock_video_clip, mock_audio_clip, media_engine, tmp_path):
    with pytest.raises(ClipAssemblyError, match="moov atom"):
        media_engine.loop_video_with_audio(tmp_path / "bg.mp4", tmp_path / "a.mp3", 1.0, tmp_path / "clip.mp4")


@patch("podcast_video.services.media_engine.subprocess.run")
def test_concatenate_writes_manifest_in_order_and_stream_copies(mock_run, media_engine, tmp_path):
    clips = [tmp_path / "c1.mp4", tmp_path / "c2.mp4", tmp_path / "c3.mp4"]
    manifest = tmp_path / "concat.txt"
    output = tmp_path / "podcast.mp4"

    media_engine.concatenate(clips, output, manifest)

    assert manifest.read_text(encoding="utf-8").splitlines() == [f"file '{c.resolve()}'" for c in clips]
    cmd = mock_run.call_args.args[0]
    assert cmd[0] == "/usr/bin/ffmpeg"
    assert cmd[cmd.index("-f") + 1] == "concat"
    assert cmd[cmd.index("-i") + 1] == str(manifest)
    assert cmd[cmd.index("-c") + 1] == "copy"
    assert cmd[-1] == str(output)


@patch("podcast_video.services.media_engine.subprocess.run")
def test_concatenate_failure_raises(mock_run, media_engine, tmp_path):
    mock_run.side_effect = subprocess.CalledProcessError(1, ["ffmpeg"], stderr=b"Invalid data found")

    with pytest.raises(ConcatenationError, match="Invalid data found"):
        media_engine.concatenate([tmp_path / "c1.mp4"], tmp_path / "out.mp4", tmp_path / "concat.txt")


def test_concatenate_requires_clips(media_engine, tmp_path):
    with pytest.raises(ConcatenationError):
        media_engine.concatenate([], tmp_path / "out.mp4", tmp_path / "concat.txt")
