"""Line Renderer - turns one dialogue line into a voiced, looped video clip."""

import uuid
from pathlib import Path
from typing import Any

from podcast_video.core.config import Settings
from podcast_video.models.schemas import DialogueLine, RenderedClip, Speaker
from podcast_video.services.media_engine import MediaEngine
from podcast_video.services.resource_janitor import ArtifactRegistry
from podcast_video.services.tts_client import TTSClient
from podcast_video.utils.io_utils import sanitize_file_name


class LineRenderer:
    """Synthesizes, probes and assembles a single line."""

    def __init__(self, settings: Settings, logger: Any, tts_client: TTSClient, media_engine: MediaEngine):
        """
        Initialize the line renderer.

        Args:
            settings: Application settings
            logger: Logger instance
            tts_client: Speech backend client
            media_engine: Probe / assemble primitives
        """
        self.settings = settings
        self.logger = logger
        self.tts_client = tts_client
        self.media_engine = media_engine
        self.work_dir = Path(settings.work_dir)

    def render(
        self,
        index: int,
        line: DialogueLine,
        voices: dict[Speaker, str],
        backgrounds: dict[Speaker, Path],
        language_code: str,
        api_key: str,
        registry: ArtifactRegistry,
    ) -> RenderedClip:
        """
        Render one line.

        Each step depends on the previous one succeeding: synthesize, probe
        duration, then loop the speaker's background under the audio.

        Args:
            index: 1-based position of the line
            line: Dialogue line to render
            voices: Voice name per speaker
            backgrounds: Resolved background video per speaker
            language_code: TTS language code
            api_key: Caller-supplied Google API key
            registry: Run artifact registry

        Returns:
            The rendered clip
        """
        token = uuid.uuid4()
        audio_path = registry.register(self.work_dir / f"{token}_{sanitize_file_name(f'line_{index}.mp3')}")
        clip_path = registry.register(self.work_dir / f"{token}_clip_{index}.mp4")
        temp_audio_path = registry.register(self.work_dir / f"{token}_clip_{index}_audio.m4a")

        voice = voices[line.speaker]
        background = backgrounds[line.speaker]
        self.logger.info(f"Line {index}: {line.speaker.value} ({line.label}) with voice {voice}")

        self.tts_client.generate_speech(
            text=line.text,
            output_path=audio_path,
            voice_name=voice,
            language_code=language_code,
            api_key=api_key,
        )
        duration = self.media_engine.probe_duration(audio_path)
        self.logger.debug(f"Line {index}: audio duration {duration:.3f}s")

        self.media_engine.loop_video_with_audio(
            video_path=background,
            audio_path=audio_path,
            duration=duration,
            output_path=clip_path,
            temp_audio_path=temp_audio_path,
        )

        return RenderedClip(
            index=index,
            speaker=line.speaker,
            path=clip_path,
            source_audio_path=audio_path,
            duration_seconds=duration,
        )
