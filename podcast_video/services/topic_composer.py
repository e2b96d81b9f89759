"""Topic Composer - assembles the prompt material for the script generator."""

import base64
import math
import mimetypes
from pathlib import Path
from typing import Any, Optional, Union

from podcast_video.core.config import Settings
from podcast_video.core.errors import ResourceError
from podcast_video.models.schemas import PromptSegment, SegmentKind
from podcast_video.services.transcript_client import TranscriptClient

DEFAULT_MIME_TYPE = "application/octet-stream"

INSTRUCTION_TEMPLATE = (
    'You are a podcast creator. Generate an engaging, interesting, and detailed conversation script between a "Man" '
    'and a "Woman" about the provided topic. The conversation should be unique and last for approximately {minutes} '
    "minutes. Format the output as a JSON array like "
    '[{{ "speaker": "Man", "line": "..." }}, {{ "speaker": "Woman", "line": "..." }}].'
)


def coerce_podcast_length(raw: Union[str, float, int, None], default: float = 5.0) -> float:
    """
    Parse a requested podcast length in minutes.

    Non-numeric, non-finite and non-positive values fall back to the default.
    """
    try:
        value = float(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value) or value <= 0:
        return default
    return value


def guess_mime_type(file_path: Union[str, Path]) -> str:
    """Best-effort content type from the file name."""
    mime_type, _ = mimetypes.guess_type(str(file_path))
    return mime_type or DEFAULT_MIME_TYPE


class TopicComposer:
    """Builds ordered prompt segments from text, a video link and a reference file."""

    def __init__(self, settings: Settings, logger: Any, transcript_client: Optional[TranscriptClient] = None):
        """
        Initialize the topic composer.

        Args:
            settings: Application settings
            logger: Logger instance
            transcript_client: Transcript helper for video links
        """
        self.settings = settings
        self.logger = logger
        self.transcript_client = transcript_client or TranscriptClient(logger)

    def compose(
        self,
        topic_text: Optional[str],
        youtube_url: Optional[str],
        topic_file_path: Optional[Path],
        length_minutes: float,
    ) -> list[PromptSegment]:
        """
        Compose prompt segments.

        The first segment is always the instruction. If no material is
        supplied, a note asking for an original topic is appended so the
        generator always gets at least two segments.

        Args:
            topic_text: Free-text topic
            youtube_url: Video link whose transcript should be used
            topic_file_path: Uploaded reference file
            length_minutes: Target podcast length

        Returns:
            Ordered prompt segments
        """
        segments = [
            PromptSegment(kind=SegmentKind.INSTRUCTION, text=INSTRUCTION_TEMPLATE.format(minutes=f"{length_minutes:g}"))
        ]

        if topic_text and topic_text.strip():
            segments.append(
                PromptSegment(kind=SegmentKind.TEXT, text=f"Plain text topic provided by the user: {topic_text.strip()}")
            )

        if youtube_url and youtube_url.strip():
            segments.append(self._transcript_segment(youtube_url.strip()))

        if topic_file_path:
            segments.append(self._file_segment(Path(topic_file_path)))

        if len(segments) == 1:
            segments.append(
                PromptSegment(
                    kind=SegmentKind.NOTE,
                    text="No additional context was provided. Create an original conversation based on your own knowledge.",
                )
            )

        self.logger.info(f"Composed {len(segments)} prompt segments ({', '.join(s.kind.value for s in segments)})")
        return segments

    def _transcript_segment(self, youtube_url: str) -> PromptSegment:
        transcript = self.transcript_client.extract_transcript(youtube_url)
        if transcript:
            return PromptSegment(
                kind=SegmentKind.TRANSCRIPT,
                text=f"YouTube transcript extracted from {youtube_url}: {transcript}",
            )
        self.logger.warning(f"No transcript available for {youtube_url}, continuing without it")
        return PromptSegment(
            kind=SegmentKind.NOTE,
            text=(
                f"A YouTube URL was provided ({youtube_url}) but no transcript could be extracted. "
                "Base the conversation on the rest of the supplied materials."
            ),
        )

    def _file_segment(self, file_path: Path) -> PromptSegment:
        mime_type = guess_mime_type(file_path)
        try:
            data = base64.b64encode(file_path.read_bytes()).decode("ascii")
        except OSError as e:
            raise ResourceError(f"Could not read uploaded topic file {file_path.name}: {e}") from e
        self.logger.debug(f"Embedding topic file {file_path.name} as {mime_type}")
        return PromptSegment(kind=SegmentKind.INLINE_FILE, mime_type=mime_type, data=data)
