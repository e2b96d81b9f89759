"""Pydantic models and schemas for the podcast generation pipeline."""

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================


class Speaker(str, Enum):
    """The fixed two-party cast of every podcast."""

    MAN = "Man"
    WOMAN = "Woman"

    @property
    def key(self) -> str:
        """Lowercase key used for form fields, file names and the library catalog."""
        return self.value.lower()

    @classmethod
    def from_label(cls, label: str) -> "Speaker":
        """
        Attribute a generator speaker label to one of the two speakers.

        Labels containing "woman" (any case) belong to the woman; everything
        else, including "Man", "Host" or typos, belongs to the man.
        """
        if "woman" in label.lower():
            return cls.WOMAN
        return cls.MAN


class VideoOption(str, Enum):
    """How a speaker's background video is chosen."""

    DEFAULT = "default"
    LIBRARY = "library"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Optional[str]) -> "VideoOption":
        """Parse a form value; anything unrecognised behaves like default."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.DEFAULT


class SegmentKind(str, Enum):
    """Kind of prompt segment sent to the script generator."""

    INSTRUCTION = "instruction"
    TEXT = "text"
    TRANSCRIPT = "transcript"
    NOTE = "note"
    INLINE_FILE = "inline_file"


class RunState(str, Enum):
    """Lifecycle state of a pipeline run."""

    IDLE = "idle"
    RESOLVING_SOURCES = "resolving_sources"
    COMPOSING = "composing"
    GENERATING_SCRIPT = "generating_script"
    RENDERING = "rendering"
    CONCATENATING = "concatenating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# ============================================================================
# Dialogue Models
# ============================================================================


class DialogueLine(BaseModel):
    """A single line of the podcast script."""

    model_config = ConfigDict(frozen=True)

    speaker: Speaker = Field(..., description="Speaker the line is attributed to")
    label: str = Field(..., description="Speaker label exactly as the generator wrote it")
    text: str = Field(..., description="Line to be spoken")

    @classmethod
    def from_raw(cls, entry: Any) -> Optional["DialogueLine"]:
        """
        Build a line from one raw generator entry.

        Returns None for entries that are not objects or lack a non-blank
        speaker or line.
        """
        if not isinstance(entry, dict):
            return None
        label = entry.get("speaker")
        text = entry.get("line")
        if not isinstance(label, str) or not isinstance(text, str):
            return None
        if not label.strip() or not text.strip():
            return None
        return cls(speaker=Speaker.from_label(label), label=label.strip(), text=text.strip())


class Dialogue(BaseModel):
    """Ordered podcast script; never empty once validated."""

    model_config = ConfigDict(frozen=True)

    lines: list[DialogueLine] = Field(..., min_length=1, description="Lines in speaking order")

    @classmethod
    def filter_raw(cls, entries: list[Any]) -> list[DialogueLine]:
        """Drop malformed entries, keeping the order of the rest."""
        lines = []
        for entry in entries:
            line = DialogueLine.from_raw(entry)
            if line is not None:
                lines.append(line)
        return lines

    def __len__(self) -> int:
        return len(self.lines)


# ============================================================================
# Prompt Models
# ============================================================================


class PromptSegment(BaseModel):
    """One ordered piece of prompt material for the script generator."""

    kind: SegmentKind = Field(..., description="Segment kind")
    text: Optional[str] = Field(default=None, description="Text content for textual segments")
    mime_type: Optional[str] = Field(default=None, description="Content type for inline files")
    data: Optional[str] = Field(default=None, description="Base64 payload for inline files")

    def to_part(self) -> dict[str, Any]:
        """Render the segment as a Gemini content part."""
        if self.kind == SegmentKind.INLINE_FILE:
            return {"inline_data": {"mime_type": self.mime_type, "data": self.data}}
        return {"text": self.text}


# ============================================================================
# Source / Request Models
# ============================================================================


class VideoSourceSelection(BaseModel):
    """Background video choice for one speaker."""

    speaker: Speaker = Field(..., description="Speaker this selection belongs to")
    option: VideoOption = Field(default=VideoOption.DEFAULT, description="Selection mode")
    library_key: Optional[str] = Field(default=None, description="Catalog key when option is library")
    upload_path: Optional[Path] = Field(default=None, description="Saved upload when option is custom")


class PodcastRequest(BaseModel):
    """Validated inputs of one generation request."""

    api_key: str = Field(..., description="Caller-supplied Google API key, passed through")
    topic_text: Optional[str] = Field(default=None, description="Free-text topic")
    youtube_url: Optional[str] = Field(default=None, description="Video link to pull a transcript from")
    topic_file_path: Optional[Path] = Field(default=None, description="Saved reference file")
    podcast_length_minutes: float = Field(default=5.0, gt=0, description="Target length in minutes")
    language_code: str = Field(default="en-US", description="TTS language code")
    voices: dict[Speaker, str] = Field(..., description="Voice name per speaker")
    selections: dict[Speaker, VideoSourceSelection] = Field(..., description="Background choice per speaker")


# ============================================================================
# Run Models
# ============================================================================


class RenderedClip(BaseModel):
    """A rendered clip for one dialogue line."""

    index: int = Field(..., description="1-based position of the line in the dialogue")
    speaker: Speaker = Field(..., description="Speaker whose voice and background were used")
    path: Path = Field(..., description="Clip file")
    source_audio_path: Path = Field(..., description="Synthesized audio the clip was built from")
    duration_seconds: float = Field(..., gt=0, description="Probed audio duration the clip is capped to")


class PipelineRun(BaseModel):
    """One end-to-end invocation of the pipeline."""

    run_id: str = Field(..., description="Unique run identifier")
    state: RunState = Field(default=RunState.IDLE, description="Current lifecycle state")
    source_paths: dict[Speaker, Path] = Field(default_factory=dict, description="Resolved background per speaker")
    clips: list[RenderedClip] = Field(default_factory=list, description="Clips in dialogue order")
    final_path: Optional[Path] = Field(default=None, description="Concatenated podcast")

    @property
    def final_file_name(self) -> Optional[str]:
        return self.final_path.name if self.final_path else None


# ============================================================================
# API Models
# ============================================================================


class GeneratePodcastResponse(BaseModel):
    """Successful generation response."""

    model_config = ConfigDict(populate_by_name=True)

    download_url: str = Field(..., alias="downloadUrl", description="Relative URL of the rendered podcast")


class ErrorResponse(BaseModel):
    """Error body for 400/500 responses."""

    error: str = Field(..., description="Human-readable error message")
