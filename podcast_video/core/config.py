"""Application configuration using pydantic-settings."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via environment variables or a .env file.
    See .env.example for a template.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================================================
    # Application Settings
    # ========================================================================
    app_name: str = Field(default="Podcast Video Generator", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_file: Optional[str] = Field(default=None, description="Optional rotating log file path")
    host: str = Field(default="0.0.0.0", description="Bind address for the HTTP server")
    port: int = Field(default=3000, description="Port for the HTTP server")

    # ========================================================================
    # Working Directories
    # ========================================================================
    temp_dir: str = Field(default="tmp", description="Root scratch directory")
    upload_dir: str = Field(default="tmp/uploads", description="Where multipart uploads are saved")
    work_dir: str = Field(default="tmp/work", description="Intermediate audio, clips and manifests")
    output_dir: str = Field(default="tmp/output", description="Final podcasts, served under /downloads")
    download_url_prefix: str = Field(default="/downloads", description="URL prefix for the output directory")

    # ========================================================================
    # Background Video Sources
    # ========================================================================
    default_man_video_url: str = Field(
        default="https://YOUR_DEFAULT_VIDEO_HOST/man-default.mp4",
        description="Background video used for the man when no library/custom video is selected",
    )
    default_woman_video_url: str = Field(
        default="https://YOUR_DEFAULT_VIDEO_HOST/woman-default.mp4",
        description="Background video used for the woman when no library/custom video is selected",
    )
    video_library: dict[str, dict[str, str]] = Field(
        default={
            "man": {
                "studio": "https://YOUR_DEFAULT_VIDEO_HOST/library/man-studio.mp4",
                "office": "https://YOUR_DEFAULT_VIDEO_HOST/library/man-office.mp4",
            },
            "woman": {
                "studio": "https://YOUR_DEFAULT_VIDEO_HOST/library/woman-studio.mp4",
                "office": "https://YOUR_DEFAULT_VIDEO_HOST/library/woman-office.mp4",
            },
        },
        description="Library catalog: speaker -> key -> video URL (JSON in VIDEO_LIBRARY env var)",
    )
    download_timeout_seconds: float = Field(default=180.0, description="Timeout per background video download")
    download_chunk_bytes: int = Field(default=1024 * 1024, description="Chunk size when streaming downloads to disk")

    # ========================================================================
    # Gemini (script generation)
    # ========================================================================
    gemini_api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini REST API",
    )
    gemini_model: str = Field(default="gemini-1.5-pro", description="Gemini model used for the dialogue script")
    gemini_json_mode: bool = Field(
        default=True,
        description="Ask Gemini for application/json output so the script parses without repair",
    )
    gemini_timeout_seconds: Optional[float] = Field(default=None, description="Timeout for the generateContent call")

    # ========================================================================
    # TTS (Text-to-Speech) Settings
    # ========================================================================
    tts_api_url: str = Field(
        default="https://texttospeech.googleapis.com/v1beta1/text:synthesize",
        description="Google Cloud Text-to-Speech synthesize endpoint",
    )
    tts_model: str = Field(default="chirp", description="Voice model requested from the TTS backend")
    tts_audio_encoding: str = Field(default="MP3", description="Audio encoding returned by the TTS backend")
    tts_timeout_seconds: Optional[float] = Field(default=None, description="Timeout for each synthesize call")
    required_voice_family: str = Field(
        default="chirp",
        description="Both voices must contain this token (case-insensitive)",
    )

    # ========================================================================
    # Clip Rendering
    # ========================================================================
    video_codec: str = Field(default="libx264", description="Video codec for every per-line clip")
    audio_codec: str = Field(default="aac", description="Audio codec for every per-line clip")
    pixel_format: str = Field(default="yuv420p", description="Pixel format for every per-line clip")
    clip_fps: int = Field(default=30, description="Frame rate for every per-line clip")

    # ========================================================================
    # Request Defaults
    # ========================================================================
    default_podcast_length_minutes: float = Field(default=5.0, description="Fallback podcast length in minutes")
    default_language_code: str = Field(default="en-US", description="Default TTS language code")
    max_upload_bytes: int = Field(default=25 * 1024 * 1024, description="Size cap for each uploaded file")

    # ========================================================================
    # Cleanup
    # ========================================================================
    cleanup_delay_seconds: float = Field(
        default=30.0,
        description="How long the final podcast stays downloadable before it is deleted",
    )

    @property
    def directories(self) -> list[Path]:
        """Scratch directories created at startup."""
        return [Path(self.upload_dir), Path(self.work_dir), Path(self.output_dir)]


def ensure_directories(settings: "Settings") -> None:
    """Create the upload, work and output directories if they are missing."""
    for directory in settings.directories:
        directory.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""
    return settings
