"""FastAPI routes for podcast generation."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile

from podcast_video.core.config import Settings, get_settings
from podcast_video.core.errors import PodcastError, ValidationError
from podcast_video.core.logging_config import get_logger
from podcast_video.models.schemas import (
    ErrorResponse,
    GeneratePodcastResponse,
    PodcastRequest,
    Speaker,
    VideoOption,
    VideoSourceSelection,
)
from podcast_video.pipelines.podcast_pipeline import PodcastPipeline, new_run_id
from podcast_video.services.resource_janitor import ArtifactRegistry
from podcast_video.services.topic_composer import coerce_podcast_length
from podcast_video.utils.io_utils import copy_stream_capped, unique_file_path

router = APIRouter(tags=["podcast"])


@lru_cache
def get_pipeline() -> PodcastPipeline:
    """Process-wide pipeline (shared janitor, stateless services)."""
    settings = get_settings()
    return PodcastPipeline(settings, get_logger("podcast_video.pipeline"))


def is_voice_in_family(voice_name: Optional[str], family: str) -> bool:
    return isinstance(voice_name, str) and family.lower() in voice_name.lower()


def validate_request_fields(
    settings: Settings,
    api_key: Optional[str],
    man_voice: Optional[str],
    woman_voice: Optional[str],
) -> None:
    """Reject requests that cannot start a run; no external call is made before this."""
    if not api_key or not api_key.strip():
        raise ValidationError("Google Cloud API key is required.")
    family = settings.required_voice_family
    if not is_voice_in_family(man_voice, family) or not is_voice_in_family(woman_voice, family):
        raise ValidationError(f"Both voices must be selected from the {family.capitalize()} family.")


def save_upload(upload: Optional[UploadFile], settings: Settings, registry: ArtifactRegistry) -> Optional[Path]:
    """Persist one multipart file under a unique name and register it with the run."""
    if upload is None or not upload.filename:
        return None
    target = registry.register(unique_file_path(Path(settings.upload_dir), upload.filename))
    copy_stream_capped(upload.file, target, settings.max_upload_bytes)
    return target


@router.post(
    "/generate-podcast",
    response_model=GeneratePodcastResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def generate_podcast(
    background_tasks: BackgroundTasks,
    api_key: Optional[str] = Form(None, alias="apiKey"),
    topic_text: Optional[str] = Form(None, alias="topicText"),
    youtube_url: Optional[str] = Form(None, alias="youtubeUrl"),
    podcast_length: Optional[str] = Form("5", alias="podcastLength"),
    language_code: Optional[str] = Form(None, alias="languageCode"),
    man_voice: Optional[str] = Form(None, alias="manVoice"),
    woman_voice: Optional[str] = Form(None, alias="womanVoice"),
    man_video_option: Optional[str] = Form("default", alias="manVideoOption"),
    woman_video_option: Optional[str] = Form("default", alias="womanVideoOption"),
    man_library_video: Optional[str] = Form(None, alias="manLibraryVideo"),
    woman_library_video: Optional[str] = Form(None, alias="womanLibraryVideo"),
    topic_file: Optional[UploadFile] = File(None, alias="topicFile"),
    man_video_file: Optional[UploadFile] = File(None, alias="manVideoFile"),
    woman_video_file: Optional[UploadFile] = File(None, alias="womanVideoFile"),
    settings: Settings = Depends(get_settings),
    pipeline: PodcastPipeline = Depends(get_pipeline),
) -> GeneratePodcastResponse:
    """
    Generate a two-speaker podcast video.

    Pipeline:
    Source Resolver → Topic Composer → Script Generator → Line Renderer (per line) → concat
    """
    validate_request_fields(settings, api_key, man_voice, woman_voice)

    run_id = new_run_id()
    logger = get_logger(__name__, run_id=run_id)
    registry = ArtifactRegistry(run_id)

    try:
        topic_path = save_upload(topic_file, settings, registry)
        man_upload = save_upload(man_video_file, settings, registry)
        woman_upload = save_upload(woman_video_file, settings, registry)
    except PodcastError:
        pipeline.janitor.release_all(registry.drain())
        raise
    except OSError as e:
        pipeline.janitor.release_all(registry.drain())
        raise ValidationError(f"Could not save uploaded file: {e}") from e

    podcast_request = PodcastRequest(
        api_key=api_key.strip(),
        topic_text=topic_text or None,
        youtube_url=youtube_url or None,
        topic_file_path=topic_path,
        podcast_length_minutes=coerce_podcast_length(podcast_length, settings.default_podcast_length_minutes),
        language_code=(language_code or "").strip() or settings.default_language_code,
        voices={Speaker.MAN: man_voice, Speaker.WOMAN: woman_voice},
        selections={
            Speaker.MAN: VideoSourceSelection(
                speaker=Speaker.MAN,
                option=VideoOption.parse(man_video_option),
                library_key=man_library_video or None,
                upload_path=man_upload,
            ),
            Speaker.WOMAN: VideoSourceSelection(
                speaker=Speaker.WOMAN,
                option=VideoOption.parse(woman_video_option),
                library_key=woman_library_video or None,
                upload_path=woman_upload,
            ),
        },
    )
    logger.info(
        f"Podcast request: length={podcast_request.podcast_length_minutes:g}min "
        f"language={podcast_request.language_code} man={man_voice} woman={woman_voice}"
    )

    run = pipeline.run(podcast_request, registry)

    # Runs after the response is sent
    background_tasks.add_task(pipeline.finalize, run, registry)
    return GeneratePodcastResponse(download_url=pipeline.download_url(run))


@router.get("/video-library")
def video_library(settings: Settings = Depends(get_settings)) -> dict[str, list[str]]:
    """List the library background keys available per speaker."""
    return {speaker.key: sorted(settings.video_library.get(speaker.key, {})) for speaker in Speaker}
