"""Source Resolver - turns a speaker's background selection into a local video file."""

import uuid
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Optional

import requests

from podcast_video.core.config import Settings
from podcast_video.core.errors import MissingUploadError, SourceFetchError
from podcast_video.models.schemas import Speaker, VideoOption, VideoSourceSelection
from podcast_video.services.resource_janitor import ArtifactRegistry


class SourceResolver:
    """Resolves default, library and custom background videos."""

    def __init__(self, settings: Settings, logger: Any, session: Optional[requests.Session] = None):
        """
        Initialize the source resolver.

        Args:
            settings: Application settings (default URLs and library catalog)
            logger: Logger instance
            session: Optional requests session (injected in tests)
        """
        self.settings = settings
        self.logger = logger
        self.session = session or requests.Session()
        self.work_dir = Path(settings.work_dir)

    def source_url(self, selection: VideoSourceSelection) -> str:
        """
        Pick the remote URL for a default or library selection.

        Unknown library keys fall back to the speaker's default video.
        """
        speaker = selection.speaker
        if selection.option == VideoOption.LIBRARY and selection.library_key:
            url = self.settings.video_library.get(speaker.key, {}).get(selection.library_key)
            if url:
                return url
            self.logger.warning(
                f"Library video '{selection.library_key}' not found for {speaker.key}, using default"
            )
        if speaker == Speaker.WOMAN:
            return self.settings.default_woman_video_url
        return self.settings.default_man_video_url

    def resolve(self, selection: VideoSourceSelection, registry: ArtifactRegistry) -> Path:
        """
        Resolve a selection to a local file path.

        Custom uploads are returned as-is and not registered here; downloads are
        registered with the run before the first byte is written.

        Raises:
            MissingUploadError: custom selected without an uploaded file
            SourceFetchError: the download failed
        """
        if selection.option == VideoOption.CUSTOM:
            if not selection.upload_path:
                raise MissingUploadError(
                    f"A custom video was selected for the {selection.speaker.key} but no file was uploaded."
                )
            self.logger.info(f"Using uploaded video for {selection.speaker.key}: {selection.upload_path}")
            return Path(selection.upload_path)

        url = self.source_url(selection)
        target_path = registry.register(self.work_dir / f"{selection.speaker.key}_{uuid.uuid4()}.mp4")
        self.download_file(url, target_path)
        return target_path

    def resolve_all(
        self,
        selections: dict[Speaker, VideoSourceSelection],
        registry: ArtifactRegistry,
    ) -> dict[Speaker, Path]:
        """Resolve both speakers concurrently; the first failure propagates."""
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="resolve") as executor:
            futures = {
                speaker: executor.submit(self.resolve, selection, registry)
                for speaker, selection in selections.items()
            }
            return {speaker: future.result() for speaker, future in futures.items()}

    def download_file(self, url: str, target_path: Path) -> Path:
        """Stream a remote file to disk chunk by chunk."""
        self.logger.info(f"Downloading background video {url} -> {target_path.name}")
        wrote_any = False
        try:
            with self.session.get(url, stream=True, timeout=self.settings.download_timeout_seconds) as response:
                response.raise_for_status()
                with open(target_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.settings.download_chunk_bytes):
                        if not chunk:
                            continue
                        f.write(chunk)
                        wrote_any = True
        except requests.exceptions.RequestException as e:
            raise SourceFetchError(f"Failed to download background video from {url}: {e}") from e
        except OSError as e:
            raise SourceFetchError(f"Failed to write background video to {target_path}: {e}") from e

        if not wrote_any:
            raise SourceFetchError(f"Background video download from {url} was empty")
        return target_path
