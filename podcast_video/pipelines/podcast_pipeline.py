"""Podcast pipeline orchestrator - sources → topic → script → clips → podcast."""

import uuid
from pathlib import Path
from typing import Any, Optional

from podcast_video.core.config import Settings
from podcast_video.core.errors import PipelineError, PodcastError
from podcast_video.models.schemas import PipelineRun, PodcastRequest, RunState
from podcast_video.services.line_renderer import LineRenderer
from podcast_video.services.media_engine import MediaEngine
from podcast_video.services.resource_janitor import ArtifactRegistry, ResourceJanitor
from podcast_video.services.script_generator import ScriptGenerator
from podcast_video.services.source_resolver import SourceResolver
from podcast_video.services.topic_composer import TopicComposer
from podcast_video.services.transcript_client import TranscriptClient
from podcast_video.services.tts_client import TTSClient
from podcast_video.utils.error_handler import format_error_message, get_fallback_suggestion

STAGE_SERVICES = {
    RunState.RESOLVING_SOURCES: "Background Video",
    RunState.GENERATING_SCRIPT: "Script Generation",
    RunState.RENDERING: "Media",
    RunState.CONCATENATING: "Media",
}


def new_run_id() -> str:
    return uuid.uuid4().hex


class PodcastPipeline:
    """Drives one request from inputs to a downloadable podcast video."""

    def __init__(
        self,
        settings: Settings,
        logger: Any,
        janitor: Optional[ResourceJanitor] = None,
        source_resolver: Optional[SourceResolver] = None,
        topic_composer: Optional[TopicComposer] = None,
        script_generator: Optional[ScriptGenerator] = None,
        line_renderer: Optional[LineRenderer] = None,
        media_engine: Optional[MediaEngine] = None,
    ):
        """
        Initialize the pipeline.

        Collaborators default to the real implementations; tests inject mocks.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.janitor = janitor or ResourceJanitor(settings, logger)
        self.media_engine = media_engine or MediaEngine(settings, logger)
        self.source_resolver = source_resolver or SourceResolver(settings, logger)
        self.topic_composer = topic_composer or TopicComposer(settings, logger, TranscriptClient(logger))
        self.script_generator = script_generator or ScriptGenerator(settings, logger)
        self.line_renderer = line_renderer or LineRenderer(
            settings, logger, TTSClient(settings, logger), self.media_engine
        )
        self.work_dir = Path(settings.work_dir)
        self.output_dir = Path(settings.output_dir)

    def run(self, request: PodcastRequest, registry: ArtifactRegistry) -> PipelineRun:
        """
        Execute one run.

        On any failure every artifact registered so far (including saved
        uploads) is deleted before the error propagates; no partial result is
        ever returned.

        Args:
            request: Validated request inputs
            registry: Run-scoped artifact registry (already holds saved uploads)

        Returns:
            The succeeded run, with final_path set
        """
        run = PipelineRun(run_id=registry.run_id)
        log = self.logger.bind(run_id=run.run_id)
        log.info("=" * 60)
        log.info(f"Starting podcast run {run.run_id}")
        log.info("=" * 60)

        try:
            self._transition(run, RunState.RESOLVING_SOURCES, log)
            run.source_paths = self.source_resolver.resolve_all(request.selections, registry)

            self._transition(run, RunState.COMPOSING, log)
            segments = self.topic_composer.compose(
                topic_text=request.topic_text,
                youtube_url=request.youtube_url,
                topic_file_path=request.topic_file_path,
                length_minutes=request.podcast_length_minutes,
            )

            self._transition(run, RunState.GENERATING_SCRIPT, log)
            dialogue = self.script_generator.generate(segments, request.api_key)

            self._transition(run, RunState.RENDERING, log)
            # Strictly sequential: one line fully rendered before the next starts
            for index, line in enumerate(dialogue.lines, start=1):
                clip = self.line_renderer.render(
                    index=index,
                    line=line,
                    voices=request.voices,
                    backgrounds=run.source_paths,
                    language_code=request.language_code,
                    api_key=request.api_key,
                    registry=registry,
                )
                run.clips.append(clip)
                log.info(f"Rendered clip {index}/{len(dialogue)} ({clip.duration_seconds:.2f}s)")

            self._transition(run, RunState.CONCATENATING, log)
            run.final_path = self._concatenate(run, registry)

            self._transition(run, RunState.SUCCEEDED, log)
            log.info(f"Podcast ready: {run.final_path}")
            return run

        except PodcastError as e:
            self._fail(run, registry, e, log)
            raise
        except Exception as e:
            self._fail(run, registry, e, log)
            raise PipelineError(f"Failed to generate podcast: {e}") from e

    def _concatenate(self, run: PipelineRun, registry: ArtifactRegistry) -> Path:
        manifest_path = registry.register(self.work_dir / f"concat_{uuid.uuid4()}.txt")
        final_path = registry.register(self.output_dir / f"podcast_{uuid.uuid4()}.mp4")
        return self.media_engine.concatenate([clip.path for clip in run.clips], final_path, manifest_path)

    @staticmethod
    def _transition(run: PipelineRun, state: RunState, log: Any) -> None:
        log.info(f"{run.state.value} -> {state.value}")
        run.state = state

    def _fail(self, run: PipelineRun, registry: ArtifactRegistry, error: Exception, log: Any) -> None:
        failed_stage = run.state
        run.state = RunState.FAILED
        log.opt(exception=error).error(
            format_error_message(
                f"Podcast run during {failed_stage.value}",
                error,
                context={"run_id": run.run_id, "clips": len(run.clips)},
                suggestion=get_fallback_suggestion(STAGE_SERVICES.get(failed_stage, ""), error),
            )
        )
        removed = self.janitor.release_all(registry.drain())
        log.info(f"Cleaned up {removed} artifact(s) after failure")

    def finalize(self, run: PipelineRun, registry: ArtifactRegistry) -> None:
        """
        Post-response cleanup for a succeeded run.

        Intermediates are deleted now; the final podcast is deleted once the
        retention window elapses.
        """
        paths = registry.drain()
        intermediates = [p for p in paths if p != run.final_path]
        removed = self.janitor.release_all(intermediates)
        self.logger.bind(run_id=run.run_id).info(f"Released {removed} intermediate file(s)")
        if run.final_path is not None:
            self.janitor.schedule_release(run.run_id, [run.final_path])

    def download_url(self, run: PipelineRun) -> str:
        return f"{self.settings.download_url_prefix.rstrip('/')}/{run.final_file_name}"

    def shutdown(self) -> None:
        self.janitor.shutdown()
