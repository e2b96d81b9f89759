"""Exception hierarchy for the podcast pipeline.

Every error carries the HTTP status the API surfaces it with. Validation errors
are raised before a run creates anything; all other errors abort the run and
trigger immediate cleanup of its artifacts.
"""


class PodcastError(Exception):
    """Base class for all pipeline errors."""

    status_code = 500


# ============================================================================
# Validation (HTTP 400)
# ============================================================================


class ValidationError(PodcastError):
    """Bad or missing request input."""

    status_code = 400


class MissingUploadError(ValidationError):
    """A custom background video was selected but no file was uploaded."""


class UploadTooLargeError(ValidationError):
    """An uploaded file exceeded the configured size cap."""


# ============================================================================
# Upstream backends (HTTP 500)
# ============================================================================


class UpstreamError(PodcastError):
    """Script generator or speech backend failure."""


class ScriptGenerationError(UpstreamError):
    """The text-generation call itself failed."""


class EmptyResponseError(UpstreamError):
    """The generator returned no candidate text."""


class MalformedResponseError(UpstreamError):
    """The generator text is not valid JSON."""


class NotAListError(UpstreamError):
    """The generator JSON parsed but is not an ordered list of lines."""


class EmptyDialogueError(UpstreamError):
    """No usable lines remained after filtering malformed entries."""


class SynthesisError(UpstreamError):
    """Speech synthesis failed or returned no audio."""


# ============================================================================
# Media transforms (HTTP 500)
# ============================================================================


class MediaTransformError(PodcastError):
    """Probe, loop or concat failure in the media engine."""


class DurationProbeError(MediaTransformError):
    """Audio duration missing or not a positive finite number."""


class ClipAssemblyError(MediaTransformError):
    """Looping the background under the audio failed."""


class ConcatenationError(MediaTransformError):
    """Joining the per-line clips failed."""


# ============================================================================
# Resources (HTTP 500)
# ============================================================================


class ResourceError(PodcastError):
    """Download or filesystem failure."""


class SourceFetchError(ResourceError):
    """A background video could not be fetched to disk."""


class PipelineError(PodcastError):
    """Unexpected failure during a run."""
