"""Pipeline orchestrators for the Podcast Video Generator."""

from podcast_video.pipelines.podcast_pipeline import PodcastPipeline

__all__ = ["PodcastPipeline"]
