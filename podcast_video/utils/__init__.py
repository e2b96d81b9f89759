"""Utility functions for the Podcast Video Generator."""

from podcast_video.utils.io_utils import copy_stream_capped, sanitize_file_name, unique_file_path

__all__ = [
    "copy_stream_capped",
    "sanitize_file_name",
    "unique_file_path",
]
