"""Shared pytest fixtures and configuration."""

import pytest

from podcast_video.core.config import Settings, ensure_directories
from podcast_video.core.logging_config import get_logger


@pytest.fixture
def settings(tmp_path):
    """Create test settings with scratch directories under tmp_path."""
    settings = Settings(
        temp_dir=str(tmp_path),
        upload_dir=str(tmp_path / "uploads"),
        work_dir=str(tmp_path / "work"),
        output_dir=str(tmp_path / "output"),
        cleanup_delay_seconds=0.05,
    )
    ensure_directories(settings)
    return settings


@pytest.fixture
def logger():
    """Create test logger instance."""
    return get_logger(__name__)
