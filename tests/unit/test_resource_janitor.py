"""Tests for the Resource Janitor and artifact registry."""

import os
import threading
from unittest.mock import MagicMock, patch

import pytest

from podcast_video.services.resource_janitor import ArtifactRegistry, ResourceJanitor


@pytest.fixture
def janitor(settings, logger):
    """Create ResourceJanitor instance for testing."""
    janitor = ResourceJanitor(settings, logger)
    yield janitor
    janitor.shutdown()


def test_registry_deduplicates_and_drains_once(tmp_path):
    registry = ArtifactRegistry("run_1")
    a = registry.register(tmp_path / "a.mp3")
    registry.register(tmp_path / "a.mp3")
    registry.register(str(tmp_path / "b.mp4"))

    assert len(registry) == 2
    assert a in registry
    assert registry.drain() == [tmp_path / "a.mp3", tmp_path / "b.mp4"]
    assert registry.drain() == []


def test_release_all_removes_files(janitor, tmp_path):
    files = [tmp_path / "one.mp3", tmp_path / "two.mp4"]
    for f in files:
        f.write_bytes(b"x")

    removed = janitor.release_all(files)

    assert removed == 2
    assert not any(f.exists() for f in files)


def test_release_all_twice_is_a_noop(janitor, tmp_path):
    """Missing files are not an error, so cleanup is idempotent."""
    f = tmp_path / "clip.mp4"
    f.write_bytes(b"x")

    assert janitor.release_all([f]) == 1
    assert janitor.release_all([f]) == 0
    assert janitor.release_all([None, tmp_path / "never-created.txt"]) == 0


def test_release_all_continues_after_other_errors(settings, tmp_path):
    """A failure on one path is logged and does not block the others."""
    logger = MagicMock()
    janitor = ResourceJanitor(settings, logger)
    keep = tmp_path / "locked.mp4"
    gone = tmp_path / "gone.mp4"
    keep.write_bytes(b"x")
    gone.write_bytes(b"x")

    real_unlink = os.unlink

    def fake_unlink(path):
        if str(path) == str(keep):
            raise PermissionError("denied")
        real_unlink(path)

    with patch("podcast_video.services.resource_janitor.os.unlink", side_effect=fake_unlink):
        removed = janitor.release_all([keep, gone])

    assert removed == 1
    assert keep.exists()
    assert not gone.exists()
    logger.warning.assert_called_once()


def test_schedule_release_fires_exactly_once(janitor, tmp_path):
    final = tmp_path / "podcast.mp4"
    final.write_bytes(b"x")
    fired = threading.Event()
    original_release = janitor.release_all
    calls = []

    def tracking_release(paths):
        paths = list(paths)
        calls.append(paths)
        result = original_release(paths)
        fired.set()
        return result

    janitor.release_all = tracking_release

    assert janitor.schedule_release("run_1", [final], delay_seconds=0.01)
    assert fired.wait(timeout=5)

    assert not final.exists()
    assert calls == [[final]]
    assert janitor.pending_runs() == []


def test_schedule_release_refuses_duplicate_run(janitor, tmp_path):
    final = tmp_path / "podcast.mp4"

    assert janitor.schedule_release("run_1", [final], delay_seconds=60)
    assert not janitor.schedule_release("run_1", [final], delay_seconds=60)
    assert janitor.pending_runs() == ["run_1"]


def test_shutdown_flushes_pending_releases(janitor, tmp_path):
    final = tmp_path / "podcast.mp4"
    final.write_bytes(b"x")
    janitor.schedule_release("run_1", [final], delay_seconds=60)

    janitor.shutdown()

    assert not final.exists()
    assert janitor.pending_runs() == []
