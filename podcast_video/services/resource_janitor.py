"""Resource Janitor - guarantees every temporary artifact of a run is deleted once."""

import os
import threading
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from podcast_video.core.config import Settings

PathLike = Union[str, Path]


class ArtifactRegistry:
    """Thread-safe, ordered set of files owned by one run."""

    def __init__(self, run_id: str):
        self.run_id = run_id
        self._paths: list[Path] = []
        self._lock = threading.Lock()

    def register(self, path: PathLike) -> Path:
        """Record a path for cleanup; call before the file is created."""
        path = Path(path)
        with self._lock:
            if path not in self._paths:
                self._paths.append(path)
        return path

    def paths(self) -> list[Path]:
        with self._lock:
            return list(self._paths)

    def drain(self) -> list[Path]:
        """Return all registered paths and forget them, so each is released once."""
        with self._lock:
            paths, self._paths = self._paths, []
        return paths

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return Path(path) in self._paths  # type: ignore[arg-type]

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)


class ResourceJanitor:
    """Deletes run artifacts immediately or after a one-shot delay."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the janitor.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self._pending: dict[str, tuple[threading.Timer, list[Path]]] = {}
        self._lock = threading.Lock()

    def release_all(self, paths: Iterable[Optional[PathLike]]) -> int:
        """
        Delete each path, best-effort and independently.

        A missing file is not an error. Any other failure is logged and the
        remaining paths are still attempted.

        Returns:
            Number of files actually removed
        """
        removed = 0
        for path in paths:
            if not path:
                continue
            try:
                os.unlink(path)
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                self.logger.warning(f"Failed to clean up file {path}: {e}")
        return removed

    def schedule_release(self, run_id: str, paths: Iterable[PathLike], delay_seconds: Optional[float] = None) -> bool:
        """
        Schedule a one-shot deferred release for a run.

        Args:
            run_id: Run the paths belong to; one pending release per run
            paths: Files to delete when the timer fires
            delay_seconds: Delay before deletion (defaults to cleanup_delay_seconds)

        Returns:
            True if scheduled, False if the run already has a pending release
        """
        delay = self.settings.cleanup_delay_seconds if delay_seconds is None else delay_seconds
        paths = [Path(p) for p in paths]

        with self._lock:
            if run_id in self._pending:
                self.logger.warning(f"Deferred cleanup already scheduled for run {run_id}, ignoring")
                return False
            timer = threading.Timer(delay, self._fire, args=(run_id,))
            timer.daemon = True
            self._pending[run_id] = (timer, paths)
            timer.start()

        self.logger.debug(f"Scheduled cleanup of {len(paths)} file(s) for run {run_id} in {delay:.0f}s")
        return True

    def _fire(self, run_id: str) -> None:
        with self._lock:
            entry = self._pending.pop(run_id, None)
        if entry is None:
            return
        _, paths = entry
        removed = self.release_all(paths)
        self.logger.info(f"Deferred cleanup for run {run_id} removed {removed} file(s)")

    def pending_runs(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    def shutdown(self) -> None:
        """Cancel pending timers and release their files now."""
        with self._lock:
            pending, self._pending = self._pending, {}
        for timer, paths in pending.values():
            timer.cancel()
            self.release_all(paths)
        if pending:
            self.logger.info(f"Flushed deferred cleanup for {len(pending)} run(s) on shutdown")
