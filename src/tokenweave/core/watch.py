"""
Watch mode.

A polling file watcher re-triggers the full pipeline when token sources or
tokenweave.yaml change. Triggers are coalesced by ``BuildScheduler``:

- at most one build is in flight
- a request arriving mid-build schedules exactly one follow-up build
- further requests during the same build are dropped

Each build is a complete, fresh pipeline run; no state carries over.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .config_loader import get_config_path, load_config
from .errors import TokenweaveError

logger = logging.getLogger(__name__)

WATCH_PATTERNS = ["*.json"]


class FileWatcher:
    """
    Watches files for changes using polling (cross-platform compatible).

    Detects new, modified and deleted files by mtime and reports each poll's
    changes as one batch.
    """

    def __init__(
        self,
        paths: list[Path],
        on_change: Callable[[list[Path]], None],
        patterns: list[str] | None = None,
        poll_interval: float = 0.5,
    ):
        """
        Initialize the file watcher.

        Args:
            paths: Directories or files to watch
            on_change: Callback receiving the files changed since the last poll
            patterns: Glob patterns matched inside watched directories
            poll_interval: How often to check for changes (seconds)
        """
        self.paths = paths
        self.on_change = on_change
        self.patterns = patterns or WATCH_PATTERNS
        self.poll_interval = poll_interval

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._file_mtimes: dict[Path, float] = {}

    def start(self) -> None:
        """Start watching for file changes."""
        self._file_mtimes = self._scan_files()
        self._thread = threading.Thread(target=self._watch_loop, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop watching for file changes."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2)

    def _scan_files(self) -> dict[Path, float]:
        """Scan all watched paths and return file mtimes."""
        mtimes: dict[Path, float] = {}

        for watch_path in self.paths:
            if not watch_path.exists():
                continue

            if watch_path.is_file():
                try:
                    mtimes[watch_path] = watch_path.stat().st_mtime
                except OSError:
                    logger.debug(f"Could not stat {watch_path}")
            else:
                for pattern in self.patterns:
                    for file_path in watch_path.rglob(pattern):
                        try:
                            mtimes[file_path] = file_path.stat().st_mtime
                        except OSError:
                            logger.debug(f"Could not stat {file_path}")

        return mtimes

    def poll(self) -> list[Path]:
        """Compare against the previous scan; returns changed paths in sorted order."""
        current = self._scan_files()
        changed = {
            path
            for path, mtime in current.items()
            if path not in self._file_mtimes or mtime > self._file_mtimes[path]
        }
        changed.update(path for path in self._file_mtimes if path not in current)
        self._file_mtimes = current
        return sorted(changed)

    def _watch_loop(self) -> None:
        """Main watch loop that polls for file changes."""
        while not self._stop_event.is_set():
            try:
                changed = self.poll()
                if changed:
                    self.on_change(changed)
            except Exception:
                logger.exception("File watcher error")

            self._stop_event.wait(self.poll_interval)


class BuildScheduler:
    """
    Coalesces build requests so at most one build runs at a time.

    ``request()`` never blocks on a build: it starts a worker when idle, or
    marks a single follow-up when a build is already running.
    """

    def __init__(
        self,
        build: Callable[[], Any],
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[TokenweaveError], None] | None = None,
    ):
        self.build = build
        self.on_success = on_success
        self.on_error = on_error

        self.builds_started = 0
        self.requests_dropped = 0

        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._running = False
        self._pending = False

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def request(self) -> bool:
        """Ask for a build.

        Returns:
            True if a new build started, False if it was coalesced.
        """
        with self._lock:
            if self._running:
                if self._pending:
                    self.requests_dropped += 1
                    logger.debug("Build already queued, dropping request")
                else:
                    self._pending = True
                    logger.debug("Build in progress, queued one follow-up")
                return False
            self._running = True

        threading.Thread(target=self._run, daemon=True).start()
        return True

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no build is running or queued."""
        with self._idle:
            return self._idle.wait_for(lambda: not self._running, timeout=timeout)

    def _run(self) -> None:
        while True:
            with self._lock:
                self.builds_started += 1
            self._run_once()
            with self._lock:
                if not self._pending:
                    self._running = False
                    self._idle.notify_all()
                    return
                self._pending = False

    def _run_once(self) -> None:
        try:
            result = self.build()
        except TokenweaveError as e:
            logger.error(f"Build failed: {e}")
            if self.on_error:
                self.on_error(e)
            return
        except Exception:
            # Watch mode outlives a crashing build
            logger.exception("Unexpected build failure")
            return
        if self.on_success:
            self.on_success(result)


def watch_paths(project_root: Path, config_path: Path | None = None) -> list[Path]:
    """Token directory plus the config file, as configured right now."""
    config_file = config_path or get_config_path(project_root)
    config = load_config(project_root, config_path=config_path)
    return [project_root / config.tokens_dir, config_file]


def start_watch(
    project_root: Path,
    build: Callable[[], Any],
    *,
    config_path: Path | None = None,
    poll_interval: float = 0.5,
    on_success: Callable[[Any], None] | None = None,
    on_error: Callable[[TokenweaveError], None] | None = None,
) -> tuple[FileWatcher, BuildScheduler]:
    """Run an initial build and start watching; the caller stops the watcher."""
    scheduler = BuildScheduler(build, on_success=on_success, on_error=on_error)

    def on_change(changed: list[Path]) -> None:
        for path in changed:
            logger.info(f"Changed: {path}")
        scheduler.request()

    watcher = FileWatcher(
        watch_paths(project_root, config_path),
        on_change,
        patterns=WATCH_PATTERNS + ["*.yaml"],
        poll_interval=poll_interval,
    )
    scheduler.request()
    watcher.start()
    return watcher, scheduler
