"""Regenerate a book whenever files in its input directory change."""

from __future__ import annotations

import logging
import threading
import typing as typ
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

DEFAULT_DELAY = 0.1
WATCHED_EVENTS = frozenset(
    {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}
)

_LOGGER = logging.getLogger("dokapi")


class Debouncer:
    """Run ``action`` once ``delay`` seconds after the last :meth:`trigger`.

    Each trigger cancels the pending timer and starts a new one, so a burst of
    triggers closer together than ``delay`` collapses into a single call.
    Calls never overlap.
    """

    def __init__(self, delay: float, action: typ.Callable[[], None]) -> None:
        self.delay = delay
        self.action = action
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._running = threading.Lock()

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self) -> None:
        with self._running:
            self.action()


class RegenerateHandler(FileSystemEventHandler):
    """Forward relevant file-system events to a :class:`Debouncer`."""

    def __init__(
        self, debouncer: Debouncer, *, ignore: typ.Iterable[Path] = ()
    ) -> None:
        super().__init__()
        self.debouncer = debouncer
        self.ignore = [path.resolve() for path in ignore]

    def is_ignored(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode()
        resolved = Path(path).resolve()
        return any(
            resolved == root or root in resolved.parents for root in self.ignore
        )

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in WATCHED_EVENTS:
            return
        if self.is_ignored(event.src_path):
            return
        self.debouncer.trigger()


def make_regenerator(
    regenerate: typ.Callable[[], object], *, logger: logging.Logger = _LOGGER
) -> typ.Callable[[], None]:
    """Wrap ``regenerate`` so a failure is logged instead of ending the watch."""

    def _run() -> None:
        try:
            regenerate()
        except Exception:
            logger.exception("GENERATION FAILED")
        else:
            logger.info("Generation complete, waiting for changes...")

    return _run


def watch(
    input_dir: Path,
    regenerate: typ.Callable[[], object],
    *,
    ignore: typ.Iterable[Path] = (),
    delay: float = DEFAULT_DELAY,
    logger: logging.Logger = _LOGGER,
    stop_event: threading.Event | None = None,
) -> None:
    """Generate once, then regenerate on every burst of changes in ``input_dir``.

    Parameters
    ----------
    input_dir : Path
        Directory watched recursively.
    regenerate : Callable[[], object]
        Performs one full generation.
    ignore : Iterable[Path], optional
        Paths whose changes are ignored, typically the output directory.
    delay : float, optional
        Quiet period, in seconds, before a burst triggers regeneration.
    logger : logging.Logger, optional
        Destination for progress messages and generation failures.
    stop_event : threading.Event, optional
        Stops the watcher once set; without it the watcher runs until
        interrupted.
    """
    action = make_regenerator(regenerate, logger=logger)
    debouncer = Debouncer(delay, action)
    action()

    stop_event = stop_event or threading.Event()
    observer = Observer()
    observer.schedule(
        RegenerateHandler(debouncer, ignore=ignore), str(input_dir), recursive=True
    )
    observer.start()
    logger.info("Watching %s for changes (press Ctrl+C to stop)...", input_dir)
    try:
        while not stop_event.wait(0.5):
            pass
    except KeyboardInterrupt:
        logger.info("Stopping watcher...")
    finally:
        debouncer.cancel()
        observer.stop()
        observer.join()


__all__ = ["Debouncer", "RegenerateHandler", "make_regenerator", "watch"]
