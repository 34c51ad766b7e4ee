"""
Recursive directory watching.

Wiring per watched root: watchdog Observer (own background thread)
-> WatchEventHandler (filters non-change events, isolates per-event errors)
-> WatchSession (optional EventDebouncer) -> change callbacks.

DirectoryWatcher keeps one session per resolved root path. Watching a root that
is already watched returns the existing session instead of starting a second
observer, so events are never delivered twice to the same callback.
"""

import os
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from dotenv import load_dotenv
from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from texpane.contexts.workspace.exceptions import WatchSetupFailure
from texpane.contexts.workspace.logger import (
    _log_debug,
    _log_error,
    _log_exception,
    _log_warning,
    log_watch_event,
    log_watch_started,
    log_watch_stopped,
)

load_dotenv()

WATCH_DEBOUNCE_S = float(os.getenv("WATCH_DEBOUNCE_S", "0"))

# Open/close notifications emitted on some platforms are not changes
CHANGE_EVENT_TYPES = frozenset(
    {EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED}
)

ChangeCallback = Callable[[], None]


class EventDebouncer:
    """
    Trailing-edge debouncer built on threading.Timer.

    Waits debounce_seconds after the last event before invoking the callback
    once. A new event within that window restarts the timer.
    """

    def __init__(self, callback: ChangeCallback, debounce_seconds: float):
        self._callback = callback
        self._debounce_seconds = debounce_seconds
        self._timer: Optional[threading.Timer] = None
        self._pending = 0
        self._lock = threading.Lock()

    def add_event(self) -> None:
        with self._lock:
            self._pending += 1
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce_seconds, self._trigger)
            self._timer.daemon = True
            self._timer.start()

    def cleanup(self) -> None:
        """Cancel any pending timer and drop pending events."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = 0

    def _trigger(self) -> None:
        with self._lock:
            pending = self._pending
            self._pending = 0
            self._timer = None

        if pending:
            _log_debug(f"Debounced {pending} events into one change signal")
            self._callback()


class WatchEventHandler(FileSystemEventHandler):
    """
    Receives watchdog events and forwards change events to a session.

    Any error raised while handling a single event is logged and the event is
    dropped; the observer thread keeps running.
    """

    def __init__(self, session: "WatchSession"):
        super().__init__()
        self._session = session

    def dispatch(self, event: FileSystemEvent) -> None:
        try:
            super().dispatch(event)
        except Exception:
            _log_exception(f"Dropped event on {self._session.root_path}")

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in CHANGE_EVENT_TYPES:
            return

        dest_path = getattr(event, "dest_path", "") or ""
        log_watch_event(event.event_type, os.fsdecode(event.src_path), os.fsdecode(dest_path))
        self._session._on_event()


class WatchSession:
    """
    Live monitoring of one directory root.

    Owns the watchdog Observer thread and the callbacks interested in the root.
    Every change event invokes every callback with no arguments, unless a
    positive debounce_seconds coalesces bursts into one call.

    Attributes:
        root_path: Resolved directory being watched
        debounce_seconds: Coalescing window (0 = one signal per event)
        event_count: Number of change events received so far
    """

    def __init__(self, root_path: Union[str, Path], debounce_seconds: float = 0.0):
        self.root_path = Path(root_path)
        self.debounce_seconds = debounce_seconds
        self.event_count = 0
        self._callbacks: List[ChangeCallback] = []
        self._lock = threading.Lock()
        self._observer: Optional[Observer] = None
        self._debouncer: Optional[EventDebouncer] = None

    def add_callback(self, callback: ChangeCallback) -> bool:
        """Attach a callback. Returns False if it was already attached."""
        with self._lock:
            if callback in self._callbacks:
                return False
            self._callbacks.append(callback)
            return True

    def remove_callback(self, callback: ChangeCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def start(self) -> None:
        """
        Start the observer thread.

        Raises:
            WatchSetupFailure: If the root is not an existing directory or the
                OS refuses the watch (e.g. inotify watch limit reached)
        """
        if self.is_running():
            return

        if not self.root_path.exists():
            raise WatchSetupFailure("Cannot watch a path that does not exist", path=self.root_path)
        if not self.root_path.is_dir():
            raise WatchSetupFailure(
                "Cannot watch a path that is not a directory", path=self.root_path
            )

        if self.debounce_seconds > 0:
            self._debouncer = EventDebouncer(self._dispatch, self.debounce_seconds)

        observer = Observer()
        observer.name = f"watch:{self.root_path}"
        observer.daemon = True
        try:
            observer.schedule(WatchEventHandler(self), str(self.root_path), recursive=True)
            observer.start()
        except Exception as e:
            _log_error(f"Failed to start watching {self.root_path}: {e}")
            self._teardown(observer)
            raise WatchSetupFailure(
                "Failed to start watch session", path=self.root_path, original_error=e
            ) from e

        self._observer = observer
        log_watch_started(self.root_path, self.debounce_seconds)

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the observer thread and cancel any pending debounced signal."""
        observer = self._observer
        self._observer = None
        if observer is None:
            return
        self._teardown(observer, timeout)
        log_watch_stopped(self.root_path)

    def is_running(self) -> bool:
        observer = self._observer
        return observer is not None and observer.is_alive()

    def _teardown(self, observer: Observer, timeout: float = 2.0) -> None:
        if self._debouncer is not None:
            self._debouncer.cleanup()
            self._debouncer = None
        if observer.is_alive():
            observer.stop()
            observer.join(timeout=timeout)

    def _on_event(self) -> None:
        self.event_count += 1
        debouncer = self._debouncer
        if debouncer is not None:
            debouncer.add_event()
        else:
            self._dispatch()

    def _dispatch(self) -> None:
        with self._lock:
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback()
            except Exception:
                _log_exception(f"Change callback for {self.root_path} raised")


class DirectoryWatcher:
    """
    Registry of watch sessions keyed by resolved root path.

    Usage:
        watcher = DirectoryWatcher()
        watcher.watch(Path("/path/to/project"), on_change=notifier.notify)
        # ... later
        watcher.unwatch(Path("/path/to/project"))
        watcher.stop_all()
    """

    def __init__(self, debounce_seconds: float = WATCH_DEBOUNCE_S):
        self.debounce_seconds = debounce_seconds
        self._sessions: Dict[Path, WatchSession] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(root_path: Union[str, Path]) -> Path:
        try:
            return Path(root_path).expanduser().resolve()
        except (OSError, ValueError, RuntimeError) as e:
            raise WatchSetupFailure("Cannot resolve watch root", original_error=e) from e

    def watch(
        self,
        root_path: Union[str, Path],
        on_change: ChangeCallback,
        debounce_seconds: Optional[float] = None,
    ) -> WatchSession:
        """
        Start monitoring root_path recursively, or join the existing session.

        Args:
            root_path: Directory to watch
            on_change: Called with no arguments on each change signal
            debounce_seconds: Coalescing window for a new session (default: watcher default)

        Returns:
            The session for root_path

        Raises:
            WatchSetupFailure: If a new session cannot be started
        """
        key = self._key(root_path)
        with self._lock:
            session = self._sessions.get(key)
            if session is not None and session.is_running():
                if session.add_callback(on_change):
                    _log_debug(f"Attached callback to existing session: {key}")
                else:
                    _log_debug(f"Already watching: {key}")
                return session

            if debounce_seconds is None:
                debounce_seconds = self.debounce_seconds
            session = WatchSession(key, debounce_seconds=debounce_seconds)
            session.add_callback(on_change)
            session.start()
            self._sessions[key] = session
            return session

    def unwatch(self, root_path: Union[str, Path]) -> bool:
        """Stop the session for root_path. Returns False if it was not watched."""
        key = self._key(root_path)
        with self._lock:
            session = self._sessions.pop(key, None)
        if session is None:
            _log_warning(f"Not watching: {key}")
            return False
        session.stop()
        return True

    def stop_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.stop()

    def is_watching(self, root_path: Union[str, Path]) -> bool:
        with self._lock:
            session = self._sessions.get(self._key(root_path))
        return session is not None and session.is_running()

    def sessions(self) -> List[Path]:
        """Roots currently registered."""
        with self._lock:
            return list(self._sessions)
