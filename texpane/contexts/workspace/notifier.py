"""
Change notification channel between watch sessions and the presentation layer.

Watch sessions call notify() from their observer threads. Listeners receive a
bare "something changed" signal and are expected to re-list whatever they show.
"""

import asyncio
import threading
from typing import Callable, List, Optional

from texpane.contexts.workspace.logger import _log_debug, _log_exception

FS_CHANGE_EVENT = "fs-change"

Listener = Callable[[], None]


class ChangeNotifier:
    """
    Fan-out of no-payload change signals.

    When bound to an asyncio event loop, listeners are scheduled on that loop
    with call_soon_threadsafe, so the consumer never runs on a watcher thread.
    Unbound, listeners run synchronously on the thread that called notify().

    Usage:
        notifier = ChangeNotifier(asyncio.get_running_loop())
        unsubscribe = notifier.subscribe(lambda: refresh_tree())
        watcher.watch(root, on_change=notifier.notify)
        # ... later
        unsubscribe()
    """

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        event_name: str = FS_CHANGE_EVENT,
    ):
        self.event_name = event_name
        self._loop = loop
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def bind_loop(self, loop: Optional[asyncio.AbstractEventLoop]) -> None:
        """Deliver future signals on loop (None = deliver on the notifying thread)."""
        self._loop = loop

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Callable that removes the listener again (safe to call twice)
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def notify(self) -> None:
        """Push one change signal to every listener."""
        with self._lock:
            listeners = list(self._listeners)

        _log_debug(f"Emitting '{self.event_name}' to {len(listeners)} listeners")

        loop = self._loop
        for listener in listeners:
            if loop is not None and not loop.is_closed():
                loop.call_soon_threadsafe(self._deliver, listener)
            else:
                self._deliver(listener)

    def _deliver(self, listener: Listener) -> None:
        try:
            listener()
        except Exception:
            _log_exception(f"Listener for '{self.event_name}' raised")
