"""Pause flag shared by the collector and the command listener."""

import threading


class PauseFlag:
    """
    Lock-guarded boolean.

    The only state shared between the two long-running tasks. Starts
    unpaused and is never persisted, so a restart always resumes
    collection.
    """

    def __init__(self, paused: bool = False):
        self._lock = threading.Lock()
        self._paused = paused

    @property
    def is_paused(self) -> bool:
        with self._lock:
            return self._paused

    def pause(self) -> bool:
        """Set the flag. Returns True if the state changed."""
        return self._set(True)

    def resume(self) -> bool:
        """Clear the flag. Returns True if the state changed."""
        return self._set(False)

    def _set(self, value: bool) -> bool:
        with self._lock:
            changed = self._paused != value
            self._paused = value
            return changed
