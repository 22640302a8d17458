"""Superseded-request detection for overlapping refreshes."""

import threading
from collections.abc import Callable


class GenerationGuard:
    """Tags each request with an increasing generation number.

    A result may be published only while its generation is still the latest
    one handed out; anything older was superseded by a newer request.
    """

    def __init__(self) -> None:
        self._current = 0
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        return self._current

    def begin(self) -> int:
        """Start a new request and return its generation."""
        with self._lock:
            self._current += 1
            return self._current

    def is_current(self, generation: int) -> bool:
        return generation == self._current

    def publish(self, generation: int, commit: Callable[[], None]) -> bool:
        """Run ``commit`` if ``generation`` is still the latest.

        The check and the commit hold the same lock as ``begin``, so no newer
        request can start, let alone publish, in between.

        Returns:
            True when the result was committed, False when it was superseded.
        """
        with self._lock:
            if generation != self._current:
                return False
            commit()
            return True
