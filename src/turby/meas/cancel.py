from __future__ import annotations

import threading


class CancellationToken:
    """Thread and signal safe request to stop a running cycle.

    The cycle polls `cancelled` once before each tumble, so a cancellation is
    honoured within one tumble period (plus the current measurement if one
    is in progress).
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
