from __future__ import annotations

import time
from typing import Callable

from turby.device.device import Device


class MockChamber(Device):  # Protocol compliance checked by the system
    def __init__(self, sleep: Callable[[float], None] = time.sleep, **config):
        config.setdefault("tflip", 0.0)
        super().__init__(**config)
        self._sleep = sleep
        self._connected = False
        self._position = None  # None until the first flip anchors it
        self.flips: list[bool] = []

    def open(self):
        self._connected = True
        return True, "MockChamber opened"

    def close(self):
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    @property
    def flip_time(self) -> float:
        return float(self.tflip)

    @property
    def position(self) -> bool | None:
        """End the chamber was last driven to, True for forward."""
        return self._position

    def flip(self, forward: bool) -> None:
        """Record the flip and block for `tflip`."""
        self.flips.append(bool(forward))
        if self.tflip:
            self._sleep(self.tflip)
        self._position = bool(forward)
