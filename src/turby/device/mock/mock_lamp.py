from __future__ import annotations

from turby.device.device import Device


class MockLamp(Device):  # Protocol compliance checked by the system
    def __init__(self, **config):
        super().__init__(**config)
        self._connected = False
        self._on = False
        self.history: list[bool] = []

    def open(self):
        self._connected = True
        return True, "MockLamp opened"

    def close(self):
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    @property
    def is_on(self) -> bool:
        return self._on

    def set_light(self, on: bool) -> None:
        self._on = bool(on)
        self.history.append(self._on)
