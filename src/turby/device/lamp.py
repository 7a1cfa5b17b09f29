from __future__ import annotations

from turby.device.board import BlinkaBoard
from turby.device.device import Device


class GPIOLamp(Device):
    """Illumination LED switched from a GPIO pin."""

    ledpin: int
    required_config = {"ledpin": int}

    def __init__(self, board: BlinkaBoard | None = None, **config):
        super().__init__(**config)
        self._board = board if board is not None else BlinkaBoard()
        self._pin = None
        self._on = False

    def open(self):
        self._pin = self._board.digital_out(self.ledpin, value=False)
        self._on = False
        return True, f"GPIOLamp opened on D{self.ledpin}"

    def close(self):
        if self._pin is not None:
            self._pin.value = False
            self._board.release_pin(self.ledpin)
        self._pin = None
        self._on = False

    def is_connected(self) -> bool:
        return self._pin is not None

    def set_light(self, on: bool) -> None:
        """Switch the lamp on or off."""
        self._pin.value = bool(on)
        self._on = bool(on)
