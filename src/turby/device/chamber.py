"""Chamber actuators.

Two interchangeable motion backends move the sample chamber between its two
end positions. Both are open-loop and block for the full motion:

- `ServoChamber`: continuous rotation servo driven by a throttle command for a
  fixed time `tflip`, then held with a stop command.
- `StepperChamber`: step/direction driver, `flipsteps` pulses at `stepdelay`
  seconds per step.
"""

from __future__ import annotations

import time
from typing import Callable

from loguru import logger

from turby.device.board import BlinkaBoard, BoardImportError
from turby.device.device import Device


class ServoChamber(Device):
    servoaddress: int
    servochannel: int
    forwardspeed: float
    forwardstop: float
    reversespeed: float
    reversestop: float
    tflip: float
    required_config = {
        "servoaddress": int,
        "servochannel": int,
        "forwardspeed": (int, float),
        "forwardstop": (int, float),
        "reversespeed": (int, float),
        "reversestop": (int, float),
        "tflip": (int, float),
    }

    PWM_FREQUENCY = 50  # Hz, standard hobby servo frame rate

    def __init__(
        self,
        board: BlinkaBoard | None = None,
        sleep: Callable[[float], None] = time.sleep,
        **config,
    ):
        super().__init__(**config)
        self._board = board if board is not None else BlinkaBoard()
        self._sleep = sleep
        self._pca = None
        self._servo = None
        self._connected = False

    def open(self):
        try:
            from adafruit_motor import servo
            from adafruit_pca9685 import PCA9685
        except ImportError as e:
            raise BoardImportError(f"Failed to import servo drivers: {e}")
        self._pca = PCA9685(self._board.mux_channel(self.servoaddress))
        self._pca.frequency = self.PWM_FREQUENCY
        self._servo = servo.ContinuousServo(self._pca.channels[self.servochannel])
        self._connected = True
        return True, f"ServoChamber opened on mux channel {self.servoaddress}"

    def close(self):
        if self._pca is not None:
            self._pca.deinit()
        self._pca = None
        self._servo = None
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    @property
    def flip_time(self) -> float:
        return float(self.tflip)

    def flip(self, forward: bool) -> None:
        """Drive to the forward or reverse end and hold there."""
        throttle, stop = (
            (self.forwardspeed, self.forwardstop)
            if forward
            else (self.reversespeed, self.reversestop)
        )
        logger.trace("Servo flip forward={} throttle={}", forward, throttle)
        self._servo.throttle = throttle
        self._sleep(self.tflip)
        self._servo.throttle = stop


class StepperChamber(Device):
    steppin: int
    dirpin: int
    enablepin: int | None
    flipsteps: int
    stepdelay: float
    forwardlevel: bool
    required_config = {
        "steppin": int,
        "dirpin": int,
        "flipsteps": int,
        "stepdelay": (int, float),
        "forwardlevel": bool,
    }

    def __init__(
        self,
        board: BlinkaBoard | None = None,
        sleep: Callable[[float], None] = time.sleep,
        **config,
    ):
        config.setdefault("enablepin", None)
        config.setdefault("forwardlevel", True)
        super().__init__(**config)
        self._board = board if board is not None else BlinkaBoard()
        self._sleep = sleep
        self._step = None
        self._dir = None
        self._enable = None
        self._connected = False

    def open(self):
        self._step = self._board.digital_out(self.steppin)
        self._dir = self._board.digital_out(self.dirpin)
        if self.enablepin is not None:
            # driver enable is active low
            self._enable = self._board.digital_out(self.enablepin, value=False)
        self._connected = True
        return True, f"StepperChamber opened on step D{self.steppin}, dir D{self.dirpin}"

    def close(self):
        if self._enable is not None:
            self._enable.value = True
        for pin in (self.steppin, self.dirpin, self.enablepin):
            if pin is not None:
                self._board.release_pin(pin)
        self._step = self._dir = self._enable = None
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    @property
    def flip_time(self) -> float:
        return self.flipsteps * float(self.stepdelay)

    def flip(self, forward: bool) -> None:
        """Set direction, then emit `flipsteps` step pulses."""
        self._dir.value = self.forwardlevel if forward else not self.forwardlevel
        logger.trace("Stepper flip forward={} steps={}", forward, self.flipsteps)
        half = self.stepdelay / 2
        for _ in range(self.flipsteps):
            self._step.value = True
            self._sleep(half)
            self._step.value = False
            self._sleep(half)
