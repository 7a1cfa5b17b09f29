"""The timed dissociation cycle.

A run alternates two phases until cancelled (or `stop_condition` is met):

1. Measure, with the chamber at rest in measurement orientation:
   SETTLING (wait `settletime`), ILLUMINATING (lamp on, wait `lamptime`),
   MEASURING (one sensor reading, lamp off), then the sample is persisted.
2. Tumble: `num_tumble` flips, each taking `tumbletime` in total. The count is
   even, so every measurement is taken in the same orientation.

The cancel token is polled before each flip of the tumble phase.
"""

from __future__ import annotations

import math
import time
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable

from loguru import logger

from turby.meas.cancel import CancellationToken
from turby.types import Sample, SampleSeries, TurbyConfig
from turby.util.defaults import SENSOR_SETTLE_TIME
from turby.util.save import DataRecorder, resolve_output_path, save_metadata

if TYPE_CHECKING:
    from turby.system import TurbySystem


class CycleState(Enum):
    IDLE = "idle"
    SETTLING = "settling"
    ILLUMINATING = "illuminating"
    MEASURING = "measuring"
    TUMBLING = "tumbling"


def num_tumble(sampletime: float, tumbletime: float) -> int:
    """Number of flips between measurements.

    `ceil(sampletime / tumbletime)`, rounded up to the next even number so the
    chamber ends each tumble phase where it started.

    Examples
    --------
    >>> num_tumble(300, 3)
    100
    >>> num_tumble(301, 3)
    102
    """
    n = math.ceil(sampletime / tumbletime)
    return n + n % 2


def never_stop(series: SampleSeries) -> bool:
    return False


class DissociationController:
    """Runs the dissociation cycle on a started `TurbySystem`.

    Construction configures the sensor, waits for the configuration to take
    effect, then drives the chamber to the measurement orientation.

    Parameters
    ----------
    system : TurbySystem
        Started system providing the chamber, lamp and sensor
    config : TurbyConfig, optional
        Defaults to the system's configuration
    recorder : DataRecorder, optional
        Defaults to a recorder on the resolved `config.datafile`
    sleep : Callable[[float], None]
        Blocking sleep, `time.sleep` by default
    clock : Callable[[], float]
        Monotonic clock in seconds, `time.monotonic` by default

    Raises
    ------
    ValidationError
        If the system has not been started
    """

    def __init__(
        self,
        system: TurbySystem,
        config: TurbyConfig | None = None,
        recorder: DataRecorder | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        system.check_ready()
        self.system = system
        self.config = config if config is not None else system.config
        self.recorder = (
            recorder
            if recorder is not None
            else DataRecorder(resolve_output_path(self.config.datafile))
        )
        self.num_tumble = num_tumble(self.config.sampletime, self.config.tumbletime)
        self.state = CycleState.IDLE
        self._sleep = sleep
        self._clock = clock

        self.system.sensor.configure(self.config.gain, self.config.integrationtime)
        self._sleep(SENSOR_SETTLE_TIME)

        self.system.chamber.flip(self.config.endforward)
        self.orientation = self.config.endforward
        logger.info(
            "Dissociation cycle ready: {} flips every {} s, data file {}",
            self.num_tumble,
            self.config.tumbletime,
            self.recorder.path,
        )

    @property
    def series(self) -> SampleSeries:
        return self.recorder.series

    def _set_state(self, state: CycleState):
        if state is not self.state:
            logger.debug("Cycle state {} -> {}", self.state.name, state.name)
        self.state = state

    def run(
        self,
        cancel_token: CancellationToken | None = None,
        stop_condition: Callable[[SampleSeries], bool] = never_stop,
    ) -> SampleSeries:
        """Run the cycle until cancelled or `stop_condition(series)` is True.

        Returns
        -------
        SampleSeries
            Every sample taken, also persisted to the recorder's file
        """
        if cancel_token is None:
            cancel_token = CancellationToken()
        metadata = self.system.get_metadata()
        metadata["start_time"] = datetime.now().isoformat()
        metadata["num_tumble"] = self.num_tumble
        save_metadata(self.recorder.path, metadata)

        start = self._clock()
        logger.info("Dissociation cycle started.")
        try:
            while not stop_condition(self.recorder.series):
                self._measure(start)
                if not self._tumble(cancel_token):
                    logger.info("Dissociation cycle cancelled.")
                    break
            else:
                logger.info("Stop condition met.")
        finally:
            self._set_state(CycleState.IDLE)
        logger.info("Dissociation cycle finished with {} samples.", len(self.recorder))
        return self.recorder.series

    def _measure(self, start: float):
        lamp = self.system.lamp

        self._set_state(CycleState.SETTLING)
        self._sleep(self.config.settletime)

        self._set_state(CycleState.ILLUMINATING)
        lamp.set_light(True)
        try:
            self._sleep(self.config.lamptime)
            self._set_state(CycleState.MEASURING)
            intensity = self.system.sensor.sample()
            elapsed_ms = int(round((self._clock() - start) * 1000))
        finally:
            lamp.set_light(False)

        sample = Sample(elapsed_ms=elapsed_ms, intensity=float(intensity))
        self.recorder.append(sample)
        logger.info("Sample {}: {} at {} ms", len(self.recorder), intensity, elapsed_ms)

    def _tumble(self, cancel_token: CancellationToken) -> bool:
        """Flip `num_tumble` times. Returns False if cancelled."""
        chamber = self.system.chamber
        wait = max(0.0, self.config.tumbletime - chamber.flip_time)
        self._set_state(CycleState.TUMBLING)
        for _ in range(self.num_tumble):
            if cancel_token.cancelled:
                return False
            direction = not self.orientation
            chamber.flip(direction)
            self.orientation = direction
            self._sleep(wait)
        return True
