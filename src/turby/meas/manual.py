"""Manual read mode: one labelled reading per operator-loaded sample."""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from loguru import logger

from turby.types import LabeledSample, LabeledSeries, TurbyConfig
from turby.util.defaults import SENSOR_SETTLE_TIME
from turby.util.save import DELIMITER, write_labeled_series

if TYPE_CHECKING:
    from turby.system import TurbySystem

LABEL_PROMPT = "Sample label (blank to finish): "
LOAD_PROMPT = "Load sample '{}' and press enter"
REMOVE_PROMPT = "Remove sample '{}' and press enter"


class ManualReadController:
    """Interactive session reading samples loaded by hand.

    Each sample is loaded in the load position, read in the eject (measurement)
    position, then removed before the chamber returns to load.

    Parameters
    ----------
    system : TurbySystem
        Started system
    output_path : str | Path, optional
        Where the labelled series is written at the end of the session
    config : TurbyConfig, optional
        Defaults to the system's configuration
    sleep : Callable[[float], None]
        Blocking sleep, `time.sleep` by default
    """

    def __init__(
        self,
        system: TurbySystem,
        output_path: str | Path | None = None,
        config: TurbyConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        system.check_ready()
        self.system = system
        self.config = config if config is not None else system.config
        self.output_path = Path(output_path) if output_path is not None else None
        self._sleep = sleep
        self._series: LabeledSeries = []

        self.system.sensor.configure(self.config.gain, self.config.integrationtime)
        self._sleep(SENSOR_SETTLE_TIME)

    @property
    def series(self) -> LabeledSeries:
        return list(self._series)

    def _ask_label(self, prompt: Callable[[str], str]) -> str:
        while True:
            label = prompt(LABEL_PROMPT).strip()
            if DELIMITER not in label:
                return label
            logger.warning("Labels may not contain '{}': {}", DELIMITER, label)

    def _read(self) -> float:
        lamp = self.system.lamp
        lamp.set_light(True)
        try:
            self._sleep(self.config.lamptime)
            return self.system.sensor.sample()
        finally:
            lamp.set_light(False)

    def run(self, prompt: Callable[[str], str] = input) -> LabeledSeries:
        """Prompt for samples until a blank label is given.

        The series is written to `output_path` when the session ends, also if
        it ends with an exception.
        """
        chamber = self.system.chamber
        endforward = self.config.endforward
        try:
            chamber.flip(not endforward)
            while True:
                label = self._ask_label(prompt)
                if not label:
                    break
                prompt(LOAD_PROMPT.format(label))
                chamber.flip(endforward)
                intensity = self._read()
                self._series.append(LabeledSample(label=label, intensity=intensity))
                logger.info("Sample '{}': {}", label, intensity)
                prompt(REMOVE_PROMPT.format(label))
                chamber.flip(not endforward)
        finally:
            if self.output_path is not None:
                write_labeled_series(self.output_path, self._series)
                logger.info(
                    "Saved {} manual readings to {}", len(self._series), self.output_path
                )
        return self.series
