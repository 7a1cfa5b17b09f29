"""Short hardware routines used when setting up the instrument."""

from __future__ import annotations

import itertools
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from loguru import logger

from turby.types import Gain, IntegrationTime, TurbiditySensorProtocol, TurbyConfig
from turby.util.defaults import MEASURE_INTERVAL, SENSOR_SETTLE_TIME
from turby.util.save import write_values

if TYPE_CHECKING:
    from turby.system import TurbySystem


def self_test(
    system: TurbySystem,
    config: TurbyConfig | None = None,
    rotations: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[float]:
    """Flip back and forth, checking the motion, the lamp and the sensor.

    The lamp is on while flipping forward and off while flipping in reverse. A
    reading is logged after each full tumble period.

    Parameters
    ----------
    system : TurbySystem
        Started system
    config : TurbyConfig, optional
        Defaults to the system's configuration
    rotations : int, optional
        Number of flips. Runs until interrupted if None.
    sleep : Callable[[float], None]
        Blocking sleep, `time.sleep` by default

    Returns
    -------
    list[float]
        Reading taken after each flip
    """
    system.check_ready()
    config = config if config is not None else system.config
    chamber, lamp, sensor = system.chamber, system.lamp, system.sensor

    sensor.configure(config.gain, config.integrationtime)
    sleep(SENSOR_SETTLE_TIME)

    wait = max(0.0, config.tumbletime - chamber.flip_time)
    readings = []
    direction = not config.endforward
    counter = itertools.count() if rotations is None else range(rotations)
    try:
        for i in counter:
            lamp.set_light(direction)
            chamber.flip(direction)
            sleep(wait)
            reading = sensor.sample()
            readings.append(reading)
            logger.info(
                "Self test flip {} ({}): {}",
                i + 1,
                "forward" if direction else "reverse",
                reading,
            )
            direction = not direction
    finally:
        lamp.set_light(False)
    return readings


def move_to_load_position(system: TurbySystem, config: TurbyConfig | None = None):
    """Drive the chamber to the end opposite the measurement orientation."""
    system.check_ready()
    config = config if config is not None else system.config
    logger.info("Moving chamber to load position.")
    system.chamber.flip(not config.endforward)


def move_to_eject_position(system: TurbySystem, config: TurbyConfig | None = None):
    """Drive the chamber to the measurement orientation."""
    system.check_ready()
    config = config if config is not None else system.config
    logger.info("Moving chamber to eject position.")
    system.chamber.flip(config.endforward)


def measure_to_file(
    sensor: TurbiditySensorProtocol,
    filename: str | Path,
    gain: Gain = Gain.MEDIUM,
    integration_time: IntegrationTime = IntegrationTime.IT_200,
    nmeasurements: int = 5,
    sleep: Callable[[float], None] = time.sleep,
) -> list[float]:
    """Take `nmeasurements` readings one second apart and save them.

    Raises
    ------
    FileExistsError
        If `filename` exists. The sensor is not touched in that case.
    """
    filename = Path(filename)
    if filename.exists():
        raise FileExistsError(f"{filename} already exists")
    if nmeasurements < 1:
        raise ValueError(f"nmeasurements must be at least 1, got {nmeasurements}")

    sensor.configure(gain, integration_time)
    sleep(SENSOR_SETTLE_TIME)

    values = []
    for _ in range(nmeasurements):
        value = sensor.sample()
        logger.info("Reading {}: {}", len(values) + 1, value)
        values.append(value)
        sleep(MEASURE_INTERVAL)

    write_values(filename, values)
    logger.info("Saved {} readings to {}", len(values), filename)
    return values
