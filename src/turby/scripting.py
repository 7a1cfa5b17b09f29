"""Entry points for scripting.

Each function loads a configuration, starts the system, runs one controller or
routine and packs the system down again (also on error or interrupt).

`config` may be a `TurbyConfig`, a mapping, an INI path or a system name, see
`turby.system.sysconfig.load_config`.
"""

from __future__ import annotations

import contextlib
import time
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping

from loguru import logger

from turby.meas import (
    CancellationToken,
    DissociationController,
    ManualReadController,
    never_stop,
    routines,
)
from turby.system import TurbySystem, load_config
from turby.types import (
    Gain,
    IntegrationTime,
    LabeledSeries,
    SampleSeries,
    TurbyConfig,
)

ConfigSource = TurbyConfig | Mapping[str, Any] | str | Path | None


@contextlib.contextmanager
def started_system(
    config: ConfigSource = None, sleep: Callable[[float], None] = time.sleep
) -> Iterator[TurbySystem]:
    """Build and start a system, packing it down on exit.

    Exceptions raised inside the block are logged and re-raised.
    """
    system = TurbySystem(load_config(config), sleep=sleep)
    system.startup()
    try:
        yield system
    except Exception:
        logger.exception("Error running system '{}'.", system.system_name)
        raise
    finally:
        system.packdown()


def run_dissociation_cycle(
    config: ConfigSource = None,
    cancel_token: CancellationToken | None = None,
    stop_condition: Callable[[SampleSeries], bool] = never_stop,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> SampleSeries:
    """Run the dissociation cycle until cancelled.

    Samples are persisted to the configured `datafile` after every
    measurement, the full series is also returned.
    """
    with started_system(config, sleep) as system:
        controller = DissociationController(system, sleep=sleep, clock=clock)
        return controller.run(cancel_token=cancel_token, stop_condition=stop_condition)


def run_self_test(
    rotations: int | None = None,
    config: ConfigSource = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[float]:
    """Flip back and forth `rotations` times (forever if None)."""
    with started_system(config, sleep) as system:
        return routines.self_test(system, rotations=rotations, sleep=sleep)


def move_to_load_position(config: ConfigSource = None) -> None:
    with started_system(config) as system:
        routines.move_to_load_position(system)


def move_to_eject_position(config: ConfigSource = None) -> None:
    with started_system(config) as system:
        routines.move_to_eject_position(system)


def run_manual_session(
    output_path: str | Path,
    config: ConfigSource = None,
    prompt: Callable[[str], str] = input,
    sleep: Callable[[float], None] = time.sleep,
) -> LabeledSeries:
    """Interactive labelled reads, written to `output_path` at the end."""
    with started_system(config, sleep) as system:
        controller = ManualReadController(system, output_path=output_path, sleep=sleep)
        return controller.run(prompt=prompt)


def measure_to_file(
    filename: str | Path,
    config: ConfigSource = None,
    gain: Gain | None = None,
    integration_time: IntegrationTime | None = None,
    nmeasurements: int = 5,
    sleep: Callable[[float], None] = time.sleep,
) -> list[float]:
    """Save `nmeasurements` readings of the system's sensor, one per line.

    Gain and integration time default to the configured values.

    Raises
    ------
    FileExistsError
        If `filename` exists, before any hardware is started
    """
    if Path(filename).exists():
        raise FileExistsError(f"{filename} already exists")
    config = load_config(config)
    with started_system(config, sleep) as system:
        return routines.measure_to_file(
            system.sensor,
            filename,
            gain=gain if gain is not None else config.gain,
            integration_time=(
                integration_time
                if integration_time is not None
                else config.integrationtime
            ),
            nmeasurements=nmeasurements,
            sleep=sleep,
        )
