"""Protocols defining the methods each instrument role requires.

Devices do not inherit from these; `TurbySystem` checks compliance at runtime
with `isinstance` when a device is assigned to its role, so mock devices and
hardware devices are interchangeable.

Roles
-----
- chamber: `ChamberProtocol`, moves the chamber between its two end positions.
- lamp: `LampProtocol`, the illumination LED.
- sensor: `TurbiditySensorProtocol`, the visible-light sensor.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from .config import Gain, IntegrationTime


@runtime_checkable
class ChamberProtocol(Protocol):
    """Open-loop chamber actuator.

    `flip` blocks for the whole motion and never reports whether the end stop
    was reached. Any bus error raised by the driver propagates.
    """

    flip: Callable[[bool], None]
    """Move to the forward (True) or reverse (False) end position."""

    flip_time: float
    """Seconds a call to `flip` blocks for."""


@runtime_checkable
class LampProtocol(Protocol):
    """On/off light source."""

    set_light: Callable[[bool], None]
    """Switch the light on (True) or off (False)."""


@runtime_checkable
class TurbiditySensorProtocol(Protocol):
    """Ambient light sensor used for turbidity readings.

    Callers must wait `SENSOR_SETTLE_TIME` after `configure` before the first
    `sample`, the sensor does not enforce this itself.
    """

    configure: Callable[[Gain, IntegrationTime], None]
    """Set the gain and integration time."""

    sample: Callable[[], float]
    """Return one raw visible-light reading."""
