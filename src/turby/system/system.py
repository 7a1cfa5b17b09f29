# -*- coding: utf-8 -*-
"""
The instrument: the chamber, lamp and sensor built from one configuration.

`TurbySystem` owns device construction and the hardware lifecycle. Controllers
(see `turby.meas`) take a started system and only ever drive its devices
through their role protocols.
"""

from __future__ import annotations

import time
from functools import wraps
from typing import Any, Callable, Mapping, ParamSpec, Type, TypeVar

from loguru import logger

from turby.device import (
    BlinkaBoard,
    Device,
    GPIOLamp,
    MockChamber,
    MockLamp,
    MockLuxSensor,
    ServoChamber,
    StepperChamber,
    TSL2591Sensor,
)
from turby.system.sysconfig import load_config
from turby.types import (
    ChamberConfig,
    ChamberProtocol,
    GPIOLampConfig,
    LampConfig,
    LampProtocol,
    MockChamberConfig,
    MockLampConfig,
    MockSensorConfig,
    SensorConfig,
    ServoChamberConfig,
    StepperChamberConfig,
    TSL2591SensorConfig,
    TurbiditySensorProtocol,
    TurbyConfig,
    ValidationError,
    validate_device_protocol,
    validate_device_states,
)

P = ParamSpec("P")
T = TypeVar("T")

# config type -> device class, and whether the device needs the shared board
DEVICE_REGISTRY: dict[type, tuple[Type[Device], bool]] = {
    ServoChamberConfig: (ServoChamber, True),
    StepperChamberConfig: (StepperChamber, True),
    MockChamberConfig: (MockChamber, False),
    GPIOLampConfig: (GPIOLamp, True),
    MockLampConfig: (MockLamp, False),
    TSL2591SensorConfig: (TSL2591Sensor, True),
    MockSensorConfig: (MockLuxSensor, False),
}

ROLE_PROTOCOLS = {
    "chamber": ChamberProtocol,
    "lamp": LampProtocol,
    "sensor": TurbiditySensorProtocol,
}


def requires_started_system(func: Callable[P, T]) -> Callable[P, T]:
    """Decorator checking the system is started and all devices are connected.

    Raises
    ------
    ValidationError
        If hardware is not started or a device is not connected
    """

    @wraps(func)
    def wrapper(self: TurbySystem, *args: P.args, **kwargs: P.kwargs) -> T:
        if not self.hardware_started_up:
            raise ValidationError(
                f"Cannot call {func.__name__}: "
                "Hardware not started up. Call startup() first."
            )
        for device in self.devices:
            is_valid, error_msg = validate_device_states(device)
            if not is_valid:
                raise ValidationError(f"Cannot call {func.__name__}: {error_msg}")
        return func(self, *args, **kwargs)

    return wrapper


class TurbySystem(object):
    """The three devices of one instrument.

    Parameters
    ----------
    config : TurbyConfig | Mapping | str | Path
        Anything `turby.system.sysconfig.load_config` accepts
    sleep : Callable[[float], None], optional
        Blocking sleep handed to the motion devices, `time.sleep` by default

    Examples
    --------
    ```python
    with TurbySystem("mock") as system:
        system.chamber.flip(True)
    ```
    """

    hardware_started_up: bool = False
    device_status: dict[str, dict[str, bool | str]]

    def __init__(
        self,
        config: TurbyConfig | Mapping[str, Any] | str,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = load_config(config)
        self.system_name = self.config.system_name
        self.device_status = dict()
        self._sleep = sleep
        self._board = BlinkaBoard()
        self._devices: dict[str, Device] = dict()

        logger.info("Initialising devices for system '{}'.", self.system_name)
        try:
            self.add_device_with_role(self._make_device(self.config.chamber), "chamber")
            self.add_device_with_role(self._make_device(self.config.lamp), "lamp")
            self.add_device_with_role(self._make_device(self.config.sensor), "sensor")
        except Exception:
            logger.exception("Error initialising devices.")
            raise

    def _make_device(self, dev_config: ChamberConfig | LampConfig | SensorConfig):
        try:
            device_class, needs_board = DEVICE_REGISTRY[type(dev_config)]
        except KeyError:
            raise ValueError(f"No device registered for {type(dev_config).__name__}")
        kwargs: dict[str, Any] = {}
        if needs_board:
            kwargs["board"] = self._board
        if isinstance(dev_config, ChamberConfig):
            kwargs["sleep"] = self._sleep
        device = device_class.from_config(dev_config, **kwargs)
        logger.info("Initialised {}", device_class.__name__)
        return device

    def add_device_with_role(self, device: Device, role: str) -> None:
        """Assign `device` to `role`, replacing any previous device.

        Raises
        ------
        ValueError
            If `role` is unknown
        ValidationError
            If the device does not implement the role's protocol
        """
        if role not in ROLE_PROTOCOLS:
            raise ValueError(f"Unknown role: {role}")
        is_valid, error_msg = validate_device_protocol(device, ROLE_PROTOCOLS[role])
        if not is_valid:
            logger.error("Cannot assign role {}: {}", role, error_msg)
            raise ValidationError(f"Cannot assign role {role}: {error_msg}")
        device.role = role
        self._devices[role] = device

    @property
    def devices(self) -> list[Device]:
        return list(self._devices.values())

    @property
    def chamber(self) -> ChamberProtocol:
        return self._devices["chamber"]

    @property
    def lamp(self) -> LampProtocol:
        return self._devices["lamp"]

    @property
    def sensor(self) -> TurbiditySensorProtocol:
        return self._devices["sensor"]

    def get_metadata(self) -> dict[str, Any]:
        """Device metadata plus the configuration, for saving with run data."""
        metadata: dict[str, Any] = {
            role: device.unroll_metadata() for role, device in self._devices.items()
        }
        metadata["system_name"] = self.system_name
        metadata["config"] = self.config.to_dict()
        return metadata

    def connect_devices(self) -> dict[str, dict[str, bool | str]]:
        dev_status: dict[str, dict[str, bool | str]] = dict()
        for role, device in self._devices.items():
            ok, msg = device.open()
            logger.info("{}: {}", role, msg)
            dev_status[role] = {"status": ok, "message": msg}
        self.device_status = dev_status
        return dev_status

    def disconnect_devices(self):
        for role, device in self._devices.items():
            try:
                device.close()
            except Exception:
                logger.exception("Error closing {}. Continuing", role)
        self._board.deinit()

    def startup(self) -> dict[str, dict[str, bool | str]]:
        ret = self.connect_devices()
        self.hardware_started_up = True
        return ret

    def packdown(self):
        """Switch the lamp off and close all devices."""
        lamp = self._devices["lamp"]
        if lamp.is_connected():
            try:
                lamp.set_light(False)
            except Exception:
                logger.exception("Error switching lamp off. Continuing")
        self.disconnect_devices()
        self.hardware_started_up = False
        logger.info("System '{}' packed down.", self.system_name)

    @requires_started_system
    def check_ready(self) -> None:
        """Raise `ValidationError` unless all devices are started and connected."""

    def __enter__(self) -> TurbySystem:
        self.startup()
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.packdown()
