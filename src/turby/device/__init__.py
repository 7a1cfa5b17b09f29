# -*- coding: utf-8 -*-
"""
Hardware device implementations for turby.

This module provides classes for interfacing with the instrument hardware:

- Chamber actuators (continuous rotation servo, stepper)
- Illumination LED
- TSL2591 visible light sensor
- Mock implementations of each, for testing without hardware

Each device class implements the common interface defined by the Device base
class, plus the protocol of its role (see `turby.types.protocols`).

Examples
--------
Creating a device instance from its config:
```python
from turby.device import MockChamber
from turby.types import MockChamberConfig
chamber = MockChamber.from_config(MockChamberConfig(tflip=1.0))
chamber.open()
chamber.flip(True)
```

See Also
--------
turby.system : Building all devices of an instrument from a configuration
"""

from .board import BlinkaBoard, BoardImportError
from .chamber import ServoChamber, StepperChamber
from .device import Device
from .lamp import GPIOLamp
from .lux import TSL2591Sensor
from .mock import MockChamber, MockLamp, MockLuxSensor

__all__ = [
    "BlinkaBoard",
    "BoardImportError",
    "Device",
    "GPIOLamp",
    "MockChamber",
    "MockLamp",
    "MockLuxSensor",
    "ServoChamber",
    "StepperChamber",
    "TSL2591Sensor",
]
