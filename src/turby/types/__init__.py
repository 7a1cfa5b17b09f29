"""
Configuration, data and protocol types shared across turby.

1. Configuration
    - `TurbyConfig`, the immutable instrument configuration
    - Per-device configs, discriminated on their `type` field
    - `Gain` and `IntegrationTime` sensor calibration enumerations

2. Data
    - `Sample`/`SampleSeries` for timed dissociation runs
    - `LabeledSample`/`LabeledSeries` for manual reads

3. Hardware abstraction
    - Protocols define the methods each role (chamber, lamp, sensor) requires
    - Validation helpers check configs and devices against them

Examples
--------
Loading a configuration from a mapping:
```python
from turby.types import TurbyConfig
config = TurbyConfig.from_dict({
    "chamber": {"type": "mock"},
    "lamp": {"type": "mock"},
    "sensor": {"type": "mock"},
    "tumbletime": 5,
    "sampletime": 180,
    "settletime": 10,
    "lamptime": 5,
})
```

See Also
--------
turby.system.sysconfig : Loading configurations from INI files
turby.device : Device implementations
"""

from .config import (
    TESTING_CONFIG,
    ChamberConfig,
    Gain,
    GPIOLampConfig,
    IntegrationTime,
    LampConfig,
    MockChamberConfig,
    MockLampConfig,
    MockSensorConfig,
    SensorConfig,
    ServoChamberConfig,
    StepperChamberConfig,
    TSL2591SensorConfig,
    TurbyConfig,
)
from .data import LabeledSample, LabeledSeries, Sample, SampleSeries
from .protocols import ChamberProtocol, LampProtocol, TurbiditySensorProtocol
from .validation import (
    ConfigError,
    ValidationError,
    check_config,
    validate_config,
    validate_device_protocol,
    validate_device_states,
)

__all__ = [
    "TESTING_CONFIG",
    "ChamberConfig",
    "Gain",
    "GPIOLampConfig",
    "IntegrationTime",
    "LampConfig",
    "MockChamberConfig",
    "MockLampConfig",
    "MockSensorConfig",
    "SensorConfig",
    "ServoChamberConfig",
    "StepperChamberConfig",
    "TSL2591SensorConfig",
    "TurbyConfig",
    "LabeledSample",
    "LabeledSeries",
    "Sample",
    "SampleSeries",
    "ChamberProtocol",
    "LampProtocol",
    "TurbiditySensorProtocol",
    "ConfigError",
    "ValidationError",
    "check_config",
    "validate_config",
    "validate_device_protocol",
    "validate_device_states",
]
