"""Configuration types for the instrument and its devices."""

from dataclasses import dataclass
from enum import Enum, IntEnum

from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig
from mashumaro.types import Discriminator


class Gain(str, Enum):
    """Light sensor gain levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    MAX = "max"


class IntegrationTime(IntEnum):
    """Light sensor integration windows, in milliseconds."""

    IT_100 = 100
    IT_200 = 200
    IT_300 = 300
    IT_400 = 400
    IT_500 = 500
    IT_600 = 600


# ------------------------------------------------------------------------------------
# Device configs, discriminated on `type` (the value used in INI files)
# ------------------------------------------------------------------------------------


@dataclass(kw_only=True, frozen=True)
class ChamberConfig(DataClassDictMixin):
    """Base configuration for the chamber actuator.

    Subclassed per motion backend, the subclass is selected by `type`.
    """

    class Config(BaseConfig):
        discriminator = Discriminator(
            field="type",
            include_subtypes=True,
        )

    type: str


@dataclass(kw_only=True, frozen=True)
class ServoChamberConfig(ChamberConfig):
    """Continuous rotation servo on a PCA9685 behind the I2C multiplexer.

    Throttle commands are in [-1, 1], `tflip` is the time in seconds the drive
    throttle is applied before the stop throttle.
    """

    type: str = "servo"
    servoaddress: int
    servochannel: int = 0
    forwardspeed: float
    forwardstop: float = 0.0
    reversespeed: float
    reversestop: float = 0.0
    tflip: float


@dataclass(kw_only=True, frozen=True)
class StepperChamberConfig(ChamberConfig):
    """Step/direction stepper driver on GPIO pins."""

    type: str = "stepper"
    steppin: int
    dirpin: int
    enablepin: int | None = None
    flipsteps: int
    stepdelay: float
    forwardlevel: bool = True  # dir pin level for forward motion


@dataclass(kw_only=True, frozen=True)
class MockChamberConfig(ChamberConfig):
    type: str = "mock"
    tflip: float = 0.0


@dataclass(kw_only=True, frozen=True)
class LampConfig(DataClassDictMixin):
    class Config(BaseConfig):
        discriminator = Discriminator(
            field="type",
            include_subtypes=True,
        )

    type: str


@dataclass(kw_only=True, frozen=True)
class GPIOLampConfig(LampConfig):
    type: str = "gpio"
    ledpin: int


@dataclass(kw_only=True, frozen=True)
class MockLampConfig(LampConfig):
    type: str = "mock"


@dataclass(kw_only=True, frozen=True)
class SensorConfig(DataClassDictMixin):
    class Config(BaseConfig):
        discriminator = Discriminator(
            field="type",
            include_subtypes=True,
        )

    type: str


@dataclass(kw_only=True, frozen=True)
class TSL2591SensorConfig(SensorConfig):
    type: str = "tsl2591"
    luxaddress: int


@dataclass(kw_only=True, frozen=True)
class MockSensorConfig(SensorConfig):
    """Synthetic turbidity signal: an exponential approach to `baseline`.

    The intensity of the n-th reading is
    `baseline + amplitude * exp(-n / decay)` plus gaussian noise.
    """

    type: str = "mock"
    baseline: float = 1000.0
    amplitude: float = 4000.0
    decay: float = 20.0
    noise_sigma: float = 0.0
    seed: int | None = None


# ------------------------------------------------------------------------------------
# Instrument config
# ------------------------------------------------------------------------------------


@dataclass(kw_only=True, frozen=True, repr=False)
class TurbyConfig(DataClassDictMixin):
    """Complete, immutable instrument configuration.

    Durations are in seconds. `datafile` is either a full output path or a
    prefix (no data extension) that gets a timestamp and `.csv` appended at
    the start of each run.

    Notes
    -----
    `settletime >= tumbletime` is expected but deliberately not enforced.
    `stopcondition` is reserved and ignored.
    """

    system_name: str = "turby"
    chamber: ChamberConfig
    lamp: LampConfig
    sensor: SensorConfig
    tumbletime: float
    sampletime: float
    settletime: float
    lamptime: float
    endforward: bool = True
    gain: Gain = Gain.MEDIUM
    integrationtime: IntegrationTime = IntegrationTime.IT_200
    datafile: str = "turbiditydata.csv"
    stopcondition: str | None = None

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(system_name={self.system_name}, "
            f"chamber={self.chamber.type}, lamp={self.lamp.type}, "
            f"sensor={self.sensor.type}, tumbletime={self.tumbletime}, "
            f"sampletime={self.sampletime}, settletime={self.settletime}, "
            f"lamptime={self.lamptime}, endforward={self.endforward}, "
            f"gain={self.gain.value}, integrationtime={int(self.integrationtime)}, "
            f"datafile={self.datafile})"
        )


# Default test configuration
TESTING_CONFIG = TurbyConfig(
    system_name="testing",
    chamber=MockChamberConfig(tflip=1.0),
    lamp=MockLampConfig(),
    sensor=MockSensorConfig(),
    tumbletime=5.0,
    sampletime=180.0,
    settletime=10.0,
    lamptime=5.0,
    endforward=True,
    gain=Gain.MEDIUM,
    integrationtime=IntegrationTime.IT_200,
    datafile="turbiditydata.csv",
)
