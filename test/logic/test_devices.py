"""Tests for the device drivers, with the board and driver libraries faked."""

import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from turby.device import (
    GPIOLamp,
    MockChamber,
    MockLamp,
    MockLuxSensor,
    ServoChamber,
    StepperChamber,
    TSL2591Sensor,
)
from turby.types import (
    ChamberProtocol,
    Gain,
    IntegrationTime,
    LampProtocol,
    MockSensorConfig,
    ServoChamberConfig,
    StepperChamberConfig,
    TurbiditySensorProtocol,
)

SERVO_CONFIG = ServoChamberConfig(
    servoaddress=2, forwardspeed=0.2, reversespeed=-0.2, tflip=1.0
)
STEPPER_CONFIG = StepperChamberConfig(
    steppin=20, dirpin=21, enablepin=16, flipsteps=4, stepdelay=0.01
)


class FakePin:
    def __init__(self, value=False):
        self.history = [value]
        self.deinit = MagicMock()

    @property
    def value(self):
        return self.history[-1]

    @value.setter
    def value(self, value):
        self.history.append(value)


class FakeServo:
    def __init__(self):
        self.history = []

    @property
    def throttle(self):
        return self.history[-1]

    @throttle.setter
    def throttle(self, value):
        self.history.append(value)


@pytest.fixture
def board():
    pins = {}

    def digital_out(pin_number, value=False):
        return pins.setdefault(pin_number, FakePin(value))

    board = MagicMock()
    board.digital_out.side_effect = digital_out
    board.pins = pins
    return board


def test_protocols():
    assert isinstance(MockChamber(), ChamberProtocol)
    assert isinstance(MockLamp(), LampProtocol)
    assert isinstance(MockLuxSensor(), TurbiditySensorProtocol)
    assert not isinstance(MockLamp(), ChamberProtocol)


def test_required_config_type_checked():
    with pytest.raises(ValueError, match="servoaddress"):
        ServoChamber(
            board=MagicMock(),
            servoaddress="2",
            servochannel=0,
            forwardspeed=0.2,
            forwardstop=0.0,
            reversespeed=-0.2,
            reversestop=0.0,
            tflip=1.0,
        )


def test_bool_is_not_an_int():
    with pytest.raises(ValueError, match="ledpin"):
        GPIOLamp(board=MagicMock(), ledpin=True)


def test_missing_config():
    with pytest.raises(ValueError, match="luxaddress"):
        TSL2591Sensor(board=MagicMock())


class TestServoChamber:
    def test_flip_applies_throttle_then_stop(self, board):
        sleeps = []
        chamber = ServoChamber.from_config(SERVO_CONFIG, board=board, sleep=sleeps.append)
        chamber._servo = FakeServo()
        chamber.flip(True)
        chamber.flip(False)
        assert chamber._servo.history == [0.2, 0.0, -0.2, 0.0]
        assert sleeps == [1.0, 1.0]
        assert chamber.flip_time == 1.0

    def test_open(self, board, monkeypatch):
        pca = MagicMock()
        motor = MagicMock()
        monkeypatch.setitem(
            sys.modules, "adafruit_pca9685", SimpleNamespace(PCA9685=lambda bus: pca)
        )
        monkeypatch.setitem(sys.modules, "adafruit_motor", SimpleNamespace(servo=motor))
        chamber = ServoChamber.from_config(SERVO_CONFIG, board=board)
        ok, msg = chamber.open()
        assert ok
        board.mux_channel.assert_called_once_with(2)
        assert pca.frequency == ServoChamber.PWM_FREQUENCY
        motor.ContinuousServo.assert_called_once_with(pca.channels[0])
        assert chamber.is_connected()
        chamber.close()
        pca.deinit.assert_called_once()
        assert not chamber.is_connected()


class TestStepperChamber:
    def test_flip_time(self, board):
        chamber = StepperChamber.from_config(STEPPER_CONFIG, board=board)
        assert chamber.flip_time == pytest.approx(0.04)

    def test_flip_pulses(self, board):
        sleeps = []
        chamber = StepperChamber.from_config(
            STEPPER_CONFIG, board=board, sleep=sleeps.append
        )
        chamber.open()
        step, direction = board.pins[20], board.pins[21]

        chamber.flip(True)
        assert direction.value is True
        assert step.history == [False] + [True, False] * 4
        assert sleeps == [0.005] * 8

        chamber.flip(False)
        assert direction.value is False

    def test_enable_pin_active_low(self, board):
        chamber = StepperChamber.from_config(STEPPER_CONFIG, board=board)
        chamber.open()
        enable = board.pins[16]
        assert enable.value is False
        chamber.close()
        assert enable.value is True
        assert not chamber.is_connected()


class TestGPIOLamp:
    def test_switching(self, board):
        lamp = GPIOLamp(board=board, ledpin=0)
        lamp.open()
        pin = board.pins[0]
        lamp.set_light(True)
        assert pin.value is True
        lamp.set_light(False)
        assert pin.value is False

    def test_close_switches_off(self, board):
        lamp = GPIOLamp(board=board, ledpin=0)
        lamp.open()
        lamp.set_light(True)
        lamp.close()
        assert board.pins[0].value is False
        board.release_pin.assert_called_once_with(0)
        assert not lamp.is_connected()


class TestTSL2591Sensor:
    @pytest.fixture
    def driver(self, monkeypatch):
        sensor = SimpleNamespace(visible=1234, disable=MagicMock())
        module = SimpleNamespace(
            TSL2591=MagicMock(return_value=sensor),
            GAIN_LOW="gain-low",
            GAIN_MED="gain-med",
            GAIN_HIGH="gain-high",
            GAIN_MAX="gain-max",
            **{f"INTEGRATIONTIME_{ms}MS": f"it-{ms}" for ms in range(100, 700, 100)},
        )
        monkeypatch.setitem(sys.modules, "adafruit_tsl2591", module)
        return module

    def test_configure_and_sample(self, board, driver):
        sensor = TSL2591Sensor(board=board, luxaddress=0)
        sensor.open()
        board.mux_channel.assert_called_once_with(0)
        sensor.configure(Gain.HIGH, IntegrationTime.IT_300)
        assert sensor._sensor.gain == "gain-high"
        assert sensor._sensor.integration_time == "it-300"
        assert sensor.sample() == 1234.0

    def test_configure_from_values(self, board, driver):
        sensor = TSL2591Sensor(board=board, luxaddress=0)
        sensor.open()
        sensor.configure("medium", 200)
        assert sensor._sensor.gain == "gain-med"
        assert sensor.get_all_attrs()["gain"] == "medium"

    def test_close_disables(self, board, driver):
        sensor = TSL2591Sensor(board=board, luxaddress=0)
        sensor.open()
        raw = sensor._sensor
        sensor.close()
        raw.disable.assert_called_once()
        assert not sensor.is_connected()


class TestMockLuxSensor:
    def test_decaying_signal(self):
        sensor = MockLuxSensor.from_config(MockSensorConfig())
        values = [sensor.sample() for _ in range(3)]
        assert values[0] == pytest.approx(5000.0)
        assert values[0] > values[1] > values[2] > 1000.0
        assert sensor.nsamples == 3

    def test_seeded_noise_is_reproducible(self):
        config = MockSensorConfig(noise_sigma=10.0, seed=42)
        a = MockLuxSensor.from_config(config)
        b = MockLuxSensor.from_config(config)
        assert [a.sample() for _ in range(5)] == [b.sample() for _ in range(5)]

    def test_metadata(self):
        sensor = MockLuxSensor.from_config(MockSensorConfig())
        sensor.configure(Gain.LOW, IntegrationTime.IT_100)
        metadata = sensor.unroll_metadata()
        assert metadata["device_type"] == "MockLuxSensor"
        assert metadata["gain"] == "low"
        assert metadata["integration_time"] == 100


def test_mock_chamber_records_flips():
    sleeps = []
    chamber = MockChamber(sleep=sleeps.append, tflip=0.5)
    assert chamber.position is None
    chamber.flip(True)
    chamber.flip(False)
    assert chamber.flips == [True, False]
    assert chamber.position is False
    assert sleeps == [0.5, 0.5]
