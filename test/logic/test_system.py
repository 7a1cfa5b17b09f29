"""Tests for building and running a system from a configuration."""

import pytest

from turby.device import GPIOLamp, MockChamber, MockLamp, MockLuxSensor, ServoChamber
from turby.device import TSL2591Sensor
from turby.system import TurbySystem
from turby.types import TESTING_CONFIG, ConfigError, ValidationError


class NotALamp:
    role = ""


class TestLocalSystem:
    def test_devices_from_config(self, system):
        assert isinstance(system.chamber, MockChamber)
        assert isinstance(system.lamp, MockLamp)
        assert isinstance(system.sensor, MockLuxSensor)
        assert [device.role for device in system.devices] == [
            "chamber",
            "lamp",
            "sensor",
        ]

    def test_startup_connects(self, system):
        assert system.hardware_started_up
        assert all(device.is_connected() for device in system.devices)
        assert set(system.device_status) == {"chamber", "lamp", "sensor"}
        system.check_ready()

    def test_packdown(self, system):
        system.lamp.set_light(True)
        system.packdown()
        assert not system.lamp.is_on
        assert not system.hardware_started_up
        assert not any(device.is_connected() for device in system.devices)

    def test_metadata(self, system):
        metadata = system.get_metadata()
        assert metadata["system_name"] == "testing"
        assert metadata["chamber"]["device_type"] == "MockChamber"
        assert metadata["sensor"]["role"] == "sensor"
        assert metadata["config"]["tumbletime"] == 5.0


def test_not_started():
    system = TurbySystem(TESTING_CONFIG)
    with pytest.raises(ValidationError, match="startup"):
        system.check_ready()


def test_context_manager():
    with TurbySystem(TESTING_CONFIG) as system:
        assert system.hardware_started_up
    assert not system.hardware_started_up


def test_hardware_system_builds_without_hardware():
    # devices only touch the board when opened
    system = TurbySystem("turby")
    assert isinstance(system.chamber, ServoChamber)
    assert isinstance(system.lamp, GPIOLamp)
    assert isinstance(system.sensor, TSL2591Sensor)


def test_role_protocol_checked():
    system = TurbySystem(TESTING_CONFIG)
    with pytest.raises(ValidationError, match="LampProtocol"):
        system.add_device_with_role(NotALamp(), "lamp")
    with pytest.raises(ValueError, match="pump"):
        system.add_device_with_role(MockLamp(), "pump")


def test_invalid_config():
    with pytest.raises(ConfigError):
        TurbySystem({"ledpin": 0})
