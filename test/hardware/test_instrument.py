import time

import pytest

from turby.meas import measure_to_file, move_to_eject_position, move_to_load_position
from turby.types import Gain, IntegrationTime
from turby.util import read_values
from turby.util.defaults import SENSOR_SETTLE_TIME

pytestmark = pytest.mark.hardware


def test_devices_connected(hw_system):
    assert all(status["status"] for status in hw_system.device_status.values())


def test_load_then_eject(hw_system):
    move_to_load_position(hw_system)
    move_to_eject_position(hw_system)


def test_lamp_changes_reading(hw_system):
    sensor, lamp = hw_system.sensor, hw_system.lamp
    sensor.configure(Gain.MEDIUM, IntegrationTime.IT_200)
    lamp.set_light(False)
    time.sleep(SENSOR_SETTLE_TIME)
    dark = sensor.sample()
    lamp.set_light(True)
    try:
        time.sleep(SENSOR_SETTLE_TIME)
        lit = sensor.sample()
    finally:
        lamp.set_light(False)
    assert lit > dark


@pytest.mark.slow
def test_measure_to_file(hw_system, tmp_path):
    path = tmp_path / "readings.txt"
    values = measure_to_file(hw_system.sensor, path, nmeasurements=3)
    assert read_values(path) == pytest.approx(values)
