"""Tests for the self test, positioning and single-shot measurement routines."""

import pytest

from turby.device import MockLuxSensor
from turby.meas import (
    measure_to_file,
    move_to_eject_position,
    move_to_load_position,
    self_test,
)
from turby.types import Gain, IntegrationTime
from turby.util import read_values


class TestSelfTest:
    def test_flips_and_lamp(self, system, clock):
        readings = self_test(system, rotations=4, sleep=clock.sleep)
        assert len(readings) == 4
        assert system.chamber.flips == [False, True, False, True]
        # lamp follows direction, off at the end
        assert system.lamp.history == [False, True, False, True, False]

    def test_tumble_period(self, system, clock):
        self_test(system, rotations=2, sleep=clock.sleep)
        # settle, then (flip 1 s + wait 4 s) per rotation
        assert clock.now == pytest.approx(1.0 + 2 * 5.0)

    def test_interrupted(self, system, clock):
        def interrupt(clock):
            if clock.now > 20:
                raise KeyboardInterrupt

        clock.on_sleep = interrupt
        with pytest.raises(KeyboardInterrupt):
            self_test(system, sleep=clock.sleep)
        assert not system.lamp.is_on


def test_load_position(system):
    move_to_load_position(system)
    assert system.chamber.flips == [False]


def test_eject_position(system):
    move_to_eject_position(system)
    assert system.chamber.flips == [True]


class TestMeasureToFile:
    def test_readings_saved(self, tmp_path, clock):
        sensor = MockLuxSensor()
        path = tmp_path / "readings.txt"
        values = measure_to_file(sensor, path, nmeasurements=3, sleep=clock.sleep)
        assert len(values) == 3
        assert read_values(path) == pytest.approx(values)
        assert sensor.configured == [(Gain.MEDIUM, IntegrationTime.IT_200)]
        # settle, then one second between readings
        assert clock.sleeps == [1.0, 1.0, 1.0, 1.0]

    def test_calibration(self, tmp_path, clock):
        sensor = MockLuxSensor()
        measure_to_file(
            sensor,
            tmp_path / "readings.txt",
            gain=Gain.MAX,
            integration_time=IntegrationTime.IT_600,
            nmeasurements=1,
            sleep=clock.sleep,
        )
        assert sensor.configured == [(Gain.MAX, IntegrationTime.IT_600)]

    def test_existing_file_untouched(self, tmp_path, clock):
        sensor = MockLuxSensor()
        path = tmp_path / "readings.txt"
        path.write_text("previous\n")
        with pytest.raises(FileExistsError):
            measure_to_file(sensor, path, sleep=clock.sleep)
        assert path.read_text() == "previous\n"
        assert sensor.configured == []
        assert sensor.nsamples == 0
        assert clock.sleeps == []

    def test_needs_a_measurement(self, tmp_path, clock):
        with pytest.raises(ValueError):
            measure_to_file(
                MockLuxSensor(), tmp_path / "r.txt", nmeasurements=0, sleep=clock.sleep
            )
