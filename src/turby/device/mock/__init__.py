from .mock_chamber import MockChamber
from .mock_lamp import MockLamp
from .mock_lux import MockLuxSensor

__all__ = ["MockChamber", "MockLamp", "MockLuxSensor"]
