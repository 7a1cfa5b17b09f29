# TSL2591 ambient light sensor, read through the I2C multiplexer.
# Register level configuration is handled by the adafruit_tsl2591 driver.

from __future__ import annotations

from loguru import logger

from turby.device.board import BlinkaBoard, BoardImportError
from turby.device.device import Device
from turby.types import Gain, IntegrationTime


class TSL2591Sensor(Device):
    luxaddress: int
    required_config = {"luxaddress": int}

    def __init__(self, board: BlinkaBoard | None = None, **config):
        super().__init__(**config)
        self._board = board if board is not None else BlinkaBoard()
        self._sensor = None
        self._driver = None
        self._gain = ""
        self._integration_time = 0

    def open(self):
        try:
            import adafruit_tsl2591
        except ImportError as e:
            raise BoardImportError(f"Failed to import TSL2591 driver: {e}")
        self._driver = adafruit_tsl2591
        self._sensor = adafruit_tsl2591.TSL2591(
            self._board.mux_channel(self.luxaddress)
        )
        return True, f"TSL2591Sensor opened on mux channel {self.luxaddress}"

    def close(self):
        if self._sensor is not None:
            self._sensor.disable()
        self._sensor = None

    def is_connected(self) -> bool:
        return self._sensor is not None

    def configure(self, gain: Gain, integration_time: IntegrationTime) -> None:
        """Set gain and integration time.

        The caller must allow `SENSOR_SETTLE_TIME` before the next `sample`.
        """
        gain = Gain(gain)
        integration_time = IntegrationTime(integration_time)
        self._sensor.gain = getattr(self._driver, f"GAIN_{_GAIN_NAMES[gain]}")
        self._sensor.integration_time = getattr(
            self._driver, f"INTEGRATIONTIME_{int(integration_time)}MS"
        )
        self._gain = gain.value
        self._integration_time = int(integration_time)
        logger.debug(
            "TSL2591 configured: gain={}, integration time={} ms",
            gain.value,
            int(integration_time),
        )

    def sample(self) -> float:
        """Raw visible light count."""
        return float(self._sensor.visible)


_GAIN_NAMES = {
    Gain.LOW: "LOW",
    Gain.MEDIUM: "MED",
    Gain.HIGH: "HIGH",
    Gain.MAX: "MAX",
}
