# Shared handles to the single board computer's buses and pins.
#
# The Blinka/CircuitPython drivers are imported lazily so that the rest of turby
# (and the mock devices) can be used on machines without the hardware.

from __future__ import annotations

from loguru import logger


class BoardImportError(ImportError):
    pass


class BlinkaBoard:
    """Lazily built I2C bus, I2C multiplexer and digital output pins.

    One instance is shared by all devices of a system so the bus and the
    multiplexer are only initialised once.
    """

    def __init__(self):
        self._i2c = None
        self._mux = None
        self._pins = {}

    def i2c(self):
        if self._i2c is None:
            board = _import_board()
            self._i2c = board.I2C()
            logger.debug("I2C bus initialised.")
        return self._i2c

    def mux_channel(self, channel: int):
        """I2C bus behind channel `channel` of the TCA9548A multiplexer."""
        if self._mux is None:
            try:
                import adafruit_tca9548a
            except ImportError as e:
                raise BoardImportError(f"Failed to import TCA9548A driver: {e}")
            self._mux = adafruit_tca9548a.TCA9548A(self.i2c())
            logger.debug("I2C multiplexer initialised.")
        return self._mux[channel]

    def digital_out(self, pin_number: int, value: bool = False):
        """Digital output on GPIO `pin_number` (board pin `D<pin_number>`)."""
        if pin_number in self._pins:
            return self._pins[pin_number]
        board = _import_board()
        try:
            import digitalio
        except ImportError as e:
            raise BoardImportError(f"Failed to import digitalio: {e}")
        pin = digitalio.DigitalInOut(getattr(board, f"D{pin_number}"))
        pin.switch_to_output(value=value)
        self._pins[pin_number] = pin
        logger.debug("GPIO D{} configured as output.", pin_number)
        return pin

    def release_pin(self, pin_number: int):
        pin = self._pins.pop(pin_number, None)
        if pin is not None:
            pin.deinit()

    def deinit(self):
        for pin_number in list(self._pins):
            self.release_pin(pin_number)
        if self._i2c is not None:
            self._i2c.deinit()
            self._i2c = None
        self._mux = None


def _import_board():
    try:
        import board
    except (ImportError, NotImplementedError) as e:
        # blinka raises NotImplementedError on unsupported boards
        raise BoardImportError(f"Failed to import board: {e}")
    return board
