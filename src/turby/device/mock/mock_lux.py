from __future__ import annotations

import numpy as np
from loguru import logger

from turby.device.device import Device
from turby.types import Gain, IntegrationTime


class MockLuxSensor(Device):  # Protocol compliance checked by the system
    """Light sensor returning a synthetic dissociation curve.

    Cloudy contents scatter less light as they dissociate, so the n-th reading
    relaxes exponentially from `baseline + amplitude` towards `baseline`.
    """

    baseline: float
    amplitude: float
    decay: float
    noise_sigma: float
    required_config = {
        "baseline": (int, float),
        "amplitude": (int, float),
        "decay": (int, float),
        "noise_sigma": (int, float),
    }

    def __init__(self, **config):
        config.setdefault("baseline", 1000.0)
        config.setdefault("amplitude", 4000.0)
        config.setdefault("decay", 20.0)
        config.setdefault("noise_sigma", 0.0)
        seed = config.pop("seed", None)
        super().__init__(**config)
        self._rng = np.random.default_rng(seed)
        self._connected = False
        self._nsamples = 0
        self._gain = ""
        self._integration_time = 0
        self.configured: list[tuple[Gain, IntegrationTime]] = []

    def open(self):
        self._connected = True
        return True, "MockLuxSensor opened"

    def close(self):
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    @property
    def nsamples(self) -> int:
        return self._nsamples

    def configure(self, gain: Gain, integration_time: IntegrationTime) -> None:
        gain = Gain(gain)
        integration_time = IntegrationTime(integration_time)
        self.configured.append((gain, integration_time))
        self._gain = gain.value
        self._integration_time = int(integration_time)
        logger.debug(
            "MockLuxSensor configured: gain={}, integration time={} ms",
            gain.value,
            int(integration_time),
        )

    def sample(self) -> float:
        value = self.baseline + self.amplitude * np.exp(-self._nsamples / self.decay)
        if self.noise_sigma:
            value += self._rng.normal(0.0, self.noise_sigma)
        self._nsamples += 1
        return float(value)
