"""Device base class and hardware abstraction layer.

All instrument devices (chamber actuators, lamps, light sensors) inherit from
`Device` and implement the methods of the protocol for their intended role.

The Device class provides:
1. Configuration validation
2. Construction from a typed device config
3. Connection handling
4. Attribute access for metadata

Devices connect to the role system by implementing protocol methods, which are
validated when the device is assigned a role in a `TurbySystem`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Type, TypeVar

from loguru import logger

if TYPE_CHECKING:
    from turby.types import ChamberConfig, LampConfig, SensorConfig

D = TypeVar("D", bound="Device")


class Device:
    """Base class for all hardware devices in turby.

    Specific device implementations inherit from this class and implement the
    methods required by their role protocol (see `turby.types.protocols`).

    Required Methods
    --------------
    All device implementations must override these methods:

    - open(): Connect to the hardware
    - close(): Disconnect from the hardware
    - is_connected(): Check connection status

    Attributes
    ----------
    required_config : dict[str, Type | tuple[Type, ...]]
        Required configuration parameters and their types
    role : str
        Role this device has been assigned in a system, "" if unassigned

    Examples
    --------
    Creating a new device implementation:

    ```python
    class MyLamp(Device):
        required_config = {"ledpin": int}

        def __init__(self, **config_kwargs):
            super().__init__(**config_kwargs)
            self._connected = False

        def open(self) -> tuple[bool, str]:
            self._connected = True
            return True, "Connected successfully"

        def close(self):
            self._connected = False

        def is_connected(self) -> bool:
            return self._connected

        def set_light(self, on: bool) -> None:
            ...
    ```
    """

    required_config: dict[str, Type | tuple[Type, ...]] = {}  # Required config keys

    role: str = ""

    def __init__(self, **config_kwargs):
        for key, value in config_kwargs.items():
            setattr(self, key, value)
        for key, value in self.required_config.items():
            if not hasattr(self, key):
                logger.error(
                    f"Device {self.__class__.__name__} missing required config key: "
                    + f"{key}"
                )
                raise ValueError(
                    f"Device {self.__class__.__name__} missing required config "
                    + f"key: {key}"
                )
            if not isinstance(getattr(self, key), value) or (
                isinstance(getattr(self, key), bool) and bool not in _as_tuple(value)
            ):
                logger.error(
                    f"Device {self.__class__.__name__} config key {key} "
                    + f"has wrong type: {type(getattr(self, key))} (expected {value})"
                )
                raise ValueError(
                    f"Device {self.__class__.__name__} config key {key} has "
                    + f"wrong type: {type(getattr(self, key))} (expected {value})"
                )

    @classmethod
    def from_config(
        cls: Type[D], config: ChamberConfig | LampConfig | SensorConfig, **kwargs
    ) -> D:
        """Build a device from its typed config.

        Parameters
        ----------
        config : ChamberConfig | LampConfig | SensorConfig
            Device config, its `type` discriminator is dropped
        **kwargs
            Extra non-config arguments, e.g. a shared board or a sleep function
        """
        params: dict[str, Any] = config.to_dict()
        params.pop("type", None)
        return cls(**params, **kwargs)

    def open(self) -> tuple[bool, str]:
        raise NotImplementedError()

    def close(self):
        raise NotImplementedError()

    def is_connected(self) -> bool:
        raise NotImplementedError()

    def get_all_attrs(self):
        """
        Function to return all of the managed attributes of the class
        Managed attributes are the ones that start with a underscore
        """
        attrs = {}
        for key, value in self.__dict__.items():
            # single underscore attr are managed
            if key[0] == "_" and not key.startswith(f"_{self.__class__.__name__}"):
                if isinstance(value, (bool, int, float, str)) or value is None:
                    attrs[key[1:]] = value
        return attrs

    def unroll_metadata(self):
        # config keys plus managed attributes
        metadata = {key: getattr(self, key) for key in self.required_config}
        metadata.update(self.get_all_attrs())
        metadata["device_type"] = self.__class__.__name__
        metadata["role"] = self.role
        return metadata


def _as_tuple(value) -> tuple:
    return value if isinstance(value, tuple) else (value,)
