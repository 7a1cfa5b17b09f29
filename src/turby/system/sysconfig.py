"""System configuration handling for Turby.

This module loads, validates and manages instrument configurations stored in
INI files.

Configuration versions:
- v1: Flat key/value dictionaries (the v1 scripting interface)
- v2: INI format with per-device sections of dotted keys

The INI file format uses a section per system, with the following structure:

[turby]
# Cycle timing (seconds)
tumbletime = 5
sampletime = 180
settletime = 10
lamptime = 5
endforward = true
datafile = turbiditydata.csv

# Sensor calibration
gain = medium
integrationtime = 200

# Device configurations
device.chamber.type = servo
device.chamber.servoaddress = 2
device.chamber.tflip = 1
device.lamp.type = gpio
device.lamp.ledpin = 0
device.sensor.type = tsl2591
device.sensor.luxaddress = 0

Search order for a named system:
1. ~/.turby/systems.ini
2. package/sysconfig/systems/<system_name>.ini

See Also
--------
turby.types.config : Configuration dataclasses
turby.system.system : System class built from a configuration
"""

from __future__ import annotations

from configparser import ConfigParser
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from loguru import logger
from mashumaro.exceptions import (
    InvalidFieldValue,
    MissingField,
    SuitableVariantNotFoundError,
)

from turby.types import (
    ConfigError,
    MockChamberConfig,
    MockLampConfig,
    MockSensorConfig,
    TurbyConfig,
    check_config,
)
from turby.util import defaults

DEVICE_ROLES = ("chamber", "lamp", "sensor")

# v1 flat key names, grouped by the device they configure
SERVO_KEYS = frozenset(
    {
        "servoaddress",
        "servochannel",
        "forwardspeed",
        "forwardstop",
        "reversespeed",
        "reversestop",
        "tflip",
    }
)
STEPPER_KEYS = frozenset(
    {"steppin", "dirpin", "enablepin", "flipsteps", "stepdelay", "forwardlevel"}
)
LAMP_KEYS = frozenset({"ledpin"})
SENSOR_KEYS = frozenset({"luxaddress"})


class ConfigVersion(str, Enum):
    """Configuration version enumeration.

    Versions:
    - LEGACY: Flat key/value dictionaries (v1)
    - CURRENT: INI format (v2)
    """

    LEGACY = "v1"
    CURRENT = "v2"


def package_config_dir() -> Path:
    import turby

    return Path(turby.__file__).parent / "sysconfig" / "systems"


def user_systems_file() -> Path:
    return defaults.USER_CONFIG_DIR / "systems.ini"


# =============================================================================
# Parsing
# =============================================================================


def _coerce_value(raw: str) -> Any:
    """Convert an INI string to int, float, bool, None or str (in that order)."""
    value = raw.strip()
    if value.lower() in ("none", "null", ""):
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False
    return value


def _check_unknown_keys(data: Mapping[str, Any]):
    known = set(TurbyConfig.__dataclass_fields__)
    unknown = sorted(set(data) - known)
    if unknown:
        msg = f"Unknown configuration keys: {', '.join(unknown)}"
        logger.error(msg)
        raise ConfigError(msg)


def _build_config(data: Mapping[str, Any]) -> TurbyConfig:
    _check_unknown_keys(data)
    for role in DEVICE_ROLES:
        if role not in data:
            msg = f"Missing device configuration: {role}"
            logger.error(msg)
            raise ConfigError(msg)
    try:
        config = TurbyConfig.from_dict(dict(data))
    except (
        MissingField,
        InvalidFieldValue,
        SuitableVariantNotFoundError,
        ValueError,
        TypeError,
    ) as e:
        logger.error("Failed to parse configuration: {}", e)
        raise ConfigError(str(e)) from e
    return check_config(config)


def _split_flat(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """Group the v1 flat device keys into per-device dicts."""
    data = {}
    chamber, lamp, sensor = {}, {}, {}
    for key, value in mapping.items():
        if key in SERVO_KEYS or key in STEPPER_KEYS:
            chamber[key] = value
        elif key in LAMP_KEYS:
            lamp[key] = value
        elif key in SENSOR_KEYS:
            sensor[key] = value
        else:
            data[key] = value

    if STEPPER_KEYS & chamber.keys():
        servo_only = sorted(SERVO_KEYS & chamber.keys())
        if servo_only:
            msg = f"Stepper chamber given servo keys: {', '.join(servo_only)}"
            logger.error(msg)
            raise ConfigError(msg)
        chamber["type"] = "stepper"
    elif chamber:
        chamber["type"] = "servo"
    if chamber:
        data["chamber"] = chamber
    if lamp:
        data["lamp"] = {"type": "gpio", **lamp}
    if sensor:
        data["sensor"] = {"type": "tsl2591", **sensor}
    return data


def _split_dotted(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """Group `device.<role>.<param>` keys into per-device dicts."""
    data: dict[str, Any] = {}
    for key, value in mapping.items():
        if key.startswith("device."):
            parts = key.split(".")
            if len(parts) != 3 or parts[1] not in DEVICE_ROLES:
                msg = f"Invalid device key: {key}"
                logger.error(msg)
                raise ConfigError(msg)
            data.setdefault(parts[1], {})[parts[2]] = value
        else:
            data[key] = value
    return data


def config_from_mapping(
    mapping: Mapping[str, Any], system_name: str | None = None
) -> TurbyConfig:
    """Build a validated configuration from a mapping.

    Three layouts are accepted:

    - nested: `{"chamber": {"type": "servo", ...}, "lamp": {...}, ...}`
    - dotted: `{"device.chamber.type": "servo", ...}` (as in the INI files)
    - flat, with the v1 key names (`ledpin`, `luxaddress`,
      `servoaddress`, `tflip`, ...). The chamber backend is inferred:
      stepper keys select the stepper, otherwise the servo.

    Parameters
    ----------
    mapping : Mapping[str, Any]
        Configuration values
    system_name : str, optional
        Overrides any `system_name` in the mapping

    Returns
    -------
    TurbyConfig

    Raises
    ------
    ConfigError
        If the configuration is incomplete or invalid
    """
    mapping = dict(mapping)
    if any(key.startswith("device.") for key in mapping):
        data = _split_dotted(mapping)
    elif any(isinstance(mapping.get(role), Mapping) for role in DEVICE_ROLES):
        data = {
            key: dict(value) if isinstance(value, Mapping) else value
            for key, value in mapping.items()
        }
    else:
        data = _split_flat(mapping)
    if system_name is not None:
        data["system_name"] = system_name
    return _build_config(data)


def _config_from_section(parser: ConfigParser, section: str) -> TurbyConfig:
    values = {
        key: _coerce_value(value)
        for key, value in parser[section].items()
        if key != "version"
    }
    logger.debug("Loading system '{}' with keys: {}", section, sorted(values))
    return config_from_mapping(values, system_name=section)


def _find_section(parser: ConfigParser, system_name: str) -> str | None:
    # Case-insensitive section lookup
    for section in parser.sections():
        if section.lower() == system_name.lower():
            return section
    return None


def load_ini_config(path: str | Path, system_name: str | None = None) -> TurbyConfig:
    """Load a system from an explicit INI file.

    If `system_name` is not given the file must hold exactly one system.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    parser = ConfigParser()
    parser.read(path)
    if system_name is None:
        sections = parser.sections()
        if len(sections) != 1:
            msg = (
                f"{path} holds {len(sections)} systems ({', '.join(sections)}), "
                + "a system name is required"
            )
            logger.error(msg)
            raise ConfigError(msg)
        return _config_from_section(parser, sections[0])
    section = _find_section(parser, system_name)
    if section is None:
        raise ConfigError(f"System '{system_name}' not found in {path}")
    return _config_from_section(parser, section)


def load_system_config(system_name: str) -> TurbyConfig:
    """Load a named system configuration.

    Checks both the user configuration (~/.turby/systems.ini) and the package
    defaults. User configuration takes precedence.

    Parameters
    ----------
    system_name : str
        Name of the system configuration to load

    Returns
    -------
    TurbyConfig
        Loaded and validated configuration

    Raises
    ------
    ConfigError
        If the system is not found in either location, or is invalid
    """
    user_file = user_systems_file()
    package_file = package_config_dir() / f"{system_name.lower()}.ini"

    for file in (user_file, package_file):
        if not file.exists():
            continue
        parser = ConfigParser()
        parser.read(file)
        section = _find_section(parser, system_name)
        if section is not None:
            logger.info("Loading system '{}' from {}", section, file)
            return _config_from_section(parser, section)

    raise ConfigError(
        f"System '{system_name}' not found in:\n"
        f"- User config: {user_file}\n"
        f"- Package config: {package_file}"
    )


def load_config(
    source: TurbyConfig | Mapping[str, Any] | str | Path | None = None,
    system_name: str | None = None,
) -> TurbyConfig:
    """Resolve any supported configuration source to a validated config.

    Parameters
    ----------
    source : TurbyConfig | Mapping | str | Path, optional
        A config object, a mapping (see `config_from_mapping`), a path to an
        INI file, or a system name. Defaults to the `turby` system.
    system_name : str, optional
        Section to read when `source` is an INI file with several systems.

    Returns
    -------
    TurbyConfig
    """
    if source is None:
        source = defaults.DEFAULT_SYSTEM_NAME
    if isinstance(source, TurbyConfig):
        return check_config(source)
    if isinstance(source, Mapping):
        return config_from_mapping(source, system_name=system_name)
    path = Path(source).expanduser()
    if path.suffix.lower() == ".ini" or path.is_file():
        return load_ini_config(path, system_name)
    return load_system_config(str(source))


# =============================================================================
# Writing
# =============================================================================


def _format_value(value: Any) -> str:
    if value is None:
        return "none"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def config_to_section(config: TurbyConfig) -> dict[str, str]:
    """Flatten a configuration into INI section items."""
    items = {}
    for key, value in config.to_dict().items():
        if key == "system_name":
            continue
        if key in DEVICE_ROLES:
            for param, param_value in value.items():
                items[f"device.{key}.{param}"] = _format_value(param_value)
        else:
            items[key] = _format_value(value)
    return items


def mock_config(system_name: str = "mock") -> TurbyConfig:
    """Hardware-free configuration with the standard cycle timings."""
    return TurbyConfig(
        system_name=system_name,
        chamber=MockChamberConfig(tflip=1.0),
        lamp=MockLampConfig(),
        sensor=MockSensorConfig(),
        tumbletime=5.0,
        sampletime=180.0,
        settletime=10.0,
        lamptime=5.0,
    )


_FILE_HEADER = """\
# Turby System Configurations
# ---------------------------
#
# Each section is a system configuration. Durations are in seconds.
#
# Device configuration format:
# device.<chamber|lamp|sensor>.type: servo, stepper, gpio, tsl2591 or mock
# device.<chamber|lamp|sensor>.<parameter>: Device specific parameters

"""


def create_default_config(file_path: str | Path) -> Path:
    """Create a systems file with an example `mock` system.

    Existing sections in the file are preserved.
    """
    file_path = Path(file_path).expanduser()
    logger.debug("Creating default systems file at {}", file_path)

    config = ConfigParser()
    config["DEFAULT"] = {"version": ConfigVersion.CURRENT.value}
    config["mock"] = config_to_section(mock_config())

    if file_path.exists():
        existing = ConfigParser()
        existing.read(file_path)
        for section in existing.sections():
            if section not in config.sections():
                logger.debug("Preserving existing section: {}", section)
                config[section] = {
                    key: value
                    for key, value in existing[section].items()
                    if key != "version"
                }

    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w") as f:
        f.write(_FILE_HEADER)
        config.write(f)
    return file_path


def save_system_config(config: TurbyConfig, file_path: str | Path) -> Path:
    """Add (or replace) the section for `config` in an INI file."""
    file_path = Path(file_path).expanduser()
    parser = ConfigParser()
    if file_path.exists():
        parser.read(file_path)
    else:
        parser["DEFAULT"] = {"version": ConfigVersion.CURRENT.value}
    parser[config.system_name] = config_to_section(config)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w") as f:
        parser.write(f)
    return file_path


def list_available_systems() -> dict[str, str]:
    """List all available system configurations.

    Returns
    -------
    dict[str, str]
        Dictionary mapping system names to their source ('user' or 'package')

    Notes
    -----
    User configurations take precedence over package defaults. Configurations
    are not validated.

    Examples
    --------
    >>> list_available_systems()
    {'mock': 'package', 'stepper': 'package', 'turby': 'user'}
    """
    systems = {}

    config_dir = package_config_dir()
    if config_dir.exists():
        for file in sorted(config_dir.glob("*.ini")):
            parser = ConfigParser()
            parser.read(file)
            for section in parser.sections():
                systems[section] = "package"

    user_file = user_systems_file()
    if user_file.exists():
        parser = ConfigParser()
        parser.read(user_file)
        for section in parser.sections():
            systems[section] = "user"

    return systems


def install_system_config(name: str) -> Path:
    """Copy a package system configuration into the user systems file.

    Raises
    ------
    FileNotFoundError
        If the package configuration doesn't exist
    ValueError
        If the system already exists in the user configuration
    """
    package_file = package_config_dir() / f"{name.lower()}.ini"
    if not package_file.exists():
        raise FileNotFoundError(f"Package configuration '{name}' not found")

    parser = ConfigParser()
    parser.read(package_file)
    section = _find_section(parser, name)
    if section is None:
        raise ValueError(f"System '{name}' not found in package configuration")

    user_file = user_systems_file()
    user_config = ConfigParser()
    if user_file.exists():
        user_config.read(user_file)
        if _find_section(user_config, name) is not None:
            raise ValueError(f"System '{name}' already exists in user configuration")
    else:
        user_config["DEFAULT"] = {"version": ConfigVersion.CURRENT.value}

    user_config[section] = {
        key: value for key, value in parser[section].items() if key != "version"
    }

    user_file.parent.mkdir(parents=True, exist_ok=True)
    with user_file.open("w") as f:
        user_config.write(f)
    logger.info("Installed system '{}' to {}", section, user_file)
    return user_file

