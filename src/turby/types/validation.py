"""Validation utilities for configurations and device roles.

This module provides validation functions to ensure:
1. A loaded configuration is complete and physically sensible
2. Devices assigned to a role implement that role's protocol
3. Devices are connected before a controller drives them
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .config import (
    MockChamberConfig,
    MockSensorConfig,
    ServoChamberConfig,
    StepperChamberConfig,
    TurbyConfig,
)

if TYPE_CHECKING:
    from turby.device import Device


class ValidationError(Exception):
    """Base exception for validation errors."""

    pass


class ConfigError(ValueError):
    """Raised when a configuration is incomplete or inconsistent."""

    pass


def validate_config(config: TurbyConfig) -> tuple[bool, str]:
    """Validate the values of a deserialized configuration.

    Type and presence checks happen during deserialization, this covers the
    value ranges that the types can't express.

    Parameters
    ----------
    config : TurbyConfig
        Configuration to validate

    Returns
    -------
    tuple[bool, str]
        (is_valid, error_message)
    """
    for name in ("tumbletime", "sampletime", "settletime", "lamptime"):
        value = getattr(config, name)
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return False, f"{name} must be a number, got {value!r}"
        if value <= 0:
            return False, f"{name} must be positive, got {value}"

    if not isinstance(config.endforward, bool):
        return False, f"endforward must be a boolean, got {config.endforward!r}"

    if not config.datafile:
        return False, "datafile must not be empty"

    chamber = config.chamber
    if isinstance(chamber, ServoChamberConfig):
        if chamber.tflip <= 0:
            return False, f"tflip must be positive, got {chamber.tflip}"
        if chamber.tflip >= config.tumbletime:
            return (
                False,
                f"tflip ({chamber.tflip}) must be shorter than "
                + f"tumbletime ({config.tumbletime})",
            )
        for name in ("forwardspeed", "forwardstop", "reversespeed", "reversestop"):
            if not -1.0 <= getattr(chamber, name) <= 1.0:
                return False, f"{name} must be within [-1, 1]"
    elif isinstance(chamber, StepperChamberConfig):
        if chamber.flipsteps < 1:
            return False, f"flipsteps must be at least 1, got {chamber.flipsteps}"
        if chamber.stepdelay < 0:
            return False, f"stepdelay must not be negative, got {chamber.stepdelay}"
    elif isinstance(chamber, MockChamberConfig):
        if chamber.tflip < 0:
            return False, f"tflip must not be negative, got {chamber.tflip}"

    if isinstance(config.sensor, MockSensorConfig) and config.sensor.decay <= 0:
        return False, f"decay must be positive, got {config.sensor.decay}"

    return True, ""


def check_config(config: TurbyConfig) -> TurbyConfig:
    """Validate a configuration, raising `ConfigError` if invalid.

    Also logs (but accepts) the latent settle/tumble constraint and the
    reserved `stopcondition` key.
    """
    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logger.error("Invalid configuration '{}': {}", config.system_name, error_msg)
        raise ConfigError(error_msg)

    if config.settletime < config.tumbletime:
        logger.warning(
            "settletime ({}) is shorter than tumbletime ({}), "
            + "contents may not settle before measuring.",
            config.settletime,
            config.tumbletime,
        )
    if config.stopcondition is not None:
        logger.warning(
            "stopcondition '{}' is not implemented and will be ignored.",
            config.stopcondition,
        )
    return config


def validate_device_protocol(device: Device, protocol: type) -> tuple[bool, str]:
    """Check a device implements the protocol required by its role.

    Parameters
    ----------
    device : Device
        Device to check
    protocol : type
        A `runtime_checkable` protocol class

    Returns
    -------
    tuple[bool, str]
        (is_valid, error_message)
    """
    if not isinstance(device, protocol):
        return (
            False,
            f"Device {device.__class__.__name__} does not implement "
            + f"{protocol.__name__}",
        )
    return True, ""


def validate_device_states(device: Device) -> tuple[bool, str]:
    """Validate device state.

    Parameters
    ----------
    device : Device
        Device to validate

    Returns
    -------
    tuple[bool, str]
        (is_valid, error_message)
    """
    if not device.is_connected():
        return False, f"Device {device.__class__.__name__} is not connected"
    return True, ""
