# -*- coding: utf-8 -*-
"""
Instrument configuration and the system class.

This module provides:

- `TurbySystem`, which builds the chamber, lamp and sensor devices from a
  configuration and manages their connection lifecycle
- Loading configurations from INI files, mappings or system names
- Managing the user systems file (~/.turby/systems.ini)

Examples
--------
Running a flip on the mock system:
```python
from turby.system import TurbySystem
with TurbySystem("mock") as system:
    system.chamber.flip(True)
```

See Also
--------
turby.device : Hardware device implementations
turby.meas : Measurement controllers
"""

from .sysconfig import (
    ConfigVersion,
    config_from_mapping,
    create_default_config,
    install_system_config,
    list_available_systems,
    load_config,
    load_ini_config,
    load_system_config,
    save_system_config,
)
from .system import TurbySystem, requires_started_system

__all__ = [
    "ConfigVersion",
    "config_from_mapping",
    "create_default_config",
    "install_system_config",
    "list_available_systems",
    "load_config",
    "load_ini_config",
    "load_system_config",
    "save_system_config",
    "TurbySystem",
    "requires_started_system",
]
