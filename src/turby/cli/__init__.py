"""
Command-line interface for turby.

This module provides the `turby` command, with sub-commands to:

- Run the dissociation cycle
- Run the self test and move the chamber to its load/eject positions
- Take manual labelled readings and single-shot measurements
- Manage system configurations

The CLI is built using the Click framework. All instrument commands take
`--config/-c` (a system name or an INI file path) and the logging options.

Examples
--------
Running the cycle on the hardware-free mock system:
```bash
$ turby dissociate -c mock
```

Installing the default servo system to ~/.turby/systems.ini:
```bash
$ turby config install turby
```

See Also
--------
turby.scripting : The functions behind each command


CLI Tree
--------

```
$ turby --tree
cli
└── config
    └── create
    └── install
    └── list
    └── show
└── dissociate
└── eject
└── load
└── manual
└── measure
└── selftest
```
"""

from .base import cli, tree_option

__all__ = ["cli", "tree_option"]
