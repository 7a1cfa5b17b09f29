# -*- coding: utf-8 -*-
"""# Turby

Control software for the Turby tumbling turbidity bioreactor.

A sample chamber is flipped back and forth to dissociate its contents. At a
fixed interval the chamber is held still, the contents are left to settle, and
the light transmitted through them is read by a TSL2591 sensor. Readings are
saved as a time series as they are taken.

- `turby.scripting`: run the cycle, self test and setup routines from Python
- `turby.cli`: the `turby` command
- `turby.system`: configurations and the system built from them
- `turby.meas`: the controllers and routines
- `turby.device`: servo/stepper chamber, lamp and light sensor drivers

## See Also

- `README.md` for installation and wiring
"""

from ._version import __version__
