"""
Measurement controllers and routines.

- `DissociationController`: the timed tumble/settle/measure cycle
- `ManualReadController`: labelled single reads of hand loaded samples
- Routines: self test, load/eject positioning, single-shot measurement

See Also
--------
turby.scripting : Entry points building a system and running these
"""

from .cancel import CancellationToken
from .cycle import CycleState, DissociationController, never_stop, num_tumble
from .manual import ManualReadController
from .routines import (
    measure_to_file,
    move_to_eject_position,
    move_to_load_position,
    self_test,
)

__all__ = [
    "CancellationToken",
    "CycleState",
    "DissociationController",
    "never_stop",
    "num_tumble",
    "ManualReadController",
    "measure_to_file",
    "move_to_eject_position",
    "move_to_load_position",
    "self_test",
]
