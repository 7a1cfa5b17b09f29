# -*- coding: utf-8 -*-
"""
Utility functions and constants for turby.

This module provides:

- Logging configuration and management
- Atomic saving and loading of measurement data
- Default constants (paths, log levels, sensor timings)

Examples
--------
Recording samples:
```python
from turby.types import Sample
from turby.util import DataRecorder
recorder = DataRecorder("turbiditydata.csv")
recorder.append(Sample(elapsed_ms=10_000, intensity=4981.2))
```

See Also
--------
turby.util.logging : Logging configuration
turby.util.save : Data saving functions
"""
# everything here will be exported at top level of turby

from .logging import clear_log, get_log_filename, shutdown_log, start_log
from .save import (
    DataRecorder,
    read_labeled_series,
    read_series,
    read_values,
    resolve_output_path,
    save_metadata,
    write_labeled_series,
    write_series,
    write_values,
)

__all__ = [
    "clear_log",
    "get_log_filename",
    "shutdown_log",
    "start_log",
    "DataRecorder",
    "read_labeled_series",
    "read_series",
    "read_values",
    "resolve_output_path",
    "save_metadata",
    "write_labeled_series",
    "write_series",
    "write_values",
]
