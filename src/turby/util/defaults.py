# -*- coding: utf-8 -*-

import pathlib
import tempfile

DEFAULT_LOGLEVEL = "INFO"
TEST_LOGLEVEL = "TRACE"
TEMP_DIR = tempfile.gettempdir()
SINGLE_LINE_ERR_LOG = False  # reformat tracebacks into a single line

USER_CONFIG_DIR = pathlib.Path.home() / ".turby"
DEFAULT_SYSTEM_NAME = "turby"

SENSOR_SETTLE_TIME = 1.0  # seconds, after any gain/integration time change
MEASURE_INTERVAL = 1.0  # seconds between single-shot readings
DATA_EXTENSIONS = (".csv", ".txt", ".tsv")
