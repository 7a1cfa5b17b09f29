import os

import pytest

from turby.system import TurbySystem

HW_ENV = "TURBY_HW_TESTS"


def pytest_collection_modifyitems(config, items):
    if os.environ.get(HW_ENV):
        return
    skip = pytest.mark.skip(reason=f"Set {HW_ENV}=1 to run tests on the instrument")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="module")
def hw_system():
    """Started system from TURBY_HW_SYSTEM (default: the `turby` system)."""
    system = TurbySystem(os.environ.get("TURBY_HW_SYSTEM", "turby"))
    system.startup()
    yield system
    system.packdown()
