"""Pytest config to ensure project root is on sys.path during test collection.

Some environments run pytest with a different working directory which can
lead to "No module named 'candb'" import errors. This file ensures the
repository root is available to the test process and provides the sample
DBC fixtures shared by the test modules.
"""
import os
import sys

import pytest

_HERE = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(_HERE, "..", ".."))  # repo root

# Insert project root at front of sys.path if not already present
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

DATA_DIR = os.path.join(_HERE, "data")

from candb import metrics  # noqa: E402
from candb.models.signal import DbcSignal, SignalLayout  # noqa: E402


@pytest.fixture
def sample_dbc_path():
    return os.path.join(DATA_DIR, "sample.dbc")


@pytest.fixture
def latin1_dbc_path():
    return os.path.join(DATA_DIR, "latin1.dbc")


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset_all()
    yield
    metrics.reset_all()


@pytest.fixture
def engine_speed_layout():
    return SignalLayout(
        name="Engine_Speed",
        start_bit=24,
        bit_length=16,
        little_endian=True,
        signed=False,
        scale=0.125,
        offset=0.0,
        min=0.0,
        max=8031.88,
        unit="rpm",
        receivers="Vector__XXX",
    )


@pytest.fixture
def engine_speed(engine_speed_layout):
    return DbcSignal("Engine_Speed", definition=engine_speed_layout)
