"""
Copyright (c) 2020, the Decred developers
See LICENSE for details
"""

import random

import pytest

from fp61 import field
from fp61.util import helpers


@pytest.fixture
def rng():
    """
    A deterministic generator for reproducible tests.
    """
    return random.Random(0)


@pytest.fixture
def randBytes(rng):
    def _randBytes(low=0, high=50):
        return bytes(rng.getrandbits(8) for _ in range(rng.randint(low, high)))

    return _randBytes


@pytest.fixture(scope="module")
def prepareLogger(request):
    helpers.prepareLogging()


@pytest.fixture
def restoreMultiplier():
    """
    Put the selected multiplier back after a test changes it.
    """
    name = field.getMultiplier()
    yield
    field.setMultiplier(name)
