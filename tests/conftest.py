"""
Shared test configuration.

Clears CHOTT_* environment variables so a developer's .env or shell
cannot change defaults under test.
"""

import os

import numpy as np
import pytest

from chott.core.config import WorldConfig
from chott.core.locations import load_location_graph


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("CHOTT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def graph():
    return load_location_graph()


@pytest.fixture
def config():
    return WorldConfig(random_seed=42)


@pytest.fixture
def rng():
    return np.random.default_rng(42)
