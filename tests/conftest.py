# -- Shared Test Fixtures -- #

'''
Pytest configuration and fixtures for the FluidSim tests.

Sean Bowman [10/19/2026]
'''

from pathlib import Path
import sys

import numpy as np
import pytest

# Add project root to path
projectRoot = Path(__file__).parent.parent
if str(projectRoot) not in sys.path:
    sys.path.insert(0, str(projectRoot))

from FluidSim.sph.protocols import SimulationConfig


@pytest.fixture
def smallBoxConfig() -> SimulationConfig:
    '''Default fluid constants in a 10 x 10 x 10 box.'''
    return SimulationConfig(boxHalfExtents=(5.0, 5.0, 5.0))


@pytest.fixture
def randomPositions():
    '''64 uniformly random positions inside the small box (seeded).'''
    rng = np.random.default_rng(1234)
    return rng.uniform(-4.5, 4.5, size=(64, 3))


@pytest.fixture
def clusteredPositions():
    '''64 positions packed into a 3 x 3 x 3 region so most pairs interact.'''
    rng = np.random.default_rng(99)
    return rng.uniform(-1.5, 1.5, size=(64, 3))
