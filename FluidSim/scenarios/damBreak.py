# -- Dam Break Scenario -- #

'''
Dam break in a closed box.

A block of fluid is released from rest and collapses under gravity,
spreading across the floor and splashing against the far wall. Two
initial layouts are available:

1. 'grid': the dense cube-root lattice hanging from the upper corner
   of the box (the fluid falls before it spreads)
2. 'jitteredBox': a jittered column standing on the floor against
   the -x wall

The scenario produces a validated SimulationConfig and the matching
spawn pattern; it does not run anything.

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from FluidSim import constants as const
from FluidSim.sph.protocols import SimulationConfig
from FluidSim.scenarios.spawnPatterns import GridSpawn, JitteredBoxSpawn


SPAWN_TYPES: tuple[str, ...] = ('grid', 'jitteredBox')


######################################################################
# -- Dam Break Configuration -- #
######################################################################

@dataclass
class DamBreakConfig:
    '''
    Configuration for a dam break scenario.

    Parameters:
    -----------
    boxHalfExtent : float | None
        Half-extent of a cubic box centered at the origin
        (None keeps the box of the base configuration)
    particleCount : int
        Particle count for the 'grid' layout
    spawn : str
        Initial layout, 'grid' or 'jitteredBox'
    columnFraction : tuple[float, float, float]
        Fluid column size as a fraction of the box ('jitteredBox' only)
    neighborSearch : str
        'sortedOffset' or 'bucketList'
    nSteps : int
        Number of steps to run
    outputInterval : int
        Steps between exported frames
    seed : int
        Random seed of the spawn pattern
    obstacleRadius : float | None
        Radius of a sphere obstacle at the box center (None for no obstacle)
    '''

    boxHalfExtent: float | None = 10.0
    particleCount: int = 4096
    spawn: str = 'grid'
    columnFraction: tuple[float, float, float] = (0.4, 0.8, 1.0)
    neighborSearch: str = 'sortedOffset'
    nSteps: int = 1000
    outputInterval: int = 10
    seed: int = 0
    obstacleRadius: float | None = None

    @classmethod
    def small(cls) -> DamBreakConfig:
        '''
        Small box for quick testing.

        512 particles, runs in seconds.
        '''
        return cls(
            boxHalfExtent=6.0,
            particleCount=512,
            nSteps=200,
            outputInterval=5,
        )

    @classmethod
    def standard(cls) -> DamBreakConfig:
        '''
        Standard dam break.

        4096 particles in the default box.
        '''
        return cls(
            boxHalfExtent=const.boxHalfExtents[0],
            particleCount=4096,
            nSteps=1000,
            outputInterval=10,
        )

    @classmethod
    def fromPreset(cls, name: str) -> DamBreakConfig:
        '''
        Preset by name.

        Raises:
        -------
        ValueError : If the preset name is unknown
        '''
        if name == 'small':
            return cls.small()
        elif name == 'standard':
            return cls.standard()
        else:
            raise ValueError(f'Unknown preset: {name} (expected small or standard)')


######################################################################
# -- Scenario Creation -- #
######################################################################

def createDamBreak(
    damConfig: DamBreakConfig,
    baseConfig: SimulationConfig | None = None,
) -> tuple[SimulationConfig, GridSpawn | JitteredBoxSpawn]:
    '''
    Create a dam break simulation from configuration.

    The fluid constants come from baseConfig (defaults if None); the
    neighbor search and obstacle come from damConfig, and so does the
    box unless damConfig.boxHalfExtent is None.

    Parameters:
    -----------
    damConfig : DamBreakConfig
        Scenario configuration
    baseConfig : SimulationConfig | None
        Fluid parameters to start from

    Returns:
    --------
    tuple[SimulationConfig, GridSpawn | JitteredBoxSpawn] :
        Ready-to-run configuration and spawn pattern

    Raises:
    -------
    ValueError : If the spawn type is unknown or the result is invalid
    '''
    base = baseConfig if baseConfig is not None else SimulationConfig()
    overrides = base.toDict()
    overrides['neighborSearch'] = damConfig.neighborSearch
    if damConfig.boxHalfExtent is not None:
        h = damConfig.boxHalfExtent
        overrides['boxCenter'] = (0.0, 0.0, 0.0)
        overrides['boxHalfExtents'] = (h, h, h)
    if damConfig.neighborSearch != 'sortedOffset':
        overrides['hashTableSize'] = None
    if damConfig.obstacleRadius is not None:
        overrides['obstacleCenter'] = overrides['boxCenter']
        overrides['obstacleRadius'] = damConfig.obstacleRadius

    simConfig = SimulationConfig.fromDict(overrides)

    ######################################################################
    # Spawn pattern
    ######################################################################

    if damConfig.spawn == 'grid':
        spawnPattern = GridSpawn(
            particleCount=damConfig.particleCount,
            seed=damConfig.seed,
        )
    elif damConfig.spawn == 'jitteredBox':
        # Column standing on the floor against the -x wall, inset by r
        r = simConfig.radius
        lower = simConfig.boundsMin + r
        inner = simConfig.boxSize - 2.0 * r
        size = np.asarray(damConfig.columnFraction, dtype=float) * inner
        center = lower + 0.5 * size
        center[2] = simConfig.boxCenter[2]
        spawnPattern = JitteredBoxSpawn(
            center=tuple(center.tolist()),
            size=tuple(size.tolist()),
            seed=damConfig.seed,
        )
    else:
        raise ValueError(
            f'Unknown spawn pattern: {damConfig.spawn} '
            f'(expected one of {", ".join(SPAWN_TYPES)})'
        )

    return (simConfig, spawnPattern)
