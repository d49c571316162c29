# -- Particle Spawn Patterns -- #

'''
Initial particle placement inside the containment box.

GridSpawn:
    Dense cubic lattice with ceil(cbrt(N)) particles per side,
    anchored at the upper corner of the box (inset by r) and growing
    toward the lower corner. Every coordinate is pulled back by a
    small uniform random amount so the lattice is never perfectly
    symmetric.

JitteredBoxSpawn:
    Regular lattice filling a sub-box with round(size / 2r) particles
    per axis (spacing 2r), each moved by a random unit direction
    scaled by a fraction of r.

Both patterns draw from numpy.random.default_rng(seed), so the same
seed gives the same positions.

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from FluidSim.sph.protocols import SimulationConfig
from FluidSim.sph.particles import ParticleSystem


######################################################################
# -- Dense Grid Fill -- #
######################################################################

@dataclass
class GridSpawn:
    '''
    Dense cube-root lattice in the upper corner of the box.

    Parameters:
    -----------
    particleCount : int
        Number of particles N
    spacingRatio : float
        Lattice spacing as a multiple of the particle radius
    jitter : float
        Maximum per-coordinate offset as a multiple of the radius
    seed : int
        Random seed
    '''

    particleCount: int
    spacingRatio: float = 0.5
    jitter: float = 0.01
    seed: int = 0

    @property
    def particlesPerDimension(self) -> int:
        '''Lattice points per side, ceil(cbrt(N)).'''
        if self.particleCount <= 0:
            return 0
        n = round(self.particleCount ** (1.0 / 3.0))
        # Guard against cbrt rounding just below an exact cube
        while n ** 3 < self.particleCount:
            n += 1
        while n > 1 and (n - 1) ** 3 >= self.particleCount:
            n -= 1
        return n

    def generate(self, config: SimulationConfig) -> np.ndarray:
        '''
        Lattice positions for this pattern.

        Parameters:
        -----------
        config : SimulationConfig
            Supplies the box and particle radius

        Returns:
        --------
        np.ndarray : Positions, shape (particleCount, 3)

        Raises:
        -------
        ValueError : If the count is negative or the lattice does not fit
        '''
        if self.particleCount < 0:
            raise ValueError(f'particleCount must be non-negative, got {self.particleCount}')
        if not self.spacingRatio > 0.0:
            raise ValueError(f'spacingRatio must be positive, got {self.spacingRatio}')
        if self.jitter < 0.0:
            raise ValueError(f'jitter must be non-negative, got {self.jitter}')
        if self.particleCount == 0:
            return np.zeros((0, 3))

        r = config.radius
        spacing = self.spacingRatio * r
        perSide = self.particlesPerDimension

        extent = (perSide - 1) * spacing + self.jitter * r
        available = config.boxSize - 2.0 * r
        if np.any(extent > available):
            raise ValueError(
                f'{self.particleCount} particles at spacing {spacing} need an extent of '
                f'{extent:.4g} per axis but the box only allows {available.min():.4g}'
            )

        # x varies slowest, z fastest; stop once N points are placed
        lattice = np.array(
            np.unravel_index(np.arange(self.particleCount), (perSide, perSide, perSide))
        ).T.astype(float)

        rng = np.random.default_rng(self.seed)
        anchor = config.boundsMax - r
        offsets = rng.uniform(0.0, self.jitter * r, size=(self.particleCount, 3))
        return anchor - lattice * spacing - offsets


######################################################################
# -- Jittered Box Fill -- #
######################################################################

@dataclass
class JitteredBoxSpawn:
    '''
    Jittered lattice filling a sub-box.

    Parameters:
    -----------
    center : tuple[float, float, float]
        Center of the sub-box
    size : tuple[float, float, float]
        Full extent of the sub-box along each axis
    jitterFraction : float
        Offset length as a fraction of the particle radius
    seed : int
        Random seed
    '''

    center: tuple[float, float, float] = (0.0, 0.0, 0.0)
    size: tuple[float, float, float] = (8.0, 8.0, 8.0)
    jitterFraction: float = 0.5
    seed: int = 0

    def countPerAxis(self, radius: float) -> tuple[int, int, int]:
        '''Lattice points per axis, round(size / 2r), at least 1.'''
        return tuple(max(1, int(round(s / (2.0 * radius)))) for s in self.size)

    def generate(self, config: SimulationConfig) -> np.ndarray:
        '''
        Jittered lattice positions for this pattern.

        Parameters:
        -----------
        config : SimulationConfig
            Supplies the box and particle radius

        Returns:
        --------
        np.ndarray : Positions, shape (nx * ny * nz, 3)

        Raises:
        -------
        ValueError : If the sub-box is degenerate or leaves the box
        '''
        center = np.asarray(self.center, dtype=float).reshape(3)
        size = np.asarray(self.size, dtype=float).reshape(3)
        if np.any(size <= 0.0):
            raise ValueError(f'Spawn box size must be positive, got {tuple(size)}')
        if self.jitterFraction < 0.0:
            raise ValueError(f'jitterFraction must be non-negative, got {self.jitterFraction}')

        lower = center - 0.5 * size
        upper = center + 0.5 * size
        if np.any(lower < config.boundsMin) or np.any(upper > config.boundsMax):
            raise ValueError(
                f'Spawn box [{tuple(lower)}, {tuple(upper)}] does not fit inside the '
                f'simulation box [{tuple(config.boundsMin)}, {tuple(config.boundsMax)}]'
            )

        r = config.radius
        counts = self.countPerAxis(r)
        axes = [
            c + (np.arange(n) - 0.5 * (n - 1)) * 2.0 * r
            for c, n in zip(center, counts)
        ]
        xx, yy, zz = np.meshgrid(*axes, indexing='ij')
        lattice = np.column_stack([xx.ravel(), yy.ravel(), zz.ravel()])

        rng = np.random.default_rng(self.seed)
        directions = rng.normal(size=lattice.shape)
        norms = np.linalg.norm(directions, axis=1, keepdims=True)
        directions /= np.where(norms > 0.0, norms, 1.0)

        return lattice + directions * (self.jitterFraction * r)


######################################################################
# -- Particle Creation -- #
######################################################################

def createParticles(
    spawnPattern: GridSpawn | JitteredBoxSpawn,
    config: SimulationConfig,
) -> ParticleSystem:
    '''
    Particle system at rest at the positions of a spawn pattern.

    Parameters:
    -----------
    spawnPattern : GridSpawn | JitteredBoxSpawn
        Initial placement
    config : SimulationConfig
        Supplies the box and particle radius

    Returns:
    --------
    ParticleSystem : New particle system
    '''
    return ParticleSystem.fromPositions(spawnPattern.generate(config))


def particleCountFor(spawnPattern: GridSpawn | JitteredBoxSpawn, config: SimulationConfig) -> int:
    '''Number of particles a pattern places without generating them.'''
    if isinstance(spawnPattern, GridSpawn):
        return spawnPattern.particleCount
    return math.prod(spawnPattern.countPerAxis(config.radius))
