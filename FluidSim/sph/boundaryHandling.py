# -- SPH Boundary Conditions -- #

'''
Boundary enforcement for the particle fluid.

The containment box is a hard clamp: after every drift each axis of
every particle is checked independently, and a particle whose
sphere (radius r) pokes through a wall is pushed back to touch it
while its velocity on that axis is multiplied by the damping factor
d in [-1, 0] (d < 0 reflects, |d| < 1 loses energy).

An optional static sphere obstacle is enforced before the box so the
box invariant is always the last thing applied.

References:
-----------
Kim (2017) -- Fluid Engine Development, pp. 140-143

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

import numpy as np

from FluidSim.sph.protocols import SimulationConfig
from FluidSim.sph.particles import ParticleSystem


class BoxBoundary:
    '''
    Axis-aligned containment box.

    After enforce(), every particle satisfies
    boxMin + r <= x <= boxMax - r on every axis.

    Parameters:
    -----------
    config : SimulationConfig
        Supplies the box, particle radius and damping
    '''

    def __init__(self, config: SimulationConfig) -> None:
        self._radius = config.radius
        self._damping = config.damping
        self._lower = config.boundsMin + config.radius
        self._upper = config.boundsMax - config.radius

    @property
    def lower(self) -> np.ndarray:
        '''Lowest allowed particle center on each axis.'''
        return self._lower

    @property
    def upper(self) -> np.ndarray:
        '''Highest allowed particle center on each axis.'''
        return self._upper

    def enforce(self, particles: ParticleSystem) -> None:
        '''
        Clamp positions into the box and damp wall-normal velocity.

        The lower wall takes precedence on each axis; the upper wall is
        only tested for particles that did not hit the lower one.

        Parameters:
        -----------
        particles : ParticleSystem
            Particle system to constrain (modified in place)
        '''
        positions = particles.positions
        velocities = particles.velocities

        for d in range(3):
            # Lower wall
            belowMin = positions[:, d] < self._lower[d]
            velocities[belowMin, d] *= self._damping
            positions[belowMin, d] = self._lower[d]

            # Upper wall
            aboveMax = ~belowMin & (positions[:, d] > self._upper[d])
            velocities[aboveMax, d] *= self._damping
            positions[aboveMax, d] = self._upper[d]


class SphereObstacle:
    '''
    Static spherical obstacle inside the box.

    Particles closer than R + r to the center are projected onto the
    surface, and the part of their velocity pointing into the sphere
    is reflected and scaled by |damping|.

    Parameters:
    -----------
    center : np.ndarray
        Sphere center, shape (3,)
    radius : float
        Sphere radius R
    particleRadius : float
        Particle radius r
    damping : float
        Boundary damping d in [-1, 0]
    '''

    def __init__(
        self,
        center: np.ndarray,
        radius: float,
        particleRadius: float,
        damping: float,
    ) -> None:
        if not radius > 0.0:
            raise ValueError(f'Obstacle radius must be positive, got {radius}')

        self._center = np.asarray(center, dtype=float).reshape(3)
        self._radius = float(radius)
        self._contactDistance = self._radius + float(particleRadius)
        self._restitution = abs(float(damping))

    @property
    def center(self) -> np.ndarray:
        return self._center

    @property
    def radius(self) -> float:
        return self._radius

    @classmethod
    def fromConfig(cls, config: SimulationConfig) -> SphereObstacle | None:
        '''Obstacle described by the config, or None if there is none.'''
        if config.obstacleCenter is None:
            return None
        return cls(
            center=np.asarray(config.obstacleCenter),
            radius=config.obstacleRadius,
            particleRadius=config.radius,
            damping=config.damping,
        )

    def enforce(self, particles: ParticleSystem) -> None:
        '''
        Push penetrating particles out of the sphere.

        Parameters:
        -----------
        particles : ParticleSystem
            Particle system to constrain (modified in place)
        '''
        offset = particles.positions - self._center
        dist = np.linalg.norm(offset, axis=1)
        inside = dist < self._contactDistance
        if not np.any(inside):
            return

        # Outward normal; a particle exactly at the center is pushed up
        normals = np.zeros((np.count_nonzero(inside), 3))
        normals[:, 1] = 1.0
        insideDist = dist[inside]
        separated = insideDist > 0.0
        normals[separated] = offset[inside][separated] / insideDist[separated, np.newaxis]

        particles.positions[inside] = self._center + normals * self._contactDistance

        velocities = particles.velocities[inside]
        normalSpeed = np.einsum('ij,ij->i', velocities, normals)
        approaching = normalSpeed < 0.0
        correction = ((1.0 + self._restitution) * normalSpeed * approaching)[:, np.newaxis] * normals
        particles.velocities[inside] = velocities - correction
