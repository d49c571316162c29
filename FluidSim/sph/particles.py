# -- SPH Particle System -- #

'''
Dataclass holding the particle fluid state.

Stores positions, velocities, forces, densities and pressures as
contiguous NumPy arrays (one row per particle) so every phase of a
step can run as a vectorized operation over all particles.

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class ParticleSystem:
    '''
    Particle fluid state.

    Parameters:
    -----------
    positions : np.ndarray
        Particle positions, shape (N, 3)
    velocities : np.ndarray
        Particle velocities, shape (N, 3)
    forces : np.ndarray
        Net force from the last force pass, shape (N, 3)
    densities : np.ndarray
        Densities from the last density pass, shape (N,)
    pressures : np.ndarray
        Pressures from the last density pass, shape (N,)
    '''

    positions: np.ndarray
    velocities: np.ndarray
    forces: np.ndarray
    densities: np.ndarray
    pressures: np.ndarray

    @property
    def nParticles(self) -> int:
        '''Number of particles.'''
        return self.positions.shape[0]

    @property
    def isReadOnly(self) -> bool:
        '''True if the arrays are flagged read-only (a snapshot).'''
        return not self.positions.flags.writeable

    def copy(self, readOnly: bool = False) -> ParticleSystem:
        '''
        Deep copy of every array.

        Parameters:
        -----------
        readOnly : bool
            Flag the copied arrays as non-writeable

        Returns:
        --------
        ParticleSystem : Independent copy
        '''
        copied = ParticleSystem(
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            forces=self.forces.copy(),
            densities=self.densities.copy(),
            pressures=self.pressures.copy(),
        )
        if readOnly:
            for array in (copied.positions, copied.velocities, copied.forces,
                          copied.densities, copied.pressures):
                array.flags.writeable = False
        return copied

    def kineticEnergy(self, mass: float) -> float:
        '''
        Total kinetic energy.

        KE = (1/2) * m * sum_i |v_i|^2

        Parameters:
        -----------
        mass : float
            Particle mass

        Returns:
        --------
        float : Kinetic energy
        '''
        speedsSq = np.einsum('ij,ij->i', self.velocities, self.velocities)
        return float(0.5 * mass * np.sum(speedsSq))

    def maxSpeed(self) -> float:
        '''Maximum velocity magnitude (0 for an empty system).'''
        if self.nParticles == 0:
            return 0.0
        return float(np.max(np.linalg.norm(self.velocities, axis=1)))

    @classmethod
    def fromPositions(
        cls,
        positions: np.ndarray,
        velocities: np.ndarray | None = None,
    ) -> ParticleSystem:
        '''
        Create a particle system at rest (or with given velocities).

        Parameters:
        -----------
        positions : np.ndarray
            Initial positions, shape (N, 3)
        velocities : np.ndarray | None
            Initial velocities, shape (N, 3); zero if None

        Returns:
        --------
        ParticleSystem : New particle system with zeroed derived fields
        '''
        positions = np.array(positions, dtype=float, copy=True).reshape(-1, 3)
        nParticles = positions.shape[0]

        if velocities is None:
            velocities = np.zeros((nParticles, 3))
        else:
            velocities = np.array(velocities, dtype=float, copy=True).reshape(nParticles, 3)

        return cls(
            positions=positions,
            velocities=velocities,
            forces=np.zeros((nParticles, 3)),
            densities=np.zeros(nParticles),
            pressures=np.zeros(nParticles),
        )
