# -- SPH Density, Pressure and Force Solver -- #

'''
Density/pressure and force passes of the particle fluid.

Both passes are pure maps over read-only inputs:

    newState[i] = f(state[i], neighbors(i), state)

Each particle's result depends only on the previous phase's output,
never on values written during the same phase, so the per-pair work
is evaluated for all particles at once with NumPy and gathered back
to the owning particle. Nothing passed in is modified.

Density and pressure (Muller et al. 2003, Eq. 3 and 12):
    rho_i = m * sum_j W_poly6(|x_i - x_j|^2) + rho_floor
    p_i   = k * (rho_i - rho_0)

Negative pressure (a local density deficit) pulls particles
together, giving a surface-tension-like cohesion.

Forces (Kim 2017, pp. 136-138):
    f_pressure_i  = -m^2 * sum_j (p_i/rho_i^2 + p_j/rho_j^2) * gradW(d_ij)
    f_viscosity_i =  mu * m^2 * sum_j (v_j - v_i) / rho_j * lapW(d_ij)
    f_gravity_i   =  m * g

Pairs at zero distance contribute nothing.

References:
-----------
Muller et al. (2003) -- Particle-Based Fluid Simulation for
    Interactive Applications
Kim (2017) -- Fluid Engine Development

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

import numpy as np

from FluidSim.sph.protocols import SimulationConfig
from FluidSim.sph.kernels import MullerKernels
from FluidSim.sph.spatialIndex import NeighborList


class SphSolver:
    '''
    Computes densities, pressures and net forces from neighbor lists.

    Parameters:
    -----------
    config : SimulationConfig
        Simulation configuration (radius, mass, fluid constants)
    kernels : MullerKernels | None
        Smoothing kernels (built from config.radius if None)
    '''

    def __init__(self, config: SimulationConfig, kernels: MullerKernels | None = None) -> None:
        self._config = config
        self._kernels = kernels or MullerKernels(config.radius)
        self._mass = config.mass
        self._mass2 = config.mass * config.mass
        self._gravity = np.asarray(config.gravity, dtype=float)

    @property
    def kernels(self) -> MullerKernels:
        return self._kernels

    ######################################################################
    # -- Density and Pressure -- #
    ######################################################################

    def computeDensityPressure(
        self,
        positions: np.ndarray,
        neighbors: NeighborList,
    ) -> tuple[np.ndarray, np.ndarray]:
        '''
        Density by kernel summation and pressure from the linear EOS.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 3)
        neighbors : NeighborList
            Neighbors of every particle from the current rebuild

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] : (densities, pressures), each shape (N,)
        '''
        nParticles = len(positions)
        owners, others = neighbors.pairs()

        dr = positions[owners] - positions[others]
        distSq = np.einsum('ij,ij->i', dr, dr)
        weights = self._kernels.densityKernelBatch(distSq)

        kernelSums = np.bincount(owners, weights=weights, minlength=nParticles)
        densities = self._mass * kernelSums + self._config.densityFloor
        pressures = self._config.gasConstant * (densities - self._config.restDensity)

        return (densities, pressures)

    ######################################################################
    # -- Forces -- #
    ######################################################################

    def computeForces(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        densities: np.ndarray,
        pressures: np.ndarray,
        neighbors: NeighborList,
    ) -> np.ndarray:
        '''
        Net pressure, viscosity and gravity force on every particle.

        Must follow a fresh computeDensityPressure() on the same
        positions and neighbor list.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 3)
        velocities : np.ndarray
            Particle velocities, shape (N, 3)
        densities : np.ndarray
            Densities from this step's density pass, shape (N,)
        pressures : np.ndarray
            Pressures from this step's density pass, shape (N,)
        neighbors : NeighborList
            Neighbors of every particle

        Returns:
        --------
        np.ndarray : Forces, shape (N, 3)
        '''
        nParticles = len(positions)
        forces = np.zeros((nParticles, 3))

        owners, others = neighbors.pairs()
        dr = positions[owners] - positions[others]
        dist = np.sqrt(np.einsum('ij,ij->i', dr, dr))

        # Coincident particles have no direction; skip the pair entirely
        separated = dist > 0.0
        owners, others = owners[separated], others[separated]
        dr, dist = dr[separated], dist[separated]

        if len(owners) > 0:
            direction = dr / dist[:, np.newaxis]

            # --- Pressure force --- #
            pressureTerm = (
                pressures[owners] / (densities[owners] ** 2)
                + pressures[others] / (densities[others] ** 2)
            )
            gradientScale = self._kernels.pressureGradientScaleBatch(dist)
            pressureForce = (
                -self._mass2 * (pressureTerm * gradientScale)[:, np.newaxis] * direction
            )

            # --- Viscosity force --- #
            laplacian = self._kernels.viscosityLaplacianBatch(dist)
            viscosityScale = self._config.viscosity * self._mass2 * laplacian / densities[others]
            viscosityForce = (
                viscosityScale[:, np.newaxis] * (velocities[others] - velocities[owners])
            )

            # Gather every pair's contribution onto its owner
            pairForce = pressureForce + viscosityForce
            for axis in range(3):
                forces[:, axis] = np.bincount(
                    owners, weights=pairForce[:, axis], minlength=nParticles
                )

        # --- Gravity (acceleration times mass, applied once) --- #
        forces += self._mass * self._gravity

        return forces
