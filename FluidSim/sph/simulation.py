# -- SPH Fluid Simulation -- #

'''
Time-stepping driver for the particle fluid.

Owns the particle arrays and runs one step as four phases, each
completed for every particle before the next begins:

    1. Rebuild the neighbor index from current positions
    2. Density and pressure pass
    3. Force pass (pressure + viscosity + gravity)
    4. Integrate (Symplectic Euler), then obstacle and box boundary

The density and force passes read only the previous phase's arrays
and return fresh ones, which are committed to the particle system
once the phase is complete.

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

from typing import Protocol

import numpy as np

from FluidSim.sph.protocols import SimulationConfig, SimulationState, NeighborSearch
from FluidSim.sph.kernels import MullerKernels
from FluidSim.sph.particles import ParticleSystem
from FluidSim.sph.spatialIndex import NeighborList, createNeighborSearch
from FluidSim.sph.sphSolver import SphSolver
from FluidSim.sph.boundaryHandling import BoxBoundary, SphereObstacle
from FluidSim.sph.timeIntegration import TimeIntegrator, SymplecticEuler


class SpawnPattern(Protocol):
    '''Anything that can place the initial particles inside a box.'''

    def generate(self, config: SimulationConfig) -> np.ndarray:
        '''Initial positions, shape (N, 3).'''
        ...


class FluidSimulation:
    '''
    Particle fluid simulation inside an axis-aligned box.

    Parameters:
    -----------
    config : SimulationConfig
        Simulation configuration (validated on construction)
    '''

    def __init__(self, config: SimulationConfig) -> None:
        config.validate()

        self._config = config
        self._kernels = MullerKernels(config.radius)
        self._solver = SphSolver(config, self._kernels)
        self._neighborSearch: NeighborSearch = createNeighborSearch(config)
        self._integrator: TimeIntegrator = SymplecticEuler()
        self._boundary = BoxBoundary(config)
        self._obstacle = SphereObstacle.fromConfig(config)

        self._particles: ParticleSystem | None = None
        self._neighborList: NeighborList = NeighborList.empty(0)
        self._time: float = 0.0
        self._step: int = 0

    ######################################################################
    # -- Initialization -- #
    ######################################################################

    def initialize(self, spawnPattern: SpawnPattern) -> ParticleSystem:
        '''
        Place the particles and compute their initial density.

        Resets time and step count. Particles start at rest, and the
        spawned positions are clamped into the box.

        Parameters:
        -----------
        spawnPattern : SpawnPattern
            Initial particle placement

        Returns:
        --------
        ParticleSystem : Read-only snapshot of the initial state
        '''
        positions = spawnPattern.generate(self._config)
        particles = ParticleSystem.fromPositions(positions)
        self._boundary.enforce(particles)

        self._particles = particles
        self._time = 0.0
        self._step = 0

        self._neighborList = self._neighborSearch.rebuild(particles.positions)
        particles.densities, particles.pressures = self._solver.computeDensityPressure(
            particles.positions, self._neighborList
        )

        return self.snapshot()

    ######################################################################
    # -- Main Time Step -- #
    ######################################################################

    def step(self) -> SimulationState:
        '''
        Advance the simulation by one time step dt.

        Returns:
        --------
        SimulationState : Diagnostics after the step

        Raises:
        -------
        RuntimeError : If called before initialize()
        '''
        if self._particles is None:
            raise RuntimeError('FluidSimulation.step() called before initialize()')

        p = self._particles
        dt = self._config.timeStep

        # 1. Rebuild neighbor index
        self._neighborList = self._neighborSearch.rebuild(p.positions)

        # 2. Density and pressure
        densities, pressures = self._solver.computeDensityPressure(
            p.positions, self._neighborList
        )
        p.densities, p.pressures = densities, pressures

        # 3. Forces
        p.forces = self._solver.computeForces(
            p.positions, p.velocities, p.densities, p.pressures, self._neighborList
        )

        # 4. Integrate and enforce boundaries (box last)
        self._integrator.integrate(p, dt, self._config.mass)
        if self._obstacle is not None:
            self._obstacle.enforce(p)
        self._boundary.enforce(p)

        self._step += 1
        self._time = self._step * dt

        return self.currentState

    def run(self, nSteps: int) -> list[SimulationState]:
        '''Advance nSteps and return the state after each step.'''
        return [self.step() for _ in range(nSteps)]

    def snapshot(self) -> ParticleSystem:
        '''
        Read-only deep copy of the particle state.

        Raises:
        -------
        RuntimeError : If called before initialize()
        '''
        if self._particles is None:
            raise RuntimeError('FluidSimulation.snapshot() called before initialize()')
        return self._particles.copy(readOnly=True)

    ######################################################################
    # -- Properties -- #
    ######################################################################

    @property
    def currentState(self) -> SimulationState:
        '''Diagnostics of the current particle state.'''
        if self._particles is None:
            raise RuntimeError('FluidSimulation has not been initialized')

        p = self._particles
        hasParticles = p.nParticles > 0

        return SimulationState(
            step=self._step,
            time=self._time,
            kineticEnergy=p.kineticEnergy(self._config.mass),
            maxVelocity=p.maxSpeed(),
            meanDensity=float(np.mean(p.densities)) if hasParticles else 0.0,
            maxDensity=float(np.max(p.densities)) if hasParticles else 0.0,
            meanNeighbors=float(np.mean(self._neighborList.counts)) if hasParticles else 0.0,
            droppedParticles=self._neighborSearch.droppedCount,
        )

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def kernels(self) -> MullerKernels:
        return self._kernels

    @property
    def neighborSearch(self) -> NeighborSearch:
        return self._neighborSearch

    @property
    def lastNeighborList(self) -> NeighborList:
        '''Neighbor list from the most recent rebuild.'''
        return self._neighborList

    @property
    def stepCount(self) -> int:
        return self._step

    @property
    def time(self) -> float:
        '''Simulated time (stepCount * dt).'''
        return self._time

    @property
    def isInitialized(self) -> bool:
        return self._particles is not None
