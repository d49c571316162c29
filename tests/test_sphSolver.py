# -- SPH Solver Tests -- #

'''
Tests for the density/pressure and force passes.

Sean Bowman [10/19/2026]
'''

import numpy as np
import pytest

from FluidSim.sph.protocols import SimulationConfig
from FluidSim.sph.kernels import MullerKernels
from FluidSim.sph.sphSolver import SphSolver
from FluidSim.sph.spatialIndex import NeighborList, bruteForceNeighbors


def twoParticleSetup(restDensity: float, gravity=(0.0, 0.0, 0.0)):
    '''Two particles r/2 apart along x.'''
    config = SimulationConfig(
        boxHalfExtents=(5.0, 5.0, 5.0),
        restDensity=restDensity,
        gravity=gravity,
    )
    positions = np.array([[0.0, 0.0, 0.0], [0.5 * config.radius, 0.0, 0.0]])
    neighbors = bruteForceNeighbors(positions, config.radius)
    return config, positions, neighbors


class TestDensityPressure:

    def testTwoParticleDensity(self):
        '''rho = m * W(d^2) + floor, the same for both particles.'''
        config, positions, neighbors = twoParticleSetup(restDensity=0.0)
        solver = SphSolver(config)

        densities, pressures = solver.computeDensityPressure(positions, neighbors)

        kernels = MullerKernels(config.radius)
        expected = config.mass * kernels.densityKernel(0.25) + config.densityFloor
        np.testing.assert_allclose(densities, [expected, expected])
        np.testing.assert_allclose(pressures, config.gasConstant * densities)

    def testIsolatedParticleHasFloorDensity(self):
        '''No neighbors: density is the floor and pressure is negative.'''
        config = SimulationConfig(boxHalfExtents=(5.0, 5.0, 5.0))
        solver = SphSolver(config)
        positions = np.zeros((1, 3))

        densities, pressures = solver.computeDensityPressure(positions, NeighborList.empty(1))

        assert densities[0] == pytest.approx(config.densityFloor)
        assert pressures[0] == pytest.approx(
            config.gasConstant * (config.densityFloor - config.restDensity)
        )

    def testInputsNotModified(self, smallBoxConfig, clusteredPositions):
        solver = SphSolver(smallBoxConfig)
        before = clusteredPositions.copy()
        neighbors = bruteForceNeighbors(clusteredPositions, smallBoxConfig.radius)

        solver.computeDensityPressure(clusteredPositions, neighbors)

        np.testing.assert_array_equal(clusteredPositions, before)


class TestForces:

    def testPositivePressureRepels(self):
        '''Density above rest pushes the pair apart.'''
        config, positions, neighbors = twoParticleSetup(restDensity=0.0)
        solver = SphSolver(config)
        densities, pressures = solver.computeDensityPressure(positions, neighbors)
        assert np.all(pressures > 0.0)

        forces = solver.computeForces(positions, np.zeros((2, 3)), densities, pressures, neighbors)

        assert forces[0, 0] < 0.0
        assert forces[1, 0] > 0.0
        np.testing.assert_allclose(forces[:, 1:], 0.0, atol=1e-12)

    def testNegativePressureAttracts(self):
        '''Density below rest pulls the pair together.'''
        config, positions, neighbors = twoParticleSetup(restDensity=1000.0)
        solver = SphSolver(config)
        densities, pressures = solver.computeDensityPressure(positions, neighbors)
        assert np.all(pressures < 0.0)

        forces = solver.computeForces(positions, np.zeros((2, 3)), densities, pressures, neighbors)

        assert forces[0, 0] > 0.0
        assert forces[1, 0] < 0.0

    def testPairForcesCancel(self):
        '''With symmetric neighbor lists momentum is conserved.'''
        config, positions, neighbors = twoParticleSetup(restDensity=3.0)
        solver = SphSolver(config)
        velocities = np.array([[1.0, 0.0, 0.0], [-2.0, 0.5, 0.0]])
        densities, pressures = solver.computeDensityPressure(positions, neighbors)

        forces = solver.computeForces(positions, velocities, densities, pressures, neighbors)

        np.testing.assert_allclose(forces.sum(axis=0), 0.0, atol=1e-9)

    def testViscosityOpposesRelativeVelocity(self):
        '''At rest density the only pair force is viscosity, toward the mean velocity.'''
        _, positions, neighbors = twoParticleSetup(restDensity=0.0)
        config = SimulationConfig(
            boxHalfExtents=(5.0, 5.0, 5.0),
            gasConstant=0.0,
            gravity=(0.0, 0.0, 0.0),
        )
        solver = SphSolver(config)
        velocities = np.array([[0.0, 1.0, 0.0], [0.0, -1.0, 0.0]])
        densities, pressures = solver.computeDensityPressure(positions, neighbors)

        forces = solver.computeForces(positions, velocities, densities, pressures, neighbors)

        assert forces[0, 1] < 0.0
        assert forces[1, 1] > 0.0

    def testGravityAppliedOnceTimesMass(self):
        '''An isolated particle feels exactly m * g.'''
        gravity = (0.0, -9.81, 0.0)
        config = SimulationConfig(boxHalfExtents=(5.0, 5.0, 5.0), gravity=gravity)
        solver = SphSolver(config)
        positions = np.zeros((1, 3))
        neighbors = NeighborList.empty(1)
        densities, pressures = solver.computeDensityPressure(positions, neighbors)

        forces = solver.computeForces(positions, np.zeros((1, 3)), densities, pressures, neighbors)

        np.testing.assert_allclose(forces[0], config.mass * np.array(gravity))

    def testCoincidentParticlesSkipped(self):
        '''Zero-distance pairs produce no NaN and no pair force.'''
        config = SimulationConfig(boxHalfExtents=(5.0, 5.0, 5.0), gravity=(0.0, 0.0, 0.0))
        solver = SphSolver(config)
        positions = np.zeros((2, 3))
        neighbors = bruteForceNeighbors(positions, config.radius)
        densities, pressures = solver.computeDensityPressure(positions, neighbors)

        forces = solver.computeForces(positions, np.zeros((2, 3)), densities, pressures, neighbors)

        assert np.all(np.isfinite(forces))
        np.testing.assert_array_equal(forces, 0.0)
