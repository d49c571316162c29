# -- Fluid Simulation Tests -- #

'''
End-to-end tests of the time-stepping simulation.

Sean Bowman [10/19/2026]
'''

import numpy as np
import pytest

from FluidSim.sph.protocols import SimulationConfig
from FluidSim.sph.simulation import FluidSimulation
from FluidSim.scenarios.spawnPatterns import GridSpawn, JitteredBoxSpawn


def runSimulation(config: SimulationConfig, spawnPattern, nSteps: int) -> FluidSimulation:
    simulation = FluidSimulation(config)
    simulation.initialize(spawnPattern)
    simulation.run(nSteps)
    return simulation


class TestLifecycle:

    def testStepBeforeInitializeRaises(self, smallBoxConfig):
        simulation = FluidSimulation(smallBoxConfig)
        with pytest.raises(RuntimeError):
            simulation.step()
        with pytest.raises(RuntimeError):
            simulation.snapshot()

    def testInitializeComputesDensity(self, smallBoxConfig):
        simulation = FluidSimulation(smallBoxConfig)
        snapshot = simulation.initialize(GridSpawn(64))

        assert snapshot.nParticles == 64
        assert simulation.stepCount == 0
        assert simulation.time == 0.0
        assert np.all(snapshot.densities > smallBoxConfig.densityFloor)
        np.testing.assert_array_equal(snapshot.velocities, 0.0)

    def testStepAdvancesTime(self, smallBoxConfig):
        simulation = FluidSimulation(smallBoxConfig)
        simulation.initialize(GridSpawn(27))

        state = simulation.step()
        state = simulation.step()

        assert state.step == 2
        assert simulation.stepCount == 2
        assert state.time == pytest.approx(2.0 * smallBoxConfig.timeStep)
        assert state.kineticEnergy > 0.0
        assert state.meanNeighbors > 0.0

    def testSnapshotIsReadOnlyCopy(self, smallBoxConfig):
        simulation = FluidSimulation(smallBoxConfig)
        snapshot = simulation.initialize(GridSpawn(27))
        initialPositions = snapshot.positions.copy()

        with pytest.raises(ValueError):
            snapshot.positions[0, 0] = 100.0

        simulation.step()
        np.testing.assert_array_equal(snapshot.positions, initialPositions)
        assert simulation.snapshot().isReadOnly

    def testReinitializeResetsCounters(self, smallBoxConfig):
        simulation = runSimulation(smallBoxConfig, GridSpawn(27), 3)
        simulation.initialize(GridSpawn(8))

        assert simulation.stepCount == 0
        assert simulation.snapshot().nParticles == 8

    def testInvalidConfigRejected(self):
        with pytest.raises(ValueError):
            FluidSimulation(SimulationConfig(radius=-1.0))


class TestPhysicalBehavior:

    @pytest.mark.parametrize('neighborSearch', ['sortedOffset', 'bucketList'])
    def testParticlesStayInsideBox(self, neighborSearch):
        '''Every coordinate stays in [min + r, max - r] after every step.'''
        config = SimulationConfig(boxHalfExtents=(4.0, 4.0, 4.0), neighborSearch=neighborSearch)
        simulation = FluidSimulation(config)
        simulation.initialize(GridSpawn(125))
        lower = config.boundsMin + config.radius
        upper = config.boundsMax - config.radius

        for _ in range(150):
            simulation.step()
            positions = simulation.snapshot().positions
            assert np.all(np.isfinite(positions))
            assert np.all(positions >= lower - 1e-12)
            assert np.all(positions <= upper + 1e-12)

    def testFluidFallsUnderGravity(self, smallBoxConfig):
        simulation = FluidSimulation(smallBoxConfig)
        initial = simulation.initialize(GridSpawn(64))
        simulation.run(20)

        assert simulation.snapshot().positions[:, 1].mean() < initial.positions[:, 1].mean()

    def testSingleParticleRestsOnFloor(self, smallBoxConfig):
        simulation = FluidSimulation(smallBoxConfig)
        simulation.initialize(GridSpawn(1))
        simulation.run(400)

        floor = smallBoxConfig.boundsMin[1] + smallBoxConfig.radius
        assert simulation.snapshot().positions[0, 1] == pytest.approx(floor)

    def testObstacleKeepsParticlesOut(self):
        config = SimulationConfig(
            boxHalfExtents=(5.0, 5.0, 5.0),
            obstacleCenter=(0.0, -1.0, 0.0),
            obstacleRadius=1.5,
        )
        simulation = runSimulation(config, JitteredBoxSpawn(center=(0.0, 2.5, 0.0), size=(4.0, 3.0, 4.0)), 60)

        dist = np.linalg.norm(simulation.snapshot().positions - np.array([0.0, -1.0, 0.0]), axis=1)
        assert np.all(dist >= config.obstacleRadius + config.radius - 1e-9)


class TestDeterminism:

    @pytest.mark.parametrize('neighborSearch', ['sortedOffset', 'bucketList'])
    def testRepeatedRunsIdentical(self, neighborSearch):
        config = SimulationConfig(boxHalfExtents=(4.0, 4.0, 4.0), neighborSearch=neighborSearch)

        first = runSimulation(config, GridSpawn(64, seed=3), 25).snapshot()
        second = runSimulation(config, GridSpawn(64, seed=3), 25).snapshot()

        np.testing.assert_array_equal(first.positions, second.positions)
        np.testing.assert_array_equal(first.velocities, second.velocities)

    def testStrategiesAgreeWithoutOverflow(self):
        sortedConfig = SimulationConfig(boxHalfExtents=(4.0, 4.0, 4.0))
        bucketConfig = SimulationConfig(boxHalfExtents=(4.0, 4.0, 4.0), neighborSearch='bucketList')

        first = runSimulation(sortedConfig, GridSpawn(64), 5).snapshot()
        second = runSimulation(bucketConfig, GridSpawn(64), 5).snapshot()

        np.testing.assert_allclose(first.positions, second.positions, rtol=0.0, atol=1e-6)
