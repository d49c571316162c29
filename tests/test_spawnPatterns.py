# -- Spawn Pattern and Scenario Tests -- #

'''
Tests for the initial particle layouts and the dam break presets.

Sean Bowman [10/19/2026]
'''

import numpy as np
import pytest

from FluidSim.sph.protocols import SimulationConfig
from FluidSim.scenarios.spawnPatterns import GridSpawn, JitteredBoxSpawn, createParticles, particleCountFor
from FluidSim.scenarios.damBreak import DamBreakConfig, createDamBreak


class TestGridSpawn:

    @pytest.mark.parametrize('count, perSide', [(1, 1), (8, 2), (64, 4), (65, 5), (1000, 10)])
    def testParticlesPerDimension(self, count, perSide):
        assert GridSpawn(count).particlesPerDimension == perSide

    def testCountAndBounds(self, smallBoxConfig):
        positions = GridSpawn(100).generate(smallBoxConfig)
        r = smallBoxConfig.radius

        assert positions.shape == (100, 3)
        assert np.all(positions <= smallBoxConfig.boundsMax - r)
        assert np.all(positions >= smallBoxConfig.boundsMin + r)

    def testLatticeSpacingAndJitter(self, smallBoxConfig):
        spawn = GridSpawn(8, spacingRatio=0.5, jitter=0.01)
        positions = spawn.generate(smallBoxConfig)
        anchor = smallBoxConfig.boundsMax - smallBoxConfig.radius

        # First particle sits at the anchor minus at most the jitter
        offset = anchor - positions[0]
        assert np.all((offset >= 0.0) & (offset <= 0.01))

        # Last particle of a 2 x 2 x 2 lattice is one spacing away per axis
        offset = anchor - positions[7]
        assert np.all((offset >= 0.5) & (offset <= 0.51))

    def testSeedDeterminism(self, smallBoxConfig):
        first = GridSpawn(50, seed=4).generate(smallBoxConfig)
        second = GridSpawn(50, seed=4).generate(smallBoxConfig)
        other = GridSpawn(50, seed=5).generate(smallBoxConfig)

        np.testing.assert_array_equal(first, second)
        assert not np.array_equal(first, other)

    def testTooManyParticlesRaises(self, smallBoxConfig):
        with pytest.raises(ValueError):
            GridSpawn(5000).generate(smallBoxConfig)

    def testZeroParticles(self, smallBoxConfig):
        assert GridSpawn(0).generate(smallBoxConfig).shape == (0, 3)


class TestJitteredBoxSpawn:

    def testCountPerAxis(self, smallBoxConfig):
        spawn = JitteredBoxSpawn(center=(0.0, 0.0, 0.0), size=(4.0, 6.0, 2.0))
        positions = spawn.generate(smallBoxConfig)

        assert spawn.countPerAxis(smallBoxConfig.radius) == (2, 3, 1)
        assert positions.shape == (6, 3)
        assert particleCountFor(spawn, smallBoxConfig) == 6

    def testOffsetsBoundedByJitterFraction(self, smallBoxConfig):
        noJitter = JitteredBoxSpawn(size=(4.0, 4.0, 4.0), jitterFraction=0.0).generate(smallBoxConfig)
        jittered = JitteredBoxSpawn(size=(4.0, 4.0, 4.0), jitterFraction=0.5).generate(smallBoxConfig)

        offsets = np.linalg.norm(jittered - noJitter, axis=1)
        np.testing.assert_allclose(offsets, 0.5 * smallBoxConfig.radius)

    def testLatticeCenteredOnSubBox(self, smallBoxConfig):
        positions = JitteredBoxSpawn(center=(1.0, -1.0, 0.5), size=(4.0, 4.0, 4.0), jitterFraction=0.0).generate(smallBoxConfig)
        np.testing.assert_allclose(positions.mean(axis=0), [1.0, -1.0, 0.5])

    def testSubBoxOutsideRaises(self, smallBoxConfig):
        with pytest.raises(ValueError):
            JitteredBoxSpawn(center=(4.0, 0.0, 0.0), size=(4.0, 4.0, 4.0)).generate(smallBoxConfig)

    def testCreateParticlesAtRest(self, smallBoxConfig):
        particles = createParticles(JitteredBoxSpawn(size=(4.0, 4.0, 4.0)), smallBoxConfig)

        assert particles.nParticles == 8
        np.testing.assert_array_equal(particles.velocities, 0.0)
        np.testing.assert_array_equal(particles.densities, 0.0)


class TestDamBreak:

    def testPresets(self):
        small = DamBreakConfig.small()
        standard = DamBreakConfig.fromPreset('standard')

        assert small.particleCount < standard.particleCount
        with pytest.raises(ValueError):
            DamBreakConfig.fromPreset('huge')

    def testGridScenario(self):
        simConfig, spawnPattern = createDamBreak(DamBreakConfig.small())

        assert simConfig.boxHalfExtents == (6.0, 6.0, 6.0)
        assert isinstance(spawnPattern, GridSpawn)
        assert spawnPattern.generate(simConfig).shape == (512, 3)

    def testJitteredColumnFitsInBox(self):
        damConfig = DamBreakConfig.small()
        damConfig.spawn = 'jitteredBox'
        simConfig, spawnPattern = createDamBreak(damConfig)

        positions = spawnPattern.generate(simConfig)
        assert isinstance(spawnPattern, JitteredBoxSpawn)
        assert len(positions) > 0
        # Column stands against the -x wall
        assert positions[:, 0].mean() < simConfig.boxCenter[0]

    def testKeepsBaseBoxWhenExtentIsNone(self):
        base = SimulationConfig(boxHalfExtents=(4.0, 5.0, 6.0), restDensity=3.0)
        damConfig = DamBreakConfig(boxHalfExtent=None, particleCount=27, neighborSearch='bucketList')

        simConfig, _ = createDamBreak(damConfig, base)

        assert simConfig.boxHalfExtents == (4.0, 5.0, 6.0)
        assert simConfig.restDensity == 3.0
        assert simConfig.neighborSearch == 'bucketList'

    def testObstacleAtBoxCenter(self):
        damConfig = DamBreakConfig.small()
        damConfig.obstacleRadius = 1.5
        simConfig, _ = createDamBreak(damConfig)

        assert simConfig.obstacleCenter == (0.0, 0.0, 0.0)
        assert simConfig.obstacleRadius == 1.5

    def testUnknownSpawnRaises(self):
        damConfig = DamBreakConfig.small()
        damConfig.spawn = 'sphere'
        with pytest.raises(ValueError):
            createDamBreak(damConfig)
