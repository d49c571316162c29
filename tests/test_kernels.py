# -- Smoothing Kernel Tests -- #

'''
Tests for the poly6 / spiky / viscosity kernels.

Sean Bowman [10/19/2026]
'''

import math

import numpy as np
import pytest

from FluidSim.sph.kernels import MullerKernels


class TestMullerKernels:
    '''Kernel values, cutoffs and monotonicity.'''

    @pytest.mark.parametrize('radius', [0.5, 1.0, 2.0])
    def testZeroAtAndBeyondCutoff(self, radius):
        '''All three kernels vanish at d = r and beyond.'''
        kernels = MullerKernels(radius)

        assert kernels.densityKernel(radius * radius) == 0.0
        assert kernels.densityKernel(4.0 * radius * radius) == 0.0
        assert kernels.pressureGradientScale(radius) == 0.0
        assert kernels.pressureGradientScale(1.5 * radius) == 0.0
        assert kernels.viscosityLaplacian(radius) == 0.0
        assert kernels.viscosityLaplacian(3.0 * radius) == 0.0

    def testValuesAtOrigin(self):
        '''Kernel constants at zero distance.'''
        r = 2.0
        kernels = MullerKernels(r)

        assert kernels.densityKernel(0.0) == pytest.approx(315.0 / (64.0 * math.pi * r ** 3))
        assert kernels.pressureGradientScale(0.0) == pytest.approx(-45.0 / (math.pi * r ** 4))
        assert kernels.viscosityLaplacian(0.0) == pytest.approx(90.0 / (math.pi * r ** 5))

    def testStrictlyDecreasingInsideSupport(self):
        '''Density and viscosity kernels decrease; gradient magnitude decreases.'''
        kernels = MullerKernels(1.0)
        dist = np.linspace(0.0, 0.99, 50)

        density = kernels.densityKernelBatch(dist * dist)
        gradient = np.abs(kernels.pressureGradientScaleBatch(dist))
        laplacian = kernels.viscosityLaplacianBatch(dist)

        assert np.all(np.diff(density) < 0.0)
        assert np.all(np.diff(gradient) < 0.0)
        assert np.all(np.diff(laplacian) < 0.0)
        assert np.all(kernels.pressureGradientScaleBatch(dist) <= 0.0)

    def testBatchMatchesScalar(self):
        '''Batch evaluation agrees with the scalar form, including past the cutoff.'''
        kernels = MullerKernels(1.5)
        dist = np.array([0.0, 0.3, 0.75, 1.2, 1.5, 2.0])

        expectedDensity = [kernels.densityKernel(d * d) for d in dist]
        expectedGradient = [kernels.pressureGradientScale(d) for d in dist]
        expectedLaplacian = [kernels.viscosityLaplacian(d) for d in dist]

        np.testing.assert_allclose(kernels.densityKernelBatch(dist * dist), expectedDensity)
        np.testing.assert_allclose(kernels.pressureGradientScaleBatch(dist), expectedGradient)
        np.testing.assert_allclose(kernels.viscosityLaplacianBatch(dist), expectedLaplacian)

    def testPressureGradientVector(self):
        '''Gradient points along rVec with the scalar magnitude; zero at d = 0.'''
        kernels = MullerKernels(1.0)
        rVec = np.array([0.3, 0.0, 0.4])
        gradient = kernels.pressureGradient(rVec, 0.5)

        np.testing.assert_allclose(gradient, kernels.pressureGradientScale(0.5) * rVec / 0.5)
        np.testing.assert_array_equal(kernels.pressureGradient(np.zeros(3), 0.0), np.zeros(3))

    @pytest.mark.parametrize('radius', [0.0, -1.0])
    def testRejectsNonPositiveRadius(self, radius):
        with pytest.raises(ValueError):
            MullerKernels(radius)
