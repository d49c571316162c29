# -- SPH Smoothing Kernels -- #

'''
Smoothing kernels of Muller et al. (2003) for particle fluids.

Three kernels share one support radius r:

    Density (poly6):
        W(r2) = 315 / (64 * pi * r^3) * (1 - r2 / r^2)^3     for r2 < r^2

    Pressure gradient (spiky, first derivative):
        dW/dd = -45 / (pi * r^4) * (1 - d / r)^2              for d < r

    Viscosity (spiky, second derivative):
        d2W/dd2 = 90 / (pi * r^5) * (1 - d / r)               for d < r

All three vanish smoothly at the cutoff. The density kernel is a
function of squared distance, so callers never need a square root
for the density pass. The poly6 form above is the usual
315 / (64 * pi * r^9) * (r^2 - r2)^3 with r^6 factored out.

References:
-----------
Muller et al. (2003) -- Particle-Based Fluid Simulation for
    Interactive Applications
Kim (2017) -- Fluid Engine Development, pp. 121-136

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

import math

import numpy as np


class MullerKernels:
    '''
    Poly6 density, spiky gradient and viscosity Laplacian kernels.

    Powers of the radius and the normalization constants are
    computed once on construction.

    Parameters:
    -----------
    radius : float
        Support radius r (particles further apart do not interact)
    '''

    def __init__(self, radius: float) -> None:
        if not radius > 0.0:
            raise ValueError(f'Kernel radius must be positive, got {radius}')

        self._radius = float(radius)
        self._radius2 = self._radius * self._radius
        self._radius3 = self._radius2 * self._radius
        self._radius4 = self._radius3 * self._radius
        self._radius5 = self._radius4 * self._radius

        self._densityConstant = 315.0 / (64.0 * math.pi * self._radius3)
        self._gradientConstant = -45.0 / (math.pi * self._radius4)
        self._laplacianConstant = 90.0 / (math.pi * self._radius5)

    @property
    def radius(self) -> float:
        '''Support radius r.'''
        return self._radius

    @property
    def radius2(self) -> float:
        '''Squared support radius r^2.'''
        return self._radius2

    ######################################################################
    # -- Scalar Evaluation -- #
    ######################################################################

    def densityKernel(self, distSq: float) -> float:
        '''
        Evaluate the poly6 density kernel.

        Parameters:
        -----------
        distSq : float
            Squared distance between the particles

        Returns:
        --------
        float : Kernel weight (0 at and beyond r^2)
        '''
        if distSq >= self._radius2:
            return 0.0
        x = 1.0 - distSq / self._radius2
        return self._densityConstant * x * x * x

    def pressureGradientScale(self, dist: float) -> float:
        '''
        Scalar part of the spiky kernel gradient.

        The gradient vector is this value times the unit vector
        pointing from the neighbor to the particle.

        Parameters:
        -----------
        dist : float
            Distance between the particles

        Returns:
        --------
        float : dW/dd (non-positive, 0 at and beyond r)
        '''
        if dist >= self._radius:
            return 0.0
        x = 1.0 - dist / self._radius
        return self._gradientConstant * x * x

    def viscosityLaplacian(self, dist: float) -> float:
        '''
        Second derivative of the spiky kernel.

        Parameters:
        -----------
        dist : float
            Distance between the particles

        Returns:
        --------
        float : d2W/dd2 (non-negative, 0 at and beyond r)
        '''
        if dist >= self._radius:
            return 0.0
        x = 1.0 - dist / self._radius
        return self._laplacianConstant * x

    def pressureGradient(self, rVec: np.ndarray, dist: float) -> np.ndarray:
        '''
        Spiky kernel gradient vector.

        Parameters:
        -----------
        rVec : np.ndarray
            Vector from the neighbor to the particle (x_i - x_j)
        dist : float
            Distance |rVec|

        Returns:
        --------
        np.ndarray : Gradient vector (zero when dist == 0)
        '''
        if dist <= 0.0:
            return np.zeros_like(rVec, dtype=float)
        return self.pressureGradientScale(dist) * np.asarray(rVec, dtype=float) / dist

    ######################################################################
    # -- Vectorized (Batch) Operations -- #
    ######################################################################

    def densityKernelBatch(self, distSq: np.ndarray) -> np.ndarray:
        '''Poly6 kernel for an array of squared distances.'''
        distSq = np.asarray(distSq, dtype=float)
        x = np.clip(1.0 - distSq / self._radius2, 0.0, None)
        return np.where(distSq < self._radius2, self._densityConstant * x * x * x, 0.0)

    def pressureGradientScaleBatch(self, dist: np.ndarray) -> np.ndarray:
        '''Spiky gradient scale for an array of distances.'''
        dist = np.asarray(dist, dtype=float)
        x = np.clip(1.0 - dist / self._radius, 0.0, None)
        return np.where(dist < self._radius, self._gradientConstant * x * x, 0.0)

    def viscosityLaplacianBatch(self, dist: np.ndarray) -> np.ndarray:
        '''Viscosity Laplacian for an array of distances.'''
        dist = np.asarray(dist, dtype=float)
        x = np.clip(1.0 - dist / self._radius, 0.0, None)
        return np.where(dist < self._radius, self._laplacianConstant * x, 0.0)
