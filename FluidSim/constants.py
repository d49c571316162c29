# -- Physical Constants for SPH Fluid Simulation -- #

'''
Default physical and numerical constants for the particle fluid.

The simulation runs in scene units rather than SI: the particle
radius is of order one and gravity is scaled up accordingly so the
fluid settles within a few thousand steps.

References:
-----------
Muller et al. (2003) -- Particle-Based Fluid Simulation for
    Interactive Applications
Kim (2017) -- Fluid Engine Development

Sean Bowman [10/19/2026]
'''

#--------------------------------------------------------------------#
# -- Fluid Properties -- #
#--------------------------------------------------------------------#

# Interaction (support) radius of a particle [scene units]
particleRadius: float = 1.0

# Mass of a single particle
particleMass: float = 4.0

# Gas constant k in p = k * (rho - rho_0)
gasConstant: float = 2000.0

# Resting density rho_0
restDensity: float = 9.0

# Viscosity coefficient mu
viscosityCoefficient: float = 2.5

# Gravity scale relative to 9.81 (scene units are much smaller than meters)
gravityScale: float = 2000.0

# Gravitational acceleration [scene units/s^2]
gravity: tuple[float, float, float] = (0.0, -9.81 * gravityScale, 0.0)

#--------------------------------------------------------------------#
# -- Numerical Parameters -- #
#--------------------------------------------------------------------#

# Velocity multiplier applied on wall contact (negative reflects)
boundaryDamping: float = -0.37

# Fixed integration time step [s]
timeStep: float = 0.0008

# Floor added to every summed density so it is never zero
densityFloor: float = 1e-6

# Cell size as a multiple of the particle radius
# 2r is the smallest cell for which the 8-cell bucket query is complete
defaultCellSizeRatio: float = 2.0

# Bucket capacity for the bucket-list neighbor search
maximumParticlesPerCell: int = 500

# Particles processed per batch when gathering bucket candidates
candidateChunkSize: int = 256

# Large primes for the unbounded spatial hash (Teschner et al. 2003)
hashPrimes: tuple[int, int, int] = (73856093, 19349663, 83492791)

#--------------------------------------------------------------------#
# -- Default Simulation Box -- #
#--------------------------------------------------------------------#

boxCenter: tuple[float, float, float] = (0.0, 0.0, 0.0)
boxHalfExtents: tuple[float, float, float] = (10.0, 10.0, 10.0)
