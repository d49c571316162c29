# -- SPH Engine Package -- #

'''
Core Smoothed Particle Hydrodynamics (SPH) engine.

Provides smoothing kernels, the bitonic sort, grid neighbor
searches, the density/force solver, time integration, boundary
handling, and the time-stepping simulation.

Sean Bowman [10/19/2026]
'''

from FluidSim.sph.protocols import SimulationConfig, SimulationState, NeighborSearch
from FluidSim.sph.kernels import MullerKernels
from FluidSim.sph.bitonicSort import bitonicSort, padToPowerOfTwo
from FluidSim.sph.particles import ParticleSystem
from FluidSim.sph.spatialIndex import (
    NeighborList,
    BucketListGrid,
    SortedOffsetGrid,
    bruteForceNeighbors,
    createNeighborSearch,
)
from FluidSim.sph.sphSolver import SphSolver
from FluidSim.sph.simulation import FluidSimulation
