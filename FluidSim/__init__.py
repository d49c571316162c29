# -- FluidSim Package -- #

'''
Particle fluid simulation using Smoothed Particle Hydrodynamics (SPH).

Muller-kernel density/pressure/viscosity solver with interchangeable
uniform-grid neighbor searches, a bitonic sort for the sorted cell
table, dam break scenarios and JSON frame export.

Sean Bowman [10/19/2026]
'''

__version__ = '0.1.0'

from FluidSim.sph.protocols import SimulationConfig, SimulationState
from FluidSim.sph.simulation import FluidSimulation
from FluidSim.scenarios.spawnPatterns import GridSpawn, JitteredBoxSpawn
from FluidSim.scenarios.damBreak import DamBreakConfig
from FluidSim.export.frameExporter import FrameExporter
from FluidSim.runner import FluidSimRunner
