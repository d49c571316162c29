# -- Simulation Scenarios Package -- #

'''
Initial particle layouts and pre-configured scenarios.

Sean Bowman [10/19/2026]
'''

from FluidSim.scenarios.spawnPatterns import GridSpawn, JitteredBoxSpawn, createParticles
from FluidSim.scenarios.damBreak import DamBreakConfig, createDamBreak
