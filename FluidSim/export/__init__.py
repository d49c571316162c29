# -- Export Package -- #

'''
Data export utilities for SPH simulation results.

Exports frame data as JSON for offline inspection.

Sean Bowman [10/19/2026]
'''

from FluidSim.export.frameExporter import FrameExporter
