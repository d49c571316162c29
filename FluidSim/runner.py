# -- Fluid Simulation Runner -- #

'''
Command-line entry point for running SPH fluid simulations.

Builds a dam break scenario from a preset (optionally on top of a
JSON fluid configuration), runs the simulation, displays progress,
and optionally exports frame data as JSON.

Usage:
    python -m FluidSim                                    # Small dam break
    python -m FluidSim --preset standard                  # Standard dam break
    python -m FluidSim --config configs/water.json        # Fluid constants from JSON
    python -m FluidSim --neighbor-search bucketList       # Bucket-list neighbor search
    python -m FluidSim --no-export                        # Skip frame export

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

import argparse
import time as timeModule

from FluidSim.sph.protocols import SimulationConfig, NEIGHBOR_SEARCH_TYPES
from FluidSim.sph.simulation import FluidSimulation
from FluidSim.scenarios.damBreak import DamBreakConfig, createDamBreak, SPAWN_TYPES
from FluidSim.scenarios.spawnPatterns import particleCountFor
from FluidSim.export.frameExporter import FrameExporter


#--------------------------------------------------------------------#
# -- CLI Argument Parser -- #
#--------------------------------------------------------------------#

def buildParser() -> argparse.ArgumentParser:
    '''Build the CLI argument parser.'''
    parser = argparse.ArgumentParser(
        description='FluidSim -- SPH particle fluid simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--config', type=str, default=None,
        help='Path to JSON fluid configuration file (box kept from the file)',
    )
    parser.add_argument(
        '--preset', type=str, default='small',
        choices=['small', 'standard'],
        help='Dam break preset (default: small)',
    )
    parser.add_argument(
        '--spawn', type=str, default=None,
        choices=list(SPAWN_TYPES),
        help='Initial particle layout (default: from preset)',
    )
    parser.add_argument(
        '--neighbor-search', type=str, default=None,
        choices=list(NEIGHBOR_SEARCH_TYPES),
        help='Neighbor search strategy (default: from config or preset)',
    )
    parser.add_argument(
        '--steps', type=int, default=None,
        help='Number of time steps (default: from preset)',
    )
    parser.add_argument(
        '--output-interval', type=int, default=None,
        help='Steps between exported frames (default: from preset)',
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed of the spawn pattern (default: 0)',
    )
    parser.add_argument(
        '--no-export', action='store_true',
        help='Skip frame data export',
    )
    parser.add_argument(
        '--output-dir', type=str, default='FluidSim/output',
        help='Output directory for exported frames (default: FluidSim/output)',
    )

    return parser


#--------------------------------------------------------------------#
# -- Runner Class -- #
#--------------------------------------------------------------------#

class FluidSimRunner:
    '''
    Runs an SPH fluid simulation and stores results.

    Handles the full pipeline: scenario setup, simulation loop
    with progress reporting, and optional frame export.
    '''

    def __init__(self) -> None:
        self._exporter: FrameExporter = FrameExporter()

    @property
    def exporter(self) -> FrameExporter:
        return self._exporter

    def runFromConfig(
        self,
        configPath: str,
        damConfig: DamBreakConfig | None = None,
        neighborSearch: str | None = None,
        doExport: bool = True,
        exportDir: str = 'FluidSim/output',
    ) -> dict:
        '''
        Run a dam break with fluid constants from a JSON file.

        The box of the file is kept; the layout, step count and
        output interval come from damConfig.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file
        damConfig : DamBreakConfig | None
            Scenario settings (small preset if None)
        neighborSearch : str | None
            Strategy override (None keeps the file's strategy)
        doExport : bool
            Whether to export frame data
        exportDir : str
            Output directory for frame export

        Returns:
        --------
        dict : Simulation results summary
        '''
        baseConfig = SimulationConfig.fromJson(configPath)
        damConfig = damConfig or DamBreakConfig.small()
        damConfig.boxHalfExtent = None
        damConfig.neighborSearch = neighborSearch or baseConfig.neighborSearch
        return self.runDamBreak(
            damConfig, baseConfig=baseConfig, doExport=doExport, exportDir=exportDir,
        )

    def runDamBreak(
        self,
        damConfig: DamBreakConfig,
        baseConfig: SimulationConfig | None = None,
        doExport: bool = True,
        exportDir: str = 'FluidSim/output',
    ) -> dict:
        '''
        Run a dam break simulation.

        Parameters:
        -----------
        damConfig : DamBreakConfig
            Dam break configuration
        baseConfig : SimulationConfig | None
            Fluid constants to start from (defaults if None)
        doExport : bool
            Whether to export frame data
        exportDir : str
            Output directory for frame export

        Returns:
        --------
        dict : Simulation results summary
        '''
        print()
        print('=' * 62)
        print('  FLUIDSIM -- SPH DAM BREAK SIMULATION')
        print('=' * 62)
        print()

        #--------------------------------------------------------------------#
        # Scenario Setup
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  SCENARIO SETUP')
        print('-' * 62)

        simConfig, spawnPattern = createDamBreak(damConfig, baseConfig)
        nParticles = particleCountFor(spawnPattern, simConfig)
        dims = simConfig.gridDimensions

        print(f'  Box Half-Extents:  {simConfig.boxHalfExtents[0]:8.2f} {simConfig.boxHalfExtents[1]:8.2f} {simConfig.boxHalfExtents[2]:8.2f}')
        print(f'  Spawn Pattern:     {damConfig.spawn:>8s}')
        print(f'  Particles:         {nParticles:8d}')
        print(f'  Particle Radius:   {simConfig.radius:8.3f}')
        print(f'  Particle Mass:     {simConfig.mass:8.3f}')
        print(f'  Rest Density:      {simConfig.restDensity:8.3f}')
        print(f'  Gas Constant:      {simConfig.gasConstant:8.1f}')
        print(f'  Viscosity:         {simConfig.viscosity:8.3f}')
        print(f'  Time Step:         {simConfig.timeStep:8.2e} s')
        print(f'  Steps:             {damConfig.nSteps:8d}')
        print()

        #--------------------------------------------------------------------#
        # Initialize Simulation
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  INITIALIZING SIMULATION')
        print('-' * 62)

        simulation = FluidSimulation(simConfig)
        snapshot = simulation.initialize(spawnPattern)
        initialState = simulation.currentState

        print(f'  Neighbor Search:   {simConfig.neighborSearch:>12s}')
        print(f'  Cell Size:         {simConfig.effectiveCellSize:8.3f}')
        print(f'  Grid:              {dims[0]:4d} x {dims[1]:4d} x {dims[2]:4d}')
        if simConfig.hashTableSize is not None:
            print(f'  Hash Table Size:   {simConfig.hashTableSize:8d}')
        if simConfig.obstacleRadius is not None:
            print(f'  Obstacle Radius:   {simConfig.obstacleRadius:8.3f}')
        print(f'  Initial Density:   {initialState.meanDensity:8.3f} (mean)')
        print(f'  Initial Neighbors: {initialState.meanNeighbors:8.2f} (mean)')
        print()

        # Record initial frame
        self._exporter.addFrame(initialState, snapshot)

        #--------------------------------------------------------------------#
        # Simulation Loop
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  RUNNING SIMULATION')
        print('-' * 62)
        print()
        print(f'  {"Time":>8}  {"Step":>8}  {"MaxVel":>10}  {"Density":>8}  {"Nbrs":>6}  {"Dropped":>7}')
        print(f'  {"(s)":>8}  {"":>8}  {"":>10}  {"(mean)":>8}  {"(mean)":>6}  {"":>7}')
        print('  ' + '-' * 58)

        wallClockStart = timeModule.time()
        outputInterval = max(1, damConfig.outputInterval)
        printInterval = max(1, damConfig.nSteps // 20)
        state = initialState

        for _ in range(damConfig.nSteps):
            state = simulation.step()

            # Export frame at output intervals
            if state.step % outputInterval == 0:
                self._exporter.addFrame(state, simulation.snapshot())

            # Print progress at regular intervals
            if state.step % printInterval == 0:
                print(
                    f'  {state.time:8.4f}  {state.step:8d}  {state.maxVelocity:10.3f}  '
                    f'{state.meanDensity:8.3f}  {state.meanNeighbors:6.2f}  '
                    f'{state.droppedParticles:7d}'
                )

        wallClockEnd = timeModule.time()
        wallClockSeconds = wallClockEnd - wallClockStart

        # Final frame (unless the loop just recorded it)
        finalState = state
        if finalState.step % outputInterval != 0:
            self._exporter.addFrame(finalState, simulation.snapshot())

        print()
        print(f'  Simulation complete.')
        print(f'  Total steps:       {finalState.step:8d}')
        print(f'  Wall-clock time:   {wallClockSeconds:8.1f} s')
        print(f'  Frames recorded:   {self._exporter.nFrames:8d}')
        print()

        #--------------------------------------------------------------------#
        # Export
        #--------------------------------------------------------------------#
        exportPath = None
        if doExport:
            print('-' * 62)
            print('  EXPORTING FRAME DATA')
            print('-' * 62)

            exportPath = self._exporter.export(
                config=simConfig,
                outputDir=exportDir,
                scenarioName='damBreak',
            )
            print(f'  Exported to: {exportPath}')
            print()

        #--------------------------------------------------------------------#
        # Summary
        #--------------------------------------------------------------------#
        print('=' * 62)
        print('  SIMULATION SUMMARY')
        print('=' * 62)
        print(f'  Final Time:        {finalState.time:10.6f} s')
        print(f'  Final KE:          {finalState.kineticEnergy:10.3f}')
        print(f'  Max Velocity:      {finalState.maxVelocity:10.3f}')
        print(f'  Mean Density:      {finalState.meanDensity:10.3f}')
        print(f'  Max Density:       {finalState.maxDensity:10.3f}')
        print(f'  Dropped (last):    {finalState.droppedParticles:10d}')
        print('=' * 62)
        print()

        return {
            'config': simConfig,
            'finalState': finalState,
            'wallClockSeconds': wallClockSeconds,
            'nFrames': self._exporter.nFrames,
            'exportPath': exportPath,
        }


#--------------------------------------------------------------------#
# -- CLI Entry Point -- #
#--------------------------------------------------------------------#

def main(argv: list[str] | None = None) -> None:
    '''CLI entry point.'''
    parser = buildParser()
    args = parser.parse_args(argv)

    damConfig = DamBreakConfig.fromPreset(args.preset)
    if args.spawn is not None:
        damConfig.spawn = args.spawn
    if args.steps is not None:
        damConfig.nSteps = args.steps
    if args.output_interval is not None:
        damConfig.outputInterval = args.output_interval
    if args.seed is not None:
        damConfig.seed = args.seed

    runner = FluidSimRunner()

    if args.config:
        runner.runFromConfig(
            args.config,
            damConfig,
            neighborSearch=args.neighbor_search,
            doExport=not args.no_export,
            exportDir=args.output_dir,
        )
    else:
        if args.neighbor_search is not None:
            damConfig.neighborSearch = args.neighbor_search
        runner.runDamBreak(
            damConfig,
            doExport=not args.no_export,
            exportDir=args.output_dir,
        )


if __name__ == '__main__':
    main()
