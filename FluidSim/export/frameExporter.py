# -- Simulation Frame Exporter -- #

'''
Exports particle fluid frames as JSON.

Collects read-only particle snapshots during a run and writes them,
together with the configuration and an energy history, to a single
JSON file for offline inspection or an external viewer.

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

import json
import os
from datetime import datetime

import numpy as np

from FluidSim.sph.protocols import SimulationConfig, SimulationState
from FluidSim.sph.particles import ParticleSystem


class FrameExporter:
    '''
    Collects and exports simulation frame data as JSON.

    Usage:
        exporter = FrameExporter()
        # During simulation loop:
        exporter.addFrame(state, simulation.snapshot())
        # After simulation:
        exporter.export(config, outputDir='output')

    Output JSON format:
    {
        "meta": { "type": "fluidSim", "nFrames": 21, "created": "...", ... },
        "config": { "radius": 1.0, "mass": 4.0, ... },
        "frames": [
            {
                "step": 0,
                "time": 0.0,
                "positions": [[x0, y0, z0], [x1, y1, z1], ...],
                "velocityMagnitudes": [v0, v1, ...],
                "densities": [rho0, rho1, ...]
            },
            ...
        ],
        "energy": {
            "steps": [...],
            "times": [...],
            "kinetic": [...],
            "maxVelocity": [...]
        }
    }

    Parameters:
    -----------
    positionDecimals : int
        Decimal places kept for positions
    '''

    def __init__(self, positionDecimals: int = 5) -> None:
        self._positionDecimals = positionDecimals
        self._frames: list[dict] = []
        self._energyHistory: dict[str, list[float]] = {
            'steps': [],
            'times': [],
            'kinetic': [],
            'maxVelocity': [],
        }

    @property
    def nFrames(self) -> int:
        '''Number of collected frames.'''
        return len(self._frames)

    @property
    def frames(self) -> list[dict]:
        return self._frames

    def addFrame(self, state: SimulationState, particles: ParticleSystem) -> None:
        '''
        Record a simulation frame.

        Parameters:
        -----------
        state : SimulationState
            Diagnostics of the frame
        particles : ParticleSystem
            Particle snapshot of the frame
        '''
        # Velocity magnitudes for color mapping
        velMagnitudes = np.linalg.norm(particles.velocities, axis=1)

        frame = {
            'step': int(state.step),
            'time': round(state.time, 6),
            'positions': np.round(particles.positions, self._positionDecimals).tolist(),
            'velocityMagnitudes': np.round(velMagnitudes, 6).tolist(),
            'densities': np.round(particles.densities, 4).tolist(),
        }
        self._frames.append(frame)

        # Track energy history
        self._energyHistory['steps'].append(int(state.step))
        self._energyHistory['times'].append(round(state.time, 6))
        self._energyHistory['kinetic'].append(round(state.kineticEnergy, 6))
        self._energyHistory['maxVelocity'].append(round(state.maxVelocity, 6))

    def export(
        self,
        config: SimulationConfig,
        outputDir: str = 'FluidSim/output',
        scenarioName: str = 'damBreak',
    ) -> str:
        '''
        Write all collected frames to a JSON file.

        Parameters:
        -----------
        config : SimulationConfig
            Simulation configuration for metadata
        outputDir : str
            Output directory path
        scenarioName : str
            Scenario name for the filename

        Returns:
        --------
        str : Path to the exported JSON file
        '''
        os.makedirs(outputDir, exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = f'fluidSim_{scenarioName}_{timestamp}.json'
        filepath = os.path.join(outputDir, filename)

        output = {
            'meta': {
                'type': 'fluidSim',
                'dimensions': 3,
                'nFrames': len(self._frames),
                'nParticles': len(self._frames[0]['positions']) if self._frames else 0,
                'neighborSearch': config.neighborSearch,
                'created': datetime.now().isoformat(),
            },
            'config': config.toDict(),
            'frames': self._frames,
            'energy': self._energyHistory,
        }

        with open(filepath, 'w') as f:
            json.dump(output, f, indent=None, separators=(',', ':'))

        return filepath
