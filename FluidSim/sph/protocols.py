# -- SPH Simulation Protocols -- #

'''
Configuration, state snapshot and neighbor-search protocol for the
particle fluid simulation.

SimulationConfig is a flat, immutable set of named numeric fields.
It is validated once on construction and passed explicitly to every
phase of a step -- there is no process-wide mutable configuration.

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

import json
import math
from dataclasses import dataclass, fields, asdict
from typing import Callable, Protocol, TYPE_CHECKING

import numpy as np

from FluidSim import constants as const

if TYPE_CHECKING:
    from FluidSim.sph.spatialIndex import NeighborList


NEIGHBOR_SEARCH_TYPES: tuple[str, ...] = ('sortedOffset', 'bucketList')

_VECTOR_FIELDS: tuple[str, ...] = ('gravity', 'boxCenter', 'boxHalfExtents', 'obstacleCenter')


######################################################################
# -- Simulation Configuration -- #
######################################################################

@dataclass(frozen=True)
class SimulationConfig:
    '''
    Configuration for a particle fluid simulation.

    Parameters:
    -----------
    radius : float
        Particle interaction (support) radius r
    mass : float
        Particle mass m
    gasConstant : float
        Gas constant k of the linear equation of state
    restDensity : float
        Resting density rho_0
    viscosity : float
        Viscosity coefficient mu
    gravity : tuple[float, float, float]
        Gravitational acceleration (multiplied by mass once in the force pass)
    damping : float
        Boundary damping d in [-1, 0]; negative values reflect velocity
    timeStep : float
        Integration time step dt
    boxCenter : tuple[float, float, float]
        Center of the axis-aligned containment box
    boxHalfExtents : tuple[float, float, float]
        Half-extents of the containment box
    cellSize : float | None
        Neighbor grid cell size (None uses 2r)
    neighborSearch : str
        'sortedOffset' (default) or 'bucketList'
    maxParticlesPerCell : int
        Bucket capacity for the bucket-list search
    hashTableSize : int | None
        None hashes cells exactly over the bounded grid; an int switches the
        sorted-offset search to an unbounded spatial hash modulo this size
    densityFloor : float
        Small positive value added to every summed density
    obstacleCenter : tuple[float, float, float] | None
        Center of an optional static sphere obstacle
    obstacleRadius : float | None
        Radius of the optional sphere obstacle
    '''

    radius: float = const.particleRadius
    mass: float = const.particleMass
    gasConstant: float = const.gasConstant
    restDensity: float = const.restDensity
    viscosity: float = const.viscosityCoefficient
    gravity: tuple[float, float, float] = const.gravity
    damping: float = const.boundaryDamping
    timeStep: float = const.timeStep
    boxCenter: tuple[float, float, float] = const.boxCenter
    boxHalfExtents: tuple[float, float, float] = const.boxHalfExtents
    cellSize: float | None = None
    neighborSearch: str = 'sortedOffset'
    maxParticlesPerCell: int = const.maximumParticlesPerCell
    hashTableSize: int | None = None
    densityFloor: float = const.densityFloor
    obstacleCenter: tuple[float, float, float] | None = None
    obstacleRadius: float | None = None

    def __post_init__(self) -> None:
        # Normalize vector fields to float tuples (lists arrive from JSON)
        for name in _VECTOR_FIELDS:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, tuple(float(v) for v in value))
        self.validate()

    ######################################################################
    # -- Validation -- #
    ######################################################################

    def validate(self) -> None:
        '''
        Check every field and fail fast on an invalid configuration.

        Raises:
        -------
        ValueError : If any field is out of range or inconsistent
        '''
        scalars = {
            'radius': self.radius,
            'mass': self.mass,
            'gasConstant': self.gasConstant,
            'restDensity': self.restDensity,
            'viscosity': self.viscosity,
            'damping': self.damping,
            'timeStep': self.timeStep,
            'densityFloor': self.densityFloor,
        }
        for name, value in scalars.items():
            if not math.isfinite(value):
                raise ValueError(f'{name} must be finite, got {value}')

        for name in _VECTOR_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if len(value) != 3:
                raise ValueError(f'{name} must have 3 components, got {len(value)}')
            if not all(math.isfinite(v) for v in value):
                raise ValueError(f'{name} must be finite, got {value}')

        if self.radius <= 0.0:
            raise ValueError(f'radius must be positive, got {self.radius}')
        if self.mass <= 0.0:
            raise ValueError(f'mass must be positive, got {self.mass}')
        if self.timeStep <= 0.0:
            raise ValueError(f'timeStep must be positive, got {self.timeStep}')
        if self.restDensity < 0.0:
            raise ValueError(f'restDensity must be non-negative, got {self.restDensity}')
        if self.densityFloor <= 0.0:
            raise ValueError(f'densityFloor must be positive, got {self.densityFloor}')
        if not -1.0 <= self.damping <= 0.0:
            raise ValueError(f'damping must lie in [-1, 0], got {self.damping}')

        for axis, halfExtent in enumerate(self.boxHalfExtents):
            if halfExtent <= self.radius:
                raise ValueError(
                    f'boxHalfExtents[{axis}] = {halfExtent} must exceed the '
                    f'particle radius {self.radius}'
                )

        if self.neighborSearch not in NEIGHBOR_SEARCH_TYPES:
            raise ValueError(
                f'Unknown neighbor search: {self.neighborSearch} '
                f'(expected one of {", ".join(NEIGHBOR_SEARCH_TYPES)})'
            )

        if self.cellSize is not None and not (math.isfinite(self.cellSize) and self.cellSize > 0.0):
            raise ValueError(f'cellSize must be positive, got {self.cellSize}')

        # The 8-cell bucket query only covers the radius if cells are >= 2r;
        # the 27-cell sorted query needs cells >= r
        minimumCell = 2.0 * self.radius if self.neighborSearch == 'bucketList' else self.radius
        if self.effectiveCellSize < minimumCell:
            raise ValueError(
                f'cellSize {self.effectiveCellSize} is below the minimum '
                f'{minimumCell} for {self.neighborSearch} search'
            )

        if int(self.maxParticlesPerCell) != self.maxParticlesPerCell or self.maxParticlesPerCell < 1:
            raise ValueError(
                f'maxParticlesPerCell must be a positive integer, got {self.maxParticlesPerCell}'
            )

        if self.hashTableSize is not None:
            if self.neighborSearch != 'sortedOffset':
                raise ValueError('hashTableSize is only supported by sortedOffset search')
            if int(self.hashTableSize) != self.hashTableSize or self.hashTableSize < 1:
                raise ValueError(f'hashTableSize must be a positive integer, got {self.hashTableSize}')

        if (self.obstacleCenter is None) != (self.obstacleRadius is None):
            raise ValueError('obstacleCenter and obstacleRadius must be given together')
        if self.obstacleRadius is not None and not self.obstacleRadius > 0.0:
            raise ValueError(f'obstacleRadius must be positive, got {self.obstacleRadius}')

    ######################################################################
    # -- Derived Quantities -- #
    ######################################################################

    @property
    def radius2(self) -> float:
        return self.radius * self.radius

    @property
    def radius3(self) -> float:
        return self.radius2 * self.radius

    @property
    def radius4(self) -> float:
        return self.radius3 * self.radius

    @property
    def radius5(self) -> float:
        return self.radius4 * self.radius

    @property
    def boundsMin(self) -> np.ndarray:
        '''Lower corner of the containment box.'''
        return np.asarray(self.boxCenter) - np.asarray(self.boxHalfExtents)

    @property
    def boundsMax(self) -> np.ndarray:
        '''Upper corner of the containment box.'''
        return np.asarray(self.boxCenter) + np.asarray(self.boxHalfExtents)

    @property
    def boxSize(self) -> np.ndarray:
        '''Full box extent along each axis.'''
        return 2.0 * np.asarray(self.boxHalfExtents)

    @property
    def effectiveCellSize(self) -> float:
        '''Grid cell size, defaulting to 2r.'''
        if self.cellSize is None:
            return const.defaultCellSizeRatio * self.radius
        return self.cellSize

    @property
    def gridDimensions(self) -> tuple[int, int, int]:
        '''Number of grid cells (Dx, Dy, Dz) covering the box.'''
        dims = np.ceil(self.boxSize / self.effectiveCellSize).astype(int)
        return tuple(int(max(1, d)) for d in dims)

    ######################################################################
    # -- Serialization -- #
    ######################################################################

    def toDict(self) -> dict:
        '''JSON-serializable flat dictionary of every field.'''
        data = asdict(self)
        for name in _VECTOR_FIELDS:
            if data[name] is not None:
                data[name] = list(data[name])
        return data

    @classmethod
    def fromDict(cls, data: dict) -> SimulationConfig:
        '''
        Build a configuration from a flat dictionary of named fields.

        Missing fields take their defaults; unknown fields are rejected.

        Raises:
        -------
        ValueError : On unknown field names or invalid values
        '''
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f'Unknown configuration fields: {", ".join(unknown)}')
        return cls(**data)

    @classmethod
    def fromJson(cls, configPath: str) -> SimulationConfig:
        '''
        Load configuration from a JSON file.

        The file holds one flat object whose keys are field names.
        A nested 'simulation' object is also accepted.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file

        Returns:
        --------
        SimulationConfig : Loaded configuration
        '''
        with open(configPath, 'r') as f:
            data = json.load(f)

        if 'simulation' in data and isinstance(data['simulation'], dict):
            data = data['simulation']

        return cls.fromDict(data)


######################################################################
# -- Simulation State -- #
######################################################################

@dataclass
class SimulationState:
    '''
    Scalar diagnostics after a completed step.

    Parameters:
    -----------
    step : int
        Number of completed steps
    time : float
        Simulated time (step * dt)
    kineticEnergy : float
        Total kinetic energy
    maxVelocity : float
        Largest particle speed
    meanDensity : float
        Mean particle density
    maxDensity : float
        Largest particle density
    meanNeighbors : float
        Mean neighbor count per particle
    droppedParticles : int
        Particles dropped by full buckets during the last rebuild
    '''

    step: int
    time: float
    kineticEnergy: float
    maxVelocity: float
    meanDensity: float
    maxDensity: float
    meanNeighbors: float
    droppedParticles: int = 0


######################################################################
# -- Neighbor Search Protocol -- #
######################################################################

class NeighborSearch(Protocol):
    '''
    Interchangeable neighbor-search strategy.

    Implementations rebuild from scratch every step and keep no
    identity between steps beyond their pre-allocated buffers.
    '''

    def rebuild(self, positions: np.ndarray) -> NeighborList:
        '''Rebuild the index and return every particle's neighbors.'''
        ...

    @property
    def neighborList(self) -> NeighborList:
        '''Neighbors found by the most recent rebuild.'''
        ...

    @property
    def droppedCount(self) -> int:
        '''Particles that could not be stored during the last rebuild.'''
        ...

    def forEachNeighbor(self, index: int, visit: Callable[[int], None]) -> None:
        '''Call visit(j) for every neighbor j of particle index.'''
        ...
