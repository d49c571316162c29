# -- Spatial Index for Neighbor Search -- #

'''
Uniform-grid neighbor search for particle fluids.

The grid is anchored at the lower corner of the simulation box and
divided into cubic cells. Two interchangeable strategies sit behind
the same interface (rebuild / neighborList / forEachNeighbor) and are
selected by configuration through createNeighborSearch():

    BucketListGrid (bucket list):
        Each cell owns a fixed-capacity bucket of particle indices.
        Overflowing inserts are dropped. A particle queries only the
        8 cells nearest to it (the octant-adaptive neighborhood),
        which requires cellSize >= 2r.

    SortedOffsetGrid (sorted offset table, default):
        (cellHash, particleIndex) pairs are sorted with a bitonic
        network; a cell -> first-offset table then lets each particle
        walk the runs of its 27 surrounding cells. No particle is ever
        dropped. Requires cellSize >= r.

Both return a NeighborList in compressed-row form: the neighbors of
particle i are indices[offsets[i]:offsets[i + 1]].

References:
-----------
Green (2010) -- Particle Simulation using CUDA
Ihmsen et al. (2011) -- Parallel Neighbor-Search for SPH
Teschner et al. (2003) -- Optimized Spatial Hashing for Collision
    Detection of Deformable Objects

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from typing import Callable

import numpy as np

from FluidSim import constants as const
from FluidSim.sph.protocols import SimulationConfig, NeighborSearch
from FluidSim.sph.bitonicSort import bitonicSort, padToPowerOfTwo


# Octant selection: column 0 -> x, 1 -> y, 2 -> z; a 1 means "step toward
# the nearer neighboring cell" on that axis
_OCTANT_MASK = np.array(list(product((0, 1), repeat=3)), dtype=np.int64)

# Full 3x3x3 stencil of cell offsets
_STENCIL_27 = np.array(list(product((-1, 0, 1), repeat=3)), dtype=np.int64)


######################################################################
# -- Neighbor List (Compressed Rows) -- #
######################################################################

@dataclass
class NeighborList:
    '''
    Per-particle neighbor indices in compressed-row form.

    Parameters:
    -----------
    offsets : np.ndarray
        Row offsets, shape (N + 1,)
    indices : np.ndarray
        Concatenated neighbor indices, shape (M,)
    '''

    offsets: np.ndarray
    indices: np.ndarray

    @property
    def nParticles(self) -> int:
        '''Number of particles (rows).'''
        return len(self.offsets) - 1

    @property
    def nPairs(self) -> int:
        '''Total number of directed neighbor entries.'''
        return len(self.indices)

    @property
    def counts(self) -> np.ndarray:
        '''Neighbor count per particle, shape (N,).'''
        return np.diff(self.offsets)

    def neighborsOf(self, index: int) -> np.ndarray:
        '''Neighbor indices of one particle.'''
        return self.indices[self.offsets[index]:self.offsets[index + 1]]

    def pairs(self) -> tuple[np.ndarray, np.ndarray]:
        '''
        Directed (i, j) pairs grouped by i.

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] : (owners, neighbors), each shape (M,)
        '''
        owners = np.repeat(np.arange(self.nParticles, dtype=np.int64), self.counts)
        return (owners, self.indices)

    def asSets(self) -> list[set[int]]:
        '''Neighbor sets per particle (for inspection and testing).'''
        return [set(self.neighborsOf(i).tolist()) for i in range(self.nParticles)]

    @classmethod
    def empty(cls, nParticles: int) -> NeighborList:
        '''Neighbor list where no particle has neighbors.'''
        return cls(
            offsets=np.zeros(nParticles + 1, dtype=np.int64),
            indices=np.zeros(0, dtype=np.int64),
        )

    @classmethod
    def fromPairs(
        cls, owners: np.ndarray, neighbors: np.ndarray, nParticles: int
    ) -> NeighborList:
        '''
        Build from directed pairs already grouped by owner.

        Parameters:
        -----------
        owners : np.ndarray
            Owner index per entry, non-decreasing, shape (M,)
        neighbors : np.ndarray
            Neighbor index per entry, shape (M,)
        nParticles : int
            Total number of particles

        Returns:
        --------
        NeighborList : Compressed-row neighbor list
        '''
        counts = np.bincount(owners, minlength=nParticles).astype(np.int64)
        offsets = np.zeros(nParticles + 1, dtype=np.int64)
        np.cumsum(counts, out=offsets[1:])
        return cls(offsets=offsets, indices=np.asarray(neighbors, dtype=np.int64))


def _ranksWithinRuns(sortedKeys: np.ndarray) -> np.ndarray:
    '''Position of each entry inside its run of equal consecutive keys.'''
    n = len(sortedKeys)
    if n == 0:
        return np.zeros(0, dtype=np.int64)
    runStart = np.empty(n, dtype=bool)
    runStart[0] = True
    runStart[1:] = sortedKeys[1:] != sortedKeys[:-1]
    positions = np.arange(n, dtype=np.int64)
    startOfRun = np.maximum.accumulate(np.where(runStart, positions, 0))
    return positions - startOfRun


def _filterByDistance(
    positions: np.ndarray,
    owners: np.ndarray,
    candidates: np.ndarray,
    radius2: float,
) -> tuple[np.ndarray, np.ndarray]:
    '''Keep candidate pairs closer than the radius, excluding self-pairs.'''
    notSelf = candidates != owners
    owners, candidates = owners[notSelf], candidates[notSelf]
    diff = positions[owners] - positions[candidates]
    distSq = np.einsum('ij,ij->i', diff, diff)
    within = distSq < radius2
    return (owners[within], candidates[within])


def _forEachNeighbor(
    neighborList: NeighborList, index: int, visit: Callable[[int], None]
) -> None:
    for neighbor in neighborList.neighborsOf(index):
        visit(int(neighbor))


######################################################################
# -- Grid Geometry -- #
######################################################################

class GridGeometry:
    '''
    Maps positions to integer cells and cells to hash-table slots.

    Parameters:
    -----------
    config : SimulationConfig
        Supplies the box, cell size and optional hash table size
    '''

    def __init__(self, config: SimulationConfig) -> None:
        self._origin = config.boundsMin
        self._cellSize = config.effectiveCellSize
        self._dims = np.array(config.gridDimensions, dtype=np.int64)
        self._exact = config.hashTableSize is None
        if self._exact:
            self._tableSize = int(np.prod(self._dims))
        else:
            self._tableSize = int(config.hashTableSize)

    @property
    def cellSize(self) -> float:
        return self._cellSize

    @property
    def origin(self) -> np.ndarray:
        return self._origin

    @property
    def dimensions(self) -> tuple[int, int, int]:
        '''Grid dimensions (Dx, Dy, Dz).'''
        return tuple(int(d) for d in self._dims)

    @property
    def tableSize(self) -> int:
        '''Number of hash slots (Dx*Dy*Dz for the exact hash).'''
        return self._tableSize

    @property
    def isExact(self) -> bool:
        '''True when cells map one-to-one onto slots.'''
        return self._exact

    def cellOf(self, positions: np.ndarray) -> np.ndarray:
        '''
        Integer cell coordinates of each position.

        cell = floor((position - origin) / cellSize), clamped to the grid.

        Parameters:
        -----------
        positions : np.ndarray
            Positions, shape (N, 3) or (3,)

        Returns:
        --------
        np.ndarray : Cell coordinates, same leading shape, int64
        '''
        cells = np.floor((np.asarray(positions, dtype=float) - self._origin) / self._cellSize)
        return np.clip(cells, 0, self._dims - 1).astype(np.int64)

    def inGrid(self, cells: np.ndarray) -> np.ndarray:
        '''True for cells inside [0, D) on every axis.'''
        return np.all((cells >= 0) & (cells < self._dims), axis=-1)

    def flatHash(self, cells: np.ndarray) -> np.ndarray:
        '''Row-major flat index x + Dx * (y + Dy * z).'''
        cells = np.asarray(cells, dtype=np.int64)
        return cells[..., 0] + self._dims[0] * (cells[..., 1] + self._dims[1] * cells[..., 2])

    def spatialHash(self, cells: np.ndarray) -> np.ndarray:
        '''Unbounded XOR-prime hash reduced modulo the table size.'''
        cells = np.asarray(cells, dtype=np.int64)
        p1, p2, p3 = const.hashPrimes
        mixed = (cells[..., 0] * p1) ^ (cells[..., 1] * p2) ^ (cells[..., 2] * p3)
        return np.mod(mixed, self._tableSize)

    def hashCells(self, cells: np.ndarray) -> np.ndarray:
        '''Slot of each cell using the configured hash.'''
        if self._exact:
            return self.flatHash(cells)
        return self.spatialHash(cells)


######################################################################
# -- Strategy A: Bucket List -- #
######################################################################

class BucketListGrid:
    '''
    Fixed-capacity bucket grid with an octant-adaptive 8-cell query.

    Buckets and counts are pre-allocated once and reused every step.
    Particles are inserted in index order; once a bucket holds
    maxParticlesPerCell entries further inserts are dropped. This is
    a bounded approximation, reported through droppedCount.

    Parameters:
    -----------
    config : SimulationConfig
        Simulation configuration (cellSize must be >= 2r)
    '''

    def __init__(self, config: SimulationConfig) -> None:
        self._geometry = GridGeometry(config)
        self._radius2 = config.radius2
        self._capacity = int(config.maxParticlesPerCell)
        self._neighborCapacity = 8 * self._capacity
        self._chunkSize = const.candidateChunkSize

        nCells = self._geometry.tableSize
        self._buckets = np.full((nCells, self._capacity), -1, dtype=np.int64)
        self._bucketCounts = np.zeros(nCells, dtype=np.int64)
        self._droppedCount = 0
        self._neighborList = NeighborList.empty(0)

    @property
    def geometry(self) -> GridGeometry:
        return self._geometry

    @property
    def neighborList(self) -> NeighborList:
        return self._neighborList

    @property
    def droppedCount(self) -> int:
        return self._droppedCount

    @property
    def bucketCounts(self) -> np.ndarray:
        '''Stored particles per cell after the last rebuild.'''
        return self._bucketCounts

    @property
    def neighborCapacity(self) -> int:
        '''Maximum neighbors stored per particle (8 buckets worth).'''
        return self._neighborCapacity

    def bucket(self, cellHash: int) -> np.ndarray:
        '''Particle indices stored in one cell.'''
        return self._buckets[cellHash, :self._bucketCounts[cellHash]]

    def rebuild(self, positions: np.ndarray) -> NeighborList:
        '''
        Refill the buckets and rebuild every particle's neighbor list.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 3)

        Returns:
        --------
        NeighborList : Neighbors within the radius (self excluded)
        '''
        positions = np.asarray(positions, dtype=float)
        nParticles = len(positions)

        # 1. Clear all buckets
        self._buckets.fill(-1)
        self._bucketCounts.fill(0)

        if nParticles == 0:
            self._droppedCount = 0
            self._neighborList = NeighborList.empty(0)
            return self._neighborList

        # 2. Insert particles in index order, dropping overflow
        cells = self._geometry.cellOf(positions)
        hashes = self._geometry.flatHash(cells)
        order = np.argsort(hashes, kind='stable')
        sortedHashes = hashes[order]
        ranks = _ranksWithinRuns(sortedHashes)
        stored = ranks < self._capacity

        self._buckets[sortedHashes[stored], ranks[stored]] = order[stored]
        self._bucketCounts[:] = np.bincount(
            sortedHashes[stored], minlength=self._geometry.tableSize
        )
        self._droppedCount = int(nParticles - np.count_nonzero(stored))

        # 3. Gather candidates from the 8 nearest cells and filter by radius
        octantHashes = self._octantHashes(positions, cells)

        ownerChunks: list[np.ndarray] = []
        neighborChunks: list[np.ndarray] = []
        for start in range(0, nParticles, self._chunkSize):
            stop = min(start + self._chunkSize, nParticles)
            owners, neighbors = self._queryChunk(positions, octantHashes, start, stop)
            ownerChunks.append(owners)
            neighborChunks.append(neighbors)

        self._neighborList = NeighborList.fromPairs(
            np.concatenate(ownerChunks), np.concatenate(neighborChunks), nParticles
        )
        return self._neighborList

    def forEachNeighbor(self, index: int, visit: Callable[[int], None]) -> None:
        '''Call visit(j) for every neighbor j of particle index.'''
        _forEachNeighbor(self._neighborList, index, visit)

    def _octantHashes(self, positions: np.ndarray, cells: np.ndarray) -> np.ndarray:
        '''
        Hashes of the 8 cells nearest to each particle.

        Per axis the particle's own cell is paired with cell + 1 if the
        particle sits at or past the cell midpoint, else with cell - 1.
        Cells outside the grid get hash -1.

        Returns:
        --------
        np.ndarray : Cell hashes, shape (N, 8)
        '''
        geometry = self._geometry
        midpoints = geometry.origin + (cells + 0.5) * geometry.cellSize
        direction = np.where(positions >= midpoints, 1, -1).astype(np.int64)

        octantCells = cells[:, np.newaxis, :] + _OCTANT_MASK[np.newaxis, :, :] * direction[:, np.newaxis, :]
        valid = geometry.inGrid(octantCells)
        return np.where(valid, geometry.flatHash(octantCells), -1)

    def _queryChunk(
        self,
        positions: np.ndarray,
        octantHashes: np.ndarray,
        start: int,
        stop: int,
    ) -> tuple[np.ndarray, np.ndarray]:
        '''Neighbor pairs for particles [start, stop).'''
        chunkHashes = octantHashes[start:stop]
        nRows = stop - start

        # (rows, 8, capacity) candidate table; empty slots hold -1
        candidates = self._buckets[np.where(chunkHashes >= 0, chunkHashes, 0)]
        candidates[chunkHashes < 0] = -1
        candidates = candidates.reshape(nRows, self._neighborCapacity)

        rows, cols = np.nonzero(candidates >= 0)
        owners = rows.astype(np.int64) + start
        owners, neighbors = _filterByDistance(
            positions, owners, candidates[rows, cols], self._radius2
        )

        # Per-particle list capacity
        keep = _ranksWithinRuns(owners) < self._neighborCapacity
        return (owners[keep], neighbors[keep])


######################################################################
# -- Strategy B: Sorted Offset Table -- #
######################################################################

class SortedOffsetGrid:
    '''
    Sorted (cellHash, particleIndex) array with a cell offset table.

    Every rebuild pairs each particle's cell hash with its index,
    pads to a power of two and sorts the pairs with bitonicSort().
    cellOffsets[h] then holds the first sorted position whose hash is
    h (-1 if the cell is empty) and cellCounts[h] the run length.

    Parameters:
    -----------
    config : SimulationConfig
        Simulation configuration (cellSize must be >= r)
    '''

    def __init__(self, config: SimulationConfig) -> None:
        self._geometry = GridGeometry(config)
        self._radius2 = config.radius2
        self._chunkSize = const.candidateChunkSize

        tableSize = self._geometry.tableSize
        self._cellOffsets = np.full(tableSize, -1, dtype=np.int64)
        self._cellCounts = np.zeros(tableSize, dtype=np.int64)
        self._sortedHashes = np.zeros(0, dtype=np.int64)
        self._sortedIndices = np.zeros(0, dtype=np.int64)
        self._neighborList = NeighborList.empty(0)

    @property
    def geometry(self) -> GridGeometry:
        return self._geometry

    @property
    def neighborList(self) -> NeighborList:
        return self._neighborList

    @property
    def droppedCount(self) -> int:
        '''Always 0: the sorted table never drops particles.'''
        return 0

    @property
    def cellOffsets(self) -> np.ndarray:
        return self._cellOffsets

    @property
    def cellCounts(self) -> np.ndarray:
        return self._cellCounts

    @property
    def sortedHashes(self) -> np.ndarray:
        return self._sortedHashes

    @property
    def sortedIndices(self) -> np.ndarray:
        return self._sortedIndices

    def particlesInSlot(self, cellHash: int) -> np.ndarray:
        '''
        Walk the sorted array from cellOffsets[cellHash] while the hash matches.

        Returns:
        --------
        np.ndarray : Particle indices stored under this hash
        '''
        start = self._cellOffsets[cellHash]
        if start < 0:
            return np.zeros(0, dtype=np.int64)
        stop = start
        while stop < len(self._sortedHashes) and self._sortedHashes[stop] == cellHash:
            stop += 1
        return self._sortedIndices[start:stop]

    def rebuild(self, positions: np.ndarray) -> NeighborList:
        '''
        Re-sort the particles by cell and rebuild every neighbor list.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 3)

        Returns:
        --------
        NeighborList : Neighbors within the radius (self excluded)
        '''
        positions = np.asarray(positions, dtype=float)
        nParticles = len(positions)

        self._cellOffsets.fill(-1)
        self._cellCounts.fill(0)

        if nParticles == 0:
            self._sortedHashes = np.zeros(0, dtype=np.int64)
            self._sortedIndices = np.zeros(0, dtype=np.int64)
            self._neighborList = NeighborList.empty(0)
            return self._neighborList

        # 1. Hash every particle and sort (hash, index) pairs
        cells = self._geometry.cellOf(positions)
        hashes = self._geometry.hashCells(cells).astype(np.int64)
        keys, values = padToPowerOfTwo(hashes, np.arange(nParticles, dtype=np.int64))
        sortedKeys, sortedValues = bitonicSort(keys, values)
        self._sortedHashes = sortedKeys[:nParticles]
        self._sortedIndices = sortedValues[:nParticles]

        # 2. First offset and run length of every occupied slot
        runStart = _ranksWithinRuns(self._sortedHashes) == 0
        starts = np.nonzero(runStart)[0]
        runLengths = np.diff(np.append(starts, nParticles))
        self._cellOffsets[self._sortedHashes[starts]] = starts
        self._cellCounts[self._sortedHashes[starts]] = runLengths

        # 3. Walk the runs of the 27 surrounding cells
        stencilHashes = self._stencilHashes(cells)

        ownerChunks: list[np.ndarray] = []
        neighborChunks: list[np.ndarray] = []
        for start in range(0, nParticles, self._chunkSize):
            stop = min(start + self._chunkSize, nParticles)
            owners, neighbors = self._queryChunk(positions, stencilHashes, start, stop)
            ownerChunks.append(owners)
            neighborChunks.append(neighbors)

        self._neighborList = NeighborList.fromPairs(
            np.concatenate(ownerChunks), np.concatenate(neighborChunks), nParticles
        )
        return self._neighborList

    def forEachNeighbor(self, index: int, visit: Callable[[int], None]) -> None:
        '''Call visit(j) for every neighbor j of particle index.'''
        _forEachNeighbor(self._neighborList, index, visit)

    def _stencilHashes(self, cells: np.ndarray) -> np.ndarray:
        '''
        Slots of the 3x3x3 neighborhood of each particle's cell.

        Out-of-grid cells (exact hash) and repeated slots (hash
        collisions) are replaced by -1 so every slot is walked once.

        Returns:
        --------
        np.ndarray : Slots sorted per row, shape (N, 27)
        '''
        geometry = self._geometry
        stencilCells = cells[:, np.newaxis, :] + _STENCIL_27[np.newaxis, :, :]

        if geometry.isExact:
            valid = geometry.inGrid(stencilCells)
            slots = np.where(valid, geometry.flatHash(stencilCells), -1)
        else:
            slots = geometry.spatialHash(stencilCells)

        slots = np.sort(slots, axis=1)
        repeated = np.zeros_like(slots, dtype=bool)
        repeated[:, 1:] = slots[:, 1:] == slots[:, :-1]
        slots[repeated] = -1
        return slots

    def _queryChunk(
        self,
        positions: np.ndarray,
        stencilHashes: np.ndarray,
        start: int,
        stop: int,
    ) -> tuple[np.ndarray, np.ndarray]:
        '''Neighbor pairs for particles [start, stop).'''
        chunkSlots = stencilHashes[start:stop]
        rows, cols = np.nonzero(chunkSlots >= 0)
        slots = chunkSlots[rows, cols]

        runStarts = self._cellOffsets[slots]
        runLengths = self._cellCounts[slots]
        occupied = runLengths > 0
        rows, runStarts, runLengths = rows[occupied], runStarts[occupied], runLengths[occupied]

        # Expand every (particle, run) into one entry per run element
        total = int(runLengths.sum())
        owners = np.repeat(rows.astype(np.int64) + start, runLengths)
        runBase = np.repeat(np.cumsum(runLengths) - runLengths, runLengths)
        sortedPositions = np.repeat(runStarts, runLengths) + (np.arange(total, dtype=np.int64) - runBase)
        candidates = self._sortedIndices[sortedPositions]

        return _filterByDistance(positions, owners, candidates, self._radius2)


######################################################################
# -- Reference Search and Factory -- #
######################################################################

def bruteForceNeighbors(positions: np.ndarray, radius: float) -> NeighborList:
    '''
    O(N^2) reference neighbor search.

    Parameters:
    -----------
    positions : np.ndarray
        Particle positions, shape (N, 3)
    radius : float
        Interaction radius (pairs strictly closer are neighbors)

    Returns:
    --------
    NeighborList : Exact neighbor lists (self excluded)
    '''
    positions = np.asarray(positions, dtype=float)
    nParticles = len(positions)
    if nParticles == 0:
        return NeighborList.empty(0)

    diff = positions[:, np.newaxis, :] - positions[np.newaxis, :, :]
    distSq = np.einsum('ijk,ijk->ij', diff, diff)
    within = distSq < radius * radius
    np.fill_diagonal(within, False)
    owners, neighbors = np.nonzero(within)
    return NeighborList.fromPairs(owners.astype(np.int64), neighbors, nParticles)


def createNeighborSearch(config: SimulationConfig) -> NeighborSearch:
    '''
    Create the neighbor search selected by config.neighborSearch.

    Parameters:
    -----------
    config : SimulationConfig
        Simulation configuration

    Returns:
    --------
    NeighborSearch : BucketListGrid or SortedOffsetGrid

    Raises:
    -------
    ValueError : If the strategy name is unknown
    '''
    if config.neighborSearch == 'sortedOffset':
        return SortedOffsetGrid(config)
    elif config.neighborSearch == 'bucketList':
        return BucketListGrid(config)
    else:
        raise ValueError(f'Unknown neighbor search: {config.neighborSearch}')
