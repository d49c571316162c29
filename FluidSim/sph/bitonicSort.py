# -- Bitonic Merge Sort -- #

'''
Bitonic sorting network for (key, value) pairs.

The comparison pattern of a bitonic network is fixed in advance, so
every compare-and-swap within one (stage, block) pass is independent
of the others. Each pass is therefore a single vectorized NumPy
operation over all indices; passes run strictly in order.

    for stage = 2, 4, 8, ..., N:
        for block = stage/2, stage/4, ..., 1:
            for every i (in parallel):
                l = i xor block
                if l > i:
                    ascending = (i & stage) == 0
                    swap (i, l) if out of order for that direction

Pairs are compared on the composite (key, value), so equal keys are
ordered by value and the result is fully deterministic. N must be a
power of two; pad with padToPowerOfTwo() first if needed.

Complexity: O(N log^2 N) comparisons.

References:
-----------
Batcher (1968) -- Sorting networks and their applications

Sean Bowman [10/19/2026]
'''

from __future__ import annotations

import numpy as np


def isPowerOfTwo(n: int) -> bool:
    '''True if n is a positive power of two.'''
    return n > 0 and (n & (n - 1)) == 0


def nextPowerOfTwo(n: int) -> int:
    '''Smallest power of two >= n (1 for n <= 1).'''
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def padToPowerOfTwo(
    keys: np.ndarray,
    values: np.ndarray,
    sentinelKey: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    '''
    Pad keys and values to the next power-of-two length.

    Padding keys default to the maximum of the key dtype so the
    sentinel pairs sort to the end; padding values use the maximum of
    the value dtype for the same reason.

    Parameters:
    -----------
    keys : np.ndarray
        Integer sort keys, shape (N,)
    values : np.ndarray
        Integer payload, shape (N,)
    sentinelKey : int | None
        Key used for padding (defaults to the dtype maximum)

    Returns:
    --------
    tuple[np.ndarray, np.ndarray] : Padded (keys, values)
    '''
    keys = np.asarray(keys)
    values = np.asarray(values)
    n = len(keys)
    target = nextPowerOfTwo(n)
    if target == n:
        return (keys.copy(), values.copy())

    if sentinelKey is None:
        sentinelKey = np.iinfo(keys.dtype).max
    sentinelValue = np.iinfo(values.dtype).max

    paddedKeys = np.full(target, sentinelKey, dtype=keys.dtype)
    paddedValues = np.full(target, sentinelValue, dtype=values.dtype)
    paddedKeys[:n] = keys
    paddedValues[:n] = values
    return (paddedKeys, paddedValues)


def bitonicSort(keys: np.ndarray, values: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    '''
    Sort (key, value) pairs by key with a bitonic network.

    Parameters:
    -----------
    keys : np.ndarray
        Sort keys, shape (N,) with N a power of two
    values : np.ndarray
        Values carried with their keys, shape (N,)

    Returns:
    --------
    tuple[np.ndarray, np.ndarray] :
        (sortedKeys, sortedValues); the inputs are not modified

    Raises:
    -------
    ValueError : If the arrays differ in length or N is not a power of two
    '''
    keys = np.array(keys, copy=True)
    values = np.array(values, copy=True)

    if keys.ndim != 1 or values.ndim != 1:
        raise ValueError('bitonicSort expects 1-D key and value arrays')
    if len(keys) != len(values):
        raise ValueError(
            f'keys and values must have the same length ({len(keys)} != {len(values)})'
        )

    n = len(keys)
    if n <= 1:
        return (keys, values)
    if not isPowerOfTwo(n):
        raise ValueError(f'bitonicSort requires a power-of-two length, got {n}')

    indices = np.arange(n)

    stage = 2
    while stage <= n:
        block = stage >> 1
        while block > 0:
            partners = indices ^ block
            lower = indices[partners > indices]
            upper = lower ^ block
            ascending = (lower & stage) == 0

            keyLo, keyHi = keys[lower], keys[upper]
            valLo, valHi = values[lower], values[upper]
            loGreater = (keyLo > keyHi) | ((keyLo == keyHi) & (valLo > valHi))
            loLess = (keyLo < keyHi) | ((keyLo == keyHi) & (valLo < valHi))
            swap = np.where(ascending, loGreater, loLess)

            swapLo, swapHi = lower[swap], upper[swap]
            keys[swapLo], keys[swapHi] = keys[swapHi], keys[swapLo]
            values[swapLo], values[swapHi] = values[swapHi], values[swapLo]

            block >>= 1
        stage <<= 1

    return (keys, values)
