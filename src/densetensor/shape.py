"""
This module implements the mapping between multi-dimensional index tuples and
offsets into a flat, row-major element buffer.

For a shape (s1, s2, ..., sn) an index tuple (k1, k2, ..., kn) is mapped to

    offset = k1 * m1 + k2 * m2 + ... + kn * mn

where each stride m_i is the product of all dimensions after i, so the last
dimension is contiguous (m_n = 1). The tuple (k1, ..., kn) therefore addresses
the same element as nested indexing t[k1][k2]...[kn] into a row-major array.
"""

from __future__ import annotations

import logging
from functools import reduce
from operator import mul
from typing import Iterable, Optional, Tuple

import numpy as np

from densetensor.errors import IndexArityError, IndexOutOfRangeError

logger = logging.getLogger(__name__)

Shape = Tuple[int, ...]
Index = Tuple[int, ...]


def _is_integer(value: object) -> bool:
    """Check for python or numpy integers, rejecting bools."""
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def build_shape(dims: Optional[Iterable[int]] = None) -> Shape:
    """Build a shape from an ordered iterable of dimension sizes.

    None or an empty iterable gives the scalar shape ().

    Raises
    ------
    TypeError
        If a dimension is not an integer.
    ValueError
        If a dimension is smaller than 1.
    """
    if dims is None:
        return ()
    shape = tuple(dims)
    for d in shape:
        if not _is_integer(d):
            raise TypeError(f"Dimension sizes must be integers, got {d!r}")
        if d < 1:
            raise ValueError(f"Dimension sizes must be positive, got {d} in {shape}")
    return tuple(int(d) for d in shape)


def build_index(coords: Iterable[int]) -> Index:
    """Build an index tuple from an ordered iterable of coordinates."""
    index = tuple(coords)
    for c in index:
        if not _is_integer(c):
            raise TypeError(f"Coordinates must be integers, got {c!r}")
        if c < 0:
            raise IndexOutOfRangeError(f"Coordinates must be non-negative, got {c} in {index}")
    return tuple(int(c) for c in index)


def num_entries(shape: Shape) -> int:
    """Number of elements addressed by a shape (1 for a scalar)."""
    return reduce(mul, shape, 1)


def compute_strides(shape: Shape) -> Tuple[int, ...]:
    """Compute row-major strides: stride[i] = shape[i+1] * ... * shape[n-1]."""
    strides = [1] * len(shape)
    for i in range(len(shape) - 2, -1, -1):
        strides[i] = strides[i + 1] * shape[i + 1]
    return tuple(strides)


def entry_offset(shape: Shape, strides: Tuple[int, ...], index: Index) -> int:
    """Map an index tuple to an offset into the flat buffer.

    A scalar shape ignores the tuple and always maps to offset 0. Otherwise the
    tuple must have one coordinate per dimension and each coordinate must lie
    inside its dimension.
    """
    if len(shape) == 0:
        return 0

    if len(index) != len(shape):
        raise IndexArityError(
            f"Index {tuple(index)} has {len(index)} coordinates, shape {shape} has {len(shape)}"
        )

    offset = 0
    for dim, (k, size, stride) in enumerate(zip(index, shape, strides)):
        if not _is_integer(k):
            raise TypeError(f"Coordinates must be integers, got {k!r}")
        if k < 0 or k >= size:
            raise IndexOutOfRangeError(
                f"Coordinate {k} out of range for dimension {dim} of size {size}"
            )
        offset += int(k) * stride
    return offset


def unravel_index(linear: int, shape: Shape) -> Index:
    """Convert a flat offset back into the index tuple that addresses it."""
    total = num_entries(shape)
    if not _is_integer(linear):
        raise TypeError(f"Flat index must be an integer, got {linear!r}")
    if linear < 0 or linear >= total:
        raise IndexOutOfRangeError(f"Flat index {linear} out of range for {total} entries")

    index = [0] * len(shape)
    cur = int(linear)
    for dim in range(len(shape) - 1, -1, -1):
        index[dim] = cur % shape[dim]
        cur //= shape[dim]
    return tuple(index)
