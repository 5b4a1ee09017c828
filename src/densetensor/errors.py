"""Exceptions raised by tensor creation, indexing and arithmetic."""

from __future__ import annotations


class TensorError(Exception):
    """Base class for all densetensor errors."""

    pass


class InvalidTensorError(TensorError):
    """Raised when operating on a tensor that holds no data.

    This error occurs when:
    1. The tensor handle is None
    2. The data buffer could not be allocated
    3. The tensor was already released
    """

    pass


class IndexArityError(TensorError, IndexError):
    """Raised when an index tuple has a different length than the tensor's shape."""

    pass


class IndexOutOfRangeError(TensorError, IndexError):
    """Raised when an index falls outside the tensor.

    This error occurs when:
    1. A flat index is negative or not smaller than the number of entries
    2. A coordinate of an index tuple is negative or not smaller than its dimension
    """

    pass


class ShapeMismatchError(TensorError, ValueError):
    """Raised when an elementwise operation gets tensors of different shapes."""

    pass


class BroadcastDimensionError(TensorError, ValueError):
    """Raised when a tensor cannot be broadcast along the requested dimension.

    This error occurs when:
    1. The dimension does not exist (including every dimension of a scalar)
    2. The dimension is not of size 1
    3. The requested size is smaller than 1
    """

    pass
