"""
This module implements the dense tensor: a shape descriptor over a flat,
zero-initialized float32 buffer. Elements are addressed either by flat offset
or by an index tuple that is mapped to an offset through row-major strides,
which are computed on first use and cached on the tensor. Elementwise
arithmetic is only defined between tensors of identical shape, and a size-1
dimension can be explicitly broadcast to a larger size.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from densetensor.errors import (
    BroadcastDimensionError,
    IndexOutOfRangeError,
    InvalidTensorError,
    ShapeMismatchError,
)
from densetensor.shape import (
    Shape,
    _is_integer,
    build_shape,
    compute_strides,
    entry_offset,
    num_entries,
    unravel_index,
)
from densetensor.visualization import describe_tensor, format_data, format_shape, plot_layout

logger = logging.getLogger(__name__)

DTYPE = np.float32

# Define float32 array type for clarity
Float32Array = NDArray[np.float32]

ArrayLike = Union[Float32Array, List, float, int]
TensorLike = Union[ArrayLike, "Tensor"]
IndexLike = Union[int, Sequence[int]]


class Operation(Enum):
    """Elementwise operations between tensors of the same shape."""

    ADD = "+"
    SUB = "-"


_UFUNCS = {
    Operation.ADD: np.add,
    Operation.SUB: np.subtract,
}


def _to_element(value: float) -> np.float32:
    """Round a value to the float32 element type, rejecting values too large to store."""
    with np.errstate(over="ignore"):
        element = DTYPE(value)
    if np.isinf(element) and not np.isinf(value):
        raise OverflowError(f"{value!r} is too large for a float32 element")
    return element


def _cast_array(data: ArrayLike) -> Float32Array:
    """Cast array-like object to numpy array with float32 dtype.

    Values are rounded to float32; finite values too large for float32 raise
    OverflowError instead of turning into inf.
    """
    if isinstance(data, list):
        source = np.array(data, dtype=np.float64)
    elif isinstance(data, np.ndarray):
        source = data.astype(np.float64)
    elif isinstance(data, (int, float, np.floating, np.integer)) and not isinstance(data, bool):
        source = np.array(data, dtype=np.float64)
    else:
        raise TypeError("Wrong data type")
    with np.errstate(over="ignore"):
        array = source.astype(DTYPE)
    if np.any(np.isinf(array) & ~np.isinf(source)):
        raise OverflowError("Values too large for float32 elements")
    return array


def _cast_tensor(x: TensorLike) -> Tensor:
    """Casts compatible datatypes to Tensor, raises if not compatible."""
    return x if isinstance(x, Tensor) else Tensor.from_array(x)


def is_null(t: Optional[Tensor]) -> bool:
    """Return True when t is not a tensor or holds no data."""
    return not isinstance(t, Tensor) or t.data is None


class Tensor(object):
    """Dense tensor over a flat float32 buffer."""

    def __init__(self, shape: Optional[Iterable[int]] = None, label: Optional[str] = None) -> None:
        """Allocate a zero-initialized tensor. No shape (or an empty one) makes a scalar."""
        self.shape: Shape = build_shape(shape)
        self.entries: int = num_entries(self.shape)
        try:
            self.data: Optional[Float32Array] = np.zeros(self.entries, dtype=DTYPE)
        except (MemoryError, ValueError, OverflowError) as e:
            raise InvalidTensorError(
                f"Could not allocate {self.entries} entries for shape {self.shape}"
            ) from e
        self.label = label
        self._strides: Optional[Tuple[int, ...]] = None
        self.shape_str: str = format_shape(self.shape)
        logger.debug("Allocated tensor %s with %d entries", self.shape_str, self.entries)

    @classmethod
    def create(cls, shape: Optional[Iterable[int]] = None) -> Tensor:
        """Allocate a zero-initialized tensor of the given shape."""
        return cls(shape)

    @classmethod
    def scalar(cls, value: float) -> Tensor:
        """Create a rank-0 tensor holding value."""
        t = cls()
        t.set(0, value)
        return t

    @classmethod
    def from_array(cls, values: ArrayLike, label: Optional[str] = None) -> Tensor:
        """Create a tensor with the shape and row-major contents of an array-like."""
        array = _cast_array(values)
        t = cls(array.shape, label)
        t.data[:] = array.reshape(-1)
        return t

    def __repr__(self) -> str:
        """Return string representation of the tensor."""
        return (
            "Tensor"
            + (f"({self.label}, " if self.label is not None else "(")
            + f"shape={self.shape})"
        )

    def __str__(self) -> str:
        """Return string representation of the tensor."""
        return self.__repr__()

    def __len__(self) -> int:
        """Return the size of the first dimension of the tensor."""
        if self.shape == ():
            raise TypeError("len() of a 0-d tensor")
        return self.shape[0]

    def __enter__(self) -> Tensor:
        return self

    def __exit__(self, *exc) -> None:
        self.release()

    @property
    def is_valid(self) -> bool:
        """Whether the tensor still holds its data buffer."""
        return self.data is not None

    def _check_valid(self) -> None:
        if self.data is None:
            raise InvalidTensorError(f"{self!r} holds no data")

    def release(self) -> None:
        """Drop the data buffer, stride cache, label and rendering state.

        The shape is kept for diagnostics; every data access afterwards raises
        InvalidTensorError.
        """
        self.data = None
        self._strides = None
        self.label = None
        self.shape_str = ""

    @property
    def strides(self) -> Tuple[int, ...]:
        """Row-major strides of the tensor, computed on first use."""
        self._check_valid()
        if self._strides is None:
            self._strides = compute_strides(self.shape)
            logger.debug("Computed strides %s for shape %s", self._strides, self.shape_str)
        return self._strides

    @property
    def data_str(self) -> str:
        """Flat contents formatted for display."""
        self._check_valid()
        return format_data(self.data)

    def set_label(self, label: Optional[str]) -> Tensor:
        """Attach or replace the display name of the tensor."""
        self._check_valid()
        self.label = label
        return self

    def like(self) -> Tensor:
        """Create a zero-initialized tensor with the same shape.

        The label, if any, is copied with a " (Copy)" marker. Data is not copied.
        """
        self._check_valid()
        out = Tensor(self.shape)
        if self.label is not None:
            out.label = self.label + " (Copy)"
        return out

    def to_numpy(self) -> Float32Array:
        """Return a copy of the data shaped like the tensor."""
        self._check_valid()
        return self.data.reshape(self.shape).copy()

    def _check_flat_index(self, index: int) -> int:
        if not _is_integer(index):
            raise TypeError(f"Flat index must be an integer, got {index!r}")
        if index < 0 or index >= self.entries:
            raise IndexOutOfRangeError(
                f"Flat index {index} out of range for {self.entries} entries"
            )
        return int(index)

    def get(self, index: int) -> float:
        """Read the element at a flat offset.

        Elements are stored as float32, so the value read back is the float32
        rounding of what was written (0.1 reads back as 0.10000000149011612).
        """
        self._check_valid()
        return float(self.data[self._check_flat_index(index)])

    def set(self, index: int, value: float) -> None:
        """Write the element at a flat offset, rounded to float32.

        Raises OverflowError for finite values too large for float32.
        """
        self._check_valid()
        self.data[self._check_flat_index(index)] = _to_element(value)

    def entry(self, index: Sequence[int]) -> int:
        """Map an index tuple to its flat offset.

        Scalars ignore the tuple and map to offset 0 without touching strides.
        """
        self._check_valid()
        if self.shape == ():
            return 0
        return entry_offset(self.shape, self.strides, tuple(index))

    def entry_get(self, index: Sequence[int]) -> float:
        """Read the element addressed by an index tuple."""
        return self.get(self.entry(index))

    def entry_set(self, index: Sequence[int], value: float) -> None:
        """Write the element addressed by an index tuple."""
        self.set(self.entry(index), value)

    def __getitem__(self, index: IndexLike) -> float:
        if _is_integer(index):
            index = (index,)
        return self.entry_get(index)

    def __setitem__(self, index: IndexLike, value: float) -> None:
        if _is_integer(index):
            index = (index,)
        self.entry_set(index, value)

    def broadcast(self, dim: int, n: int) -> Tensor:
        """Replicate the tensor along a size-1 dimension to size n.

        Every element of the output is read from the source at the same index
        tuple with the broadcast coordinate set to 0.
        """
        self._check_valid()
        rank = len(self.shape)
        if not _is_integer(dim) or not -rank <= dim < rank:
            raise BroadcastDimensionError(f"Dimension {dim} does not exist in shape {self.shape}")
        dim = int(dim) % rank
        if self.shape[dim] != 1:
            raise BroadcastDimensionError(
                f"Dimension {dim} of shape {self.shape} has size {self.shape[dim]}, expected 1"
            )
        if not _is_integer(n) or n < 1:
            raise BroadcastDimensionError(f"Cannot broadcast to size {n}")

        out = Tensor(self.shape[:dim] + (int(n),) + self.shape[dim + 1 :])
        for i in range(out.entries):
            src = list(unravel_index(i, out.shape))
            src[dim] = 0
            out.data[i] = self.data[self.entry(src)]

        logger.debug("Broadcast %s along dimension %d to %s", self.shape_str, dim, out.shape_str)
        return out

    def __add__(self, other: TensorLike) -> Tensor:
        """Add a tensor of the same shape."""
        return add(self, _cast_tensor(other))

    def __radd__(self, other: TensorLike) -> Tensor:
        """Handle addition when tensor is the right operand."""
        return add(_cast_tensor(other), self)

    def __sub__(self, other: TensorLike) -> Tensor:
        """Subtract a tensor of the same shape."""
        return sub(self, _cast_tensor(other))

    def __rsub__(self, other: TensorLike) -> Tensor:
        """Handle subtraction when tensor is the right operand."""
        return sub(_cast_tensor(other), self)

    def describe(self) -> str:
        """Return the printable description of label, shape and data."""
        return describe_tensor(self)

    def render(self, output_format: str = "png") -> None:
        """Renders the memory layout diagram."""
        plot_layout(self, output_format)


def shapes_match(a: Optional[Tensor], b: Optional[Tensor]) -> bool:
    """Return True iff both tensors are valid and have identical shapes."""
    if is_null(a) or is_null(b):
        return False
    return a.shape == b.shape


def _elementwise(a: Tensor, b: Tensor, op: Operation) -> Tensor:
    """Combine two tensors of the same shape element by element into a new tensor."""
    for t in (a, b):
        if is_null(t):
            raise InvalidTensorError(f"Cannot apply {op.value} to an invalid tensor")
    if not shapes_match(a, b):
        logger.debug("tensor shape mismatch: expected %s, got %s", a.shape_str, b.shape_str)
        raise ShapeMismatchError(
            f"Cannot apply {op.value} to tensors of shape {a.shape_str} and {b.shape_str}"
        )

    out = a.like()
    _UFUNCS[op](a.data, b.data, out=out.data)
    return out


def add(a: Tensor, b: Tensor) -> Tensor:
    """Elementwise sum of two tensors of the same shape."""
    return _elementwise(a, b, Operation.ADD)


def sub(a: Tensor, b: Tensor) -> Tensor:
    """Elementwise difference of two tensors of the same shape."""
    return _elementwise(a, b, Operation.SUB)
