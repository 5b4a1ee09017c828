from .engine import Operation, Tensor, TensorLike, add, is_null, shapes_match, sub
from .errors import (
    BroadcastDimensionError,
    IndexArityError,
    IndexOutOfRangeError,
    InvalidTensorError,
    ShapeMismatchError,
    TensorError,
)
from .shape import Shape, build_index, build_shape, compute_strides, entry_offset, unravel_index

__all__ = [
    "BroadcastDimensionError",
    "IndexArityError",
    "IndexOutOfRangeError",
    "InvalidTensorError",
    "Operation",
    "Shape",
    "ShapeMismatchError",
    "Tensor",
    "TensorError",
    "TensorLike",
    "add",
    "build_index",
    "build_shape",
    "compute_strides",
    "entry_offset",
    "is_null",
    "shapes_match",
    "sub",
    "unravel_index",
]
