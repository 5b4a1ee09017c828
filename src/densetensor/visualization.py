"""Module for rendering tensors as text and as layout diagrams."""

from typing import TYPE_CHECKING, Iterable, Optional

import numpy as np
from graphviz import Digraph

if TYPE_CHECKING:
    from densetensor.engine import Tensor

SHAPE_DISPLAY_LIMIT = 512
DATA_DISPLAY_LIMIT = 1024
MAX_ELEMENTS = 3

_ELLIPSIS = "..."
_RECORD_SPECIALS = str.maketrans({c: f"\\{c}" for c in "{}|<>"})


def _bounded(text: str, limit: int) -> str:
    """Cut text down to at most limit characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    if limit <= len(_ELLIPSIS):
        return text[:limit]
    return text[: limit - len(_ELLIPSIS)] + _ELLIPSIS


def format_shape(shape: Iterable[int]) -> str:
    """Format a shape as "[d1, d2, ...]"."""
    return _bounded("[" + ", ".join(str(d) for d in shape) + "]", SHAPE_DISPLAY_LIMIT)


def format_data(values: Iterable[float]) -> str:
    """Format flat tensor values as "[v1, v2, ...]" with three decimals."""
    parts: list[str] = []
    text_len = 2
    for v in values:
        part = f"{float(v):.3f}"
        text_len += len(part) + (2 if parts else 0)
        parts.append(part)
        # Anything past the limit is cut anyway
        if text_len > DATA_DISPLAY_LIMIT:
            break
    return _bounded("[" + ", ".join(parts) + "]", DATA_DISPLAY_LIMIT)


def format_array(arr: np.ndarray) -> str:
    """Format numpy array for display in a diagram."""
    # For single elements, just show the value
    if arr.size == 1:
        return f"{arr.item():.3f}"

    # For small arrays, show all values
    if arr.size <= MAX_ELEMENTS:
        return np.array2string(
            arr,
            precision=3,
            suppress_small=True,
            separator=",",
            floatmode="fixed",
        ).replace("\n", "")

    # For larger arrays, show shape only
    return f"shape={arr.shape}"


def describe_tensor(t: Optional["Tensor"]) -> str:
    """Describe a tensor the way it is printed: label, shape and data."""
    if t is None or not t.is_valid:
        return "null"
    if t.label is not None:
        return f'tensor(name: "{t.label}", shape: {t.shape_str}, data: {t.data_str})'
    return f"tensor(shape: {t.shape_str}, data: {t.data_str})"


def layout_graph(t: "Tensor") -> Digraph:
    """Build a record diagram of a tensor's shape, strides and data."""
    dot = Digraph(t.label or "Tensor")
    dot.attr(rankdir="LR")

    name = (t.label or "tensor").translate(_RECORD_SPECIALS)
    fields = [
        name,
        f"shape={t.shape_str}",
        f"strides={format_shape(t.strides)}",
        f"entries={t.entries}",
        format_array(t.to_numpy()).translate(_RECORD_SPECIALS),
    ]
    dot.node("tensor", "{" + " | ".join(fields) + "}", shape="record")
    return dot


def plot_layout(t: "Tensor", output_format: str = "png", view: bool = True) -> None:
    """Render the layout diagram of a tensor using graphviz."""
    dot = layout_graph(t)
    dot.format = output_format
    dot.render("tensor_layout", view=view, cleanup=True)
