"""
Fixed-size 2D storage on top of one contiguous numpy block.

Cells are addressed row-major: (row, col) lives at linear offset `row * cols + col`.
The block is allocated once in the constructor and never resized; numpy releases it
when the owning buffer goes away.

Access paths:
- `get` / `set` / `slice` / `write` check their indices and raise `IndexError`.
  Negative indices are rejected rather than wrapped.
- `get_unchecked` skips the checks. Callers guarantee `row < rows` and `col < cols`;
  it exists for inner loops that already validated their ranges.
"""

from __future__ import annotations

import operator
from typing import Any, Callable, Sequence

import numpy as np


class FlatBuffer:
    """A zero-initialized `rows x cols` block of scalars with a single owner."""

    def __init__(self, rows: int, cols: int, *, dtype: Any = np.float64):
        try:
            rows = operator.index(rows)
            cols = operator.index(cols)
        except TypeError as exc:
            raise ValueError(f"rows/cols must be integers (got {rows!r}x{cols!r})") from exc
        if rows < 0 or cols < 0:
            raise ValueError(f"rows/cols must be >= 0 (got {rows}x{cols})")
        self.rows = rows
        self.cols = cols
        self.dtype = np.dtype(dtype)
        try:
            self._data = np.zeros(rows * cols, dtype=self.dtype)
        except (MemoryError, ValueError) as exc:
            raise MemoryError(
                f"Failed to allocate {rows}x{cols} buffer of {self.dtype} "
                f"({rows * cols * self.dtype.itemsize} bytes)"
            ) from exc

    @classmethod
    def init(cls, value: Any, rows: int, cols: int, *, dtype: Any = None) -> "FlatBuffer":
        """Allocate a buffer and fill every cell with `value`."""
        buf = cls(rows, cols, dtype=dtype if dtype is not None else np.asarray(value).dtype)
        buf._data.fill(value)
        return buf

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def __repr__(self) -> str:
        return f"FlatBuffer(rows={self.rows}, cols={self.cols}, dtype={self.dtype})"

    def _offset(self, row: int, col: int) -> int:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"cell ({row}, {col}) out of range for {self.rows}x{self.cols} buffer")
        return row * self.cols + col

    def _span(self, row: int, col: int, number: int) -> tuple[int, int]:
        # `col == cols` is allowed so zero-width rows can still be sliced.
        if not (0 <= row < self.rows and 0 <= col <= self.cols):
            raise IndexError(f"start ({row}, {col}) out of range for {self.rows}x{self.cols} buffer")
        if number < 0:
            raise IndexError(f"number must be >= 0 (got {number})")
        start = row * self.cols + col
        stop = start + number
        if stop > self.size:
            raise IndexError(
                f"span of {number} from ({row}, {col}) runs past the end of {self.rows}x{self.cols} buffer"
            )
        return start, stop

    def get(self, row: int, col: int) -> Any:
        return self._data[self._offset(row, col)].item()

    def get_unchecked(self, row: int, col: int) -> Any:
        return self._data[row * self.cols + col].item()

    def set(self, row: int, col: int, value: Any) -> None:
        self._data[self._offset(row, col)] = value

    def update(self, row: int, col: int, fn: Callable[[Any], Any]) -> Any:
        """Replace one cell with `fn(current)` in place and return the stored value."""
        offset = self._offset(row, col)
        self._data[offset] = fn(self._data[offset].item())
        return self._data[offset].item()

    def slice(self, row: int, col: int, number: int) -> np.ndarray:
        """Read-only view of `number` consecutive cells; may cross row boundaries."""
        start, stop = self._span(row, col, number)
        view = self._data[start:stop]
        view.flags.writeable = False
        return view

    def write(self, row: int, col: int, values: Sequence[Any] | np.ndarray) -> None:
        """Copy `values` into consecutive cells starting at (row, col)."""
        arr = np.asarray(values, dtype=self.dtype)
        if arr.ndim != 1:
            raise ValueError("values must be one-dimensional")
        start, stop = self._span(row, col, int(arr.shape[0]))
        self._data[start:stop] = arr
