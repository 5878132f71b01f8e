"""
Output pixel storage.

The buffer is allocated once per render. Workers write disjoint row ranges,
each row exactly once, so no lock guards the pixel array.
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Union

import numpy as np
from PIL import Image


class FrameBufferError(RuntimeError):
    """A row was written twice or with the wrong shape."""


class FrameBuffer:
    """An 8-bit RGB image, row-major, top row first."""

    def __init__(self, width: int, height: int):
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)
        self._written = np.zeros(height, dtype=bool)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def write_rows(self, row_start: int, rows: np.ndarray) -> None:
        """Store finished rows starting at ``row_start``.

        Raises:
            FrameBufferError: If the rows do not fit or were already written
        """
        row_end = row_start + rows.shape[0]
        if rows.shape[1:] != (self.width, 3) or row_start < 0 or row_end > self.height:
            raise FrameBufferError(
                f"Rows of shape {rows.shape} do not fit at row {row_start} "
                f"of a {self.width}x{self.height} frame"
            )
        if self._written[row_start:row_end].any():
            raise FrameBufferError(f"Rows {row_start}-{row_end} were already written")

        self.pixels[row_start:row_end] = rows
        self._written[row_start:row_end] = True

    def is_complete(self) -> bool:
        """True once every row has been written."""
        return bool(self._written.all())

    def missing_rows(self) -> List[int]:
        return [int(y) for y in np.flatnonzero(~self._written)]

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def save(self, filename: Union[str, Path]) -> None:
        """Encode the frame; the extension picks the format."""
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_image().save(path)

    def __repr__(self) -> str:
        return f"FrameBuffer({self.width}x{self.height}, complete={self.is_complete()})"
