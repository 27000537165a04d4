"""
bfvm Tape

A bounded array of unsigned cells. Storage starts small and grows on
demand up to the configured length, so a million-cell tape costs nothing
until a program walks that far. Cells past DENSE_CELLS live in a dict,
so a tape of any length stays usable when the pointer wraps to its far
end. Unwritten cells read as 0.
"""

from __future__ import annotations

INITIAL_CELLS = 32 << 10
DENSE_CELLS = 4 << 20


class Tape:
    """Fixed-length memory of `length` cells, each `cell_width` bits wide."""

    def __init__(self, length: int, cell_width: int = 8) -> None:
        if length < 1:
            raise ValueError(f"tape length must be at least 1, got {length}")
        self.length = length
        self.cell_width = cell_width
        self._cells = [0] * min(length, INITIAL_CELLS)
        # index >= DENSE_CELLS -> value
        self._far: dict[int, int] = {}

    def __len__(self) -> int:
        return self.length

    def __getitem__(self, index: int) -> int:
        if index < len(self._cells):
            return self._cells[index]
        if index >= self.length:
            raise IndexError(f"cell {index} outside tape of length {self.length}")
        return self._far.get(index, 0)

    def __setitem__(self, index: int, value: int) -> None:
        if index < len(self._cells):
            self._cells[index] = value
        elif index >= self.length:
            raise IndexError(f"cell {index} outside tape of length {self.length}")
        elif index < DENSE_CELLS:
            self._grow(index)
            self._cells[index] = value
        else:
            self._far[index] = value

    def _grow(self, index: int) -> None:
        size = len(self._cells)
        while size <= index:
            size *= 2
        self._cells.extend([0] * (min(size, self.length, DENSE_CELLS) - len(self._cells)))

    @property
    def allocated(self) -> int:
        """Number of cells currently backed by storage."""
        return len(self._cells) + len(self._far)

    def snapshot(self) -> list[int]:
        """Cell values up to the last nonzero cell.

        The list is dense, so a nonzero cell far out on a huge tape makes
        it that long.
        """
        far = {i: v for i, v in self._far.items() if v}
        if far:
            cells = self._cells + [0] * (max(far) + 1 - len(self._cells))
            for i, v in far.items():
                cells[i] = v
            return cells

        end = len(self._cells)
        while end and not self._cells[end - 1]:
            end -= 1
        return self._cells[:end]

    def __repr__(self) -> str:
        return f"<Tape: {self.length} x {self.cell_width}-bit, {self.allocated} allocated>"
