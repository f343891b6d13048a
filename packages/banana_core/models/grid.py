"""StepGrid: one boolean row per percussion voice."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..constants import COLUMNS, ROWS


def _empty_cells(rows: int, columns: int) -> list[list[bool]]:
    return [[False] * columns for _ in range(rows)]


@dataclass
class StepGrid:
    """
    rows x columns trigger matrix.

    A cell set to True means "trigger this row's voice when the cursor
    reaches this column". Mutated by the UI, read-only to the scheduler.
    """

    rows: int = ROWS
    columns: int = COLUMNS
    cells: list[list[bool]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = _empty_cells(self.rows, self.columns)
        elif len(self.cells) != self.rows or any(len(r) != self.columns for r in self.cells):
            raise ValueError(f"Grid cells must be {self.rows}x{self.columns}")

    def _check(self, row: int, column: int) -> None:
        if not 0 <= row < self.rows:
            raise IndexError(f"Row out of range: {row}")
        if not 0 <= column < self.columns:
            raise IndexError(f"Column out of range: {column}")

    def is_active(self, row: int, column: int) -> bool:
        self._check(row, column)
        return self.cells[row][column]

    def set(self, row: int, column: int, active: bool) -> None:
        self._check(row, column)
        self.cells[row][column] = active

    def toggle(self, row: int, column: int) -> bool:
        """Flip a cell and return its new value"""
        self._check(row, column)
        self.cells[row][column] = not self.cells[row][column]
        return self.cells[row][column]

    def rows_at(self, column: int) -> list[int]:
        """Rows with an active cell in the given column (ascending)."""
        return [row for row in range(self.rows) if self.cells[row][column]]

    def clear(self) -> None:
        self.cells = _empty_cells(self.rows, self.columns)

    @property
    def is_empty(self) -> bool:
        return not any(any(row) for row in self.cells)

    def copy(self) -> StepGrid:
        return StepGrid(self.rows, self.columns, [list(row) for row in self.cells])

    def to_dict(self) -> dict[str, Any]:
        return {"rows": self.rows, "columns": self.columns, "cells": [list(r) for r in self.cells]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StepGrid:
        return cls(
            rows=data.get("rows", ROWS),
            columns=data.get("columns", COLUMNS),
            cells=[[bool(c) for c in row] for row in data.get("cells", [])],
        )
