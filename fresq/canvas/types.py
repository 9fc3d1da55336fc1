from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from fresq.canvas.errors import CellStateInvariantError


@dataclass(frozen=True, slots=True)
class EmptyCell:
    @property
    def position(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class ClaimedCell:
    x: int
    y: int

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y


@dataclass(frozen=True, slots=True)
class PaintedCell:
    x: int
    y: int
    color: int

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y


CellState = EmptyCell | ClaimedCell | PaintedCell


class _CellColumns(Protocol):
    cell_x: int | None
    cell_y: int | None
    color: int | None


def cell_state_of(row: _CellColumns) -> CellState:
    """Maps the nullable position/color columns to an explicit cell state.

    Rows with only one coordinate, or a color without a position, are corrupt.
    """
    has_x = row.cell_x is not None
    has_y = row.cell_y is not None
    if has_x != has_y:
        raise CellStateInvariantError("cell position must have both coordinates or neither")

    if not has_x:
        if row.color is not None:
            raise CellStateInvariantError("a color requires a claimed cell")
        return EmptyCell()

    if row.color is None:
        return ClaimedCell(x=int(row.cell_x), y=int(row.cell_y))
    return PaintedCell(x=int(row.cell_x), y=int(row.cell_y), color=int(row.color))


@dataclass(frozen=True, slots=True)
class CellClaimResult:
    code: str
    x: int
    y: int
    idempotent_replay: bool


@dataclass(frozen=True, slots=True)
class CellPaintResult:
    code: str
    x: int
    y: int
    color: int


@dataclass(frozen=True, slots=True)
class CellClearResult:
    code: str
    x: int
    y: int
    state_version: int


@dataclass(frozen=True, slots=True)
class CodeValidation:
    code: str
    state: CellState


@dataclass(frozen=True, slots=True)
class CanvasSnapshot:
    width: int
    height: int
    state_version: int
    palette: list[str]
    cells: list[PaintedCell]


@dataclass(frozen=True, slots=True)
class CanvasStats:
    total_codes: int
    claimed_codes: int
    painted_codes: int
