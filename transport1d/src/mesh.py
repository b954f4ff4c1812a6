"""
1D cell-centered mesh with one ghost cell on each side.
"""

import numpy as np
from dataclasses import dataclass

from .errors import ConfigurationError


@dataclass
class Mesh1D:
    """
    Cell-centered finite volume mesh.

    Arrays are sized imax + 2. Index 0 is the west ghost cell, indices
    1..imax are physical cells and index imax + 1 is the east ghost cell.

    - x: Cell centers (imax + 2)
    - dx: Cell widths (imax + 2)
    """
    x: np.ndarray
    dx: np.ndarray

    def __post_init__(self):
        self.x = np.asarray(self.x, dtype=np.float64)
        self.dx = np.asarray(self.dx, dtype=np.float64)

        if self.x.ndim != 1 or self.x.shape != self.dx.shape:
            raise ConfigurationError(
                f"Cell centers and widths must be 1D arrays of equal length, "
                f"got {self.x.shape} and {self.dx.shape}")
        if len(self.x) < 3:
            raise ConfigurationError("Mesh needs at least one physical cell plus two ghost cells")
        if np.any(np.diff(self.x) <= 0):
            raise ConfigurationError("Cell centers must increase monotonically")
        if np.any(self.dx[1:-1] <= 0):
            raise ConfigurationError("Physical cell widths must be positive")

        self.imax = len(self.x) - 2

    @property
    def n_cells(self) -> int:
        """Number of physical cells."""
        return self.imax

    @property
    def x_cells(self) -> np.ndarray:
        """Centers of the physical cells."""
        return self.x[1:-1]

    @property
    def dx_cells(self) -> np.ndarray:
        """Widths of the physical cells."""
        return self.dx[1:-1]

    @property
    def length(self) -> float:
        """Total width of the physical cells."""
        return float(np.sum(self.dx_cells))

    @classmethod
    def uniform(cls, xa: float, xe: float, imax: int) -> 'Mesh1D':
        """
        Create an equidistant mesh on [xa, xe].

        Ghost cells get the same width as the physical cells; the west ghost
        center sits half a width outside xa.

        Args:
            xa, xe: Domain bounds
            imax: Number of physical cells
        """
        if imax < 1:
            raise ConfigurationError(f"imax must be positive, got {imax}")
        if not xe > xa:
            raise ConfigurationError(f"Domain bounds must satisfy xa < xe, got [{xa}, {xe}]")

        width = (xe - xa) / imax
        dx = np.full(imax + 2, width)
        x = np.empty(imax + 2)
        x[0] = xa - width / 2.0
        x[1:] = x[0] + np.arange(1, imax + 2) * width
        return cls(x=x, dx=dx)

    @classmethod
    def from_arrays(cls, x: np.ndarray, dx: np.ndarray) -> 'Mesh1D':
        """Create a mesh from externally supplied centers and widths (ghosts included)."""
        return cls(x=np.array(x, dtype=np.float64), dx=np.array(dx, dtype=np.float64))
