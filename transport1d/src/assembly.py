"""
Assembly of the tridiagonal transport coefficients.

For every physical cell i the implicit Euler step of the continuity
equation reads

    west[i] * rho_new[i-1] + center[i] * rho_new[i] + east[i] * rho_new[i+1] = rho_old[i]

with the first-order upwind coefficients

    west(i)   = -( u[i-1] + |u[i-1]| ) * dt / (2 * dx[i])
    center(i) =  1 + |u[i]| * dt / dx[i]
    east(i)   =  ( u[i+1] - |u[i+1]| ) * dt / (2 * dx[i])

Two variants exist:
    StandardAssembler - free ends, the boundary rows are rewritten by the
                        boundary conditions
    PeriodicAssembler - ring closure, the first and last cells are each
                        other's neighbours
"""

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass

from . import upwind
from .boundary import BoundaryCondition
from .mesh import Mesh1D


@dataclass
class TransportCoefficients:
    """
    Coefficients of the implicit system, one entry per physical cell.

    Entry k belongs to field index k + 1 (the ghost cells have no row).
    """
    west: np.ndarray
    center: np.ndarray
    east: np.ndarray

    @property
    def n_cells(self) -> int:
        return len(self.center)

    def row_sums(self) -> np.ndarray:
        """west + center + east for every row."""
        return self.west + self.center + self.east

    def to_dense(self, ring: bool = False) -> np.ndarray:
        """
        Dense (n_cells, n_cells) matrix of the system.

        With ring=False the west coefficient of the first row and the east
        coefficient of the last row act on ghost values and are left out.
        With ring=True they wrap around to the opposite corner.
        """
        n = self.n_cells
        A = np.diag(self.center)
        if n > 1:
            A += np.diag(self.west[1:], k=-1) + np.diag(self.east[:-1], k=1)
        if ring:
            A[0, -1] += self.west[0]
            A[-1, 0] += self.east[-1]
        return A

    def copy(self) -> 'TransportCoefficients':
        return TransportCoefficients(self.west.copy(), self.center.copy(), self.east.copy())


def baseline_coefficients(u_w: np.ndarray, u_p: np.ndarray, u_e: np.ndarray,
                          dx: np.ndarray, dt: float) -> TransportCoefficients:
    """
    Upwind coefficients without any boundary treatment (vectorized).

    Args:
        u_w: Velocity of the west neighbour of each cell
        u_p: Velocity of each cell
        u_e: Velocity of the east neighbour of each cell
        dx: Cell widths
        dt: Time step
    """
    c = dt / dx
    return TransportCoefficients(
        west=upwind.west_inflow(u_w, c),
        center=upwind.center(u_p, c),
        east=upwind.east_inflow(u_e, c),
    )


class CoefficientAssembler(ABC):
    """Abstract base class for coefficient assembly."""

    @abstractmethod
    def assemble(self, u: np.ndarray, mesh: Mesh1D, dt: float,
                 bc_west: BoundaryCondition, bc_east: BoundaryCondition) -> TransportCoefficients:
        """
        Build the transport coefficients.

        Args:
            u: Velocity including ghost cells (imax + 2)
            mesh: Computational mesh
            dt: Time step
            bc_west, bc_east: Boundary conditions

        Returns:
            TransportCoefficients with imax rows
        """
        pass


class StandardAssembler(CoefficientAssembler):
    """Free-ended system: baseline rows, boundary rows rewritten by the boundary conditions."""

    def assemble(self, u: np.ndarray, mesh: Mesh1D, dt: float,
                 bc_west: BoundaryCondition, bc_east: BoundaryCondition) -> TransportCoefficients:
        coeffs = baseline_coefficients(u[:-2], u[1:-1], u[2:], mesh.dx[1:-1], dt)

        bc_west.rewrite_row(coeffs, u, mesh, dt, 'west')
        bc_east.rewrite_row(coeffs, u, mesh, dt, 'east')

        if coeffs.n_cells == 1:
            # a single cell is both boundary rows: only faces left open carry outflow
            u_p, c = u[1], dt / mesh.dx[1]
            center = 1.0
            if not bc_west.closes_face:
                center += upwind.west_outflow(u_p, c)
            if not bc_east.closes_face:
                center += upwind.east_outflow(u_p, c)
            coeffs.center[0] = center

        return coeffs


class PeriodicAssembler(CoefficientAssembler):
    """Ring-closed system: the neighbours of the end cells wrap around."""

    def assemble(self, u: np.ndarray, mesh: Mesh1D, dt: float,
                 bc_west: BoundaryCondition, bc_east: BoundaryCondition) -> TransportCoefficients:
        u_p = u[1:-1]
        return baseline_coefficients(np.roll(u_p, 1), u_p, np.roll(u_p, -1), mesh.dx[1:-1], dt)
