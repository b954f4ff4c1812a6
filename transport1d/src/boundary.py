"""
Boundary conditions for the implicit continuity solver.

Each boundary condition defines two things at one end of the domain:

1. How the ghost value of the density is produced (initialize, begin_step, apply)
2. How the first/last row of the coefficient system is rewritten (rewrite_row)

Sides are 'west' (ghost index 0, first cell 1) and 'east' (ghost index
imax + 1, last cell imax). Coefficient rows are indexed 0..imax-1, so the
west row is 0 and the east row is -1.
"""

import logging
import numpy as np
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Optional, Tuple

from . import upwind
from .errors import ConfigurationError
from .mesh import Mesh1D
from .profiles import Profile
from .state import FieldStore

logger = logging.getLogger(__name__)

SIDES = ('west', 'east')


class BoundaryKind(IntEnum):
    WALL = 0
    DIRICHLET = 1
    NEUMANN = 2
    PERIODIC = 3
    DYNAMIC = 4
    OUTLET = 5


def parse_boundary_kind(value) -> BoundaryKind:
    """Accept an index (3) or a name ('periodic') and return the kind."""
    try:
        if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
            return BoundaryKind[value.strip().upper()]
        return BoundaryKind(int(value))
    except (KeyError, ValueError, TypeError):
        raise ConfigurationError(f"Unknown boundary condition: {value!r}") from None


def resolve_periodic(west: BoundaryKind, east: BoundaryKind) -> Tuple[BoundaryKind, BoundaryKind]:
    """
    Force both ends to be periodic if either one is.

    A half-periodic domain is meaningless, so this is a silent correction
    rather than an error. The west end wins if both are set.
    """
    west = parse_boundary_kind(west)
    east = parse_boundary_kind(east)

    if west == BoundaryKind.PERIODIC and east != BoundaryKind.PERIODIC:
        logger.debug("West boundary is periodic, overriding east boundary %s", east.name)
        east = BoundaryKind.PERIODIC
    elif east == BoundaryKind.PERIODIC and west != BoundaryKind.PERIODIC:
        logger.debug("East boundary is periodic, overriding west boundary %s", west.name)
        west = BoundaryKind.PERIODIC

    return west, east


def _check_side(side: str):
    if side not in SIDES:
        raise ValueError(f"side must be 'west' or 'east', got {side!r}")


def _indices(side: str) -> Tuple[int, int, int]:
    """Return (ghost index, boundary cell index, coefficient row) for a side."""
    if side == 'west':
        return 0, 1, 0
    return -1, -2, -1


class BoundaryCondition(ABC):
    """Abstract base class for boundary conditions."""

    kind: BoundaryKind
    # False if material may leave the domain through the boundary face
    closes_face = True

    def initialize(self, fields: FieldStore, mesh: Mesh1D, side: str, t: float):
        """
        Prepare ghost values once, before the first time step.

        Args:
            fields: Velocity and density fields including ghost cells
            mesh: Computational mesh
            side: 'west' or 'east'
            t: Local start time of the run
        """
        _check_side(side)

    def begin_step(self, f: np.ndarray, mesh: Mesh1D, t: float, side: str):
        """Update the scratch ghost value once at the start of a time step."""

    def apply(self, f: np.ndarray, mesh: Mesh1D, side: str):
        """Update the scratch ghost value before every relaxation pass."""

    @abstractmethod
    def rewrite_row(self, coeffs, u: np.ndarray, mesh: Mesh1D, dt: float, side: str):
        """
        Overwrite the boundary row of the coefficient system.

        Args:
            coeffs: TransportCoefficients holding the baseline coefficients
            u: Velocity including ghost cells
            mesh: Computational mesh
            dt: Time step
            side: 'west' or 'east'
        """
        pass

    def check_flow_direction(self, u: np.ndarray, side: str) -> bool:
        """Return False (and warn) if the flow direction contradicts the boundary type."""
        return True

    def __repr__(self):
        return f"{type(self).__name__}()"


class WallBC(BoundaryCondition):
    """
    Closed wall: no flux crosses the boundary face.

    The outward coefficient is dropped and the cell keeps only the outflow
    through its interior face, as if the velocity at the wall were reflected.
    """

    kind = BoundaryKind.WALL

    def rewrite_row(self, coeffs, u: np.ndarray, mesh: Mesh1D, dt: float, side: str):
        _, i, row = _indices(side)
        c = dt / mesh.dx[i]

        if side == 'west':
            coeffs.west[row] = 0.0
            coeffs.center[row] = upwind.center_east_outflow(u[i], c)
        else:
            coeffs.center[row] = upwind.center_west_outflow(u[i], c)
            coeffs.east[row] = 0.0


class _GhostInflowBC(BoundaryCondition):
    """
    Shared row treatment for boundaries that supply an inflow ghost value.

    Flux from the ghost into the domain is kept, but nothing flows from the
    boundary cell back into the ghost cell.
    """

    def rewrite_row(self, coeffs, u: np.ndarray, mesh: Mesh1D, dt: float, side: str):
        _, i, row = _indices(side)
        c = dt / mesh.dx[i]

        if side == 'west':
            coeffs.center[row] = upwind.center_east_outflow(u[i], c)
        else:
            coeffs.center[row] = upwind.center_west_outflow(u[i], c)

    def check_flow_direction(self, u: np.ndarray, side: str) -> bool:
        ghost, _, _ = _indices(side)
        if side == 'west' and u[ghost] < 0.0:
            logger.warning("u(xa) < 0 at %s boundary: reversed flow", type(self).__name__)
            return False
        if side == 'east' and u[ghost] > 0.0:
            logger.warning("u(xe) > 0 at %s boundary: reversed flow", type(self).__name__)
            return False
        return True


class DirichletBC(_GhostInflowBC):
    """
    Fixed ghost density.

    If value is None the ghost keeps whatever the initial condition put
    there; otherwise value overwrites it once at initialization.
    """

    kind = BoundaryKind.DIRICHLET

    def __init__(self, value: Optional[float] = None):
        self.value = value

    def initialize(self, fields: FieldStore, mesh: Mesh1D, side: str, t: float):
        _check_side(side)
        if self.value is not None:
            ghost, _, _ = _indices(side)
            fields.rho[ghost] = self.value

    def __repr__(self):
        return f"DirichletBC(value={self.value})"


class NeumannBC(_GhostInflowBC):
    """
    Fixed first derivative of the density across the boundary face.

    If gradient is None it is taken from the initial density field. The
    ghost value is re-imposed before every relaxation pass.
    """

    kind = BoundaryKind.NEUMANN

    def __init__(self, gradient: Optional[float] = None):
        self.gradient = gradient

    @staticmethod
    def get_gradient(m: np.ndarray, mesh: Mesh1D, side: str) -> float:
        """Gradient of m across the boundary face."""
        ghost, i, _ = _indices(side)
        if side == 'west':
            return float((m[i] - m[ghost]) / (mesh.x[i] - mesh.x[ghost]))
        return float((m[ghost] - m[i]) / (mesh.x[ghost] - mesh.x[i]))

    @staticmethod
    def set_gradient(m: np.ndarray, mesh: Mesh1D, side: str, value: float):
        """Write the ghost value of m so that the face gradient equals value."""
        ghost, i, _ = _indices(side)
        if side == 'west':
            m[ghost] = m[i] - value * (mesh.x[i] - mesh.x[ghost])
        else:
            m[ghost] = m[i] + value * (mesh.x[ghost] - mesh.x[i])

    def initialize(self, fields: FieldStore, mesh: Mesh1D, side: str, t: float):
        _check_side(side)
        if self.gradient is None:
            self.gradient = self.get_gradient(fields.rho, mesh, side)
            logger.debug("Neumann %s boundary: captured gradient %.6e", side, self.gradient)
        else:
            self.set_gradient(fields.rho, mesh, side, self.gradient)

    def apply(self, f: np.ndarray, mesh: Mesh1D, side: str):
        self.set_gradient(f, mesh, side, self.gradient)

    def __repr__(self):
        return f"NeumannBC(gradient={self.gradient})"


class DynamicBC(_GhostInflowBC):
    """
    Time-dependent ghost density.

    The ghost value is profile(t), re-evaluated at the new time level at the
    start of every time step.
    """

    kind = BoundaryKind.DYNAMIC

    def __init__(self, profile: Profile):
        self.profile = profile

    def value(self, t: float) -> float:
        return float(self.profile(t))

    def initialize(self, fields: FieldStore, mesh: Mesh1D, side: str, t: float):
        _check_side(side)
        ghost, _, _ = _indices(side)
        fields.rho[ghost] = self.value(t)

    def begin_step(self, f: np.ndarray, mesh: Mesh1D, t: float, side: str):
        ghost, _, _ = _indices(side)
        f[ghost] = self.value(t)

    def __repr__(self):
        return f"DynamicBC(profile={self.profile.kind.name})"


class OutletBC(BoundaryCondition):
    """
    Outflow boundary: flow is assumed to leave the domain.

    The inflow coefficient from the ghost cell is dropped; the cell keeps
    its full outflow coefficient.
    """

    kind = BoundaryKind.OUTLET
    closes_face = False

    def rewrite_row(self, coeffs, u: np.ndarray, mesh: Mesh1D, dt: float, side: str):
        _, _, row = _indices(side)
        if side == 'west':
            coeffs.west[row] = 0.0
        else:
            coeffs.east[row] = 0.0

    def check_flow_direction(self, u: np.ndarray, side: str) -> bool:
        _, i, _ = _indices(side)
        if side == 'west' and u[i] > 0.0:
            logger.warning("u(xa) > 0 at outlet boundary: reversed flow")
            return False
        if side == 'east' and u[i] < 0.0:
            logger.warning("u(xe) < 0 at outlet boundary: reversed flow")
            return False
        return True


class PeriodicBC(BoundaryCondition):
    """
    Periodic boundary: each ghost mirrors the opposite physical cell.

    Rows are not rewritten; the periodic assembler closes the ring instead.
    """

    kind = BoundaryKind.PERIODIC
    closes_face = False

    @staticmethod
    def _mirror(m: np.ndarray, side: str):
        if side == 'west':
            m[0] = m[-2]
        else:
            m[-1] = m[1]

    def initialize(self, fields: FieldStore, mesh: Mesh1D, side: str, t: float):
        _check_side(side)
        self._mirror(fields.u, side)
        self._mirror(fields.rho, side)

    def apply(self, f: np.ndarray, mesh: Mesh1D, side: str):
        self._mirror(f, side)

    def rewrite_row(self, coeffs, u: np.ndarray, mesh: Mesh1D, dt: float, side: str):
        pass


def make_boundary(kind, value: Optional[float] = None, gradient: Optional[float] = None,
                  profile: Optional[Profile] = None) -> BoundaryCondition:
    """
    Create a boundary condition from its kind.

    Args:
        kind: BoundaryKind, index or name
        value: Fixed ghost density (Dirichlet)
        gradient: Fixed face gradient (Neumann)
        profile: Time profile of the ghost density (Dynamic)
    """
    kind = parse_boundary_kind(kind)

    if kind == BoundaryKind.WALL:
        return WallBC()
    elif kind == BoundaryKind.DIRICHLET:
        return DirichletBC(value)
    elif kind == BoundaryKind.NEUMANN:
        return NeumannBC(gradient)
    elif kind == BoundaryKind.PERIODIC:
        return PeriodicBC()
    elif kind == BoundaryKind.DYNAMIC:
        if profile is None:
            raise ConfigurationError("Dynamic boundary requires a profile")
        return DynamicBC(profile)
    return OutletBC()
