"""
Gauss-Seidel relaxation for the implicit time step.

Each function performs one complete time step:

    Seed     f = rho (ghosts included)
    Ghosts   time-dependent ghost values for the new time level
    Iterate  Gauss-Seidel passes until the defect D < tolerance or the
             pass limit is reached
    Commit   rho = f (ghosts included)

The defect D is the largest correction |df| of a pass. A pass whose defect
is below the tolerance ends the iteration and is not logged, so the defect
log never contains values that would break a logarithmic plot.

A step that reaches max_iterations is accepted as is. The caller only
counts it; there is no retry at the time-step level.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import List

from .assembly import TransportCoefficients
from .boundary import BoundaryCondition
from .mesh import Mesh1D

logger = logging.getLogger(__name__)


@dataclass
class RelaxationResult:
    """Outcome of the inner iteration of one time step."""
    iterations: int
    defect: float
    converged: bool
    defects: List[float] = field(default_factory=list)


def relax_standard(rho: np.ndarray, f: np.ndarray, coeffs: TransportCoefficients,
                   mesh: Mesh1D, t: float,
                   bc_west: BoundaryCondition, bc_east: BoundaryCondition,
                   max_iterations: int, tolerance: float) -> RelaxationResult:
    """
    Implicit time step on a free-ended domain.

    Row i solves  W f[i-1] + C f[i] + E f[i+1] = rho[i]  for f[i]:

        df = (rho[i] - W f[i-1] - E f[i+1]) / C - f[i]

    Args:
        rho: Density at the old time level (imax + 2), overwritten on commit
        f: Scratch buffer (imax + 2)
        coeffs: Coefficients from StandardAssembler
        mesh: Computational mesh
        t: New time level
        bc_west, bc_east: Boundary conditions
        max_iterations: Pass limit (IMAX)
        tolerance: Absolute defect tolerance (delta)

    Returns:
        RelaxationResult
    """
    n = coeffs.n_cells
    aW, aP, aE = coeffs.west, coeffs.center, coeffs.east

    # Seed: every entry is overwritten so no stale ghost survives
    f[:] = rho

    bc_west.begin_step(f, mesh, t, 'west')
    bc_east.begin_step(f, mesh, t, 'east')

    defects = []
    converged = False
    D = 0.0
    iterations = 0

    for _ in range(max_iterations):
        iterations += 1

        bc_west.apply(f, mesh, 'west')
        bc_east.apply(f, mesh, 'east')

        D = 0.0
        for i in range(1, n + 1):
            df = (rho[i] - aW[i - 1] * f[i - 1] - aE[i - 1] * f[i + 1]) / aP[i - 1] - f[i]
            f[i] += df
            if abs(df) > D:
                D = abs(df)

        if D < tolerance:
            converged = True
            break

        defects.append(D)

    bc_west.apply(f, mesh, 'west')
    bc_east.apply(f, mesh, 'east')

    # Commit
    rho[:] = f

    if not converged:
        logger.debug("t = %.6e: no convergence after %d passes, D = %.3e", t, iterations, D)

    return RelaxationResult(iterations=iterations, defect=float(D), converged=converged, defects=defects)


def relax_periodic(rho: np.ndarray, f: np.ndarray, coeffs: TransportCoefficients,
                   max_iterations: int, tolerance: float, t: float = 0.0) -> RelaxationResult:
    """
    Implicit time step on a periodic (ring-closed) domain.

    The row is written as a residual of the ring system:

        df = -(W f[i-1] + E f[i+1] - rho[i]) / C - f[i]

    The west ghost is taken from the last cell before each pass and the
    east ghost from the first cell after it, so the sweep runs around the
    ring. Both ghosts are mirrored once more before commit.

    Args:
        rho: Density at the old time level (imax + 2), overwritten on commit
        f: Scratch buffer (imax + 2)
        coeffs: Coefficients from PeriodicAssembler
        max_iterations: Pass limit (IMAX)
        tolerance: Absolute defect tolerance (delta)
        t: New time level (for logging only)

    Returns:
        RelaxationResult
    """
    n = coeffs.n_cells
    aW, aP, aE = coeffs.west, coeffs.center, coeffs.east

    f[:] = rho

    defects = []
    converged = False
    D = 0.0
    iterations = 0

    for _ in range(max_iterations):
        iterations += 1

        D = 0.0
        f[0] = f[n]

        for i in range(1, n + 1):
            df = -(aW[i - 1] * f[i - 1] + aE[i - 1] * f[i + 1] - rho[i]) / aP[i - 1] - f[i]
            f[i] += df
            D = max(abs(df), D)

        f[n + 1] = f[1]

        if D < tolerance:
            converged = True
            break

        defects.append(D)

    f[0] = f[n]
    f[n + 1] = f[1]

    rho[:] = f

    if not converged:
        logger.debug("t = %.6e: no convergence after %d passes, D = %.3e", t, iterations, D)

    return RelaxationResult(iterations=iterations, defect=float(D), converged=converged, defects=defects)
