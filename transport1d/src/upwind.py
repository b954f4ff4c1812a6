"""
Analytic first-order upwind coefficients for the implicit continuity equation.

The upwind direction is selected arithmetically rather than with branches:

    (a + |a|) / 2 = max(a, 0)
    (a - |a|) / 2 = min(a, 0)

so every formula below works element-wise on numpy arrays and gives the
same floating-point result regardless of flow direction.

Notation (c = dt / dx[i]):
    u_w - velocity of the west neighbour
    u_p - velocity of the cell itself
    u_e - velocity of the east neighbour
"""

import numpy as np


def west_inflow(u_w, c):
    """Coefficient of the west neighbour: -(u_w + |u_w|) c / 2."""
    return -(u_w + np.abs(u_w)) * c / 2.0


def east_inflow(u_e, c):
    """Coefficient of the east neighbour: (u_e - |u_e|) c / 2."""
    return (u_e - np.abs(u_e)) * c / 2.0


def center(u_p, c):
    """Diagonal coefficient with outflow through both faces: 1 + |u_p| c."""
    return 1.0 + np.abs(u_p) * c


def east_outflow(u_p, c):
    """Outflow through the east face: (u_p + |u_p|) c / 2."""
    return (u_p + np.abs(u_p)) * c / 2.0


def west_outflow(u_p, c):
    """Outflow through the west face: -(u_p - |u_p|) c / 2."""
    return -(u_p - np.abs(u_p)) * c / 2.0


def center_east_outflow(u_p, c):
    """Diagonal coefficient with outflow through the east face only."""
    return 1.0 + east_outflow(u_p, c)


def center_west_outflow(u_p, c):
    """Diagonal coefficient with outflow through the west face only."""
    return 1.0 + west_outflow(u_p, c)
