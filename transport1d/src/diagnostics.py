"""
Integral diagnostics of the density field.

All integrals use the midpoint rule over the physical cells, consistent
with the cell-centered discretization:

    M  = sum rho[i] * dx[i]
    Ek = sum 0.5 * rho[i] * u[i]**2 * dx[i]
    px = sum rho[i] * u[i] * dx[i]
"""

import numpy as np
from dataclasses import dataclass, field, asdict
from typing import List, NamedTuple

from .mesh import Mesh1D


def volume_integrate(m: np.ndarray, mesh: Mesh1D) -> float:
    """Integrate a cell-centered field (ghosts included) over the physical cells."""
    return float(np.sum(m[1:-1] * mesh.dx[1:-1]))


def mass(rho: np.ndarray, mesh: Mesh1D) -> float:
    """Total mass."""
    return volume_integrate(rho, mesh)


def kinetic_energy(rho: np.ndarray, u: np.ndarray, mesh: Mesh1D) -> float:
    """Total kinetic energy, evaluated at the cell centers."""
    return volume_integrate(0.5 * rho * u * u, mesh)


def momentum(rho: np.ndarray, u: np.ndarray, mesh: Mesh1D) -> float:
    """Total momentum, evaluated at the cell centers."""
    return volume_integrate(rho * u, mesh)


def courant_number(u: np.ndarray, mesh: Mesh1D, dt: float) -> np.ndarray:
    """Convective Courant number |u| dt / dx of the physical cells."""
    return np.abs(u[1:-1]) * dt / mesh.dx[1:-1]


def mass_flux(rho: np.ndarray, u: np.ndarray) -> np.ndarray:
    """Mass flux rho * u of the physical cells."""
    return rho[1:-1] * u[1:-1]


class Sample(NamedTuple):
    t: float
    mass: float
    kinetic_energy: float
    momentum: float


def sample(t: float, rho: np.ndarray, u: np.ndarray, mesh: Mesh1D) -> Sample:
    """Evaluate all integral diagnostics at time t."""
    return Sample(t, mass(rho, mesh), kinetic_energy(rho, u, mesh), momentum(rho, u, mesh))


@dataclass
class TimeSeries:
    """
    Sampled diagnostics of a run.

    Parameters
    ----------
    t : List[float]
        Sample times.
    mass, kinetic_energy, momentum : List[float]
        Integral diagnostics at the sample times.
    defect : List[float]
        Logged relaxation defects of all time steps, in order.
    """
    t: List[float] = field(default_factory=list)
    mass: List[float] = field(default_factory=list)
    kinetic_energy: List[float] = field(default_factory=list)
    momentum: List[float] = field(default_factory=list)
    defect: List[float] = field(default_factory=list)

    def append(self, s: Sample):
        self.t.append(s.t)
        self.mass.append(s.mass)
        self.kinetic_energy.append(s.kinetic_energy)
        self.momentum.append(s.momentum)

    def __len__(self):
        return len(self.t)

    def to_dict(self) -> dict:
        return asdict(self)
