"""
Field storage and run state for the transport solver.

Fields (all sized imax + 2, ghosts included):
    u   - velocity [m/s], fixed for the whole run
    rho - density [kg/m³], the only evolved quantity
    f   - scratch iterate used by the relaxation solver
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional

from .mesh import Mesh1D


@dataclass
class FieldStore:
    """
    Velocity, density and scratch fields on a Mesh1D.

    Ghost values at index 0 and imax + 1 encode the boundary treatment.
    """
    u: np.ndarray
    rho: np.ndarray
    f: Optional[np.ndarray] = None

    def __post_init__(self):
        self.u = np.array(self.u, dtype=np.float64)
        self.rho = np.array(self.rho, dtype=np.float64)
        if self.u.shape != self.rho.shape:
            raise ValueError(f"Velocity and density must have the same shape, "
                             f"got {self.u.shape} and {self.rho.shape}")
        if self.f is None:
            self.f = self.rho.copy()

    @property
    def imax(self) -> int:
        """Number of physical cells."""
        return len(self.rho) - 2

    @property
    def jm(self) -> np.ndarray:
        """Mass flux rho * u [kg/(m²·s)] including ghost cells."""
        return self.rho * self.u

    @classmethod
    def from_profiles(cls, mesh: Mesh1D, u_func, rho_func) -> 'FieldStore':
        """
        Create fields by evaluating profile functions at every cell center.

        Args:
            mesh: Computational mesh
            u_func: Callable x -> u
            rho_func: Callable x -> rho
        """
        u = np.asarray(u_func(mesh.x), dtype=np.float64) * np.ones_like(mesh.x)
        rho = np.asarray(rho_func(mesh.x), dtype=np.float64) * np.ones_like(mesh.x)
        return cls(u=u, rho=rho)

    @classmethod
    def uniform(cls, mesh: Mesh1D, u: float = 0.0, rho: float = 0.0) -> 'FieldStore':
        """Create constant velocity and density fields."""
        n = mesh.imax + 2
        return cls(u=np.full(n, u), rho=np.full(n, rho))


@dataclass
class SolverState:
    """
    Running state of the time integration.

        t          - current simulation time
        defect     - defect D of the last relaxation pass
        iterations - relaxation passes K used in the last step
        n_capped   - steps that hit the iteration cap without converging (NMAX)
        step       - number of completed time steps
    """
    t: float = 0.0
    defect: float = 0.0
    iterations: int = 0
    n_capped: int = 0
    step: int = 0


@dataclass
class TimeMarkers:
    """
    Time markers of a (possibly restarted) run.

        t0 - global start time of the first run in a restart chain
        ta - local start time of this run
        te - local end time of this run (the next run's ta)
    """
    t0: float
    ta: float
    te: float


@dataclass
class SimulationState:
    """Everything a run owns: mesh, fields and solver state."""
    mesh: Mesh1D
    fields: FieldStore
    solver: SolverState = field(default_factory=SolverState)

    def __post_init__(self):
        if self.fields.imax != self.mesh.imax:
            raise ValueError(f"Field size {self.fields.imax} does not match mesh size {self.mesh.imax}")
