"""
Reference cases for the implicit transport solver.

- step_front:      u = 1, Dirichlet inflow of rho = 1 into an empty domain,
                   outlet at the east end. The front travels east and the
                   domain fills up to rho = 1.
- frozen_periodic: periodic domain at rest. Nothing moves.
- converging_wall: closed domain with u changing sign at the center, so
                   all mass is pushed towards the middle.
"""

import numpy as np

from transport1d.src import (
    Mesh1D, FieldStore, Solver1D, SolverConfig,
    WallBC, DirichletBC, OutletBC, PeriodicBC
)


def step_front(imax: int = 10, dt: float = 0.01, n_steps: int = 500,
               max_iterations: int = 100, tolerance: float = 1e-10) -> Solver1D:
    mesh = Mesh1D.uniform(0.0, 1.0, imax)
    fields = FieldStore.uniform(mesh, u=1.0, rho=0.0)

    config = SolverConfig(dt=dt, n_steps=n_steps, max_iterations=max_iterations, tolerance=tolerance)
    solver = Solver1D(mesh, fields, config)
    solver.set_boundary_conditions(DirichletBC(value=1.0), OutletBC())
    return solver


def frozen_periodic(imax: int = 8, n_steps: int = 20, seed: int = 0) -> Solver1D:
    mesh = Mesh1D.uniform(0.0, 1.0, imax)
    rng = np.random.default_rng(seed)
    fields = FieldStore(u=np.zeros(imax + 2), rho=rng.uniform(0.5, 2.0, imax + 2))

    solver = Solver1D(mesh, fields, SolverConfig(dt=0.1, n_steps=n_steps))
    solver.set_boundary_conditions(PeriodicBC(), PeriodicBC())
    return solver


def converging_wall(imax: int = 20, dt: float = 0.02, n_steps: int = 100) -> Solver1D:
    mesh = Mesh1D.uniform(0.0, 1.0, imax)
    u = -np.tanh(10.0 * (mesh.x - 0.5))
    rho = 1.0 + 0.5 * np.sin(2.0 * np.pi * mesh.x)
    fields = FieldStore(u=u, rho=rho)

    config = SolverConfig(dt=dt, n_steps=n_steps, max_iterations=200, tolerance=1e-13)
    solver = Solver1D(mesh, fields, config)
    solver.set_boundary_conditions(WallBC(), WallBC())
    return solver


def advected_periodic(imax: int = 16, u: float = 1.0, dt: float = 0.01, n_steps: int = 50,
                      tolerance: float = 1e-13) -> Solver1D:
    """Gaussian pulse carried around a periodic domain."""
    mesh = Mesh1D.uniform(0.0, 1.0, imax)
    rho = np.exp(-np.pi * ((mesh.x - 0.5) / 0.2) ** 2)
    fields = FieldStore(u=np.full(imax + 2, u), rho=rho)

    config = SolverConfig(dt=dt, n_steps=n_steps, max_iterations=200, tolerance=tolerance)
    solver = Solver1D(mesh, fields, config)
    solver.set_boundary_conditions(PeriodicBC(), PeriodicBC())
    return solver
