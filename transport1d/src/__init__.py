"""
Implicit 1D Transport Solver Package
====================================

Solves the continuity equation

    rho_t + (rho u)_x = 0

for the density rho in a prescribed, time-independent velocity field u.

Features:
- Cell-centered finite volumes with one ghost cell per side
- First-order upwind fluxes in branch-free form
- Implicit Euler in time, Gauss-Seidel relaxation per step
- Wall, Dirichlet, Neumann, periodic, dynamic and outlet boundaries
- Parametric profile library for initial and boundary data
- Mass, kinetic energy and momentum diagnostics

Fields (all sized imax + 2, ghosts included):
    u   - velocity [m/s]
    rho - density [kg/m³]

Example:
    mesh = Mesh1D.uniform(0.0, 1.0, 100)
    fields = FieldStore.from_profiles(mesh, lambda x: 1.0, Profile(ProfileKind.GAUSS, shift=0.5, width=0.1))
    solver = Solver1D(mesh, fields, SolverConfig(dt=1e-3, n_steps=200))
    solver.set_boundary_conditions(PeriodicBC(), PeriodicBC())
    solver.solve()
"""

from .errors import ConfigurationError
from .mesh import Mesh1D
from .state import FieldStore, SimulationState, SolverState, TimeMarkers
from .profiles import Profile, ProfileKind, evaluate
from .boundary import (
    BoundaryCondition, BoundaryKind, WallBC, DirichletBC, NeumannBC,
    PeriodicBC, DynamicBC, OutletBC, make_boundary
)
from .assembly import TransportCoefficients, CoefficientAssembler, StandardAssembler, PeriodicAssembler
from .relaxation import RelaxationResult, relax_standard, relax_periodic
from .diagnostics import Sample, TimeSeries, mass, kinetic_energy, momentum
from .solver import Solver1D, SolverConfig, Scheme
from .config import CaseConfig, ProfileParams, load_config, save_config
from .case import build_solver, run_case

__all__ = [
    # Errors
    'ConfigurationError',

    # Mesh and fields
    'Mesh1D',
    'FieldStore',
    'SimulationState',
    'SolverState',
    'TimeMarkers',

    # Profiles
    'Profile',
    'ProfileKind',
    'evaluate',

    # Boundary conditions
    'BoundaryCondition',
    'BoundaryKind',
    'WallBC',
    'DirichletBC',
    'NeumannBC',
    'PeriodicBC',
    'DynamicBC',
    'OutletBC',
    'make_boundary',

    # Assembly and relaxation
    'TransportCoefficients',
    'CoefficientAssembler',
    'StandardAssembler',
    'PeriodicAssembler',
    'RelaxationResult',
    'relax_standard',
    'relax_periodic',

    # Diagnostics
    'Sample',
    'TimeSeries',
    'mass',
    'kinetic_energy',
    'momentum',

    # Solver
    'Solver1D',
    'SolverConfig',
    'Scheme',

    # Cases
    'CaseConfig',
    'ProfileParams',
    'load_config',
    'save_config',
    'build_solver',
    'run_case',
]

__version__ = '1.0.0'
