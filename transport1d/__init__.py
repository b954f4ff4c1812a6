"""
transport1d - Implicit 1D Transport Solver
==========================================

Re-exports the public components from transport1d.src
"""

from transport1d.src import (
    # Errors
    ConfigurationError,
    # Mesh and fields
    Mesh1D,
    FieldStore,
    TimeMarkers,
    # Profiles
    Profile,
    ProfileKind,
    # Boundary conditions
    BoundaryCondition,
    BoundaryKind,
    WallBC,
    DirichletBC,
    NeumannBC,
    PeriodicBC,
    DynamicBC,
    OutletBC,
    # Solver
    Solver1D,
    SolverConfig,
    # Cases
    CaseConfig,
    load_config,
    run_case,
    __version__,
)

__all__ = [
    'ConfigurationError',
    'Mesh1D',
    'FieldStore',
    'TimeMarkers',
    'Profile',
    'ProfileKind',
    'BoundaryCondition',
    'BoundaryKind',
    'WallBC',
    'DirichletBC',
    'NeumannBC',
    'PeriodicBC',
    'DynamicBC',
    'OutletBC',
    'Solver1D',
    'SolverConfig',
    'CaseConfig',
    'load_config',
    'run_case',
]
