"""
Case setup: turn a CaseConfig into a ready-to-run Solver1D.

A fresh run evaluates the initial profiles on every cell (ghosts included)
and then adds the ghost offsets of the rho and u profile parameters. A
restarted run reads velocity and density from the restart file instead and
continues from the stored end time.
"""

import logging
from typing import Tuple

from .boundary import BoundaryKind, make_boundary
from .config import CaseConfig
from .io import load_restart, read_mesh_file, save_restart, write_initial, write_results
from .mesh import Mesh1D
from .solver import Solver1D
from .state import FieldStore, TimeMarkers

logger = logging.getLogger(__name__)


def build_mesh(config: CaseConfig) -> Mesh1D:
    if config.mesh == 'external':
        return read_mesh_file(config.mesh_file, config.imax)
    return Mesh1D.uniform(config.xa, config.xe, config.imax)


def build_fields(config: CaseConfig, mesh: Mesh1D) -> FieldStore:
    """Evaluate the initial profiles without the ghost offsets."""
    # Dirac impulses are normalised with the ghost cell width
    spacing = float(mesh.dx[0])
    u_profile = config.u.to_profile(spacing, config.user_expressions)
    rho_profile = config.rho.to_profile(spacing, config.user_expressions)
    return FieldStore.from_profiles(mesh, u_profile, rho_profile)


def apply_ghost_offsets(config: CaseConfig, fields: FieldStore):
    fields.u[0] += config.u.west_offset
    fields.u[-1] += config.u.east_offset
    fields.rho[0] += config.rho.west_offset
    fields.rho[-1] += config.rho.east_offset


def build_boundaries(config: CaseConfig, spacing: float = 1.0):
    """Create the west and east boundary conditions of a case."""
    boundaries = []
    for kind, params in ((config.bc_west, config.west), (config.bc_east, config.east)):
        profile = None
        if kind == BoundaryKind.DYNAMIC:
            profile = params.to_profile(spacing, config.user_expressions)
        boundaries.append(make_boundary(kind, profile=profile))
    return tuple(boundaries)


def build_solver(config: CaseConfig, write_initial_state: bool = False) -> Tuple[Solver1D, TimeMarkers]:
    """
    Build mesh, fields, boundaries and solver of a case.

    Args:
        config: Validated case configuration
        write_initial_state: Write u.out and rho0.out for a fresh run

    Returns:
        (solver, markers)
    """
    mesh = build_mesh(config)

    if config.restart:
        fields, t0, ta = load_restart(config.restart_file, mesh)
    else:
        fields = build_fields(config, mesh)
        if write_initial_state:
            write_initial(config.output_dir, mesh, fields)
        apply_ghost_offsets(config, fields)
        t0 = ta = config.ta

    markers = TimeMarkers(t0=t0, ta=ta, te=ta + config.nmax * config.dt)

    solver = Solver1D(mesh, fields, config.solver_config(), t_start=ta)
    bc_west, bc_east = build_boundaries(config, float(mesh.dx[0]))
    solver.set_boundary_conditions(bc_west, bc_east)

    return solver, markers


def run_case(config: CaseConfig) -> Tuple[Solver1D, TimeMarkers, dict]:
    """
    Run a case end to end: setup, time loop, result and restart files.

    Returns:
        (solver, markers, info) where info is the summary from Solver1D.solve
    """
    solver, markers = build_solver(config, write_initial_state=True)

    logger.info("t0 = %.6e, ta = %.6e, te = %.6e", markers.t0, markers.ta, markers.te)

    # a restarted run continues the time series of its predecessor
    info = solver.solve(record_initial=not config.restart)

    write_results(config.output_dir, solver, append=config.restart)
    save_restart(config.restart_file, solver.mesh, solver.fields, markers)

    return solver, markers, info
