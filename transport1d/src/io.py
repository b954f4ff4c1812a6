"""
File input and output: external meshes, HDF5 restart files and text results.

Text results are written with numpy.savetxt in %.13e. Profiles hold one
line per physical cell (x, value); time series hold one line per sample
(t, value); D.out holds one defect per line.
"""

import logging
import numpy as np
import h5py
from pathlib import Path
from typing import Tuple

from .errors import ConfigurationError
from .mesh import Mesh1D
from .state import FieldStore, TimeMarkers
from .diagnostics import courant_number, mass_flux

logger = logging.getLogger(__name__)

FMT = '%.13e'


def read_mesh_file(path, imax: int) -> Mesh1D:
    """
    Read an external mesh.

    The file holds imax + 2 lines of "x dx", ghost cells included.

    Args:
        path: Mesh file
        imax: Expected number of physical cells
    """
    path = Path(path)
    try:
        data = np.loadtxt(path, dtype=np.float64, ndmin=2)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Cannot read mesh file {path}: {exc}") from exc

    if data.shape[1] != 2:
        raise ConfigurationError(f"Mesh file {path} must have two columns (x dx), got {data.shape[1]}")
    if data.shape[0] != imax + 2:
        raise ConfigurationError(
            f"Mesh file {path} has {data.shape[0]} entries, expected imax + 2 = {imax + 2}")

    return Mesh1D.from_arrays(data[:, 0], data[:, 1])


def save_restart(path, mesh: Mesh1D, fields: FieldStore, markers: TimeMarkers):
    """
    Write the state needed to continue a run.

    The stored te becomes the next run's ta; t0 is carried through the chain.
    """
    with h5py.File(path, 'w') as f:
        f.create_dataset('x', data=mesh.x)
        f.create_dataset('dx', data=mesh.dx)
        f.create_dataset('u', data=fields.u)
        f.create_dataset('rho', data=fields.rho)
        f.attrs['t0'] = markers.t0
        f.attrs['te'] = markers.te
        f.attrs['imax'] = mesh.imax
    logger.info("Saved restart file %s (t0 = %.6e, te = %.6e)", path, markers.t0, markers.te)


def load_restart(path, mesh: Mesh1D) -> Tuple[FieldStore, float, float]:
    """
    Read a restart file written by save_restart.

    Args:
        path: Restart file
        mesh: Mesh of the continued run, must match the stored one

    Returns:
        (fields, t0, ta) where ta is the stored end time
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Restart file not found: {path}")

    try:
        with h5py.File(path, 'r') as f:
            for key in ('u', 'rho'):
                if key not in f.keys():
                    raise ConfigurationError(f"'{key}' not found in restart file. Available keys: {list(f.keys())}")
            u = np.array(f['u'])
            rho = np.array(f['rho'])
            t0 = float(f.attrs['t0'])
            ta = float(f.attrs['te'])
            imax = int(f.attrs['imax'])
    except (OSError, KeyError) as exc:
        raise ConfigurationError(f"Cannot read restart file {path}: {exc}") from exc

    if imax != mesh.imax or len(rho) != mesh.imax + 2:
        raise ConfigurationError(f"Restart file {path} holds {imax} cells, mesh has {mesh.imax}")

    logger.info("Loaded restart file %s (t0 = %.6e, ta = %.6e)", path, t0, ta)
    return FieldStore(u=u, rho=rho), t0, ta


def _profile(path: Path, x: np.ndarray, values: np.ndarray):
    np.savetxt(path, np.column_stack((x, values)), fmt=FMT)


def _series(path: Path, columns, append: bool):
    data = np.column_stack(columns) if len(columns) > 1 else np.asarray(columns[0])
    with open(path, 'a' if append else 'w') as f:
        np.savetxt(f, data, fmt=FMT)


def write_initial(output_dir, mesh: Mesh1D, fields: FieldStore):
    """Write the initial velocity (u.out) and density (rho0.out) without ghost cells."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    _profile(output_dir / 'u.out', mesh.x_cells, fields.u[1:-1])
    _profile(output_dir / 'rho0.out', mesh.x_cells, fields.rho[1:-1])


def write_results(output_dir, solver, append: bool = False):
    """
    Write the time series and final profiles of a run.

    Args:
        output_dir: Target directory, created if missing
        solver: Solver1D after solve()
        append: Append to existing time series (restarted run)
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    history = solver.history
    mesh = solver.mesh

    _series(output_dir / 'M.out', (history.t, history.mass), append)
    _series(output_dir / 'Ekin.out', (history.t, history.kinetic_energy), append)
    _series(output_dir / 'px.out', (history.t, history.momentum), append)
    _series(output_dir / 'D.out', (history.defect,), append)

    _profile(output_dir / 'rho.out', mesh.x_cells, solver.rho[1:-1])
    _profile(output_dir / 'jm.out', mesh.x_cells, mass_flux(solver.rho, solver.u))
    _profile(output_dir / 'C.out', mesh.x_cells, courant_number(solver.u, mesh, solver.config.dt))

    logger.info("Wrote results to %s", output_dir)
