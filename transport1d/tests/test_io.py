"""
Pytest tests for mesh files, restart files and result files.
"""

import h5py
import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from transport1d.src import ConfigurationError, FieldStore, Mesh1D, TimeMarkers
from transport1d.src.io import load_restart, read_mesh_file, save_restart, write_initial, write_results
from transport1d.tests.cases import step_front


class TestMeshFile:
    """External mesh reader."""

    def test_read(self, tmp_path):
        mesh = Mesh1D.uniform(0.0, 2.0, 5)
        np.savetxt(tmp_path / 'mesh.dat', np.column_stack((mesh.x, mesh.dx)))
        loaded = read_mesh_file(tmp_path / 'mesh.dat', 5)
        np.testing.assert_allclose(loaded.x, mesh.x)
        np.testing.assert_allclose(loaded.dx, mesh.dx)

    def test_wrong_size(self, tmp_path):
        mesh = Mesh1D.uniform(0.0, 2.0, 5)
        np.savetxt(tmp_path / 'mesh.dat', np.column_stack((mesh.x, mesh.dx)))
        with pytest.raises(ConfigurationError):
            read_mesh_file(tmp_path / 'mesh.dat', 6)

    def test_wrong_columns(self, tmp_path):
        np.savetxt(tmp_path / 'mesh.dat', np.ones((4, 3)))
        with pytest.raises(ConfigurationError):
            read_mesh_file(tmp_path / 'mesh.dat', 2)

    def test_missing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            read_mesh_file(tmp_path / 'mesh.dat', 2)

    def test_invalid_geometry(self, tmp_path):
        np.savetxt(tmp_path / 'mesh.dat', [[0.0, 0.1], [0.2, 0.1], [0.1, 0.1]])
        with pytest.raises(ConfigurationError):
            read_mesh_file(tmp_path / 'mesh.dat', 1)


class TestRestart:
    """HDF5 restart files."""

    def test_round_trip(self, tmp_path):
        mesh = Mesh1D.uniform(0.0, 1.0, 6)
        fields = FieldStore(u=np.linspace(-1.0, 1.0, 8), rho=np.linspace(0.5, 2.5, 8))
        save_restart(tmp_path / 'restart.h5', mesh, fields, TimeMarkers(t0=0.5, ta=1.0, te=1.75))

        loaded, t0, ta = load_restart(tmp_path / 'restart.h5', mesh)
        np.testing.assert_array_equal(loaded.u, fields.u)
        np.testing.assert_array_equal(loaded.rho, fields.rho)
        assert t0 == 0.5
        assert ta == 1.75

    def test_layout(self, tmp_path):
        mesh = Mesh1D.uniform(0.0, 1.0, 3)
        save_restart(tmp_path / 'restart.h5', mesh, FieldStore.uniform(mesh, 1.0, 2.0),
                     TimeMarkers(t0=0.0, ta=0.0, te=1.0))
        with h5py.File(tmp_path / 'restart.h5', 'r') as f:
            assert set(f.keys()) >= {'x', 'u', 'rho'}
            assert f['rho'].shape == (5,)
            assert f.attrs['imax'] == 3

    def test_mesh_mismatch(self, tmp_path):
        mesh = Mesh1D.uniform(0.0, 1.0, 6)
        save_restart(tmp_path / 'restart.h5', mesh, FieldStore.uniform(mesh),
                     TimeMarkers(t0=0.0, ta=0.0, te=1.0))
        with pytest.raises(ConfigurationError):
            load_restart(tmp_path / 'restart.h5', Mesh1D.uniform(0.0, 1.0, 7))

    def test_missing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_restart(tmp_path / 'restart.h5', Mesh1D.uniform(0.0, 1.0, 6))

    def test_missing_dataset(self, tmp_path):
        with h5py.File(tmp_path / 'restart.h5', 'w') as f:
            f.create_dataset('u', data=np.zeros(8))
        with pytest.raises(ConfigurationError):
            load_restart(tmp_path / 'restart.h5', Mesh1D.uniform(0.0, 1.0, 6))


class TestResultFiles:
    """Text result layout."""

    @pytest.fixture
    def solver(self):
        solver = step_front(imax=10, n_steps=20)
        solver.solve()
        return solver

    def test_time_series(self, tmp_path, solver):
        write_results(tmp_path, solver)
        for name in ('M.out', 'Ekin.out', 'px.out'):
            data = np.loadtxt(tmp_path / name)
            assert data.shape == (21, 2)
        M = np.loadtxt(tmp_path / 'M.out')
        np.testing.assert_allclose(M[:, 0], solver.history.t)
        np.testing.assert_allclose(M[:, 1], solver.history.mass, rtol=1e-12)

    def test_profiles(self, tmp_path, solver):
        write_results(tmp_path, solver)
        for name in ('rho.out', 'jm.out', 'C.out'):
            data = np.loadtxt(tmp_path / name)
            assert data.shape == (10, 2)
            np.testing.assert_allclose(data[:, 0], solver.mesh.x_cells)
        rho = np.loadtxt(tmp_path / 'rho.out')
        np.testing.assert_allclose(rho[:, 1], solver.rho[1:-1], rtol=1e-12)

    def test_defects(self, tmp_path, solver):
        write_results(tmp_path, solver)
        D = np.loadtxt(tmp_path / 'D.out', ndmin=1)
        assert len(D) == len(solver.history.defect)

    def test_number_format(self, tmp_path, solver):
        write_results(tmp_path, solver)
        first = (tmp_path / 'M.out').read_text().splitlines()[0].split()
        assert first[0] == '0.0000000000000e+00'

    def test_append(self, tmp_path, solver):
        write_results(tmp_path, solver)
        write_results(tmp_path, solver, append=True)
        assert np.loadtxt(tmp_path / 'M.out').shape == (42, 2)
        assert np.loadtxt(tmp_path / 'rho.out').shape == (10, 2)

    def test_initial(self, tmp_path):
        mesh = Mesh1D.uniform(0.0, 1.0, 4)
        fields = FieldStore(u=np.arange(6.0), rho=np.arange(6.0) + 10.0)
        write_initial(tmp_path / 'out', mesh, fields)
        u = np.loadtxt(tmp_path / 'out' / 'u.out')
        rho0 = np.loadtxt(tmp_path / 'out' / 'rho0.out')
        np.testing.assert_array_equal(u[:, 1], [1.0, 2.0, 3.0, 4.0])
        np.testing.assert_array_equal(rho0[:, 1], [11.0, 12.0, 13.0, 14.0])
