"""
Pytest tests for coefficient assembly.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from transport1d.src import (
    DirichletBC, DynamicBC, Mesh1D, NeumannBC, OutletBC, PeriodicBC, Profile, WallBC
)
from transport1d.src.assembly import PeriodicAssembler, StandardAssembler, TransportCoefficients


@pytest.fixture
def mesh():
    return Mesh1D.uniform(0.0, 1.0, 6)


ALL_STANDARD = [WallBC(), DirichletBC(1.0), NeumannBC(0.0), DynamicBC(Profile()), OutletBC()]


class TestBaseline:
    """Upwind coefficients away from the boundaries."""

    def test_positive_velocity(self, mesh):
        u = np.full(8, 2.0)
        c = 0.05 / mesh.dx[1]
        coeffs = StandardAssembler().assemble(u, mesh, 0.05, OutletBC(), OutletBC())
        np.testing.assert_allclose(coeffs.west[1:], -2.0 * c)
        np.testing.assert_allclose(coeffs.center, 1.0 + 2.0 * c)
        np.testing.assert_array_equal(coeffs.east, 0.0)

    def test_negative_velocity(self, mesh):
        u = np.full(8, -2.0)
        c = 0.05 / mesh.dx[1]
        coeffs = StandardAssembler().assemble(u, mesh, 0.05, OutletBC(), OutletBC())
        np.testing.assert_array_equal(coeffs.west, 0.0)
        np.testing.assert_allclose(coeffs.center, 1.0 + 2.0 * c)
        np.testing.assert_allclose(coeffs.east[:-1], -2.0 * c)

    def test_center_never_zero(self, mesh):
        rng = np.random.default_rng(1)
        u = rng.uniform(-3.0, 3.0, 8)
        for bc in ALL_STANDARD:
            coeffs = StandardAssembler().assemble(u, mesh, 1.0, bc, bc)
            assert np.all(coeffs.center >= 1.0)


class TestRowSums:
    """At rest every row reduces to the identity."""

    @pytest.mark.parametrize("bc", ALL_STANDARD)
    def test_standard(self, mesh, bc):
        coeffs = StandardAssembler().assemble(np.zeros(8), mesh, 0.1, bc, bc)
        np.testing.assert_array_equal(coeffs.row_sums(), 1.0)
        np.testing.assert_array_equal(coeffs.center, 1.0)

    def test_periodic(self, mesh):
        coeffs = PeriodicAssembler().assemble(np.zeros(8), mesh, 0.1, PeriodicBC(), PeriodicBC())
        np.testing.assert_array_equal(coeffs.row_sums(), 1.0)


class TestIdempotence:
    """Assembly depends only on u, mesh and dt."""

    @pytest.mark.parametrize("assembler,bc", [(StandardAssembler(), WallBC()),
                                              (StandardAssembler(), DirichletBC()),
                                              (PeriodicAssembler(), PeriodicBC())])
    def test_repeated_assembly(self, mesh, assembler, bc):
        u = np.sin(2 * np.pi * mesh.x)
        first = assembler.assemble(u, mesh, 0.02, bc, bc)
        second = assembler.assemble(u, mesh, 0.02, bc, bc)
        np.testing.assert_array_equal(first.west, second.west)
        np.testing.assert_array_equal(first.center, second.center)
        np.testing.assert_array_equal(first.east, second.east)


class TestPeriodicAssembly:
    """Ring closure."""

    def test_wraps_velocity(self, mesh):
        u = np.zeros(8)
        u[1:-1] = [-1.0, 0.0, 0.0, 0.0, 0.0, 1.0]
        # ghosts deliberately stale
        u[0] = u[-1] = 99.0
        c = 0.1 / mesh.dx[1]
        coeffs = PeriodicAssembler().assemble(u, mesh, 0.1, PeriodicBC(), PeriodicBC())

        # first cell sees the last one as west neighbour and vice versa
        assert coeffs.west[0] == pytest.approx(-c)
        assert coeffs.east[-1] == pytest.approx(-c)
        assert coeffs.west[1] == 0.0
        assert coeffs.east[-2] == 0.0

    def test_ring_columns_conserve_mass(self, mesh):
        u = np.sin(2 * np.pi * mesh.x)
        coeffs = PeriodicAssembler().assemble(u, mesh, 0.05, PeriodicBC(), PeriodicBC())
        A = coeffs.to_dense(ring=True)
        np.testing.assert_allclose(A.sum(axis=0), 1.0, rtol=1e-14)


class TestSingleCell:
    """One cell carries both boundary rows."""

    @pytest.mark.parametrize("bc_west,bc_east,velocity,center", [
        (WallBC(), WallBC(), -1.0, 1.0),
        (WallBC(), WallBC(), 1.0, 1.0),
        (OutletBC(), WallBC(), -1.0, 1.1),
        (WallBC(), OutletBC(), -1.0, 1.0),
        (WallBC(), OutletBC(), 1.0, 1.1),
        (DirichletBC(1.0), OutletBC(), 1.0, 1.1),
        (OutletBC(), DirichletBC(1.0), -1.0, 1.1),
        (OutletBC(), OutletBC(), 1.0, 1.1),
    ])
    def test_center_keeps_open_faces(self, bc_west, bc_east, velocity, center):
        mesh = Mesh1D.uniform(0.0, 1.0, 1)
        u = np.full(3, velocity)
        coeffs = StandardAssembler().assemble(u, mesh, 0.1, bc_west, bc_east)
        assert coeffs.center[0] == pytest.approx(center)

    def test_walls_isolate_cell(self):
        mesh = Mesh1D.uniform(0.0, 1.0, 1)
        coeffs = StandardAssembler().assemble(np.array([2.0, -1.0, 3.0]), mesh, 0.1, WallBC(), WallBC())
        np.testing.assert_array_equal(coeffs.west, 0.0)
        np.testing.assert_array_equal(coeffs.east, 0.0)
        np.testing.assert_array_equal(coeffs.to_dense(), [[1.0]])


class TestDense:
    """Dense matrix view."""

    def test_tridiagonal(self):
        coeffs = TransportCoefficients(west=np.array([7.0, 1.0, 2.0]),
                                       center=np.array([4.0, 5.0, 6.0]),
                                       east=np.array([3.0, 8.0, 9.0]))
        A = coeffs.to_dense()
        expected = np.array([[4.0, 3.0, 0.0],
                             [1.0, 5.0, 8.0],
                             [0.0, 2.0, 6.0]])
        np.testing.assert_array_equal(A, expected)

    def test_ring(self):
        coeffs = TransportCoefficients(west=np.array([7.0, 1.0, 2.0]),
                                       center=np.array([4.0, 5.0, 6.0]),
                                       east=np.array([3.0, 8.0, 9.0]))
        A = coeffs.to_dense(ring=True)
        assert A[0, -1] == 7.0
        assert A[-1, 0] == 9.0

    def test_wall_columns_conserve_mass(self, mesh):
        u = -np.tanh(10.0 * (mesh.x - 0.5))
        coeffs = StandardAssembler().assemble(u, mesh, 0.05, WallBC(), WallBC())
        np.testing.assert_allclose(coeffs.to_dense().sum(axis=0), 1.0, rtol=1e-14)

    def test_copy_is_independent(self):
        coeffs = TransportCoefficients(np.zeros(2), np.ones(2), np.zeros(2))
        other = coeffs.copy()
        other.center[0] = 3.0
        assert coeffs.center[0] == 1.0
