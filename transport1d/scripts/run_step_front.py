"""
Run the step front case: a density front entering an empty channel.

This script demonstrates:
1. Dirichlet inflow and outlet boundaries
2. Numerical diffusion of the implicit upwind scheme
3. Resolution study against the exact (sharp) front

Run from the project root:
    python transport1d/scripts/run_step_front.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import logging
import numpy as np
import matplotlib.pyplot as plt
from transport1d.tests.cases import step_front


def plot_front(solver, t):
    """Compare the computed front with the exact, sharp one."""
    x = solver.mesh.x_cells
    exact = np.where(x < t, 1.0, 0.0)

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(x, solver.rho[1:-1], 'b-o', linewidth=2, markersize=3, label='Implicit upwind')
    ax.plot(x, exact, 'r--', linewidth=2, label='Exact')
    ax.set_xlabel('x [m]')
    ax.set_ylabel('Density [kg/m³]')
    ax.set_title(f'Step Front: t = {t:.3f} s')
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig('step_front.png', dpi=150, bbox_inches='tight')
    print("Saved plot to: step_front.png")
    return fig


def resolution_study(t_final=0.5, courant=0.5):
    """L1 error of the front position for increasing resolution."""

    print("\n" + "=" * 60)
    print("RESOLUTION STUDY")
    print("=" * 60)

    resolutions = [25, 50, 100, 200, 400]
    errors = []

    for imax in resolutions:
        dt = courant / imax
        n_steps = int(round(t_final / dt))
        solver = step_front(imax=imax, dt=dt, n_steps=n_steps)
        solver.solve()

        x = solver.mesh.x_cells
        exact = np.where(x < solver.time, 1.0, 0.0)
        error = np.sum(np.abs(solver.rho[1:-1] - exact) * solver.mesh.dx_cells)
        errors.append(error)
        print(f"  imax = {imax:4d}: L1 error = {error:.4e}, IMAX reached {solver.n_capped} times")

    dx = 1.0 / np.array(resolutions)

    fig, ax = plt.subplots(figsize=(6, 5))
    ax.loglog(dx, errors, 'b-o', linewidth=2, label='L1 error')
    ax.loglog(dx, errors[0] * np.sqrt(dx / dx[0]), 'k--', alpha=0.5, label='Order 1/2')
    ax.set_xlabel('Grid spacing Δx [m]')
    ax.set_ylabel('L1 error')
    ax.set_title('Step Front Convergence')
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig('step_front_convergence.png', dpi=150, bbox_inches='tight')
    print("Saved plot to: step_front_convergence.png")
    return fig


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    solver = step_front(imax=100, dt=0.005, n_steps=100)
    info = solver.solve()

    print(f"\nt = {info['time']:.4f}, M = {info['mass']:.10e}, IMAX reached {info['n_capped']} times")

    plot_front(solver, solver.time)
    solver.plot_time_series('step_front_series.png', show=False)
    resolution_study()

    plt.show()


if __name__ == "__main__":
    main()
