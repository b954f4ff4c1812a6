"""
Main solver class for implicit 1D transport of density in a fixed velocity field.
"""

import logging
import numpy as np
import matplotlib.pyplot as plt
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .errors import ConfigurationError
from .mesh import Mesh1D
from .state import FieldStore, SimulationState
from .boundary import BoundaryCondition, BoundaryKind, PeriodicBC, resolve_periodic
from .assembly import CoefficientAssembler, PeriodicAssembler, StandardAssembler, TransportCoefficients
from .relaxation import RelaxationResult, relax_periodic, relax_standard
from .diagnostics import TimeSeries, courant_number, sample

logger = logging.getLogger(__name__)


@dataclass
class SolverConfig:
    """Configuration for the implicit transport solver."""
    dt: float = 1e-3
    n_steps: int = 1000                     # nmax, time steps per run
    max_iterations: int = 100               # IMAX, Gauss-Seidel passes per step
    tolerance: float = 1e-10                # delta, absolute defect tolerance
    sample_interval: Optional[int] = None   # every N-th step is sampled, default 1 + n_steps // 1000

    def __post_init__(self):
        if self.dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {self.dt}")
        if self.n_steps < 0:
            raise ConfigurationError(f"n_steps must be non-negative, got {self.n_steps}")
        if self.max_iterations < 1:
            raise ConfigurationError(f"max_iterations must be at least 1, got {self.max_iterations}")
        if self.tolerance <= 0:
            raise ConfigurationError(f"tolerance must be positive, got {self.tolerance}")
        if self.sample_interval is None:
            self.sample_interval = 1 + self.n_steps // 1000
        elif self.sample_interval < 1:
            raise ConfigurationError(f"sample_interval must be at least 1, got {self.sample_interval}")


class Scheme(Enum):
    """Discretization variant, fixed once the boundary conditions are set."""
    STANDARD = 'standard'
    PERIODIC = 'periodic'


class Solver1D:
    """
    Implicit solver for the 1D continuity equation rho_t + (rho u)_x = 0.

    Features:
    - Cell-centered finite volumes on equidistant or external meshes
    - Prescribed, time-independent velocity field
    - Branch-free first-order upwind fluxes
    - Implicit Euler in time, solved by Gauss-Seidel relaxation
    - Wall, Dirichlet, Neumann, periodic, dynamic and outlet boundaries
    """

    def __init__(self, mesh: Mesh1D, fields: FieldStore, config: SolverConfig = None,
                 t_start: float = 0.0):
        """
        Initialize the solver.

        Args:
            mesh: Computational mesh
            fields: Velocity and initial density including ghost cells
            config: Solver configuration
            t_start: Local start time ta of the run
        """
        self.state = SimulationState(mesh=mesh, fields=fields)
        self.config = config if config is not None else SolverConfig()
        self.t_start = t_start
        self.state.solver.t = t_start

        # Boundary conditions (must be set before solving)
        self.bc_west = None
        self.bc_east = None

        self.scheme = None
        self.assembler: Optional[CoefficientAssembler] = None
        self.coefficients: Optional[TransportCoefficients] = None

        self.history = TimeSeries()

    # --- Convenience accessors ---

    @property
    def mesh(self) -> Mesh1D:
        return self.state.mesh

    @property
    def fields(self) -> FieldStore:
        return self.state.fields

    @property
    def rho(self) -> np.ndarray:
        return self.state.fields.rho

    @property
    def u(self) -> np.ndarray:
        return self.state.fields.u

    @property
    def time(self) -> float:
        return self.state.solver.t

    @property
    def n_capped(self) -> int:
        """Number of time steps that reached max_iterations (NMAX)."""
        return self.state.solver.n_capped

    # --- Setup ---

    def set_boundary_conditions(self, bc_west: BoundaryCondition,
                                bc_east: BoundaryCondition):
        """
        Set boundary conditions and select the discretization variant.

        If one side is periodic the other side is made periodic as well.
        Ghost values are initialized at the current time.
        """
        west_kind, east_kind = resolve_periodic(bc_west.kind, bc_east.kind)
        if west_kind != bc_west.kind:
            bc_west = PeriodicBC()
        if east_kind != bc_east.kind:
            bc_east = PeriodicBC()

        self.bc_west = bc_west
        self.bc_east = bc_east

        if bc_west.kind == BoundaryKind.PERIODIC:
            self.scheme = Scheme.PERIODIC
            self.assembler = PeriodicAssembler()
        else:
            self.scheme = Scheme.STANDARD
            self.assembler = StandardAssembler()

        bc_west.initialize(self.fields, self.mesh, 'west', self.time)
        bc_east.initialize(self.fields, self.mesh, 'east', self.time)

        bc_west.check_flow_direction(self.u, 'west')
        bc_east.check_flow_direction(self.u, 'east')

        self.coefficients = None

    def assemble(self) -> TransportCoefficients:
        """(Re)build the transport coefficients from the current velocity field."""
        if self.assembler is None:
            raise ValueError("Boundary conditions must be set before assembling")

        self.coefficients = self.assembler.assemble(self.u, self.mesh, self.config.dt,
                                                    self.bc_west, self.bc_east)
        return self.coefficients

    def get_state(self) -> SimulationState:
        """Get the current simulation state."""
        return self.state

    # --- Time integration ---

    def step(self) -> RelaxationResult:
        """
        Perform one implicit time step.

        Returns:
            RelaxationResult of the inner iteration
        """
        if self.coefficients is None:
            self.assemble()

        solver_state = self.state.solver
        t = self.t_start + (solver_state.step + 1) * self.config.dt
        fields = self.fields

        if self.scheme == Scheme.PERIODIC:
            result = relax_periodic(fields.rho, fields.f, self.coefficients,
                                    self.config.max_iterations, self.config.tolerance, t=t)
        else:
            result = relax_standard(fields.rho, fields.f, self.coefficients, self.mesh, t,
                                    self.bc_west, self.bc_east,
                                    self.config.max_iterations, self.config.tolerance)

        solver_state.t = t
        solver_state.step += 1
        solver_state.defect = result.defect
        solver_state.iterations = result.iterations
        if not result.converged:
            solver_state.n_capped += 1

        self.history.defect.extend(result.defects)

        return result

    def record_sample(self):
        """Append the integral diagnostics at the current time to the history."""
        s = sample(self.time, self.rho, self.u, self.mesh)
        self.history.append(s)
        return s

    def solve(self, n_steps: int = None, record_initial: bool = True) -> Dict:
        """
        Run the time loop.

        Diagnostics are sampled every config.sample_interval steps and once
        more at the end if the last step was not a sampling step.

        Args:
            n_steps: Number of time steps (defaults to config.n_steps)
            record_initial: Sample the diagnostics before the first step

        Returns:
            Dictionary with run info
        """
        if self.bc_west is None or self.bc_east is None:
            raise ValueError("Boundary conditions must be set before solving")

        n_steps = self.config.n_steps if n_steps is None else n_steps
        interval = self.config.sample_interval

        logger.info("Starting implicit 1D transport solver")
        logger.info("Cells: %d, dt: %.4e, steps: %d, scheme: %s",
                    self.mesh.n_cells, self.config.dt, n_steps, self.scheme.value)
        logger.info("Boundaries: west = %r, east = %r", self.bc_west, self.bc_east)
        logger.info("IMAX: %d, delta: %.3e", self.config.max_iterations, self.config.tolerance)

        if record_initial:
            self.record_sample()

        capped_before = self.n_capped

        for n in range(1, n_steps + 1):
            self.step()

            if n % interval == 0:
                self.record_sample()
                logger.info("Status: %3d%%, t = %.4e, M = %.10e, K = %d",
                            n * 100 // n_steps, self.time, self.history.mass[-1],
                            self.state.solver.iterations)

        if n_steps % interval != 0 or n_steps == 0:
            self.record_sample()

        capped = self.n_capped - capped_before
        if capped:
            logger.warning("IMAX reached in %d of %d time steps", capped, n_steps)

        return {
            'steps': n_steps,
            'time': self.time,
            'n_capped': capped,
            'final_defect': self.state.solver.defect,
            'mass': self.history.mass[-1],
        }

    def courant_numbers(self) -> np.ndarray:
        """Convective Courant number of every physical cell."""
        return courant_number(self.u, self.mesh, self.config.dt)

    # --- Plotting ---

    def plot_solution(self, filename: str = None, rho_initial: np.ndarray = None, show: bool = True):
        """Plot velocity, density and mass flux."""
        x = self.mesh.x_cells

        fig, axes = plt.subplots(3, 1, figsize=(8, 10), sharex=True)
        fig.suptitle(f'1D Continuity Equation (t = {self.time:.4e}, step = {self.state.solver.step})')

        axes[0].plot(x, self.u[1:-1], 'r-', linewidth=2)
        axes[0].set_ylabel('Velocity u')
        axes[0].set_title('Velocity')
        axes[0].grid(True)

        if rho_initial is not None:
            axes[1].plot(x, rho_initial[1:-1], 'b--', linewidth=1.5, alpha=0.7, label='Initial')
        axes[1].plot(x, self.rho[1:-1], 'b-', linewidth=2, label='Current')
        axes[1].set_ylabel('Density rho')
        axes[1].set_title('Density')
        axes[1].grid(True)
        axes[1].legend()

        axes[2].plot(x, self.rho[1:-1] * self.u[1:-1], 'g-', linewidth=2)
        axes[2].set_xlabel('x')
        axes[2].set_ylabel('Mass flux rho u')
        axes[2].set_title('Mass Flux')
        axes[2].grid(True)

        plt.tight_layout()

        if filename:
            plt.savefig(filename, dpi=150, bbox_inches='tight')
            logger.info("Saved plot to %s", filename)

        if show:
            plt.show()
        return fig

    def plot_convergence(self, filename: str = None, show: bool = True):
        """Plot the logged relaxation defects."""
        fig = plt.figure(figsize=(8, 5))
        plt.semilogy(self.history.defect, 'b-', linewidth=1)
        plt.xlabel('Logged pass')
        plt.ylabel('Defect D')
        plt.title('Relaxation Defect History')
        plt.grid(True)

        if filename:
            plt.savefig(filename, dpi=150, bbox_inches='tight')

        if show:
            plt.show()
        return fig

    def plot_time_series(self, filename: str = None, show: bool = True):
        """Plot mass, kinetic energy and momentum over time."""
        fig, axes = plt.subplots(3, 1, figsize=(8, 10), sharex=True)

        for ax, values, label in zip(axes,
                                     (self.history.mass, self.history.kinetic_energy,
                                      self.history.momentum),
                                     ('Mass M', 'Kinetic energy Ek', 'Momentum px')):
            ax.plot(self.history.t, values, 'k-', linewidth=1.5)
            ax.set_ylabel(label)
            ax.grid(True)
        axes[-1].set_xlabel('t')

        plt.tight_layout()

        if filename:
            plt.savefig(filename, dpi=150, bbox_inches='tight')

        if show:
            plt.show()
        return fig
