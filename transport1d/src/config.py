"""
Case configuration for the transport solver.

A case is described by a JSON file whose keys mirror CaseConfig. Nested
profile parameters may be given as objects; boundary and profile selectors
may be given as indices or names:

    {
        "xa": 0.0, "xe": 1.0, "imax": 100,
        "ta": 0.0, "dt": 0.001, "nmax": 1000,
        "max_iterations": 100, "tolerance": 1e-10,
        "bc_west": "dirichlet", "bc_east": "outlet",
        "rho": {"function": "constant", "scale": 0.0, "west_offset": 1.0},
        "u": {"function": "constant"}
    }
"""

import dataclasses
import enum
import json
from pathlib import Path
from typing import Dict, Optional

import numpy as np

from .boundary import BoundaryKind, resolve_periodic
from .errors import ConfigurationError
from .profiles import Profile, ProfileKind, USER_DEFINED, parse_profile_kind
from .solver import SolverConfig

MESH_SOURCES = ('uniform', 'external')

INT_FIELDS = ('imax', 'nmax', 'max_iterations')
FLOAT_FIELDS = ('xa', 'xe', 'ta', 'dt', 'tolerance')


def as_float(name: str, value) -> float:
    """Coerce a numeric setting to a finite float."""
    if isinstance(value, bool):
        raise ConfigurationError(f"'{name}' must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"'{name}' must be a number, got {value!r}") from None
    if not np.isfinite(number):
        raise ConfigurationError(f"'{name}' must be finite, got {value!r}")
    return number


def as_int(name: str, value) -> int:
    """Coerce a count to int; 10.0 and "10" are accepted, 10.5 is not."""
    number = as_float(name, value)
    if not number.is_integer():
        raise ConfigurationError(f"'{name}' must be an integer, got {value!r}")
    return int(number)


class AdvancedJSONEncoder(json.JSONEncoder):
    """JSON encoder for dataclasses, enums, paths and numpy values."""

    def default(self, o):
        if dataclasses.is_dataclass(o):
            return dataclasses.asdict(o)
        if isinstance(o, enum.Enum):
            return o.name.lower()
        if isinstance(o, Path):
            return str(o)
        if isinstance(o, np.ndarray):
            return o.tolist()
        if isinstance(o, np.generic):
            return o.item()
        return super().default(o)


@dataclasses.dataclass
class ProfileParams:
    """
    Parameters of an affine-transformed profile.

        value = scale * f((x - shift) / width) + offset

    west_offset and east_offset are added to the ghost cells of initial
    fields only (e.g. to impose a Dirichlet inflow value).
    """
    function: ProfileKind = ProfileKind.CONSTANT
    shift: float = 0.0
    offset: float = 0.0
    width: float = 1.0
    scale: float = 1.0
    west_offset: float = 0.0
    east_offset: float = 0.0

    def __post_init__(self):
        self.function = parse_profile_kind(self.function)
        for f in dataclasses.fields(self):
            if f.name != 'function':
                setattr(self, f.name, as_float(f.name, getattr(self, f.name)))
        if self.width == 0.0:
            raise ConfigurationError("Profile width must be non-zero")

    def to_profile(self, spacing: float = 1.0,
                   user_expressions: Optional[Dict[ProfileKind, str]] = None) -> Profile:
        return Profile(kind=self.function, shift=self.shift, width=self.width,
                       scale=self.scale, offset=self.offset, spacing=spacing,
                       user_expressions=dict(user_expressions or {}))


@dataclasses.dataclass
class CaseConfig:
    # Domain
    xa: float = 0.0
    xe: float = 1.0
    imax: int = 100
    mesh: str = 'uniform'
    mesh_file: str = 'mesh.dat'

    # Time
    ta: float = 0.0
    dt: float = 1e-3
    nmax: int = 1000

    # Relaxation
    max_iterations: int = 100
    tolerance: float = 1e-10

    # Boundaries
    bc_west: BoundaryKind = BoundaryKind.WALL
    bc_east: BoundaryKind = BoundaryKind.WALL
    west: ProfileParams = dataclasses.field(default_factory=ProfileParams)
    east: ProfileParams = dataclasses.field(default_factory=ProfileParams)

    # Initial state
    rho: ProfileParams = dataclasses.field(default_factory=ProfileParams)
    u: ProfileParams = dataclasses.field(default_factory=ProfileParams)
    user_expressions: Dict[ProfileKind, str] = dataclasses.field(default_factory=dict)

    # Restart and output
    restart: bool = False
    restart_file: str = 'restart.h5'
    output_dir: str = '.'
    show_results: bool = False

    def __post_init__(self):
        for name in INT_FIELDS:
            setattr(self, name, as_int(name, getattr(self, name)))
        for name in FLOAT_FIELDS:
            setattr(self, name, as_float(name, getattr(self, name)))

        for name in ('west', 'east', 'rho', 'u'):
            value = getattr(self, name)
            if isinstance(value, dict):
                try:
                    setattr(self, name, ProfileParams(**value))
                except TypeError as exc:
                    raise ConfigurationError(f"Invalid profile parameters for '{name}': {exc}") from exc
            elif not isinstance(value, ProfileParams):
                raise ConfigurationError(f"Profile parameters for '{name}' must be an object, got {value!r}")

        self.user_expressions = {parse_profile_kind(k): str(v) for k, v in self.user_expressions.items()}
        for kind in self.user_expressions:
            if kind not in USER_DEFINED:
                raise ConfigurationError(f"Expressions can only be given for user-defined profiles, not {kind.name}")

        self.bc_west, self.bc_east = resolve_periodic(self.bc_west, self.bc_east)

        if isinstance(self.mesh, int) or str(self.mesh).isdigit():
            index = int(self.mesh)
            if index not in (0, 1):
                raise ConfigurationError(f"Unknown mesh source: {self.mesh!r}")
            self.mesh = MESH_SOURCES[index]
        self.mesh = str(self.mesh).lower()
        if self.mesh not in MESH_SOURCES:
            raise ConfigurationError(f"Unknown mesh source: {self.mesh!r}, expected one of {MESH_SOURCES}")

        if self.imax < 1:
            raise ConfigurationError(f"imax must be positive, got {self.imax}")
        if self.mesh == 'uniform' and not self.xe > self.xa:
            raise ConfigurationError(f"Domain bounds must satisfy xa < xe, got [{self.xa}, {self.xe}]")

        # SolverConfig validates the time stepping and relaxation parameters
        self.solver_config()

        for name in self.profiles_in_use():
            profile = getattr(self, name)
            if profile.function in USER_DEFINED and not self.user_expressions.get(profile.function):
                raise ConfigurationError(
                    f"Profile '{name}' uses {profile.function.name} but no expression was supplied")

    @property
    def te(self) -> float:
        """Local end time of the run."""
        return self.ta + self.nmax * self.dt

    def profiles_in_use(self):
        """Names of the profile parameter sets that the case actually evaluates."""
        names = ['rho', 'u']
        if self.bc_west == BoundaryKind.DYNAMIC:
            names.append('west')
        if self.bc_east == BoundaryKind.DYNAMIC:
            names.append('east')
        return names

    def solver_config(self) -> SolverConfig:
        return SolverConfig(dt=self.dt, n_steps=self.nmax,
                            max_iterations=self.max_iterations, tolerance=self.tolerance)

    def to_dict(self) -> dict:
        d = dataclasses.asdict(self)
        d['user_expressions'] = {k.name.lower(): v for k, v in self.user_expressions.items()}
        return d

    @classmethod
    def from_dict(cls, d: dict) -> 'CaseConfig':
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**d)


def load_config(path) -> CaseConfig:
    """
    Read a case file.

    Relative mesh, restart and output paths are resolved against the
    directory of the case file.
    """
    path = Path(path)
    try:
        with open(path) as f:
            d = json.load(f)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read case file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Malformed case file {path}: {exc}") from exc

    if not isinstance(d, dict):
        raise ConfigurationError(f"Case file {path} must contain a JSON object")

    config = CaseConfig.from_dict(d)

    for name in ('mesh_file', 'restart_file', 'output_dir'):
        p = Path(getattr(config, name))
        if not p.is_absolute():
            setattr(config, name, str(path.parent / p))

    return config


def save_config(config: CaseConfig, path):
    """Write a case file."""
    with open(path, 'w') as f:
        json.dump(config.to_dict(), f, cls=AdvancedJSONEncoder, indent=4)
