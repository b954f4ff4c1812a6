"""
Profile functions for initial conditions and time-dependent boundary values.

Every profile is a one-argument function f(x). The affine transform

    value = scale * f((x - shift) / width) + offset

is applied by Profile, never by the functions themselves.

Selection is by integer index into a closed set (ProfileKind):

     0 constant         6 linear ramp     12 Dirac impulse
     1 linear           7 cosine ramp     13 Heaviside step
     2 parabola         8 sine            14 cosine peak
     3 rectangle        9 cosine          15 user defined 1
     4 triangle        10 exponential     16 user defined 2
     5 sawtooth        11 Gauss

User-defined profiles are formulas in x supplied by the case file,
e.g. "x**3 - 2*x" or "where(x < 0, 0, sin(pi*x))". They are parsed with
sympy and turned into numpy callables with lambdify.
"""

import io
import tokenize
import numpy as np
import sympy
from dataclasses import dataclass, field
from enum import IntEnum
from functools import lru_cache
from typing import Dict, Optional
from sympy.core.sympify import SympifyError

from .errors import ConfigurationError


class ProfileKind(IntEnum):
    CONSTANT = 0
    LINEAR = 1
    PARABOLA = 2
    RECTANGLE = 3
    TRIANGLE = 4
    SAWTOOTH = 5
    LINEAR_RAMP = 6
    COSINE_RAMP = 7
    SINE = 8
    COSINE = 9
    EXPONENTIAL = 10
    GAUSS = 11
    DIRAC = 12
    HEAVISIDE = 13
    COS_PEAK = 14
    USER_DEFINED_1 = 15
    USER_DEFINED_2 = 16


USER_DEFINED = (ProfileKind.USER_DEFINED_1, ProfileKind.USER_DEFINED_2)

X = sympy.Symbol('x')


def _where(condition, a, b):
    return sympy.Piecewise((a, condition), (b, True))


def _minimum(a, b):
    return sympy.Piecewise((a, a <= b), (b, True))


def _maximum(a, b):
    return sympy.Piecewise((a, a >= b), (b, True))


# The only names a user-defined expression may use
EXPRESSION_NAMESPACE = {
    'x': X,
    'pi': sympy.pi,
    'e': sympy.E,
    'sin': sympy.sin,
    'cos': sympy.cos,
    'tan': sympy.tan,
    'sinh': sympy.sinh,
    'cosh': sympy.cosh,
    'tanh': sympy.tanh,
    'exp': sympy.exp,
    'log': sympy.log,
    'sqrt': sympy.sqrt,
    'abs': sympy.Abs,
    'sign': sympy.sign,
    'minimum': _minimum,
    'maximum': _maximum,
    'where': _where,
}

EXPRESSION_OPERATORS = {'+', '-', '*', '/', '**', '(', ')', ',', '<', '>', '<=', '>='}


def parse_profile_kind(value) -> ProfileKind:
    """Accept an index (12) or a name ('dirac', 'DIRAC') and return the kind."""
    try:
        if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
            return ProfileKind[value.strip().upper()]
        return ProfileKind(int(value))
    except (KeyError, ValueError, TypeError):
        raise ConfigurationError(f"Unknown profile function: {value!r}") from None


def _check_tokens(expression: str):
    """Reject anything but numbers, arithmetic and the names of EXPRESSION_NAMESPACE."""
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(expression.strip()).readline))
    except (tokenize.TokenError, SyntaxError) as exc:
        raise ConfigurationError(f"Invalid profile expression {expression!r}: {exc}") from exc

    for tok in tokens:
        if tok.type in (tokenize.NUMBER, tokenize.NEWLINE, tokenize.NL, tokenize.ENDMARKER):
            continue
        if tok.type == tokenize.NAME and tok.string in EXPRESSION_NAMESPACE:
            continue
        if tok.type == tokenize.OP and tok.string in EXPRESSION_OPERATORS:
            continue
        raise ConfigurationError(f"Invalid profile expression {expression!r}: {tok.string!r} is not allowed")


@lru_cache(maxsize=None)
def compile_expression(expression: str):
    """Parse a user-defined profile expression into a numpy function of x."""
    _check_tokens(expression)
    try:
        expr = sympy.sympify(expression, locals=dict(EXPRESSION_NAMESPACE))
    except (SympifyError, SyntaxError, TypeError, ValueError, AttributeError) as exc:
        raise ConfigurationError(f"Invalid profile expression {expression!r}: {exc}") from exc

    if not isinstance(expr, sympy.Basic):
        raise ConfigurationError(f"Profile expression {expression!r} is not a formula in x")
    unknown = expr.free_symbols - {X}
    if unknown:
        names = ', '.join(sorted(str(s) for s in unknown))
        raise ConfigurationError(f"Profile expression {expression!r} uses unknown symbols: {names}")

    return sympy.lambdify(X, expr, modules='numpy')


def _evaluate_expression(expression: Optional[str], x: np.ndarray) -> np.ndarray:
    if not expression:
        raise ConfigurationError("User-defined profile selected but no expression was supplied")

    func = compile_expression(expression)
    try:
        y = func(x)
    except (TypeError, ValueError, NameError) as exc:
        raise ConfigurationError(f"Cannot evaluate profile expression {expression!r}: {exc}") from exc

    # constant expressions ("2.5") still produce one value per point
    return np.broadcast_to(np.asarray(y, dtype=np.float64), x.shape).copy()


def evaluate(kind, x, spacing: float = 1.0,
             user_expressions: Optional[Dict[ProfileKind, str]] = None):
    """
    Evaluate a profile function.

    Args:
        kind: ProfileKind (or its integer index)
        x: Evaluation point(s), scalar or array
        spacing: Grid spacing used to normalise the Dirac impulse
        user_expressions: Expressions for the user-defined slots

    Returns:
        Float for scalar input, otherwise an array shaped like x
    """
    kind = ProfileKind(kind)
    scalar = np.ndim(x) == 0
    x = np.atleast_1d(np.asarray(x, dtype=np.float64))

    if kind == ProfileKind.CONSTANT:
        y = np.ones_like(x)
    elif kind == ProfileKind.LINEAR:
        y = x.copy()
    elif kind == ProfileKind.PARABOLA:
        y = x * x
    elif kind == ProfileKind.RECTANGLE:
        # closed on the right so that the pulse integrates to one
        y = np.where((x > -0.5) & (x <= 0.5), 1.0, 0.0)
    elif kind == ProfileKind.TRIANGLE:
        y = np.select([x <= -1.0, x <= 0.0, x <= 1.0], [0.0, 1.0 + x, 1.0 - x], default=0.0)
    elif kind == ProfileKind.SAWTOOTH:
        y = np.select([x <= 0.0, x <= 1.0], [0.0, x], default=0.0)
    elif kind == ProfileKind.LINEAR_RAMP:
        y = np.select([x <= 0.0, x <= 1.0], [0.0, x], default=1.0)
    elif kind == ProfileKind.COSINE_RAMP:
        y = np.select([x <= 0.0, x <= 1.0], [0.0, 0.5 * (1.0 - np.cos(np.pi * x))], default=1.0)
    elif kind == ProfileKind.SINE:
        y = np.sin(2.0 * np.pi * x)
    elif kind == ProfileKind.COSINE:
        y = np.cos(2.0 * np.pi * x)
    elif kind == ProfileKind.EXPONENTIAL:
        y = np.exp(x)
    elif kind == ProfileKind.GAUSS:
        # normalised: integral over the real line is one
        y = np.exp(-np.pi * x * x)
    elif kind == ProfileKind.DIRAC:
        # Exact comparison: only hits when the evaluation point lands on the shift exactly.
        y = np.where(x == 0.0, 1.0 / spacing, 0.0)
    elif kind == ProfileKind.HEAVISIDE:
        y = np.where(x < 0.0, 0.0, 1.0)
    elif kind == ProfileKind.COS_PEAK:
        y = np.where((x > -0.5) & (x < 0.5), 0.5 * (1.0 + np.cos(2.0 * np.pi * x)), 0.0)
    else:
        expressions = user_expressions or {}
        y = _evaluate_expression(expressions.get(kind), x)

    if scalar:
        return float(y[0])
    return y


@dataclass
class Profile:
    """
    Affine-transformed profile function.

        value = scale * f((x - shift) / width) + offset

    x is a position for initial conditions and a time for dynamic boundaries.
    """
    kind: ProfileKind = ProfileKind.CONSTANT
    shift: float = 0.0
    width: float = 1.0
    scale: float = 1.0
    offset: float = 0.0
    spacing: float = 1.0
    user_expressions: Dict[ProfileKind, str] = field(default_factory=dict)

    def __post_init__(self):
        self.kind = parse_profile_kind(self.kind)
        if self.width == 0.0:
            raise ConfigurationError("Profile width must be non-zero")
        if self.kind in USER_DEFINED and not self.user_expressions.get(self.kind):
            raise ConfigurationError(f"No expression supplied for {self.kind.name}")

    def __call__(self, x):
        xi = (np.asarray(x, dtype=np.float64) - self.shift) / self.width
        f = evaluate(self.kind, xi, spacing=self.spacing, user_expressions=self.user_expressions)
        return self.scale * f + self.offset
