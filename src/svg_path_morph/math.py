# This file is part of https://github.com/KurtBoehm/svg_path_editor.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

from __future__ import annotations

from collections.abc import Sequence
from math import comb
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import sympy as sp

type Expr = "sp.Expr"
type Boolean = "sp.logic.boolalg.Boolean"

ROOT_EPSILON: float = 1e-9
"""Tolerance used to accept numerically computed roots as real and in range."""


def to_rational(x: float) -> Expr:
    """
    Convert a float to a SymPy :class:`sympy.Rational`.

    The conversion is exact with respect to the shortest decimal representation:
    the float is first converted to a string via :func:`repr` and then passed to
    :class:`sympy.Rational`.
    """
    import sympy as sp

    return sp.Rational(repr(float(x)))


def as_bool(r: Boolean | bool) -> bool:
    """
    Coerce a SymPy Boolean to builtin :class:`bool`.

    :raises ValueError: If ``r`` cannot be simplified to a definite Boolean.
    """
    import sympy as sp

    if isinstance(r, bool):
        return r
    r = sp.simplify(r)
    if isinstance(r, sp.logic.boolalg.BooleanTrue):
        return True
    if isinstance(r, sp.logic.boolalg.BooleanFalse):
        return False
    raise ValueError(f"Cannot be evaluated to a Boolean: {r}")


def bezier_coefficients[T](values: Sequence[T]) -> list[T]:
    r"""
    Convert one coordinate of a Bézier curve from Bernstein to power basis.

    For control values :math:`b_0, …, b_n` the curve is
    :math:`B(t) = \sum_k a_k t^k` with

    .. math::

        a_k = \binom{n}{k} \sum_{i=0}^{k} (-1)^{k-i} \binom{k}{i} b_i.

    Only ring operations are used, so floats and SymPy rationals both work.

    :return: Coefficients :math:`a_0, …, a_n` in ascending order.
    """
    n = len(values) - 1
    coeffs: list[Any] = []
    for k in range(n + 1):
        acc: Any = 0
        for i in range(k + 1):
            term = values[i] * comb(k, i)
            acc = acc + term if (k - i) % 2 == 0 else acc - term
        coeffs.append(acc * comb(n, k))
    return coeffs


def polynomial_roots(
    coeffs: Sequence[float],
    *,
    lo: float | None = None,
    hi: float | None = None,
    eps: float = ROOT_EPSILON,
) -> list[float]:
    """
    Real roots of a univariate polynomial.

    The roots are the eigenvalues of the companion matrix as computed by
    :func:`numpy.roots`. Roots with a relative imaginary part up to ``eps`` are
    considered real. If bounds are given, roots within ``eps`` outside of
    ``[lo, hi]`` are clamped to the bound and all others are dropped.

    :param coeffs: Coefficients in ascending order of powers.
    :return: Sorted real roots without duplicates (up to ``eps``).
             The zero polynomial and non-zero constants yield no roots.
    """
    import numpy as np

    cs = np.asarray(coeffs, dtype=np.float64)
    scale = float(np.max(np.abs(cs))) if cs.size else 0.0
    if scale == 0.0:
        return []
    # Drop vanishing leading coefficients to keep the companion matrix regular
    nonzero = np.nonzero(np.abs(cs) > scale * 1e-14)[0]
    cs = cs[: nonzero[-1] + 1]
    if cs.size <= 1:
        return []

    roots: list[float] = []
    for z in np.roots(cs[::-1]):
        if abs(z.imag) > eps * max(1.0, abs(z.real)):
            continue
        r = float(z.real)
        if lo is not None and r < lo:
            if r < lo - eps:
                continue
            r = lo
        if hi is not None and r > hi:
            if r > hi + eps:
                continue
            r = hi
        roots.append(r)

    roots.sort()
    unique: list[float] = []
    for r in roots:
        if not unique or r - unique[-1] > eps:
            unique.append(r)
    return unique


def unit_interval_roots(
    coeffs: Sequence[Expr],
    *,
    include_start: bool = True,
    include_end: bool = True,
) -> list[Expr]:
    """
    Distinct real roots of a rational polynomial within the unit interval.

    The roots are isolated exactly by SymPy, so a root lying exactly on an
    interval end is classified correctly and multiple roots are reported once.

    :param coeffs: Rational coefficients in ascending order of powers.
    :param include_start: Whether a root at :math:`t = 0` is reported.
    :param include_end: Whether a root at :math:`t = 1` is reported.
    :return: Exact roots in increasing order. The zero polynomial yields no roots.
    """
    import sympy as sp

    t = sp.Symbol("t", real=True)
    poly = sp.Poly(list(reversed(coeffs)), t)
    if poly.is_zero or poly.degree() < 1:
        return []

    result: list[Expr] = []
    for r in sorted(set(poly.real_roots()), key=lambda v: float(v)):
        lower_ok = as_bool(sp.Ge(r, 0) if include_start else sp.Gt(r, 0))
        upper_ok = as_bool(sp.Le(r, 1) if include_end else sp.Lt(r, 1))
        if lower_ok and upper_ok:
            result.append(r)
    return result


def gauss_legendre_integral(
    f: Any,
    a: float,
    b: float,
    *,
    pieces: int = 8,
    order: int = 8,
) -> float:
    """
    Integrate a vectorized function over ``[a, b]`` by composite Gauss–Legendre.

    :param f: Function accepting and returning :class:`numpy.ndarray`.
    :param pieces: Number of equal sub-intervals.
    :param order: Number of quadrature nodes per sub-interval.
    """
    import numpy as np

    if a == b:
        return 0.0
    nodes, weights = np.polynomial.legendre.leggauss(order)
    edges = np.linspace(a, b, pieces + 1)
    half = (edges[1:] - edges[:-1]) / 2
    mid = (edges[1:] + edges[:-1]) / 2
    xs = (mid[:, None] + half[:, None] * nodes[None, :]).ravel()
    ws = (half[:, None] * weights[None, :]).ravel()
    return float(np.sum(ws * f(xs)))
