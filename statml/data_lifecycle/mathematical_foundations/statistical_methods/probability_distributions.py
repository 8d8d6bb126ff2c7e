from typing import Any, Callable, Dict, List, Union
import math
import numpy as np
from scipy.optimize import brentq
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.data_lifecycle.mathematical_foundations.specialized_functions.special_functions import incomplete_beta, incomplete_gamma, standard_normal_cdf, standard_normal_pdf, standard_normal_ppf
Scalar = Union[int, float]

def _vectorize(func: Callable[[float], float], x: Any) -> Union[float, List[float]]:
    """Apply a scalar function to a scalar or element-wise to a sequence, preserving the input's shape."""
    if np.ndim(x) == 0:
        return func(float(x))
    return [func(float(v)) for v in np.asarray(x, dtype=float).ravel()]

def _check_positive(name: str, value: float) -> None:
    if not value > 0:
        raise InputError(f'{name} must be positive, got {value}')

def log_binomial_coefficient(n: int, k: int) -> float:
    """``log C(n, k)`` through ``lgamma`` so that large ``n`` does not overflow."""
    return math.lgamma(n + 1) - math.lgamma(k + 1) - math.lgamma(n - k + 1)

def t_cdf_value(t: float, df: float) -> float:
    """Student-t CDF through ``I_x(df / 2, 1 / 2)`` with ``x = df / (df + t^2)``."""
    if math.isnan(t):
        return math.nan
    if math.isinf(t):
        return 1.0 if t > 0 else 0.0
    x = df / (df + t * t)
    tail = 0.5 * incomplete_beta(df / 2.0, 0.5, x)
    return 1.0 - tail if t >= 0 else tail

def chi_square_cdf_value(x: float, df: float) -> float:
    """Chi-square CDF as the regularized lower incomplete gamma ``P(df / 2, x / 2)``."""
    if math.isnan(x):
        return math.nan
    if x <= 0:
        return 0.0
    return incomplete_gamma(df / 2.0, x / 2.0)

def f_cdf_value(f: float, df1: float, df2: float) -> float:
    """F CDF as ``1 - I_{df2 / (df2 + df1 f)}(df2 / 2, df1 / 2)``."""
    if math.isnan(f):
        return math.nan
    if f <= 0:
        return 0.0
    if math.isinf(f):
        return 1.0
    return 1.0 - incomplete_beta(df2 / 2.0, df1 / 2.0, df2 / (df2 + df1 * f))

def t_ppf_value(p: float, df: float) -> float:
    """
    Student-t quantile by bracketing and root-finding on ``t_cdf_value``.

    Returns NaN outside (0, 1).
    """
    if math.isnan(p) or p <= 0 or p >= 1:
        return math.nan
    if p == 0.5:
        return 0.0
    bound = 10.0
    while t_cdf_value(bound, df) < p or t_cdf_value(-bound, df) > p:
        bound *= 2.0
        if bound > 1e+12:
            return math.inf if p > 0.5 else -math.inf
    return float(brentq(lambda t: t_cdf_value(t, df) - p, -bound, bound, xtol=1e-10))

def chi_square_ppf_value(p: float, df: float) -> float:
    """Chi-square quantile by root-finding on ``chi_square_cdf_value``; NaN outside (0, 1)."""
    if math.isnan(p) or p <= 0 or p >= 1:
        return math.nan
    upper = max(1.0, 2.0 * df)
    while chi_square_cdf_value(upper, df) < p:
        upper *= 2.0
        if upper > 1e+12:
            return math.inf
    return float(brentq(lambda x: chi_square_cdf_value(x, df) - p, 0.0, upper, xtol=1e-10))

def normal_two_sided_p(z: float) -> float:
    return 2.0 * (1.0 - standard_normal_cdf(abs(z)))

def t_two_sided_p(t: float, df: float) -> float:
    return 2.0 * (1.0 - t_cdf_value(abs(t), df))

@returns_tagged('distribution', 'normal_pdf')
def normal_pdf(x: Any, mu: float=0.0, sigma: float=1.0) -> Dict[str, Any]:
    """
    Normal probability density.

    Args:
        x: Scalar or sequence of points.
        mu (float): Mean.
        sigma (float): Standard deviation, must be positive.

    Returns:
        dict: ``{type: 'distribution', name: 'normal_pdf', params: {mu, sigma}, value}``.
    """
    _check_positive('sigma', sigma)
    value = _vectorize(lambda v: standard_normal_pdf((v - mu) / sigma) / sigma, x)
    return ok('distribution', 'normal_pdf', params={'mu': mu, 'sigma': sigma}, value=value)

@returns_tagged('distribution', 'normal_cdf')
def normal_cdf(x: Any, mu: float=0.0, sigma: float=1.0) -> Dict[str, Any]:
    """Normal cumulative distribution function, element-wise over ``x``."""
    _check_positive('sigma', sigma)
    value = _vectorize(lambda v: standard_normal_cdf((v - mu) / sigma), x)
    return ok('distribution', 'normal_cdf', params={'mu': mu, 'sigma': sigma}, value=value)

@returns_tagged('distribution', 'normal_ppf')
def normal_ppf(p: Any, mu: float=0.0, sigma: float=1.0) -> Dict[str, Any]:
    """Normal quantile function; probabilities outside (0, 1) map to NaN."""
    _check_positive('sigma', sigma)
    value = _vectorize(lambda q: mu + sigma * standard_normal_ppf(q), p)
    return ok('distribution', 'normal_ppf', params={'mu': mu, 'sigma': sigma}, value=value)

def _check_binomial(n: int, p: float) -> None:
    if int(n) != n or n < 0:
        raise InputError(f'n must be a non-negative integer, got {n}')
    if not 0 <= p <= 1:
        raise InputError(f'p must be between 0 and 1, got {p}')

def _binomial_pmf_value(k: float, n: int, p: float) -> float:
    if k != math.floor(k) or k < 0 or k > n:
        return 0.0
    k = int(k)
    if p == 0.0 or p == 1.0:
        return 1.0 if k == n * p else 0.0
    return math.exp(log_binomial_coefficient(n, k) + k * math.log(p) + (n - k) * math.log1p(-p))

@returns_tagged('distribution', 'binomial_pmf')
def binomial_pmf(k: Any, n: int, p: float) -> Dict[str, Any]:
    """
    Binomial probability mass ``C(n, k) p^k (1 - p)^(n - k)``.

    Non-integer or out-of-range ``k`` has probability 0.
    """
    _check_binomial(n, p)
    n = int(n)
    value = _vectorize(lambda v: _binomial_pmf_value(v, n, p), k)
    return ok('distribution', 'binomial_pmf', params={'n': n, 'p': p}, value=value)

@returns_tagged('distribution', 'binomial_cdf')
def binomial_cdf(k: Any, n: int, p: float) -> Dict[str, Any]:
    """Binomial CDF as the summed PMF over ``0..floor(k)``."""
    _check_binomial(n, p)
    n = int(n)

    def cdf(v: float) -> float:
        if v < 0:
            return 0.0
        upper = min(int(math.floor(v)), n)
        return min(1.0, sum((_binomial_pmf_value(i, n, p) for i in range(upper + 1))))
    value = _vectorize(cdf, k)
    return ok('distribution', 'binomial_cdf', params={'n': n, 'p': p}, value=value)

def _poisson_pmf_value(k: float, lam: float) -> float:
    if k != math.floor(k) or k < 0:
        return 0.0
    k = int(k)
    if lam == 0:
        return 1.0 if k == 0 else 0.0
    return math.exp(k * math.log(lam) - lam - math.lgamma(k + 1))

@returns_tagged('distribution', 'poisson_pmf')
def poisson_pmf(k: Any, lam: float) -> Dict[str, Any]:
    """Poisson probability mass ``exp(-lam) lam^k / k!``; ``lam`` must be non-negative."""
    if lam < 0:
        raise InputError(f'lambda must be non-negative, got {lam}')
    value = _vectorize(lambda v: _poisson_pmf_value(v, lam), k)
    return ok('distribution', 'poisson_pmf', params={'lambda': lam}, value=value)

@returns_tagged('distribution', 'poisson_cdf')
def poisson_cdf(k: Any, lam: float) -> Dict[str, Any]:
    if lam < 0:
        raise InputError(f'lambda must be non-negative, got {lam}')

    def cdf(v: float) -> float:
        if v < 0:
            return 0.0
        return min(1.0, sum((_poisson_pmf_value(i, lam) for i in range(int(math.floor(v)) + 1))))
    value = _vectorize(cdf, k)
    return ok('distribution', 'poisson_cdf', params={'lambda': lam}, value=value)

@returns_tagged('distribution', 't_cdf')
def t_cdf(t: Any, df: float) -> Dict[str, Any]:
    """Student-t CDF with ``df`` degrees of freedom."""
    _check_positive('df', df)
    return ok('distribution', 't_cdf', params={'df': df}, value=_vectorize(lambda v: t_cdf_value(v, df), t))

@returns_tagged('distribution', 't_ppf')
def t_ppf(p: Any, df: float) -> Dict[str, Any]:
    """Student-t quantile with ``df`` degrees of freedom."""
    _check_positive('df', df)
    return ok('distribution', 't_ppf', params={'df': df}, value=_vectorize(lambda v: t_ppf_value(v, df), p))

@returns_tagged('distribution', 'chi_square_cdf')
def chi_square_cdf(x: Any, df: float) -> Dict[str, Any]:
    _check_positive('df', df)
    return ok('distribution', 'chi_square_cdf', params={'df': df}, value=_vectorize(lambda v: chi_square_cdf_value(v, df), x))

@returns_tagged('distribution', 'chi_square_ppf')
def chi_square_ppf(p: Any, df: float) -> Dict[str, Any]:
    _check_positive('df', df)
    return ok('distribution', 'chi_square_ppf', params={'df': df}, value=_vectorize(lambda v: chi_square_ppf_value(v, df), p))

@returns_tagged('distribution', 'f_cdf')
def f_cdf(x: Any, df1: float, df2: float) -> Dict[str, Any]:
    """F CDF with ``(df1, df2)`` degrees of freedom."""
    _check_positive('df1', df1)
    _check_positive('df2', df2)
    return ok('distribution', 'f_cdf', params={'df1': df1, 'df2': df2}, value=_vectorize(lambda v: f_cdf_value(v, df1, df2), x))
