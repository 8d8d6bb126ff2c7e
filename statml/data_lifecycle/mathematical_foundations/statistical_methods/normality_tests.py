from typing import Any, Dict
import math
import numpy as np
from general.structures.data_batch import clean_sequence
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.data_lifecycle.mathematical_foundations.statistical_methods.descriptive_statistics import compute_mean, compute_kurtosis, compute_skewness
from statml.data_lifecycle.mathematical_foundations.statistical_methods.hypothesis_testing import check_alpha, require_n
from statml.data_lifecycle.mathematical_foundations.statistical_methods.probability_distributions import chi_square_cdf_value
from statml.data_lifecycle.mathematical_foundations.specialized_functions.special_functions import standard_normal_cdf, standard_normal_ppf
SHAPIRO_MIN_N = 3
SHAPIRO_MAX_N = 5000
_AN_POLY = (0.221157, -0.147981, -2.07119, 4.434685, -2.706056)
_AN1_POLY = (0.042981, -0.293762, -1.752461, 5.682633, -3.582633)
SHAPIRO_NOTE = "Royston's approximation for the coefficients and p-value; p-values are approximate for small samples"

def _poly(coefficients, u: float) -> float:
    return sum((c * u ** (i + 1) for (i, c) in enumerate(coefficients)))

def shapiro_wilk_coefficients(n: int) -> np.ndarray:
    """
    Shapiro-Wilk weights ``a_1..a_n`` following Royston (1992).

    The two outermost weights get Royston's polynomial corrections in ``u = 1 / sqrt(n)``;
    the inner ones are the normal scores rescaled by ``sqrt(phi)``. Weights are
    antisymmetric (``a_i = -a_{n+1-i}``).
    """
    if n == 3:
        return np.array([-math.sqrt(0.5), 0.0, math.sqrt(0.5)])
    m = np.array([standard_normal_ppf((i - 0.375) / (n + 0.25)) for i in range(1, n + 1)])
    m_sq = float(np.sum(m ** 2))
    c = m / math.sqrt(m_sq)
    u = 1.0 / math.sqrt(n)
    a = np.empty(n)
    a_n = c[-1] + _poly(_AN_POLY, u)
    if n > 5:
        a_n1 = c[-2] + _poly(_AN1_POLY, u)
        phi = (m_sq - 2 * m[-1] ** 2 - 2 * m[-2] ** 2) / (1 - 2 * a_n ** 2 - 2 * a_n1 ** 2)
        a[2:-2] = m[2:-2] / math.sqrt(phi)
        (a[-1], a[-2], a[0], a[1]) = (a_n, a_n1, -a_n, -a_n1)
    else:
        phi = (m_sq - 2 * m[-1] ** 2) / (1 - 2 * a_n ** 2)
        a[1:-1] = m[1:-1] / math.sqrt(phi)
        (a[-1], a[0]) = (a_n, -a_n)
    return a

def shapiro_wilk_p_value(w: float, n: int) -> float:
    """Royston's normalizing transformation of ``W`` into an upper-tail normal p-value."""
    if w >= 1:
        return 1.0
    if n == 3:
        return max(0.0, min(1.0, 6.0 / math.pi * (math.asin(math.sqrt(w)) - math.asin(math.sqrt(0.75)))))
    if n <= 11:
        gamma = 0.459 * n - 2.273
        mu = 0.544 - 0.39978 * n + 0.025054 * n ** 2 - 0.0006714 * n ** 3
        sigma = math.exp(1.3822 - 0.77857 * n + 0.062767 * n ** 2 - 0.0020322 * n ** 3)
        inner = gamma - math.log(1.0 - w)
        y = -math.log(inner)
    else:
        ln_n = math.log(n)
        mu = 0.0038915 * ln_n ** 3 - 0.083751 * ln_n ** 2 - 0.31082 * ln_n - 1.5861
        sigma = math.exp(0.0030302 * ln_n ** 2 - 0.082676 * ln_n - 0.4803)
        y = math.log(1.0 - w)
    z = (y - mu) / sigma
    return 1.0 - standard_normal_cdf(z)

@returns_tagged('hypothesis_test', 'shapiro_wilk')
def shapiro_wilk(sample: Any, alpha: float=0.05) -> Dict[str, Any]:
    """
    Shapiro-Wilk test of normality for 3 <= n <= 5000.

    Args:
        sample: Observations; non-finite entries are dropped.
        alpha (float): Significance level.

    Returns:
        dict: ``statistic`` (W), ``p_value``, ``n``, ``is_normal`` (``p_value >= alpha``)
        and a ``note`` describing the approximation.
    """
    check_alpha(alpha)
    x = np.sort(clean_sequence(sample))
    n = len(x)
    require_n(n, SHAPIRO_MIN_N)
    if n > SHAPIRO_MAX_N:
        raise InputError(f'Shapiro-Wilk supports at most {SHAPIRO_MAX_N} observations, got {n}')
    if x[-1] - x[0] == 0:
        raise InputError('degenerate input: all observations are identical')
    a = shapiro_wilk_coefficients(n)
    ss = float(np.sum((x - compute_mean(x)) ** 2))
    w = min(1.0, float(np.dot(a, x)) ** 2 / ss)
    p_value = shapiro_wilk_p_value(w, n)
    return ok('hypothesis_test', 'shapiro_wilk', statistic=w, p_value=p_value, n=n, alpha=alpha, is_normal=p_value >= alpha, significant=p_value < alpha, note=SHAPIRO_NOTE)

@returns_tagged('hypothesis_test', 'jarque_bera')
def jarque_bera(sample: Any, alpha: float=0.05) -> Dict[str, Any]:
    """
    Jarque-Bera test: ``JB = n / 6 * (S^2 + K^2 / 4)`` on chi-square with 2 df.

    ``S`` and ``K`` are the moment-based (biased) skewness and excess kurtosis.
    """
    check_alpha(alpha)
    x = clean_sequence(sample)
    n = len(x)
    require_n(n, 4)
    skew = compute_skewness(x, bias=True)
    kurt = compute_kurtosis(x, bias=True)
    if math.isnan(skew) or math.isnan(kurt):
        raise InputError('degenerate input: all observations are identical')
    statistic = n / 6.0 * (skew ** 2 + kurt ** 2 / 4.0)
    p_value = 1.0 - chi_square_cdf_value(statistic, 2)
    return ok('hypothesis_test', 'jarque_bera', statistic=statistic, df=2, p_value=p_value, n=n, skewness=skew, kurtosis=kurt, alpha=alpha, is_normal=p_value >= alpha, significant=p_value < alpha)
