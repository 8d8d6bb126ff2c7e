"""
Parametric hypothesis tests.

Every test returns ``{type: 'hypothesis_test', name, statistic, df?, p_value, ...}``
with two-sided p-values unless the statistic is one-sided by construction
(chi-square and F tests). Insufficient or degenerate input yields an error value
carrying the same ``type`` and ``name``.
"""
from typing import Any, Dict, List, Optional, Sequence
import math
import numpy as np
from general.structures.data_batch import as_matrix, clean_pairs, clean_sequence
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.data_lifecycle.mathematical_foundations.statistical_methods.descriptive_statistics import compute_mean, compute_median, compute_variance
from statml.data_lifecycle.mathematical_foundations.statistical_methods.probability_distributions import chi_square_cdf_value, f_cdf_value, normal_two_sided_p, t_two_sided_p
from statml.data_lifecycle.mathematical_foundations.specialized_functions.special_functions import standard_normal_ppf

def check_alpha(alpha: float) -> None:
    if not 0 < alpha < 1:
        raise InputError('Significance level must be between 0 and 1')

def require_n(n: int, minimum: int, what: str='observations') -> None:
    if n < minimum:
        raise InputError(f'insufficient data: need at least {minimum} {what}, got {n}')

def clean_groups(groups: Sequence[Any], min_groups: int=2, min_size: int=1) -> List[np.ndarray]:
    """
    Clean each group and enforce minimum group count and size.

    Raises:
        InputError: With the minimum in the message when either requirement fails.
    """
    if groups is None:
        raise InputError('groups must be a sequence of sequences')
    cleaned = [clean_sequence(g) for g in groups]
    require_n(len(cleaned), min_groups, 'groups')
    for group in cleaned:
        require_n(len(group), min_size, 'observations per group')
    return cleaned

@returns_tagged('hypothesis_test', 'independent_t_test')
def t_test_independent(sample_a: Any, sample_b: Any, equal_var: bool=True, alpha: float=0.05) -> Dict[str, Any]:
    """
    Two-sample t-test for a difference in means.

    With ``equal_var=True`` the pooled variance and ``df = n_a + n_b - 2`` are used;
    otherwise Welch's standard error and the Welch-Satterthwaite ``df``.

    Args:
        sample_a: First sample.
        sample_b: Second sample.
        equal_var (bool): Pool the variances (default) or use Welch's test.
        alpha (float): Significance level reported through ``significant``.

    Returns:
        dict: Test result with ``statistic``, ``df``, ``p_value``, ``mean_a``, ``mean_b``,
        ``mean_difference``, ``std_error``, ``equal_var``, ``alpha`` and ``significant``.
    """
    check_alpha(alpha)
    (a, b) = clean_groups([sample_a, sample_b], min_size=2)
    (na, nb) = (len(a), len(b))
    (ma, mb) = (compute_mean(a), compute_mean(b))
    (va, vb) = (compute_variance(a), compute_variance(b))
    if equal_var:
        df = na + nb - 2
        pooled = ((na - 1) * va + (nb - 1) * vb) / df
        se = math.sqrt(pooled * (1.0 / na + 1.0 / nb))
    else:
        (sa, sb) = (va / na, vb / nb)
        se = math.sqrt(sa + sb)
        df = (sa + sb) ** 2 / (sa ** 2 / (na - 1) + sb ** 2 / (nb - 1)) if sa + sb > 0 else math.nan
    if se == 0:
        raise InputError('degenerate input: both samples have zero variance')
    t = (ma - mb) / se
    p_value = t_two_sided_p(t, df)
    return ok('hypothesis_test', 'independent_t_test', statistic=t, df=df, p_value=p_value, mean_a=ma, mean_b=mb, mean_difference=ma - mb, std_error=se, n_a=na, n_b=nb, equal_var=equal_var, alpha=alpha, significant=p_value < alpha)

@returns_tagged('hypothesis_test', 'paired_t_test')
def t_test_paired(sample_a: Any, sample_b: Any, alpha: float=0.05) -> Dict[str, Any]:
    """
    Paired t-test on the differences ``a - b``; zero differences are kept.

    Pairs with a missing member are dropped together. ``df = n - 1``.
    """
    check_alpha(alpha)
    (a, b) = clean_pairs(sample_a, sample_b)
    diffs = a - b
    n = len(diffs)
    require_n(n, 2, 'pairs')
    md = compute_mean(diffs)
    sd = math.sqrt(compute_variance(diffs))
    if sd == 0:
        raise InputError('degenerate input: differences have zero variance')
    se = sd / math.sqrt(n)
    t = md / se
    p_value = t_two_sided_p(t, n - 1)
    return ok('hypothesis_test', 'paired_t_test', statistic=t, df=n - 1, p_value=p_value, n=n, mean_difference=md, std_difference=sd, std_error=se, alpha=alpha, significant=p_value < alpha)

@returns_tagged('hypothesis_test', 'one_sample_t_test')
def t_test_one_sample(sample: Any, mu0: float=0.0, alpha: float=0.05) -> Dict[str, Any]:
    """One-sample t-test of ``H0: mean = mu0`` with ``df = n - 1``."""
    check_alpha(alpha)
    x = clean_sequence(sample)
    n = len(x)
    require_n(n, 2)
    m = compute_mean(x)
    sd = math.sqrt(compute_variance(x))
    if sd == 0:
        raise InputError('degenerate input: sample has zero variance')
    se = sd / math.sqrt(n)
    t = (m - mu0) / se
    p_value = t_two_sided_p(t, n - 1)
    return ok('hypothesis_test', 'one_sample_t_test', statistic=t, df=n - 1, p_value=p_value, n=n, mean=m, mu0=mu0, std_error=se, alpha=alpha, significant=p_value < alpha)

@returns_tagged('hypothesis_test', 'one_sample_z_test')
def z_test_one_sample(sample: Any, mu0: float=0.0, sigma: Optional[float]=None, alpha: float=0.05) -> Dict[str, Any]:
    """
    One-sample z-test of ``H0: mean = mu0``.

    Args:
        sample: Observations.
        mu0 (float): Hypothesized mean.
        sigma (Optional[float]): Known population standard deviation; the sample
            standard deviation is used when omitted.
        alpha (float): Significance level, also sets the reported confidence interval.

    Returns:
        dict: Test result with ``statistic``, ``p_value``, ``std_error``, ``sigma_known``
        and ``confidence_interval`` ([lower, upper] at level ``1 - alpha``).
    """
    check_alpha(alpha)
    x = clean_sequence(sample)
    n = len(x)
    if sigma is None:
        require_n(n, 2)
        sigma_used = math.sqrt(compute_variance(x))
    else:
        require_n(n, 1)
        if not sigma > 0:
            raise InputError(f'sigma must be positive, got {sigma}')
        sigma_used = float(sigma)
    if sigma_used == 0:
        raise InputError('degenerate input: sample has zero variance')
    m = compute_mean(x)
    se = sigma_used / math.sqrt(n)
    z = (m - mu0) / se
    p_value = normal_two_sided_p(z)
    critical = standard_normal_ppf(1 - alpha / 2)
    return ok('hypothesis_test', 'one_sample_z_test', statistic=z, p_value=p_value, n=n, mean=m, mu0=mu0, sigma=sigma_used, sigma_known=sigma is not None, std_error=se, critical_value=critical, confidence_interval=[m - critical * se, m + critical * se], alpha=alpha, significant=p_value < alpha)

@returns_tagged('hypothesis_test', 'chi_square_independence')
def chi_square_independence(table: Any, alpha: float=0.05) -> Dict[str, Any]:
    """
    Pearson chi-square test of independence on an ``r x c`` contingency table.

    Expected counts are ``row_total * col_total / grand_total``;
    ``df = (r - 1)(c - 1)``. Also reports Cramer's V.
    """
    check_alpha(alpha)
    observed = as_matrix(table, 'table')
    (r, c) = observed.shape
    if r < 2 or c < 2:
        raise InputError('insufficient data: contingency table needs at least 2 rows and 2 columns')
    if np.any(observed < 0):
        raise InputError('Contingency table counts must be non-negative')
    total = float(observed.sum())
    expected = np.outer(observed.sum(axis=1), observed.sum(axis=0)) / total if total > 0 else np.zeros_like(observed)
    if np.any(expected <= 0):
        raise InputError('degenerate input: every row and column total must be positive')
    statistic = float(np.sum((observed - expected) ** 2 / expected))
    df = (r - 1) * (c - 1)
    p_value = 1.0 - chi_square_cdf_value(statistic, df)
    cramers_v = math.sqrt(statistic / (total * (min(r, c) - 1)))
    return ok('hypothesis_test', 'chi_square_independence', statistic=statistic, df=df, p_value=p_value, expected=expected, n=total, cramers_v=cramers_v, alpha=alpha, significant=p_value < alpha)

@returns_tagged('hypothesis_test', 'chi_square_goodness_of_fit')
def chi_square_goodness_of_fit(observed: Any, expected: Optional[Any]=None, alpha: float=0.05) -> Dict[str, Any]:
    """
    Chi-square goodness-of-fit test with ``df = k - 1``.

    ``expected`` defaults to a uniform distribution; expected counts (or proportions)
    are rescaled to the observed total.
    """
    check_alpha(alpha)
    obs = clean_sequence(observed)
    k = len(obs)
    require_n(k, 2, 'categories')
    if np.any(obs < 0):
        raise InputError('Observed counts must be non-negative')
    total = float(obs.sum())
    if total <= 0:
        raise InputError('degenerate input: observed counts sum to zero')
    if expected is None:
        exp = np.full(k, total / k)
    else:
        exp = clean_sequence(expected)
        if len(exp) != k:
            raise InputError(f'Expected counts ({len(exp)}) must match observed categories ({k})')
        if np.any(exp <= 0):
            raise InputError('Expected counts must be positive')
        exp = exp * (total / float(exp.sum()))
    statistic = float(np.sum((obs - exp) ** 2 / exp))
    df = k - 1
    p_value = 1.0 - chi_square_cdf_value(statistic, df)
    return ok('hypothesis_test', 'chi_square_goodness_of_fit', statistic=statistic, df=df, p_value=p_value, expected=exp, alpha=alpha, significant=p_value < alpha)

def _one_way_f(groups: List[np.ndarray]) -> Dict[str, float]:
    k = len(groups)
    n_total = sum((len(g) for g in groups))
    if n_total - k < 1:
        raise InputError(f'insufficient data: need more observations ({n_total}) than groups ({k})')
    grand = compute_mean(np.concatenate(groups))
    ss_between = sum((len(g) * (compute_mean(g) - grand) ** 2 for g in groups))
    ss_within = sum((float(np.sum((g - compute_mean(g)) ** 2)) for g in groups))
    (df_between, df_within) = (k - 1, n_total - k)
    ms_between = ss_between / df_between
    ms_within = ss_within / df_within
    if ms_within == 0:
        raise InputError('degenerate input: zero variance within every group')
    f = ms_between / ms_within
    return {'statistic': f, 'df_between': df_between, 'df_within': df_within, 'ss_between': ss_between, 'ss_within': ss_within, 'ms_between': ms_between, 'ms_within': ms_within, 'p_value': 1.0 - f_cdf_value(f, df_between, df_within)}

@returns_tagged('hypothesis_test', 'anova_oneway')
def anova_oneway(groups: Sequence[Any], alpha: float=0.05) -> Dict[str, Any]:
    """
    One-way ANOVA: ``F = MSB / MSW`` on ``(k - 1, N - k)`` degrees of freedom.

    Args:
        groups: Two or more samples.
        alpha (float): Significance level.

    Returns:
        dict: Test result with sums of squares, mean squares and ``eta_squared``.
    """
    check_alpha(alpha)
    cleaned = clean_groups(groups)
    result = _one_way_f(cleaned)
    ss_total = result['ss_between'] + result['ss_within']
    return ok('hypothesis_test', 'anova_oneway', df=[result['df_between'], result['df_within']], eta_squared=result['ss_between'] / ss_total if ss_total > 0 else math.nan, group_means=[compute_mean(g) for g in cleaned], alpha=alpha, significant=result['p_value'] < alpha, **result)

@returns_tagged('hypothesis_test', 'levene_test')
def levene_test(groups: Sequence[Any], alpha: float=0.05) -> Dict[str, Any]:
    """
    Brown-Forsythe variant of Levene's test for equal variances.

    A one-way ANOVA on ``|x_ij - median(group_i)|``; ``F(k - 1, N - k)``.
    """
    check_alpha(alpha)
    cleaned = clean_groups(groups)
    deviations = [np.abs(g - compute_median(g)) for g in cleaned]
    result = _one_way_f(deviations)
    return ok('hypothesis_test', 'levene_test', statistic=result['statistic'], df=[result['df_between'], result['df_within']], p_value=result['p_value'], center='median', alpha=alpha, significant=result['p_value'] < alpha)
