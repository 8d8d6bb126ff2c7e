from typing import Any, Dict, Sequence
import math
import numpy as np
from general.structures.data_batch import clean_pairs
from general.structures.tagged_result import ok, returns_tagged
from statml.data_lifecycle.mathematical_foundations.statistical_methods.descriptive_statistics import midranks
from statml.data_lifecycle.mathematical_foundations.statistical_methods.hypothesis_testing import check_alpha, require_n, clean_groups
from statml.data_lifecycle.mathematical_foundations.statistical_methods.probability_distributions import chi_square_cdf_value, normal_two_sided_p

@returns_tagged('hypothesis_test', 'mann_whitney_u')
def mann_whitney_u(sample_a: Any, sample_b: Any, alpha: float=0.05) -> Dict[str, Any]:
    """
    Mann-Whitney U test with the large-sample normal approximation.

    Ranks are midranks over the pooled sample. ``U = min(U1, U2)`` is standardized
    with mean ``n1 n2 / 2`` and variance ``n1 n2 (n1 + n2 + 1) / 12`` (no tie
    correction, no continuity correction).

    Args:
        sample_a: First sample.
        sample_b: Second sample.
        alpha (float): Significance level.

    Returns:
        dict: ``statistic`` (U), ``u1``, ``u2``, ``z`` and a two-sided ``p_value``.
    """
    check_alpha(alpha)
    (a, b) = clean_groups([sample_a, sample_b])
    (n1, n2) = (len(a), len(b))
    ranks = midranks(np.concatenate([a, b]))
    r1 = float(np.sum(ranks[:n1]))
    u1 = r1 - n1 * (n1 + 1) / 2.0
    u2 = n1 * n2 - u1
    u = min(u1, u2)
    mu = n1 * n2 / 2.0
    sigma = math.sqrt(n1 * n2 * (n1 + n2 + 1) / 12.0)
    z = (u - mu) / sigma
    p_value = normal_two_sided_p(z)
    return ok('hypothesis_test', 'mann_whitney_u', statistic=u, u1=u1, u2=u2, z=z, p_value=p_value, n_a=n1, n_b=n2, alpha=alpha, significant=p_value < alpha)

@returns_tagged('hypothesis_test', 'kruskal_wallis')
def kruskal_wallis(groups: Sequence[Any], alpha: float=0.05) -> Dict[str, Any]:
    """
    Kruskal-Wallis H test, ``H = 12 / (N (N + 1)) * sum(R_i^2 / n_i) - 3 (N + 1)``.

    No tie correction is applied; ``H`` is referred to chi-square with ``k - 1`` df.
    """
    check_alpha(alpha)
    cleaned = clean_groups(groups)
    sizes = [len(g) for g in cleaned]
    n_total = sum(sizes)
    ranks = midranks(np.concatenate(cleaned))
    rank_sums = []
    start = 0
    for size in sizes:
        rank_sums.append(float(np.sum(ranks[start:start + size])))
        start += size
    h = 12.0 / (n_total * (n_total + 1)) * sum((r ** 2 / n for (r, n) in zip(rank_sums, sizes))) - 3.0 * (n_total + 1)
    df = len(cleaned) - 1
    p_value = 1.0 - chi_square_cdf_value(h, df)
    return ok('hypothesis_test', 'kruskal_wallis', statistic=h, df=df, p_value=p_value, rank_sums=rank_sums, n=n_total, alpha=alpha, significant=p_value < alpha)

@returns_tagged('hypothesis_test', 'wilcoxon_signed_rank')
def wilcoxon_signed_rank(sample_a: Any, sample_b: Any, alpha: float=0.05) -> Dict[str, Any]:
    """
    Wilcoxon signed-rank test on paired samples, normal approximation.

    Zero differences are dropped before ranking ``|d|``. ``W+`` (sum of positive
    ranks) is standardized with mean ``n (n + 1) / 4`` and variance
    ``n (n + 1) (2n + 1) / 24``.
    """
    check_alpha(alpha)
    (a, b) = clean_pairs(sample_a, sample_b)
    diffs = a - b
    diffs = diffs[diffs != 0]
    n = len(diffs)
    require_n(n, 1, 'non-zero differences')
    ranks = midranks(np.abs(diffs))
    w_plus = float(np.sum(ranks[diffs > 0]))
    w_minus = float(np.sum(ranks[diffs < 0]))
    mu = n * (n + 1) / 4.0
    sigma = math.sqrt(n * (n + 1) * (2 * n + 1) / 24.0)
    z = (w_plus - mu) / sigma
    p_value = normal_two_sided_p(z)
    return ok('hypothesis_test', 'wilcoxon_signed_rank', statistic=w_plus, w_plus=w_plus, w_minus=w_minus, z=z, p_value=p_value, n=n, n_zero_dropped=len(a) - n, alpha=alpha, significant=p_value < alpha)
