from typing import Any, Dict
import math
from general.structures.data_batch import clean_sequence
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.data_lifecycle.mathematical_foundations.statistical_methods.descriptive_statistics import compute_mean, compute_variance
from statml.data_lifecycle.mathematical_foundations.statistical_methods.hypothesis_testing import require_n
from statml.data_lifecycle.mathematical_foundations.statistical_methods.probability_distributions import chi_square_ppf_value, t_ppf_value
from statml.data_lifecycle.mathematical_foundations.specialized_functions.special_functions import standard_normal_ppf

def _check_confidence(confidence: float) -> None:
    if not 0 < confidence < 1:
        raise InputError(f'Confidence level must be between 0 and 1, got {confidence}')

@returns_tagged('confidence_interval', 'mean')
def confidence_interval_mean(sample: Any, confidence: float=0.95) -> Dict[str, Any]:
    """
    Student-t interval for a population mean.

    Args:
        sample: Observations (at least 2 finite values).
        confidence (float): Coverage level in (0, 1).

    Returns:
        dict: ``{type: 'confidence_interval', parameter: 'mean', confidence, lower, upper,
        margin, estimate, std_error, critical_value, df, n}``.
    """
    _check_confidence(confidence)
    x = clean_sequence(sample)
    n = len(x)
    require_n(n, 2)
    m = compute_mean(x)
    se = math.sqrt(compute_variance(x) / n)
    critical = t_ppf_value((1 + confidence) / 2, n - 1)
    margin = critical * se
    return ok('confidence_interval', 'mean', parameter='mean', confidence=confidence, lower=m - margin, upper=m + margin, margin=margin, estimate=m, std_error=se, critical_value=critical, df=n - 1, n=n, method='t')

@returns_tagged('confidence_interval', 'proportion')
def confidence_interval_proportion(successes: int, trials: int, confidence: float=0.95, method: str='wald') -> Dict[str, Any]:
    """
    Interval for a binomial proportion.

    ``method='wald'`` gives ``p +/- z sqrt(p (1 - p) / n)`` clipped to [0, 1];
    ``method='wilson'`` gives the Wilson score interval.
    """
    _check_confidence(confidence)
    if int(trials) != trials or trials < 1:
        raise InputError(f'trials must be a positive integer, got {trials}')
    if not 0 <= successes <= trials:
        raise InputError(f'successes must be between 0 and trials ({trials}), got {successes}')
    n = int(trials)
    p_hat = successes / n
    z = standard_normal_ppf((1 + confidence) / 2)
    if method == 'wald':
        se = math.sqrt(p_hat * (1 - p_hat) / n)
        margin = z * se
        (lower, upper) = (max(0.0, p_hat - margin), min(1.0, p_hat + margin))
    elif method == 'wilson':
        denominator = 1 + z ** 2 / n
        centre = (p_hat + z ** 2 / (2 * n)) / denominator
        margin = z * math.sqrt(p_hat * (1 - p_hat) / n + z ** 2 / (4 * n ** 2)) / denominator
        se = math.sqrt(p_hat * (1 - p_hat) / n)
        (lower, upper) = (max(0.0, centre - margin), min(1.0, centre + margin))
    else:
        raise InputError(f"Unknown method '{method}'; expected 'wald' or 'wilson'")
    return ok('confidence_interval', 'proportion', parameter='proportion', confidence=confidence, lower=lower, upper=upper, margin=margin, estimate=p_hat, std_error=se, critical_value=z, n=n, method=method)

@returns_tagged('confidence_interval', 'variance')
def confidence_interval_variance(sample: Any, confidence: float=0.95) -> Dict[str, Any]:
    """
    Chi-square interval for a population variance.

    ``[(n - 1) s^2 / chi2_{(1 + c) / 2}, (n - 1) s^2 / chi2_{(1 - c) / 2}]`` with exact
    chi-square quantiles on ``n - 1`` degrees of freedom. The interval is not
    symmetric, so no ``margin`` is reported.
    """
    _check_confidence(confidence)
    x = clean_sequence(sample)
    n = len(x)
    require_n(n, 2)
    s2 = compute_variance(x)
    df = n - 1
    upper_q = chi_square_ppf_value((1 + confidence) / 2, df)
    lower_q = chi_square_ppf_value((1 - confidence) / 2, df)
    return ok('confidence_interval', 'variance', parameter='variance', confidence=confidence, lower=df * s2 / upper_q, upper=df * s2 / lower_q, estimate=s2, df=df, n=n, std_lower=math.sqrt(df * s2 / upper_q), std_upper=math.sqrt(df * s2 / lower_q), method='chi_square')

@returns_tagged('confidence_interval', 'mean_difference')
def confidence_interval_difference(sample_a: Any, sample_b: Any, confidence: float=0.95, equal_var: bool=False) -> Dict[str, Any]:
    """
    Interval for ``mean(a) - mean(b)``.

    Welch's standard error and degrees of freedom by default; pooled variance
    with ``n_a + n_b - 2`` df when ``equal_var=True``.
    """
    _check_confidence(confidence)
    a = clean_sequence(sample_a)
    b = clean_sequence(sample_b)
    require_n(len(a), 2, 'observations per group')
    require_n(len(b), 2, 'observations per group')
    (na, nb) = (len(a), len(b))
    (va, vb) = (compute_variance(a), compute_variance(b))
    if equal_var:
        df = na + nb - 2
        pooled = ((na - 1) * va + (nb - 1) * vb) / df
        se = math.sqrt(pooled * (1.0 / na + 1.0 / nb))
    else:
        (sa, sb) = (va / na, vb / nb)
        se = math.sqrt(sa + sb)
        if se == 0:
            raise InputError('degenerate input: both samples have zero variance')
        df = (sa + sb) ** 2 / (sa ** 2 / (na - 1) + sb ** 2 / (nb - 1))
    difference = compute_mean(a) - compute_mean(b)
    critical = t_ppf_value((1 + confidence) / 2, df)
    margin = critical * se
    return ok('confidence_interval', 'mean_difference', parameter='mean_difference', confidence=confidence, lower=difference - margin, upper=difference + margin, margin=margin, estimate=difference, std_error=se, critical_value=critical, df=df, n_a=na, n_b=nb, equal_var=equal_var, method='t')
