from typing import Optional, Dict, Any
import math
import numpy as np
from general.structures.data_batch import clean_sequence
from general.structures.feature_set import select_column
from general.structures.tagged_result import InputError, ok, returns_tagged

def compute_mean(values: np.ndarray) -> float:
    """Arithmetic mean of a cleaned sequence; NaN when empty."""
    n = len(values)
    if n == 0:
        return math.nan
    return float(sum(values.tolist())) / n

def compute_variance(values: np.ndarray, sample: bool=True) -> float:
    """
    Variance of a cleaned sequence.

    Args:
        values (np.ndarray): Cleaned 1-D array.
        sample (bool): Use the ``n - 1`` denominator when True, ``n`` otherwise.

    Returns:
        float: The variance, NaN when ``n < 2`` (sample) or ``n < 1`` (population).
    """
    n = len(values)
    ddof = 1 if sample else 0
    if (n < 2 and sample) or n == 0:
        return math.nan
    m = compute_mean(values)
    return float(np.sum((values - m) ** 2)) / (n - ddof)

def compute_std(values: np.ndarray, sample: bool=True) -> float:
    return math.sqrt(compute_variance(values, sample))

def compute_quantile(values: np.ndarray, q: float) -> float:
    """
    Quantile by linear interpolation between order statistics at index ``(n - 1) * q``.

    Raises:
        InputError: If ``q`` lies outside [0, 1].
    """
    if not 0 <= q <= 1:
        raise InputError(f'Quantile must be between 0 and 1, got {q}')
    n = len(values)
    if n == 0:
        return math.nan
    ordered = np.sort(values)
    position = (n - 1) * q
    lower = int(math.floor(position))
    upper = min(lower + 1, n - 1)
    fraction = position - lower
    return float(ordered[lower] + fraction * (ordered[upper] - ordered[lower]))

def compute_median(values: np.ndarray) -> float:
    return compute_quantile(values, 0.5)

def central_moment(values: np.ndarray, order: int) -> float:
    m = compute_mean(values)
    return float(np.mean((values - m) ** order))

def compute_skewness(values: np.ndarray, bias: bool=False) -> float:
    """
    Fisher-Pearson skewness.

    With ``bias=False`` the adjusted estimator ``G1 = g1 * sqrt(n (n - 1)) / (n - 2)`` is returned.
    NaN for ``n < 3`` or a constant sequence.
    """
    n = len(values)
    if n < 3:
        return math.nan
    m2 = central_moment(values, 2)
    if m2 == 0:
        return math.nan
    g1 = central_moment(values, 3) / m2 ** 1.5
    if bias:
        return g1
    return g1 * math.sqrt(n * (n - 1)) / (n - 2)

def compute_kurtosis(values: np.ndarray, bias: bool=False) -> float:
    """
    Excess kurtosis.

    With ``bias=False`` the adjusted estimator
    ``G2 = ((n + 1) g2 + 6) (n - 1) / ((n - 2) (n - 3))`` is returned.
    NaN for ``n < 4`` or a constant sequence.
    """
    n = len(values)
    if n < 4:
        return math.nan
    m2 = central_moment(values, 2)
    if m2 == 0:
        return math.nan
    g2 = central_moment(values, 4) / m2 ** 2 - 3.0
    if bias:
        return g2
    return ((n + 1) * g2 + 6.0) * (n - 1) / ((n - 2) * (n - 3))

def midranks(values: np.ndarray) -> np.ndarray:
    """
    1-based ranks where tied values share the mean of the positions they occupy.

    Parameters
    ----------
    values : np.ndarray
        1-D array (not modified).

    Returns
    -------
    np.ndarray
        Float array of ranks aligned with ``values``.
    """
    values = np.asarray(values, dtype=float)
    n = len(values)
    order = np.argsort(values, kind='mergesort')
    ranks = np.empty(n, dtype=float)
    i = 0
    while i < n:
        j = i
        while j + 1 < n and values[order[j + 1]] == values[order[i]]:
            j += 1
        ranks[order[i:j + 1]] = (i + j) / 2.0 + 1.0
        i = j + 1
    return ranks

@returns_tagged('statistic', 'mean')
def mean(data: Any) -> Dict[str, Any]:
    """
    Arithmetic mean of the finite numeric entries of ``data``.

    Args:
        data: Sequence of scalars; non-numeric and non-finite entries are dropped.

    Returns:
        dict: ``{type: 'statistic', name: 'mean', n, value}``; ``value`` is NaN for empty input.
    """
    values = clean_sequence(data)
    return ok('statistic', 'mean', n=len(values), value=compute_mean(values))

@returns_tagged('statistic', 'total')
def total(data: Any) -> Dict[str, Any]:
    """Sum of the finite numeric entries."""
    values = clean_sequence(data)
    return ok('statistic', 'total', n=len(values), value=float(sum(values.tolist())))

@returns_tagged('statistic', 'variance')
def variance(data: Any, sample: bool=True) -> Dict[str, Any]:
    """Sample (default) or population variance."""
    values = clean_sequence(data)
    return ok('statistic', 'variance', n=len(values), sample=sample, value=compute_variance(values, sample))

@returns_tagged('statistic', 'std_deviation')
def std_deviation(data: Any, sample: bool=True) -> Dict[str, Any]:
    """Sample (default) or population standard deviation."""
    values = clean_sequence(data)
    return ok('statistic', 'std_deviation', n=len(values), sample=sample, value=compute_std(values, sample))

@returns_tagged('statistic', 'median')
def median(data: Any) -> Dict[str, Any]:
    values = clean_sequence(data)
    return ok('statistic', 'median', n=len(values), value=compute_median(values))

@returns_tagged('statistic', 'quantile')
def quantile(data: Any, q: float) -> Dict[str, Any]:
    """
    Quantile ``q`` of the finite numeric entries.

    ``quantile(x, 0)`` is the minimum and ``quantile(x, 1)`` the maximum.
    A ``q`` outside [0, 1] yields an error value.
    """
    values = clean_sequence(data)
    return ok('statistic', 'quantile', n=len(values), q=q, value=compute_quantile(values, float(q)))

@returns_tagged('statistic', 'minimum')
def minimum(data: Any) -> Dict[str, Any]:
    values = clean_sequence(data)
    return ok('statistic', 'minimum', n=len(values), value=float(np.min(values)) if len(values) else math.nan)

@returns_tagged('statistic', 'maximum')
def maximum(data: Any) -> Dict[str, Any]:
    values = clean_sequence(data)
    return ok('statistic', 'maximum', n=len(values), value=float(np.max(values)) if len(values) else math.nan)

@returns_tagged('statistic', 'skewness')
def skewness(data: Any, bias: bool=False) -> Dict[str, Any]:
    """Skewness; bias-adjusted unless ``bias=True``. NaN for fewer than 3 values."""
    values = clean_sequence(data)
    return ok('statistic', 'skewness', n=len(values), value=compute_skewness(values, bias))

@returns_tagged('statistic', 'kurtosis')
def kurtosis(data: Any, bias: bool=False) -> Dict[str, Any]:
    """Excess kurtosis; bias-adjusted unless ``bias=True``. NaN for fewer than 4 values."""
    values = clean_sequence(data)
    return ok('statistic', 'kurtosis', n=len(values), value=compute_kurtosis(values, bias))

@returns_tagged('statistic', 'ranks')
def ranks(data: Any) -> Dict[str, Any]:
    """Midranks of the finite numeric entries, in input order."""
    values = clean_sequence(data)
    return ok('statistic', 'ranks', n=len(values), value=midranks(values))

@returns_tagged('statistic', 'summary')
def summary(data: Any, column: Optional[str]=None) -> Dict[str, Any]:
    """
    Five-number summary plus moments of the cleaned data.

    ``data`` may also be a tabular value (dict or pandas DataFrame) when
    ``column`` names the column to summarize.

    Returns:
        dict: ``value`` holds ``count, mean, std, min, q1, median, q3, max, skewness, kurtosis``.
    """
    values = clean_sequence(select_column(data, column))
    n = len(values)
    stats = {'count': n, 'mean': compute_mean(values), 'std': compute_std(values), 'min': float(np.min(values)) if n else math.nan, 'q1': compute_quantile(values, 0.25), 'median': compute_median(values), 'q3': compute_quantile(values, 0.75), 'max': float(np.max(values)) if n else math.nan, 'skewness': compute_skewness(values), 'kurtosis': compute_kurtosis(values)}
    return ok('statistic', 'summary', n=n, value=stats)
