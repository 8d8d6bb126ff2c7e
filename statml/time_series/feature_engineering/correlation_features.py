from typing import Any, Dict, Optional
import math
import numpy as np
from general.structures.data_batch import clean_sequence
from general.structures.feature_set import select_column
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.data_lifecycle.mathematical_foundations.statistical_methods.hypothesis_testing import require_n

def autocorrelation_value(values: np.ndarray, lag: int) -> float:
    """
    Sample autocorrelation at ``lag``.

    Parameters
    ----------
    values : np.ndarray
        Cleaned series of length greater than ``lag``
    lag : int
        Non-negative shift

    Returns
    -------
    float
        ``sum_{t>=lag} (x_t - m)(x_{t-lag} - m) / sum_t (x_t - m)^2``, NaN for a constant series
    """
    deviations = values - values.mean()
    denominator = float(np.sum(deviations ** 2))
    if denominator == 0:
        return math.nan
    return float(np.sum(deviations[lag:] * deviations[:len(values) - lag])) / denominator

@returns_tagged('statistic', 'autocorrelation')
def autocorrelation(data: Any, lag: int=1, column: Optional[str]=None) -> Dict[str, Any]:
    """Lag-``lag`` autocorrelation of the finite numeric entries (NaN for a constant series)."""
    if isinstance(lag, bool) or int(lag) != lag or lag < 0:
        raise InputError(f'lag must be a non-negative integer, got {lag}')
    values = clean_sequence(select_column(data, column))
    require_n(len(values), int(lag) + 1, 'numeric values')
    return ok('statistic', 'autocorrelation', n=len(values), lag=int(lag), value=autocorrelation_value(values, int(lag)))
