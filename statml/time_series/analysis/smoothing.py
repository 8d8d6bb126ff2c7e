from typing import Any, Dict, Optional
import numpy as np
from general.structures.data_batch import clean_sequence
from general.structures.feature_set import select_column
from general.structures.tagged_result import InputError, ok, returns_tagged

def trailing_means(values: np.ndarray, window: int) -> np.ndarray:
    """Mean of ``values[max(0, i - window + 1):i + 1]`` for every ``i``; the first points use a shorter window."""
    cumulative = np.concatenate([[0.0], np.cumsum(values)])
    ends = np.arange(1, len(values) + 1)
    starts = np.maximum(0, ends - window)
    return (cumulative[ends] - cumulative[starts]) / (ends - starts)

@returns_tagged('time_series', 'moving_average')
def moving_average(data: Any, window: int=3, column: Optional[str]=None) -> Dict[str, Any]:
    """
    Trailing simple moving average of the finite numeric entries.

    Args:
        data: Sequence of scalars, or a tabular value together with ``column``.
        window (int): Number of points averaged, at least 1.
        column (Optional[str]): Column to extract from a tabular ``data``.

    Returns:
        dict: ``{type: 'time_series', method: 'moving_average', window, n, values}``, one
        value per cleaned input point.
    """
    if isinstance(window, bool) or int(window) != window or window < 1:
        raise InputError(f'window must be a positive integer, got {window}')
    values = clean_sequence(select_column(data, column))
    return ok('time_series', method='moving_average', window=int(window), n=len(values), values=trailing_means(values, int(window)))

@returns_tagged('time_series', 'exponential_smoothing')
def exponential_smoothing(data: Any, alpha: float=0.3, column: Optional[str]=None) -> Dict[str, Any]:
    """
    Simple exponential smoothing ``s_0 = x_0``, ``s_t = alpha * x_t + (1 - alpha) * s_{t-1}``.

    Raises an error value for empty input or ``alpha`` outside (0, 1].
    """
    if not 0 < alpha <= 1:
        raise InputError(f'alpha must be in (0, 1], got {alpha}')
    values = clean_sequence(select_column(data, column))
    if len(values) == 0:
        raise InputError('insufficient data: need at least 1 numeric values, got 0')
    smoothed = np.empty_like(values)
    smoothed[0] = values[0]
    for t in range(1, len(values)):
        smoothed[t] = alpha * values[t] + (1 - alpha) * smoothed[t - 1]
    return ok('time_series', method='exponential_smoothing', alpha=alpha, n=len(values), values=smoothed)
