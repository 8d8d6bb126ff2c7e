from typing import Any, Dict, List, Optional
import logging
import numpy as np
from general.structures.data_batch import clean_sequence, is_finite_number
from general.structures.feature_set import select_column
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.data_lifecycle.mathematical_foundations.statistical_methods.descriptive_statistics import compute_mean, compute_quantile, compute_std
from statml.data_lifecycle.mathematical_foundations.statistical_methods.hypothesis_testing import require_n

def _raw_values(data: Any, column: Optional[str]) -> List[Any]:
    raw = select_column(data, column)
    if raw is None:
        raise InputError('data must be a sequence')
    return list(raw.tolist() if isinstance(raw, np.ndarray) else raw)

def _flagged(raw: List[Any], is_outlier) -> tuple:
    """Positions in the raw input (and their values) of finite numbers flagged by ``is_outlier``."""
    indices = [i for (i, v) in enumerate(raw) if is_finite_number(v) and is_outlier(float(v))]
    return (indices, [float(raw[i]) for i in indices])

@returns_tagged('outlier_detection', 'iqr')
def outliers_iqr(data: Any, factor: float=1.5, column: Optional[str]=None) -> Dict[str, Any]:
    """
    Tukey fences: flag values below ``Q1 - factor * IQR`` or above ``Q3 + factor * IQR``.

    Args:
        data: Sequence of scalars, or a tabular value together with ``column``.
        factor (float): Fence multiplier, 1.5 by default.
        column (Optional[str]): Column to extract from a tabular ``data``.

    Returns:
        dict: ``{type: 'outlier_detection', method: 'iqr', q1, q3, iqr, lower_bound,
        upper_bound, n, n_outliers, outlier_indices, outlier_values}``. Indices refer
        to positions in the raw input, including dropped non-numeric entries.
    """
    if factor < 0:
        raise InputError(f'factor must be non-negative, got {factor}')
    raw = _raw_values(data, column)
    values = clean_sequence(raw)
    require_n(len(values), 1, 'numeric values')
    (q1, q3) = (compute_quantile(values, 0.25), compute_quantile(values, 0.75))
    iqr = q3 - q1
    (lower, upper) = (q1 - factor * iqr, q3 + factor * iqr)
    (indices, outliers) = _flagged(raw, lambda v: v < lower or v > upper)
    return ok('outlier_detection', method='iqr', factor=factor, q1=q1, q3=q3, iqr=iqr, lower_bound=lower, upper_bound=upper, n=len(values), n_outliers=len(indices), outlier_indices=indices, outlier_values=outliers)

@returns_tagged('outlier_detection', 'zscore')
def outliers_zscore(data: Any, threshold: float=3.0, column: Optional[str]=None) -> Dict[str, Any]:
    """
    Flag values whose absolute z-score (sample standard deviation) exceeds ``threshold``.

    A constant sequence has no outliers.
    """
    if threshold <= 0:
        raise InputError(f'threshold must be positive, got {threshold}')
    raw = _raw_values(data, column)
    values = clean_sequence(raw)
    require_n(len(values), 2, 'numeric values')
    (m, s) = (compute_mean(values), compute_std(values))
    if s == 0:
        logging.debug('Zero standard deviation; no value can be an outlier')
        (indices, outliers) = ([], [])
    else:
        (indices, outliers) = _flagged(raw, lambda v: abs((v - m) / s) > threshold)
    return ok('outlier_detection', method='zscore', threshold=threshold, mean=m, std=s, n=len(values), n_outliers=len(indices), outlier_indices=indices, outlier_values=outliers)
