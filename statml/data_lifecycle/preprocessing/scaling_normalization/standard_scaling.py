from typing import Any, Dict, Union
import logging
import numpy as np
from general.structures.data_batch import as_matrix
from general.structures.model_artifact import check_width, load_model
from general.structures.tagged_result import ok, returns_tagged

def _scales(model: Dict[str, Any]) -> tuple:
    means = np.array([param['mean'] for param in model['params']], dtype=float)
    stds = np.array([param['std'] for param in model['params']], dtype=float)
    safe = np.where(stds == 0, 1.0, stds)
    return (means, safe)

def fit_standard_scaler(X: Any) -> Dict[str, Any]:
    """Raw fit used by cross-validation and ``standard_scaler_fit``."""
    X = as_matrix(X)
    (n, p) = X.shape
    means = X.mean(axis=0)
    stds = X.std(axis=0, ddof=1) if n > 1 else np.zeros(p)
    if np.any(stds == 0):
        logging.debug(f'Zero standard deviation in columns {np.flatnonzero(stds == 0).tolist()}; using a divisor of 1')
    return ok('standard_scaler', params=[{'mean': m, 'std': s} for (m, s) in zip(means, stds)], n=n, p=p)

def apply_standard_scaler(model: Dict[str, Any], X: Any) -> np.ndarray:
    X = as_matrix(X)
    check_width(model, X.shape[1])
    (means, safe) = _scales(model)
    return (X - means) / safe

@returns_tagged('standard_scaler')
def standard_scaler_fit(X: Any) -> Dict[str, Any]:
    """
    Record per-column mean and sample standard deviation.

    Args:
        X: Row-major matrix of shape (n, p).

    Returns:
        dict: ``{type: 'standard_scaler', params: [{mean, std}, ...], n, p}``.
    """
    return fit_standard_scaler(X)

@returns_tagged('scaled_data', 'standard')
def standard_scaler_transform(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """
    Apply ``(x - mean) / std`` column-wise; a zero ``std`` is replaced by 1.

    Returns:
        dict: ``{type: 'scaled_data', method: 'standard', data, n, p}``.
    """
    model = load_model(model, ['standard_scaler'])
    data = apply_standard_scaler(model, X)
    return ok('scaled_data', method='standard', data=data, n=data.shape[0], p=data.shape[1])

@returns_tagged('scaled_data', 'standard_inverse')
def standard_scaler_inverse_transform(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """Map standardized values back to the original units."""
    model = load_model(model, ['standard_scaler'])
    X = as_matrix(X)
    check_width(model, X.shape[1])
    (means, safe) = _scales(model)
    data = X * safe + means
    return ok('scaled_data', method='standard_inverse', data=data, n=data.shape[0], p=data.shape[1])
