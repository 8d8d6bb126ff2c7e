from typing import Any, Dict, Union
import numpy as np
from general.structures.data_batch import as_matrix
from general.structures.model_artifact import check_width, load_model
from general.structures.tagged_result import ok, returns_tagged

def _bounds(model: Dict[str, Any]) -> tuple:
    mins = np.array([param['min'] for param in model['params']], dtype=float)
    maxs = np.array([param['max'] for param in model['params']], dtype=float)
    return (mins, maxs - mins)

@returns_tagged('minmax_scaler')
def minmax_scaler_fit(X: Any) -> Dict[str, Any]:
    """
    Record per-column minimum and maximum.

    Returns:
        dict: ``{type: 'minmax_scaler', params: [{min, max}, ...], n, p}``.
    """
    X = as_matrix(X)
    (n, p) = X.shape
    return ok('minmax_scaler', params=[{'min': lo, 'max': hi} for (lo, hi) in zip(X.min(axis=0), X.max(axis=0))], n=n, p=p)

@returns_tagged('scaled_data', 'minmax')
def minmax_scaler_transform(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """
    Apply ``(x - min) / (max - min)`` column-wise; a column with zero range maps to 0.
    """
    model = load_model(model, ['minmax_scaler'])
    X = as_matrix(X)
    check_width(model, X.shape[1])
    (mins, ranges) = _bounds(model)
    safe = np.where(ranges == 0, 1.0, ranges)
    data = np.where(ranges == 0, 0.0, (X - mins) / safe)
    return ok('scaled_data', method='minmax', data=data, n=data.shape[0], p=data.shape[1])

@returns_tagged('scaled_data', 'minmax_inverse')
def minmax_scaler_inverse_transform(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    model = load_model(model, ['minmax_scaler'])
    X = as_matrix(X)
    check_width(model, X.shape[1])
    (mins, ranges) = _bounds(model)
    data = X * ranges + mins
    return ok('scaled_data', method='minmax_inverse', data=data, n=data.shape[0], p=data.shape[1])
