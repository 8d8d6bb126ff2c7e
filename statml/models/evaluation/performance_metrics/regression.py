import math
import numpy as np
from typing import Any, Dict, Union
from general.structures.tagged_result import InputError, ok, returns_tagged

def _paired_arrays(y_true: Union[np.ndarray, list], y_pred: Union[np.ndarray, list]) -> tuple:
    try:
        y_true = np.asarray(y_true, dtype=float).ravel()
        y_pred = np.asarray(y_pred, dtype=float).ravel()
    except (TypeError, ValueError):
        raise InputError('Regression metrics need numeric targets and predictions')
    if y_true.shape != y_pred.shape:
        raise InputError(f'Input arrays must have the same shape. Got {y_true.shape} and {y_pred.shape}')
    if y_true.size == 0:
        raise InputError('Input arrays must not be empty')
    return (y_true, y_pred)

def mean_squared_error(y_true: Union[np.ndarray, list], y_pred: Union[np.ndarray, list]) -> float:
    (y_true, y_pred) = _paired_arrays(y_true, y_pred)
    return float(np.mean((y_true - y_pred) ** 2))

def mean_absolute_error(y_true: Union[np.ndarray, list], y_pred: Union[np.ndarray, list]) -> float:
    """
    Mean Absolute Error between true and predicted values.

    Args:
        y_true (Union[np.ndarray, list]): Ground truth target values.
        y_pred (Union[np.ndarray, list]): Predicted target values.

    Returns:
        float: Mean absolute error value.

    Raises:
        InputError: If input arrays have mismatched shapes.
    """
    (y_true, y_pred) = _paired_arrays(y_true, y_pred)
    return float(np.mean(np.abs(y_true - y_pred)))

def r2_score(y_true: Union[np.ndarray, list], y_pred: Union[np.ndarray, list]) -> float:
    """
    Coefficient of determination against the mean of ``y_true``.

    A constant target gives 1.0 for a perfect fit and 0.0 otherwise.
    """
    (y_true, y_pred) = _paired_arrays(y_true, y_pred)
    ss_res = float(np.sum((y_true - y_pred) ** 2))
    ss_tot = float(np.sum((y_true - y_true.mean()) ** 2))
    if ss_tot == 0:
        return 1.0 if ss_res == 0 else 0.0
    return 1.0 - ss_res / ss_tot

@returns_tagged('metric', 'regression')
def metrics_regression(y_true: Any, y_pred: Any) -> Dict[str, Any]:
    """
    MSE, MAE, RMSE and R^2 of a set of predictions.

    Returns:
        dict: ``{type: 'metric', name: 'regression', mse, mae, rmse, r2, n}``.
    """
    mse = mean_squared_error(y_true, y_pred)
    return ok('metric', 'regression', mse=mse, mae=mean_absolute_error(y_true, y_pred), rmse=math.sqrt(mse), r2=r2_score(y_true, y_pred), n=len(np.ravel(y_true)))
