from typing import Any, Dict, Optional, Callable
from functools import wraps
import math
import numpy as np
RESULT_TYPES = frozenset(['statistic', 'distribution', 'hypothesis_test', 'confidence_interval', 'prediction', 'metric', 'split', 'scaled_data', 'outlier_detection', 'time_series', 'linear_regression', 'logistic_regression', 'knn_classifier', 'knn_regressor', 'decision_tree_classifier', 'decision_tree_regressor', 'random_forest_classifier', 'random_forest_regressor', 'naive_bayes', 'standard_scaler', 'minmax_scaler', 'pca', 'kmeans', 'ensemble_prediction', 'cross_validation', 'feature_importance'])

class InputError(ValueError):
    """
    Raised by validation helpers when an input cannot be processed.

    Public operations never let this escape: the ``returns_tagged`` decorator
    turns it into an error value carrying the operation's type tag.
    """
    pass

def to_builtin(value: Any) -> Any:
    """
    Recursively convert NumPy scalars/arrays and tuples into plain Python values.

    Parameters
    ----------
    value : Any
        Arbitrary nested structure.

    Returns
    -------
    Any
        The same structure built only from dict, list, float, int, str, bool and None.
    """
    if isinstance(value, dict):
        return {k if isinstance(k, str) else str(k): to_builtin(v) for (k, v) in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_builtin(v) for v in value]
    if isinstance(value, np.ndarray):
        return to_builtin(value.tolist())
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        return float(value)
    return value

def ok(result_type: str, name: Optional[str]=None, **payload) -> Dict[str, Any]:
    """Build a tagged result ``{type, name?, ...payload}``."""
    if result_type not in RESULT_TYPES:
        raise ValueError(f"Unknown result type '{result_type}'")
    result = {'type': result_type}
    if name is not None:
        result['name'] = name
    result.update(to_builtin(payload))
    return result

def err(result_type: str, message: str, name: Optional[str]=None) -> Dict[str, Any]:
    """Build a tagged error value ``{type, name?, error}``."""
    result = {'type': result_type}
    if name is not None:
        result['name'] = name
    result['error'] = str(message)
    return result

def is_error(result: Any) -> bool:
    """Check whether a tagged value carries an ``error`` field."""
    return isinstance(result, dict) and 'error' in result

def returns_tagged(result_type: str, name: Optional[str]=None) -> Callable:
    """
    Decorator routing ``InputError`` raised inside a public operation to an error value.

    Args:
        result_type (str): Type tag placed on the error value.
        name (Optional[str]): Optional name placed on the error value.

    Returns:
        Callable: Decorator for the public operation.
    """
    if result_type not in RESULT_TYPES:
        raise ValueError(f"Unknown result type '{result_type}'")

    def decorator(func):

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except InputError as exc:
                return err(result_type, str(exc), name)
        return wrapper
    return decorator

def nan_if_none(value: Optional[float]) -> float:
    """Map ``None`` to NaN, leave everything else as a float."""
    return math.nan if value is None else float(value)
