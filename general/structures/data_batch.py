from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Union, Sequence
import math
import numbers
import numpy as np
from general.structures.tagged_result import InputError

def is_finite_number(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    if not isinstance(value, numbers.Real):
        return False
    return math.isfinite(float(value))

def clean_sequence(values: Any) -> np.ndarray:
    """
    Drop non-numeric and non-finite entries from a sequence.

    Parameters
    ----------
    values : Any
        Sequence of scalars, possibly containing None, strings, NaN or infinities.

    Returns
    -------
    np.ndarray
        1-D float array of the remaining entries, in input order.
    """
    if values is None:
        return np.empty(0, dtype=float)
    if isinstance(values, np.ndarray) and values.dtype.kind in 'iuf':
        flat = values.astype(float).ravel()
        return flat[np.isfinite(flat)]
    return np.array([float(v) for v in values if is_finite_number(v)], dtype=float)

def clean_pairs(x: Any, y: Any) -> tuple:
    """
    Pairwise-complete cleaning: keep index ``i`` only when both ``x[i]`` and ``y[i]`` are finite numbers.

    Raises:
        InputError: If the two sequences differ in length.
    """
    (x, y) = (list(x), list(y))
    if len(x) != len(y):
        raise InputError(f'Sequences must have the same length ({len(x)} != {len(y)})')
    keep = [i for i in range(len(x)) if is_finite_number(x[i]) and is_finite_number(y[i])]
    return (np.array([float(x[i]) for i in keep], dtype=float), np.array([float(y[i]) for i in keep], dtype=float))

def as_matrix(X: Any, name: str='X') -> np.ndarray:
    """
    Validate a row-major matrix and return it as a 2-D float array.

    Args:
        X: Sequence of equal-width rows of reals.
        name (str): Name used in error messages.

    Returns:
        np.ndarray: Array of shape (n_samples, n_features).

    Raises:
        InputError: If the rows are ragged, empty, non-numeric or not two-dimensional.
    """
    if X is None:
        raise InputError(f'{name} must be a non-empty matrix')
    if not isinstance(X, np.ndarray):
        rows = list(X)
        if len(rows) == 0:
            raise InputError(f'{name} must be a non-empty matrix')
        widths = set()
        for row in rows:
            if isinstance(row, (str, bytes)) or not hasattr(row, '__len__'):
                raise InputError(f'{name} must be a matrix (sequence of rows)')
            widths.add(len(row))
        if len(widths) != 1:
            raise InputError(f'All rows of {name} must have the same width')
        X = rows
    try:
        array = np.asarray(X, dtype=float)
    except (TypeError, ValueError):
        raise InputError(f'{name} must contain only numbers')
    if array.ndim != 2:
        raise InputError(f'{name} must be 2-dimensional, got {array.ndim} dimension(s)')
    if array.shape[0] == 0 or array.shape[1] == 0:
        raise InputError(f'{name} must be a non-empty matrix')
    return array

def as_vector(y: Any, name: str='y') -> np.ndarray:
    """Return ``y`` as a 1-D array without dropping entries."""
    if y is None:
        raise InputError(f'{name} must be a non-empty sequence')
    array = np.asarray(list(y) if not isinstance(y, np.ndarray) else y)
    if array.ndim != 1:
        raise InputError(f'{name} must be 1-dimensional')
    if array.shape[0] == 0:
        raise InputError(f'{name} must be a non-empty sequence')
    return array

@dataclass
class DataBatch:
    """
    Feature matrix and optional targets handed to a training routine.

    Validation happens on construction so training code can rely on a
    rectangular float matrix and a target vector of matching length.

    Attributes
    ----------
    data : Union[np.ndarray, List]
        Row-major feature matrix.
    labels : Optional[Union[np.ndarray, List]]
        Target values, one per row.
    numeric_labels : bool
        Whether the labels must be real numbers (regression, logistic regression).
    feature_names : Optional[List[str]]
        Names of the columns when known.
    metadata : Dict[str, Any]
        Free-form information about the batch.
    """
    data: Union[np.ndarray, List]
    labels: Optional[Union[np.ndarray, List]] = None
    numeric_labels: bool = False
    feature_names: Optional[List[str]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.data = as_matrix(self.data)
        if self.feature_names is not None and len(self.feature_names) != self.data.shape[1]:
            raise InputError('Length of feature_names must match the number of columns')
        if self.labels is not None:
            labels = as_vector(self.labels)
            if len(labels) != self.data.shape[0]:
                raise InputError(f'Number of samples in X ({self.data.shape[0]}) does not match number of samples in y ({len(labels)})')
            if self.numeric_labels:
                try:
                    labels = labels.astype(float)
                except (TypeError, ValueError):
                    raise InputError('y must contain only numbers')
                if not np.all(np.isfinite(labels)):
                    raise InputError('y must contain only finite numbers')
            self.labels = labels

    @property
    def n_samples(self) -> int:
        return int(self.data.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.data.shape[1])

    def get_shape(self) -> tuple:
        """Get the shape of the feature matrix."""
        return self.data.shape

    def is_labeled(self) -> bool:
        """Check if this batch contains labels."""
        return self.labels is not None

    def label_list(self) -> list:
        """Labels as plain Python values."""
        return [v.item() if hasattr(v, 'item') else v for v in self.labels]

    def subset(self, indices: Sequence[int]) -> 'DataBatch':
        """Rows ``indices`` as a new batch (indices may repeat)."""
        idx = np.asarray(indices, dtype=int)
        labels = None if self.labels is None else self.labels[idx]
        return DataBatch(data=self.data[idx], labels=labels, numeric_labels=self.numeric_labels, feature_names=self.feature_names)
