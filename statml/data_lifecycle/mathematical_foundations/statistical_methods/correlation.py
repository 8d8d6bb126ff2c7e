from typing import Any, Dict, List, Optional
import math
import numpy as np
from general.structures.data_batch import as_matrix, clean_pairs, is_finite_number
from general.structures.feature_set import TabularData
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.data_lifecycle.mathematical_foundations.statistical_methods.descriptive_statistics import compute_mean, midranks

def pearson_value(x: np.ndarray, y: np.ndarray) -> float:
    """
    Pearson product-moment correlation of two aligned, cleaned arrays.

    Returns NaN when fewer than two pairs remain or either side is constant.
    """
    n = len(x)
    if n < 2:
        return math.nan
    dx = x - compute_mean(x)
    dy = y - compute_mean(y)
    denominator = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denominator == 0:
        return math.nan
    r = float(np.sum(dx * dy)) / denominator
    return max(-1.0, min(1.0, r))

def covariance_value(x: np.ndarray, y: np.ndarray) -> float:
    n = len(x)
    if n < 2:
        return math.nan
    return float(np.sum((x - compute_mean(x)) * (y - compute_mean(y)))) / (n - 1)

def kendall_value(x: np.ndarray, y: np.ndarray) -> float:
    """Kendall tau-a: (concordant - discordant) / (n (n - 1) / 2); tied pairs count as neither."""
    n = len(x)
    if n < 2:
        return math.nan
    concordant = 0
    discordant = 0
    for i in range(n - 1):
        sign = np.sign(x[i + 1:] - x[i]) * np.sign(y[i + 1:] - y[i])
        concordant += int(np.sum(sign > 0))
        discordant += int(np.sum(sign < 0))
    return (concordant - discordant) / (0.5 * n * (n - 1))

@returns_tagged('statistic', 'pearson')
def pearson(x: Any, y: Any) -> Dict[str, Any]:
    """
    Pearson correlation coefficient.

    Pairs where either member is missing or non-finite are dropped together, so the
    remaining observations stay aligned.

    Args:
        x: First sequence.
        y: Second sequence, same length as ``x``.

    Returns:
        dict: ``{type: 'statistic', name: 'pearson', n, value}``; NaN for fewer than 2 pairs.
    """
    (x, y) = clean_pairs(x, y)
    return ok('statistic', 'pearson', n=len(x), value=pearson_value(x, y))

@returns_tagged('statistic', 'spearman')
def spearman(x: Any, y: Any) -> Dict[str, Any]:
    """Spearman rank correlation: Pearson correlation of the midranks."""
    (x, y) = clean_pairs(x, y)
    return ok('statistic', 'spearman', n=len(x), value=pearson_value(midranks(x), midranks(y)))

@returns_tagged('statistic', 'kendall')
def kendall(x: Any, y: Any) -> Dict[str, Any]:
    """Kendall rank correlation (tau-a)."""
    (x, y) = clean_pairs(x, y)
    return ok('statistic', 'kendall', n=len(x), value=kendall_value(x, y))

@returns_tagged('statistic', 'covariance')
def covariance(x: Any, y: Any) -> Dict[str, Any]:
    """Sample covariance of paired observations."""
    (x, y) = clean_pairs(x, y)
    return ok('statistic', 'covariance', n=len(x), value=covariance_value(x, y))

@returns_tagged('statistic', 'partial_correlation')
def partial_correlation(x: Any, y: Any, z: Any) -> Dict[str, Any]:
    """
    Correlation of ``x`` and ``y`` after removing the linear effect of ``z``.

    ``r_xy.z = (r_xy - r_xz r_yz) / sqrt((1 - r_xz^2) (1 - r_yz^2))``. Rows with a
    missing value in any of the three sequences are dropped.

    Raises:
        InputError: If the sequences differ in length (reported as an error value).
    """
    (x, y, z) = (list(x), list(y), list(z))
    if not len(x) == len(y) == len(z):
        raise InputError('Sequences must have the same length')
    keep = [i for i in range(len(x)) if is_finite_number(x[i]) and is_finite_number(y[i]) and is_finite_number(z[i])]
    (xs, ys, zs) = (np.array([float(v[i]) for i in keep]) for v in (x, y, z))
    if len(keep) < 3:
        return ok('statistic', 'partial_correlation', n=len(keep), value=math.nan)
    r_xy = pearson_value(xs, ys)
    r_xz = pearson_value(xs, zs)
    r_yz = pearson_value(ys, zs)
    denominator = math.sqrt((1 - r_xz ** 2) * (1 - r_yz ** 2))
    value = (r_xy - r_xz * r_yz) / denominator if denominator > 0 else math.nan
    return ok('statistic', 'partial_correlation', n=len(keep), value=value, r_xy=r_xy, r_xz=r_xz, r_yz=r_yz)

def _named_columns(data: Any, columns: Optional[List[str]]) -> Dict[str, List[Any]]:
    """Raw columns of a tabular value, or of a row-major matrix named by position."""
    if isinstance(data, (TabularData, dict)) or hasattr(data, 'columns'):
        table = TabularData.from_value(data)
        names = columns if columns is not None else [name for name in table.columns if len(table.column(name)) > 0]
        return {name: table.column(name, clean=False) for name in names}
    matrix = as_matrix(data)
    names = columns if columns is not None else [str(j) for j in range(matrix.shape[1])]
    if len(names) != matrix.shape[1]:
        raise InputError(f'Expected {matrix.shape[1]} column names, got {len(names)}')
    return {name: list(matrix[:, j]) for (j, name) in enumerate(names)}

@returns_tagged('statistic', 'correlation_matrix_all')
def correlation_matrix_all(data: Any, columns: Optional[List[str]]=None) -> Dict[str, Any]:
    """
    Pearson, Spearman and Kendall correlation matrices over every pair of columns.

    Each entry is computed on the rows where both columns hold a finite number, as
    the pairwise functions do.

    Args:
        data: A tabular value (``{columns, data}`` dict, DataFrame or ``TabularData``)
            or a row-major numeric matrix whose columns are named ``'0'``, ``'1'``, ...
        columns (list): Columns to include. Defaults to every column holding at least
            one number.

    Returns:
        dict: ``{type: 'statistic', name: 'correlation_matrix_all', columns, pearson,
        spearman, kendall}``; each matrix is nested ``{column: {column: value}}``.
    """
    named = _named_columns(data, columns)
    if len(named) < 2:
        raise InputError('At least two numeric columns are required')
    matrices = {'pearson': {}, 'spearman': {}, 'kendall': {}}
    for a in named:
        for key in matrices:
            matrices[key][a] = {}
        for b in named:
            (x, y) = clean_pairs(named[a], named[b])
            matrices['pearson'][a][b] = pearson_value(x, y)
            matrices['spearman'][a][b] = pearson_value(midranks(x), midranks(y))
            matrices['kendall'][a][b] = kendall_value(x, y)
    return ok('statistic', 'correlation_matrix_all', columns=list(named), **matrices)
