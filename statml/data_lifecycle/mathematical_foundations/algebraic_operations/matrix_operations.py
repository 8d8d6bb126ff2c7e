import logging
import numpy as np
from typing import Union, Tuple, List, Optional
from general.structures.data_batch import as_matrix
from general.structures.tagged_result import InputError
from statml.data_lifecycle.computational_utilities.random_operations.number_generation import LinearCongruentialGenerator
SINGULAR_PIVOT = 1e-12
DEFAULT_RIDGE_LAMBDA = 1e-08
POWER_ITERATIONS = 100

def transpose_matrix(matrix: Union[np.ndarray, list]) -> np.ndarray:
    """
    Transpose a 2D matrix (swap rows and columns).

    Args:
        matrix (Union[np.ndarray, list]): A 2D matrix to be transposed.

    Returns:
        np.ndarray: The transposed matrix.

    Raises:
        InputError: If the input is not a rectangular 2D matrix.
    """
    return as_matrix(matrix, 'matrix').T.copy()

def multiply_matrices(A: Union[np.ndarray, list], B: Union[np.ndarray, list]) -> np.ndarray:
    """
    Dense product ``A B`` as a triple loop over rows, columns and the shared dimension.

    Args:
        A (Union[np.ndarray, list]): Matrix of shape (m, n).
        B (Union[np.ndarray, list]): Matrix of shape (n, p).

    Returns:
        np.ndarray: Matrix of shape (m, p).

    Raises:
        InputError: If the inner dimensions differ.
    """
    A = as_matrix(A, 'A')
    B = as_matrix(B, 'B')
    if A.shape[1] != B.shape[0]:
        raise InputError(f'Incompatible shapes for matrix multiplication: {A.shape} and {B.shape}. The number of columns in the first matrix ({A.shape[1]}) must equal the number of rows in the second matrix ({B.shape[0]}).')
    (m, n) = A.shape
    p = B.shape[1]
    result = np.zeros((m, p))
    for i in range(m):
        for k in range(n):
            a_ik = A[i, k]
            if a_ik != 0:
                result[i, :] += a_ik * B[k, :]
    return result

def multiply_transposed(A: Union[np.ndarray, list], B: Union[np.ndarray, list]) -> np.ndarray:
    """``A^T B`` without materializing the transpose of ``A`` for the caller."""
    A = as_matrix(A, 'A')
    B = as_matrix(B, 'B')
    if A.shape[0] != B.shape[0]:
        raise InputError(f'Incompatible shapes for A^T B: {A.shape} and {B.shape}')
    return multiply_matrices(A.T, B)

def invert_matrix(matrix: Union[np.ndarray, list]) -> np.ndarray:
    """
    Gauss-Jordan inverse with partial pivoting.

    A column whose best pivot is smaller than 1e-12 in magnitude is skipped and
    left unreduced; no exception is raised, so the result is meaningless for a
    singular input. Callers needing strict inversion must pass well-conditioned
    matrices.

    Args:
        matrix (Union[np.ndarray, list]): Square matrix.

    Returns:
        np.ndarray: The (approximate) inverse.

    Raises:
        InputError: If the matrix is not square.
    """
    M = as_matrix(matrix, 'matrix')
    (n, m) = M.shape
    if n != m:
        raise InputError(f'Matrix must be square, got shape {M.shape}')
    augmented = np.hstack([M.astype(float), np.eye(n)])
    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        pivot = augmented[pivot_row, col]
        if abs(pivot) < SINGULAR_PIVOT:
            logging.debug(f'Singular pivot in column {col} ({pivot:.3e}); column skipped')
            continue
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]
        augmented[col] /= augmented[col, col]
        for row in range(n):
            if row != col:
                factor = augmented[row, col]
                if factor != 0:
                    augmented[row] -= factor * augmented[col]
    return augmented[:, n:]

def ridge_pseudoinverse(A: Union[np.ndarray, list], ridge_lambda: float=DEFAULT_RIDGE_LAMBDA) -> np.ndarray:
    """
    Ridge-stabilized left inverse ``(A^T A + lambda I)^-1 A^T``.

    Args:
        A (Union[np.ndarray, list]): Matrix of shape (n, p).
        ridge_lambda (float): Non-negative diagonal load.

    Returns:
        np.ndarray: Matrix of shape (p, n).
    """
    A = as_matrix(A, 'A')
    if ridge_lambda < 0:
        raise InputError('ridge_lambda must be non-negative')
    gram = multiply_transposed(A, A) + ridge_lambda * np.eye(A.shape[1])
    return multiply_matrices(invert_matrix(gram), A.T)

def covariance_matrix(X: Union[np.ndarray, list], means: Optional[np.ndarray]=None) -> np.ndarray:
    """
    Unbiased ``p x p`` covariance of the columns of ``X``.

    Raises:
        InputError: If ``X`` has fewer than two rows.
    """
    X = as_matrix(X)
    n = X.shape[0]
    if n < 2:
        raise InputError('insufficient data: need at least 2 rows for a covariance matrix')
    if means is None:
        means = X.mean(axis=0)
    centered = X - means
    return multiply_transposed(centered, centered) / (n - 1)


def _orthogonalize(vector: np.ndarray, basis: List[np.ndarray]) -> np.ndarray:
    for b in basis:
        vector = vector - float(np.dot(vector, b)) * b
    return vector

def _fallback_direction(basis: List[np.ndarray], p: int) -> np.ndarray:
    for e in np.eye(p):
        candidate = _orthogonalize(e, basis)
        norm = float(np.linalg.norm(candidate))
        if norm > 1e-06:
            return candidate / norm
    return np.eye(p)[0]

def power_iteration(matrix: Union[np.ndarray, list], n_components: int, iterations: int=POWER_ITERATIONS, seed: int=42) -> Tuple[np.ndarray, np.ndarray]:
    """
    Leading eigenvectors of a symmetric matrix by power iteration with deflation.

    For each component a start vector is drawn uniformly from [0, 1)^p with the
    seeded LCG and updated ``iterations`` times as ``v <- C v / ||C v||`` (no
    early stop), re-orthogonalized against the components already found. The
    matrix is then deflated as ``C <- C - lambda v v^T`` with ``lambda = v^T C v``.
    If ``C v`` vanishes (rank-deficient remainder) the vector is replaced by a
    unit vector orthogonal to the earlier components.

    Parameters
    ----------
    matrix : Union[np.ndarray, list]
        Symmetric ``p x p`` matrix.
    n_components : int
        Number of eigenpairs to extract, at most ``p``.
    iterations : int
        Sweeps per component.
    seed : int
        LCG seed for the start vectors.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        ``(components, eigenvalues)``; components has shape (n_components, p) with unit-norm rows.
    """
    C = as_matrix(matrix, 'matrix').copy()
    p = C.shape[0]
    if C.shape[1] != p:
        raise InputError(f'Matrix must be square, got shape {C.shape}')
    if not 1 <= n_components <= p:
        raise InputError(f'n_components must be between 1 and {p}, got {n_components}')
    generator = LinearCongruentialGenerator(seed)
    components = []
    eigenvalues = []
    for _ in range(n_components):
        v = _orthogonalize(generator.uniform_vector(p), components)
        norm = float(np.linalg.norm(v))
        collapsed = norm < SINGULAR_PIVOT
        if not collapsed:
            v = v / norm
        for _ in range(iterations):
            if collapsed:
                break
            w = _orthogonalize(C @ v, components)
            norm = float(np.linalg.norm(w))
            if norm < SINGULAR_PIVOT:
                collapsed = True
                break
            v = w / norm
        if collapsed:
            logging.debug(f'Power iteration collapsed on component {len(components)}; using an orthogonal fallback')
            v = _fallback_direction(components, p)
        eigenvalue = float(v @ C @ v)
        components.append(v)
        eigenvalues.append(eigenvalue)
        C = C - eigenvalue * np.outer(v, v)
    return (np.vstack(components), np.array(eigenvalues))
