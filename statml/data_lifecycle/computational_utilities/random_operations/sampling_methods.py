from typing import Any, Dict, List, Optional
from general.structures.data_batch import as_matrix, as_vector
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.data_lifecycle.computational_utilities.random_operations.number_generation import LinearCongruentialGenerator

def lcg_permutation(n: int, seed: int=42) -> List[int]:
    """Deterministic shuffle of ``range(n)`` driven by the seeded LCG."""
    return LinearCongruentialGenerator(seed).permutation(n)

def bootstrap_indices(n: int, seed: int=42) -> List[int]:
    """
    ``n`` row indices drawn with replacement as ``floor(random() * n)``.

    Args:
        n (int): Population size (also the sample size).
        seed (int): LCG seed.

    Returns:
        List[int]: Indices in draw order.
    """
    generator = LinearCongruentialGenerator(seed)
    return [generator.randint(n) for _ in range(n)]

@returns_tagged('split', 'bootstrap_sample')
def bootstrap_sample(X: Any, y: Optional[Any]=None, seed: int=42) -> Dict[str, Any]:
    """
    Bootstrap sample of the rows of ``X`` (and ``y``) of the same size as the input.

    Returns:
        dict: ``{type: 'split', name: 'bootstrap_sample', indices, out_of_bag, X, y}``.
        ``out_of_bag`` lists the rows never drawn.
    """
    X = as_matrix(X)
    n = X.shape[0]
    if y is not None:
        y = as_vector(y)
        if len(y) != n:
            raise InputError(f'Number of samples in X ({n}) does not match number of samples in y ({len(y)})')
    indices = bootstrap_indices(n, seed)
    drawn = set(indices)
    out_of_bag = [i for i in range(n) if i not in drawn]
    return ok('split', 'bootstrap_sample', seed=seed, indices=indices, out_of_bag=out_of_bag, X=X[indices], y=None if y is None else y[indices])
