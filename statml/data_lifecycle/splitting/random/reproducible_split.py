from typing import Any, Dict, Optional
import math
from general.structures.component_config import resolve_options
from general.structures.data_batch import DataBatch
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.data_lifecycle.computational_utilities.random_operations.sampling_methods import lcg_permutation

def split_indices(n_samples: int, test_size: float=0.2, seed: int=42) -> tuple:
    """
    Reproducible train/test index split.

    The rows are shuffled with the seeded LCG (Fisher-Yates); the first
    ``max(1, floor(n * test_size))`` shuffled indices form the test set and the
    rest the training set.

    Args:
        n_samples (int): Number of rows.
        test_size (float): Proportion in (0, 1) of rows held out.
        seed (int): LCG seed.

    Returns:
        tuple: ``(train_indices, test_indices)`` as lists of ints.

    Raises:
        InputError: If ``test_size`` is outside (0, 1) or leaves no training rows.
    """
    if not 0 < test_size < 1:
        raise InputError(f'test_size must be between 0 and 1, got {test_size}')
    if n_samples < 2:
        raise InputError(f'insufficient data: need at least 2 samples to split, got {n_samples}')
    n_test = max(1, int(math.floor(n_samples * test_size)))
    if n_test >= n_samples:
        raise InputError(f'test_size {test_size} leaves no training samples out of {n_samples}')
    order = lcg_permutation(n_samples, seed)
    return (order[n_test:], order[:n_test])

@returns_tagged('split', 'train_test_split')
def train_test_split(X: Any, y: Optional[Any]=None, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    Split rows of ``X`` (and ``y``) into deterministic train and test sets.

    Args:
        X: Row-major feature matrix.
        y: Optional targets aligned with ``X``.
        options (dict): ``test_size`` (default 0.2) and ``seed`` (default 42).

    Returns:
        dict: ``{type: 'split', sizes: {train, test}, indices: {train, test}, X_train,
        X_test, y_train, y_test, test_size, seed}``.
    """
    opts = resolve_options('train_test_split', options)
    batch = DataBatch(data=X, labels=y)
    (train_idx, test_idx) = split_indices(batch.n_samples, float(opts['test_size']), int(opts['seed']))
    train = batch.subset(train_idx)
    test = batch.subset(test_idx)
    return ok('split', sizes={'train': len(train_idx), 'test': len(test_idx)}, indices={'train': train_idx, 'test': test_idx}, X_train=train.data, X_test=test.data, y_train=train.label_list() if batch.is_labeled() else None, y_test=test.label_list() if batch.is_labeled() else None, test_size=opts['test_size'], seed=opts['seed'])
