import logging
from typing import Any, Dict, List, Optional
import numpy as np
from general.structures.component_config import DEFAULTS, resolve_options
from general.structures.data_batch import DataBatch
from general.structures.tagged_result import InputError, is_error, ok, returns_tagged
from statml.data_lifecycle.computational_utilities.random_operations.sampling_methods import lcg_permutation
from statml.data_lifecycle.preprocessing.scaling_normalization.standard_scaling import apply_standard_scaler, fit_standard_scaler
from statml.models.evaluation.performance_metrics.classification import accuracy_score
from statml.models.evaluation.performance_metrics.regression import r2_score
from statml.models.registry import get_entry

def k_fold_indices(n_samples: int, k_folds: int=5, shuffle: bool=True, seed: int=42) -> List[List[int]]:
    """
    Partition row indices into ``k_folds`` folds.

    Every fold holds ``n_samples // k_folds`` consecutive positions of the
    (optionally LCG-shuffled) order; the last fold also takes the remainder.

    Args:
        n_samples (int): Number of rows.
        k_folds (int): Number of folds, between 2 and ``n_samples``.
        shuffle (bool): Whether to permute the rows with the seeded LCG first.
        seed (int): LCG seed.

    Returns:
        List[List[int]]: Test indices of each fold.

    Raises:
        InputError: If ``k_folds`` is out of range.
    """
    if not 2 <= k_folds <= n_samples:
        raise InputError(f'k_folds must be between 2 and the number of samples ({n_samples}), got {k_folds}')
    order = lcg_permutation(n_samples, seed) if shuffle else list(range(n_samples))
    size = n_samples // k_folds
    return [order[i * size:(i + 1) * size] if i < k_folds - 1 else order[i * size:] for i in range(k_folds)]

def _unwrap(result: Dict[str, Any]) -> Dict[str, Any]:
    if is_error(result):
        raise InputError(result['error'])
    return result

@returns_tagged('cross_validation')
def cross_validate(X: Any, y: Any, model_type: str, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    k-fold cross-validation of a supervised model kind.

    For each fold the model is trained on the remaining rows and scored on the
    fold: R^2 for regressors, accuracy for classifiers. With ``normalize`` a
    standard scaler is fit on the training rows only and then applied to both
    the training and the test rows of that fold.

    Args:
        X: Row-major feature matrix.
        y: Targets, one per row.
        model_type (str): Type tag of a supervised model, e.g. ``'knn_classifier'``.
        options (dict): ``k_folds`` (5), ``shuffle`` (True), ``normalize`` (False),
            ``seed`` (42); any other key is passed to the model's training operation.

    Returns:
        dict: ``{type: 'cross_validation', name: model_type, metric, scores, mean, std,
        min, max, k_folds, fold_sizes, ...}`` with ``std`` the sample standard deviation.
    """
    entry = get_entry(model_type)
    opts = resolve_options('cross_validation', options)
    cv_keys = set(DEFAULTS['cross_validation'].parameters) | set(DEFAULTS['cross_validation'].aliases)
    model_options = {key: value for (key, value) in (options or {}).items() if key not in cv_keys}
    batch = DataBatch(data=X, labels=y, numeric_labels=entry.kind.numeric_targets)
    folds = k_fold_indices(batch.n_samples, int(opts['k_folds']), bool(opts['shuffle']), int(opts['seed']))
    metric = 'r2' if entry.task == 'regression' else 'accuracy'
    scores = []
    for (i, test_idx) in enumerate(folds):
        held_out = set(test_idx)
        train_idx = [j for j in range(batch.n_samples) if j not in held_out]
        (train, test) = (batch.subset(train_idx), batch.subset(test_idx))
        (X_train, X_test) = (train.data, test.data)
        if opts['normalize']:
            scaler = fit_standard_scaler(X_train)
            (X_train, X_test) = (apply_standard_scaler(scaler, X_train), apply_standard_scaler(scaler, X_test))
        model = _unwrap(entry.train(X_train, train.label_list(), model_options))
        predictions = _unwrap(entry.predict(model, X_test))['predictions']
        score = r2_score(test.labels, predictions) if metric == 'r2' else accuracy_score(test.label_list(), predictions)
        logging.debug(f'{model_type} fold {i + 1}/{len(folds)}: {metric}={score:.6g} (train={len(train_idx)}, test={len(test_idx)})')
        scores.append(score)
    values = np.array(scores, dtype=float)
    return ok('cross_validation', model_type, metric=metric, scores=values, mean=float(values.mean()), std=float(values.std(ddof=1)), min=float(values.min()), max=float(values.max()), k_folds=len(folds), fold_sizes=[len(fold) for fold in folds], shuffle=bool(opts['shuffle']), normalize=bool(opts['normalize']), seed=int(opts['seed']))
