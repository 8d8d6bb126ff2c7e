from typing import Any, Dict, List, Sequence
import numpy as np
from general.structures.tagged_result import InputError, ok, returns_tagged
AVERAGES = ('binary', 'macro', 'weighted', 'micro')

def plain_labels(values: Any) -> List[Any]:
    """Labels as plain Python scalars."""
    return [v.item() if isinstance(v, np.generic) else v for v in (values.tolist() if isinstance(values, np.ndarray) else list(values))]

def sorted_labels(values: Sequence[Any]) -> List[Any]:
    """Distinct labels in sorted order; mixed types fall back to ordering by their text."""
    distinct = list(dict.fromkeys(values))
    try:
        return sorted(distinct)
    except TypeError:
        return sorted(distinct, key=str)

def _safe_divide(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0

def _f1(precision: float, recall: float) -> float:
    return _safe_divide(2 * precision * recall, precision + recall)

def accuracy_score(y_true: Any, y_pred: Any) -> float:
    (y_true, y_pred) = _check_pairs(y_true, y_pred)
    return sum((1 for (t, p) in zip(y_true, y_pred) if t == p)) / len(y_true)

def _check_pairs(y_true: Any, y_pred: Any) -> tuple:
    (y_true, y_pred) = (plain_labels(y_true), plain_labels(y_pred))
    if len(y_true) != len(y_pred):
        raise InputError(f'y_true ({len(y_true)}) and y_pred ({len(y_pred)}) must have the same length')
    if len(y_true) == 0:
        raise InputError('Input arrays must not be empty')
    return (y_true, y_pred)

def confusion_matrix(y_true: Sequence[Any], y_pred: Sequence[Any], labels: Sequence[Any]) -> List[List[int]]:
    """Counts with rows indexed by true label and columns by predicted label."""
    index = {label: i for (i, label) in enumerate(labels)}
    matrix = [[0] * len(labels) for _ in labels]
    for (t, p) in zip(y_true, y_pred):
        matrix[index[t]][index[p]] += 1
    return matrix

@returns_tagged('metric', 'classification')
def metrics_classification(y_true: Any, y_pred: Any, average: str='binary', positive_label: Any=1) -> Dict[str, Any]:
    """
    Accuracy, precision, recall and F1 of a set of class predictions.

    Args:
        y_true: True labels.
        y_pred: Predicted labels, same length as ``y_true``.
        average (str): ``'binary'`` scores ``positive_label`` against everything else and
            reports ``tp``, ``fp``, ``tn`` and ``fn``; ``'macro'``, ``'weighted'`` and
            ``'micro'`` average over every label seen in either sequence.
        positive_label: Label treated as positive for ``average='binary'``.

    Returns:
        dict: ``{type: 'metric', name: 'classification', average, accuracy, precision, recall,
        f1, labels, confusion_matrix, per_class?, ...}``. Undefined ratios are reported as 0.
    """
    if average not in AVERAGES:
        raise InputError(f"average must be one of {', '.join(AVERAGES)}, got '{average}'")
    (y_true, y_pred) = _check_pairs(y_true, y_pred)
    labels = sorted_labels(y_true + y_pred)
    matrix = confusion_matrix(y_true, y_pred, labels)
    accuracy = sum((matrix[i][i] for i in range(len(labels)))) / len(y_true)
    if average == 'binary':
        tp = sum((1 for (t, p) in zip(y_true, y_pred) if t == positive_label and p == positive_label))
        fp = sum((1 for (t, p) in zip(y_true, y_pred) if t != positive_label and p == positive_label))
        fn = sum((1 for (t, p) in zip(y_true, y_pred) if t == positive_label and p != positive_label))
        tn = len(y_true) - tp - fp - fn
        precision = _safe_divide(tp, tp + fp)
        recall = _safe_divide(tp, tp + fn)
        return ok('metric', 'classification', average=average, positive_label=positive_label, accuracy=accuracy, precision=precision, recall=recall, f1=_f1(precision, recall), tp=tp, fp=fp, tn=tn, fn=fn, labels=labels, confusion_matrix=matrix, n=len(y_true))
    per_class = {}
    (total_tp, total_fp, total_fn) = (0, 0, 0)
    for (i, label) in enumerate(labels):
        tp = matrix[i][i]
        fp = sum((matrix[r][i] for r in range(len(labels)))) - tp
        fn = sum(matrix[i]) - tp
        (total_tp, total_fp, total_fn) = (total_tp + tp, total_fp + fp, total_fn + fn)
        precision = _safe_divide(tp, tp + fp)
        recall = _safe_divide(tp, tp + fn)
        per_class[str(label)] = {'precision': precision, 'recall': recall, 'f1': _f1(precision, recall), 'support': sum(matrix[i])}
    scores = list(per_class.values())
    if average == 'micro':
        precision = _safe_divide(total_tp, total_tp + total_fp)
        recall = _safe_divide(total_tp, total_tp + total_fn)
        f1 = _f1(precision, recall)
    elif average == 'macro':
        precision = float(np.mean([s['precision'] for s in scores]))
        recall = float(np.mean([s['recall'] for s in scores]))
        f1 = float(np.mean([s['f1'] for s in scores]))
    else:
        supports = np.array([s['support'] for s in scores], dtype=float)
        weights = supports / supports.sum()
        precision = float(np.dot(weights, [s['precision'] for s in scores]))
        recall = float(np.dot(weights, [s['recall'] for s in scores]))
        f1 = float(np.dot(weights, [s['f1'] for s in scores]))
    return ok('metric', 'classification', average=average, accuracy=accuracy, precision=precision, recall=recall, f1=f1, labels=labels, confusion_matrix=matrix, per_class=per_class, n=len(y_true))
