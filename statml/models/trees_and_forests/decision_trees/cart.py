from typing import Any, Dict, List, Optional, Union
import math
import numpy as np
from general.base_classes.model_base import BaseModel
from general.structures.data_batch import DataBatch
from general.structures.model_artifact import load_model
from general.structures.tagged_result import InputError, returns_tagged
CLASSIFICATION_CRITERIA = ('gini', 'entropy')
REGRESSION_CRITERIA = ('variance',)

def label_counts(values: List[Any]) -> Dict[Any, int]:
    """Occurrences of each label, keyed in order of first appearance."""
    counts: Dict[Any, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts

def majority_label(values: List[Any]) -> Any:
    """Most frequent label; ties go to the label seen first."""
    counts = label_counts(values)
    best = None
    for (label, count) in counts.items():
        if best is None or count > counts[best]:
            best = label
    return best

def impurity(values: List[Any], criterion: str) -> float:
    """
    Node impurity under ``criterion``.

    Parameters
    ----------
    values : List[Any]
        Targets reaching the node
    criterion : str
        ``'gini'`` (1 - sum p^2), ``'entropy'`` (-sum p log2 p) or
        ``'variance'`` (population variance of numeric targets)

    Returns
    -------
    float
        Impurity, 0 for an empty node
    """
    n = len(values)
    if n == 0:
        return 0.0
    if criterion == 'variance':
        return float(np.var(np.asarray(values, dtype=float)))
    probabilities = np.array(list(label_counts(values).values()), dtype=float) / n
    if criterion == 'gini':
        return float(1.0 - np.sum(probabilities ** 2))
    return float(-np.sum(probabilities * np.log2(probabilities)))

def candidate_thresholds(column: np.ndarray) -> np.ndarray:
    """Midpoints between successive distinct sorted values."""
    distinct = np.unique(column)
    return (distinct[:-1] + distinct[1:]) / 2.0

def find_best_split(X: np.ndarray, y: List[Any], criterion: str) -> Optional[tuple]:
    """
    Search every (feature, threshold) pair for the smallest weighted child impurity.

    Returns:
        Optional[tuple]: ``(feature, threshold, left_mask)`` for the first minimum in
        feature-then-threshold order, or None when no feature has two distinct values.
    """
    n = X.shape[0]
    y_array = np.empty(n, dtype=object)
    y_array[:] = y
    best = None
    best_score = math.inf
    for feature in range(X.shape[1]):
        column = X[:, feature]
        for threshold in candidate_thresholds(column):
            left = column <= threshold
            n_left = int(left.sum())
            score = (n_left * impurity(list(y_array[left]), criterion) + (n - n_left) * impurity(list(y_array[~left]), criterion)) / n
            if score < best_score:
                best_score = score
                best = (feature, float(threshold), left)
    return best

def make_leaf(y: List[Any], regression: bool) -> Dict[str, Any]:
    prediction = float(np.mean(np.asarray(y, dtype=float))) if regression else majority_label(y)
    return {'leaf': True, 'prediction': prediction, 'n': len(y)}

def build_tree(X: np.ndarray, y: List[Any], criterion: str, max_depth: int, min_samples_split: int, depth: int=0) -> Dict[str, Any]:
    """
    Grow a CART tree recursively.

    Growth stops at ``max_depth``, below ``min_samples_split`` samples, on a pure
    node, or when no threshold separates the rows.

    Args:
        X (np.ndarray): Rows reaching this node.
        y (List[Any]): Their targets as plain values.
        criterion (str): ``'gini'``, ``'entropy'`` or ``'variance'``.
        max_depth (int): Maximum depth of a split node.
        min_samples_split (int): Minimum node size that may still be split.
        depth (int): Depth of this node (root is 0).

    Returns:
        Dict[str, Any]: ``{leaf: True, prediction, n}`` or
        ``{leaf: False, feature, threshold, left, right}``.
    """
    regression = criterion in REGRESSION_CRITERIA
    if depth >= max_depth or len(y) < min_samples_split or len(set(y)) <= 1:
        return make_leaf(y, regression)
    split = find_best_split(X, y, criterion)
    if split is None:
        return make_leaf(y, regression)
    (feature, threshold, left) = split
    y_left = [label for (label, goes_left) in zip(y, left) if goes_left]
    y_right = [label for (label, goes_left) in zip(y, left) if not goes_left]
    return {'leaf': False, 'feature': feature, 'threshold': threshold, 'left': build_tree(X[left], y_left, criterion, max_depth, min_samples_split, depth + 1), 'right': build_tree(X[~left], y_right, criterion, max_depth, min_samples_split, depth + 1)}

def route(node: Dict[str, Any], x: np.ndarray) -> Any:
    """Follow ``x[feature] <= threshold`` to the left until a leaf is reached."""
    while not node['leaf']:
        node = node['left'] if x[node['feature']] <= node['threshold'] else node['right']
    return node['prediction']

def tree_depth(node: Dict[str, Any]) -> int:
    if node['leaf']:
        return 0
    return 1 + max(tree_depth(node['left']), tree_depth(node['right']))

def leaves(node: Dict[str, Any]) -> List[Dict[str, Any]]:
    if node['leaf']:
        return [node]
    return leaves(node['left']) + leaves(node['right'])

def check_tree_options(options: Dict[str, Any], criteria: tuple) -> tuple:
    """Validate and unpack ``(criterion, max_depth, min_samples_split)``."""
    criterion = options['criterion']
    if criterion not in criteria:
        raise InputError(f"criterion must be one of {', '.join(criteria)}, got '{criterion}'")
    (max_depth, min_samples_split) = (int(options['max_depth']), int(options['min_samples_split']))
    if max_depth < 0:
        raise InputError(f'max_depth must be non-negative, got {max_depth}')
    if min_samples_split < 2:
        raise InputError(f'min_samples_split must be at least 2, got {min_samples_split}')
    return (criterion, max_depth, min_samples_split)

class DecisionTree(BaseModel):
    """
    CART decision tree stored as nested node dicts.

    Subclasses fix the task and the admissible split criteria.
    """
    criteria: tuple = ()

    def fit(self, batch: DataBatch, options: Dict[str, Any]) -> Dict[str, Any]:
        (criterion, max_depth, min_samples_split) = check_tree_options(options, self.criteria)
        tree = build_tree(batch.data, batch.label_list(), criterion, max_depth, min_samples_split)
        return {'tree': tree, 'criterion': criterion, 'max_depth': max_depth, 'min_samples': min_samples_split, 'depth': tree_depth(tree), 'n_leaves': len(leaves(tree))}

    def predict_values(self, model: Dict[str, Any], X: np.ndarray) -> List[Any]:
        return [route(model['tree'], x) for x in X]

class DecisionTreeClassifier(DecisionTree):
    model_type = 'decision_tree_classifier'
    task = 'classification'
    criteria = CLASSIFICATION_CRITERIA

class DecisionTreeRegressor(DecisionTree):
    model_type = 'decision_tree_regressor'
    task = 'regression'
    numeric_targets = True
    criteria = REGRESSION_CRITERIA
DECISION_TREE_CLASSIFIER = DecisionTreeClassifier()
DECISION_TREE_REGRESSOR = DecisionTreeRegressor()

@returns_tagged('decision_tree_classifier')
def train_decision_tree_classifier(X: Any, y: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    Train a classification tree.

    Args:
        X: Row-major feature matrix.
        y: Class labels.
        options (dict): ``max_depth`` (5), ``min_samples_split`` (2, alias ``min_samples``),
            ``criterion`` (``'gini'`` or ``'entropy'``).

    Returns:
        dict: ``{type: 'decision_tree_classifier', tree, criterion, max_depth, min_samples,
        depth, n_leaves, n, p}``.
    """
    return DECISION_TREE_CLASSIFIER.train(X, y, options)

@returns_tagged('decision_tree_regressor')
def train_decision_tree_regressor(X: Any, y: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """Train a regression tree splitting on weighted child variance; options as for the classifier."""
    return DECISION_TREE_REGRESSOR.train(X, y, options)

@returns_tagged('prediction', 'decision_tree')
def predict_decision_tree(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """Route every row of ``X`` through a classification or regression tree."""
    kind = DECISION_TREE_CLASSIFIER if load_model(model, [DECISION_TREE_CLASSIFIER.model_type, DECISION_TREE_REGRESSOR.model_type])['type'] == DECISION_TREE_CLASSIFIER.model_type else DECISION_TREE_REGRESSOR
    return kind.predict(model, X)
