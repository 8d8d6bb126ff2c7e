from abc import abstractmethod
from typing import Any, Dict, List, Optional, Union
import numpy as np
from scipy.spatial.distance import cdist
from general.base_classes.model_base import BaseModel
from general.structures.data_batch import DataBatch
from general.structures.tagged_result import InputError, returns_tagged
METRICS = ('euclidean', 'manhattan', 'minkowski')
WEIGHTS = ('uniform', 'distance')
ZERO_DISTANCE_WEIGHT = 10000000000.0

def pairwise_distances(X: np.ndarray, Y: np.ndarray, metric: str='euclidean', p: float=3) -> np.ndarray:
    """
    Distances between every row of ``X`` and every row of ``Y``.

    Args:
        X (np.ndarray): Query rows, shape (m, p).
        Y (np.ndarray): Reference rows, shape (n, p).
        metric (str): ``'euclidean'``, ``'manhattan'`` or ``'minkowski'``.
        p (float): Exponent of the Minkowski metric.

    Returns:
        np.ndarray: Distance matrix of shape (m, n).
    """
    if metric == 'manhattan':
        return cdist(X, Y, metric='cityblock')
    if metric == 'minkowski':
        return cdist(X, Y, metric='minkowski', p=p)
    return np.sqrt(cdist(X, Y, metric='sqeuclidean'))

def neighbor_weights(distances: np.ndarray, weights: str) -> np.ndarray:
    if weights == 'uniform':
        return np.ones(len(distances))
    safe = np.where(distances == 0, 1.0, distances)
    return np.where(distances == 0, ZERO_DISTANCE_WEIGHT, 1.0 / safe)

def weighted_vote(labels: List[Any], weights: np.ndarray) -> Any:
    """Label with the largest total weight; ties go to the label met first."""
    totals: Dict[Any, float] = {}
    for (label, weight) in zip(labels, weights):
        totals[label] = totals.get(label, 0.0) + float(weight)
    best = None
    for (label, total) in totals.items():
        if best is None or total > totals[best]:
            best = label
    return best

class KNearestNeighbors(BaseModel):
    """
    Lazy k-nearest-neighbours learner: the model value is the training set plus ``k``.

    Neighbours are ranked by a stable sort of the distances, so equally distant
    training rows keep their original order.
    """

    def fit(self, batch: DataBatch, options: Dict[str, Any]) -> Dict[str, Any]:
        k = int(options['k'])
        (metric, weights) = (options['metric'], options['weights'])
        if k < 1:
            raise InputError(f'k must be at least 1, got {k}')
        if metric not in METRICS:
            raise InputError(f"metric must be one of {', '.join(METRICS)}, got '{metric}'")
        if weights not in WEIGHTS:
            raise InputError(f"weights must be one of {', '.join(WEIGHTS)}, got '{weights}'")
        metric_p = float(options['p'])
        if metric == 'minkowski' and metric_p < 1:
            raise InputError('p must be >= 1 for the minkowski metric')
        return {'k': k, 'X': batch.data, 'y': batch.label_list(), 'metric': metric, 'metric_p': metric_p, 'weights': weights}

    def neighbors(self, model: Dict[str, Any], X: np.ndarray) -> tuple:
        """Indices and distances of the ``min(k, n)`` nearest training rows, nearest first."""
        X_train = np.asarray(model['X'], dtype=float)
        distances = pairwise_distances(X, X_train, model.get('metric', 'euclidean'), model.get('metric_p', 3))
        k = min(int(model['k']), X_train.shape[0])
        order = np.argsort(distances, axis=1, kind='mergesort')[:, :k]
        return (order, np.take_along_axis(distances, order, axis=1))

    @abstractmethod
    def aggregate(self, labels: List[Any], weights: np.ndarray) -> Any:
        """Combine the labels of the k nearest neighbours into one prediction."""
        pass

    def predict_values(self, model: Dict[str, Any], X: np.ndarray) -> List[Any]:
        (order, distances) = self.neighbors(model, X)
        y = model['y']
        weighting = model.get('weights', 'uniform')
        return [self.aggregate([y[j] for j in row], neighbor_weights(d, weighting)) for (row, d) in zip(order, distances)]

class KNearestNeighborsClassifier(KNearestNeighbors):
    model_type = 'knn_classifier'
    task = 'classification'

    def aggregate(self, labels: List[Any], weights: np.ndarray) -> Any:
        return weighted_vote(labels, weights)

class KNearestNeighborsRegressor(KNearestNeighbors):
    model_type = 'knn_regressor'
    task = 'regression'
    numeric_targets = True

    def aggregate(self, labels: List[Any], weights: np.ndarray) -> float:
        return float(np.dot(weights, labels) / np.sum(weights))
KNN_CLASSIFIER = KNearestNeighborsClassifier()
KNN_REGRESSOR = KNearestNeighborsRegressor()

@returns_tagged('knn_classifier')
def train_knn_classifier(X: Any, y: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    Store a training set for k-NN classification.

    Args:
        X: Row-major feature matrix.
        y: Class labels (any hashable scalars).
        options (dict): ``k`` (5), ``metric`` (``'euclidean'``, ``'manhattan'`` or
            ``'minkowski'``), ``p`` (Minkowski exponent, 3), ``weights``
            (``'uniform'`` or ``'distance'``).

    Returns:
        dict: ``{type: 'knn_classifier', k, X, y, metric, metric_p, weights, n, p}``.
    """
    return KNN_CLASSIFIER.train(X, y, options)

@returns_tagged('knn_regressor')
def train_knn_regressor(X: Any, y: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """Store a training set for k-NN regression; options as for ``train_knn_classifier``."""
    return KNN_REGRESSOR.train(X, y, options)

@returns_tagged('prediction', 'knn_classifier')
def predict_knn_classifier(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """Majority vote of the nearest neighbours, ties to the nearest tied label."""
    return KNN_CLASSIFIER.predict(model, X)

@returns_tagged('prediction', 'knn_regressor')
def predict_knn_regressor(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    return KNN_REGRESSOR.predict(model, X)
