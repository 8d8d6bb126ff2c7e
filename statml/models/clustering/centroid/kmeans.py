import logging
from typing import Any, Dict, List, Optional, Union
import numpy as np
from scipy.spatial.distance import cdist
from general.base_classes.model_base import BaseModel
from general.structures.data_batch import DataBatch
from general.structures.tagged_result import InputError, returns_tagged
from statml.data_lifecycle.computational_utilities.random_operations.number_generation import LinearCongruentialGenerator

def initial_centroid_indices(n_samples: int, k: int, seed: int=42) -> List[int]:
    """
    Pick ``k`` distinct row indices with the seeded LCG.

    Each index is drawn as ``floor(random() * n_samples)``; an index that was
    already taken is discarded and drawn again.
    """
    generator = LinearCongruentialGenerator(seed)
    chosen: List[int] = []
    while len(chosen) < k:
        index = generator.randint(n_samples)
        if index not in chosen:
            chosen.append(index)
    return chosen

def assign_clusters(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid for every row; ties go to the lowest index."""
    return np.argmin(cdist(X, centroids, metric='sqeuclidean'), axis=1)

def compute_inertia(X: np.ndarray, centroids: np.ndarray, labels: np.ndarray) -> float:
    return float(np.sum((X - centroids[labels]) ** 2))

class KMeans(BaseModel):
    """
    Lloyd's k-means clustering.

    Initial centroids are ``k`` distinct training rows chosen by the seeded LCG.
    Each iteration assigns every row to its nearest centroid and moves every
    centroid to the mean of its rows; a centroid whose cluster empties stays
    where it was. The loop stops once an assignment repeats or after
    ``max_iterations`` updates.
    """
    model_type = 'kmeans'
    task = 'clustering'
    numeric_targets = True
    supervised = False

    def fit(self, batch: DataBatch, options: Dict[str, Any]) -> Dict[str, Any]:
        k = int(options['k'])
        max_iterations = int(options['max_iterations'])
        seed = int(options['seed'])
        if not 1 <= k <= batch.n_samples:
            raise InputError(f'k must be between 1 and the number of rows ({batch.n_samples}), got {k}')
        if max_iterations < 1:
            raise InputError(f'max_iterations must be at least 1, got {max_iterations}')
        X = batch.data
        centroids = X[initial_centroid_indices(batch.n_samples, k, seed)].copy()
        labels = None
        inertia_history = []
        converged = False
        for iteration in range(max_iterations):
            new_labels = assign_clusters(X, centroids)
            if labels is not None and np.array_equal(new_labels, labels):
                converged = True
                logging.debug(f'k-means converged after {iteration} iterations (inertia={inertia_history[-1]:.6g})')
                break
            labels = new_labels
            for cluster in range(k):
                members = X[labels == cluster]
                if len(members) > 0:
                    centroids[cluster] = members.mean(axis=0)
            inertia_history.append(compute_inertia(X, centroids, labels))
        return {'k': k, 'centroids': centroids, 'labels': labels, 'inertia': inertia_history[-1], 'inertia_history': inertia_history, 'n_iterations': len(inertia_history), 'converged': converged, 'max_iterations': max_iterations, 'seed': seed}

    def predict_values(self, model: Dict[str, Any], X: np.ndarray) -> List[int]:
        return assign_clusters(X, np.asarray(model['centroids'], dtype=float)).tolist()
KMEANS = KMeans()

@returns_tagged('kmeans')
def train_kmeans(X: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    Cluster the rows of ``X``.

    Args:
        X: Row-major data matrix.
        options (dict): ``k`` (3), ``max_iterations`` (100) and ``seed`` (42).

    Returns:
        dict: ``{type: 'kmeans', centroids, labels, inertia, inertia_history, n_iterations,
        converged, n, p, ...}``.
    """
    return KMEANS.train(X, None, options)

@returns_tagged('prediction', 'kmeans')
def predict_kmeans(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """Nearest-centroid cluster index for every row."""
    return KMEANS.predict(model, X)
