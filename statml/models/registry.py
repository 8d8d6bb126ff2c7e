from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from general.base_classes.model_base import BaseModel
from general.structures.tagged_result import InputError
from statml.models.classification.bayesian.naive_bayes import NAIVE_BAYES, predict_naive_bayes, train_naive_bayes
from statml.models.classification.linear.logistic_regression import LOGISTIC_REGRESSION, predict_logistic, train_logistic_regression
from statml.models.clustering.centroid.kmeans import KMEANS, predict_kmeans, train_kmeans
from statml.models.neighbors.k_nearest_neighbors import KNN_CLASSIFIER, KNN_REGRESSOR, predict_knn_classifier, predict_knn_regressor, train_knn_classifier, train_knn_regressor
from statml.models.regression.linear.linear_regression import LINEAR_REGRESSION, predict_linear, train_linear_regression
from statml.models.trees_and_forests.decision_trees.cart import DECISION_TREE_CLASSIFIER, DECISION_TREE_REGRESSOR, predict_decision_tree, train_decision_tree_classifier, train_decision_tree_regressor
from statml.models.trees_and_forests.random_forest import RANDOM_FOREST_CLASSIFIER, RANDOM_FOREST_REGRESSOR, predict_random_forest_classifier, predict_random_forest_regressor, train_random_forest_classifier, train_random_forest_regressor

@dataclass(frozen=True)
class ModelEntry:
    """
    One variant of the model union.

    Attributes:
        kind (BaseModel): Stateless model kind carrying the type tag and task.
        train (Callable): Public training operation, ``train(X, y, options)``.
        predict (Callable): Public prediction operation, ``predict(model, X)``.
    """
    kind: BaseModel
    train: Callable[..., Dict[str, Any]]
    predict: Callable[..., Dict[str, Any]]

    @property
    def task(self) -> str:
        return self.kind.task

    @property
    def supervised(self) -> bool:
        return self.kind.supervised
SUPERVISED_MODELS: Dict[str, ModelEntry] = {entry.kind.model_type: entry for entry in [ModelEntry(LINEAR_REGRESSION, train_linear_regression, predict_linear), ModelEntry(LOGISTIC_REGRESSION, train_logistic_regression, predict_logistic), ModelEntry(KNN_CLASSIFIER, train_knn_classifier, predict_knn_classifier), ModelEntry(KNN_REGRESSOR, train_knn_regressor, predict_knn_regressor), ModelEntry(DECISION_TREE_CLASSIFIER, train_decision_tree_classifier, predict_decision_tree), ModelEntry(DECISION_TREE_REGRESSOR, train_decision_tree_regressor, predict_decision_tree), ModelEntry(RANDOM_FOREST_CLASSIFIER, train_random_forest_classifier, predict_random_forest_classifier), ModelEntry(RANDOM_FOREST_REGRESSOR, train_random_forest_regressor, predict_random_forest_regressor), ModelEntry(NAIVE_BAYES, train_naive_bayes, predict_naive_bayes)]}
UNSUPERVISED_MODELS: Dict[str, ModelEntry] = {KMEANS.model_type: ModelEntry(KMEANS, train_kmeans, predict_kmeans)}

def get_entry(model_type: Optional[str], task: Optional[str]=None) -> ModelEntry:
    """
    Look up a supervised model variant by its type tag.

    Args:
        model_type (Optional[str]): Type tag such as ``'linear_regression'``.
        task (Optional[str]): When given, the variant must solve this task.

    Raises:
        InputError: For unknown tags or a task mismatch.
    """
    entry = SUPERVISED_MODELS.get(model_type) if isinstance(model_type, str) else None
    if entry is None:
        raise InputError(f"Unknown model type '{model_type}'")
    if task is not None and entry.task != task:
        raise InputError(f"Model type '{model_type}' is a {entry.task} model, expected {task}")
    return entry

def model_types(task: Optional[str]=None) -> list:
    """Registered supervised type tags, optionally restricted to one task."""
    return [t for (t, entry) in SUPERVISED_MODELS.items() if task is None or entry.task == task]
