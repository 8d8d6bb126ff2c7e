import logging
from abc import abstractmethod
from typing import Any, Dict, List, Optional, Union
import numpy as np
from general.base_classes.model_base import BaseModel
from general.structures.data_batch import DataBatch
from general.structures.tagged_result import InputError, returns_tagged
from statml.data_lifecycle.computational_utilities.random_operations.sampling_methods import bootstrap_indices
from statml.models.evaluation.performance_metrics.classification import sorted_labels
from statml.models.trees_and_forests.decision_trees.cart import CLASSIFICATION_CRITERIA, REGRESSION_CRITERIA, build_tree, check_tree_options, label_counts, route

def sorted_vote(votes: List[Any]) -> Any:
    """Most frequent vote; ties go to the smallest label in sorted order."""
    counts = label_counts(votes)
    best = None
    for label in sorted_labels(list(counts)):
        if best is None or counts[label] > counts[best]:
            best = label
    return best

class RandomForest(BaseModel):
    """
    Bagged CART trees.

    Tree ``i`` is grown on the bootstrap sample drawn by an LCG seeded with
    ``seed + i``, so the ``trees`` array depends only on the data, ``seed`` and
    ``n_estimators``.
    """
    criteria: tuple = ()

    def fit(self, batch: DataBatch, options: Dict[str, Any]) -> Dict[str, Any]:
        (criterion, max_depth, min_samples_split) = check_tree_options(options, self.criteria)
        n_estimators = int(options['n_estimators'])
        seed = int(options['seed'])
        if n_estimators < 1:
            raise InputError(f'n_estimators must be at least 1, got {n_estimators}')
        labels = batch.label_list()
        trees = []
        for i in range(n_estimators):
            indices = bootstrap_indices(batch.n_samples, seed + i)
            tree = build_tree(batch.data[indices], [labels[j] for j in indices], criterion, max_depth, min_samples_split)
            logging.debug(f'{self.name}: grew tree {i + 1}/{n_estimators} on bootstrap seed {seed + i}')
            trees.append(tree)
        return {'trees': trees, 'n_trees': n_estimators, 'seed': seed, 'criterion': criterion, 'max_depth': max_depth, 'min_samples': min_samples_split}

    @abstractmethod
    def aggregate(self, votes: List[Any]) -> Any:
        """Combine the per-tree predictions for one row."""
        pass

    def predict_values(self, model: Dict[str, Any], X: np.ndarray) -> List[Any]:
        return [self.aggregate([route(tree, x) for tree in model['trees']]) for x in X]

class RandomForestClassifier(RandomForest):
    model_type = 'random_forest_classifier'
    task = 'classification'
    criteria = CLASSIFICATION_CRITERIA

    def aggregate(self, votes: List[Any]) -> Any:
        return sorted_vote(votes)

class RandomForestRegressor(RandomForest):
    model_type = 'random_forest_regressor'
    task = 'regression'
    numeric_targets = True
    criteria = REGRESSION_CRITERIA

    def aggregate(self, votes: List[Any]) -> float:
        return float(np.mean(votes))
RANDOM_FOREST_CLASSIFIER = RandomForestClassifier()
RANDOM_FOREST_REGRESSOR = RandomForestRegressor()

@returns_tagged('random_forest_classifier')
def train_random_forest_classifier(X: Any, y: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    Train a random forest of classification trees.

    Args:
        X: Row-major feature matrix.
        y: Class labels.
        options (dict): ``n_estimators`` (10), ``max_depth`` (5), ``min_samples_split`` (2),
            ``seed`` (42), ``criterion`` (``'gini'``).

    Returns:
        dict: ``{type: 'random_forest_classifier', trees, n_trees, seed, ..., n, p}``.
    """
    return RANDOM_FOREST_CLASSIFIER.train(X, y, options)

@returns_tagged('random_forest_regressor')
def train_random_forest_regressor(X: Any, y: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    return RANDOM_FOREST_REGRESSOR.train(X, y, options)

@returns_tagged('prediction', 'random_forest_classifier')
def predict_random_forest_classifier(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """Majority vote over the trees."""
    return RANDOM_FOREST_CLASSIFIER.predict(model, X)

@returns_tagged('prediction', 'random_forest_regressor')
def predict_random_forest_regressor(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """Mean of the tree predictions."""
    return RANDOM_FOREST_REGRESSOR.predict(model, X)
