from typing import Any, Dict, Union
import numpy as np
from general.structures.model_artifact import load_model
from general.structures.tagged_result import ok, returns_tagged
TREE_TYPES = ('decision_tree_classifier', 'decision_tree_regressor')
FOREST_TYPES = ('random_forest_classifier', 'random_forest_regressor')

def split_counts(node: Dict[str, Any], counts: np.ndarray) -> np.ndarray:
    """Add one to ``counts[feature]`` for every internal node below ``node``."""
    if not node['leaf']:
        counts[int(node['feature'])] += 1
        split_counts(node['left'], counts)
        split_counts(node['right'], counts)
    return counts

def normalized_split_counts(tree: Dict[str, Any], n_features: int) -> np.ndarray:
    counts = split_counts(tree, np.zeros(n_features))
    total = counts.sum()
    return counts / total if total > 0 else counts

@returns_tagged('feature_importance')
def feature_importance_tree(model: Union[Dict[str, Any], str]) -> Dict[str, Any]:
    """
    Visit-count feature importance of a decision tree or random forest.

    Each internal node credits its split feature with one visit; the counts are
    normalized to sum to 1 (a tree without splits gives all zeros). For a forest
    the per-tree distributions are averaged.

    Returns:
        dict: ``{type: 'feature_importance', model_type, importances, n_trees}``.
    """
    model = load_model(model, TREE_TYPES + FOREST_TYPES)
    p = int(model['p'])
    trees = model['trees'] if model['type'] in FOREST_TYPES else [model['tree']]
    importances = np.mean([normalized_split_counts(tree, p) for tree in trees], axis=0)
    return ok('feature_importance', model_type=model['type'], importances=importances, n_trees=len(trees))
