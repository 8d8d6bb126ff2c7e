from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import json

@dataclass
class ComponentConfig:
    """
    Default option set for one operation.

    Attributes
    ----------
    component_name : str
        Name of the operation this configuration is for
    component_type : str
        Type tag of the values the operation produces
    parameters : Dict[str, Any]
        Option defaults as key-value pairs
    aliases : Dict[str, str]
        Alternative option names mapped to their canonical name
    description : Optional[str]
        Human-readable description of this configuration
    """
    component_name: str
    component_type: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    aliases: Dict[str, str] = field(default_factory=dict)
    description: Optional[str] = None

    def get_parameter(self, name: str, default: Any=None) -> Any:
        """Default of option ``name``, or ``default`` when the option is not registered."""
        return self.parameters.get(name, default)

    def resolve(self, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
        """
        Merge caller options over the defaults.

        Aliased keys are renamed to their canonical name; keys unknown to this
        component are kept so they can be forwarded to nested operations.

        Parameters
        ----------
        options : Optional[Dict[str, Any]]
            Caller-supplied options (None means all defaults)

        Returns
        -------
        Dict[str, Any]
            A fresh dictionary of resolved options
        """
        resolved = self.parameters.copy()
        for (key, value) in (options or {}).items():
            if value is None:
                continue
            resolved[self.aliases.get(key, key)] = value
        return resolved

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary representation.

        Returns
        -------
        Dict[str, Any]
            Dictionary representation of the configuration
        """
        return {'component_name': self.component_name, 'component_type': self.component_type, 'parameters': self.parameters.copy(), 'aliases': self.aliases.copy(), 'description': self.description}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ComponentConfig':
        """Create ComponentConfig from dictionary."""
        return cls(**data.copy())
_TREE = {'max_depth': 5, 'min_samples_split': 2}
_TREE_ALIASES = {'min_samples': 'min_samples_split', 'maxDepth': 'max_depth', 'minSamplesSplit': 'min_samples_split'}
DEFAULTS: Dict[str, ComponentConfig] = {config.component_name: config for config in [ComponentConfig('linear_regression', 'linear_regression', {'learning_rate': 0.01, 'iterations': 1000, 'l2': 0.0, 'l1': 0.0, 'solver': 'gradient_descent', 'ridge_lambda': 1e-08}, {'learningRate': 'learning_rate', 'lambda': 'l2'}, 'Batch gradient descent on the bias-augmented design matrix'), ComponentConfig('logistic_regression', 'logistic_regression', {'learning_rate': 0.1, 'iterations': 1000, 'l2': 0.0}, {'learningRate': 'learning_rate', 'lambda': 'l2'}, 'Binary logistic regression by gradient descent on the log-loss'), ComponentConfig('train_test_split', 'split', {'test_size': 0.2, 'seed': 42}, {'testSize': 'test_size'}), ComponentConfig('decision_tree_classifier', 'decision_tree_classifier', dict(_TREE, criterion='gini'), _TREE_ALIASES), ComponentConfig('decision_tree_regressor', 'decision_tree_regressor', dict(_TREE, criterion='variance'), _TREE_ALIASES), ComponentConfig('random_forest_classifier', 'random_forest_classifier', dict(_TREE, n_estimators=10, seed=42, criterion='gini'), dict(_TREE_ALIASES, nEstimators='n_estimators', n_trees='n_estimators')), ComponentConfig('random_forest_regressor', 'random_forest_regressor', dict(_TREE, n_estimators=10, seed=42, criterion='variance'), dict(_TREE_ALIASES, nEstimators='n_estimators', n_trees='n_estimators')), ComponentConfig('knn_classifier', 'knn_classifier', {'k': 5, 'metric': 'euclidean', 'p': 3, 'weights': 'uniform'}), ComponentConfig('knn_regressor', 'knn_regressor', {'k': 5, 'metric': 'euclidean', 'p': 3, 'weights': 'uniform'}), ComponentConfig('naive_bayes', 'naive_bayes', {'variant': 'gaussian', 'alpha': 1.0}), ComponentConfig('pca', 'pca', {'n_components': 2, 'seed': 42}, {'nComponents': 'n_components'}), ComponentConfig('kmeans', 'kmeans', {'k': 3, 'max_iterations': 100, 'seed': 42}, {'maxIterations': 'max_iterations'}), ComponentConfig('cross_validation', 'cross_validation', {'k_folds': 5, 'shuffle': True, 'normalize': False, 'seed': 42}, {'kFolds': 'k_folds'})]}

def resolve_options(component_name: str, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    Resolve caller options for ``component_name`` against its registered defaults.

    Raises:
        KeyError: If no defaults are registered for ``component_name``.
    """
    return DEFAULTS[component_name].resolve(options)
