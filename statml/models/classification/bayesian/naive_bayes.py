from typing import Any, Dict, List, Optional, Union
import numpy as np
from scipy.special import logsumexp
from general.base_classes.model_base import BaseModel
from general.structures.data_batch import DataBatch
from general.structures.model_artifact import ModelFormatError
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.models.evaluation.performance_metrics.classification import sorted_labels
VARIANTS = ('gaussian', 'multinomial', 'bernoulli')
VARIANCE_FLOOR = 1e-09

def gaussian_std(rows: np.ndarray) -> np.ndarray:
    """Per-feature sample standard deviation, with the variance floored at ``VARIANCE_FLOOR``."""
    if rows.shape[0] < 2:
        return np.full(rows.shape[1], np.sqrt(VARIANCE_FLOOR))
    return np.sqrt(np.maximum(rows.var(axis=0, ddof=1), VARIANCE_FLOOR))

class NaiveBayesClassifier(BaseModel):
    """
    Naive Bayes classifier with Gaussian, multinomial or Bernoulli likelihoods.

    Classes are kept in sorted order. ``priors``, ``stats`` and ``feature_probs``
    are keyed by the class label's text so the model value survives JSON.
    """
    model_type = 'naive_bayes'
    task = 'classification'

    def fit(self, batch: DataBatch, options: Dict[str, Any]) -> Dict[str, Any]:
        """
        Estimate class priors and per-class feature parameters.

        Args:
            batch (DataBatch): Training matrix and class labels.
            options (Dict[str, Any]): ``variant`` and the Laplace ``alpha``.

        Returns:
            Dict[str, Any]: Model payload; ``stats`` (per-feature ``{mean, std}``) for the
            Gaussian variant, ``feature_probs`` for the discrete ones.

        Raises:
            InputError: For an unknown variant, a negative ``alpha`` or negative
                counts in multinomial mode.
        """
        variant = options['variant']
        if variant not in VARIANTS:
            raise InputError(f"variant must be one of {', '.join(VARIANTS)}, got '{variant}'")
        alpha = float(options['alpha'])
        if alpha < 0:
            raise InputError(f'alpha must be non-negative, got {alpha}')
        X = batch.data
        labels = batch.label_list()
        classes = sorted_labels(labels)
        groups = [X[np.array([label == cls for label in labels])] for cls in classes]
        payload = {'variant': variant, 'alpha': alpha, 'classes': classes, 'priors': {str(cls): rows.shape[0] / X.shape[0] for (cls, rows) in zip(classes, groups)}}
        if variant == 'gaussian':
            payload['stats'] = {str(cls): [{'mean': mean, 'std': std} for (mean, std) in zip(rows.mean(axis=0), gaussian_std(rows))] for (cls, rows) in zip(classes, groups)}
            return payload
        if variant == 'multinomial':
            if np.any(X < 0):
                raise InputError('Multinomial naive Bayes needs non-negative feature counts')
            smoothed = [rows.sum(axis=0) + alpha for rows in groups]
            probs = [counts / counts.sum() for counts in smoothed]
        else:
            probs = [((rows > 0).sum(axis=0) + alpha) / (rows.shape[0] + 2 * alpha) for rows in groups]
        payload['feature_probs'] = {str(cls): prob for (cls, prob) in zip(classes, probs)}
        return payload

    def joint_log_likelihood(self, model: Dict[str, Any], X: np.ndarray) -> np.ndarray:
        """
        Unnormalized log-posterior of every class for every row, shape (n, n_classes).

        Raises:
            ModelFormatError: If the model value lacks the priors or per-class parameters.
        """
        try:
            return self._log_posterior(model, X)
        except (KeyError, TypeError, IndexError) as exc:
            raise ModelFormatError('invalid model') from exc

    def _log_posterior(self, model: Dict[str, Any], X: np.ndarray) -> np.ndarray:
        keys = [str(cls) for cls in model['classes']]
        log_prior = np.log([float(model['priors'][key]) for key in keys])
        variant = model.get('variant', 'gaussian')
        if variant == 'gaussian':
            mean = np.array([[s['mean'] for s in model['stats'][key]] for key in keys], dtype=float)
            std = np.array([[s['std'] for s in model['stats'][key]] for key in keys], dtype=float)
            z = (X[:, None, :] - mean[None, :, :]) / std[None, :, :]
            log_likelihood = np.sum(-0.5 * z ** 2 - np.log(std)[None, :, :] - 0.5 * np.log(2.0 * np.pi), axis=2)
        else:
            prob = np.array([model['feature_probs'][key] for key in keys], dtype=float)
            if variant == 'multinomial':
                log_likelihood = X @ np.log(prob).T
            else:
                binary = (X > 0).astype(float)
                log_likelihood = binary @ np.log(prob).T + (1.0 - binary) @ np.log(1.0 - prob).T
        return log_likelihood + log_prior

    def predict_values(self, model: Dict[str, Any], X: np.ndarray) -> List[Any]:
        classes = model['classes']
        return [classes[i] for i in np.argmax(self.joint_log_likelihood(model, X), axis=1)]

    def predict(self, model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
        (model, X) = self.load(model, X)
        jll = self.joint_log_likelihood(model, X)
        probabilities = np.exp(jll - logsumexp(jll, axis=1, keepdims=True))
        classes = model['classes']
        return ok('prediction', self.model_type, predictions=[classes[i] for i in np.argmax(jll, axis=1)], probabilities=[{str(cls): prob for (cls, prob) in zip(classes, row)} for row in probabilities], classes=classes, n=X.shape[0])
NAIVE_BAYES = NaiveBayesClassifier()

@returns_tagged('naive_bayes')
def train_naive_bayes(X: Any, y: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    Train a naive Bayes classifier.

    Args:
        X: Row-major feature matrix.
        y: Class labels.
        options (dict): ``variant`` (``'gaussian'``, ``'multinomial'`` or ``'bernoulli'``)
            and the Laplace smoothing ``alpha`` (1.0) of the discrete variants.

    Returns:
        dict: ``{type: 'naive_bayes', variant, alpha, classes, priors, stats | feature_probs, n, p}``.
    """
    return NAIVE_BAYES.train(X, y, options)

@returns_tagged('prediction', 'naive_bayes')
def predict_naive_bayes(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """
    Maximum a posteriori class per row.

    ``probabilities`` holds, per row, the softmax of the log-posteriors keyed by the
    class label's text.
    """
    return NAIVE_BAYES.predict(model, X)
